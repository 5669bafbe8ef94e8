"""
Invoice schemas.

Input contract for the analytics engine. Records come from the invoice
store already validated; missing optional amounts degrade to zero.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import Field, field_validator

from models.base import BaseSchema


def _to_decimal(v) -> Decimal:
    """Coerce None/str/float/int amounts to Decimal."""
    if v is None or v == "":
        return Decimal("0")
    if isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v).strip())
    except InvalidOperation:
        raise ValueError(f"Not a valid amount: {v!r}")


class LineItem(BaseSchema):
    """A product line on an invoice. Each line is one purchase occurrence."""

    product_name: str = Field(..., description="Free-text product name (join key)")
    amount: Decimal = Field(default=Decimal("0"), description="Sale amount for this line")
    commission: Decimal = Field(default=Decimal("0"), description="Commission for this line")
    product_id: Optional[str] = Field(None, description="Catalog identifier, when known")

    @field_validator("amount", "commission", mode="before")
    @classmethod
    def parse_amount(cls, v):
        """Missing amounts count as zero."""
        return _to_decimal(v)


class Invoice(BaseSchema):
    """Invoice with its product lines and optional uncatalogued rest."""

    id: str = Field(..., min_length=1, description="Invoice identifier")
    client_id: str = Field(..., min_length=1, description="Owning client identifier")
    invoice_date: date = Field(..., description="Issue date")
    total_amount: Decimal = Field(default=Decimal("0"), description="Total sale amount")
    total_commission: Decimal = Field(default=Decimal("0"), description="Total commission")
    rest_amount: Decimal = Field(default=Decimal("0"), description="Amount not tied to a catalogued product")
    rest_commission: Decimal = Field(default=Decimal("0"), description="Commission on the rest amount")
    products: List[LineItem] = Field(default_factory=list, description="Product lines")

    @field_validator("id", "client_id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        """Numeric identifiers are accepted as strings."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("invoice_date", mode="before")
    @classmethod
    def parse_date(cls, v):
        """Parse date from ISO string or datetime."""
        if isinstance(v, str):
            return date.fromisoformat(v[:10])
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator(
        "total_amount", "total_commission", "rest_amount", "rest_commission",
        mode="before"
    )
    @classmethod
    def parse_amount(cls, v):
        """Missing amounts count as zero."""
        return _to_decimal(v)

    @field_validator("products", mode="before")
    @classmethod
    def default_products(cls, v):
        """A null product list is an empty one."""
        return v if v is not None else []
