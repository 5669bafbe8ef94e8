"""
Visit preparation models.

Per-catalog-product view of one client used before a sales visit:
what the client buys, what it stopped buying and what to offer.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.analytics import PeriodWindow
from models.base import BaseSchema, FrozenSchema


class VisitTrend(str, Enum):
    """Trend of a catalog product against the previous window."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class CatalogProduct(BaseSchema):
    """A product the representative can offer."""

    name: str = Field(..., min_length=1, description="Product name as invoiced")
    id: Optional[str] = Field(None, description="Catalog identifier")


class CatalogProductSales(FrozenSchema):
    """Sales of one catalog product to the client in the window."""

    product_name: str
    product_id: Optional[str] = None
    quantity: int = Field(..., description="Line occurrences in the window")
    total_amount: Decimal = Field(..., description="Sales in the window")
    invoice_count: int = Field(..., description="Distinct invoices with the product")
    avg_per_invoice: Decimal
    percent_of_client_total: Decimal
    trend: VisitTrend
    trend_percent: Decimal


class VisitPrepReport(FrozenSchema):
    """Visit preparation summary for one client."""

    client_id: str
    window: PeriodWindow
    period_label: str = Field(..., description="Human label of the window")

    products: List[CatalogProductSales] = Field(default_factory=list)
    sold_products: List[CatalogProductSales] = Field(default_factory=list)
    not_sold_products: List[CatalogProductSales] = Field(default_factory=list)
    top_product: Optional[CatalogProductSales] = None
    lowest_sold_product: Optional[CatalogProductSales] = Field(
        None, description="Least sold product; only set when two or more were sold"
    )
    growing_products: List[CatalogProductSales] = Field(default_factory=list)
    declining_products: List[CatalogProductSales] = Field(default_factory=list)
    products_to_push: List[CatalogProductSales] = Field(
        default_factory=list, description="Catalog products the client does not buy"
    )
    opportunity_products: List[CatalogProductSales] = Field(
        default_factory=list, description="Declining products worth recovering"
    )

    total_sales: Decimal
    total_quantity: int
    invoices_in_period: int
