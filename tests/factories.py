"""
Test data factories.

Produce invoice records shaped like the invoice store's rows, as plain
dicts so they can be fed to the services or posted to the API.
"""

from decimal import Decimal
from typing import List, Optional, Sequence, Tuple, Union

Amount = Union[int, str]
ProductLine = Union[Tuple[str, Amount], Tuple[str, Amount, Amount], dict]


def _sum(amounts) -> Amount:
    """Sum amounts; whole results stay ints so records remain JSON-friendly."""
    total = sum((Decimal(str(a)) for a in amounts), Decimal("0"))
    return int(total) if total == total.to_integral_value() else str(total)


class LineItemFactory:
    """
    Factory for creating test line item data.

    Usage:
        line = LineItemFactory.create("Amoxicilina", 120)
        line = LineItemFactory.create("Ibuprofeno", 80, commission=8, product_id="P-2")
    """

    @classmethod
    def create(
        cls,
        product_name: str = "Producto",
        amount: Amount = 100,
        commission: Optional[Amount] = None,
        product_id: Optional[str] = None,
    ) -> dict:
        """
        Create a single line item dict.

        Args:
            product_name: Invoiced product name
            amount: Line amount
            commission: Line commission (defaults to 0)
            product_id: Catalog identifier

        Returns:
            Line item dict matching the invoice schema
        """
        line = {
            "product_name": product_name,
            "amount": amount,
            "commission": commission if commission is not None else 0,
        }
        if product_id is not None:
            line["product_id"] = product_id
        return line


class InvoiceFactory:
    """
    Factory for creating test invoice data.

    Usage:
        # One product line
        invoice = InvoiceFactory.create(invoice_date="2026-10-05", products=[("A", 100)])

        # Totals default to the sum of the lines plus the rest amount
        invoice = InvoiceFactory.create(products=[("A", 100)], rest_amount=40)

        # Explicit total
        invoice = InvoiceFactory.create(total_amount=500)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        client_id: str = "client-1",
        invoice_date: str = "2026-10-05",
        products: Optional[Sequence[ProductLine]] = None,
        total_amount: Optional[Amount] = None,
        total_commission: Optional[Amount] = None,
        rest_amount: Amount = 0,
        rest_commission: Amount = 0,
    ) -> dict:
        """
        Create a single invoice dict.

        Args:
            id: Invoice id (auto-generated if not provided)
            client_id: Owning client
            invoice_date: ISO issue date
            products: (name, amount[, commission]) tuples or line item dicts
            total_amount: Defaults to line amounts plus rest amount
            total_commission: Defaults to line commissions plus rest commission
            rest_amount: Amount not tied to a catalogued product
            rest_commission: Commission on the rest amount

        Returns:
            Invoice dict matching the invoice schema
        """
        counter = cls._next_counter()
        lines = [cls._line(item) for item in (products or [])]

        if total_amount is None:
            total_amount = _sum([line["amount"] for line in lines] + [rest_amount])
        if total_commission is None:
            total_commission = _sum([line["commission"] for line in lines] + [rest_commission])

        return {
            "id": id or f"inv-{counter}",
            "client_id": client_id,
            "invoice_date": invoice_date,
            "total_amount": total_amount,
            "total_commission": total_commission,
            "rest_amount": rest_amount,
            "rest_commission": rest_commission,
            "products": lines,
        }

    @classmethod
    def create_batch(cls, dates: List[str], **overrides) -> list:
        """
        Create one invoice per issue date.

        Args:
            dates: ISO issue dates
            **overrides: Fields to override on all invoices

        Returns:
            List of invoice dicts
        """
        return [cls.create(invoice_date=d, **overrides) for d in dates]

    @classmethod
    def reset_counter(cls):
        """Reset the counter (call in test setup if needed)."""
        cls._counter = 0

    @staticmethod
    def _line(item: ProductLine) -> dict:
        if isinstance(item, dict):
            return item
        if len(item) == 3:
            name, amount, commission = item
            return LineItemFactory.create(name, amount, commission=commission)
        name, amount = item
        return LineItemFactory.create(name, amount)
