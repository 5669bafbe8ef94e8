"""
Invoice aggregation for client analytics.

Folds one client's invoices into per-product and per-period sums. The
product join key is pluggable: invoices name products by free text, so
the default key is the product name, and catalog_key is available once
line items carry catalog identifiers.
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List, Optional

import structlog

from models.analytics import DateRange, GrowthFigures, MonthlyTrendPoint, PeriodWindow
from models.invoice import Invoice, LineItem
from services.period_service import ZERO, calculate_growth, calendar_month

logger = structlog.get_logger(__name__)

# Pseudo-product collecting invoice amounts not tied to a catalogued product
REST_PRODUCT_KEY = "Resto General"

MONTH_LABELS = (
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sep", "oct", "nov", "dic",
)

ProductKeyResolver = Callable[[LineItem], str]


def product_name_key(line: LineItem) -> str:
    """Join products by their invoiced name."""
    return line.product_name


def catalog_key(line: LineItem) -> str:
    """Join products by catalog identifier, falling back to the name."""
    return line.product_id or line.product_name


@dataclass
class ProductAggregate:
    """Running sums for one product key."""

    name: str
    total_sales: Decimal = ZERO
    total_commission: Decimal = ZERO
    occurrences: int = 0
    current_month_sales: Decimal = ZERO
    previous_month_sales: Decimal = ZERO
    last_purchase_date: Optional[date] = None

    def add(
        self,
        amount: Decimal,
        commission: Decimal,
        invoice_date: date,
        in_window: bool,
        in_current_month: bool,
        in_previous_month: bool,
    ) -> None:
        if in_window:
            self.total_sales += amount
            self.total_commission += commission
            self.occurrences += 1
            if self.last_purchase_date is None or invoice_date > self.last_purchase_date:
                self.last_purchase_date = invoice_date
        if in_current_month:
            self.current_month_sales += amount
        if in_previous_month:
            self.previous_month_sales += amount


@dataclass(frozen=True)
class PeriodTotals:
    """Invoice-level totals for a date range."""

    sales: Decimal
    commission: Decimal
    invoice_count: int


def filter_client_invoices(invoices: Iterable[Invoice], client_id: str) -> List[Invoice]:
    """Keep the client's invoices; others are skipped and counted."""
    own = []
    skipped = 0
    for invoice in invoices:
        if invoice.client_id == client_id:
            own.append(invoice)
        else:
            skipped += 1
    if skipped:
        logger.warning("foreign_invoices_skipped", client_id=client_id, count=skipped)
    return own


def invoices_in_range(invoices: Iterable[Invoice], date_range: DateRange) -> List[Invoice]:
    """Invoices issued within the range, in input order."""
    return [inv for inv in invoices if date_range.contains(inv.invoice_date)]


def summarize_invoices(invoices: Iterable[Invoice], date_range: DateRange) -> PeriodTotals:
    """Sum invoice totals and count invoices issued within the range."""
    sales = ZERO
    commission = ZERO
    count = 0
    for invoice in invoices_in_range(invoices, date_range):
        sales += invoice.total_amount
        commission += invoice.total_commission
        count += 1
    return PeriodTotals(sales=sales, commission=commission, invoice_count=count)


def aggregate_products(
    invoices: Iterable[Invoice],
    window: PeriodWindow,
    key_for: ProductKeyResolver = product_name_key,
) -> Dict[str, ProductAggregate]:
    """
    Accumulate per-product figures.

    Window totals cover invoices inside the selected window. Current and
    previous month sales always follow the calendar months around the
    reference date, whatever window was selected.

    Args:
        invoices: The client's invoices
        window: Resolved analysis window
        key_for: Maps a line item to its product key

    Returns:
        Mapping of product key to its aggregate (order carries no meaning)
    """
    current_month = calendar_month(window.reference_date)
    previous_month = calendar_month(window.reference_date, months_back=1)

    aggregates: Dict[str, ProductAggregate] = {}

    for invoice in invoices:
        invoice_date = invoice.invoice_date
        flags = dict(
            in_window=window.current.contains(invoice_date),
            in_current_month=current_month.contains(invoice_date),
            in_previous_month=previous_month.contains(invoice_date),
        )
        if not any(flags.values()):
            continue

        for line in invoice.products:
            if line.amount <= 0:
                continue
            key = key_for(line)
            aggregate = aggregates.setdefault(key, ProductAggregate(name=key))
            aggregate.add(line.amount, line.commission, invoice_date, **flags)

        if invoice.rest_amount > 0:
            aggregate = aggregates.setdefault(
                REST_PRODUCT_KEY, ProductAggregate(name=REST_PRODUCT_KEY)
            )
            aggregate.add(invoice.rest_amount, invoice.rest_commission, invoice_date, **flags)

    return aggregates


def build_monthly_trend(
    invoices: Iterable[Invoice],
    reference: date,
    months: int = 12,
) -> List[MonthlyTrendPoint]:
    """Sales per calendar month for the last N months, oldest first."""
    buckets = {}
    for back in range(months - 1, -1, -1):
        month = calendar_month(reference, months_back=back).start
        buckets[month.strftime("%Y-%m")] = {
            "label": MONTH_LABELS[month.month - 1],
            "sales": ZERO,
            "commission": ZERO,
            "invoices": 0,
        }

    for invoice in invoices:
        bucket = buckets.get(invoice.invoice_date.strftime("%Y-%m"))
        if bucket is None:
            continue
        bucket["sales"] += invoice.total_amount
        bucket["commission"] += invoice.total_commission
        bucket["invoices"] += 1

    return [
        MonthlyTrendPoint(month=key, **values)
        for key, values in buckets.items()
    ]


def average_days_between(invoices: Iterable[Invoice]) -> int:
    """
    Average gap in days between consecutive invoices.

    Rounded half-up to whole days; 0 with fewer than two invoices.
    """
    dates = sorted(inv.invoice_date for inv in invoices)
    if len(dates) < 2:
        return 0
    total_days = (dates[-1] - dates[0]).days
    average = Decimal(total_days) / Decimal(len(dates) - 1)
    return int(average.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def latest_invoice_date(invoices: Iterable[Invoice]) -> Optional[date]:
    """Most recent issue date, or None without invoices."""
    return max((inv.invoice_date for inv in invoices), default=None)


def compare_periods(
    invoices: Iterable[Invoice],
    current: DateRange,
    previous: DateRange,
) -> GrowthFigures:
    """Sales, commission and invoice counts of two ranges with their growth."""
    invoices = list(invoices)
    now_totals = summarize_invoices(invoices, current)
    before_totals = summarize_invoices(invoices, previous)
    return GrowthFigures(
        current_sales=now_totals.sales,
        previous_sales=before_totals.sales,
        current_commission=now_totals.commission,
        previous_commission=before_totals.commission,
        sales_growth=calculate_growth(now_totals.sales, before_totals.sales),
        commission_growth=calculate_growth(now_totals.commission, before_totals.commission),
        invoice_count=now_totals.invoice_count,
        previous_invoice_count=before_totals.invoice_count,
    )
