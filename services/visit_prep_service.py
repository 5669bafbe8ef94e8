"""
Visit preparation service.

Compares what a client buys against the product catalog so a
representative knows what to reinforce, recover and introduce on the
next visit.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Union

import structlog

from config.analytics import DEFAULT_THRESHOLDS, AnalyticsThresholds
from exceptions import InvalidPeriodError
from models.analytics import PeriodToken
from models.invoice import Invoice
from models.visit_prep import (
    CatalogProduct,
    CatalogProductSales,
    VisitPrepReport,
    VisitTrend,
)
from services.aggregation_service import filter_client_invoices, invoices_in_range
from services.invoice_loader import load_invoices
from services.period_service import (
    HUNDRED,
    ZERO,
    DateLike,
    resolve_period_window,
    to_reference_date,
)

logger = structlog.get_logger(__name__)

PERIOD_LABELS: Dict[PeriodToken, str] = {
    PeriodToken.ONE_MONTH: "Último mes",
    PeriodToken.THREE_MONTHS: "Últimos 3 meses",
    PeriodToken.SIX_MONTHS: "Últimos 6 meses",
    PeriodToken.ONE_YEAR: "Último año",
}


@dataclass
class _ProductSums:
    """Running sums for one product name in one window."""

    quantity: int = 0
    total: Decimal = ZERO
    invoice_ids: Set[str] = field(default_factory=set)


def _sum_by_product(invoices: Iterable[Invoice]) -> Dict[str, _ProductSums]:
    sums: Dict[str, _ProductSums] = defaultdict(_ProductSums)
    for invoice in invoices:
        for line in invoice.products:
            entry = sums[line.product_name]
            entry.quantity += 1
            entry.total += line.amount
            entry.invoice_ids.add(invoice.id)
    return sums


def classify_visit_trend(
    current: Decimal,
    previous: Decimal,
    threshold: Decimal = DEFAULT_THRESHOLDS.visit_trend_pct,
) -> tuple[VisitTrend, Decimal]:
    """
    Trend of a catalog product against the previous window.

    - both windows sold: growth %, UP above +threshold, DOWN below -threshold
    - only current: UP, +100
    - only previous: DOWN, -100
    - neither: STABLE, 0
    """
    if previous > 0 and current > 0:
        change = (current - previous) / previous * HUNDRED
        if change > threshold:
            return VisitTrend.UP, change
        if change < -threshold:
            return VisitTrend.DOWN, change
        return VisitTrend.STABLE, change
    if current > 0:
        return VisitTrend.UP, HUNDRED
    if previous > 0:
        return VisitTrend.DOWN, -HUNDRED
    return VisitTrend.STABLE, ZERO


class VisitPrepService:
    """Builds visit preparation reports."""

    def __init__(
        self,
        thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.thresholds = thresholds
        self.clock = clock

    def prepare(
        self,
        client_id: str,
        invoices: Iterable[Union[Invoice, dict[str, Any]]],
        catalog: Iterable[Union[CatalogProduct, str, dict[str, Any]]],
        period: Union[str, PeriodToken] = PeriodToken.THREE_MONTHS,
        now: Optional[DateLike] = None,
    ) -> VisitPrepReport:
        """
        Build the visit preparation report for a client.

        Args:
            client_id: Client being visited
            invoices: The client's invoices
            catalog: Products the representative can offer
            period: Bounded analysis window ("all time" is not supported)
            now: Reference timestamp

        Returns:
            VisitPrepReport

        Raises:
            InvalidPeriodError: For unknown tokens or "all time"
        """
        if now is None and self.clock is not None:
            now = self.clock()
        window = resolve_period_window(period, to_reference_date(now))
        if not window.has_previous:
            raise InvalidPeriodError(
                window.period.value,
                valid=[p.value for p in PERIOD_LABELS],
            )

        history = filter_client_invoices(load_invoices(invoices), client_id)
        current_invoices = invoices_in_range(history, window.current)
        previous_invoices = invoices_in_range(history, window.previous)

        current_sums = _sum_by_product(current_invoices)
        previous_sums = _sum_by_product(previous_invoices)
        products = self._build_product_rows(_normalize_catalog(catalog), current_sums, previous_sums)

        sold = [p for p in products if p.total_amount > 0]
        not_sold = [p for p in products if p.total_amount == 0]
        growing = [p for p in sold if p.trend == VisitTrend.UP]
        declining = [p for p in sold if p.trend == VisitTrend.DOWN]
        limit = self.thresholds.visit_suggestions_limit

        logger.info(
            "visit_prep_calculated",
            client_id=client_id,
            period=window.period.value,
            catalog=len(products),
            sold=len(sold),
        )

        return VisitPrepReport(
            client_id=client_id,
            window=window,
            period_label=PERIOD_LABELS[window.period],
            products=products,
            sold_products=sold,
            not_sold_products=not_sold,
            top_product=sold[0] if sold else None,
            lowest_sold_product=sold[-1] if len(sold) > 1 else None,
            growing_products=growing,
            declining_products=declining,
            products_to_push=not_sold[:limit],
            opportunity_products=declining[:limit],
            total_sales=sum((p.total_amount for p in sold), ZERO),
            total_quantity=sum(p.quantity for p in sold),
            invoices_in_period=len(current_invoices),
        )

    def _build_product_rows(
        self,
        catalog: List[CatalogProduct],
        current_sums: Dict[str, _ProductSums],
        previous_sums: Dict[str, _ProductSums],
    ) -> List[CatalogProductSales]:
        """One row per catalog product, highest sales first, ties by name."""
        # Share is of everything the client bought, catalogued or not
        client_total = sum((s.total for s in current_sums.values()), ZERO)

        rows = []
        for product in catalog:
            current = current_sums.get(product.name)
            previous = previous_sums.get(product.name)
            total = current.total if current else ZERO
            quantity = current.quantity if current else 0
            invoice_count = len(current.invoice_ids) if current else 0
            trend, trend_percent = classify_visit_trend(
                total,
                previous.total if previous else ZERO,
                self.thresholds.visit_trend_pct,
            )
            rows.append(CatalogProductSales(
                product_name=product.name,
                product_id=product.id,
                quantity=quantity,
                total_amount=total,
                invoice_count=invoice_count,
                avg_per_invoice=round(total / invoice_count, 2) if invoice_count else ZERO,
                percent_of_client_total=(
                    round(total / client_total * HUNDRED, 2) if client_total > 0 else ZERO
                ),
                trend=trend,
                trend_percent=trend_percent,
            ))

        rows.sort(key=lambda r: (-r.total_amount, r.product_name))
        return rows


def _normalize_catalog(
    catalog: Iterable[Union[CatalogProduct, str, dict[str, Any]]],
) -> List[CatalogProduct]:
    """Accept names, dicts or CatalogProduct; drop duplicate names."""
    products: List[CatalogProduct] = []
    seen: Set[str] = set()
    for item in catalog:
        if isinstance(item, CatalogProduct):
            product = item
        elif isinstance(item, str):
            product = CatalogProduct(name=item)
        else:
            product = CatalogProduct.model_validate(item)
        if product.name in seen:
            continue
        seen.add(product.name)
        products.append(product)
    return products


# Singleton instance
_visit_prep_service: Optional[VisitPrepService] = None


def get_visit_prep_service() -> VisitPrepService:
    """Get singleton instance of VisitPrepService."""
    global _visit_prep_service
    if _visit_prep_service is None:
        _visit_prep_service = VisitPrepService()
    return _visit_prep_service
