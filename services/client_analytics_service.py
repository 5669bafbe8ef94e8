"""
Client analytics engine.

Runs the analytics pipeline for one client over an in-memory invoice
snapshot: period selection, aggregation, classification and alerts.
Each call recomputes everything from its inputs and shares no state with
other calls, so identical inputs give identical results.
"""

from datetime import date
from typing import Any, Callable, Iterable, Optional, Union

import structlog

from config import settings
from config.analytics import DEFAULT_THRESHOLDS, AnalyticsThresholds
from models.analytics import ClientAnalyticsResult, PeriodToken
from models.invoice import Invoice
from services.aggregation_service import (
    ProductKeyResolver,
    aggregate_products,
    average_days_between,
    build_monthly_trend,
    compare_periods,
    filter_client_invoices,
    invoices_in_range,
    latest_invoice_date,
    product_name_key,
    summarize_invoices,
)
from services.alert_service import generate_critical_alerts
from services.classification_service import (
    analyze_product,
    describe_status,
    determine_client_status,
    explain_growth,
    sort_products,
)
from services.invoice_loader import load_invoices
from services.period_service import (
    ZERO,
    DateLike,
    calendar_month,
    resolve_period_window,
    to_reference_date,
    trailing_ranges,
)

logger = structlog.get_logger(__name__)


class ClientAnalyticsService:
    """Computes ClientAnalyticsResult for one client at a time."""

    def __init__(
        self,
        thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
        key_for: ProductKeyResolver = product_name_key,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            thresholds: Classification thresholds (tests may override)
            key_for: Product join key for line items
            clock: Source of "now" when a call does not pass one
        """
        self.thresholds = thresholds
        self.key_for = key_for
        self.clock = clock or date.today

    def analyze(
        self,
        client_id: str,
        invoices: Iterable[Union[Invoice, dict[str, Any]]],
        period: Optional[Union[str, PeriodToken]] = None,
        now: Optional[DateLike] = None,
    ) -> ClientAnalyticsResult:
        """
        Analyze a client's invoice history.

        Args:
            client_id: Client to analyze; invoices of other clients are skipped
            invoices: The client's invoices (models or raw records)
            period: Analysis window token (defaults to settings.default_period)
            now: Reference timestamp (defaults to the service clock)

        Returns:
            ClientAnalyticsResult

        Raises:
            InvalidPeriodError: If the period token is unknown
        """
        th = self.thresholds
        reference = to_reference_date(now if now is not None else self.clock())
        window = resolve_period_window(period or settings.default_period, reference)

        history = filter_client_invoices(load_invoices(invoices), client_id)
        in_window = invoices_in_range(history, window.current)

        # Totals and purchase rhythm
        totals = summarize_invoices(history, window.current)
        avg_ticket = totals.sales / totals.invoice_count if totals.invoice_count > 0 else ZERO
        avg_days_between = average_days_between(in_window)
        last_purchase = latest_invoice_date(history)
        days_since_last = (reference - last_purchase).days if last_purchase else None

        # Growth over nested sub-periods, always against full history
        monthly = compare_periods(
            history, calendar_month(reference), calendar_month(reference, months_back=1)
        )
        quarterly = compare_periods(history, *trailing_ranges(reference, 3))
        semester = compare_periods(history, *trailing_ranges(reference, 6))
        period_growth = (
            compare_periods(history, window.current, window.previous)
            if window.has_previous else None
        )

        # Products
        aggregates = aggregate_products(history, window, self.key_for)
        products = sort_products([
            analyze_product(aggregate, totals.sales, th)
            for aggregate in aggregates.values()
        ])
        growing = [p for p in products if p.is_growing]
        declining = [p for p in products if p.is_declining]
        stopped = [p for p in products if p.is_stopped]

        # Classification and alerts
        status = determine_client_status(days_since_last, monthly.sales_growth, len(stopped), th)
        status_message, actions = describe_status(
            status, days_since_last, has_history=bool(history)
        )
        alerts = generate_critical_alerts(
            avg_days_between, days_since_last, stopped, monthly.sales_growth, th
        )
        why_growing, why_declining = explain_growth(products, monthly, quarterly, avg_ticket, th)

        logger.info(
            "client_analytics_calculated",
            client_id=client_id,
            period=window.period.value,
            invoices=totals.invoice_count,
            products=len(products),
            status=status.value,
            alerts=len(alerts),
        )

        return ClientAnalyticsResult(
            client_id=client_id,
            window=window,
            total_sales=totals.sales,
            total_commission=totals.commission,
            invoice_count=totals.invoice_count,
            avg_ticket=round(avg_ticket, 2),
            avg_days_between_purchases=avg_days_between,
            days_since_last_purchase=days_since_last,
            last_purchase_date=last_purchase,
            monthly_growth=monthly,
            quarterly_growth=quarterly,
            semester_growth=semester,
            period_growth=period_growth,
            monthly_trend=build_monthly_trend(history, reference, th.trend_months),
            product_analysis=products,
            top_products=products[:th.top_products_limit],
            growing_products=growing,
            declining_products=declining,
            stopped_products=stopped,
            status=status,
            status_message=status_message,
            recommended_actions=actions,
            critical_alerts=alerts,
            why_growing=why_growing,
            why_declining=why_declining,
        )


def analyze_client(
    client_id: str,
    invoices: Iterable[Union[Invoice, dict[str, Any]]],
    period: Optional[Union[str, PeriodToken]] = None,
    now: Optional[DateLike] = None,
) -> ClientAnalyticsResult:
    """Analyze a client with the default service."""
    return get_client_analytics_service().analyze(client_id, invoices, period=period, now=now)


# Singleton instance
_client_analytics_service: Optional[ClientAnalyticsService] = None


def get_client_analytics_service() -> ClientAnalyticsService:
    """Get singleton instance of ClientAnalyticsService."""
    global _client_analytics_service
    if _client_analytics_service is None:
        _client_analytics_service = ClientAnalyticsService()
    return _client_analytics_service
