"""
Critical alert generation for client analytics.

Scans classified client figures for threshold crossings. Each check is
independent; an empty list means nothing needs attention.
"""

from decimal import Decimal
from typing import List, Optional

import structlog

from config.analytics import DEFAULT_THRESHOLDS, AnalyticsThresholds
from models.analytics import ProductAnalysis
from services.classification_service import format_percent

logger = structlog.get_logger(__name__)


def purchase_overdue_alert(
    avg_days_between_purchases: int,
    days_since_last_purchase: Optional[int],
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
) -> Optional[str]:
    """Alert when the current gap exceeds the usual gap by the overdue factor."""
    if avg_days_between_purchases <= 0 or not days_since_last_purchase:
        return None
    if days_since_last_purchase > thresholds.overdue_gap_factor * avg_days_between_purchases:
        return (
            f"Han pasado {days_since_last_purchase} días desde la última compra "
            f"(promedio: {avg_days_between_purchases} días)"
        )
    return None


def stopped_products_alert(stopped_products: List[ProductAnalysis]) -> Optional[str]:
    """Alert listing every product the client stopped buying."""
    if not stopped_products:
        return None
    names = ", ".join(p.name for p in stopped_products)
    return f"{len(stopped_products)} producto(s) dejaron de comprarse: {names}"


def sales_drop_alert(
    monthly_sales_growth: Decimal,
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
) -> Optional[str]:
    """Alert on a significant month-over-month sales drop."""
    if monthly_sales_growth < thresholds.significant_drop_pct:
        return f"Caída significativa de ventas este mes (-{format_percent(abs(monthly_sales_growth))})"
    return None


def generate_critical_alerts(
    avg_days_between_purchases: int,
    days_since_last_purchase: Optional[int],
    stopped_products: List[ProductAnalysis],
    monthly_sales_growth: Decimal,
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
) -> List[str]:
    """
    Evaluate every alert check in fixed order.

    1. Purchase overdue
    2. Stopped products
    3. Significant monthly drop

    Returns:
        Alert messages, possibly empty
    """
    candidates = [
        purchase_overdue_alert(avg_days_between_purchases, days_since_last_purchase, thresholds),
        stopped_products_alert(stopped_products),
        sales_drop_alert(monthly_sales_growth, thresholds),
    ]
    alerts = [alert for alert in candidates if alert is not None]

    if alerts:
        logger.info("critical_alerts_generated", count=len(alerts))
    return alerts
