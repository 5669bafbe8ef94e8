"""
Classification thresholds for client analytics.

The values are fixed business rules. They are collected in
AnalyticsThresholds so tests can probe boundaries with a custom instance;
production code always uses DEFAULT_THRESHOLDS.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

# =============================================================================
# PRODUCT TRENDS (month over month)
# =============================================================================

# Growth above this marks a product as growing
PRODUCT_GROWTH_THRESHOLD_PCT = Decimal("15")

# Growth below this marks a product as declining
PRODUCT_DECLINE_THRESHOLD_PCT = Decimal("-15")


# =============================================================================
# CLIENT STATUS
# =============================================================================

# Days without a purchase before a client is inactive
INACTIVE_DAYS = 60

# Monthly growth below this puts the client at risk
AT_RISK_GROWTH_PCT = Decimal("-20")

# Stopped products that alone put the client at risk
AT_RISK_STOPPED_PRODUCTS = 2

# Monthly growth below this is a moderate decline
DECLINING_GROWTH_PCT = Decimal("-5")

# Monthly growth above this is a growing client
GROWING_GROWTH_PCT = Decimal("15")


# =============================================================================
# ALERTS
# =============================================================================

# Purchase is overdue after this many average purchase gaps
OVERDUE_GAP_FACTOR = Decimal("1.5")

# Monthly growth below this raises a significant drop alert
SIGNIFICANT_DROP_PCT = Decimal("-20")


# =============================================================================
# PRESENTATION
# =============================================================================

TOP_PRODUCTS_LIMIT = 5
EXPLANATION_PRODUCTS_LIMIT = 3
TREND_MONTHS = 12

# Visit preparation: catalog product trend band (± percent)
VISIT_TREND_THRESHOLD_PCT = Decimal("5")
VISIT_SUGGESTIONS_LIMIT = 3


class AnalyticsThresholds(BaseModel):
    """Named thresholds used by the classifier and alert generator."""

    model_config = ConfigDict(frozen=True)

    product_growth_pct: Decimal = PRODUCT_GROWTH_THRESHOLD_PCT
    product_decline_pct: Decimal = PRODUCT_DECLINE_THRESHOLD_PCT
    inactive_days: int = INACTIVE_DAYS
    at_risk_growth_pct: Decimal = AT_RISK_GROWTH_PCT
    at_risk_stopped_products: int = AT_RISK_STOPPED_PRODUCTS
    declining_growth_pct: Decimal = DECLINING_GROWTH_PCT
    growing_growth_pct: Decimal = GROWING_GROWTH_PCT
    overdue_gap_factor: Decimal = OVERDUE_GAP_FACTOR
    significant_drop_pct: Decimal = SIGNIFICANT_DROP_PCT
    top_products_limit: int = TOP_PRODUCTS_LIMIT
    explanation_products_limit: int = EXPLANATION_PRODUCTS_LIMIT
    trend_months: int = TREND_MONTHS
    visit_trend_pct: Decimal = VISIT_TREND_THRESHOLD_PCT
    visit_suggestions_limit: int = VISIT_SUGGESTIONS_LIMIT


DEFAULT_THRESHOLDS = AnalyticsThresholds()
