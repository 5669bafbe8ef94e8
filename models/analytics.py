"""
Client analytics models.

Output shapes of the client analytics engine: analysis windows, growth
figures, per-product analysis and the client-level result consumed by
the dashboards. Every result is derived per call and never persisted.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.base import FrozenSchema


class PeriodToken(str, Enum):
    """Named analysis window."""

    ONE_MONTH = "1 month"
    THREE_MONTHS = "3 months"
    SIX_MONTHS = "6 months"
    ONE_YEAR = "1 year"
    ALL_TIME = "all time"


class ClientStatus(str, Enum):
    """Client-level classification, evaluated in priority order."""

    INACTIVE = "inactive"
    AT_RISK = "at_risk"
    DECLINING = "declining"
    GROWING = "growing"
    STABLE = "stable"


class ProductTrendState(str, Enum):
    """Month-over-month state of a single product."""

    STOPPED = "stopped"
    DECLINING = "declining"
    GROWING = "growing"
    STABLE = "stable"
    DORMANT = "dormant"  # No sales in either month


class DateRange(FrozenSchema):
    """Inclusive date interval."""

    start: date = Field(..., description="First day included")
    end: date = Field(..., description="Last day included")

    def contains(self, day: date) -> bool:
        """True when day falls within the range (both ends inclusive)."""
        return self.start <= day <= self.end


class PeriodWindow(FrozenSchema):
    """Selected analysis window and its comparison window."""

    period: PeriodToken = Field(..., description="Period the window was resolved from")
    reference_date: date = Field(..., description="The 'now' the window is anchored to")
    current: DateRange = Field(..., description="Analysis window")
    previous: Optional[DateRange] = Field(
        None, description="Equal-length window immediately before; None for all time"
    )

    @property
    def has_previous(self) -> bool:
        """Growth against the previous window is applicable."""
        return self.previous is not None


class GrowthFigures(FrozenSchema):
    """Sales and commission comparison between two periods."""

    current_sales: Decimal = Field(..., description="Sales in the current period")
    previous_sales: Decimal = Field(..., description="Sales in the comparison period")
    current_commission: Decimal = Field(..., description="Commission in the current period")
    previous_commission: Decimal = Field(..., description="Commission in the comparison period")
    sales_growth: Decimal = Field(..., description="Sales growth %")
    commission_growth: Decimal = Field(..., description="Commission growth %")
    invoice_count: int = Field(..., description="Invoices in the current period")
    previous_invoice_count: int = Field(..., description="Invoices in the comparison period")


class MonthlyTrendPoint(FrozenSchema):
    """One calendar month of the trend series."""

    month: str = Field(..., description="Month key (YYYY-MM)")
    label: str = Field(..., description="Short month label (e.g. 'ene')")
    sales: Decimal = Field(..., description="Sales in the month")
    commission: Decimal = Field(..., description="Commission in the month")
    invoices: int = Field(..., description="Invoices issued in the month")


class ProductAnalysis(FrozenSchema):
    """Derived figures and recommendation for one product of one client."""

    name: str = Field(..., description="Product key")
    total_sales: Decimal = Field(..., description="Cumulative sales in the window")
    total_commission: Decimal = Field(..., description="Cumulative commission in the window")
    invoice_count: int = Field(..., description="Purchase occurrences in the window")
    avg_per_invoice: Decimal = Field(..., description="Average sale per occurrence")
    current_month_sales: Decimal = Field(..., description="Sales in the current calendar month")
    previous_month_sales: Decimal = Field(..., description="Sales in the previous calendar month")
    growth: Decimal = Field(..., description="Month-over-month growth %")
    percent_of_total: Decimal = Field(..., description="Share of the client's sales %")
    last_purchase_date: Optional[date] = Field(None, description="Most recent purchase")
    is_growing: bool = False
    is_declining: bool = False
    is_stopped: bool = False
    trend: ProductTrendState = Field(..., description="Month-over-month state")
    recommendation: str = Field(..., description="Suggested action for the product")


class ClientAnalyticsResult(FrozenSchema):
    """Everything the client dashboards render, fully aggregated."""

    client_id: str = Field(..., description="Analysed client")
    window: PeriodWindow = Field(..., description="Resolved analysis window")

    # Totals over the window
    total_sales: Decimal = Field(..., description="Sales in the window")
    total_commission: Decimal = Field(..., description="Commission in the window")
    invoice_count: int = Field(..., description="Invoices in the window")
    avg_ticket: Decimal = Field(..., description="Average sale per invoice")

    # Purchase rhythm
    avg_days_between_purchases: int = Field(
        ..., description="Average gap between invoices in the window (0 if under two)"
    )
    days_since_last_purchase: Optional[int] = Field(
        None, description="Days since the latest invoice; None without history"
    )
    last_purchase_date: Optional[date] = Field(None, description="Latest invoice date")

    # Growth
    monthly_growth: GrowthFigures = Field(..., description="Calendar month vs previous month")
    quarterly_growth: GrowthFigures = Field(..., description="Last 3 months vs the 3 before")
    semester_growth: GrowthFigures = Field(..., description="Last 6 months vs the 6 before")
    period_growth: Optional[GrowthFigures] = Field(
        None, description="Selected window vs previous window; None for all time"
    )
    monthly_trend: List[MonthlyTrendPoint] = Field(
        default_factory=list, description="Last 12 calendar months, oldest first"
    )

    # Products
    product_analysis: List[ProductAnalysis] = Field(default_factory=list)
    top_products: List[ProductAnalysis] = Field(default_factory=list)
    growing_products: List[ProductAnalysis] = Field(default_factory=list)
    declining_products: List[ProductAnalysis] = Field(default_factory=list)
    stopped_products: List[ProductAnalysis] = Field(default_factory=list)

    # Classification
    status: ClientStatus = Field(..., description="Client status")
    status_message: str = Field(..., description="Status headline")
    recommended_actions: List[str] = Field(default_factory=list)
    critical_alerts: List[str] = Field(default_factory=list)
    why_growing: List[str] = Field(default_factory=list)
    why_declining: List[str] = Field(default_factory=list)
