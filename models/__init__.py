"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    FrozenSchema,
)
from models.invoice import (
    LineItem,
    Invoice,
)
from models.analytics import (
    PeriodToken,
    ClientStatus,
    ProductTrendState,
    DateRange,
    PeriodWindow,
    GrowthFigures,
    MonthlyTrendPoint,
    ProductAnalysis,
    ClientAnalyticsResult,
)
from models.visit_prep import (
    VisitTrend,
    CatalogProduct,
    CatalogProductSales,
    VisitPrepReport,
)
from models.requests import (
    ClientAnalyticsRequest,
    VisitPrepRequest,
)

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",

    # Invoice
    "LineItem",
    "Invoice",

    # Analytics
    "PeriodToken",
    "ClientStatus",
    "ProductTrendState",
    "DateRange",
    "PeriodWindow",
    "GrowthFigures",
    "MonthlyTrendPoint",
    "ProductAnalysis",
    "ClientAnalyticsResult",

    # Visit prep
    "VisitTrend",
    "CatalogProduct",
    "CatalogProductSales",
    "VisitPrepReport",

    # Requests
    "ClientAnalyticsRequest",
    "VisitPrepRequest",
]
