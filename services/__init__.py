"""
Business logic services.

The client analytics pipeline runs period_service -> aggregation_service
-> classification_service -> alert_service, orchestrated by
client_analytics_service.
"""

from services.client_analytics_service import (
    ClientAnalyticsService,
    analyze_client,
    get_client_analytics_service,
)
from services.visit_prep_service import VisitPrepService, get_visit_prep_service
from services.invoice_loader import load_invoices
from services.period_service import calculate_growth, parse_period, resolve_period_window

__all__ = [
    "ClientAnalyticsService",
    "analyze_client",
    "get_client_analytics_service",
    "VisitPrepService",
    "get_visit_prep_service",
    "load_invoices",
    "calculate_growth",
    "parse_period",
    "resolve_period_window",
]
