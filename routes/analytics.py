"""
Client analytics API endpoints.

Stateless: the caller posts a client's invoice snapshot and receives the
computed analytics.
"""

from datetime import date
from typing import Optional

import structlog
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from exceptions import AppError
from models.analytics import ClientAnalyticsResult
from models.requests import ClientAnalyticsRequest, VisitPrepRequest
from models.visit_prep import VisitPrepReport
from services.client_analytics_service import get_client_analytics_service
from services.visit_prep_service import get_visit_prep_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# CLIENT ANALYTICS
# ===================

@router.post("/clients/{client_id}", response_model=ClientAnalyticsResult)
async def get_client_analytics(
    client_id: str,
    body: ClientAnalyticsRequest,
    period: Optional[str] = Query(None, description="1 month, 3 months, 6 months, 1 year or all time"),
    as_of: Optional[date] = Query(None, description="Reference date (defaults to today)"),
):
    """
    Compute the client detail analytics.

    **Response fields:**
    - `status`: inactive, at_risk, declining, growing or stable
    - `monthly_growth` / `quarterly_growth` / `semester_growth`: sub-period comparisons
    - `period_growth`: selected window vs previous window (null for all time)
    - `product_analysis`: products by cumulative sales, with trend and recommendation
    - `critical_alerts`: overdue purchase, stopped products, significant drop
    """
    try:
        service = get_client_analytics_service()
        return service.analyze(client_id, body.invoices, period=period, now=as_of)
    except Exception as e:
        return handle_error(e)


@router.post("/clients/{client_id}/visit-prep", response_model=VisitPrepReport)
async def get_visit_prep(
    client_id: str,
    body: VisitPrepRequest,
    period: str = Query("3 months", description="1 month, 3 months, 6 months or 1 year"),
    as_of: Optional[date] = Query(None, description="Reference date (defaults to today)"),
):
    """
    Compare the client's purchases against the catalog before a visit.

    **Response fields:**
    - `products`: every catalog product with sales, share and trend
    - `products_to_push`: catalog products the client does not buy
    - `opportunity_products`: declining products worth recovering
    """
    try:
        service = get_visit_prep_service()
        return service.prepare(client_id, body.invoices, body.catalog, period=period, now=as_of)
    except Exception as e:
        return handle_error(e)
