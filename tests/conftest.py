"""
Shared test fixtures.

All analytics tests pin the reference date so window boundaries and
"days since" figures are reproducible.
"""

import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from datetime import date

from tests.factories import InvoiceFactory

# Monday; current month is October 2026, previous month September 2026
REFERENCE_DATE = date(2026, 10, 19)


# ===================
# REFERENCE DATE
# ===================

@pytest.fixture
def reference_date() -> date:
    """Fixed 'today' used by every analytics test."""
    return REFERENCE_DATE


# ===================
# SERVICES
# ===================

@pytest.fixture
def analytics_service():
    """ClientAnalyticsService with its clock pinned to the reference date."""
    from services.client_analytics_service import ClientAnalyticsService

    return ClientAnalyticsService(clock=lambda: REFERENCE_DATE)


@pytest.fixture
def visit_prep_service():
    """VisitPrepService with its clock pinned to the reference date."""
    from services.visit_prep_service import VisitPrepService

    return VisitPrepService(clock=lambda: REFERENCE_DATE)


# ===================
# SAMPLE DATA
# ===================

@pytest.fixture
def sample_invoices() -> list:
    """
    Two invoices this month and one last month.

    - 2026-10-05: A $100
    - 2026-10-12: B $50
    - 2026-09-15: A $80, B $80
    """
    InvoiceFactory.reset_counter()
    return [
        InvoiceFactory.create(invoice_date="2026-10-05", products=[("A", 100)]),
        InvoiceFactory.create(invoice_date="2026-10-12", products=[("B", 50)]),
        InvoiceFactory.create(invoice_date="2026-09-15", products=[("A", 80), ("B", 80)]),
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
