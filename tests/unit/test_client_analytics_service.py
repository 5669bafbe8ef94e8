"""
Unit tests for the client analytics engine.

Tests run the full pipeline on small invoice snapshots with the
reference date pinned to 2026-10-19.

Tests:
1. Worked example (growing and declining products)
2. Clients without history
3. Status and alert scenarios
4. Windows and sub-periods
5. Determinism
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from config.analytics import AnalyticsThresholds
from exceptions import InvalidPeriodError
from models.analytics import ClientStatus, PeriodToken, ProductTrendState
from services.aggregation_service import REST_PRODUCT_KEY, catalog_key
from services.client_analytics_service import (
    ClientAnalyticsService,
    get_client_analytics_service,
)
from tests.factories import InvoiceFactory, LineItemFactory


REFERENCE = date(2026, 10, 19)


# ===================
# TEST 1: WORKED EXAMPLE
# ===================

class TestWorkedExample:
    """
    Two invoices this month (A $100, B $50) and one last month (A $80, B $80).

    A grows 25%, B falls 37.5%, monthly sales fall 6.25%.
    """

    @pytest.fixture
    def result(self, analytics_service, sample_invoices):
        return analytics_service.analyze("client-1", sample_invoices, period="6 months")

    def test_totals(self, result):
        assert result.total_sales == Decimal("310")
        assert result.invoice_count == 3
        assert result.avg_ticket == Decimal("103.33")

    def test_purchase_rhythm(self, result):
        """Gaps of 20 and 7 days; last purchase 7 days ago."""
        assert result.avg_days_between_purchases == 14
        assert result.days_since_last_purchase == 7
        assert result.last_purchase_date == date(2026, 10, 12)

    def test_products(self, result):
        a, b = result.product_analysis

        assert a.name == "A"
        assert a.total_sales == Decimal("180")
        assert a.invoice_count == 2
        assert a.growth == Decimal("25")
        assert a.trend == ProductTrendState.GROWING
        assert a.percent_of_total == Decimal("58.06")

        assert b.name == "B"
        assert b.growth == Decimal("-37.5")
        assert b.trend == ProductTrendState.DECLINING

    def test_product_groups(self, result):
        assert [p.name for p in result.growing_products] == ["A"]
        assert [p.name for p in result.declining_products] == ["B"]
        assert result.stopped_products == []
        assert [p.name for p in result.top_products] == ["A", "B"]

    def test_monthly_growth(self, result):
        monthly = result.monthly_growth

        assert monthly.current_sales == Decimal("150")
        assert monthly.previous_sales == Decimal("160")
        assert monthly.sales_growth == Decimal("-6.25")
        assert monthly.invoice_count == 2
        assert monthly.previous_invoice_count == 1

    def test_status(self, result):
        """-6.25% is a moderate decline."""
        assert result.status == ClientStatus.DECLINING
        assert result.status_message == "Ventas en declive moderado"
        assert result.recommended_actions

    def test_no_alerts(self, result):
        """7 days is within 1.5x the 14-day rhythm; -6.25% is not significant."""
        assert result.critical_alerts == []

    def test_explanations(self, result):
        assert result.why_growing == [
            "Aumento en: A (+25%)",
            "Mayor frecuencia de compra: 2 facturas vs 1 mes anterior",
        ]
        assert result.why_declining == ["Disminución en: B (-38%)"]

    def test_monthly_trend(self, result):
        assert len(result.monthly_trend) == 12
        assert result.monthly_trend[-1].sales == Decimal("150")
        assert result.monthly_trend[-2].sales == Decimal("160")


# ===================
# TEST 2: NO HISTORY
# ===================

class TestNoHistory:
    """A client without invoices gets a complete, neutral result."""

    @pytest.fixture
    def result(self, analytics_service):
        return analytics_service.analyze("client-1", [])

    def test_zero_totals(self, result):
        assert result.total_sales == Decimal("0")
        assert result.invoice_count == 0
        assert result.avg_ticket == Decimal("0")
        assert result.avg_days_between_purchases == 0
        assert result.days_since_last_purchase is None
        assert result.last_purchase_date is None

    def test_zero_growth(self, result):
        assert result.monthly_growth.sales_growth == Decimal("0")
        assert result.quarterly_growth.sales_growth == Decimal("0")
        assert result.semester_growth.sales_growth == Decimal("0")

    def test_status(self, result):
        assert result.status == ClientStatus.STABLE
        assert result.status_message == "Cliente sin historial de compras"
        assert result.recommended_actions == [
            "Agendar visita de presentación",
            "Presentar catálogo de productos",
        ]

    def test_empty_lists(self, result):
        assert result.product_analysis == []
        assert result.critical_alerts == []
        assert result.why_growing == []
        assert result.why_declining == []

    def test_trend_still_has_twelve_months(self, result):
        assert len(result.monthly_trend) == 12

    def test_only_foreign_invoices(self, analytics_service):
        """Invoices of other clients do not count as history."""
        result = analytics_service.analyze(
            "client-1", [InvoiceFactory.create(client_id="client-2", products=[("A", 100)])]
        )

        assert result.invoice_count == 0
        assert result.status_message == "Cliente sin historial de compras"


# ===================
# TEST 3: STATUS AND ALERTS
# ===================

class TestStatusScenarios:
    """End-to-end status and alert scenarios."""

    def test_inactive_client(self, analytics_service):
        """Last purchase on 2026-08-01 is 79 days before the reference date."""
        result = analytics_service.analyze(
            "client-1",
            [InvoiceFactory.create(invoice_date="2026-08-01", products=[("A", 100)])],
        )

        assert result.status == ClientStatus.INACTIVE
        assert result.status_message == "Sin actividad en 79 días"
        assert result.days_since_last_purchase == 79
        # A single invoice has no rhythm, so no overdue alert
        assert result.critical_alerts == []
        assert result.product_analysis[0].trend == ProductTrendState.DORMANT

    def test_sixty_one_days_is_inactive(self):
        """One day past the inactivity limit."""
        service = ClientAnalyticsService(clock=lambda: date(2026, 12, 31))
        invoices = [
            InvoiceFactory.create(invoice_date="2026-10-31", products=[("A", 900)]),
            InvoiceFactory.create(invoice_date="2026-09-30", products=[("A", 100)]),
        ]

        result = service.analyze("client-1", invoices)

        assert result.days_since_last_purchase == 61
        assert result.status == ClientStatus.INACTIVE

    def test_stopped_products(self, analytics_service):
        """X and Y bought last month and not this month."""
        invoices = [
            InvoiceFactory.create(invoice_date="2026-09-20", products=[("X", 500), ("Y", 300)]),
            InvoiceFactory.create(invoice_date="2026-10-10", products=[("Z", 100)]),
        ]

        result = analytics_service.analyze("client-1", invoices)

        assert [p.name for p in result.stopped_products] == ["X", "Y"]
        assert all(p.growth == Decimal("-100") for p in result.stopped_products)
        assert result.declining_products == []
        assert result.status == ClientStatus.AT_RISK
        assert result.critical_alerts == [
            "2 producto(s) dejaron de comprarse: X, Y",
            "Caída significativa de ventas este mes (-88%)",
        ]
        assert "Productos sin compra este mes: X, Y" in result.why_declining
        assert result.why_growing == ["Aumento en: Z (+100%)"]

    def test_growing_client(self, analytics_service):
        invoices = [
            InvoiceFactory.create(invoice_date="2026-09-10", products=[("A", 100)]),
            InvoiceFactory.create(invoice_date="2026-10-10", products=[("A", 130)]),
        ]

        result = analytics_service.analyze("client-1", invoices)

        assert result.monthly_growth.sales_growth == Decimal("30")
        assert result.status == ClientStatus.GROWING
        assert result.status_message == "Cliente en crecimiento sostenido"

    def test_overdue_purchase(self, analytics_service):
        """Buys every 10 days but the last purchase was 19 days ago."""
        invoices = InvoiceFactory.create_batch(
            ["2026-09-10", "2026-09-20", "2026-09-30"], products=[("A", 100)]
        )

        result = analytics_service.analyze("client-1", invoices)

        assert result.avg_days_between_purchases == 10
        assert result.days_since_last_purchase == 19
        assert result.critical_alerts[0] == (
            "Han pasado 19 días desde la última compra (promedio: 10 días)"
        )

    def test_custom_thresholds(self, sample_invoices):
        service = ClientAnalyticsService(
            thresholds=AnalyticsThresholds(inactive_days=5),
            clock=lambda: REFERENCE,
        )

        result = service.analyze("client-1", sample_invoices)

        assert result.status == ClientStatus.INACTIVE


# ===================
# TEST 4: WINDOWS AND SUB-PERIODS
# ===================

class TestWindows:
    """Window selection and sub-period figures."""

    def test_default_period_from_settings(self, analytics_service, sample_invoices):
        result = analytics_service.analyze("client-1", sample_invoices)

        assert result.window.period == PeriodToken.SIX_MONTHS

    def test_window_limits_totals_not_subperiods(self, analytics_service):
        """Sub-period growth uses full history whatever the window."""
        invoices = [
            InvoiceFactory.create(invoice_date="2026-10-05", products=[("A", 100)]),
            InvoiceFactory.create(invoice_date="2026-08-05", products=[("A", 100)]),
        ]

        result = analytics_service.analyze("client-1", invoices, period="1 month")

        assert result.total_sales == Decimal("100")
        assert result.invoice_count == 1
        assert result.quarterly_growth.current_sales == Decimal("200")

    def test_period_growth(self, analytics_service):
        invoices = [
            InvoiceFactory.create(invoice_date="2026-08-05", products=[("A", 150)]),
            InvoiceFactory.create(invoice_date="2026-05-05", products=[("A", 100)]),
        ]

        result = analytics_service.analyze("client-1", invoices, period="3 months")

        assert result.period_growth.current_sales == Decimal("150")
        assert result.period_growth.previous_sales == Decimal("100")
        assert result.period_growth.sales_growth == Decimal("50")

    def test_all_time(self, analytics_service):
        invoices = [
            InvoiceFactory.create(invoice_date="2019-03-01", products=[("A", 100)]),
            InvoiceFactory.create(invoice_date="2026-10-05", products=[("A", 100)]),
        ]

        result = analytics_service.analyze("client-1", invoices, period="all time")

        assert result.total_sales == Decimal("200")
        assert result.period_growth is None
        assert result.window.previous is None

    def test_invalid_period(self, analytics_service):
        with pytest.raises(InvalidPeriodError):
            analytics_service.analyze("client-1", [], period="2 weeks")

    def test_explicit_now_overrides_clock(self, analytics_service, sample_invoices):
        result = analytics_service.analyze(
            "client-1", sample_invoices, now=datetime(2026, 10, 26, 8, 0)
        )

        assert result.window.reference_date == date(2026, 10, 26)
        assert result.days_since_last_purchase == 14

    def test_rest_amount_listed_as_product(self, analytics_service):
        invoices = [
            InvoiceFactory.create(invoice_date="2026-10-05", products=[("A", 100)], rest_amount=40),
        ]

        result = analytics_service.analyze("client-1", invoices)

        names = [p.name for p in result.product_analysis]
        assert names == ["A", REST_PRODUCT_KEY]
        assert result.total_sales == Decimal("140")

    def test_catalog_key_resolver(self):
        service = ClientAnalyticsService(key_for=catalog_key, clock=lambda: REFERENCE)
        invoices = [
            InvoiceFactory.create(
                invoice_date="2026-10-05",
                products=[
                    LineItemFactory.create("Amoxicilina", 60, product_id="P-1"),
                    LineItemFactory.create("AMOXICILINA", 40, product_id="P-1"),
                ],
            ),
        ]

        result = service.analyze("client-1", invoices)

        assert [p.name for p in result.product_analysis] == ["P-1"]


# ===================
# TEST 5: DETERMINISM
# ===================

class TestDeterminism:
    """Same inputs, same output."""

    def test_repeat_calls_identical(self, analytics_service, sample_invoices):
        first = analytics_service.analyze("client-1", sample_invoices)
        second = analytics_service.analyze("client-1", sample_invoices)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_input_order_irrelevant(self, analytics_service, sample_invoices):
        forward = analytics_service.analyze("client-1", sample_invoices)
        backward = analytics_service.analyze("client-1", list(reversed(sample_invoices)))

        assert forward.model_dump_json() == backward.model_dump_json()

    def test_ties_sorted_by_name(self, analytics_service):
        invoices = [
            InvoiceFactory.create(invoice_date="2026-10-05", products=[("Beta", 100), ("Alpha", 100)]),
        ]

        result = analytics_service.analyze("client-1", invoices)

        assert [p.name for p in result.product_analysis] == ["Alpha", "Beta"]

    def test_result_is_immutable(self, analytics_service, sample_invoices):
        result = analytics_service.analyze("client-1", sample_invoices)

        with pytest.raises(PydanticValidationError):
            result.status = ClientStatus.GROWING

    def test_singleton(self):
        assert get_client_analytics_service() is get_client_analytics_service()
