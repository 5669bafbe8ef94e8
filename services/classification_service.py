"""
Trend and status classification for client analytics.

Turns product aggregates into ProductAnalysis rows, classifies the client
into one of five statuses and explains why sales move. Rules are
evaluated in a fixed priority order; the first match wins.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from config.analytics import DEFAULT_THRESHOLDS, AnalyticsThresholds
from models.analytics import (
    ClientStatus,
    GrowthFigures,
    ProductAnalysis,
    ProductTrendState,
)
from services.aggregation_service import ProductAggregate
from services.period_service import HUNDRED, ZERO, calculate_growth

PRODUCT_RECOMMENDATIONS: Dict[ProductTrendState, str] = {
    ProductTrendState.STOPPED: "Dejó de comprar este producto. Verificar disponibilidad o competencia.",
    ProductTrendState.DECLINING: "Ventas en declive. Considerar promoción o revisar precio.",
    ProductTrendState.GROWING: "Excelente crecimiento. Mantener stock y considerar upselling.",
    ProductTrendState.STABLE: "Ventas estables. Mantener seguimiento regular.",
    ProductTrendState.DORMANT: "Sin actividad reciente. Recordar producto al cliente.",
}

# status -> (message template, recommended actions)
STATUS_PLAYBOOK: Dict[ClientStatus, Tuple[str, List[str]]] = {
    ClientStatus.INACTIVE: (
        "Sin actividad en {days} días",
        ["Llamar para reactivación", "Ofrecer promoción especial", "Verificar si cambió de proveedor"],
    ),
    ClientStatus.AT_RISK: (
        "Cliente en riesgo de pérdida",
        ["Agendar visita urgente", "Revisar productos que dejó de comprar", "Analizar competencia"],
    ),
    ClientStatus.DECLINING: (
        "Ventas en declive moderado",
        ["Programar seguimiento", "Revisar catálogo ofrecido", "Identificar nuevas necesidades"],
    ),
    ClientStatus.GROWING: (
        "Cliente en crecimiento sostenido",
        ["Mantener atención prioritaria", "Explorar nuevos productos", "Considerar mejores condiciones"],
    ),
    ClientStatus.STABLE: (
        "Cliente estable y recurrente",
        ["Mantener relación actual", "Ofrecer novedades periódicamente"],
    ),
}

# Clients without any invoice land on STABLE with onboarding copy
NO_HISTORY_MESSAGE = "Cliente sin historial de compras"
NO_HISTORY_ACTIONS = ["Agendar visita de presentación", "Presentar catálogo de productos"]


def format_percent(value: Decimal, signed: bool = False) -> str:
    """Whole-number percentage, rounded half-up (e.g. '+25%', '-38%')."""
    rounded = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    prefix = "+" if signed and rounded > 0 else ""
    return f"{prefix}{rounded}%"


def classify_product_trend(
    current_sales: Decimal,
    previous_sales: Decimal,
    growth: Decimal,
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
) -> ProductTrendState:
    """
    Classify a product month over month.

    - STOPPED: bought last month, nothing this month
    - DECLINING: growth below the decline threshold
    - GROWING: growth above the growth threshold
    - STABLE: selling this month
    - DORMANT: no sales in either month
    """
    if previous_sales > 0 and current_sales == 0:
        return ProductTrendState.STOPPED
    if growth < thresholds.product_decline_pct:
        return ProductTrendState.DECLINING
    if growth > thresholds.product_growth_pct:
        return ProductTrendState.GROWING
    if current_sales > 0:
        return ProductTrendState.STABLE
    return ProductTrendState.DORMANT


def analyze_product(
    aggregate: ProductAggregate,
    client_total_sales: Decimal,
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
) -> ProductAnalysis:
    """Derive growth, flags and recommendation for one aggregated product."""
    growth = calculate_growth(aggregate.current_month_sales, aggregate.previous_month_sales)
    trend = classify_product_trend(
        aggregate.current_month_sales,
        aggregate.previous_month_sales,
        growth,
        thresholds,
    )

    avg_per_invoice = (
        aggregate.total_sales / aggregate.occurrences if aggregate.occurrences > 0 else ZERO
    )
    percent_of_total = (
        aggregate.total_sales / client_total_sales * HUNDRED if client_total_sales > 0 else ZERO
    )

    return ProductAnalysis(
        name=aggregate.name,
        total_sales=aggregate.total_sales,
        total_commission=aggregate.total_commission,
        invoice_count=aggregate.occurrences,
        avg_per_invoice=round(avg_per_invoice, 2),
        current_month_sales=aggregate.current_month_sales,
        previous_month_sales=aggregate.previous_month_sales,
        growth=growth,
        percent_of_total=round(percent_of_total, 2),
        last_purchase_date=aggregate.last_purchase_date,
        is_growing=trend == ProductTrendState.GROWING,
        is_declining=trend == ProductTrendState.DECLINING,
        is_stopped=trend == ProductTrendState.STOPPED,
        trend=trend,
        recommendation=PRODUCT_RECOMMENDATIONS[trend],
    )


def sort_products(products: List[ProductAnalysis]) -> List[ProductAnalysis]:
    """Highest cumulative sales first; ties by name ascending."""
    return sorted(products, key=lambda p: (-p.total_sales, p.name))


def determine_client_status(
    days_since_last_purchase: Optional[int],
    monthly_sales_growth: Decimal,
    stopped_count: int,
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
) -> ClientStatus:
    """
    Classify the client. Priority order is absolute:

    1. INACTIVE: no purchase for more than 60 days
    2. AT_RISK: monthly growth below -20% or 2+ stopped products
    3. DECLINING: monthly growth below -5%
    4. GROWING: monthly growth above +15%
    5. STABLE: otherwise
    """
    if days_since_last_purchase is not None and days_since_last_purchase > thresholds.inactive_days:
        return ClientStatus.INACTIVE
    if (
        monthly_sales_growth < thresholds.at_risk_growth_pct
        or stopped_count >= thresholds.at_risk_stopped_products
    ):
        return ClientStatus.AT_RISK
    if monthly_sales_growth < thresholds.declining_growth_pct:
        return ClientStatus.DECLINING
    if monthly_sales_growth > thresholds.growing_growth_pct:
        return ClientStatus.GROWING
    return ClientStatus.STABLE


def describe_status(
    status: ClientStatus,
    days_since_last_purchase: Optional[int],
    has_history: bool = True,
) -> Tuple[str, List[str]]:
    """Status message and recommended actions for a status."""
    if not has_history:
        return NO_HISTORY_MESSAGE, list(NO_HISTORY_ACTIONS)
    template, actions = STATUS_PLAYBOOK[status]
    return template.format(days=days_since_last_purchase), list(actions)


def explain_growth(
    products: List[ProductAnalysis],
    monthly: GrowthFigures,
    quarterly: GrowthFigures,
    avg_ticket: Decimal,
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
) -> Tuple[List[str], List[str]]:
    """
    Build the "why growing" and "why declining" explanations.

    Categories with nothing to report are left out.

    Returns:
        (why_growing, why_declining)
    """
    limit = thresholds.explanation_products_limit
    growing = [p for p in products if p.is_growing]
    declining = [p for p in products if p.is_declining]
    stopped = [p for p in products if p.is_stopped]
    quarterly_avg_ticket = quarterly.current_sales / max(1, quarterly.invoice_count)

    why_growing: List[str] = []
    if growing:
        listed = ", ".join(f"{p.name} ({format_percent(p.growth, signed=True)})" for p in growing[:limit])
        why_growing.append(f"Aumento en: {listed}")
    if monthly.invoice_count > monthly.previous_invoice_count:
        why_growing.append(
            f"Mayor frecuencia de compra: {monthly.invoice_count} facturas "
            f"vs {monthly.previous_invoice_count} mes anterior"
        )
    if avg_ticket > quarterly_avg_ticket:
        why_growing.append("Ticket promedio superior al trimestre")

    why_declining: List[str] = []
    if declining:
        listed = ", ".join(f"{p.name} ({format_percent(p.growth)})" for p in declining[:limit])
        why_declining.append(f"Disminución en: {listed}")
    if stopped:
        why_declining.append(
            f"Productos sin compra este mes: {', '.join(p.name for p in stopped)}"
        )
    if monthly.invoice_count < monthly.previous_invoice_count:
        why_declining.append(
            f"Menor frecuencia: {monthly.invoice_count} facturas "
            f"vs {monthly.previous_invoice_count}"
        )
    if avg_ticket < quarterly_avg_ticket:
        why_declining.append("Ticket promedio inferior al trimestre")

    return why_growing, why_declining
