"""KPI evaluation.

A static, versioned registry of SaaS workforce KPIs and the engine that
evaluates them over employee records and dataset metadata.
"""

from orgbench.domains.kpis.calculator import KPIEngine, KPIValue, ValueStatus, build_value, calculate_kpis
from orgbench.domains.kpis.cost_series import MonthlyEmployerCost, cost_series_values
from orgbench.domains.kpis.definitions import (
    FORMULA_REFS,
    KPI_REGISTRY,
    REGISTRY_VERSION,
    BenchmarkRange,
    KPICategory,
    KPIDefinition,
    KPIUnit,
    default_kpis,
    get_definition,
    kpis_by_category,
    validate_registry,
)
from orgbench.domains.kpis.departments import categorize_department, is_high_cost_location
from orgbench.domains.kpis.formatting import BenchmarkStatus, benchmark_status, format_value


def validate() -> dict[str, str | int]:
    """Check every registry definition for a consistent benchmark range."""
    errors = validate_registry(KPI_REGISTRY)
    if errors:
        return {"status": "error", "message": "; ".join(errors)}
    return {"status": "ok", "kpis": len(KPI_REGISTRY), "version": REGISTRY_VERSION}
