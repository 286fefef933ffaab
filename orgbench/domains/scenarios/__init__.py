"""What-if workforce scenarios.

Hiring freezes, cost reductions, growth plans and R&D to GTM rebalancing,
compared against the current workforce and projected month by month.
"""

from datetime import date

from orgbench.domains.scenarios.models import (
    AffectedEmployee,
    MonthlyBurn,
    OpenRole,
    RunwayAnalysis,
    ScenarioAction,
    ScenarioDelta,
    ScenarioParameters,
    ScenarioResult,
    ScenarioType,
    ScenarioWorkforce,
    SummaryMetrics,
    YearEndProjection,
)
from orgbench.domains.scenarios.planner import run_scenario
from orgbench.domains.scenarios.timeline import default_effective_dates, monthly_burn, runway_analysis, year_end_projection
from orgbench.domains.scenarios.transform import (
    active_employees,
    affected_employees,
    apply_cost_reduction,
    apply_growth,
    apply_hiring_freeze,
    apply_target_ratio,
    scenario_metrics,
    summary_metrics,
)
from orgbench.utils.types import DatasetMetadata, EmployeeRecord


def validate() -> dict[str, str | int | float]:
    """A 40% cost reduction on a three-person team removes the top earner."""
    workforce = ScenarioWorkforce((
        EmployeeRecord("a", "Engineering", "Software Engineer", 100_000),
        EmployeeRecord("b", "Sales", "Account Executive", 60_000),
        EmployeeRecord("c", "Sales", "SDR", 40_000),
    ))
    result = run_scenario(
        workforce,
        ScenarioParameters(ScenarioType.COST_REDUCTION, reduction_pct=40),
        DatasetMetadata(current_cash_balance=500_000),
        as_of=date(2024, 6, 30),
    )
    if result.scenario.employee_count != 2 or result.delta.cost_savings != 100_000:
        return {"status": "error", "message": "Unexpected outcome for sample cost reduction"}
    return {"status": "ok", "affected": len(result.affected), "savings": result.delta.cost_savings}
