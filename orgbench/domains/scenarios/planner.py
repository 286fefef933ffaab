"""Run a scenario end to end: transform, compare, and project over time."""

import logging
from datetime import date

import pandas as pd

from orgbench.domains.scenarios.models import ScenarioParameters, ScenarioResult, ScenarioType, ScenarioWorkforce
from orgbench.domains.scenarios.timeline import default_effective_dates, monthly_burn, runway_analysis, year_end_projection
from orgbench.domains.scenarios.transform import (
    active_employees,
    affected_employees,
    apply_cost_reduction,
    apply_growth,
    apply_hiring_freeze,
    apply_target_ratio,
    scenario_metrics,
)
from orgbench.errors import InvalidInputError
from orgbench.utils.transforms import resolve_as_of
from orgbench.utils.types import DatasetMetadata

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_MONTHS = 12


def _transform(baseline: ScenarioWorkforce, params: ScenarioParameters, as_of: date) -> ScenarioWorkforce:
    match params.type:
        case ScenarioType.HIRING_FREEZE:
            return apply_hiring_freeze(baseline)
        case ScenarioType.COST_REDUCTION if params.reduction_pct is not None:
            employees = apply_cost_reduction(baseline.employees, params.reduction_pct, params.target_groups, as_of)
        case ScenarioType.GROWTH if params.additional_fte is not None and params.distribution:
            employees = apply_growth(baseline.employees, params.additional_fte, params.distribution, as_of)
        case ScenarioType.TARGET_RATIO if params.target_ratio is not None:
            employees = apply_target_ratio(baseline.employees, params.target_ratio, as_of)
        case other:
            raise InvalidInputError(f"Missing parameters for a {other} scenario")
    return ScenarioWorkforce(tuple(employees), baseline.open_roles)


def run_scenario(
    workforce: ScenarioWorkforce,
    params: ScenarioParameters,
    metadata: DatasetMetadata | None = None,
    as_of: date | None = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> ScenarioResult:
    """Apply the scenario to the workforce active on as_of and project it.

    Undated changes get staggered default effective dates. Monthly burn
    covers horizon_months starting with the as-of month, runway uses the
    dataset's cash balance, and the year-end projection covers the as-of
    year.
    """
    if horizon_months < 1:
        raise InvalidInputError(f"Horizon must be at least one month, got {horizon_months}")
    metadata = metadata or DatasetMetadata()
    day = resolve_as_of(as_of).date()

    baseline = ScenarioWorkforce(tuple(active_employees(workforce.employees, day)), workforce.open_roles)
    scenario = _transform(baseline, params, day)
    base_metrics, scenario_summary, delta = scenario_metrics(baseline, scenario, metadata.total_revenue, day)

    affected = default_effective_dates(affected_employees(baseline.employees, scenario.employees), day)
    end_month = (pd.Timestamp(day).to_period("M") + horizon_months - 1).start_time.date()
    burn = monthly_burn(baseline.employees, affected, day, end_month)

    logger.info(
        "%s scenario: %d affected employees, %.0f %s annual savings",
        params.type, len(affected), delta.cost_savings, metadata.currency,
    )
    return ScenarioResult(
        baseline=base_metrics,
        scenario=scenario_summary,
        delta=delta,
        workforce=scenario,
        affected=tuple(affected),
        monthly_burn=tuple(burn),
        runway=runway_analysis(metadata.current_cash_balance, burn, day),
        year_end=year_end_projection(burn, day.year),
    )
