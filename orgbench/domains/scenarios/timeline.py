"""Month-by-month cost of a scenario, cash runway and year-end totals."""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date

import pandas as pd

from orgbench.domains.scenarios.models import (
    AffectedEmployee,
    MonthlyBurn,
    RunwayAnalysis,
    ScenarioAction,
    YearEndProjection,
)
from orgbench.utils.statistics import average
from orgbench.utils.transforms import resolve_as_of
from orgbench.utils.types import EmployeeRecord, Money

logger = logging.getLogger(__name__)

REMOVAL_LEAD_DAYS = 30
ADDITION_LEAD_DAYS = 60
STAGGER_DAYS = 30


def _month(value: date) -> pd.Period:
    return pd.Timestamp(value).to_period("M")


def monthly_burn(
    baseline: Iterable[EmployeeRecord],
    affected: Iterable[AffectedEmployee],
    start_month: date,
    end_month: date,
) -> list[MonthlyBurn]:
    """Baseline and scenario monthly cost for every month in [start_month, end_month].

    A change counts from the month of its effective date onwards. Changes
    without an effective date never apply.
    """
    baseline = list(baseline)
    changes = [c for c in affected if c.effective_date is not None]
    baseline_cost = sum(e.total_compensation for e in baseline) / 12

    burn = []
    for period in pd.period_range(start=_month(start_month), end=_month(end_month), freq="M"):
        cost, count = baseline_cost, len(baseline)
        for change in changes:
            if _month(change.effective_date) > period:
                continue
            sign = -1 if change.action == ScenarioAction.REMOVE else 1
            cost += sign * change.total_compensation / 12
            count += sign
        burn.append(MonthlyBurn(
            month=str(period),
            baseline_cost=baseline_cost,
            scenario_cost=cost,
            savings=baseline_cost - cost,
            employee_count=count,
        ))
    return burn


def _runout(as_of: pd.Timestamp, months: float | None) -> date | None:
    if not months:
        return None
    return (as_of.to_period("M") + math.floor(months)).start_time.date()


def runway_analysis(
    current_cash: Money | None,
    burn: Sequence[MonthlyBurn],
    as_of: date | None = None,
) -> RunwayAnalysis:
    """Months of cash left at the average baseline and scenario burn.

    Run-out dates are the first day of the month the cash runs out, counted
    from the as-of month.
    """
    if not current_cash or current_cash <= 0 or not burn:
        return RunwayAnalysis(current_cash=current_cash)

    avg_baseline = average([m.baseline_cost for m in burn])
    avg_scenario = average([m.scenario_cost for m in burn])
    baseline_months = current_cash / avg_baseline if avg_baseline > 0 else None
    scenario_months = current_cash / avg_scenario if avg_scenario > 0 else None
    extension = scenario_months - baseline_months if baseline_months and scenario_months else None

    ts = resolve_as_of(as_of)
    logger.debug("Runway %.1f -> %.1f months", baseline_months or 0, scenario_months or 0)
    return RunwayAnalysis(
        current_cash=current_cash,
        baseline_months=baseline_months,
        scenario_months=scenario_months,
        extension_months=extension,
        baseline_runout=_runout(ts, baseline_months),
        scenario_runout=_runout(ts, scenario_months),
    )


def year_end_projection(burn: Sequence[MonthlyBurn], year: int) -> YearEndProjection:
    months = [m for m in burn if m.month.startswith(f"{year}-")]
    baseline_total = sum(m.baseline_cost for m in months)
    scenario_total = sum(m.scenario_cost for m in months)
    return YearEndProjection(
        year=year,
        baseline_total=baseline_total,
        scenario_total=scenario_total,
        total_savings=baseline_total - scenario_total,
        avg_monthly_burn=scenario_total / len(months) if months else 0.0,
    )


def default_effective_dates(
    affected: Sequence[AffectedEmployee],
    start: date | None = None,
) -> list[AffectedEmployee]:
    """Stagger undated changes 30 days apart, removals from 30 days after start
    and additions from 60 days, each moved to the end of its month.

    The stagger uses the change's position in the whole list.
    """
    ts = resolve_as_of(start)
    dated = []
    for i, change in enumerate(affected):
        if change.effective_date is not None:
            dated.append(change)
            continue
        lead = REMOVAL_LEAD_DAYS if change.action == ScenarioAction.REMOVE else ADDITION_LEAD_DAYS
        effective = ts + pd.Timedelta(days=lead + i * STAGGER_DAYS) + pd.offsets.MonthEnd(0)
        dated.append(replace(change, effective_date=effective.date()))
    return dated
