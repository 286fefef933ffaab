"""Workforce transformations for what-if scenarios.

Every transform starts from the employees active on the as-of date and
returns new records; inputs are never modified. Scenario metrics compare the
active baseline against the transformed workforce.
"""

import itertools
import logging
import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import date

import pandas as pd

from orgbench.domains.kpis.ratios import percent_of, safe_div
from orgbench.domains.scenarios.models import (
    AffectedEmployee,
    OpenRole,
    ScenarioAction,
    ScenarioDelta,
    ScenarioWorkforce,
    SummaryMetrics,
)
from orgbench.domains.workforce.structure import (
    DepartmentGroup,
    department_breakdown,
    department_group,
    rd_to_gtm_ratio,
)
from orgbench.errors import InvalidInputError
from orgbench.utils.transforms import active_on, employees_to_frame, resolve_as_of
from orgbench.utils.types import EmployeeRecord, Money

logger = logging.getLogger(__name__)

DEFAULT_HIRE_COMPENSATION: Money = 100_000.0


def _active(employees: Iterable[EmployeeRecord], as_of: date | None) -> tuple[list[EmployeeRecord], pd.DataFrame]:
    records = list(employees)
    df = employees_to_frame(records)
    active = df[active_on(df, resolve_as_of(as_of))]
    ids = set(active["employee_id"])
    return [e for e in records if str(e.id) in ids], active


def active_employees(employees: Iterable[EmployeeRecord], as_of: date | None = None) -> list[EmployeeRecord]:
    return _active(employees, as_of)[0]


def _as_group(group: DepartmentGroup | str) -> DepartmentGroup:
    try:
        return DepartmentGroup(group)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown department group '{group}'") from exc


def apply_hiring_freeze(workforce: ScenarioWorkforce) -> ScenarioWorkforce:
    """Cancel every open role; current employees are untouched."""
    logger.info("Hiring freeze cancels %d open roles", len(workforce.open_roles))
    return replace(workforce, open_roles=())


def apply_cost_reduction(
    employees: Iterable[EmployeeRecord],
    reduction_pct: float,
    target_groups: Iterable[DepartmentGroup | str] | None = None,
    as_of: date | None = None,
) -> list[EmployeeRecord]:
    """Remove the most expensive employees first until the removed cost
    reaches reduction_pct of the active total.

    The target is measured against the whole active workforce even when only
    some department groups are eligible for removal.
    """
    if not 0 <= reduction_pct <= 100:
        raise InvalidInputError(f"Reduction must be within [0, 100] percent, got {reduction_pct}")
    active, frame = _active(employees, as_of)
    target = float(frame["total_compensation"].sum()) * reduction_pct / 100

    candidates = frame
    if target_groups is not None:
        groups = {_as_group(g) for g in target_groups}
        candidates = frame[frame["department"].map(department_group).isin(groups)]

    ranked = candidates.sort_values(["total_compensation", "employee_id"], ascending=[False, True])
    removed_before = ranked["total_compensation"].cumsum() - ranked["total_compensation"]
    removed = set(ranked.loc[removed_before < target, "employee_id"]) if target > 0 else set()

    logger.info(
        "Cost reduction of %.1f%% removes %d of %d active employees",
        reduction_pct, len(removed), len(active),
    )
    return [e for e in active if str(e.id) not in removed]


def _hire_ids(group: DepartmentGroup, taken: set[str]):
    slug = re.sub(r"[^a-z0-9]", "", group.value.lower())
    return (i for i in (f"new_{slug}_{n}" for n in itertools.count()) if i not in taken)


def apply_growth(
    employees: Iterable[EmployeeRecord],
    additional_fte: int,
    distribution: Mapping[DepartmentGroup | str, float],
    as_of: date | None = None,
    default_compensation: Money = DEFAULT_HIRE_COMPENSATION,
) -> list[EmployeeRecord]:
    """Add full-time hires split across department groups by share.

    Each group gets round(additional_fte * share) hires, rounding halves up,
    paid the group's current average compensation or default_compensation
    when the group has no one yet.
    """
    if additional_fte < 0:
        raise InvalidInputError(f"Additional FTE cannot be negative, got {additional_fte}")
    active, frame = _active(employees, as_of)
    breakdown = department_breakdown(frame)
    taken = {str(e.id) for e in active}

    hires = []
    for key, share in distribution.items():
        group = _as_group(key)
        if share < 0:
            raise InvalidInputError(f"Share for {group} cannot be negative, got {share}")
        count = math.floor(additional_fte * share + 0.5)
        stats = breakdown.get(group)
        compensation = stats.avg_compensation if stats and stats.avg_compensation > 0 else default_compensation
        for hire_id in itertools.islice(_hire_ids(group, taken), count):
            taken.add(hire_id)
            hires.append(EmployeeRecord(hire_id, group.value, None, compensation, annual_salary=compensation))

    logger.info("Growth adds %d hires", len(hires))
    return active + hires


def apply_target_ratio(
    employees: Iterable[EmployeeRecord],
    target_ratio: float,
    as_of: date | None = None,
) -> list[EmployeeRecord]:
    """Hire into GTM or R&D until the R&D to GTM FTE ratio reaches target_ratio.

    Nobody is removed. A workforce without GTM headcount has no ratio and is
    returned unchanged.
    """
    if target_ratio <= 0:
        raise InvalidInputError(f"Target ratio must be positive, got {target_ratio}")
    active, frame = _active(employees, as_of)
    breakdown = department_breakdown(frame)
    current = rd_to_gtm_ratio(breakdown)
    if current == 0:
        logger.warning("No R&D to GTM ratio to adjust; workforce left unchanged")
        return active

    rd_fte = breakdown[DepartmentGroup.RD].fte if DepartmentGroup.RD in breakdown else 0.0
    gtm_fte = breakdown[DepartmentGroup.GTM].fte
    if current > target_ratio:
        group, needed = DepartmentGroup.GTM, rd_fte / target_ratio - gtm_fte
    else:
        group, needed = DepartmentGroup.RD, gtm_fte * target_ratio - rd_fte
    # round first so float noise does not add a hire
    hires = max(0, math.ceil(round(needed, 9)))
    return apply_growth(active, hires, {group: 1.0}, as_of=as_of)


def _summarize(
    employees: Iterable[EmployeeRecord],
    total_revenue: Money | None,
    open_roles: Sequence[OpenRole],
    as_of: date | None,
) -> tuple[SummaryMetrics, float]:
    _, frame = _active(employees, as_of)
    total_cost = float(frame["total_compensation"].sum())
    total_fte = float(frame["fte_factor"].sum())
    metrics = SummaryMetrics(
        total_fte=total_fte,
        total_cost=total_cost,
        cost_per_fte=safe_div(total_cost, total_fte) or 0.0,
        revenue_per_fte=safe_div(total_revenue, total_fte) if total_revenue else None,
        employee_count=len(frame),
        open_roles=len(open_roles),
        planned_hiring_cost=float(sum(r.target_compensation for r in open_roles)),
    )
    return metrics, rd_to_gtm_ratio(department_breakdown(frame))


def summary_metrics(
    employees: Iterable[EmployeeRecord],
    total_revenue: Money | None = None,
    open_roles: Sequence[OpenRole] = (),
    as_of: date | None = None,
) -> SummaryMetrics:
    return _summarize(employees, total_revenue, open_roles, as_of)[0]


def scenario_metrics(
    baseline: ScenarioWorkforce,
    scenario: ScenarioWorkforce,
    total_revenue: Money | None = None,
    as_of: date | None = None,
) -> tuple[SummaryMetrics, SummaryMetrics, ScenarioDelta]:
    """Summary metrics for both workforces and the change between them.

    Savings are positive when the scenario costs less than the baseline.
    """
    base, base_ratio = _summarize(baseline.employees, total_revenue, baseline.open_roles, as_of)
    after, after_ratio = _summarize(scenario.employees, total_revenue, scenario.open_roles, as_of)
    savings = base.total_cost - after.total_cost
    delta = ScenarioDelta(
        fte_change=after.total_fte - base.total_fte,
        cost_savings=savings,
        cost_savings_pct=percent_of(savings, base.total_cost) or 0.0,
        ratio_change=after_ratio - base_ratio,
        planned_hiring_savings=base.planned_hiring_cost - after.planned_hiring_cost,
    )
    return base, after, delta


def affected_employees(
    baseline: Iterable[EmployeeRecord],
    scenario: Iterable[EmployeeRecord],
) -> list[AffectedEmployee]:
    """Removals (in baseline order) followed by additions (in scenario order)."""
    baseline, scenario = list(baseline), list(scenario)
    before = {e.id for e in baseline}
    after = {e.id for e in scenario}
    removed = [
        AffectedEmployee(e.id, e.department, e.role, e.total_compensation, ScenarioAction.REMOVE)
        for e in baseline if e.id not in after
    ]
    added = [
        AffectedEmployee(e.id, e.department, e.role, e.total_compensation, ScenarioAction.ADD, is_new=True)
        for e in scenario if e.id not in before
    ]
    return removed + added
