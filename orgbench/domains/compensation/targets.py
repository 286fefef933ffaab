"""Per-employee compensation targets from market benchmarks.

For every employee: resolve the role, select a benchmark, read the target
percentile (interpolating between bands when needed) and fall back to the
role family average when the selected benchmark has no usable band. Employees
whose target cannot be grounded in benchmark data are reported as unresolved
rather than given a made-up figure.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum

from orgbench.config import EngineConfig
from orgbench.domains.benchmarks import (
    BandReading,
    BenchmarkRow,
    BenchmarkSelector,
    Measure,
    RoleKey,
    read_percentile,
)
from orgbench.domains.benchmarks.selector import same_dimension
from orgbench.domains.roles import MappingContext, RoleMatch, RoleTaxonomyMatcher, Seniority
from orgbench.errors import InvalidInputError
from orgbench.utils.statistics import average
from orgbench.utils.transforms import infer_level
from orgbench.utils.types import EmployeeLevel, EmployeeRecord, Money

logger = logging.getLogger(__name__)

DEFAULT_SCENARIO = "baseline"

LEVEL_SENIORITY: dict[EmployeeLevel, Seniority] = {
    EmployeeLevel.IC: Seniority.MID,
    EmployeeLevel.MANAGER: Seniority.MANAGER,
    EmployeeLevel.DIRECTOR: Seniority.DIRECTOR,
    EmployeeLevel.VP: Seniority.VP,
    EmployeeLevel.C_LEVEL: Seniority.C_LEVEL,
}


class CalculationMethod(StrEnum):
    BENCHMARK_MATCH = "benchmark_match"
    INTERPOLATED = "interpolated"
    FALLBACK_INDUSTRY_AVG = "fallback_industry_avg"
    MANUAL = "manual"


@dataclass(frozen=True)
class CompensationTarget:
    employee_id: str
    scenario_id: str
    target_annual_comp: Money
    calculation_method: CalculationMethod
    benchmark_source: str | None
    explanation: str
    is_manual_override: bool = False
    current_compensation: Money = 0.0
    gap: Money = 0.0
    gap_percent: float = 0.0
    percentile: float | None = None
    match_confidence: float | None = None
    standardized_title: str | None = None


@dataclass(frozen=True)
class UnresolvedTarget:
    employee_id: str
    reason: str


@dataclass(frozen=True)
class TargetCalculation:
    targets: list[CompensationTarget] = field(default_factory=list)
    unresolved: list[UnresolvedTarget] = field(default_factory=list)
    skipped_overrides: list[str] = field(default_factory=list)


def _gap(target: Money, current: Money) -> tuple[Money, float]:
    gap = round(target - current, 2)
    gap_percent = round(gap / current * 100, 2) if current > 0 else 0.0
    return gap, gap_percent


def manual_target(
    employee: EmployeeRecord,
    amount: Money,
    scenario_id: str = DEFAULT_SCENARIO,
    note: str | None = None,
) -> CompensationTarget:
    """A caller-set target. Unforced recalculations never replace it."""
    if amount < 0:
        raise InvalidInputError(f"Target compensation must be >= 0, got {amount}")
    target = round(float(amount), 2)
    gap, gap_percent = _gap(target, employee.total_compensation)
    explanation = "Manual override" + (f": {note}" if note else "")
    return CompensationTarget(
        employee_id=employee.id,
        scenario_id=scenario_id,
        target_annual_comp=target,
        calculation_method=CalculationMethod.MANUAL,
        benchmark_source=None,
        explanation=explanation,
        is_manual_override=True,
        current_compensation=employee.total_compensation,
        gap=gap,
        gap_percent=gap_percent,
        standardized_title=employee.standardized_role,
    )


def _read_any_measure(row: BenchmarkRow, percentile: float) -> BandReading | None:
    reading = read_percentile(row, percentile, Measure.TOTAL_COMP)
    if reading is None:
        reading = read_percentile(row, percentile, Measure.BASE_SALARY)
    return reading


class CompensationTargetCalculator:
    def __init__(self, matcher: RoleTaxonomyMatcher | None = None, config: EngineConfig | None = None):
        self.config = config or (matcher.config if matcher else EngineConfig())
        self.matcher = matcher or RoleTaxonomyMatcher(config=self.config)

    def calculate(
        self,
        employees: Sequence[EmployeeRecord],
        benchmarks: Iterable[BenchmarkRow],
        context: MappingContext | None,
        company_size: str | None,
        target_percentile: float | None = None,
        *,
        existing_targets: Iterable[CompensationTarget] = (),
        force: bool = False,
        scenario_id: str = DEFAULT_SCENARIO,
    ) -> list[CompensationTarget]:
        return self.calculate_detailed(
            employees, benchmarks, context, company_size, target_percentile,
            existing_targets=existing_targets, force=force, scenario_id=scenario_id,
        ).targets

    def calculate_detailed(
        self,
        employees: Sequence[EmployeeRecord],
        benchmarks: Iterable[BenchmarkRow],
        context: MappingContext | None,
        company_size: str | None,
        target_percentile: float | None = None,
        *,
        existing_targets: Iterable[CompensationTarget] = (),
        force: bool = False,
        scenario_id: str = DEFAULT_SCENARIO,
    ) -> TargetCalculation:
        percentile = target_percentile if target_percentile is not None else self.config.default_target_percentile
        if not 0 < percentile < 100:
            raise InvalidInputError(f"Target percentile must be within (0, 100), got {percentile}")

        context = context or MappingContext()
        context = replace(context, company_size=company_size or context.company_size)
        selector = BenchmarkSelector(benchmarks)
        overridden = {
            t.employee_id for t in existing_targets
            if t.is_manual_override and t.scenario_id == scenario_id
        }

        pending = [e for e in employees if force or e.id not in overridden]
        skipped = [e.id for e in employees if not force and e.id in overridden]
        titles = [t for e in pending for t in (e.role, e.standardized_role) if t]
        matches = self.matcher.match_batch(titles, context)

        result = TargetCalculation(skipped_overrides=skipped)
        for employee in pending:
            match = _resolve_role(employee, matches)
            if match is None:
                reason = f"Role '{employee.role}' could not be matched to the taxonomy"
                result.unresolved.append(UnresolvedTarget(employee.id, reason))
                logger.warning("Employee %s: %s", employee.id, reason)
                continue

            target = self._target_for(employee, match, selector, context, percentile, scenario_id)
            if target is None:
                reason = f"No benchmark band for '{match.standardized_title}' at P{percentile:g}"
                result.unresolved.append(UnresolvedTarget(employee.id, reason))
                logger.warning("Employee %s: %s", employee.id, reason)
                continue
            result.targets.append(target)

        logger.info(
            "Calculated %d targets for scenario '%s' (%d unresolved, %d manual overrides kept)",
            len(result.targets), scenario_id, len(result.unresolved), len(skipped),
        )
        return result

    def _target_for(
        self,
        employee: EmployeeRecord,
        match: RoleMatch,
        selector: BenchmarkSelector,
        context: MappingContext,
        percentile: float,
        scenario_id: str,
    ) -> CompensationTarget | None:
        level = employee.level or infer_level(employee.role)
        seniority = match.seniority or (LEVEL_SENIORITY.get(level) if level else None)
        role = RoleKey(match.role_family, match.standardized_title, seniority)

        selection = selector.select(role, context)
        reading = _read_any_measure(selection.row, percentile) if selection else None
        if reading is not None:
            row = selection.row
            method = CalculationMethod.INTERPOLATED if reading.interpolated else CalculationMethod.BENCHMARK_MATCH
            source = row.source
            basis = f"{source} benchmark (n={row.sample_size or 'unknown'}, {selection.tier})"
            value = reading.value
            measure = reading.measure
        else:
            fallback = _family_average(selector, match.role_family, context, percentile)
            if fallback is None:
                return None
            value, measure, rows_used = fallback
            method = CalculationMethod.FALLBACK_INDUSTRY_AVG
            source = f"{match.role_family} family average"
            basis = f"{match.role_family} family average across {rows_used} benchmark rows"

        target = round(value, 2)
        current = employee.total_compensation
        gap, gap_percent = _gap(target, current)
        explanation = (
            f"P{percentile:g} {measure} for {match.standardized_title}"
            f"{f' ({seniority})' if seniority else ''} from {basis}: "
            f"target {target:,.2f} vs current {current:,.2f} (gap {gap:+,.2f}, {gap_percent:+.1f}%)"
        )
        return CompensationTarget(
            employee_id=employee.id,
            scenario_id=scenario_id,
            target_annual_comp=target,
            calculation_method=method,
            benchmark_source=source,
            explanation=explanation,
            is_manual_override=False,
            current_compensation=current,
            gap=gap,
            gap_percent=gap_percent,
            percentile=percentile,
            match_confidence=match.confidence,
            standardized_title=match.standardized_title,
        )


def _resolve_role(employee: EmployeeRecord, matches: dict[str, RoleMatch]) -> RoleMatch | None:
    """The free-text role's match, else the stored standardized role's match."""
    for title in (employee.role, employee.standardized_role):
        match = matches.get(title) if title else None
        if match is not None and match.is_resolved:
            return match
    return None


def _family_average(
    selector: BenchmarkSelector,
    role_family: str,
    context: MappingContext,
    percentile: float,
) -> tuple[float, Measure, int] | None:
    """Average the percentile over every row of the family, same industry first."""
    family = selector.family_rows(role_family)
    same_industry = [r for r in family if context.industry and same_dimension(r.industry, context.industry)]
    for rows in (same_industry, family):
        for measure in Measure:
            readings = [read_percentile(row, percentile, measure) for row in rows]
            values = [r.value for r in readings if r is not None]
            if values:
                return average(values), measure, len(values)
    return None
