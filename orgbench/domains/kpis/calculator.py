"""Evaluate registry KPIs over employee records and dataset metadata."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

import pandas as pd

from orgbench.domains.kpis.cost_series import COST_SERIES_FORMULA, MonthlyEmployerCost, cost_series_values
from orgbench.domains.kpis.definitions import KPI_REGISTRY, KPICategory, KPIDefinition, validate_registry
from orgbench.domains.kpis.departments import categorize_department, is_high_cost_location
from orgbench.domains.kpis.formatting import BenchmarkStatus, benchmark_status, format_value
from orgbench.domains.kpis.ratios import percent_of, safe_div
from orgbench.errors import InvalidInputError
from orgbench.utils.transforms import active_on, employees_to_frame, resolve_as_of
from orgbench.utils.types import MANAGEMENT_LEVELS, DatasetMetadata, EmployeeLevel, EmployeeRecord

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25


class ValueStatus(StrEnum):
    COMPUTED = "computed"
    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_INPUT = "invalid_input"


@dataclass(frozen=True)
class KPIValue:
    kpi_id: str
    value: float | None
    status: ValueStatus
    definition: KPIDefinition
    formatted_value: str
    benchmark_status: BenchmarkStatus | None = None
    message: str | None = None


def build_value(
    definition: KPIDefinition,
    value: float | None,
    *,
    status: ValueStatus | None = None,
    message: str | None = None,
    currency: str = "EUR",
) -> KPIValue:
    if status is None:
        status = ValueStatus.COMPUTED if value is not None else ValueStatus.INSUFFICIENT_DATA
    return KPIValue(
        kpi_id=definition.id,
        value=value,
        status=status,
        definition=definition,
        formatted_value=format_value(value, definition.unit, currency),
        benchmark_status=benchmark_status(value, definition),
        message=message,
    )


@dataclass(frozen=True)
class _Workforce:
    """Aggregates shared by every formula in one calculation."""

    all_rows: pd.DataFrame
    active: pd.DataFrame
    departments: pd.DataFrame
    revenue: float | None
    as_of: pd.Timestamp

    @property
    def headcount(self) -> int:
        return len(self.active)

    @property
    def year_ago(self) -> pd.Timestamp:
        return self.as_of - pd.DateOffset(years=1)

    @property
    def has_start_dates(self) -> bool:
        return bool(self.all_rows["start_date"].notna().any())

    def department(self, category: KPICategory, column: str) -> float | None:
        if category not in self.departments.index:
            return None
        return float(self.departments.at[category, column])


def _prepare(df: pd.DataFrame, metadata: DatasetMetadata, as_of: pd.Timestamp) -> _Workforce:
    active = df[active_on(df, as_of)].copy()
    active["annual_salary"] = active["annual_salary"].fillna(0.0)
    active["kpi_category"] = active["department"].map(categorize_department)
    departments = (
        active.dropna(subset=["kpi_category"])
        .groupby("kpi_category")
        .agg(count=("employee_id", "size"), salaries=("annual_salary", "sum"),
             compensation=("total_compensation", "sum"))
    )
    revenue = metadata.total_revenue if metadata.total_revenue and metadata.total_revenue > 0 else None
    return _Workforce(all_rows=df, active=active, departments=departments, revenue=revenue, as_of=as_of)


def _headcount_on(df: pd.DataFrame, when: pd.Timestamp) -> int:
    return int(active_on(df, when).sum())


def _evaluate(definition: KPIDefinition, wf: _Workforce) -> float | None:
    active = wf.active
    dept = definition.department
    match definition.formula_ref:
        case "revenue_per_employee":
            return safe_div(wf.revenue, wf.headcount)
        case "span_of_control":
            managers = active["level"].isin([lvl.value for lvl in MANAGEMENT_LEVELS]).sum()
            ics = (active["level"] == EmployeeLevel.IC.value).sum()
            return safe_div(ics, managers)
        case "salary_pct_revenue":
            return percent_of(active["annual_salary"].sum(), wf.revenue)
        case "personnel_pct_revenue":
            return percent_of(active["total_compensation"].sum(), wf.revenue)
        case "high_cost_share":
            return percent_of(active["location"].map(is_high_cost_location).sum(), wf.headcount)
        case "low_cost_share":
            high_cost = active["location"].map(is_high_cost_location).sum()
            return percent_of(wf.headcount - high_cost, wf.headcount)
        case "headcount_change":
            if not wf.has_start_dates:
                return None
            previous = _headcount_on(wf.all_rows, wf.year_ago)
            return percent_of(wf.headcount - previous, previous)
        case "new_hires_pct":
            if not wf.has_start_dates:
                return None
            starts = wf.all_rows["start_date"]
            hires = ((starts > wf.year_ago) & (starts <= wf.as_of)).sum()
            return percent_of(hires, wf.headcount)
        case "turnover_pct":
            ends = wf.all_rows["end_date"]
            leavers = ((ends > wf.year_ago) & (ends <= wf.as_of)).sum()
            average_headcount = (wf.headcount + _headcount_on(wf.all_rows, wf.year_ago)) / 2
            return percent_of(leavers, average_headcount)
        case "tenure":
            starts = active["start_date"].dropna()
            if starts.empty:
                return None
            return float(((wf.as_of - starts).dt.days / DAYS_PER_YEAR).mean())
        case "dept_ratio":
            return safe_div(wf.department(dept, "count"), wf.headcount)
        case "dept_pct":
            return percent_of(wf.department(dept, "count"), wf.headcount)
        case "revenue_per_dept":
            return safe_div(wf.revenue, wf.department(dept, "count"))
        case "dept_salary_pct_revenue":
            return percent_of(wf.department(dept, "salaries"), wf.revenue)
        case "dept_personnel_pct_revenue":
            return percent_of(wf.department(dept, "compensation"), wf.revenue)
        case other:
            raise RuntimeError(f"No formula registered for '{other}'")


class KPIEngine:
    def __init__(self, registry: dict[str, KPIDefinition] = KPI_REGISTRY):
        errors = validate_registry(registry)
        if errors:
            raise InvalidInputError("; ".join(errors))
        self.registry = registry

    def resolve(self, kpi_ids: Sequence[str] | None, with_cost_series: bool = False) -> list[KPIDefinition]:
        """Definitions to evaluate. Unknown ids fail before any work is done.

        With no ids, every KPI that can be derived from employee records is
        returned, plus the cost-management KPIs when a cost series is given.
        """
        if kpi_ids is None:
            return [
                d for d in self.registry.values()
                if with_cost_series or d.formula_ref != COST_SERIES_FORMULA
            ]
        unknown = [k for k in kpi_ids if k not in self.registry]
        if unknown:
            raise InvalidInputError(f"Unknown KPI id(s): {', '.join(unknown)}")
        definitions = [self.registry[k] for k in kpi_ids]
        if not with_cost_series:
            needs_series = [d.id for d in definitions if d.formula_ref == COST_SERIES_FORMULA]
            if needs_series:
                raise InvalidInputError(f"KPI(s) {', '.join(needs_series)} need a monthly employer cost series")
        return definitions

    def calculate(
        self,
        employees: Iterable[EmployeeRecord],
        metadata: DatasetMetadata,
        kpi_ids: Sequence[str] | None = None,
        as_of: date | None = None,
        monthly_costs: Iterable[MonthlyEmployerCost] | None = None,
    ) -> list[KPIValue]:
        definitions = self.resolve(kpi_ids, with_cost_series=monthly_costs is not None)
        df = employees_to_frame(employees)
        as_of_ts = resolve_as_of(as_of)
        wf = _prepare(df, metadata, as_of_ts)
        cost_values = (
            cost_series_values(monthly_costs, metadata.current_cash_balance) if monthly_costs is not None else {}
        )

        if wf.headcount == 0:
            logger.warning("No active employees on %s; workforce KPIs marked invalid", as_of_ts.date())

        results = []
        for definition in definitions:
            if definition.formula_ref == COST_SERIES_FORMULA:
                value = cost_values[definition.id]
                message = None if value is not None else "Not enough periods in the cost series"
            elif wf.headcount == 0:
                results.append(build_value(definition, None, status=ValueStatus.INVALID_INPUT,
                                           message="No active employees", currency=metadata.currency))
                continue
            else:
                value = _evaluate(definition, wf)
                message = None if value is not None else "Missing or zero denominator"
            results.append(build_value(definition, value, message=message, currency=metadata.currency))

        missing = sum(1 for r in results if r.status != ValueStatus.COMPUTED)
        logger.info("Calculated %d KPIs for %d active employees (%d without value)",
                    len(results), wf.headcount, missing)
        return results


def calculate_kpis(
    employees: Iterable[EmployeeRecord],
    metadata: DatasetMetadata,
    kpi_ids: Sequence[str] | None = None,
    as_of: date | None = None,
    monthly_costs: Iterable[MonthlyEmployerCost] | None = None,
) -> list[KPIValue]:
    return KPIEngine().calculate(employees, metadata, kpi_ids, as_of, monthly_costs)
