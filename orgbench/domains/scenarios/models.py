"""Types for what-if workforce scenarios."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from orgbench.domains.workforce.structure import DepartmentGroup
from orgbench.utils.types import EmployeeID, EmployeeRecord, Money


class ScenarioType(StrEnum):
    HIRING_FREEZE = "hiring_freeze"
    COST_REDUCTION = "cost_reduction"
    GROWTH = "growth"
    TARGET_RATIO = "target_ratio"


class ScenarioAction(StrEnum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class OpenRole:
    id: str
    title: str
    department: str
    target_compensation: Money
    level: str | None = None


@dataclass(frozen=True)
class ScenarioWorkforce:
    employees: tuple[EmployeeRecord, ...]
    open_roles: tuple[OpenRole, ...] = ()


@dataclass(frozen=True)
class ScenarioParameters:
    """What to change. Only the fields the scenario type reads need a value."""
    type: ScenarioType
    reduction_pct: float | None = None
    target_groups: tuple[DepartmentGroup, ...] | None = None
    additional_fte: int | None = None
    distribution: dict[DepartmentGroup, float] | None = None
    target_ratio: float | None = None


@dataclass(frozen=True)
class SummaryMetrics:
    total_fte: float
    total_cost: Money
    cost_per_fte: Money
    revenue_per_fte: Money | None
    employee_count: int
    open_roles: int = 0
    planned_hiring_cost: Money = 0.0


@dataclass(frozen=True)
class ScenarioDelta:
    fte_change: float
    cost_savings: Money
    cost_savings_pct: float
    ratio_change: float
    planned_hiring_savings: Money = 0.0


@dataclass(frozen=True)
class AffectedEmployee:
    employee_id: EmployeeID
    department: str
    role: str | None
    total_compensation: Money
    action: ScenarioAction
    effective_date: date | None = None
    is_new: bool = False


@dataclass(frozen=True)
class MonthlyBurn:
    month: str
    baseline_cost: Money
    scenario_cost: Money
    savings: Money
    employee_count: int


@dataclass(frozen=True)
class RunwayAnalysis:
    current_cash: Money | None
    baseline_months: float | None = None
    scenario_months: float | None = None
    extension_months: float | None = None
    baseline_runout: date | None = None
    scenario_runout: date | None = None


@dataclass(frozen=True)
class YearEndProjection:
    year: int
    baseline_total: Money
    scenario_total: Money
    total_savings: Money
    avg_monthly_burn: Money


@dataclass(frozen=True)
class ScenarioResult:
    baseline: SummaryMetrics
    scenario: SummaryMetrics
    delta: ScenarioDelta
    workforce: ScenarioWorkforce
    affected: tuple[AffectedEmployee, ...] = ()
    monthly_burn: tuple[MonthlyBurn, ...] = ()
    runway: RunwayAnalysis | None = None
    year_end: YearEndProjection | None = None
