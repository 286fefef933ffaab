"""Shared type definitions for the engine."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum


type EmployeeID = str
type Money = float
type MetricValue = float | None
type Percentile = int | float


class EmployeeLevel(StrEnum):
    IC = "IC"
    MANAGER = "MANAGER"
    DIRECTOR = "DIRECTOR"
    VP = "VP"
    C_LEVEL = "C_LEVEL"


class EmploymentType(StrEnum):
    FTE = "FTE"
    PART_TIME = "PART_TIME"
    CONTRACTOR = "CONTRACTOR"
    INTERN = "INTERN"


MANAGEMENT_LEVELS = frozenset({
    EmployeeLevel.MANAGER,
    EmployeeLevel.DIRECTOR,
    EmployeeLevel.VP,
    EmployeeLevel.C_LEVEL,
})


@dataclass(frozen=True)
class EmployeeRecord:
    id: EmployeeID
    department: str
    role: str | None
    total_compensation: Money
    standardized_role: str | None = None
    level: EmployeeLevel | None = None
    employment_type: EmploymentType = EmploymentType.FTE
    fte_factor: float = 1.0
    annual_salary: Money | None = None
    bonus: Money | None = None
    equity: Money | None = None
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    manager_id: EmployeeID | None = None

    @property
    def is_active(self) -> bool:
        return self.end_date is None


@dataclass(frozen=True)
class DatasetMetadata:
    currency: str = "EUR"
    total_revenue: Money | None = None
    industry: str | None = None
    region: str | None = None
    company_size: str | None = None
    current_cash_balance: Money | None = None
