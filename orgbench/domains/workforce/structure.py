"""Department rollups and structural ratios."""

import re
from dataclasses import dataclass
from enum import StrEnum

import pandas as pd

from orgbench.utils.types import MANAGEMENT_LEVELS, EmployeeLevel


class DepartmentGroup(StrEnum):
    RD = "R&D"
    GTM = "GTM"
    GA = "G&A"
    OPERATIONS = "Operations"
    OTHER = "Other"


RD_PATTERN = re.compile(r"eng|product|design|data|\bqa\b|r&d|tech|develop")
GTM_PATTERN = re.compile(r"sales|market|customer|\bcs\b|gtm|sdr|partner|revenue|account(?!ing)|commercial")
GA_PATTERN = re.compile(r"g&a|financ|accounting|\bhr\b|legal|\bit\b|admin|recruit|people|talent|executive|c-level")
OPERATIONS_PATTERN = re.compile(r"\bops\b|operation|logistic|supply|manufactur|facilit|production")


def department_group(department: str | None) -> DepartmentGroup:
    if not isinstance(department, str):
        return DepartmentGroup.OTHER
    match department.lower().strip():
        case d if RD_PATTERN.search(d):
            return DepartmentGroup.RD
        case d if GTM_PATTERN.search(d):
            return DepartmentGroup.GTM
        case d if GA_PATTERN.search(d):
            return DepartmentGroup.GA
        case d if OPERATIONS_PATTERN.search(d):
            return DepartmentGroup.OPERATIONS
        case _:
            return DepartmentGroup.OTHER


@dataclass(frozen=True)
class DepartmentStats:
    group: DepartmentGroup
    employee_count: int
    fte: float
    cost: float
    avg_compensation: float
    cost_share: float


def department_breakdown(active: pd.DataFrame) -> dict[DepartmentGroup, DepartmentStats]:
    """Headcount, FTE and cost per department group for active employees."""
    if active.empty:
        return {}
    total_cost = float(active["total_compensation"].sum())
    grouped = (
        active.assign(group=active["department"].map(department_group))
        .groupby("group")
        .agg(employee_count=("employee_id", "size"), fte=("fte_factor", "sum"), cost=("total_compensation", "sum"))
    )
    breakdown = {}
    for group, row in grouped.iterrows():
        fte, cost = float(row["fte"]), float(row["cost"])
        breakdown[DepartmentGroup(group)] = DepartmentStats(
            group=DepartmentGroup(group),
            employee_count=int(row["employee_count"]),
            fte=fte,
            cost=cost,
            avg_compensation=cost / fte if fte > 0 else 0.0,
            cost_share=cost / total_cost * 100 if total_cost > 0 else 0.0,
        )
    return breakdown


def rd_to_gtm_ratio(breakdown: dict[DepartmentGroup, DepartmentStats]) -> float:
    """R&D FTE per GTM FTE; 0 when there is no GTM headcount."""
    rd = breakdown.get(DepartmentGroup.RD)
    gtm = breakdown.get(DepartmentGroup.GTM)
    if gtm is None or gtm.fte == 0:
        return 0.0
    return (rd.fte if rd else 0.0) / gtm.fte


def manager_to_ic_ratio(active: pd.DataFrame) -> float:
    managers = active["level"].isin([lvl.value for lvl in MANAGEMENT_LEVELS]).sum()
    ics = (active["level"].isna() | (active["level"] == EmployeeLevel.IC.value)).sum()
    if ics == 0:
        return 0.0
    return float(managers / ics)


def direct_report_counts(active: pd.DataFrame) -> pd.Series:
    """Number of active direct reports per manager id."""
    return active["manager_id"].dropna().value_counts()


def average_span_of_control(active: pd.DataFrame) -> float:
    counts = direct_report_counts(active)
    if counts.empty:
        return 0.0
    return float(counts.sum() / len(counts))
