"""Conversions from in-memory records to analysis frames."""

import logging
import re
from collections.abc import Iterable
from datetime import date

import pandas as pd

from orgbench.utils.types import EmployeeLevel, EmployeeRecord
from orgbench.utils.validators import employee_schema, validate_dataframe

logger = logging.getLogger(__name__)

EMPLOYEE_COLUMNS = [
    "employee_id", "department", "role", "standardized_role", "level",
    "employment_type", "fte_factor", "annual_salary", "bonus", "equity",
    "total_compensation", "location", "start_date", "end_date", "manager_id",
]


def infer_level(role: str | None) -> EmployeeLevel | None:
    """Derive a coarse seniority level from a free-text role title."""
    if not role:
        return None
    lower = role.lower()
    if re.search(r"\b(ceo|cfo|cto|coo|cpo|cro|cmo|chief)\b", lower):
        return EmployeeLevel.C_LEVEL
    if re.search(r"\bvp\b|\bvice president\b", lower):
        return EmployeeLevel.VP
    if re.search(r"\bdirector\b|\bhead of\b", lower):
        return EmployeeLevel.DIRECTOR
    if re.search(r"\bmanager\b|\blead\b", lower):
        return EmployeeLevel.MANAGER
    return EmployeeLevel.IC


def _record_to_row(record: EmployeeRecord) -> dict:
    level = record.level or infer_level(record.role)
    return {
        "employee_id": str(record.id),
        "department": record.department,
        "role": record.role,
        "standardized_role": record.standardized_role,
        "level": level.value if level else None,
        "employment_type": record.employment_type.value,
        "fte_factor": record.fte_factor,
        "annual_salary": record.annual_salary,
        "bonus": record.bonus,
        "equity": record.equity,
        "total_compensation": record.total_compensation,
        "location": record.location,
        "start_date": record.start_date,
        "end_date": record.end_date,
        "manager_id": record.manager_id,
    }


def employees_to_frame(employees: Iterable[EmployeeRecord]) -> pd.DataFrame:
    """Build a validated employee DataFrame, one row per record."""
    df = pd.DataFrame([_record_to_row(e) for e in employees], columns=EMPLOYEE_COLUMNS)
    for col in ("start_date", "end_date"):
        df[col] = pd.to_datetime(df[col], errors="coerce")
    df = validate_dataframe(df, employee_schema)
    logger.debug("Built employee frame with %d rows", len(df))
    return df


def resolve_as_of(as_of: date | None) -> pd.Timestamp:
    if as_of is None:
        return pd.Timestamp.now().normalize()
    return pd.Timestamp(as_of)


def active_on(df: pd.DataFrame, as_of: pd.Timestamp) -> pd.Series:
    """Mask of employees employed on the given date."""
    started = df["start_date"].isna() | (df["start_date"] <= as_of)
    not_ended = df["end_date"].isna() | (df["end_date"] > as_of)
    return started & not_ended
