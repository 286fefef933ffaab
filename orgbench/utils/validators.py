"""Data validation utilities using pandera."""

import pandera as pa
import pandas as pd
from pandera import Column, Check, DataFrameSchema

from orgbench.errors import InvalidInputError
from orgbench.utils.types import EmployeeLevel, EmploymentType


employee_schema = pa.DataFrameSchema(
    {
        "employee_id": Column(str, Check.str_length(min_value=1), unique=True),
        "department": Column(str, nullable=False),
        "role": Column(str, nullable=True),
        "level": Column(str, Check.isin([lvl.value for lvl in EmployeeLevel]), nullable=True),
        "employment_type": Column(str, Check.isin([t.value for t in EmploymentType])),
        "fte_factor": Column(float, Check.in_range(0, 1, include_min=False), coerce=True),
        "annual_salary": Column(float, Check.greater_than_or_equal_to(0), nullable=True, coerce=True),
        "bonus": Column(float, Check.greater_than_or_equal_to(0), nullable=True, coerce=True),
        "equity": Column(float, Check.greater_than_or_equal_to(0), nullable=True, coerce=True),
        "total_compensation": Column(float, Check.greater_than_or_equal_to(0), coerce=True),
        "location": Column(str, nullable=True),
        "start_date": Column(pa.DateTime, nullable=True, coerce=True),
        "end_date": Column(pa.DateTime, nullable=True, coerce=True),
        "manager_id": Column(str, nullable=True),
    },
    name="employees",
    strict=False,
)


def describe_failures(exc: pa.errors.SchemaErrors) -> list[str]:
    errors = []
    for _, row in exc.failure_cases.iterrows():
        match row.to_dict():
            case {"column": col, "check": check, "failure_case": val}:
                errors.append(f"Column '{col}' failed check '{check}': {val}")
            case failure:
                errors.append(f"Validation failure: {failure}")
    return errors


def validate_dataframe(df: pd.DataFrame, schema: DataFrameSchema) -> pd.DataFrame:
    """Validate a DataFrame against a pandera schema and return the coerced frame.

    All failures are collected (lazy validation) and raised together as one
    InvalidInputError so callers see every bad record at once.
    """
    try:
        return schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as exc:
        errors = describe_failures(exc)
        raise InvalidInputError(f"{schema.name or 'dataframe'} failed validation: " + "; ".join(errors)) from exc
