"""Shared utilities for the analytics engine."""

from orgbench.utils.statistics import average, median, percentile, standard_deviation, total, z_score
from orgbench.utils.transforms import employees_to_frame, infer_level
from orgbench.utils.validators import validate_dataframe
from orgbench.utils.types import DatasetMetadata, EmployeeLevel, EmployeeRecord, EmploymentType
