from datetime import date

import pytest

from orgbench.domains.workforce import (
    RetentionRisk,
    TenureBucket,
    format_tenure,
    tenure_bucket,
    tenure_metrics,
    tenure_months,
)
from orgbench.utils.types import EmployeeRecord


@pytest.fixture
def metrics(employees, as_of):
    return tenure_metrics(employees, as_of)


def test_months_ignore_day_of_month():
    assert tenure_months(date(2023, 9, 30), date(2024, 6, 1)) == 9
    assert tenure_months(None, date(2024, 6, 1)) is None


@pytest.mark.parametrize("months, expected", [
    (0, TenureBucket.UNDER_6_MONTHS),
    (5, TenureBucket.UNDER_6_MONTHS),
    (6, TenureBucket.SIX_TO_12_MONTHS),
    (12, TenureBucket.ONE_TO_2_YEARS),
    (24, TenureBucket.TWO_TO_5_YEARS),
    (59, TenureBucket.TWO_TO_5_YEARS),
    (60, TenureBucket.OVER_5_YEARS),
])
def test_bucket_boundaries(months, expected):
    assert tenure_bucket(months) == expected


class TestTenureMetrics:
    def test_average_and_median(self, metrics):
        # e1 53, e2 9, m1 63, s1 25, c1 77 months; the leaver is excluded
        assert metrics.avg_months == pytest.approx(45.4)
        assert metrics.avg_years == pytest.approx(45.4 / 12)
        assert metrics.median_months == 53

    def test_distribution(self, metrics):
        assert metrics.distribution == {
            TenureBucket.UNDER_6_MONTHS: 0,
            TenureBucket.SIX_TO_12_MONTHS: 1,
            TenureBucket.ONE_TO_2_YEARS: 0,
            TenureBucket.TWO_TO_5_YEARS: 2,
            TenureBucket.OVER_5_YEARS: 2,
        }

    def test_by_department(self, metrics):
        engineering = metrics.by_department["Engineering"]
        assert engineering.employee_count == 3
        assert engineering.avg_months == pytest.approx(125 / 3)
        assert metrics.by_department["Sales"].avg_years == pytest.approx(25 / 12)
        assert "Marketing" not in metrics.by_department

    def test_by_level(self, metrics):
        assert metrics.by_level["IC"].employee_count == 3
        assert metrics.by_level["IC"].avg_months == pytest.approx(29)
        assert metrics.by_level["MANAGER"].avg_months == 63

    def test_retention_risk(self, metrics):
        assert metrics.retention_risk[RetentionRisk.HIGH] == []
        assert metrics.retention_risk[RetentionRisk.MEDIUM] == ["e2"]
        assert sorted(metrics.retention_risk[RetentionRisk.LOW]) == ["c1", "e1", "m1", "s1"]

    def test_recent_hire_is_high_risk(self, as_of):
        records = [EmployeeRecord("n1", "Sales", "SDR", 50_000, start_date=date(2024, 3, 15))]
        metrics = tenure_metrics(records, as_of)
        assert metrics.retention_risk[RetentionRisk.HIGH] == ["n1"]
        assert metrics.distribution[TenureBucket.UNDER_6_MONTHS] == 1

    def test_missing_level_grouped_as_unknown(self, as_of):
        records = [EmployeeRecord("a", "Sales", None, 50_000, start_date=date(2022, 6, 1))]
        assert tenure_metrics(records, as_of).by_level["Unknown"].avg_months == 24

    def test_future_start_not_counted(self, as_of):
        records = [
            EmployeeRecord("a", "Sales", "SDR", 50_000, start_date=date(2024, 1, 1)),
            EmployeeRecord("b", "Sales", "SDR", 50_000, start_date=date(2024, 9, 1)),
        ]
        assert tenure_metrics(records, as_of).avg_months == 5

    def test_none_without_start_dates(self, as_of):
        records = [EmployeeRecord("a", "Sales", "SDR", 50_000)]
        assert tenure_metrics(records, as_of) is None
        assert tenure_metrics([], as_of) is None


@pytest.mark.parametrize("months, expected", [
    (0.5, "Less than 1 month"),
    (1, "1 month"),
    (7, "7 months"),
    (12, "1 year"),
    (36, "3 years"),
    (29, "2y 5m"),
])
def test_format_tenure(months, expected):
    assert format_tenure(months) == expected
