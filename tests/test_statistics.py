import numpy as np
import pandas as pd
import pytest

from orgbench.utils.statistics import average, median, percentile, standard_deviation, total, z_score


class TestMedian:
    def test_order_invariant(self):
        values = [7, 1, 5, 3, 9, 2]
        assert median(values) == median(sorted(values)) == median(list(reversed(values))) == 4.0

    def test_does_not_mutate_input(self):
        values = [3, 1, 2]
        median(values)
        assert values == [3, 1, 2]

    def test_does_not_mutate_array(self):
        arr = np.array([5.0, 1.0, 3.0])
        median(arr)
        assert arr.tolist() == [5.0, 1.0, 3.0]

    def test_odd_length(self):
        assert median([4, 1, 9]) == 4.0

    def test_empty(self):
        assert median([]) == 0.0


class TestPercentile:
    @pytest.mark.parametrize("p, expected", [(25, 3), (50, 5), (75, 8), (90, 9)])
    def test_nearest_rank(self, p, expected):
        assert percentile(list(range(1, 11)), p) == expected

    @pytest.mark.parametrize("p", [0, 10, 50, 99, 100])
    def test_empty_is_zero(self, p):
        assert percentile([], p) == 0.0

    def test_unsorted_input(self):
        assert percentile([10, 1, 7, 3, 5, 2, 9, 4, 8, 6], 50) == 5

    def test_low_p_clamps_to_first(self):
        assert percentile([3, 1, 2], 0) == 1


class TestStandardDeviation:
    def test_constant_sequence_is_exactly_zero(self):
        assert standard_deviation([4.2, 4.2, 4.2, 4.2]) == 0.0

    def test_population_formula(self):
        assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_single_value(self):
        assert standard_deviation([10]) == 0.0

    def test_accepts_series(self):
        assert standard_deviation(pd.Series([2, 4, 4, 4, 5, 5, 7, 9])) == pytest.approx(2.0)


def test_z_score_zero_stddev():
    assert z_score(123.0, 50.0, 0) == 0.0
    assert z_score(-5.0, 0.0, 0.0) == 0.0


def test_z_score():
    assert z_score(9, 5, 2) == 2.0


def test_total_and_average():
    assert total([1, 2, 3.5]) == 6.5
    assert average([1, 2, 3]) == 2.0
    assert total([]) == 0.0
    assert average([]) == 0.0
