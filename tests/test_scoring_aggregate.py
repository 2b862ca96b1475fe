import pytest

from kpieval.errors import EmptyScoreSetError, InvalidScoreError, InvalidWeightError
from kpieval.models import WeightedScore
from kpieval.scoring import aggregate_weighted, grade_from_percentage, round2


class TestAggregateWeighted:
    def test_single_top_score(self):
        result = aggregate_weighted([(5, 1)])
        assert (result.total_weighted, result.max_possible, result.percentage) == (5, 5, 100)

    def test_lowest_and_highest(self):
        result = aggregate_weighted([(1, 1), (5, 1)])
        assert (result.total_weighted, result.max_possible, result.percentage) == (6, 10, 60)

    def test_weights_and_rounding(self):
        result = aggregate_weighted([WeightedScore(score=4, weight=2.0), WeightedScore(score=3, weight=1.0)])
        assert result.total_weighted == 11
        assert result.max_possible == 15
        assert result.percentage == 73.33

    def test_accepts_generators(self):
        result = aggregate_weighted((s, 0.5) for s in (2, 4))
        assert result.percentage == 60

    def test_very_large_weight(self):
        result = aggregate_weighted([(5, 1e30)])
        assert result.total_weighted == pytest.approx(5e30)
        assert result.max_possible == pytest.approx(5e30)
        assert result.percentage == 100

    def test_weights_overflowing_the_total(self):
        with pytest.raises(InvalidWeightError):
            aggregate_weighted([(5, 1e308), (5, 1e308)])

    def test_empty(self):
        with pytest.raises(EmptyScoreSetError):
            aggregate_weighted([])

    @pytest.mark.parametrize("weight", [0, -1, float("nan"), float("inf"), True, "1"])
    def test_invalid_weight(self, weight):
        with pytest.raises(InvalidWeightError):
            aggregate_weighted([(3, 1), (3, weight)])

    @pytest.mark.parametrize("score", [0, 6, 2.5, None, False])
    def test_invalid_score(self, score):
        with pytest.raises(InvalidScoreError):
            aggregate_weighted([(score, 1)])


class TestRound2:
    @pytest.mark.parametrize(
        "value, expected",
        [(2.675, 2.68), (1.005, 1.01), (66.666666, 66.67), (-1.005, -1.01), (3, 3.0), (5e30, 5e30), (1.5e300, 1.5e300)],
    )
    def test_half_up(self, value, expected):
        assert round2(value) == expected


class TestGradeFromPercentage:
    @pytest.mark.parametrize(
        "percentage, grade",
        [
            (100, "A"),
            (90, "A"),
            (89.99, "B+"),
            (85, "B+"),
            (80, "B"),
            (75, "C+"),
            (70, "C"),
            (65, "D+"),
            (60, "D"),
            (59.99, "F"),
            (0, "F"),
        ],
    )
    def test_grade_table(self, percentage, grade):
        assert grade_from_percentage(percentage) == grade
