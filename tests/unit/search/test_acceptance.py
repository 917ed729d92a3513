"""
Unit tests for neurosearch.search.acceptance module.
"""

import pytest

from neurosearch.evaluation import Evaluation
from neurosearch.search     import (
    any_improves,
    exact_guarded,
    get_strategy,
    improvement_score,
    positive_improvement,
    select_best,
    selected_metrics,
    strict_no_regression,
)


BEST = Evaluation(exact=50.0, generous=60.0, forgiveness=40.0)


# ============================================================================
# Test Strategies
# ============================================================================

class TestAnyImproves:
    """Test the any_improves strategy."""

    def test_one_metric_up_others_down(self):
        """Test that a single improving metric is enough."""
        assert any_improves(Evaluation(49.0, 61.0, 10.0), BEST)

    def test_equal_is_rejected(self):
        """Test that an equal evaluation is not an improvement."""
        assert not any_improves(BEST, BEST)


class TestStrictNoRegression:
    """Test the strict_no_regression strategy."""

    def test_improvement_without_regression(self):
        """Test that an improvement with the others unchanged is accepted."""
        assert strict_no_regression(Evaluation(50.0, 61.0, 40.0), BEST)

    def test_any_regression_rejects(self):
        """Test that any regressing metric rejects the candidate."""
        assert not strict_no_regression(Evaluation(75.0, 61.0, 39.0), BEST)

    def test_equal_is_rejected(self):
        """Test that an equal evaluation is not an improvement."""
        assert not strict_no_regression(BEST, BEST)


class TestExactGuarded:
    """Test the exact_guarded strategy."""

    def test_exact_improvement_wins(self):
        """Test that a higher exact is accepted even if the others regress."""
        assert exact_guarded(Evaluation(75.0, 0.0, 0.0), BEST)

    def test_equal_exact_needs_secondary_improvement(self):
        """Test that with equal exact, generous or forgiveness must improve."""
        assert exact_guarded(Evaluation(50.0, 60.5, 0.0), BEST)
        assert exact_guarded(Evaluation(50.0, 0.0, 45.0), BEST)
        assert not exact_guarded(BEST, BEST)

    def test_exact_regression_rejects(self):
        """Test that a lower exact is never accepted."""
        assert not exact_guarded(Evaluation(25.0, 100.0, 100.0), BEST)


class TestSelectedMetrics:
    """Test selected_metrics and get_strategy."""

    def test_only_selected_metrics_count(self):
        """Test that improvements of unselected metrics are ignored."""
        accept = selected_metrics(['generous'])

        assert accept(Evaluation(0.0, 61.0, 0.0), BEST)
        assert not accept(Evaluation(100.0, 60.0, 100.0), BEST)

    def test_unknown_metric_raises(self):
        """Test that an unknown metric name raises ValueError."""
        with pytest.raises(ValueError):
            selected_metrics(['speed'])

    def test_empty_selection_raises(self):
        """Test that an empty selection raises ValueError."""
        with pytest.raises(ValueError):
            selected_metrics([])

    def test_get_strategy_by_name(self):
        """Test the strategy lookup."""
        assert get_strategy('any') is any_improves
        assert get_strategy('strict') is strict_no_regression
        assert get_strategy('exact_guarded') is exact_guarded
        assert get_strategy('selected', ['exact'])(Evaluation(51.0, 0.0, 0.0), BEST)

    def test_get_strategy_unknown_raises(self):
        """Test that an unknown strategy name raises ValueError."""
        with pytest.raises(ValueError):
            get_strategy('greedy')


# ============================================================================
# Test Scores and Reduction
# ============================================================================

class TestScores:
    """Test improvement_score and positive_improvement."""

    def test_improvement_score_sums_deltas(self):
        """Test that improvement_score sums all deltas, negative ones included."""
        assert improvement_score(Evaluation(60.0, 50.0, 40.0), BEST) == pytest.approx(0.0)

    def test_positive_improvement_ignores_losses(self):
        """Test that positive_improvement only sums gains."""
        assert positive_improvement(Evaluation(60.0, 50.0, 45.0), BEST) == pytest.approx(15.0)


class TestSelectBest:
    """Test the select_best reduction."""

    def test_highest_score_wins(self):
        """Test that the accepted candidate with the highest score wins."""
        evaluations = [Evaluation(55.0, 60.0, 40.0), Evaluation(75.0, 60.0, 40.0), Evaluation(60.0, 60.0, 40.0)]

        assert select_best(evaluations, BEST, strict_no_regression) == 1

    def test_tie_goes_to_lowest_index(self):
        """Test that equal scores resolve to the earliest candidate."""
        evaluations = [Evaluation(50.0, 60.0, 40.0), Evaluation(55.0, 60.0, 40.0), Evaluation(50.0, 65.0, 40.0)]

        assert select_best(evaluations, BEST, strict_no_regression) == 1

    def test_abandoned_and_rejected_skipped(self):
        """Test that None entries and rejected candidates never win."""
        evaluations = [None, Evaluation(100.0, 0.0, 0.0), Evaluation(50.0, 60.0, 41.0)]

        assert select_best(evaluations, BEST, strict_no_regression) == 2

    def test_no_winner(self):
        """Test that None is returned when nothing is accepted."""
        assert select_best([None, BEST], BEST, any_improves) is None
        assert select_best([], BEST, any_improves) is None

    def test_custom_score(self):
        """Test that the ranking function can be replaced."""
        evaluations = [Evaluation(60.0, 0.0, 0.0), Evaluation(55.0, 60.0, 40.0)]

        assert select_best(evaluations, BEST, any_improves, score=positive_improvement) == 0
        assert select_best(evaluations, BEST, any_improves, score=improvement_score) == 1
