"""
Acceptance Module

This module implements the acceptance strategies deciding whether a
candidate's Evaluation beats the current best one, and the scores used
to rank several acceptable candidates against each other.

Different search algorithms accept candidates under different rules; each
rule is kept as a separate, named strategy:
    any_improves:         some metric strictly improves (others may regress)
    strict_no_regression: some metric strictly improves and none regresses
    exact_guarded:        exact improves, or exact is unchanged and generous
                          or forgiveness improves
    selected_metrics:     some metric of a chosen subset strictly improves

Functions:
    any_improves, strict_no_regression, exact_guarded: Acceptance strategies
    selected_metrics:     Build the strategy for a subset of metrics
    get_strategy:         Look up a strategy by name
    improvement_score:    Sum of metric deltas
    positive_improvement: Sum of the positive metric deltas
    select_best:          Max-reduction of candidate results
"""

from typing import Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from neurosearch.evaluation import Evaluation

METRICS = ('exact', 'generous', 'forgiveness')

AcceptanceStrategy = Callable[['Evaluation', 'Evaluation'], bool]

def _deltas(candidate: 'Evaluation', best: 'Evaluation', metrics=METRICS) -> list[float]:
    return [getattr(candidate, metric) - getattr(best, metric) for metric in metrics]

def any_improves(candidate: 'Evaluation', best: 'Evaluation') -> bool:
    """Accept if some metric strictly improves, regardless of the others."""
    return any(delta > 0 for delta in _deltas(candidate, best))

def strict_no_regression(candidate: 'Evaluation', best: 'Evaluation') -> bool:
    """Accept if some metric strictly improves and none regresses."""
    deltas = _deltas(candidate, best)
    return all(delta >= 0 for delta in deltas) and any(delta > 0 for delta in deltas)

def exact_guarded(candidate: 'Evaluation', best: 'Evaluation') -> bool:
    """Accept if exact improves, or exact is unchanged and generous or forgiveness improves."""
    if candidate.exact > best.exact:
        return True
    return candidate.exact == best.exact and (candidate.generous > best.generous or
                                              candidate.forgiveness > best.forgiveness)

def selected_metrics(metrics: list[str]) -> AcceptanceStrategy:
    """
    Build a strategy accepting a candidate if any of 'metrics' strictly improves.

    Raises:
        ValueError: If a metric name is unknown or the list is empty
    """
    metrics = tuple(metrics)
    if not metrics:
        raise ValueError("at least one metric must be selected")
    for metric in metrics:
        if metric not in METRICS:
            raise ValueError(f"unknown metric '{metric}'")

    def accept(candidate: 'Evaluation', best: 'Evaluation') -> bool:
        return any(delta > 0 for delta in _deltas(candidate, best, metrics))

    accept.__name__ = f"selected_metrics({','.join(metrics)})"
    return accept

# Strategy names as used in the configuration file
_STRATEGIES = {
    'any'          : any_improves,
    'strict'       : strict_no_regression,
    'exact_guarded': exact_guarded,
}

def get_strategy(name: str, metrics: list[str] | None = None) -> AcceptanceStrategy:
    """
    Return the acceptance strategy called 'name'.

    Parameters:
        name:    One of "any", "strict", "exact_guarded" or "selected"
        metrics: Metric subset (only used by "selected")

    Raises:
        ValueError: If the name is unknown
    """
    if name == 'selected':
        return selected_metrics(metrics or list(METRICS))
    try:
        return _STRATEGIES[name]
    except KeyError:
        raise ValueError(f"unknown acceptance strategy '{name}'") from None

def improvement_score(candidate: 'Evaluation', best: 'Evaluation') -> float:
    """Sum of the metric deltas (may be negative)."""
    return sum(_deltas(candidate, best))

def positive_improvement(candidate: 'Evaluation', best: 'Evaluation') -> float:
    """Sum of the positive metric deltas only."""
    return sum(delta for delta in _deltas(candidate, best) if delta > 0)

def select_best(evaluations: list['Evaluation | None'],
                best       : 'Evaluation',
                accept     : AcceptanceStrategy,
                score      : Callable[['Evaluation', 'Evaluation'], float] = improvement_score) -> int | None:
    """
    Max-reduction over a batch of candidate results.

    Among the candidates accepted against 'best', return the index of the one
    with the highest score; ties go to the lowest index, so the outcome only
    depends on the order in which candidates were proposed, never on the
    order in which they finished.

    Parameters:
        evaluations: Candidate results (None for abandoned candidates)
        best:        Evaluation of the current best
        accept:      Acceptance strategy
        score:       Ranking among accepted candidates

    Returns:
        Index of the winner, or None if no candidate is accepted
    """
    winner, winner_score = None, None
    for index, evaluation in enumerate(evaluations):
        if evaluation is None or not accept(evaluation, best):
            continue
        candidate_score = score(evaluation, best)
        if winner is None or candidate_score > winner_score:
            winner, winner_score = index, candidate_score
    return winner
