"""
Metrics Module

This module implements the metric evaluator: it runs a Blueprint over a list
of labeled sessions and reduces the predictions to accuracy metrics on a
0-100 scale.

No single number captures "almost right but not exact" predictions fairly,
so the evaluator reports a family of metrics:
    exact:       % of sessions whose most probable output is the expected class
    generous:    average similarity (1 - mean absolute error, as a percentage)
    forgiveness: % of sessions where every expected value lies within a
                 relative tolerance band of the prediction
Companion counters (exact errors, average generous error, forgiveness errors)
are reported alongside them.

Classes:
    Evaluation: Result of evaluating a network on a list of sessions

Functions:
    evaluate_model_performance:  Evaluate a Blueprint on a list of sessions
    evaluate_decile_consistency: Percentage of decile-consistent sessions
    evaluate_advanced:           Base evaluation plus the advanced metrics
    predict_sessions:            Forward pass for each session
    score_predictions:           Reduce predictions to an Evaluation
    and the per-session helpers they are built from
"""

import numpy as np
import random
from dataclasses import dataclass
from typing      import TYPE_CHECKING

from neurosearch.evaluation.session import Session
from neurosearch.phenotype          import Network, softmax

if TYPE_CHECKING:
    from neurosearch.genotype import Blueprint

DECILE_STEP              = 0.1
EXACT_EPSILON            = 1e-6
SENSITIVE_CLASS_CUTOFF   = 0.8
SENSITIVE_PENALTY_FACTOR = 2.0
MIN_PROXIMITY_WEIGHT     = 0.1

@dataclass(frozen=True)
class Evaluation:
    """
    Result of evaluating a network on a list of sessions.

    Public Attributes:
        exact:                  Exact accuracy (0-100)
        generous:               Generous accuracy (0-100)
        forgiveness:            Forgiveness accuracy (0-100)
        exact_errors:           Number of sessions with the wrong most probable output
        average_generous_error: Average of (100 - similarity) over the sessions
        forgiveness_errors:     Number of sessions outside the tolerance band

    Public Properties:
        metrics:    The three accuracy metrics as a tuple
        mean_score: Arithmetic mean of the three accuracy metrics
    """
    exact                 : float = 0.0
    generous              : float = 0.0
    forgiveness           : float = 0.0
    exact_errors          : int   = 0
    average_generous_error: float = 0.0
    forgiveness_errors    : int   = 0

    @property
    def metrics(self) -> tuple[float, float, float]:
        return (self.exact, self.generous, self.forgiveness)

    @property
    def mean_score(self) -> float:
        return (self.exact + self.generous + self.forgiveness) / 3.0

    def __str__(self):
        return f"exact={self.exact:.2f}%, generous={self.generous:.2f}%, forgiveness={self.forgiveness:.2f}%"

# ======================================================================
# Per-session helpers
# ======================================================================

def argmax_map(values: dict[int, float]) -> int | None:
    """
    Return the key holding the largest value; ties resolve to the lowest key.
    Returns None for an empty mapping.
    """
    if not values:
        return None
    return min(values, key=lambda k: (-values[k], k))

def is_exact_match(predicted: dict[int, float], expected: dict[int, float]) -> bool:
    """
    Whether the most probable output (under a softmax of the predictions)
    is the expected class.
    """
    predicted_class = argmax_map(softmax(predicted))
    return predicted_class is not None and predicted_class == argmax_map(expected)

def is_prediction_exact_correct(predicted: dict[int, float],
                                expected : dict[int, float],
                                epsilon  : float = EXACT_EPSILON) -> bool:
    """
    Whether every expected value is matched by the prediction within 'epsilon'.
    """
    for key, expected_value in expected.items():
        if key not in predicted or abs(predicted[key] - expected_value) > epsilon:
            return False
    return True

def sample_mae(predicted: dict[int, float], expected: dict[int, float]) -> float:
    """
    Mean absolute error over the expected outputs.
    A missing prediction counts as an error of 1.0 (outputs are normalized to [0, 1]).
    """
    if not expected:
        return 0.0
    errors = [abs(predicted[k] - v) if k in predicted else 1.0 for k, v in expected.items()]
    return float(np.mean(errors))

def similarity_score(predicted: dict[int, float], expected: dict[int, float]) -> float:
    """
    Similarity between prediction and target as a percentage: (1 - MAE) * 100, clipped to [0, 100].
    """
    if not expected:
        return 0.0
    similarity = (1.0 - sample_mae(predicted, expected)) * 100.0
    return max(0.0, min(100.0, similarity))

def is_within_forgiveness(predicted: dict[int, float], expected: dict[int, float], threshold: float) -> bool:
    """
    Whether every expected value 'e' lies within [e*(1-t), e*(1+t)] of the
    corresponding prediction; a missing prediction fails the session.
    """
    for key, expected_value in expected.items():
        if key not in predicted:
            return False
        low, high = sorted((expected_value * (1 - threshold), expected_value * (1 + threshold)))
        if not low <= predicted[key] <= high:
            return False
    return True

def is_decile_consistent(predicted: dict[int, float], expected: dict[int, float]) -> bool:
    """
    Whether the absolute errors of all outputs fall in the same decile bucket
    (0-9, capped) as the error of the first output (by ascending ID).
    A missing prediction fails the session.
    """
    reference = None
    for key in sorted(expected):
        if key not in predicted:
            return False
        decile = min(int(abs(predicted[key] - expected[key]) / DECILE_STEP), 9)
        if reference is None:
            reference = decile
        elif decile != reference:
            return False
    return True

def weighted_proximity(predicted: dict[int, float], expected: dict[int, float]) -> float:
    """
    1 minus the mean absolute error weighted by max(expected value, 0.1);
    outputs missing from the prediction are ignored.
    """
    total_difference, total_weight = 0.0, 0.0
    for key, expected_value in expected.items():
        if key not in predicted:
            continue
        weight            = max(expected_value, MIN_PROXIMITY_WEIGHT)
        total_difference += abs(predicted[key] - expected_value) * weight
        total_weight     += weight
    if total_weight == 0:
        return 0.0
    return 1.0 - total_difference / total_weight

def class_sensitivity(predicted: dict[int, float], expected: dict[int, float]) -> float:
    """
    1 minus the average penalty per output, floored at 0. Errors on outputs
    whose expected value exceeds 0.8 are doubled; a missing prediction costs 2.
    """
    if not expected:
        return 0.0
    penalty = 0.0
    for key, expected_value in expected.items():
        if key not in predicted:
            penalty += SENSITIVE_PENALTY_FACTOR
            continue
        difference = abs(predicted[key] - expected_value)
        penalty   += difference * SENSITIVE_PENALTY_FACTOR if expected_value > SENSITIVE_CLASS_CUTOFF else difference
    return max(0.0, 1.0 - penalty / len(expected))

# ======================================================================
# Evaluation over a list of sessions
# ======================================================================

def predict_sessions(blueprint      : 'Blueprint',
                     sessions       : list[Session],
                     rng            : random.Random | None = None,
                     dropout_enabled: bool = True,
                     reset_state    : bool = False) -> list[dict[int, float]]:
    """
    Run one forward pass per session and return the output distributions.

    Neuron state is updated in place on 'blueprint' (evaluate clones to keep
    a committed graph untouched).

    Parameters:
        blueprint:       The graph to run
        sessions:        Labeled sessions
        rng:             Source of randomness for dropout neurons
        dropout_enabled: Whether dropout neurons are active
        reset_state:     Whether to zero the network state before each session

    Returns:
        One mapping (output ID -> probability) per session
    """
    network = Network(blueprint, rng, dropout_enabled)
    return [network.forward_pass(session.inputs, session.timesteps, reset=reset_state) for session in sessions]

def score_predictions(predictions          : list[dict[int, float]],
                      sessions             : list[Session],
                      forgiveness_threshold: float) -> Evaluation:
    """
    Reduce per-session predictions to an Evaluation.
    An empty list of sessions yields an all-zero Evaluation.
    """
    if not sessions:
        return Evaluation()

    exact_correct, forgiveness_correct, total_similarity = 0, 0, 0.0
    for predicted, session in zip(predictions, sessions):
        expected = session.expected_outputs
        if is_exact_match(predicted, expected):
            exact_correct += 1
        if is_within_forgiveness(predicted, expected, forgiveness_threshold):
            forgiveness_correct += 1
        total_similarity += similarity_score(predicted, expected)

    n        = len(sessions)
    generous = total_similarity / n
    return Evaluation(exact                  = exact_correct / n * 100.0,
                      generous               = generous,
                      forgiveness            = forgiveness_correct / n * 100.0,
                      exact_errors           = n - exact_correct,
                      average_generous_error = 100.0 - generous,
                      forgiveness_errors     = n - forgiveness_correct)

def evaluate_model_performance(blueprint            : 'Blueprint',
                               sessions             : list[Session],
                               forgiveness_threshold: float = 0.1,
                               rng                  : random.Random | None = None,
                               dropout_enabled      : bool = True,
                               reset_state          : bool = False) -> Evaluation:
    """
    Evaluate a Blueprint on a list of sessions.

    Parameters:
        blueprint:             The graph to evaluate
        sessions:              Labeled sessions
        forgiveness_threshold: Relative tolerance of the forgiveness metric
        rng:                   Source of randomness for dropout neurons
        dropout_enabled:       Whether dropout neurons are active
        reset_state:           Whether to zero the network state before each session

    Returns:
        The Evaluation
    """
    predictions = predict_sessions(blueprint, sessions, rng, dropout_enabled, reset_state)
    return score_predictions(predictions, sessions, forgiveness_threshold)

def evaluate_decile_consistency(blueprint      : 'Blueprint',
                                sessions       : list[Session],
                                rng            : random.Random | None = None,
                                dropout_enabled: bool = True,
                                reset_state    : bool = False) -> float:
    """
    Percentage of sessions whose per-output errors all fall in one decile bucket.
    """
    if not sessions:
        return 0.0
    predictions = predict_sessions(blueprint, sessions, rng, dropout_enabled, reset_state)
    consistent  = sum(1 for p, s in zip(predictions, sessions) if is_decile_consistent(p, s.expected_outputs))
    return consistent / len(sessions) * 100.0

def evaluate_advanced(blueprint            : 'Blueprint',
                      sessions             : list[Session],
                      forgiveness_threshold: float = 0.1,
                      rng                  : random.Random | None = None,
                      dropout_enabled      : bool = True,
                      reset_state          : bool = False) -> tuple[Evaluation, dict[str, float]]:
    """
    Evaluate a Blueprint and additionally compute the advanced metrics.

    Returns:
        The Evaluation and a dictionary with the session averages of
        'weighted_proximity' and 'class_sensitivity' (both on a 0-1 scale)
        and 'decile_consistency' (0-100)
    """
    predictions = predict_sessions(blueprint, sessions, rng, dropout_enabled, reset_state)
    evaluation  = score_predictions(predictions, sessions, forgiveness_threshold)

    advanced = {'weighted_proximity': 0.0, 'class_sensitivity': 0.0, 'decile_consistency': 0.0}
    if not sessions:
        return evaluation, advanced

    for predicted, session in zip(predictions, sessions):
        expected = session.expected_outputs
        advanced['weighted_proximity'] += weighted_proximity(predicted, expected)
        advanced['class_sensitivity']  += class_sensitivity(predicted, expected)
        advanced['decile_consistency'] += 100.0 if is_decile_consistent(predicted, expected) else 0.0

    n = len(sessions)
    return evaluation, {name: total / n for name, total in advanced.items()}
