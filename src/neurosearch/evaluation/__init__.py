"""
Evaluation Package

This package implements labeled sessions and the multi-metric evaluator.

Modules:
    session: Session class
    metrics: Evaluation class and the evaluation functions

Exported:
    Session:                     One labeled example
    Evaluation:                  Result of evaluating a network on a list of sessions
    evaluate_model_performance:  Evaluate a Blueprint on a list of sessions
    evaluate_decile_consistency: Percentage of decile-consistent sessions
    evaluate_advanced:           Evaluation plus the advanced metrics
"""

from neurosearch.evaluation.session import Session
from neurosearch.evaluation.metrics import (
    Evaluation,
    argmax_map,
    class_sensitivity,
    evaluate_advanced,
    evaluate_decile_consistency,
    evaluate_model_performance,
    is_decile_consistent,
    is_exact_match,
    is_prediction_exact_correct,
    is_within_forgiveness,
    predict_sessions,
    sample_mae,
    score_predictions,
    similarity_score,
    weighted_proximity
)

__all__ = ['Session',
           'Evaluation',
           'argmax_map',
           'class_sensitivity',
           'evaluate_advanced',
           'evaluate_decile_consistency',
           'evaluate_model_performance',
           'is_decile_consistent',
           'is_exact_match',
           'is_prediction_exact_correct',
           'is_within_forgiveness',
           'predict_sessions',
           'sample_mae',
           'score_predictions',
           'similarity_score',
           'weighted_proximity']
