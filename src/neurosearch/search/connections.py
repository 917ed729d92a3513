"""
Connection Search Module

This module implements a parallel search over new connections: every round
tries a batch of distinct (source, target) pairs that are not connected yet,
each on its own clone with a random weight, and commits the candidate whose
metrics improve the most.

Classes:
    ConnectionSearch: Parallel add-connection search
"""

import random

from neurosearch.evaluation        import Evaluation, Session
from neurosearch.genotype          import Blueprint, BlueprintError
from neurosearch.run.config        import Config
from neurosearch.search.acceptance import positive_improvement, select_best
from neurosearch.search.search     import Search, evaluate_with_config
from neurosearch.utils             import get_logger

logger = get_logger(__name__)

def _improves(candidate: Evaluation, best: Evaluation) -> bool:
    return positive_improvement(candidate, best) > 0

def try_connection(blueprint: Blueprint,
                   sessions : list[Session],
                   config   : Config,
                   pair     : tuple[int, int],
                   weight   : float,
                   seed     : int) -> tuple[Blueprint, Evaluation] | None:
    """
    Evaluate a clone of 'blueprint' extended by the connection 'pair' with 'weight'.

    Returns:
        The candidate and its Evaluation, or None if the connection could not be added
    """
    candidate = blueprint.clone()
    try:
        candidate.add_connection(*pair, weight)
    except BlueprintError as e:
        logger.warning(f"discarding connection {pair}: {e}")
        return None
    return candidate, evaluate_with_config(candidate, sessions, config, random.Random(seed))

class ConnectionSearch(Search):
    """
    Parallel add-connection search.

    Every round draws up to 'max_connection_attempts' distinct unconnected
    pairs, gives each a weight drawn uniformly from [-1, 1], and evaluates
    the resulting candidates concurrently. The candidate with the largest sum
    of positive metric deltas is committed if that sum is positive; ties go
    to the earliest attempt.
    """

    def _search_round(self) -> bool:
        pairs = self.best.available_connection_pairs()
        if not pairs:
            logger.debug("every possible connection already exists")
            return False

        pairs   = self._rng.sample(pairs, min(self._config.max_connection_attempts, len(pairs)))
        weights = [self._rng.uniform(-1.0, 1.0) for _ in pairs]
        seeds   = self._spawn_seeds(len(pairs))

        proposals = self._run_parallel(try_connection,
                                       [(self.best, self._sessions, self._config, pair, weight, seed)
                                        for pair, weight, seed in zip(pairs, weights, seeds)])

        evaluations = [proposal[1] if proposal is not None else None for proposal in proposals]
        winner      = select_best(evaluations, self.best_evaluation, _improves, score=positive_improvement)

        if winner is None:
            return False

        source_id, target_id = pairs[winner]
        logger.debug(f"added connection {source_id} -> {target_id} (weight {weights[winner]:.4f})")
        self.best, self.best_evaluation = proposals[winner]
        return True
