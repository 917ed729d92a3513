"""
Neural Architecture Search Module

This module implements architecture search by node insertion: a candidate is
a clone of the current best with one new neuron, of a random kind, wired
between the inputs and the outputs. Candidates may be refined by a few
hill-climbing steps before they are compared with the current best.

Classes:
    SequentialNAS: One candidate per round
    ParallelNAS:   Several candidates per round, evaluated concurrently and
                   reduced to a single winner

Functions:
    propose_architecture: Build and evaluate one candidate (runs in workers)
"""

import random

from neurosearch.evaluation           import Evaluation, Session
from neurosearch.genotype             import Blueprint, BlueprintError
from neurosearch.run.config           import Config
from neurosearch.search.acceptance    import AcceptanceStrategy, get_strategy, select_best
from neurosearch.search.hill_climbing import hill_climb
from neurosearch.search.search        import Search, evaluate_with_config
from neurosearch.utils                import get_logger

logger = get_logger(__name__)

def propose_architecture(blueprint: Blueprint,
                         sessions : list[Session],
                         config   : Config,
                         seed     : int) -> tuple[Blueprint, Evaluation] | None:
    """
    Insert a neuron of a random kind into a clone of 'blueprint' and evaluate it.

    Parameters:
        blueprint: The current best (left untouched)
        sessions:  Labeled sessions
        config:    Configuration parameters (neuron_kinds, activation_options,
                   rewire_direct_edges and the evaluation settings are used)
        seed:      Seed of the candidate's own generator

    Returns:
        The candidate and its Evaluation, or None if the insertion failed
    """
    rng       = random.Random(seed)
    candidate = blueprint.clone()
    kind      = rng.choice(config.neuron_kinds)

    try:
        neuron_id = candidate.insert_neuron_between_inputs_and_outputs(kind,
                                                                       rng,
                                                                       rewire             = config.rewire_direct_edges,
                                                                       activation_options = config.activation_options)
    except BlueprintError as e:
        logger.warning(f"discarding candidate: {e}")
        return None

    evaluation = evaluate_with_config(candidate, sessions, config, rng)
    logger.debug(f"candidate with {candidate.neurons[neuron_id].kind.value} neuron {neuron_id}: {evaluation}")
    return candidate, evaluation

class SequentialNAS(Search):
    """
    Sequential architecture search.

    Every round inserts one neuron into a clone of the committed best,
    hill-climbs its weights for 'weight_update_iterations' steps (0 disables),
    and commits it if the acceptance strategy 'config.nas_acceptance'
    prefers it:
        "exact_guarded": exact improves, or exact is unchanged and generous
                         or forgiveness improves
        "any":           some metric improves
        "selected":      some metric of 'metrics_to_optimize' improves
    """

    def __init__(self, config, rng=None, suppress_output=False):
        super().__init__(config, rng, suppress_output)
        self._accept           : AcceptanceStrategy = get_strategy(config.nas_acceptance, config.metrics_to_optimize)
        self._hill_climb_accept: AcceptanceStrategy = get_strategy(config.hill_climb_acceptance)
        if config.nas_acceptance == 'selected':
            self.tracked_metrics = tuple(config.metrics_to_optimize)

    def _hill_climbing_enabled(self) -> bool:
        return self._config.weight_update_iterations > 0

    def _refine(self, candidate: Blueprint, evaluation: Evaluation) -> tuple[Blueprint, Evaluation]:
        """
        Hill-climb the weights of a candidate for 'weight_update_iterations' steps, if enabled.
        """
        if not self._hill_climbing_enabled():
            return candidate, evaluation
        return hill_climb(candidate,
                          evaluation,
                          self._config.weight_update_iterations,
                          self._rng,
                          evaluate   = lambda blueprint: self._evaluate(blueprint, self._sessions),
                          accept     = self._hill_climb_accept,
                          max_change = self._config.max_weight_change)

    def _search_round(self) -> bool:
        [seed] = self._spawn_seeds(1)
        proposal = propose_architecture(self.best, self._sessions, self._config, seed)
        if proposal is None:
            return False

        candidate, evaluation = self._refine(*proposal)
        if not self._accept(evaluation, self.best_evaluation):
            return False

        self.best, self.best_evaluation = candidate, evaluation
        return True

class ParallelNAS(SequentialNAS):
    """
    Parallel architecture search.

    Every round proposes 'candidates_per_round' candidates (one per worker
    when unset), each built from its own clone with its own generator, and
    evaluates them concurrently. The winner is the accepted candidate with
    the largest summed metric improvement; ties go to the earliest proposal.
    If 'use_hill_climbing' is set, the winner (and only the winner) is
    hill-climbed for 'weight_update_iterations' steps.
    """

    def _hill_climbing_enabled(self) -> bool:
        return self._config.use_hill_climbing and self._config.weight_update_iterations > 0

    @property
    def candidates_per_round(self) -> int:
        return self._config.candidates_per_round or self.worker_count

    def _search_round(self) -> bool:
        seeds     = self._spawn_seeds(self.candidates_per_round)
        proposals = self._run_parallel(propose_architecture,
                                       [(self.best, self._sessions, self._config, seed) for seed in seeds])

        evaluations = [proposal[1] if proposal is not None else None for proposal in proposals]
        winner      = select_best(evaluations, self.best_evaluation, self._accept)
        if winner is None:
            return False

        candidate, evaluation = self._refine(*proposals[winner])
        if not self._accept(evaluation, self.best_evaluation):
            return False

        logger.debug(f"candidate {winner} of {len(proposals)} wins the round")
        self.best, self.best_evaluation = candidate, evaluation
        return True
