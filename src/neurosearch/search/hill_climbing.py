"""
Hill-Climbing Module

This module implements weight-level hill-climbing: a candidate is a clone of
the current best with one connection weight nudged by a small uniform
amount, and it replaces the current best if the acceptance strategy says
its Evaluation is better.

Classes:
    HillClimber: Search orchestrator running hill-climbing rounds

Functions:
    perturb_random_weight: Nudge one random connection weight in place
    hill_climb:            Run a number of hill-climbing steps on a graph
"""

import random
from typing import Callable

from neurosearch.evaluation        import Evaluation
from neurosearch.genotype          import Blueprint
from neurosearch.search.acceptance import AcceptanceStrategy, get_strategy
from neurosearch.search.search     import Search
from neurosearch.utils             import get_logger

logger = get_logger(__name__)

def perturb_random_weight(blueprint: Blueprint, rng: random.Random, max_change: float) -> bool:
    """
    Add a value drawn uniformly from [-max_change, max_change] to one
    connection weight of a random non-input neuron that has connections.

    Returns:
        bool: False if no neuron has any connection (graph left unchanged)
    """
    candidates = [nid for nid in sorted(blueprint.neurons)
                  if not blueprint.is_input_node(nid) and blueprint.neurons[nid].connections]
    if not candidates:
        return False

    neuron     = blueprint.neurons[rng.choice(candidates)]
    connection = rng.choice(neuron.connections)
    connection.weight += rng.uniform(-max_change, max_change)
    return True

def hill_climb(blueprint : Blueprint,
               evaluation: Evaluation,
               steps     : int,
               rng       : random.Random,
               evaluate  : Callable[[Blueprint], Evaluation],
               accept    : AcceptanceStrategy,
               max_change: float) -> tuple[Blueprint, Evaluation]:
    """
    Run 'steps' hill-climbing steps starting from 'blueprint'.

    Each step perturbs one weight of a clone of the current graph, evaluates
    it, and keeps it if 'accept' prefers it over the current Evaluation.
    'blueprint' itself is never modified.

    Parameters:
        blueprint:  The starting graph
        evaluation: Its Evaluation
        steps:      Number of steps
        rng:        Source of randomness
        evaluate:   Function evaluating a graph
        accept:     Acceptance strategy
        max_change: Largest absolute weight change of a step

    Returns:
        The best graph found and its Evaluation
    """
    for _ in range(steps):
        candidate = blueprint.clone()
        if not perturb_random_weight(candidate, rng, max_change):
            break
        candidate_evaluation = evaluate(candidate)
        if accept(candidate_evaluation, evaluation):
            blueprint, evaluation = candidate, candidate_evaluation
    return blueprint, evaluation

class HillClimber(Search):
    """
    Weight-level hill-climbing search.

    Every round perturbs one random connection weight of a clone of the
    committed best, and commits the clone if it is accepted. The acceptance
    strategy is 'config.hill_climb_acceptance': "strict" (some metric
    improves and none regresses) or "any" (some metric improves).

    Public Methods:
        step(): One hill-climbing step from a given graph (usable by other searches)
    """

    def __init__(self, config, rng=None, suppress_output=False):
        super().__init__(config, rng, suppress_output)
        self._accept: AcceptanceStrategy = get_strategy(config.hill_climb_acceptance)

    def step(self, blueprint: Blueprint, evaluation: Evaluation) -> tuple[Blueprint, Evaluation, bool]:
        """
        Run one hill-climbing step on the current sessions.

        Returns:
            The winning graph, its Evaluation, and whether the candidate was accepted
        """
        candidate = blueprint.clone()
        if not perturb_random_weight(candidate, self._rng, self._config.max_weight_change):
            logger.debug("no connection to perturb")
            return blueprint, evaluation, False

        candidate_evaluation = self._evaluate(candidate, self._sessions)
        if self._accept(candidate_evaluation, evaluation):
            return candidate, candidate_evaluation, True
        return blueprint, evaluation, False

    def _search_round(self) -> bool:
        blueprint, evaluation, accepted = self.step(self.best, self.best_evaluation)
        if accepted:
            self.best, self.best_evaluation = blueprint, evaluation
        return accepted
