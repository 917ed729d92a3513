"""
Single-Item Learning Module

This module implements a batched multi-operator local search that learns
one session at a time: for every session of a batch, a number of random
edits are tried on isolated clones and judged on that session alone. The
edit that helped its session the most is then committed, provided the whole
set of sessions agrees.

Classes:
    SingleItemLearner: Batched single-session local search

Functions:
    apply_operator:   Apply one named edit to a graph
    attempt_operator: Try one random edit on a clone (runs in workers)
"""

import random

from neurosearch.evaluation        import Evaluation, Session
from neurosearch.genotype          import Blueprint, BlueprintError
from neurosearch.run.config        import Config
from neurosearch.search.acceptance import improvement_score, strict_no_regression
from neurosearch.search.search     import Search, evaluate_with_config
from neurosearch.utils             import get_logger

logger = get_logger(__name__)

OPERATORS = ('insert_neuron', 'add_connection', 'modify_activation', 'remove_connection', 'adjust_weight')

def apply_operator(blueprint: Blueprint, operator: str, config: Config, rng: random.Random) -> bool:
    """
    Apply the edit called 'operator' to 'blueprint' in place.

    Parameters:
        blueprint: The graph to edit
        operator:  One of OPERATORS
        config:    Configuration parameters
        rng:       Source of randomness

    Returns:
        bool: False if there was nothing to apply the edit to (graph left unchanged)

    Raises:
        ValueError:      If the operator is unknown
        StructuralError: If the edit is illegal
    """
    if operator == 'insert_neuron':
        kind = rng.choice(config.neuron_kinds)
        blueprint.insert_neuron_with_random_connections(kind, rng, config.activation_options)
        return True

    if operator == 'add_connection':
        pair = blueprint.random_connection_pair(rng)
        if pair is None:
            return False
        blueprint.add_connection(*pair, rng.uniform(config.min_weight, config.max_weight))
        return True

    if operator == 'modify_activation':
        neuron_id = blueprint.random_hidden_neuron(rng)
        if neuron_id is None:
            return False
        blueprint.modify_activation(neuron_id, rng.choice(config.activation_options))
        return True

    if operator == 'remove_connection':
        pair = blueprint.random_existing_connection_pair(rng)
        if pair is None:
            return False
        blueprint.remove_connection(*pair)
        return True

    if operator == 'adjust_weight':
        pair = blueprint.random_existing_connection_pair(rng)
        if pair is None:
            return False
        change = rng.uniform(-config.max_weight_change, config.max_weight_change)
        blueprint.reweight_connection(*pair, blueprint.connection_weight(*pair) + change)
        return True

    raise ValueError(f"unknown operator '{operator}'")

def attempt_operator(blueprint: Blueprint,
                     session  : Session,
                     baseline : Evaluation,
                     config   : Config,
                     seed     : int) -> tuple[Blueprint, str, Evaluation] | None:
    """
    Apply a random edit to a clone of 'blueprint' and evaluate it on 'session' alone.

    Parameters:
        blueprint: The current best (left untouched)
        session:   The session the edit is judged on
        baseline:  Evaluation of the current best on that session
        config:    Configuration parameters
        seed:      Seed of the attempt's own generator

    Returns:
        The candidate, the operator name and the candidate's Evaluation if
        some metric improved and none regressed on the session, otherwise None
    """
    rng       = random.Random(seed)
    candidate = blueprint.clone()
    operator  = rng.choice(OPERATORS)

    try:
        if not apply_operator(candidate, operator, config, rng):
            return None
    except BlueprintError as e:
        logger.warning(f"discarding {operator} attempt: {e}")
        return None

    evaluation = evaluate_with_config(candidate, [session], config, rng)
    if not strict_no_regression(evaluation, baseline):
        return None
    return candidate, operator, evaluation

class SingleItemLearner(Search):
    """
    Batched multi-operator local search.

    The sessions are split into consecutive batches of 'batch_size'. Each
    round processes one batch: for every session, 'attempts_per_session'
    random edits (insert_neuron, add_connection, modify_activation,
    remove_connection, adjust_weight) are tried concurrently on isolated
    clones and evaluated on that session alone. An attempt is reported if
    it improves the session's metrics without regressing any. The report
    with the largest total improvement over its session's baseline is
    re-evaluated on all sessions and committed only if some metric improves
    and none regresses.

    The search makes a single pass over the batches, bounded by 'max_iterations'.
    """

    def _initialize(self):
        size             = max(1, self._config.batch_size)
        self._batches    = [self._sessions[i:i + size] for i in range(0, len(self._sessions), size)]
        self._next_batch = 0

    def _search_round(self) -> bool:
        batch = self._batches[self._next_batch]
        self._next_batch += 1

        reports, improvements = [], []
        for session in batch:
            baseline = self._evaluate(self.best.clone(), [session])
            seeds    = self._spawn_seeds(self._config.attempts_per_session)
            results  = self._run_parallel(attempt_operator,
                                          [(self.best, session, baseline, self._config, seed) for seed in seeds])
            for result in results:
                if result is not None:
                    reports.append(result)
                    improvements.append(improvement_score(result[2], baseline))

        if not reports:
            logger.debug(f"batch {self._next_batch}: no beneficial edit")
            return False

        winner = max(range(len(reports)), key=lambda i: (improvements[i], -i))
        candidate, operator, _ = reports[winner]

        evaluation = self._evaluate(candidate, self._sessions)
        if not strict_no_regression(evaluation, self.best_evaluation):
            logger.debug(f"batch {self._next_batch}: {operator} rejected on the whole set")
            return False

        logger.debug(f"batch {self._next_batch}: committed {operator}")
        self.best, self.best_evaluation = candidate, evaluation
        return True

    def _terminate(self) -> bool:
        return self._next_batch >= len(self._batches) or super()._terminate()
