"""
Targeted Micro-Refinement Module

This module implements a refinement pass focused on "near-miss" sessions:
sessions the network gets wrong, but only just. Small gaussian tweaks are
applied to the weights feeding the output neurons, one sampled near-miss at
a time, and a tweak is kept only if it lowers that session's mean absolute
error.

Classes:
    TargetedMicroRefinement: Near-miss weight refinement
"""

from neurosearch.evaluation        import Session, is_exact_match, predict_sessions, sample_mae, similarity_score
from neurosearch.genotype          import Blueprint
from neurosearch.search.acceptance import strict_no_regression
from neurosearch.search.search     import Search
from neurosearch.utils             import get_logger

logger = get_logger(__name__)

class TargetedMicroRefinement(Search):
    """
    Near-miss weight refinement.

    Before the first round, the near-miss sessions are collected: sessions
    whose most probable output is wrong but whose similarity is at least
    'near_miss_cutoff' * 100 (or 'fallback_cutoff' * 100 if no session
    qualifies at the first cutoff).

    Each round draws up to 'sample_subset_size' near-misses and, for each of
    them, runs 'trials_per_sample' trials on a working copy of the committed
    best: a connection of a random output neuron gets a gaussian delta
    (standard deviation 'refinement_delta_stdev') added, then subtracted,
    and the change is kept only if the sample's mean absolute error strictly
    drops. The working copy keeps its tweaks from round to round; after each
    round it is evaluated on all sessions, and a snapshot of it is committed
    only if some metric improved over the committed best and none regressed.
    Rounds that do not commit count as stalled, so the result is never worse
    than the starting graph.

    The search stops once more than 'refinement_max_stall' consecutive rounds
    brought no improvement, or once exact accuracy reaches
    'improvement_threshold'.

    Public Attributes:
        near_misses: The near-miss sessions found before the first round
    """

    def _initialize(self):
        self.near_misses: list[Session] = []
        self._working   : Blueprint     = self.best.clone()

        if self.best_evaluation.exact > self._config.improvement_threshold:
            logger.debug("already beyond the improvement threshold")
            return

        for cutoff in (self._config.near_miss_cutoff, self._config.fallback_cutoff):
            self.near_misses = self._find_near_misses(cutoff)
            if self.near_misses:
                break
            logger.debug(f"no near-miss session at {cutoff * 100:.0f}% similarity")

    def _find_near_misses(self, cutoff: float) -> list[Session]:
        """
        Return the sessions predicted wrong, with a similarity of at least 'cutoff' * 100.
        """
        predictions = self._predict(self.best.clone(), self._sessions)
        near_misses = []
        for predicted, session in zip(predictions, self._sessions):
            if is_exact_match(predicted, session.expected_outputs):
                continue
            if similarity_score(predicted, session.expected_outputs) >= cutoff * 100.0:
                near_misses.append(session)
        return near_misses

    def _predict(self, blueprint: Blueprint, sessions: list[Session]) -> list[dict[int, float]]:
        return predict_sessions(blueprint,
                                sessions,
                                rng             = self._rng,
                                dropout_enabled = self._config.dropout_enabled,
                                reset_state     = self._config.reset_state_between_sessions)

    def _sample_error(self, blueprint: Blueprint, session: Session) -> float:
        [predicted] = self._predict(blueprint, [session])
        return sample_mae(predicted, session.expected_outputs)

    def refine_sample(self, blueprint: Blueprint, session: Session) -> bool:
        """
        Run the weight trials of one near-miss session on 'blueprint' in place.

        Parameters:
            blueprint: The working copy to tweak
            session:   The near-miss session

        Returns:
            bool: True if at least one tweak was kept
        """
        if not blueprint.output_ids:
            return False

        error    = self._sample_error(blueprint, session)
        improved = False

        for _ in range(self._config.trials_per_sample):
            neuron = blueprint.neurons.get(self._rng.choice(blueprint.output_ids))
            if neuron is None or not neuron.connections:
                continue

            connection = self._rng.choice(neuron.connections)
            old_weight = connection.weight
            delta      = self._rng.gauss(0.0, self._config.refinement_delta_stdev)

            for weight in (old_weight + delta, old_weight - delta):
                connection.weight = weight
                new_error = self._sample_error(blueprint, session)
                if new_error < error:
                    error, improved = new_error, True
                    break
            else:
                connection.weight = old_weight

        return improved

    def _search_round(self) -> bool:
        subset = self._near_miss_subset()
        for session in subset:
            self.refine_sample(self._working, session)

        evaluation = self._evaluate(self._working, self._sessions)
        if not strict_no_regression(evaluation, self.best_evaluation):
            return False

        self.best, self.best_evaluation = self._working.clone(), evaluation
        return True

    def _near_miss_subset(self) -> list[Session]:
        size = self._config.sample_subset_size
        if len(self.near_misses) <= size:
            return list(self.near_misses)
        return self._rng.sample(self.near_misses, size)

    def _terminate(self) -> bool:
        if not self.near_misses:
            return True
        if self.stall > self._config.refinement_max_stall:
            return True
        if self.best_evaluation.exact >= self._config.improvement_threshold:
            return True
        return super()._terminate()
