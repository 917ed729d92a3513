"""
Unit tests for neurosearch.search.nas module.

Tests cover the propose_architecture worker, the sequential architecture
search and the parallel variant with its max-reduction over candidates.
"""

import pytest
import random

from neurosearch.evaluation import Evaluation
from neurosearch.genotype   import NeuronKind
from neurosearch.search     import ParallelNAS, SequentialNAS, propose_architecture
from neurosearch.search     import nas as nas_module


# ============================================================================
# Helpers
# ============================================================================

def prepared(search, blueprint, sessions, evaluation):
    """Put a search in the state run() leaves it in before the first round."""
    search._sessions       = list(sessions)
    search.best            = blueprint
    search.best_evaluation = evaluation
    return search


def scripted_proposals(evaluations):
    """Build a replacement for propose_architecture replaying the given evaluations in order."""
    script = list(evaluations)

    def propose(blueprint, sessions, config, seed):
        evaluation = script.pop(0)
        if evaluation is None:
            return None
        candidate = blueprint.clone()
        candidate.insert_neuron_between_inputs_and_outputs(NeuronKind.DENSE, random.Random(seed))
        return candidate, evaluation

    return propose


# ============================================================================
# Test propose_architecture
# ============================================================================

class TestProposeArchitecture:
    """Test the propose_architecture worker function."""

    def test_candidate_has_one_more_neuron(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that the candidate is a clone with one inserted neuron."""
        before = two_class_blueprint.to_dict()

        candidate, evaluation = propose_architecture(two_class_blueprint, xor_sessions, mock_config, seed=7)

        assert candidate.number_nodes == two_class_blueprint.number_nodes + 1
        assert candidate.neurons[5].kind in mock_config.neuron_kinds
        assert isinstance(evaluation, Evaluation)
        assert two_class_blueprint.to_dict() == before

    def test_reproducible_from_seed(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that the same seed gives the same candidate."""
        first, _  = propose_architecture(two_class_blueprint, xor_sessions, mock_config, seed=7)
        second, _ = propose_architecture(two_class_blueprint, xor_sessions, mock_config, seed=7)

        assert first.neurons[5].to_dict()['kind'] == second.neurons[5].to_dict()['kind']
        assert first.neurons[5].bias == second.neurons[5].bias

    def test_rewire_option(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that rewire_direct_edges removes the direct input->output connections."""
        mock_config.rewire_direct_edges = True
        mock_config.neuron_kinds        = [NeuronKind.DENSE]

        candidate, _ = propose_architecture(two_class_blueprint, xor_sessions, mock_config, seed=7)

        assert not candidate.connection_exists(1, 3)
        assert candidate.connection_exists(5, 3)

    def test_illegal_kind_discarded(self, two_class_blueprint, xor_sessions, mock_config, caplog):
        """Test that a failed insertion abandons the candidate with a warning."""
        mock_config.neuron_kinds = [NeuronKind.INPUT]

        assert propose_architecture(two_class_blueprint, xor_sessions, mock_config, seed=7) is None
        assert "discarding candidate" in caplog.text


# ============================================================================
# Test SequentialNAS
# ============================================================================

class TestSequentialNAS:
    """Test the SequentialNAS search."""

    def test_accepted_candidate_committed(self, two_class_blueprint, xor_sessions, mock_config, monkeypatch):
        """Test that an accepted candidate replaces the committed best."""
        monkeypatch.setattr(nas_module, 'propose_architecture', scripted_proposals([Evaluation(75.0, 0.0, 0.0)]))
        search = prepared(SequentialNAS(mock_config, random.Random(0)), two_class_blueprint, xor_sessions,
                          Evaluation(50.0, 50.0, 50.0))

        assert search._search_round()
        assert search.best.number_nodes == 5
        assert search.best_evaluation.exact == 75.0

    def test_rejected_candidate_discarded(self, two_class_blueprint, xor_sessions, mock_config, monkeypatch):
        """Test that a candidate with a lower exact accuracy is discarded."""
        monkeypatch.setattr(nas_module, 'propose_architecture', scripted_proposals([Evaluation(25.0, 99.0, 99.0)]))
        search = prepared(SequentialNAS(mock_config, random.Random(0)), two_class_blueprint, xor_sessions,
                          Evaluation(50.0, 50.0, 50.0))

        assert not search._search_round()
        assert search.best is two_class_blueprint

    def test_abandoned_candidate(self, two_class_blueprint, xor_sessions, mock_config, monkeypatch):
        """Test that an abandoned candidate makes the round fail."""
        monkeypatch.setattr(nas_module, 'propose_architecture', scripted_proposals([None]))
        search = prepared(SequentialNAS(mock_config, random.Random(0)), two_class_blueprint, xor_sessions,
                          Evaluation(50.0, 50.0, 50.0))

        assert not search._search_round()

    def test_exact_never_regresses(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that the committed exact accuracy is non-decreasing over a real run."""
        mock_config.max_iterations = 8

        result = SequentialNAS(mock_config, random.Random(3), suppress_output=True).run(two_class_blueprint,
                                                                                         xor_sessions)

        exact = [evaluation.exact for evaluation in result.history]
        assert exact == sorted(exact)
        assert result.blueprint.validate_connections()

    def test_selected_strategy_tracks_selected_metrics(self, mock_config):
        """Test that the 'selected' strategy only tracks the chosen metrics for early exit."""
        mock_config.nas_acceptance      = 'selected'
        mock_config.metrics_to_optimize = ['generous']

        search = SequentialNAS(mock_config, random.Random(0))

        assert search.tracked_metrics == ('generous',)
        assert search._accept(Evaluation(0.0, 51.0, 0.0), Evaluation(50.0, 50.0, 50.0))

    def test_hill_climbing_enabled_by_iterations(self, mock_config):
        """Test that the sequential search hill-climbs whenever iterations are positive."""
        mock_config.weight_update_iterations = 0
        assert not SequentialNAS(mock_config)._hill_climbing_enabled()

        mock_config.weight_update_iterations = 3
        assert SequentialNAS(mock_config)._hill_climbing_enabled()

    def test_refine_hill_climbs_candidate(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that refinement never makes the candidate worse under strict acceptance."""
        mock_config.weight_update_iterations = 5
        search = prepared(SequentialNAS(mock_config, random.Random(0)), two_class_blueprint, xor_sessions,
                          Evaluation())
        start  = search._evaluate(two_class_blueprint.clone(), xor_sessions)

        _, evaluation = search._refine(two_class_blueprint, start)

        assert all(new >= old for new, old in zip(evaluation.metrics, start.metrics))


# ============================================================================
# Test ParallelNAS
# ============================================================================

class TestParallelNAS:
    """Test the ParallelNAS search."""

    def test_candidates_per_round(self, mock_config):
        """Test that candidates_per_round falls back to the worker count."""
        mock_config.candidates_per_round = 4
        assert ParallelNAS(mock_config).candidates_per_round == 4

        mock_config.candidates_per_round = None
        mock_config.num_jobs             = 2
        assert ParallelNAS(mock_config).candidates_per_round == 2

    def test_hill_climbing_needs_flag(self, mock_config):
        """Test that the parallel search only hill-climbs with use_hill_climbing set."""
        mock_config.weight_update_iterations = 3
        mock_config.use_hill_climbing        = False
        assert not ParallelNAS(mock_config)._hill_climbing_enabled()

        mock_config.use_hill_climbing = True
        assert ParallelNAS(mock_config)._hill_climbing_enabled()

    def test_best_candidate_wins(self, two_class_blueprint, xor_sessions, mock_config, monkeypatch):
        """Test that the accepted candidate with the largest improvement is committed."""
        mock_config.candidates_per_round = 4
        monkeypatch.setattr(nas_module, 'propose_architecture',
                            scripted_proposals([Evaluation(50.0, 50.0, 50.0),
                                                None,
                                                Evaluation(75.0, 40.0, 40.0),
                                                Evaluation(75.0, 60.0, 60.0)]))
        search = prepared(ParallelNAS(mock_config, random.Random(0)), two_class_blueprint, xor_sessions,
                          Evaluation(50.0, 50.0, 50.0))

        assert search._search_round()
        assert search.best_evaluation == Evaluation(75.0, 60.0, 60.0)

    def test_tie_goes_to_first_proposal(self, two_class_blueprint, xor_sessions, mock_config, monkeypatch):
        """Test that equally good candidates resolve to the earliest proposal."""
        mock_config.candidates_per_round = 2
        monkeypatch.setattr(nas_module, 'propose_architecture',
                            scripted_proposals([Evaluation(75.0, 50.0, 50.0, exact_errors=1),
                                                Evaluation(75.0, 50.0, 50.0, exact_errors=2)]))
        search = prepared(ParallelNAS(mock_config, random.Random(0)), two_class_blueprint, xor_sessions,
                          Evaluation(50.0, 50.0, 50.0))

        search._search_round()

        assert search.best_evaluation.exact_errors == 1

    def test_no_accepted_candidate(self, two_class_blueprint, xor_sessions, mock_config, monkeypatch):
        """Test that the committed best is kept when no candidate is accepted."""
        mock_config.candidates_per_round = 2
        monkeypatch.setattr(nas_module, 'propose_architecture',
                            scripted_proposals([Evaluation(25.0, 90.0, 90.0), None]))
        search = prepared(ParallelNAS(mock_config, random.Random(0)), two_class_blueprint, xor_sessions,
                          Evaluation(50.0, 50.0, 50.0))

        assert not search._search_round()
        assert search.best is two_class_blueprint

    def test_real_run_is_reproducible(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that two runs with equally seeded generators agree."""
        mock_config.max_iterations = 3

        first  = ParallelNAS(mock_config, random.Random(5), suppress_output=True).run(two_class_blueprint, xor_sessions)
        second = ParallelNAS(mock_config, random.Random(5), suppress_output=True).run(two_class_blueprint, xor_sessions)

        assert first.evaluation == second.evaluation
        assert first.blueprint.to_dict() == second.blueprint.to_dict()
