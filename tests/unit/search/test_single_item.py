"""
Unit tests for neurosearch.search.single_item module.

Tests cover the five edit operators, the attempt worker function and the
batched single-session learner.
"""

import pytest
import random

from neurosearch.evaluation         import Evaluation, Session
from neurosearch.genotype           import Blueprint, NeuronKind
from neurosearch.search             import OPERATORS, SingleItemLearner, apply_operator
from neurosearch.search             import single_item as single_item_module
from neurosearch.search.single_item import attempt_operator


# ============================================================================
# Test apply_operator
# ============================================================================

class TestApplyOperator:
    """Test the apply_operator function."""

    def test_five_operators(self):
        """Test the list of operator names."""
        assert set(OPERATORS) == {'insert_neuron', 'add_connection', 'modify_activation',
                                  'remove_connection', 'adjust_weight'}

    def test_insert_neuron(self, two_class_blueprint, mock_config, rng):
        """Test that insert_neuron adds one neuron of a configured kind."""
        mock_config.neuron_kinds = [NeuronKind.RNN]

        assert apply_operator(two_class_blueprint, 'insert_neuron', mock_config, rng)
        assert two_class_blueprint.neurons[5].kind == NeuronKind.RNN

    def test_add_connection(self, two_class_blueprint, mock_config, rng):
        """Test that add_connection adds one new connection within the weight range."""
        before = two_class_blueprint.number_connections

        assert apply_operator(two_class_blueprint, 'add_connection', mock_config, rng)
        assert two_class_blueprint.number_connections == before + 1

    def test_add_connection_saturated(self, mock_config, rng):
        """Test that add_connection reports failure on a saturated graph."""
        assert not apply_operator(Blueprint.create(1, 1, rng), 'add_connection', mock_config, rng)

    def test_modify_activation(self, two_class_blueprint, mock_config, rng):
        """Test that modify_activation picks a configured activation for a hidden neuron."""
        two_class_blueprint.insert_neuron_between_inputs_and_outputs(NeuronKind.DENSE, rng)
        mock_config.activation_options = ['elu']

        assert apply_operator(two_class_blueprint, 'modify_activation', mock_config, rng)
        assert two_class_blueprint.neurons[5].activation == 'elu'

    def test_modify_activation_without_hidden(self, two_class_blueprint, mock_config, rng):
        """Test that modify_activation reports failure without hidden neurons."""
        assert not apply_operator(two_class_blueprint, 'modify_activation', mock_config, rng)

    def test_remove_connection(self, two_class_blueprint, mock_config, rng):
        """Test that remove_connection removes one existing connection."""
        assert apply_operator(two_class_blueprint, 'remove_connection', mock_config, rng)
        assert two_class_blueprint.number_connections == 3

    def test_adjust_weight_keeps_single_edge(self, two_class_blueprint, mock_config, rng):
        """Test that adjust_weight moves one weight without duplicating its connection."""
        before = {(c.source_id, nid): c.weight
                  for nid in two_class_blueprint.output_ids for c in two_class_blueprint.neurons[nid].connections}

        assert apply_operator(two_class_blueprint, 'adjust_weight', mock_config, rng)

        after = {(c.source_id, nid): c.weight
                 for nid in two_class_blueprint.output_ids for c in two_class_blueprint.neurons[nid].connections}
        assert two_class_blueprint.number_connections == 4
        changed = [pair for pair in before if before[pair] != after[pair]]
        assert len(changed) == 1
        assert abs(after[changed[0]] - before[changed[0]]) <= mock_config.max_weight_change

    def test_edits_without_connections(self, mock_config, rng):
        """Test that connection edits report failure on a graph without connections."""
        blueprint = Blueprint.create(2, 2, rng, connect=False)

        assert not apply_operator(blueprint, 'remove_connection', mock_config, rng)
        assert not apply_operator(blueprint, 'adjust_weight', mock_config, rng)

    def test_unknown_operator(self, two_class_blueprint, mock_config, rng):
        """Test that an unknown operator raises ValueError."""
        with pytest.raises(ValueError):
            apply_operator(two_class_blueprint, 'swap_neurons', mock_config, rng)


# ============================================================================
# Test attempt_operator
# ============================================================================

class TestAttemptOperator:
    """Test the attempt_operator worker function."""

    def test_reports_only_strict_improvements(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that every reported attempt beats the baseline without regression."""
        session  = xor_sessions[1]
        baseline = Evaluation(0.0, 0.0, 0.0)

        reports = [attempt_operator(two_class_blueprint, session, baseline, mock_config, seed) for seed in range(10)]

        for report in reports:
            if report is not None:
                candidate, operator, evaluation = report
                assert operator in OPERATORS
                assert all(new >= old for new, old in zip(evaluation.metrics, baseline.metrics))

    def test_unbeatable_baseline(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that no attempt is reported against a perfect baseline."""
        baseline = Evaluation(100.0, 100.0, 100.0)

        for seed in range(10):
            assert attempt_operator(two_class_blueprint, xor_sessions[0], baseline, mock_config, seed) is None

    def test_starting_graph_untouched(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that attempts only edit clones."""
        before = two_class_blueprint.to_dict()

        for seed in range(10):
            attempt_operator(two_class_blueprint, xor_sessions[0], Evaluation(), mock_config, seed)

        assert two_class_blueprint.to_dict() == before


# ============================================================================
# Test SingleItemLearner
# ============================================================================

class TestSingleItemLearner:
    """Test the SingleItemLearner search."""

    def test_batches(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that sessions are split into consecutive batches of batch_size."""
        mock_config.batch_size = 3
        search = SingleItemLearner(mock_config, random.Random(0))
        search._sessions = list(xor_sessions)

        search._initialize()

        assert [len(batch) for batch in search._batches] == [3, 1]

    def test_single_pass_over_batches(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that the search runs one round per batch."""
        mock_config.batch_size     = 2
        mock_config.max_iterations = 10

        search = SingleItemLearner(mock_config, random.Random(0), suppress_output=True)
        search.tracked_metrics = ()
        result = search.run(two_class_blueprint, xor_sessions)

        assert result.iterations == 2

    def test_round_limit(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that max_iterations bounds the number of batches processed."""
        mock_config.batch_size     = 1
        mock_config.max_iterations = 2

        search = SingleItemLearner(mock_config, random.Random(0), suppress_output=True)
        search.tracked_metrics = ()
        result = search.run(two_class_blueprint, xor_sessions)

        assert result.iterations == 2

    def test_commit_requires_global_improvement(self, two_class_blueprint, xor_sessions, mock_config, monkeypatch):
        """Test that a locally beneficial edit is rejected when the whole set regresses."""
        def helpful(blueprint, session, baseline, config, seed):
            return blueprint.clone(), 'adjust_weight', Evaluation(100.0, 100.0, 100.0)

        monkeypatch.setattr(single_item_module, 'attempt_operator', helpful)
        search = SingleItemLearner(mock_config, random.Random(0))
        search._sessions       = list(xor_sessions)
        search.best            = two_class_blueprint
        search.best_evaluation = Evaluation(100.0, 100.0, 100.0)
        search._initialize()

        assert not search._search_round()
        assert search.best is two_class_blueprint

    def test_committed_metrics_never_regress(self, two_class_blueprint, xor_sessions, mock_config):
        """Test that every committed round improves some metric without regressing any."""
        mock_config.batch_size           = 1
        mock_config.attempts_per_session = 5

        result = SingleItemLearner(mock_config, random.Random(4), suppress_output=True).run(two_class_blueprint,
                                                                                            xor_sessions)

        previous = None
        for evaluation in result.history:
            if previous is not None:
                assert all(new >= old for new, old in zip(evaluation.metrics, previous.metrics))
            previous = evaluation

    def test_empty_sessions(self, two_class_blueprint, mock_config):
        """Test that a search without sessions runs no round."""
        result = SingleItemLearner(mock_config, random.Random(0), suppress_output=True).run(two_class_blueprint, [])

        assert result.iterations == 0


class TestSingleItemSessions:
    """Test the learner on sessions it can fix with one edit."""

    def test_learns_single_session(self, mock_config):
        """Test that the learner never ends below the exact accuracy it started from."""
        blueprint = Blueprint.create(1, 2, random.Random(0))
        sessions  = [Session({1: 1.0}, {2: 0.0, 3: 1.0})]
        mock_config.batch_size           = 1
        mock_config.attempts_per_session = 10

        search = SingleItemLearner(mock_config, random.Random(0), suppress_output=True)
        start  = search._evaluate(blueprint.clone(), sessions)
        result = search.run(blueprint, sessions)

        assert result.evaluation.exact >= start.exact
