"""
Integration tests running every search end to end on XOR.

These tests use a real Config, real graphs and the real propagation and
evaluation code; nothing is mocked.
"""

import random

import pytest

from neurosearch.evaluation import Evaluation, evaluate_advanced
from neurosearch.genotype   import Blueprint
from neurosearch.search     import (ConnectionSearch,
                                    EvolutionaryTrainer,
                                    HillClimber,
                                    ParallelNAS,
                                    SearchResult,
                                    SequentialNAS,
                                    SingleItemLearner,
                                    TargetedMicroRefinement,
                                    evaluate_with_config)


ALL_SEARCHES = [HillClimber,
                SequentialNAS,
                ParallelNAS,
                ConnectionSearch,
                SingleItemLearner,
                TargetedMicroRefinement,
                EvolutionaryTrainer]


@pytest.fixture
def start(rng):
    """A fully connected graph for the three-input XOR sessions."""
    return Blueprint.create(num_inputs=3, num_outputs=2, rng=rng)


# ============================================================================
# Every Search
# ============================================================================

@pytest.mark.parametrize("search_class", ALL_SEARCHES, ids=lambda cls: cls.__name__)
class TestEverySearch:
    """Properties shared by all search orchestrators."""

    def test_returns_result(self, search_class, config, start, xor_three_inputs):
        """Test that a run returns a SearchResult with one history entry per round."""
        result = search_class(config, suppress_output=True).run(start, xor_three_inputs)

        assert isinstance(result, SearchResult)
        assert isinstance(result.evaluation, Evaluation)
        assert len(result.history) == result.iterations
        assert result.blueprint is not start

    def test_starting_graph_untouched(self, search_class, config, start, xor_three_inputs):
        """Test that the graph passed in is never modified."""
        before = start.to_dict()

        search_class(config, suppress_output=True).run(start, xor_three_inputs)

        assert start.to_dict() == before

    def test_result_evaluation_reproducible(self, search_class, config, start, xor_three_inputs):
        """Test that re-evaluating the result reproduces its reported metrics."""
        result = search_class(config, suppress_output=True).run(start, xor_three_inputs)

        assert evaluate_with_config(result.blueprint.clone(), xor_three_inputs, config) == result.evaluation

    def test_seeded_runs_agree(self, search_class, config, start, xor_three_inputs):
        """Test that two runs with the same config seed produce the same graph."""
        first  = search_class(config, suppress_output=True).run(start, xor_three_inputs)
        second = search_class(config, suppress_output=True).run(start, xor_three_inputs)

        assert first.evaluation == second.evaluation
        assert first.blueprint.to_dict() == second.blueprint.to_dict()

    def test_result_survives_json(self, search_class, config, start, xor_three_inputs):
        """Test that the searched graph survives a JSON round trip with the same metrics."""
        result   = search_class(config, suppress_output=True).run(start, xor_three_inputs)
        restored = Blueprint.from_json(result.blueprint.to_json())

        assert restored.to_dict() == result.blueprint.to_dict()
        assert evaluate_with_config(restored, xor_three_inputs, config) == result.evaluation


# ============================================================================
# Search-Specific Guarantees
# ============================================================================

class TestGuarantees:
    """Guarantees that depend on the acceptance strategy of a search."""

    def test_hill_climber_never_regresses(self, config, start, xor_three_inputs):
        """Test that strict acceptance never lets any committed metric drop."""
        config.max_iterations = 30

        result = HillClimber(config, suppress_output=True).run(start, xor_three_inputs)

        for earlier, later in zip(result.history, result.history[1:]):
            assert all(b >= a for a, b in zip(earlier.metrics, later.metrics))

    def test_nas_exact_never_drops(self, config, start, xor_three_inputs):
        """Test that exact-guarded acceptance never lets exact accuracy drop."""
        result = SequentialNAS(config, suppress_output=True).run(start, xor_three_inputs)

        exact = [evaluation.exact for evaluation in result.history]
        assert exact == sorted(exact)

    def test_nas_only_grows(self, config, start, xor_three_inputs):
        """Test that architecture search only adds neurons."""
        result = ParallelNAS(config, suppress_output=True).run(start, xor_three_inputs)

        assert result.blueprint.number_nodes >= start.number_nodes
        assert set(start.neurons) <= set(result.blueprint.neurons)

    def test_connection_search_only_adds(self, config, start, xor_three_inputs):
        """Test that connection search keeps every existing connection."""
        start.insert_neuron_with_random_connections("dense", random.Random(1))

        result = ConnectionSearch(config, suppress_output=True).run(start, xor_three_inputs)

        assert result.blueprint.number_connections >= start.number_connections
        for nid, neuron in start.neurons.items():
            for connection in neuron.connections:
                assert result.blueprint.connection_exists(connection.source_id, nid)

    def test_one_hot_targets_have_no_near_misses(self, config, start, xor_three_inputs):
        """Test that refinement finds nothing to refine when every wrong answer is far off."""
        search = TargetedMicroRefinement(config, suppress_output=True)

        result = search.run(start, xor_three_inputs)

        assert search.near_misses == []
        assert result.iterations == 0

    def test_evolution_runs_all_generations(self, config, start, xor_three_inputs):
        """Test that evolutionary training runs one round per generation."""
        result = EvolutionaryTrainer(config, suppress_output=True).run(start, xor_three_inputs)

        assert result.iterations == config.generations


# ============================================================================
# Chained Searches
# ============================================================================

class TestChainedSearches:
    """Feeding the result of one search into the next."""

    def test_nas_then_connections_then_hill_climbing(self, config, start, xor_three_inputs):
        """Test a typical pipeline, checking that the final stage never loses exact accuracy."""
        nas         = SequentialNAS(config, suppress_output=True).run(start, xor_three_inputs)
        connections = ConnectionSearch(config, suppress_output=True).run(nas.blueprint, xor_three_inputs)
        climbed     = HillClimber(config, suppress_output=True).run(connections.blueprint, xor_three_inputs)

        assert climbed.blueprint.number_nodes == connections.blueprint.number_nodes
        assert climbed.evaluation.exact >= connections.evaluation.exact
        assert all(b >= a for a, b in zip(connections.evaluation.metrics, climbed.evaluation.metrics))

    def test_stages_leave_inputs_untouched(self, config, start, xor_three_inputs):
        """Test that a stage never modifies the result of the stage before it."""
        nas    = SequentialNAS(config, suppress_output=True).run(start, xor_three_inputs)
        before = nas.blueprint.to_dict()

        SingleItemLearner(config, suppress_output=True).run(nas.blueprint, xor_three_inputs)

        assert nas.blueprint.to_dict() == before

    def test_advanced_metrics_on_result(self, config, start, xor_three_inputs):
        """Test that the advanced metrics can be computed for a searched graph."""
        result = ParallelNAS(config, suppress_output=True).run(start, xor_three_inputs)

        evaluation, advanced = evaluate_advanced(result.blueprint.clone(), xor_three_inputs)

        assert isinstance(evaluation, Evaluation)
        assert set(advanced) == {'weighted_proximity', 'class_sensitivity', 'decile_consistency'}


# ============================================================================
# Parallel Execution
# ============================================================================

class TestParallelExecution:
    """Searches with worker processes."""

    @pytest.mark.parametrize("search_class", [ParallelNAS, ConnectionSearch, EvolutionaryTrainer],
                             ids=lambda cls: cls.__name__)
    def test_parallel_matches_serial(self, search_class, config, start, xor_three_inputs):
        """Test that worker processes find the same graph as serial evaluation."""
        config.max_iterations = 3

        serial = search_class(config, suppress_output=True).run(start, xor_three_inputs)
        config.num_jobs = 2
        parallel = search_class(config, suppress_output=True).run(start, xor_three_inputs)

        assert parallel.evaluation == serial.evaluation
        assert parallel.blueprint.to_dict() == serial.blueprint.to_dict()
