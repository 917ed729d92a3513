"""Shared fixtures for the search orchestrator tests."""

import pytest
from unittest.mock import Mock

from neurosearch.genotype   import INSERTABLE_KINDS
from neurosearch.run.config import Config


@pytest.fixture
def mock_config():
    """Create a mock Config object holding the parameters used by the searches."""
    config = Mock(spec=Config)

    # [SEARCH]
    config.max_iterations       = 5
    config.max_stall            = 0
    config.num_jobs             = 1
    config.candidates_per_round = 3
    config.seed                 = 42

    # [EVALUATION]
    config.forgiveness_threshold        = 0.1
    config.dropout_enabled              = False
    config.reset_state_between_sessions = True

    # [MUTATION]
    config.neuron_kinds               = list(INSERTABLE_KINDS)
    config.activation_options         = ['relu', 'sigmoid', 'tanh', 'leaky_relu', 'linear']
    config.min_weight                 = -1.0
    config.max_weight                 = 1.0
    config.weight_mutation_rate       = 0.1
    config.weight_perturb_strength    = 0.1
    config.architecture_mutation_rate = 0.05
    config.rewire_direct_edges        = False

    # [HILL_CLIMBING]
    config.max_weight_change     = 0.1
    config.hill_climb_acceptance = 'strict'

    # [NAS]
    config.nas_acceptance           = 'exact_guarded'
    config.metrics_to_optimize      = ['exact', 'generous', 'forgiveness']
    config.weight_update_iterations = 0
    config.use_hill_climbing        = False

    # [EVOLUTION]
    config.population_size = 6
    config.generations     = 3

    # [SINGLE_ITEM]
    config.batch_size           = 2
    config.attempts_per_session = 3

    # [REFINEMENT]
    config.sample_subset_size     = 5
    config.trials_per_sample      = 10
    config.improvement_threshold  = 100.0
    config.near_miss_cutoff       = 0.8
    config.fallback_cutoff        = 0.5
    config.refinement_delta_stdev = 0.01
    config.refinement_max_stall   = 5

    # [CONNECTIONS]
    config.max_connection_attempts = 20

    return config
