"""
Shared fixtures for integration tests.
"""

import pytest

from neurosearch.evaluation import Session
from neurosearch.run.config import Config


@pytest.fixture
def config():
    """A real Config with short, deterministic runs."""
    config = Config()
    config.seed                         = 42
    config.max_iterations               = 8
    config.dropout_enabled              = False
    config.reset_state_between_sessions = True
    config.candidates_per_round         = 4
    config.population_size              = 6
    config.generations                  = 3
    config.batch_size                   = 2
    return config


@pytest.fixture
def xor_three_inputs():
    """XOR of the first two inputs with a constant bias input (ID 3); outputs are IDs 4, 5."""
    return [Session({1: 0.0, 2: 0.0, 3: 1.0}, {4: 1.0, 5: 0.0}),
            Session({1: 0.0, 2: 1.0, 3: 1.0}, {4: 0.0, 5: 1.0}),
            Session({1: 1.0, 2: 0.0, 3: 1.0}, {4: 0.0, 5: 1.0}),
            Session({1: 1.0, 2: 1.0, 3: 1.0}, {4: 1.0, 5: 0.0})]
