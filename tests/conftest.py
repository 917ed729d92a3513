"""Pytest configuration and shared fixtures."""

import random

import numpy as np
import pytest

from neurosearch.evaluation import Session
from neurosearch.genotype   import Blueprint, Connection, Neuron, NeuronKind


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Set random seeds for reproducibility."""
    np.random.seed(42)
    random.seed(42)

    yield

    np.random.seed(None)
    random.seed(None)


@pytest.fixture
def rng():
    """A seeded generator for operators that take an explicit source of randomness."""
    return random.Random(42)


@pytest.fixture
def dense_blueprint():
    """
    2 inputs (IDs 1, 2), one dense output (ID 3) with bias 0,
    weights [1, 1] and linear activation.
    """
    blueprint = Blueprint()
    blueprint.add_neuron(Neuron(1, NeuronKind.INPUT))
    blueprint.add_neuron(Neuron(2, NeuronKind.INPUT))
    blueprint.add_neuron(Neuron(3, NeuronKind.DENSE, bias=0.0, activation="linear",
                                connections=[Connection(1, 1.0), Connection(2, 1.0)]))
    blueprint.add_input_nodes([1, 2])
    blueprint.add_output_nodes([3])
    return blueprint


@pytest.fixture
def two_class_blueprint(rng):
    """2 inputs (IDs 1, 2) fully connected to 2 dense outputs (IDs 3, 4)."""
    return Blueprint.create(num_inputs=2, num_outputs=2, rng=rng)


@pytest.fixture
def xor_sessions():
    """XOR as a two-class problem: output 3 is 'false', output 4 is 'true'."""
    return [Session({1: 0.0, 2: 0.0}, {3: 1.0, 4: 0.0}),
            Session({1: 0.0, 2: 1.0}, {3: 0.0, 4: 1.0}),
            Session({1: 1.0, 2: 0.0}, {3: 0.0, 4: 1.0}),
            Session({1: 1.0, 2: 1.0}, {3: 1.0, 4: 0.0})]
