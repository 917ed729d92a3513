"""
neurosearch - Gradient-free search over heterogeneous neural graphs.

This package provides a graph of heterogeneous neurons (dense, recurrent,
LSTM, convolutional, dropout, batch-normalization, attention and cellular
automaton neurons), a forward propagation engine for it, a multi-metric
evaluator, and a family of search algorithms that improve the graph's
topology and weights through mutation, hill-climbing and evolution.

Main components:
- activations: Activation functions for neurons
- genotype: Graph representation and its mutation operators
- phenotype: Forward propagation engine
- evaluation: Labeled sessions and accuracy metrics
- search: Search orchestrators and acceptance strategies
- pool: Population used by evolutionary training
- run: Configuration

Example:
    >>> from neurosearch import Blueprint, Config, HillClimber, Session
    >>> config    = Config("config.ini")
    >>> blueprint = Blueprint.create(num_inputs=2, num_outputs=2)
    >>> sessions  = [Session({1: 0.0, 2: 1.0}, {3: 0.0, 4: 1.0})]
    >>> result    = HillClimber(config).run(blueprint, sessions)
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from neurosearch.run.config import Config
from neurosearch.genotype import Blueprint, BlueprintError, Connection, Neuron, NeuronKind, SerializationError, StructuralError
from neurosearch.phenotype import Network
from neurosearch.evaluation import Evaluation, Session, evaluate_advanced, evaluate_model_performance
from neurosearch.pool import Population
from neurosearch.search import (
    ConnectionSearch,
    EvolutionaryTrainer,
    HillClimber,
    ParallelNAS,
    Search,
    SearchResult,
    SequentialNAS,
    SingleItemLearner,
    TargetedMicroRefinement
)

__all__ = [
    "Config",
    "Blueprint",
    "BlueprintError",
    "Connection",
    "Neuron",
    "NeuronKind",
    "SerializationError",
    "StructuralError",
    "Network",
    "Evaluation",
    "Session",
    "evaluate_advanced",
    "evaluate_model_performance",
    "Population",
    "ConnectionSearch",
    "EvolutionaryTrainer",
    "HillClimber",
    "ParallelNAS",
    "Search",
    "SearchResult",
    "SequentialNAS",
    "SingleItemLearner",
    "TargetedMicroRefinement",
]
