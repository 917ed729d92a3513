"""
Connection Module

This module implements the Connection class, a single weighted entry of a
neuron's fan-in.

Classes:
    Connection: A weighted incoming edge (source neuron ID, weight)
"""

import numpy as np
import random

class Connection:
    """
    A weighted incoming connection of a neuron.

    Connections are stored on the neuron that receives them (the target),
    so a connection only records where its signal comes from. During forward
    propagation the target reads the source neuron's current value and
    multiplies it by the connection's weight.

    Public Attributes:
        source_id: ID of the neuron the signal comes from
        weight:    Weight of the connection

    Public Methods:
        mutate():    Stochastically perturb the weight
        randomize(): Replace the weight by a uniformly drawn value
        copy():      Return an independent copy of the connection
        to_list():   Return the [source_id, weight] pair
    """

    def __init__(self, source_id: int, weight: float):
        """
        Initialize a connection.

        Parameters:
            source_id: ID of the source neuron
            weight:    Weight of the connection
        """
        self.source_id: int   = int(source_id)
        self.weight   : float = float(weight)

    def mutate(self,
               rng       : random.Random,
               rate      : float,
               strength  : float,
               min_weight: float = float('-inf'),
               max_weight: float = float('inf')) -> None:
        """
        Stochastically mutate the connection.

        With probability 'rate' the weight is modified additively by a value
        drawn from a zero-centered normal distribution with standard deviation
        'strength'; the result is clipped to [min_weight, max_weight].

        Parameters:
            rng:        Source of randomness
            rate:       Probability that the weight is perturbed
            strength:   Standard deviation of the perturbation
            min_weight: Lower bound for the weight
            max_weight: Upper bound for the weight
        """
        if rng.random() < rate:
            new_weight  = self.weight + rng.gauss(0, strength)
            self.weight = float(np.maximum(min_weight, np.minimum(max_weight, new_weight)))  # Clip it

    def randomize(self, rng: random.Random, min_weight: float = -1.0, max_weight: float = 1.0) -> None:
        """
        Replace the weight by a value drawn uniformly from [min_weight, max_weight].
        """
        self.weight = rng.uniform(min_weight, max_weight)

    def copy(self) -> 'Connection':
        return Connection(self.source_id, self.weight)

    def to_list(self) -> list:
        return [self.source_id, self.weight]

    def __eq__(self, other):
        if not isinstance(other, Connection):
            return NotImplemented
        return self.source_id == other.source_id and self.weight == other.weight

    def __repr__(self):
        return f"Connection(source_id={self.source_id:03d}, weight={self.weight:+.6f})"

    def __str__(self):
        return f"[{self.source_id:02d},{self.weight:+.02f}]"
