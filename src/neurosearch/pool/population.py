"""
Population Module

This module implements the Population class, the pool of candidate graphs
evolved by evolutionary training.

Classes:
    Population: A generation of graphs together with their Evaluations
"""

import random
from typing import TYPE_CHECKING

from neurosearch.run.config import Config

if TYPE_CHECKING:
    from neurosearch.evaluation import Evaluation
    from neurosearch.genotype   import Blueprint

class Population:
    """
    A generation of candidate graphs.

    Every individual of the initial population is a clone of a seed graph
    with randomized weights and a chance of one architecture mutation. The
    next generation is produced from the fitter half of the current one:
    each child is the crossover of two random parents of that half, followed
    by weight and architecture mutation. Fitness is the mean of the three
    accuracy metrics.

    Public Attributes:
        individuals: List of the Blueprints of the current generation
        evaluations: Their Evaluations (None until evaluated), index-aligned

    Public Methods:
        get_fittest_individual(): Return the individual with the highest fitness
        spawn_next_generation():  Replace the population by the next generation
    """

    def __init__(self, config: Config, blueprint: 'Blueprint', rng: random.Random):
        """
        Initialize the population with 'config.population_size' mutated clones of 'blueprint'.

        Parameters:
            config:    Stores configuration parameters
            blueprint: The seed graph (left untouched)
            rng:       Source of randomness
        """
        self._config = config
        self._rng    = rng

        self.individuals: list['Blueprint']          = []
        self.evaluations: list['Evaluation | None'] = []

        for _ in range(self._config.population_size):
            individual = blueprint.clone()
            individual.randomize_weights(rng, self._config.min_weight, self._config.max_weight)
            self._mutate_architecture(individual)
            self.individuals.append(individual)
        self.evaluations = [None] * len(self.individuals)

    def _mutate_architecture(self, individual: 'Blueprint'):
        individual.mutate_architecture(self._rng,
                                       rate               = self._config.architecture_mutation_rate,
                                       kinds              = self._config.neuron_kinds,
                                       activation_options = self._config.activation_options)

    @property
    def fitness(self) -> list[float | None]:
        return [e.mean_score if e is not None else None for e in self.evaluations]

    def get_fittest_individual(self) -> 'tuple[Blueprint, Evaluation] | None':
        """
        Find and return the individual with the highest fitness, along with
        its Evaluation. Ties go to the individual that comes first.

        Returns:
            The fittest individual and its Evaluation, or None if the population
            is empty or has not been evaluated yet
        """
        if not self.individuals or any(e is None for e in self.evaluations):
            return None

        index = max(range(len(self.individuals)), key=lambda i: (self.evaluations[i].mean_score, -i))
        return self.individuals[index], self.evaluations[index]

    def spawn_next_generation(self):
        """
        Create the next generation through selection and reproduction.

        Step 1: Selection
        - Rank the individuals by fitness and keep the top half as parents

        Step 2: Reproduction
        - Each child is the crossover of two parents drawn at random (possibly the same one)
        - The child's weights are mutated, then its architecture

        Raises:
            RuntimeError: If the population has not been evaluated
        """
        if any(e is None for e in self.evaluations):
            raise RuntimeError("population must be evaluated before spawning the next generation")

        ranked  = sorted(range(len(self.individuals)), key=lambda i: (-self.evaluations[i].mean_score, i))
        parents = [self.individuals[i] for i in ranked[:max(1, len(ranked) // 2)]]

        offspring = []
        for _ in range(len(self.individuals)):
            parent1 = self._rng.choice(parents)
            parent2 = self._rng.choice(parents)
            child   = parent1.crossover(parent2, self._rng)
            child.mutate_weights(self._rng,
                                 rate       = self._config.weight_mutation_rate,
                                 strength   = self._config.weight_perturb_strength,
                                 min_weight = self._config.min_weight,
                                 max_weight = self._config.max_weight)
            self._mutate_architecture(child)
            offspring.append(child)

        self.individuals = offspring
        self.evaluations = [None] * len(offspring)

    def __len__(self):
        return len(self.individuals)
