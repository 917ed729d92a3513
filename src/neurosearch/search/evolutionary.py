"""
Evolutionary Training Module

This module implements population-based training: a population of mutated
clones of the starting graph is evolved for a number of generations by
truncation selection, crossover and mutation, and the fittest individual of
the last generation becomes the result.

Classes:
    EvolutionaryTrainer: Generational evolutionary search

Functions:
    evaluate_individual: Evaluate one individual (runs in workers)
"""

import random

from neurosearch.evaluation    import Evaluation, Session
from neurosearch.genotype      import Blueprint
from neurosearch.pool          import Population
from neurosearch.run.config    import Config
from neurosearch.search.search import Search, evaluate_with_config
from neurosearch.utils         import get_logger

logger = get_logger(__name__)

def evaluate_individual(blueprint: Blueprint,
                        sessions : list[Session],
                        config   : Config,
                        seed     : int) -> tuple[Blueprint, Evaluation]:
    """
    Evaluate an individual and return it with its Evaluation.

    The individual is returned as well, since evaluation updates its neuron
    state and a worker process only holds a copy.
    """
    return blueprint, evaluate_with_config(blueprint, sessions, config, random.Random(seed))

class EvolutionaryTrainer(Search):
    """
    Generational evolutionary search.

    The initial population holds 'population_size' clones of the starting
    graph, each with randomized weights and a chance of an architecture
    mutation. Every round evaluates the population (concurrently) and spawns
    the next generation from its fitter half; fitness is the mean of the
    three accuracy metrics. After 'generations' rounds the last generation
    is evaluated and its fittest individual becomes the result, whether or
    not it beats the starting graph.

    Public Attributes:
        population: The Population being evolved
    """

    def _initialize(self):
        self.population     = Population(self._config, self.best, self._rng)
        self._best_fitness  = None
        self._last_fittest  = None

    def _evaluate_population(self) -> None:
        seeds   = self._spawn_seeds(len(self.population))
        results = self._run_parallel(evaluate_individual,
                                     [(individual, self._sessions, self._config, seed)
                                      for individual, seed in zip(self.population.individuals, seeds)])
        self.population.individuals = [individual for individual, _ in results]
        self.population.evaluations = [evaluation for _, evaluation in results]

    def _search_round(self) -> bool:
        self._evaluate_population()

        fittest            = self.population.get_fittest_individual()
        self._last_fittest = fittest[1] if fittest is not None else None
        improved = False
        if fittest is not None and (self._best_fitness is None or fittest[1].mean_score > self._best_fitness):
            self._best_fitness, improved = fittest[1].mean_score, True

        self.population.spawn_next_generation()
        return improved

    def _finalize(self):
        self._evaluate_population()
        fittest = self.population.get_fittest_individual()
        if fittest is not None:
            self.best, self.best_evaluation = fittest

    def _report_progress(self):
        if self.iteration == 0 or self._last_fittest is None:
            super()._report_progress()
            return
        logger.info(f"generation {self.iteration:3d}: fittest {self._last_fittest} "
                    f"(mean score {self._last_fittest.mean_score:.2f})")

    def _terminate(self) -> bool:
        return self.iteration >= self._config.generations
