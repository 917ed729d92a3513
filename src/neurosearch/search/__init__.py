"""
Search Package

This package implements the search orchestrators: algorithms that repeatedly
clone the current best graph, edit the clone, evaluate it, and commit it if
an acceptance strategy prefers it.

Modules:
    acceptance:    Acceptance strategies and improvement scores
    search:        Search base class and SearchResult
    hill_climbing: HillClimber
    nas:           SequentialNAS and ParallelNAS
    connections:   ConnectionSearch
    single_item:   SingleItemLearner
    refinement:    TargetedMicroRefinement
    evolutionary:  EvolutionaryTrainer
"""

from neurosearch.search.acceptance import (
    any_improves,
    exact_guarded,
    get_strategy,
    improvement_score,
    positive_improvement,
    select_best,
    selected_metrics,
    strict_no_regression
)
from neurosearch.search.search        import Search, SearchResult, evaluate_with_config
from neurosearch.search.hill_climbing import HillClimber, hill_climb, perturb_random_weight
from neurosearch.search.nas           import ParallelNAS, SequentialNAS, propose_architecture
from neurosearch.search.connections   import ConnectionSearch
from neurosearch.search.single_item   import OPERATORS, SingleItemLearner, apply_operator
from neurosearch.search.refinement    import TargetedMicroRefinement
from neurosearch.search.evolutionary  import EvolutionaryTrainer

__all__ = ['ConnectionSearch',
           'EvolutionaryTrainer',
           'HillClimber',
           'OPERATORS',
           'ParallelNAS',
           'Search',
           'SearchResult',
           'SequentialNAS',
           'SingleItemLearner',
           'TargetedMicroRefinement',
           'any_improves',
           'apply_operator',
           'evaluate_with_config',
           'exact_guarded',
           'get_strategy',
           'hill_climb',
           'improvement_score',
           'perturb_random_weight',
           'positive_improvement',
           'propose_architecture',
           'select_best',
           'selected_metrics',
           'strict_no_regression']
