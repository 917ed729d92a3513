"""
Search Module

This module defines the abstract base class for the search orchestrators,
with built-in support for CPU-based parallelization using joblib.

A search starts from a Blueprint and a list of labeled sessions, and runs
rounds of "propose, isolate, mutate, evaluate, accept" until a round limit
is hit, a tracked metric reaches 100%, or too many consecutive rounds pass
without improvement. The Blueprint passed in is never modified: candidates
are always clones, and the committed best is replaced by single assignment
once a round has been decided.

Classes:
    SearchResult: Outcome of a search
    Search:       Abstract base class of all search orchestrators

Functions:
    evaluate_with_config: Evaluate a graph with the evaluation settings of a Config
"""

import random
from abc         import ABC, abstractmethod
from dataclasses import dataclass, field
from joblib      import Parallel, cpu_count, delayed
from typing      import Any, Callable

from neurosearch.evaluation import Evaluation, Session, evaluate_model_performance
from neurosearch.genotype   import Blueprint
from neurosearch.run.config import Config
from neurosearch.utils      import get_logger

logger = get_logger(__name__)

def evaluate_with_config(blueprint: Blueprint,
                         sessions : list[Session],
                         config   : Config,
                         rng      : random.Random | None = None) -> Evaluation:
    """
    Evaluate a graph with the evaluation settings of 'config'.
    The graph's neuron state is updated in place.
    """
    return evaluate_model_performance(blueprint,
                                      sessions,
                                      forgiveness_threshold = config.forgiveness_threshold,
                                      rng                   = rng,
                                      dropout_enabled       = config.dropout_enabled,
                                      reset_state           = config.reset_state_between_sessions)

@dataclass
class SearchResult:
    """
    Outcome of a search.

    Public Attributes:
        blueprint:  The best Blueprint found (a copy, never the one passed in)
        evaluation: Its Evaluation on the sessions
        iterations: Number of rounds run
        history:    Evaluation of the committed best after each round
    """
    blueprint : Blueprint
    evaluation: Evaluation
    iterations: int
    history   : list[Evaluation] = field(default_factory=list)

class Search(ABC):
    """
    Abstract base class for implementing a search orchestrator.

    Subclasses must implement:
    - _search_round(): Run one round and return whether the committed best improved

    Subclasses can override:
    - _initialize(): Prepare state after the initial evaluation
    - _finalize():   Last step before the result is returned
    - _terminate():  Custom termination logic (default: round limit, stall limit, perfect metric)
    - _report_progress(), _final_report(): Progress display

    Public Attributes:
        best:            The committed best Blueprint
        best_evaluation: Its Evaluation
        iteration:       Number of rounds run so far
        stall:           Number of consecutive rounds without improvement

    Public Properties:
        worker_count: Number of parallel workers

    Public Methods:
        run(): Execute a complete search

    Parallelization of candidate evaluation:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of parallel processes
        num_jobs=-1: Use all available CPU cores
    """

    # Metrics whose reaching 100% stops the search early
    tracked_metrics: tuple[str, ...] = ('exact',)

    def __init__(self, config: Config, rng: random.Random | None = None, suppress_output: bool = False):
        """
        Initialize the search.

        Parameters:
            config:          Configuration parameters
            rng:             Source of randomness driving the search
                             (defaults to a generator seeded with 'config.seed')
            suppress_output: If True, suppress progress and final reports
        """
        self._config         : Config        = config
        self._rng            : random.Random = rng if rng is not None else random.Random(config.seed)
        self._suppress_output: bool          = suppress_output
        self._sessions       : list[Session] = []

        self.best           : Blueprint  | None = None
        self.best_evaluation: Evaluation | None = None
        self.iteration      : int               = 0
        self.stall          : int               = 0
        self.history        : list[Evaluation]  = []

    @property
    def worker_count(self) -> int:
        num_jobs = self._config.num_jobs
        return num_jobs if num_jobs > 0 else cpu_count()

    def run(self, blueprint: Blueprint, sessions: list[Session]) -> SearchResult:
        """
        Run the search.

        Parameters:
            blueprint: The starting graph (left untouched)
            sessions:  Labeled sessions the graph is evaluated on

        Returns:
            SearchResult holding the best graph found
        """
        self._sessions       = list(sessions)
        self.best            = blueprint.clone()
        self.best_evaluation = self._evaluate(self.best, self._sessions)
        self.iteration       = 0
        self.stall           = 0
        self.history         = []

        self._initialize()

        if not self._suppress_output:
            self._report_progress()

        while not self._terminate():
            self.iteration += 1

            improved   = self._search_round()
            self.stall = 0 if improved else self.stall + 1
            self.history.append(self.best_evaluation)

            if not self._suppress_output:
                self._report_progress()

        self._finalize()

        if not self._suppress_output:
            self._final_report()

        return SearchResult(self.best, self.best_evaluation, self.iteration, list(self.history))

    def _initialize(self):
        """
        Prepare search-specific state once the starting graph has been evaluated.
        """
        pass

    @abstractmethod
    def _search_round(self) -> bool:
        """
        Run one round of the search.

        Implementations propose candidates from clones of 'self.best', evaluate
        them, and replace 'self.best' and 'self.best_evaluation' if a candidate
        is accepted.

        Returns:
            bool: True if the committed best improved during the round
        """
        pass

    def _finalize(self):
        pass

    def _evaluate(self, blueprint: Blueprint, sessions: list[Session], rng: random.Random | None = None) -> Evaluation:
        return evaluate_with_config(blueprint, sessions, self._config, rng if rng is not None else self._rng)

    def _spawn_seeds(self, count: int) -> list[int]:
        """
        Draw one seed per worker from the search's generator, so that no two
        workers share a generator and a seeded search stays reproducible.
        """
        return [self._rng.getrandbits(32) for _ in range(count)]

    def _run_parallel(self, fn: Callable[..., Any], args_list: list[tuple]) -> list[Any]:
        """
        Call 'fn' once per argument tuple and collect the results in submission order.

        Uses serial or parallel execution based on 'config.num_jobs':
        - num_jobs=1: Sequential calls in this process
        - num_jobs>1 or -1: Parallel calls using joblib

        Parameters:
            fn:        The function to call (must be picklable for parallel runs)
            args_list: One tuple of positional arguments per call

        Returns:
            The results, in the order of 'args_list'
        """
        num_jobs  = self._config.num_jobs
        serialize = num_jobs == 1

        if serialize:
            return [fn(*args) for args in args_list]
        return Parallel(num_jobs)(delayed(fn)(*args) for args in args_list)

    def _report_progress(self):
        """
        Report progress after each round.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        logger.info(f"{type(self).__name__} round {self.iteration:3d}: {self.best_evaluation} "
                    f"(nodes={self.best.number_nodes}, connections={self.best.number_connections})")

    def _final_report(self):
        """
        Produce final report at the end of the search.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        logger.info(f"{type(self).__name__} finished after {self.iteration} rounds: {self.best_evaluation}")

    def _terminate(self) -> bool:
        """
        Determine whether the search should terminate.

        This default implementation stops the search after a maximum number of
        rounds, after 'max_stall' consecutive rounds without improvement (if
        'max_stall' is positive), and once a tracked metric reaches 100%.

        Returns:
            bool: True if the search should stop, False otherwise
        """
        # Has this search run for too long?
        terminate = self.iteration >= self._config.max_iterations

        # Has it stopped making progress?
        max_stall = self._config.max_stall
        if max_stall and max_stall > 0:
            terminate = terminate or self.stall >= max_stall

        # Is there nothing left to improve?
        perfect = any(getattr(self.best_evaluation, metric) >= 100.0 for metric in self.tracked_metrics)

        return terminate or perfect
