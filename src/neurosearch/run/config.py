import configparser
import os
from neurosearch.activations     import activations
from neurosearch.genotype.neuron import INSERTABLE_KINDS, NeuronKind

# Names accepted by the acceptance-strategy options
HILL_CLIMB_ACCEPTANCE = ('strict', 'any')
NAS_ACCEPTANCE        = ('any', 'selected', 'exact_guarded')
METRIC_NAMES          = ('exact', 'generous', 'forgiveness')

class Config:

    @staticmethod
    def _parse_activation_options(raw_options):
        """
        Parse activation_options from string to list.

        Parameters:
            raw_options: Either "all", a comma-separated list, or already a list

        Returns:
            List of activation function names
        """
        if raw_options is None:
            raise ValueError("activation_options cannot be None")
        if isinstance(raw_options, str):
            if raw_options == 'all':
                return list(activations.keys())
            raw_options = [opt.strip() for opt in raw_options.split(',')]

        parsed = list(raw_options)
        for opt in parsed:
            if opt not in activations:
                raise ValueError(f"Invalid activation function '{opt}' in activation_options")
        return parsed

    @staticmethod
    def _parse_neuron_kinds(raw_kinds):
        """
        Parse neuron_kinds from string to a list of NeuronKind.

        Parameters:
            raw_kinds: Either "all", a comma-separated list of kind names, or already a list

        Returns:
            List of insertable NeuronKind values
        """
        if raw_kinds is None:
            raise ValueError("neuron_kinds cannot be None")
        if isinstance(raw_kinds, str):
            if raw_kinds == 'all':
                return list(INSERTABLE_KINDS)
            raw_kinds = [kind.strip() for kind in raw_kinds.split(',')]

        parsed = []
        for kind in raw_kinds:
            try:
                kind = NeuronKind(kind)
            except ValueError:
                raise ValueError(f"Invalid neuron kind '{kind}' in neuron_kinds") from None
            if kind not in INSERTABLE_KINDS:
                raise ValueError(f"Neuron kind '{kind.value}' cannot be inserted")
            parsed.append(kind)
        return parsed

    @staticmethod
    def _parse_metrics(raw_metrics):
        """
        Parse metrics_to_optimize from string to a list of metric names.
        """
        if raw_metrics is None:
            raise ValueError("metrics_to_optimize cannot be None")
        if isinstance(raw_metrics, str):
            raw_metrics = [metric.strip() for metric in raw_metrics.split(',')]

        parsed = list(raw_metrics)
        for metric in parsed:
            if metric not in METRIC_NAMES:
                raise ValueError(f"Invalid metric '{metric}' in metrics_to_optimize")
        return parsed

    def _set_defaults(self):
        """
        Give every configuration parameter its default value.
        """
        # [SEARCH]
        self.max_iterations       = 20
        self.max_stall            = 0
        self.num_jobs             = 1
        self.candidates_per_round = None
        self.seed                 = None

        # [EVALUATION]
        self.forgiveness_threshold        = 0.1
        self.dropout_enabled              = True
        self.reset_state_between_sessions = False

        # [MUTATION]
        self.neuron_kinds               = 'all'
        self.activation_options         = ['relu', 'sigmoid', 'tanh', 'leaky_relu', 'linear']
        self.min_weight                 = -1.0
        self.max_weight                 = 1.0
        self.weight_mutation_rate       = 0.1
        self.weight_perturb_strength    = 0.1
        self.architecture_mutation_rate = 0.05
        self.rewire_direct_edges        = False

        # [HILL_CLIMBING]
        self.max_weight_change     = 0.1
        self.hill_climb_acceptance = 'strict'

        # [NAS]
        self.nas_acceptance           = 'exact_guarded'
        self.metrics_to_optimize      = list(METRIC_NAMES)
        self.weight_update_iterations = 0
        self.use_hill_climbing        = False

        # [EVOLUTION]
        self.population_size = 10
        self.generations     = 5

        # [SINGLE_ITEM]
        self.batch_size           = 5
        self.attempts_per_session = 3

        # [REFINEMENT]
        self.sample_subset_size     = 5
        self.trials_per_sample      = 10
        self.improvement_threshold  = 100.0
        self.near_miss_cutoff       = 0.8
        self.fallback_cutoff        = 0.5
        self.refinement_delta_stdev = 0.01
        self.refinement_max_stall   = 5

        # [CONNECTIONS]
        self.max_connection_attempts = 20

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a Config holding defaults.

        Every option is optional in the INI file; missing options keep their default.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config holding the default values.
        """
        self._set_defaults()

        if config_file is None:
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [SEARCH]

        # The maximum number of rounds (or generations) a search runs for.
        self.max_iterations = get_value('SEARCH', 'max_iterations', int, default=self.max_iterations)

        # Stop a search after this many consecutive rounds without improvement.
        # Use 0 to disable the check.
        self.max_stall = get_value('SEARCH', 'max_stall', int, default=self.max_stall)

        # Number of parallel worker processes used to evaluate candidates.
        #   1 = serial, -1 = all available CPU cores, >1 = that many processes
        self.num_jobs = get_value('SEARCH', 'num_jobs', int, default=self.num_jobs)

        # Number of candidates proposed per round by parallel searches.
        # Use "None" to propose one candidate per worker.
        self.candidates_per_round = get_value('SEARCH', 'candidates_per_round', int, default=self.candidates_per_round)

        # Seed of the random number generator driving a search.
        # Use "None" for a different run every time.
        self.seed = get_value('SEARCH', 'seed', int, default=self.seed)

        # [EVALUATION]

        # Relative tolerance of the forgiveness metric: a session passes if every
        # expected value 'e' lies within [e*(1-t), e*(1+t)] of the prediction.
        self.forgiveness_threshold = get_value('EVALUATION', 'forgiveness_threshold', float, default=self.forgiveness_threshold)

        # Whether dropout neurons randomly zero their value during evaluation.
        self.dropout_enabled = get_value('EVALUATION', 'dropout_enabled', bool, default=self.dropout_enabled)

        # Whether neuron values and LSTM cell states are zeroed before each session.
        # If False, state carries over from one session (and one evaluation) to the next.
        self.reset_state_between_sessions = get_value('EVALUATION', 'reset_state_between_sessions', bool,
                                                      default=self.reset_state_between_sessions)

        # [MUTATION]

        # Which neuron kinds architecture mutations may insert.
        # Options: "all" or a comma-separated list (dense, rnn, lstm, cnn, dropout, batch_norm, attention, nca)
        self.neuron_kinds = get_value('MUTATION', 'neuron_kinds', str, default=self.neuron_kinds)

        # Which activation functions newly inserted neurons may pick from.
        # Options: "all" or a comma-separated list (see 'basic_activations.py')
        self.activation_options = get_value('MUTATION', 'activation_options', str, default=self.activation_options)

        # The range from which randomized weights and biases are drawn.
        self.min_weight = get_value('MUTATION', 'min_weight', float, default=self.min_weight)
        self.max_weight = get_value('MUTATION', 'max_weight', float, default=self.max_weight)

        # The probability that weight mutation perturbs a given weight or bias.
        self.weight_mutation_rate = get_value('MUTATION', 'weight_mutation_rate', float, default=self.weight_mutation_rate)

        # The standard deviation of the zero-centered normal distribution
        # from which a weight or bias perturbation is drawn.
        self.weight_perturb_strength = get_value('MUTATION', 'weight_perturb_strength', float, default=self.weight_perturb_strength)

        # The probability that architecture mutation inserts a neuron,
        # and (independently) the probability that it removes one.
        self.architecture_mutation_rate = get_value('MUTATION', 'architecture_mutation_rate', float,
                                                    default=self.architecture_mutation_rate)

        # Whether inserting a neuron between inputs and outputs also removes
        # the direct input->output connections.
        self.rewire_direct_edges = get_value('MUTATION', 'rewire_direct_edges', bool, default=self.rewire_direct_edges)

        # [HILL_CLIMBING]

        # Hill-climbing perturbs one weight by a value drawn uniformly
        # from [-max_weight_change, max_weight_change].
        self.max_weight_change = get_value('HILL_CLIMBING', 'max_weight_change', float, default=self.max_weight_change)

        # When a hill-climbing step is accepted.
        # Allowed values:
        #   "strict" - some metric improves and none regresses
        #   "any"    - some metric improves, regardless of the others
        self.hill_climb_acceptance = get_value('HILL_CLIMBING', 'hill_climb_acceptance', str,
                                               default=self.hill_climb_acceptance)

        # [NAS]

        # When an architecture-search candidate is accepted.
        # Allowed values:
        #   "any"           - some metric improves
        #   "selected"      - some metric listed in 'metrics_to_optimize' improves
        #   "exact_guarded" - exact improves, or exact is unchanged and generous or forgiveness improves
        self.nas_acceptance = get_value('NAS', 'nas_acceptance', str, default=self.nas_acceptance)

        # The metrics considered by the "selected" acceptance strategy (comma-separated).
        self.metrics_to_optimize = get_value('NAS', 'metrics_to_optimize', str, default=self.metrics_to_optimize)

        # Number of hill-climbing steps applied to an architecture candidate
        # before it is compared with the current best (0 disables).
        self.weight_update_iterations = get_value('NAS', 'weight_update_iterations', int,
                                                  default=self.weight_update_iterations)

        # Whether the parallel architecture search hill-climbs the round winner
        # (for 'weight_update_iterations' steps).
        self.use_hill_climbing = get_value('NAS', 'use_hill_climbing', bool, default=self.use_hill_climbing)

        # [EVOLUTION]

        # The number of individuals in each generation.
        self.population_size = get_value('EVOLUTION', 'population_size', int, default=self.population_size)

        # The number of generations of evolutionary training.
        self.generations = get_value('EVOLUTION', 'generations', int, default=self.generations)

        # [SINGLE_ITEM]

        # Number of sessions processed before the best change is considered for adoption.
        self.batch_size = get_value('SINGLE_ITEM', 'batch_size', int, default=self.batch_size)

        # Number of random edits tried per session.
        self.attempts_per_session = get_value('SINGLE_ITEM', 'attempts_per_session', int, default=self.attempts_per_session)

        # [REFINEMENT]

        # Number of near-miss sessions sampled per refinement round.
        self.sample_subset_size = get_value('REFINEMENT', 'sample_subset_size', int, default=self.sample_subset_size)

        # Number of weight perturbations tried per sampled session.
        self.trials_per_sample = get_value('REFINEMENT', 'trials_per_sample', int, default=self.trials_per_sample)

        # Refinement stops once exact accuracy reaches this value.
        self.improvement_threshold = get_value('REFINEMENT', 'improvement_threshold', float, default=self.improvement_threshold)

        # A wrongly classified session is a near miss if its similarity is at least
        # this fraction of 100; if none qualifies, the fallback cutoff is used.
        self.near_miss_cutoff = get_value('REFINEMENT', 'near_miss_cutoff', float, default=self.near_miss_cutoff)
        self.fallback_cutoff  = get_value('REFINEMENT', 'fallback_cutoff' , float, default=self.fallback_cutoff)

        # The standard deviation of the weight perturbations tried by refinement.
        self.refinement_delta_stdev = get_value('REFINEMENT', 'refinement_delta_stdev', float,
                                                default=self.refinement_delta_stdev)

        # Refinement stops after more than this many rounds without improvement.
        self.refinement_max_stall = get_value('REFINEMENT', 'refinement_max_stall', int, default=self.refinement_max_stall)

        # [CONNECTIONS]

        # Number of new connections tried by the connection search.
        self.max_connection_attempts = get_value('CONNECTIONS', 'max_connection_attempts', int,
                                                 default=self.max_connection_attempts)

    def __setattr__(self, name, value):
        """
        Override 'setattr' to automatically parse list-valued options and
        validate strategy names when set. This allows users to write, e.g.,
        config.neuron_kinds = "dense,lstm" and have it converted to a list.
        """
        if name == 'activation_options':
            value = self._parse_activation_options(value)
        elif name == 'neuron_kinds':
            value = self._parse_neuron_kinds(value)
        elif name == 'metrics_to_optimize':
            value = self._parse_metrics(value)
        elif name == 'hill_climb_acceptance' and value not in HILL_CLIMB_ACCEPTANCE:
            raise ValueError(f"Invalid hill_climb_acceptance '{value}'")
        elif name == 'nas_acceptance' and value not in NAS_ACCEPTANCE:
            raise ValueError(f"Invalid nas_acceptance '{value}'")
        super().__setattr__(name, value)
