"""
Neuron Module.

This module implements the Neuron class, the NeuronKind enumeration and the
BatchNormParams record for heterogeneous neural graphs.

Classes:
    NeuronKind:      Enumeration of the computational kinds a neuron can have
    BatchNormParams: The four scalar parameters of a batch-normalization neuron
    Neuron:          A single computational unit with a kind-specific payload
"""

import random
from enum   import Enum
from typing import Any

from neurosearch.activations import activation_codes, initial_activations
from neurosearch.genotype.connection import Connection
from neurosearch.utils import get_logger

logger = get_logger(__name__)

class NeuronKind(Enum):
    """
    Neurons come in nine kinds; the kind selects the update rule applied
    during forward propagation and which payload fields are meaningful.
    """
    INPUT      = "input"
    DENSE      = "dense"
    RNN        = "rnn"
    LSTM       = "lstm"
    CNN        = "cnn"
    DROPOUT    = "dropout"
    BATCH_NORM = "batch_norm"
    ATTENTION  = "attention"
    NCA        = "nca"

# Every kind a mutation operator may insert
INSERTABLE_KINDS = [kind for kind in NeuronKind if kind is not NeuronKind.INPUT]

# The four LSTM gates, each holding one weight per incoming connection
GATE_NAMES = ("input", "forget", "output", "cell")

DEFAULT_KERNELS      = [[0.2, 0.5], [0.3, 0.4]]
DEFAULT_DROPOUT_RATE = 0.5
NCA_UPDATE_RULES     = ("sum", "average")

class BatchNormParams:
    """
    Normalization parameters of a 'batch_norm' neuron.

    Public Attributes:
        gamma: Scale parameter
        beta:  Shift parameter
        mean:  Running mean
        var:   Running variance
    """

    def __init__(self, gamma: float = 1.0, beta: float = 0.0, mean: float = 0.0, var: float = 1.0):
        self.gamma: float = gamma
        self.beta : float = beta
        self.mean : float = mean
        self.var  : float = var

    def copy(self) -> 'BatchNormParams':
        return BatchNormParams(self.gamma, self.beta, self.mean, self.var)

    def to_dict(self) -> dict:
        return {'gamma': self.gamma, 'beta': self.beta, 'mean': self.mean, 'var': self.var}

    @classmethod
    def from_dict(cls, data: dict) -> 'BatchNormParams':
        return cls(float(data['gamma']), float(data['beta']), float(data['mean']), float(data['var']))

    def __eq__(self, other):
        if not isinstance(other, BatchNormParams):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"BatchNormParams(gamma={self.gamma}, beta={self.beta}, mean={self.mean}, var={self.var})"

class Neuron:
    """
    A single computational unit of a neural graph.

    Every neuron carries the same scalar state (value, bias, activation name)
    and an ordered fan-in (list of Connection objects). What it does with
    them during forward propagation depends on its kind, and some kinds
    carry extra state:
      + lstm:       'gate_weights' (one weight vector per gate) and 'cell_state'
      + cnn:        'kernels' (list of weight vectors slid over the fan-in)
      + dropout:    'dropout_rate'
      + batch_norm: 'batch_norm_params'
      + attention:  'attention' flag and 'attention_weights'
      + nca:        'neighborhood_ids' and 'update_rule'
    Fields that do not apply to a neuron's kind keep empty/neutral values.

    Public Attributes:
        id:                Unique identifier for this neuron (within its graph)
        kind:              NeuronKind of the neuron
        value:             Current value (output) of the neuron
        bias:              Bias added to the neuron's weighted input
        activation:        Name of the activation function
        connections:       Ordered list of incoming connections
        gate_weights:      LSTM gate weights, keyed by gate name
        cell_state:        LSTM cell state, persistent across timesteps
        kernels:           CNN convolution kernels
        dropout_rate:      Probability of zeroing the value (dropout only)
        batch_norm_params: Normalization parameters (batch_norm only)
        attention:         Whether the neuron applies attention
        attention_weights: Attention weight vector
        neighborhood_ids:  IDs of the neurons an NCA neuron reads from
        update_rule:       How an NCA neuron combines neighbor values ("sum" or "average")

    Public Properties:
        is_input: True for input neurons
        fan_in:   Number of incoming connections

    Public Methods:
        create():                 Create a neuron of a given kind with random state
        initialize_gate_weights(): Size the LSTM gate vectors to the fan-in
        mutate():                 Stochastically perturb bias, weights and gate weights
        randomize():              Replace bias, weights and gate weights by random values
        copy():                   Structural copy sharing no mutable storage
        to_dict(), from_dict():   Convert to/from a plain dictionary
    """

    def __init__(self,
                 neuron_id        : int,
                 kind             : NeuronKind,
                 value            : float = 0.0,
                 bias             : float = 0.0,
                 activation       : str   = "linear",
                 connections      : list[Connection]       | None = None,
                 gate_weights     : dict[str, list[float]] | None = None,
                 cell_state       : float = 0.0,
                 kernels          : list[list[float]]      | None = None,
                 dropout_rate     : float                  | None = None,
                 batch_norm_params: BatchNormParams        | None = None,
                 attention_weights: list[float]            | None = None,
                 neighborhood_ids : list[int]              | None = None,
                 update_rule      : str = "sum"):
        """
        Initialize a neuron.
        Payload fields that are not specified receive the defaults of the
        neuron's kind (e.g. default kernels for 'cnn', a dropout rate of 0.5
        for 'dropout', unit-variance parameters for 'batch_norm').

        Parameters:
            neuron_id:         Unique identifier for this neuron
            kind:              NeuronKind of the neuron
            value:             Initial value
            bias:              Bias value
            activation:        Name of the activation function
            connections:       Incoming connections
            gate_weights:      LSTM gate weights keyed by gate name
            cell_state:        Initial LSTM cell state
            kernels:           CNN kernels
            dropout_rate:      Dropout probability
            batch_norm_params: Batch normalization parameters
            attention_weights: Attention weight vector
            neighborhood_ids:  NCA neighbor IDs
            update_rule:       NCA update rule
        """
        self.id         : int              = int(neuron_id)
        self.kind       : NeuronKind       = kind
        self.value      : float            = float(value)
        self.bias       : float            = float(bias)
        self.activation : str              = activation
        self.connections: list[Connection] = list(connections) if connections else []

        if gate_weights is None and kind == NeuronKind.LSTM:
            gate_weights = {gate: [] for gate in GATE_NAMES}
        self.gate_weights: dict[str, list[float]] = \
            {gate: list(weights) for gate, weights in gate_weights.items()} if gate_weights else {}
        self.cell_state  : float = float(cell_state)

        if kernels is None and kind == NeuronKind.CNN:
            kernels = DEFAULT_KERNELS
        self.kernels: list[list[float]] = [list(kernel) for kernel in kernels] if kernels else []

        if dropout_rate is None:
            dropout_rate = DEFAULT_DROPOUT_RATE if kind == NeuronKind.DROPOUT else 0.0
        self.dropout_rate: float = float(dropout_rate)

        if batch_norm_params is None and kind == NeuronKind.BATCH_NORM:
            batch_norm_params = BatchNormParams()
        self.batch_norm_params: BatchNormParams | None = batch_norm_params

        self.attention        : bool        = kind == NeuronKind.ATTENTION
        self.attention_weights: list[float] = list(attention_weights) if attention_weights else []

        self.neighborhood_ids: list[int] = list(neighborhood_ids) if neighborhood_ids else []
        self.update_rule     : str       = update_rule

    @classmethod
    def create(cls,
               neuron_id         : int,
               kind              : NeuronKind,
               rng               : random.Random,
               activation_options: list[str] | None = None) -> 'Neuron':
        """
        Create a neuron of the given kind with random initial state.

        The value and bias are drawn uniformly from [-1, 1]. Every kind except
        'dropout' (which passes values through untouched) picks its activation
        at random among 'activation_options'.

        Parameters:
            neuron_id:          ID of the new neuron
            kind:               NeuronKind of the new neuron
            rng:                Source of randomness
            activation_options: Activation names to choose from
                                (defaults to the standard initial activations)

        Returns:
            The new neuron (not yet connected)
        """
        if activation_options is None:
            activation_options = initial_activations

        activation = "linear"
        if kind not in (NeuronKind.INPUT, NeuronKind.DROPOUT):
            activation = rng.choice(activation_options)

        return cls(neuron_id,
                   kind,
                   value      = rng.uniform(-1.0, 1.0),
                   bias       = rng.uniform(-1.0, 1.0),
                   activation = activation)

    @property
    def is_input(self) -> bool:
        return self.kind == NeuronKind.INPUT

    @property
    def fan_in(self) -> int:
        """Number of incoming connections."""
        return len(self.connections)

    def initialize_gate_weights(self, rng: random.Random, stdev: float = 0.5) -> None:
        """
        Size every LSTM gate weight vector to the neuron's current fan-in.

        Weights are drawn from a zero-centered normal distribution. A neuron
        without incoming connections keeps empty gate vectors (its gates then
        reduce to the bias alone).

        Parameters:
            rng:   Source of randomness
            stdev: Standard deviation of the initial gate weights
        """
        fan_in = len(self.connections)
        if fan_in == 0:
            logger.warning(f"LSTM neuron {self.id} has no connections to initialize gate weights")
            self.gate_weights = {gate: [] for gate in GATE_NAMES}
            return

        self.gate_weights = {gate: [rng.gauss(0, 1) * stdev for _ in range(fan_in)] for gate in GATE_NAMES}

    def mutate(self,
               rng       : random.Random,
               rate      : float,
               strength  : float,
               min_weight: float = float('-inf'),
               max_weight: float = float('inf')) -> None:
        """
        Stochastically mutate the neuron's parameters.

        The bias, every connection weight and every LSTM gate weight is, with
        probability 'rate' and independently of the others, modified additively
        by a value drawn from a zero-centered normal distribution with standard
        deviation 'strength', then clipped to [min_weight, max_weight].
        Input neurons are never mutated.

        Parameters:
            rng:        Source of randomness
            rate:       Probability that a given parameter is perturbed
            strength:   Standard deviation of the perturbation
            min_weight: Lower bound for the mutated parameters
            max_weight: Upper bound for the mutated parameters
        """
        if self.is_input:
            return

        if rng.random() < rate:
            self.bias = min(max_weight, max(min_weight, self.bias + rng.gauss(0, strength)))

        for connection in self.connections:
            connection.mutate(rng, rate, strength, min_weight, max_weight)

        for weights in self.gate_weights.values():
            for i in range(len(weights)):
                if rng.random() < rate:
                    weights[i] = min(max_weight, max(min_weight, weights[i] + rng.gauss(0, strength)))

    def randomize(self, rng: random.Random, min_weight: float = -1.0, max_weight: float = 1.0) -> None:
        """
        Replace bias, connection weights and LSTM gate weights by values drawn
        uniformly from [min_weight, max_weight]. Input neurons are left untouched.
        """
        if self.is_input:
            return

        self.bias = rng.uniform(min_weight, max_weight)
        for connection in self.connections:
            connection.randomize(rng, min_weight, max_weight)
        for weights in self.gate_weights.values():
            for i in range(len(weights)):
                weights[i] = rng.uniform(min_weight, max_weight)

    def copy(self) -> 'Neuron':
        """
        Return a structural copy of the neuron.
        The copy shares no list or dictionary with the original.
        """
        return Neuron(self.id,
                      self.kind,
                      value             = self.value,
                      bias              = self.bias,
                      activation        = self.activation,
                      connections       = [connection.copy() for connection in self.connections],
                      gate_weights      = self.gate_weights,   # copied element-wise by __init__
                      cell_state        = self.cell_state,
                      kernels           = self.kernels,
                      dropout_rate      = self.dropout_rate,
                      batch_norm_params = self.batch_norm_params.copy() if self.batch_norm_params else None,
                      attention_weights = self.attention_weights,
                      neighborhood_ids  = self.neighborhood_ids,
                      update_rule       = self.update_rule)

    def to_dict(self) -> dict[str, Any]:
        """
        Return a plain-dictionary description of the neuron.
        Only payload fields meaningful for the neuron's kind are included.
        """
        data = {'id'         : self.id,
                'kind'       : self.kind.value,
                'value'      : self.value,
                'bias'       : self.bias,
                'activation' : self.activation,
                'connections': [connection.to_list() for connection in self.connections]}

        if self.kind == NeuronKind.LSTM:
            data['gate_weights'] = {gate: list(weights) for gate, weights in self.gate_weights.items()}
            data['cell_state']   = self.cell_state
        elif self.kind == NeuronKind.CNN:
            data['kernels'] = [list(kernel) for kernel in self.kernels]
        elif self.kind == NeuronKind.DROPOUT:
            data['dropout_rate'] = self.dropout_rate
        elif self.kind == NeuronKind.BATCH_NORM and self.batch_norm_params is not None:
            data['batch_norm_params'] = self.batch_norm_params.to_dict()
        elif self.kind == NeuronKind.ATTENTION:
            data['attention_weights'] = list(self.attention_weights)
        elif self.kind == NeuronKind.NCA:
            data['neighborhood_ids'] = list(self.neighborhood_ids)
            data['update_rule']      = self.update_rule

        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Neuron':
        """
        Create a neuron from a dictionary produced by 'to_dict'.

        Raises:
            KeyError:   If a required key is missing
            ValueError: If the kind is unknown or a field has the wrong type
            TypeError:  If a field has the wrong structure
        """
        kind = NeuronKind(data['kind'])
        batch_norm_params = data.get('batch_norm_params')
        return cls(int(data['id']),
                   kind,
                   value             = float(data.get('value', 0.0)),
                   bias              = float(data.get('bias', 0.0)),
                   activation        = data.get('activation', "linear"),
                   connections       = [Connection(source_id, weight) for source_id, weight in data.get('connections', [])],
                   gate_weights      = {gate: [float(w) for w in weights]
                                        for gate, weights in data['gate_weights'].items()} if 'gate_weights' in data else None,
                   cell_state        = float(data.get('cell_state', 0.0)),
                   kernels           = [[float(k) for k in kernel] for kernel in data['kernels']] if 'kernels' in data else None,
                   dropout_rate      = data.get('dropout_rate'),
                   batch_norm_params = BatchNormParams.from_dict(batch_norm_params) if batch_norm_params else None,
                   attention_weights = [float(w) for w in data.get('attention_weights', [])],
                   neighborhood_ids  = [int(i) for i in data.get('neighborhood_ids', [])],
                   update_rule       = data.get('update_rule', "sum"))

    def __repr__(self):
        return (f"Neuron(neuron_id={self.id:+03d}, kind=NeuronKind.{self.kind.name:10s},"
                f"value={self.value}, bias={self.bias}, activation={self.activation!r},"
                f"connections={self.connections!r})")

    def __str__(self):
        if self.is_input:
            return f"[I{self.id}]"
        else:
            # Get the 3-letter activation code
            act_code = activation_codes.get(self.activation, "???")
            cxns = ''.join(str(connection) for connection in self.connections)
            return f"[{self.kind.value}{self.id},{act_code},b={self.bias:.2f}]<-{cxns}"
