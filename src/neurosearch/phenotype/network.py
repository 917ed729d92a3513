"""
Network Module

This module implements the forward propagation engine, which executes a
Blueprint over a set of input values for a number of timesteps.

Classes:
    Network: Executes a Blueprint, dispatching on each neuron's kind

Functions:
    softmax: Softmax of a mapping of values, keyed like its input
"""

import numpy as np
import random
from typing import Callable, TYPE_CHECKING

from neurosearch.genotype.neuron import GATE_NAMES, Neuron, NeuronKind
from neurosearch.activations     import sigmoid_activation, tanh_activation
from neurosearch.utils           import get_logger

if TYPE_CHECKING:
    from neurosearch.genotype import Blueprint

logger = get_logger(__name__)

# Activation names already reported as unknown (one warning per name and process)
_unknown_activations: set[str] = set()

BATCH_NORM_EPSILON = 1e-7

def softmax(values: dict[int, float]) -> dict[int, float]:
    """
    Apply the softmax function jointly to all values of a mapping.

    Parameters:
        values: Mapping from ID to value

    Returns:
        Mapping with the same keys, holding non-negative values summing to 1
        (empty if 'values' is empty)
    """
    if not values:
        return {}
    keys = list(values.keys())
    z    = np.array([values[k] for k in keys], dtype=float)
    e    = np.exp(z - np.max(z))   # shift by the maximum to prevent overflow
    p    = e / np.sum(e)
    return {k: float(v) for k, v in zip(keys, p)}

class Network:
    """
    Forward propagation engine for a Blueprint.

    The network operates directly on the Blueprint's neurons: input values are
    written into the input neurons, and every other neuron's 'value' (and, for
    LSTM neurons, 'cell_state') is updated in place. State therefore carries
    over from one forward pass to the next unless 'reset_state' is called.

    At each timestep, the non-input neurons are processed in ascending ID order.
    Each gathers its weighted fan-in (source value times connection weight;
    connections to missing neurons are skipped) and applies the update rule of
    its kind:
        dense:      activation(bias + sum)
        rnn:        activation(bias + sum + previous value)
        lstm:       gated cell update; value = tanh(cell_state) * output gate
        cnn:        mean of activation(bias + kernel . window) over all windows
        dropout:    zero the value with probability 'dropout_rate'
        batch_norm: normalize the value against mean 0 and variance 1
        attention:  activation(bias + sum of softmax(x_i * x_i)-weighted inputs)
        nca:        activation(bias + sum/average of the neighbors' values)
    After the last timestep, the softmax of the output neurons' values is returned.

    Public Properties:
        number_nodes:        Total number of neurons in the network
        number_nodes_hidden: Number of hidden neurons in the network
        number_connections:  Total number of connections in the network

    Public Methods:
        forward_pass(inputs, timesteps): Process inputs and return the output distribution
        raw_outputs():                   Pre-softmax values of the output neurons
        reset_state():                   Zero the values and cell states of non-input neurons
        visualize():                     Render the underlying graph
    """

    def __init__(self,
                 blueprint      : 'Blueprint',
                 rng            : random.Random | None = None,
                 dropout_enabled: bool = True):
        """
        Initialize the network.

        Parameters:
            blueprint:       The graph to execute
            rng:             Source of randomness for dropout neurons
            dropout_enabled: If False, dropout neurons leave values untouched
        """
        self._blueprint      : 'Blueprint'    = blueprint
        self._rng            : random.Random  = rng or random.Random()
        self._dropout_enabled: bool           = dropout_enabled

        self._handlers: dict[NeuronKind, Callable[[Neuron, list[float]], None]] = {
            NeuronKind.DENSE     : self._process_dense,
            NeuronKind.RNN       : self._process_rnn,
            NeuronKind.LSTM      : self._process_lstm,
            NeuronKind.CNN       : self._process_cnn,
            NeuronKind.DROPOUT   : self._process_dropout,
            NeuronKind.BATCH_NORM: self._process_batch_norm,
            NeuronKind.ATTENTION : self._process_attention,
            NeuronKind.NCA       : self._process_nca,
        }

    @property
    def number_nodes(self) -> int:
        """Total number of neurons in the network."""
        return self._blueprint.number_nodes

    @property
    def number_nodes_hidden(self) -> int:
        """Number of hidden neurons in the network."""
        return self._blueprint.number_nodes_hidden

    @property
    def number_connections(self) -> int:
        """Total number of connections in the network."""
        return self._blueprint.number_connections

    def forward_pass(self, inputs: dict[int, float], timesteps: int = 1, reset: bool = False) -> dict[int, float]:
        """
        Perform a complete forward pass through the network.

        Parameters:
            inputs:    Mapping from input neuron ID to value (unknown IDs are ignored)
            timesteps: Number of propagation rounds
            reset:     If True, zero the network state before propagating

        Returns:
            Mapping from output neuron ID to its softmax probability
        """
        blueprint = self._blueprint
        if reset:
            self.reset_state()

        for neuron_id, value in inputs.items():
            neuron = blueprint.neurons.get(neuron_id)
            if neuron is not None:
                neuron.value = float(value)

        order = [nid for nid in sorted(blueprint.neurons)
                 if not blueprint.is_input_node(nid) and not blueprint.neurons[nid].is_input]

        for _ in range(timesteps):
            for neuron_id in order:
                neuron = blueprint.neurons[neuron_id]
                self._handlers[neuron.kind](neuron, self._gather_inputs(neuron))

        return softmax(self.raw_outputs())

    def raw_outputs(self) -> dict[int, float]:
        """
        Return the current (pre-softmax) values of the output neurons.
        Output IDs without a neuron are skipped with a warning.
        """
        outputs = {}
        for output_id in self._blueprint.output_ids:
            neuron = self._blueprint.neurons.get(output_id)
            if neuron is None:
                logger.warning(f"output neuron {output_id} does not exist")
                continue
            outputs[output_id] = neuron.value
        return outputs

    def reset_state(self) -> None:
        """Zero the value and cell state of every non-input neuron."""
        for neuron_id, neuron in self._blueprint.neurons.items():
            if neuron.is_input or self._blueprint.is_input_node(neuron_id):
                continue
            neuron.value      = 0.0
            neuron.cell_state = 0.0

    def visualize(self, view: bool = False):
        return self._blueprint.visualize(view)

    def _gather_inputs(self, neuron: Neuron) -> list[float]:
        """
        Return the weighted values of the neuron's fan-in, in connection order.
        Connections from missing neurons contribute nothing.
        """
        neurons = self._blueprint.neurons
        return [neurons[c.source_id].value * c.weight for c in neuron.connections if c.source_id in neurons]

    def _activate(self, name: str, z: float) -> float:
        """
        Apply the named activation to 'z'; unknown names resolve to the identity.
        """
        function = self._blueprint.activations.get(name)
        if function is None:
            if name not in _unknown_activations:
                _unknown_activations.add(name)
                logger.warning(f"unknown activation '{name}', using linear")
            return float(z)
        return float(function(z))

    # ------------------------------------------------------------------
    # Update rules, one per neuron kind
    # ------------------------------------------------------------------

    def _process_dense(self, neuron: Neuron, inputs: list[float]) -> None:
        neuron.value = self._activate(neuron.activation, neuron.bias + sum(inputs))

    def _process_rnn(self, neuron: Neuron, inputs: list[float]) -> None:
        # previous value enters through an implicit self-connection of weight 1
        neuron.value = self._activate(neuron.activation, neuron.bias + sum(inputs) + neuron.value * 1.0)

    def _process_lstm(self, neuron: Neuron, inputs: list[float]) -> None:
        # zip truncates to the shorter of fan-in and gate vector
        pre = {gate: neuron.bias + sum(x * w for x, w in zip(inputs, neuron.gate_weights.get(gate, [])))
               for gate in GATE_NAMES}

        input_gate  = float(sigmoid_activation(pre["input"]))
        forget_gate = float(sigmoid_activation(pre["forget"]))
        output_gate = float(sigmoid_activation(pre["output"]))
        candidate   = float(tanh_activation(pre["cell"]))

        neuron.cell_state = neuron.cell_state * forget_gate + candidate * input_gate
        neuron.value      = float(np.tanh(neuron.cell_state)) * output_gate

    def _process_cnn(self, neuron: Neuron, inputs: list[float]) -> None:
        windows = []
        for kernel in neuron.kernels:
            if not kernel or len(kernel) > len(inputs):
                continue
            for start in range(len(inputs) - len(kernel) + 1):
                z = neuron.bias + sum(x * k for x, k in zip(inputs[start:start + len(kernel)], kernel))
                windows.append(self._activate(neuron.activation, z))
        neuron.value = sum(windows) / len(windows) if windows else 0.0

    def _process_dropout(self, neuron: Neuron, inputs: list[float]) -> None:
        if self._dropout_enabled and self._rng.random() < neuron.dropout_rate:
            neuron.value = 0.0

    def _process_batch_norm(self, neuron: Neuron, inputs: list[float]) -> None:
        mean, variance = 0.0, 1.0
        neuron.value = (neuron.value - mean) / float(np.sqrt(variance + BATCH_NORM_EPSILON))

    def _process_attention(self, neuron: Neuron, inputs: list[float]) -> None:
        if inputs:
            scores  = {i: x * x for i, x in enumerate(inputs)}
            weights = softmax(scores)
            neuron.attention_weights = [weights[i] for i in range(len(inputs))]
        else:
            neuron.attention_weights = []
        z = neuron.bias + sum(x * w for x, w in zip(inputs, neuron.attention_weights))
        neuron.value = self._activate(neuron.activation, z)

    def _process_nca(self, neuron: Neuron, inputs: list[float]) -> None:
        neurons   = self._blueprint.neurons
        neighbors = [neurons[nid].value for nid in neuron.neighborhood_ids if nid in neurons]
        if neuron.update_rule == "average":
            combined = sum(neighbors) / len(neighbors) if neighbors else 0.0
        else:
            combined = sum(neighbors)
        neuron.value = self._activate(neuron.activation, neuron.bias + combined)
