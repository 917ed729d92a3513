"""
Blueprint Module

This module implements the Blueprint class, the network graph operated on by
the forward propagation engine and the search orchestrators, together with
the exceptions raised by its structural operators.

Classes:
    BlueprintError:     Base class for errors raised while editing a Blueprint
    StructuralError:    A structural edit is illegal (graph left unchanged)
    SerializationError: A serialized Blueprint description is malformed
    Blueprint:          A graph of heterogeneous neurons
"""

import json
import random
from collections import deque
from typing      import Any, Callable
import graphviz  # type: ignore

from neurosearch.activations         import activations as default_activations
from neurosearch.genotype.connection import Connection
from neurosearch.genotype.neuron     import BatchNormParams, INSERTABLE_KINDS, Neuron, NeuronKind
from neurosearch.utils               import get_logger

logger = get_logger(__name__)

class BlueprintError(Exception):
    """Base class for errors raised while editing or rebuilding a Blueprint."""

class StructuralError(BlueprintError, ValueError):
    """An illegal structural edit; the Blueprint is left unchanged."""

class SerializationError(BlueprintError, ValueError):
    """A serialized Blueprint description could not be interpreted."""

class Blueprint:
    """
    A graph of heterogeneous neurons.

    The graph is stored as a table of neurons keyed by ID. Each neuron owns its
    fan-in (the list of connections coming into it), so edges are recorded on
    their target. Two ordered ID lists mark which neurons receive the network
    inputs and which deliver its outputs.

    Connections referring to neurons that do not exist are tolerated: the
    forward propagation engine simply skips them. Output reachability after
    structural edits is not enforced, but can be checked with
    'validate_connections'.

    All operators that involve randomness take an explicit 'random.Random'
    instance, so that concurrent candidates never share a generator.

    Public Attributes:
        neurons:     Dictionary mapping neuron ID to Neuron
        input_ids:   Ordered list of input neuron IDs
        output_ids:  Ordered list of output neuron IDs
        activations: Registry mapping activation names to functions (shared, read-only)

    Public Properties:
        number_nodes:        Total number of neurons
        number_nodes_hidden: Number of neurons that are neither inputs nor outputs
        number_connections:  Total number of connections
        hidden_ids:          Sorted IDs of the hidden neurons

    Public Methods:
        create():                          Build a fresh input/output graph
        clone():                           Independent structural copy
        insert_neuron_between_inputs_and_outputs(),
        insert_neuron_with_random_connections(),
        insert_neuron_with_random_connections_and_reconnect(),
        remove_neuron(),
        add_connection(), remove_connection(), reweight_connection(),
        modify_activation(),
        randomize_weights(), mutate_weights(), mutate_architecture(),
        crossover():                       Mutation and recombination operators
        validate_connections():            Check that every output is reachable from the inputs
        to_dict(), from_dict(),
        to_json(), from_json():            Structural (de)serialization
        visualize():                       Render the graph with Graphviz
    """

    def __init__(self, activations: dict[str, Callable] | None = None):
        """
        Initialize an empty Blueprint.

        Parameters:
            activations: Activation function registry (defaults to the built-in one)
        """
        self.neurons    : dict[int, Neuron]    = {}
        self.input_ids  : list[int]            = []
        self.output_ids : list[int]            = []
        self.activations: dict[str, Callable]  = activations if activations is not None else default_activations

    @classmethod
    def create(cls,
               num_inputs    : int,
               num_outputs   : int,
               rng           : random.Random | None = None,
               output_kind   : NeuronKind = NeuronKind.DENSE,
               activation    : str        = "linear",
               connect       : bool       = True) -> 'Blueprint':
        """
        Create a graph consisting of input and output neurons only.

        Input neurons get IDs 1..num_inputs, output neurons the following IDs.
        Output neurons start with zero bias. If 'connect' is True every input
        is connected to every output with a weight drawn uniformly from [-1, 1].

        Parameters:
            num_inputs:  Number of input neurons
            num_outputs: Number of output neurons
            rng:         Source of randomness (for the initial weights)
            output_kind: NeuronKind of the output neurons
            activation:  Activation of the output neurons
            connect:     Whether to fully connect inputs to outputs

        Returns:
            The new Blueprint
        """
        rng = rng or random.Random()
        blueprint = cls()

        input_ids  = list(range(1, num_inputs + 1))
        output_ids = list(range(num_inputs + 1, num_inputs + num_outputs + 1))

        for input_id in input_ids:
            blueprint.add_neuron(Neuron(input_id, NeuronKind.INPUT))
        for output_id in output_ids:
            output = Neuron(output_id, output_kind, activation=activation)
            if connect:
                output.connections = [Connection(input_id, rng.uniform(-1.0, 1.0)) for input_id in input_ids]
            blueprint.add_neuron(output)

        blueprint.add_input_nodes(input_ids)
        blueprint.add_output_nodes(output_ids)
        return blueprint

    # ------------------------------------------------------------------
    # Construction and introspection
    # ------------------------------------------------------------------

    def add_neuron(self, neuron: Neuron) -> None:
        """
        Add a neuron to the graph.

        Raises:
            StructuralError: If a neuron with the same ID already exists
        """
        if neuron.id in self.neurons:
            raise StructuralError(f"neuron {neuron.id} already exists")
        self.neurons[neuron.id] = neuron

    def add_input_nodes(self, ids: list[int]) -> None:
        self.input_ids.extend(ids)

    def add_output_nodes(self, ids: list[int]) -> None:
        self.output_ids.extend(ids)

    def is_input_node(self, neuron_id: int) -> bool:
        return neuron_id in self.input_ids

    def is_output_node(self, neuron_id: int) -> bool:
        return neuron_id in self.output_ids

    @property
    def number_nodes(self) -> int:
        """Total number of neurons in the graph."""
        return len(self.neurons)

    @property
    def number_nodes_hidden(self) -> int:
        """Number of neurons that are neither inputs nor outputs."""
        return len(self.hidden_ids)

    @property
    def number_connections(self) -> int:
        """Total number of connections in the graph."""
        return sum(len(neuron.connections) for neuron in self.neurons.values())

    @property
    def hidden_ids(self) -> list[int]:
        """Sorted IDs of the neurons that are neither inputs nor outputs."""
        return sorted(nid for nid in self.neurons if not self.is_input_node(nid) and not self.is_output_node(nid))

    def next_neuron_id(self) -> int:
        """Return a fresh neuron ID: one more than the largest existing ID (1 on an empty graph)."""
        return max(self.neurons, default=0) + 1

    # ------------------------------------------------------------------
    # Candidate isolation
    # ------------------------------------------------------------------

    def clone(self) -> 'Blueprint':
        """
        Return an independent structural copy of the graph.

        Every neuron (with its connection list, gate weights, kernels and other
        payload) and both ID lists are copied; only the activation registry,
        which is read-only, is shared. Mutating the clone never affects the
        original and vice versa.
        """
        twin = Blueprint(self.activations)
        twin.neurons    = {nid: neuron.copy() for nid, neuron in self.neurons.items()}
        twin.input_ids  = list(self.input_ids)
        twin.output_ids = list(self.output_ids)
        return twin

    # ------------------------------------------------------------------
    # Neuron insertion and removal
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_kind(kind: NeuronKind | str) -> NeuronKind:
        """
        Convert 'kind' to an insertable NeuronKind.

        Raises:
            StructuralError: If the kind is unknown or is 'input'
        """
        try:
            kind = NeuronKind(kind)
        except ValueError:
            raise StructuralError(f"invalid neuron kind: {kind}") from None
        if kind not in INSERTABLE_KINDS:
            raise StructuralError(f"neurons of kind '{kind.value}' cannot be inserted")
        return kind

    def _finalize_neuron(self, neuron: Neuron, rng: random.Random) -> None:
        """
        Initialize the kind-specific state that depends on the neuron's final fan-in.
        """
        if neuron.kind == NeuronKind.LSTM:
            neuron.initialize_gate_weights(rng)
        elif neuron.kind == NeuronKind.NCA:
            neuron.neighborhood_ids = list(self.input_ids)
            neuron.update_rule      = "sum"
        elif neuron.kind == NeuronKind.BATCH_NORM and neuron.batch_norm_params is None:
            neuron.batch_norm_params = BatchNormParams()

    def insert_neuron_between_inputs_and_outputs(self,
                                                 kind              : NeuronKind | str,
                                                 rng               : random.Random,
                                                 rewire            : bool = False,
                                                 activation_options: list[str] | None = None) -> int:
        """
        Insert a new neuron fed by every input and feeding every output.

        Each new connection gets a weight drawn uniformly from [-1, 1]. Existing
        direct input->output connections are kept unless 'rewire' is True, in
        which case they are removed so that the signal must pass through the
        new neuron. Output IDs without a neuron are skipped with a warning.

        Parameters:
            kind:               NeuronKind (or its name) of the new neuron
            rng:                Source of randomness
            rewire:             Whether to remove direct input->output connections
            activation_options: Activation names the new neuron may pick from

        Returns:
            ID of the new neuron

        Raises:
            StructuralError: If the kind is unknown or not insertable
        """
        kind      = self._resolve_kind(kind)
        neuron_id = self.next_neuron_id()
        neuron    = Neuron.create(neuron_id, kind, rng, activation_options)

        for input_id in self.input_ids:
            neuron.connections.append(Connection(input_id, rng.uniform(-1.0, 1.0)))
        self._finalize_neuron(neuron, rng)
        self.neurons[neuron_id] = neuron

        for output_id in self.output_ids:
            output = self.neurons.get(output_id)
            if output is None:
                logger.warning(f"output neuron {output_id} does not exist")
                continue
            if rewire:
                output.connections = [c for c in output.connections if not self.is_input_node(c.source_id)]
            output.connections.append(Connection(neuron_id, rng.uniform(-1.0, 1.0)))

        logger.debug(f"inserted {kind.value} neuron {neuron_id} between inputs and outputs")
        return neuron_id

    def insert_neuron_with_random_connections(self,
                                              kind              : NeuronKind | str,
                                              rng               : random.Random,
                                              activation_options: list[str] | None = None) -> int:
        """
        Insert a new neuron fed by 1 or 2 random non-output neurons and
        feeding one randomly chosen output neuron.

        Parameters:
            kind:               NeuronKind (or its name) of the new neuron
            rng:                Source of randomness
            activation_options: Activation names the new neuron may pick from

        Returns:
            ID of the new neuron

        Raises:
            StructuralError: If the kind is unknown or not insertable
        """
        kind      = self._resolve_kind(kind)
        neuron_id = self.next_neuron_id()
        neuron    = Neuron.create(neuron_id, kind, rng, activation_options)

        sources = [nid for nid in sorted(self.neurons) if not self.is_output_node(nid)]
        rng.shuffle(sources)
        for source_id in sources[:rng.randint(1, 2)]:
            neuron.connections.append(Connection(source_id, rng.uniform(-1.0, 1.0)))
        self._finalize_neuron(neuron, rng)
        self.neurons[neuron_id] = neuron

        outputs = [oid for oid in self.output_ids if oid in self.neurons]
        if outputs:
            output_id = rng.choice(outputs)
            self.neurons[output_id].connections.append(Connection(neuron_id, rng.uniform(-1.0, 1.0)))
        else:
            logger.warning(f"no output neuron to connect neuron {neuron_id} to")

        logger.debug(f"inserted {kind.value} neuron {neuron_id} with random connections")
        return neuron_id

    def insert_neuron_with_random_connections_and_reconnect(self,
                                                            kind              : NeuronKind | str,
                                                            rng               : random.Random,
                                                            reconnect_to_last : int,
                                                            activation_options: list[str] | None = None) -> int:
        """
        Insert a new neuron fed by 1 or 2 random non-output neurons, then
        replace the fan-in of every output neuron with connections from the
        last 'reconnect_to_last' hidden neurons (by ascending ID, the new
        neuron included).

        Parameters:
            kind:               NeuronKind (or its name) of the new neuron
            rng:                Source of randomness
            reconnect_to_last:  Number of most recent hidden neurons the outputs are wired to
            activation_options: Activation names the new neuron may pick from

        Returns:
            ID of the new neuron

        Raises:
            StructuralError: If the kind is unknown or not insertable,
                             or if 'reconnect_to_last' is not positive
        """
        if reconnect_to_last < 1:
            raise StructuralError(f"reconnect_to_last must be positive, got {reconnect_to_last}")

        kind      = self._resolve_kind(kind)
        neuron_id = self.next_neuron_id()
        neuron    = Neuron.create(neuron_id, kind, rng, activation_options)

        sources = [nid for nid in sorted(self.neurons) if not self.is_output_node(nid)]
        rng.shuffle(sources)
        for source_id in sources[:rng.randint(1, 2)]:
            neuron.connections.append(Connection(source_id, rng.uniform(-1.0, 1.0)))
        self._finalize_neuron(neuron, rng)
        self.neurons[neuron_id] = neuron

        last_hidden = self.hidden_ids[-reconnect_to_last:]
        for output_id in self.output_ids:
            output = self.neurons.get(output_id)
            if output is None:
                logger.warning(f"output neuron {output_id} does not exist")
                continue
            output.connections = [Connection(hid, rng.uniform(-1.0, 1.0)) for hid in last_hidden]

        logger.debug(f"inserted {kind.value} neuron {neuron_id}, outputs rewired to {last_hidden}")
        return neuron_id

    def remove_neuron(self, neuron_id: int) -> None:
        """
        Remove a hidden neuron and every connection referring to it.

        Raises:
            StructuralError: If the neuron does not exist or is an input/output neuron
        """
        if neuron_id not in self.neurons:
            raise StructuralError(f"neuron {neuron_id} does not exist")
        if self.is_input_node(neuron_id) or self.is_output_node(neuron_id):
            raise StructuralError(f"cannot remove input/output neuron {neuron_id}")

        del self.neurons[neuron_id]
        for neuron in self.neurons.values():
            neuron.connections = [c for c in neuron.connections if c.source_id != neuron_id]
            if neuron_id in neuron.neighborhood_ids:
                neuron.neighborhood_ids = [nid for nid in neuron.neighborhood_ids if nid != neuron_id]

    # ------------------------------------------------------------------
    # Connection operators
    # ------------------------------------------------------------------

    def _get_target(self, target_id: int) -> Neuron:
        target = self.neurons.get(target_id)
        if target is None:
            raise StructuralError(f"target neuron {target_id} does not exist")
        return target

    def connection_exists(self, source_id: int, target_id: int) -> bool:
        target = self.neurons.get(target_id)
        return target is not None and any(c.source_id == source_id for c in target.connections)

    def connection_weight(self, source_id: int, target_id: int) -> float | None:
        """Return the weight of the first (source, target) connection, or None if absent."""
        target = self.neurons.get(target_id)
        if target is None:
            return None
        for connection in target.connections:
            if connection.source_id == source_id:
                return connection.weight
        return None

    def add_connection(self, source_id: int, target_id: int, weight: float) -> None:
        """
        Append a (source -> target) connection to the target's fan-in.
        Duplicates are not rejected; callers check 'connection_exists' first.

        Raises:
            StructuralError: If the target neuron does not exist
        """
        self._get_target(target_id).connections.append(Connection(source_id, weight))

    def remove_connection(self, source_id: int, target_id: int) -> None:
        """
        Remove every (source -> target) connection. A no-op if there is none.
        """
        target = self.neurons.get(target_id)
        if target is None:
            return
        target.connections = [c for c in target.connections if c.source_id != source_id]

    def reweight_connection(self, source_id: int, target_id: int, weight: float) -> None:
        """
        Give the (source -> target) connection a new weight, by removing
        it and adding it back.

        Raises:
            StructuralError: If the target neuron does not exist
        """
        self._get_target(target_id)
        self.remove_connection(source_id, target_id)
        self.add_connection(source_id, target_id, weight)

    def modify_activation(self, neuron_id: int, activation: str) -> None:
        """
        Replace the activation of a neuron.

        Raises:
            StructuralError: If the neuron does not exist
        """
        neuron = self.neurons.get(neuron_id)
        if neuron is None:
            raise StructuralError(f"neuron {neuron_id} does not exist")
        neuron.activation = activation

    # ------------------------------------------------------------------
    # Random selection helpers
    # ------------------------------------------------------------------

    def available_connection_pairs(self) -> list[tuple[int, int]]:
        """
        Return every (source, target) pair that is not connected yet, in
        ascending target then source order. The target is any non-input
        neuron, the source any other neuron.
        """
        ids     = sorted(self.neurons)
        targets = [nid for nid in ids if not self.is_input_node(nid) and not self.neurons[nid].is_input]
        return [(s, t) for t in targets for s in ids if s != t and not self.connection_exists(s, t)]

    def random_connection_pair(self, rng: random.Random) -> tuple[int, int] | None:
        """
        Pick a random (source, target) pair that is not connected yet.

        Returns:
            The pair, or None if every possible pair is already connected
        """
        pairs = self.available_connection_pairs()
        if not pairs:
            return None
        return rng.choice(pairs)

    def random_existing_connection_pair(self, rng: random.Random) -> tuple[int, int] | None:
        """
        Pick a random existing (source, target) connection, or None if there is none.
        """
        pairs = [(c.source_id, nid) for nid in sorted(self.neurons) for c in self.neurons[nid].connections]
        if not pairs:
            return None
        return rng.choice(pairs)

    def random_hidden_neuron(self, rng: random.Random) -> int | None:
        hidden = self.hidden_ids
        return rng.choice(hidden) if hidden else None

    # ------------------------------------------------------------------
    # Weight and architecture operators
    # ------------------------------------------------------------------

    def randomize_weights(self, rng: random.Random, min_weight: float = -1.0, max_weight: float = 1.0) -> None:
        """
        Replace every bias, connection weight and LSTM gate weight of the
        non-input neurons by a value drawn uniformly from [min_weight, max_weight].
        """
        for nid in sorted(self.neurons):
            self.neurons[nid].randomize(rng, min_weight, max_weight)

    def mutate_weights(self,
                       rng       : random.Random,
                       rate      : float = 0.1,
                       strength  : float = 0.1,
                       min_weight: float = float('-inf'),
                       max_weight: float = float('inf')) -> None:
        """
        Perturb every bias, connection weight and LSTM gate weight of the
        non-input neurons, each with probability 'rate', by a normally
        distributed amount with standard deviation 'strength'. Perturbed
        values are clipped to [min_weight, max_weight].
        """
        for nid in sorted(self.neurons):
            self.neurons[nid].mutate(rng, rate, strength, min_weight, max_weight)

    def mutate_architecture(self,
                            rng               : random.Random,
                            rate              : float = 0.05,
                            kinds             : list[NeuronKind] | None = None,
                            activation_options: list[str]        | None = None) -> None:
        """
        Stochastically grow or shrink the graph.

        With probability 'rate' a neuron of a random kind is inserted between
        inputs and outputs; independently, with probability 'rate' a random
        hidden neuron is removed.

        Parameters:
            rng:                Source of randomness
            rate:               Probability of each of the two structural edits
            kinds:              Kinds to choose from when inserting
            activation_options: Activation names the new neuron may pick from
        """
        kinds = kinds or INSERTABLE_KINDS

        if rng.random() < rate:
            kind = rng.choice(kinds)
            self.insert_neuron_between_inputs_and_outputs(kind, rng, activation_options=activation_options)

        if rng.random() < rate:
            neuron_id = self.random_hidden_neuron(rng)
            if neuron_id is not None:
                self.remove_neuron(neuron_id)
                logger.debug(f"removed neuron {neuron_id} from the architecture")

    def crossover(self, other: 'Blueprint', rng: random.Random) -> 'Blueprint':
        """
        Create a child graph from this graph and 'other'.

        The child starts as a clone of this graph; then every neuron of the child
        is, with probability 0.5, replaced by a copy of the neuron with the same
        ID in 'other' (if there is one).

        Parameters:
            other: The second parent
            rng:   Source of randomness

        Returns:
            The child graph
        """
        child = self.clone()
        for nid in sorted(child.neurons):
            if rng.random() < 0.5 and nid in other.neurons:
                child.neurons[nid] = other.neurons[nid].copy()
        return child

    # ------------------------------------------------------------------
    # Reachability
    # ------------------------------------------------------------------

    def unreachable_outputs(self) -> list[int]:
        """
        Return the output IDs that no path leads to from any input neuron.

        A connection (or an NCA neighbor reference) from A to B counts as an
        edge A -> B; references to missing neurons are ignored.
        """
        successors = {nid: [] for nid in self.neurons}
        for nid, neuron in self.neurons.items():
            for source_id in [c.source_id for c in neuron.connections] + neuron.neighborhood_ids:
                if source_id in successors:
                    successors[source_id].append(nid)

        visited = set(nid for nid in self.input_ids if nid in self.neurons)
        queue   = deque(visited)
        while queue:
            nid = queue.popleft()
            for successor in successors[nid]:
                if successor not in visited:
                    visited.add(successor)
                    queue.append(successor)

        return [oid for oid in self.output_ids if oid not in visited]

    def validate_connections(self) -> bool:
        """
        Check that every output neuron can be reached from the inputs.
        Logs a warning for each unreachable output.
        """
        unreachable = self.unreachable_outputs()
        for output_id in unreachable:
            logger.warning(f"output neuron {output_id} is not reachable from any input")
        return not unreachable

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {'input_ids' : list(self.input_ids),
                'output_ids': list(self.output_ids),
                'neurons'   : [self.neurons[nid].to_dict() for nid in sorted(self.neurons)]}

    @classmethod
    def from_dict(cls, data: dict[str, Any], activations: dict[str, Callable] | None = None) -> 'Blueprint':
        """
        Rebuild a Blueprint from a dictionary produced by 'to_dict'.

        Raises:
            SerializationError: If the description is malformed
        """
        blueprint = cls(activations)
        try:
            for neuron_data in data['neurons']:
                blueprint.add_neuron(Neuron.from_dict(neuron_data))
            blueprint.add_input_nodes([int(nid) for nid in data['input_ids']])
            blueprint.add_output_nodes([int(nid) for nid in data['output_ids']])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SerializationError(f"malformed blueprint description: {e!r}") from e
        return blueprint

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str, activations: dict[str, Callable] | None = None) -> 'Blueprint':
        """
        Rebuild a Blueprint from a JSON string produced by 'to_json'.

        Raises:
            SerializationError: If the text is not valid JSON or the description is malformed
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SerializationError("blueprint description must be a JSON object")
        return cls.from_dict(data, activations)

    # ------------------------------------------------------------------
    # Visualization
    # ------------------------------------------------------------------

    def visualize(self, view: bool = False) -> graphviz.Digraph:
        """
        Visualize the graph using Graphviz.

        Parameters:
            view: If True, automatically open the visualization after rendering

        Returns:
            graphviz.Digraph object representing the graph
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')  # Left to right layout
        dot.attr('graph', labelloc='t')

        base_attrs = {'color': 'black', 'style': 'filled', 'shape': 'circle', 'penwidth': '0.5',
                      'fontsize': '5', 'width': '0.5', 'height': '0.5', 'fixedsize': 'true'}
        fill = {'INPUT': 'lightgrey', 'HIDDEN': 'lightblue', 'OUTPUT': 'white'}

        groups = [('input' , 'source', 'Inputs' , 'INPUT' , [n for n in self.input_ids  if n in self.neurons]),
                  ('hidden', 'same'  , 'Hidden' , 'HIDDEN', self.hidden_ids),
                  ('output', 'sink'  , 'Outputs', 'OUTPUT', [n for n in self.output_ids if n in self.neurons])]

        for name, rank, label, role, ids in groups:
            if not ids:
                continue
            with dot.subgraph(name=f'cluster_{name}') as cluster:
                cluster.attr(rank=rank, label=label, style='invisible')
                for nid in sorted(ids):
                    neuron = self.neurons[nid]
                    attrs  = dict(base_attrs, fillcolor=fill[role])
                    attrs['label'] = f"id={nid}\\n{neuron.kind.value}\\nbias={neuron.bias:.2f}"
                    cluster.node(str(nid), **attrs)

        for nid in sorted(self.neurons):
            for connection in self.neurons[nid].connections:
                if connection.source_id not in self.neurons:
                    continue
                dot.edge(str(connection.source_id), str(nid),
                         label=f"w={connection.weight:.2f}", fontsize='5', penwidth='0.5',
                         arrowsize='0.5', labelfloat='false', color='black')

        if view:
            dot.view(cleanup=True)

        return dot

    def __str__(self):
        return '\n'.join(str(self.neurons[nid]) for nid in sorted(self.neurons))
