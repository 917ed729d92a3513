"""
Genotype Package

This package implements the structural representation of a neural graph:
the neurons, their incoming connections, and the Blueprint holding them
together along with every operator that edits it.

Modules:
    connection: Connection class
    neuron:     NeuronKind enumeration, BatchNormParams and Neuron classes
    blueprint:  Blueprint class and its exceptions

Exported Classes:
    Connection:         A weighted incoming connection (source ID, weight)
    NeuronKind:         Enumeration of neuron kinds (input, dense, rnn, lstm, ...)
    BatchNormParams:    Parameters of a batch-normalization neuron
    Neuron:             A computational unit with a kind-specific payload
    Blueprint:          The network graph
    BlueprintError:     Base class of the errors raised by Blueprint operators
    StructuralError:    Illegal structural edit
    SerializationError: Malformed serialized description
"""

from neurosearch.genotype.connection import Connection
from neurosearch.genotype.neuron     import BatchNormParams, INSERTABLE_KINDS, Neuron, NeuronKind
from neurosearch.genotype.blueprint  import Blueprint, BlueprintError, SerializationError, StructuralError

__all__ = ['BatchNormParams',
           'Blueprint',
           'BlueprintError',
           'Connection',
           'INSERTABLE_KINDS',
           'Neuron',
           'NeuronKind',
           'SerializationError',
           'StructuralError']
