"""
Phenotype Package

This package implements the forward propagation engine, which turns a
Blueprint (the genotype-level description of a neural graph) into values
computed from a set of inputs.

Modules:
    network: Network class and the softmax helper

Exported:
    Network: Forward propagation engine dispatching on neuron kind
    softmax: Softmax over a mapping of values
"""

from neurosearch.phenotype.network import Network, softmax

__all__ = ['Network', 'softmax']
