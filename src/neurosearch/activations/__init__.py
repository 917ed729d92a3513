"""
Activations Package

This package provides the scalar activation functions available to neurons.

Exported:
    activations:         Dictionary mapping activation function names to functions
    activation_codes:    Dictionary mapping activation function names to 3-letter codes
    initial_activations: Activation names drawn at random for newly created neurons
    Individual activation functions: relu_activation, sigmoid_activation, tanh_activation,
                                     leaky_relu_activation, elu_activation, linear_activation
"""

from neurosearch.activations.basic_activations import (
    activations,
    activation_codes,
    initial_activations,
    relu_activation,
    sigmoid_activation,
    tanh_activation,
    leaky_relu_activation,
    elu_activation,
    linear_activation
)

__all__ = [
    'activations',
    'activation_codes',
    'initial_activations',
    'relu_activation',
    'sigmoid_activation',
    'tanh_activation',
    'leaky_relu_activation',
    'elu_activation',
    'linear_activation'
]
