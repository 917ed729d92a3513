import numpy as np

def relu_activation(z):
    return np.maximum(0.0, z)

def sigmoid_activation(z):
    z = np.clip(z, -500, 500)   # to prevent overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-z))

def tanh_activation(z):
    return np.tanh(z)

def leaky_relu_activation(z):
    return np.where(z > 0, z, 0.01 * z)

def elu_activation(z):
    # Clip the negative branch only; exp(min(z, 0)) cannot overflow
    return np.where(z >= 0, z, np.exp(np.minimum(z, 0.0)) - 1.0)

def linear_activation(z):
    return z

activations = {
    "relu"      : relu_activation,
    "sigmoid"   : sigmoid_activation,
    "tanh"      : tanh_activation,
    "leaky_relu": leaky_relu_activation,
    "elu"       : elu_activation,
    "linear"    : linear_activation
    }

# 3-letter identifiers for each activation function
activation_codes = {
    "relu"      : "RLU",
    "sigmoid"   : "SIG",
    "tanh"      : "TNH",
    "leaky_relu": "LRL",
    "elu"       : "ELU",
    "linear"    : "LIN"
    }

# Activations drawn at random when a new neuron is created
initial_activations = ["relu", "sigmoid", "tanh", "leaky_relu", "linear"]
