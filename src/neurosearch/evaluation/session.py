"""
Session Module

This module implements the Session class, one labeled example used to
evaluate a network.

Classes:
    Session: Input values, expected output values and a timestep count
"""

from dataclasses import dataclass, field
from types       import MappingProxyType
from typing      import Any, Mapping

@dataclass(frozen=True)
class Session:
    """
    One labeled example.

    Sessions are immutable: the mappings are copied on construction and
    exposed as read-only views, so neither the caller's dictionaries nor
    the engine can change a session afterwards.

    Public Attributes:
        inputs:           Mapping from input neuron ID to input value
        expected_outputs: Mapping from output neuron ID to target value
        timesteps:        Number of propagation rounds (> 1 exercises recurrent kinds)
    """
    inputs          : Mapping[int, float] = field(default_factory=dict)
    expected_outputs: Mapping[int, float] = field(default_factory=dict)
    timesteps       : int                 = 1

    def __post_init__(self):
        if self.timesteps < 1:
            raise ValueError(f"timesteps must be at least 1, got {self.timesteps}")
        inputs   = {int(k): float(v) for k, v in self.inputs.items()}
        expected = {int(k): float(v) for k, v in self.expected_outputs.items()}
        object.__setattr__(self, 'inputs',           MappingProxyType(inputs))
        object.__setattr__(self, 'expected_outputs', MappingProxyType(expected))

    def __reduce__(self):
        # mapping proxies are not picklable
        return (type(self), (dict(self.inputs), dict(self.expected_outputs), self.timesteps))

    @property
    def expected_class(self) -> int | None:
        """ID of the output with the largest expected value (lowest ID on ties)."""
        if not self.expected_outputs:
            return None
        return min(self.expected_outputs, key=lambda k: (-self.expected_outputs[k], k))

    def to_dict(self) -> dict[str, Any]:
        return {'inputs'          : dict(self.inputs),
                'expected_outputs': dict(self.expected_outputs),
                'timesteps'       : self.timesteps}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Session':
        """
        Create a session from a dictionary (keys may be strings, as produced by JSON).
        """
        return cls(inputs           = {int(k): float(v) for k, v in data['inputs'].items()},
                   expected_outputs = {int(k): float(v) for k, v in data['expected_outputs'].items()},
                   timesteps        = int(data.get('timesteps', 1)))
