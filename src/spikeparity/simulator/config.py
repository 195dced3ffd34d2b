"""
Network configuration for the reference simulator.

Two groups: a stimulated input group driven by a spike source, and an
output group of leaky integrate-and-fire neurons receiving fixed-weight
connections from it with a 1 ms delay. The simulator runs at 1 ms
resolution for a whole number of seconds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from spikeparity.errors import ConfigurationError
from spikeparity.types.events import MS_PER_SECOND, NeuronGroupRef


@dataclass
class LIFParams:
    """Leaky integrate-and-fire parameters (mV, ms)."""

    tau_m_ms: float = 20.0
    """Membrane time constant."""

    v_rest: float = -65.0
    """Resting potential the membrane decays towards."""

    v_reset: float = -65.0
    """Potential after a spike."""

    v_thresh: float = -50.0
    """Spike threshold."""

    t_ref_ms: int = 2
    """Refractory period in whole ms; input is ignored while refractory."""

    def __post_init__(self):
        if not self.tau_m_ms > 0:
            raise ConfigurationError(f"tau_m_ms must be positive, got {self.tau_m_ms}")
        if not self.v_thresh > self.v_reset:
            raise ConfigurationError(
                f"v_thresh ({self.v_thresh}) must be above v_reset ({self.v_reset})")
        if int(self.t_ref_ms) != self.t_ref_ms or self.t_ref_ms < 0:
            raise ConfigurationError(
                f"t_ref_ms must be a non-negative integer, got {self.t_ref_ms}")

    @property
    def decay(self) -> float:
        """Fraction of (v_rest - v) recovered per 1 ms step."""
        return 1.0 / self.tau_m_ms


@dataclass
class NetworkConfig:
    """Input → output feed-forward network.

    Invalid sizes are rejected here, at the network-construction boundary,
    before any run starts.
    """

    n_input: int = 10
    """Neurons in the stimulated input group."""

    n_output: int = 10
    """LIF neurons in the output group."""

    duration_s: int = 1
    """Simulated time in whole seconds (one monitor update per second)."""

    weight: float = 4.0
    """Membrane jump (mV) per input spike on an existing connection."""

    connection_prob: float = 1.0
    """Probability of each input → output connection."""

    seed: int = 42
    """Seed for the connectivity matrix."""

    lif: LIFParams = field(default_factory=LIFParams)

    input_group: str = "input"
    output_group: str = "output"

    def __post_init__(self):
        for name in ("n_input", "n_output"):
            value = getattr(self, name)
            if int(value) != value or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive integer, got {value!r}")
        if int(self.duration_s) != self.duration_s or self.duration_s <= 0:
            raise ConfigurationError(
                f"duration_s must be a positive whole number of seconds, "
                f"got {self.duration_s!r}")
        if not math.isfinite(self.weight):
            raise ConfigurationError(f"weight must be finite, got {self.weight!r}")
        if not 0.0 <= self.connection_prob <= 1.0:
            raise ConfigurationError(
                f"connection_prob must lie in [0, 1], got {self.connection_prob!r}")
        if self.input_group == self.output_group:
            raise ConfigurationError(
                f"Input and output groups need distinct ids, "
                f"both are {self.input_group!r}")

    @property
    def duration_ms(self) -> int:
        return int(self.duration_s) * MS_PER_SECOND

    def groups(self) -> Dict[str, NeuronGroupRef]:
        """Group id → NeuronGroupRef for both groups."""
        return {
            self.input_group: NeuronGroupRef(self.input_group, int(self.n_input)),
            self.output_group: NeuronGroupRef(self.output_group, int(self.n_output)),
        }

    def group(self, group_id: str) -> NeuronGroupRef:
        groups = self.groups()
        if group_id not in groups:
            raise ConfigurationError(
                f"Unknown group {group_id!r}. Choose from: {list(groups)}")
        return groups[group_id]

    def build_weights(self) -> np.ndarray:
        """Connectivity matrix (n_input × n_output), identical on every call."""
        rng = np.random.default_rng(self.seed)
        mask = rng.random((int(self.n_input), int(self.n_output))) < self.connection_prob
        return np.where(mask, self.weight, 0.0)
