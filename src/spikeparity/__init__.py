"""
SpikeParity — Backend equivalence testing for spiking network simulators.

SpikeParity drives a time-stepped SNN simulator with fully deterministic
stimulus, counts every spike each neuron emits, and diffs two runs of the
same network on different backends (sequential vs data-parallel).

Key Properties:
- Deterministic stimulus: Periodic and scheduled sources, no hidden state
- Exact accounting: Per-neuron counters with a checked total
- Fail fast: Out-of-range neuron ids abort the run, never clamped
- Debuggable: Reports name the first divergent neuron and timestep

Example:
    >>> from spikeparity import EquivalenceValidator, NetworkConfig, PeriodicSpikeSource
    >>> network = NetworkConfig(n_input=10, n_output=10, duration_s=2)
    >>> validator = EquivalenceValidator(network, PeriodicSpikeSource(rate=50.0))
    >>> report = validator.validate()
    >>> report.passed
    True

License: Apache-2.0
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

# Errors
from .errors import ConfigurationError, ContractViolation, SpikeParityError

# Types
from .types import MS_PER_SECOND, NeuronGroupRef, SpikeEvent, ToleranceConfig

# Spike sources
from .sources import PeriodicSpikeSource, ScheduledSpikeSource, SpikeSource

# Monitors
from .monitors import AccumulatorState, SpikeAccumulator, SpikeMonitor

# Reference simulator
from .simulator import (
    LIFParams,
    NetworkConfig,
    SequentialBackend,
    SimulatorBackend,
    VectorizedBackend,
    get_backend,
)

# Verification
from .verification import Divergence, EquivalenceReport, EquivalenceValidator, RunResult


__all__ = [
    # Version
    "__version__",
    # Errors
    "SpikeParityError",
    "ConfigurationError",
    "ContractViolation",
    # Types
    "MS_PER_SECOND",
    "NeuronGroupRef",
    "SpikeEvent",
    "ToleranceConfig",
    # Sources
    "SpikeSource",
    "PeriodicSpikeSource",
    "ScheduledSpikeSource",
    # Monitors
    "SpikeMonitor",
    "SpikeAccumulator",
    "AccumulatorState",
    # Simulator
    "NetworkConfig",
    "LIFParams",
    "SimulatorBackend",
    "SequentialBackend",
    "VectorizedBackend",
    "get_backend",
    # Verification
    "EquivalenceValidator",
    "EquivalenceReport",
    "Divergence",
    "RunResult",
]


def get_version() -> str:
    """Return the current SpikeParity version."""
    return __version__
