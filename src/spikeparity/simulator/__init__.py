"""
Reference time-stepped SNN simulator with interchangeable backends.

    from spikeparity.simulator import NetworkConfig, get_backend
    traces = get_backend("vectorized").run(network, source, monitors)
"""

from spikeparity.simulator.backends import (
    BACKENDS,
    SequentialBackend,
    VectorizedBackend,
    get_backend,
)
from spikeparity.simulator.config import LIFParams, NetworkConfig
from spikeparity.simulator.engine import (
    SimulationEngine,
    SimulatorBackend,
    SpikeBatcher,
    StimulusSchedule,
)

__all__ = [
    "NetworkConfig",
    "LIFParams",
    "SimulatorBackend",
    "SimulationEngine",
    "SequentialBackend",
    "VectorizedBackend",
    "StimulusSchedule",
    "SpikeBatcher",
    "BACKENDS",
    "get_backend",
]
