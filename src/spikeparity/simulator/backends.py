"""
Reference simulator backends.

    SequentialBackend   → one neuron at a time, push-style synaptic delivery
    VectorizedBackend   → whole-group NumPy update, pull-style matrix input

Both run the same LIF model on the same stimulus. They differ in the order
in which synaptic input is summed, which is exactly the kind of difference
a sequential and a massively-parallel implementation of one simulator
exhibit. Spike counts must match; membrane traces may drift by rounding.
"""

from typing import List, Union

import numpy as np

from spikeparity.errors import ConfigurationError
from spikeparity.simulator.config import NetworkConfig
from spikeparity.simulator.engine import SimulationEngine, SimulatorBackend


class SequentialBackend(SimulationEngine):
    """Plain-Python reference: per-neuron loop over lists of floats."""

    name = "sequential"

    def _reset_state(self, network: NetworkConfig, weights: np.ndarray) -> None:
        self._lif = network.lif
        self._weights: List[List[float]] = weights.tolist()
        self._n = int(network.n_output)
        self._v = [float(network.lif.v_rest)] * self._n
        self._refractory = [0] * self._n

    def _step(self, arriving: np.ndarray) -> List[int]:
        lif = self._lif
        current = [0.0] * self._n
        # push: each presynaptic spike adds its row, in emission order
        for j in arriving:
            row = self._weights[j]
            for k in range(self._n):
                current[k] += row[k]

        fired = []
        for k in range(self._n):
            if self._refractory[k] > 0:
                self._refractory[k] -= 1
                continue
            v = self._v[k] + (lif.v_rest - self._v[k]) * lif.decay + current[k]
            if v >= lif.v_thresh:
                fired.append(k)
                v = lif.v_reset
                self._refractory[k] = lif.t_ref_ms
            self._v[k] = v
        return fired

    def _membrane(self) -> List[float]:
        return self._v


class VectorizedBackend(SimulationEngine):
    """Data-parallel backend: every output neuron updated in one array op."""

    name = "vectorized"

    def _reset_state(self, network: NetworkConfig, weights: np.ndarray) -> None:
        self._lif = network.lif
        self._weights = np.ascontiguousarray(weights, dtype=np.float64)
        n = int(network.n_output)
        self._presyn = np.zeros(int(network.n_input), dtype=np.float64)
        self._v = np.full(n, network.lif.v_rest, dtype=np.float64)
        self._refractory = np.zeros(n, dtype=np.int64)

    def _step(self, arriving: np.ndarray) -> np.ndarray:
        lif = self._lif
        self._presyn[:] = 0.0
        self._presyn[arriving] = 1.0
        # pull: each postsynaptic neuron sums its column at once
        current = self._presyn @ self._weights

        active = self._refractory == 0
        self._refractory[~active] -= 1
        v = self._v
        v[active] = v[active] + (lif.v_rest - v[active]) * lif.decay + current[active]

        fired = active & (v >= lif.v_thresh)
        v[fired] = lif.v_reset
        self._refractory[fired] = lif.t_ref_ms
        return np.flatnonzero(fired)

    def _membrane(self) -> np.ndarray:
        return self._v


BACKENDS = {
    SequentialBackend.name: SequentialBackend,
    VectorizedBackend.name: VectorizedBackend,
}


def get_backend(backend: Union[str, SimulatorBackend]) -> SimulatorBackend:
    """Resolve a backend name to a fresh backend instance.

    Objects that already implement the backend capability are returned
    unchanged, so external simulators can be plugged in directly.
    """
    if isinstance(backend, str):
        if backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend {backend!r}. Choose from: {sorted(BACKENDS)}")
        return BACKENDS[backend]()
    if isinstance(backend, SimulatorBackend):
        return backend
    raise ConfigurationError(
        f"Expected a backend name or an object with run() and name, "
        f"got {type(backend).__name__}")
