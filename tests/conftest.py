"""Shared test fixtures and misbehaving backend doubles."""

from typing import Dict, Mapping

import numpy as np
import pytest

from spikeparity import NetworkConfig, PeriodicSpikeSource, get_backend


# ── Backend doubles ──────────────────────────────────────────
#
# Each wraps a real backend and tampers with what it reports, to prove the
# accumulator and validator notice.


class _DroppingMonitor:
    """Removes the first spike of one neuron in one second."""

    def __init__(self, inner, neuron_id: int, second: int):
        self.inner = inner
        self.neuron_id = neuron_id
        self.second = second
        self._seconds_seen = 0

    def update(self, group_id, neuron_ids, time_counts):
        ids = [int(i) for i in neuron_ids]
        counts = np.array(time_counts, dtype=np.int64, copy=True)
        if self._seconds_seen == self.second:
            pos = ids.index(self.neuron_id)
            t = int(np.searchsorted(np.cumsum(counts), pos, side="right"))
            del ids[pos]
            counts[t] -= 1
        self._seconds_seen += 1
        self.inner.update(group_id, np.asarray(ids, dtype=np.int64), counts)


class _OutOfRangeMonitor:
    """Prepends a bogus neuron id to the first second's batch."""

    def __init__(self, inner, bad_id: int):
        self.inner = inner
        self.bad_id = bad_id
        self._first = True

    def update(self, group_id, neuron_ids, time_counts):
        ids = np.asarray(neuron_ids, dtype=np.int64)
        counts = np.array(time_counts, dtype=np.int64, copy=True)
        if self._first:
            ids = np.concatenate([[self.bad_id], ids]).astype(np.int64)
            counts[0] += 1
            self._first = False
        self.inner.update(group_id, ids, counts)


class DroppingBackend:
    """Real backend that loses one spike of ``neuron_id`` in ``second``."""

    def __init__(self, inner: str, neuron_id: int, second: int):
        self._inner = get_backend(inner)
        self.name = f"{self._inner.name}+drop"
        self.neuron_id = neuron_id
        self.second = second

    def run(self, network, source, monitors: Mapping) -> Dict[str, np.ndarray]:
        wrapped = {gid: _DroppingMonitor(m, self.neuron_id, self.second)
                   for gid, m in monitors.items()}
        return self._inner.run(network, source, wrapped)


class OutOfRangeBackend:
    """Real backend that reports a neuron id outside its group."""

    def __init__(self, inner: str, bad_id: int):
        self._inner = get_backend(inner)
        self.name = f"{self._inner.name}+bad-id"
        self.bad_id = bad_id

    def run(self, network, source, monitors: Mapping) -> Dict[str, np.ndarray]:
        wrapped = {gid: _OutOfRangeMonitor(m, self.bad_id)
                   for gid, m in monitors.items()}
        return self._inner.run(network, source, wrapped)


class NudgingBackend:
    """Real backend whose membrane trace is off by ``epsilon`` at one point."""

    def __init__(self, inner: str, timestep_ms: int, neuron_id: int,
                 epsilon: float = 1e-3):
        self._inner = get_backend(inner)
        self.name = f"{self._inner.name}+nudge"
        self.timestep_ms = timestep_ms
        self.neuron_id = neuron_id
        self.epsilon = epsilon

    def run(self, network, source, monitors: Mapping) -> Dict[str, np.ndarray]:
        traces = {name: trace.copy()
                  for name, trace in self._inner.run(network, source, monitors).items()}
        traces[f"{network.output_group}.v"][self.timestep_ms, self.neuron_id] += self.epsilon
        return traces


class RecordingMonitor:
    """Keeps every batch it receives (copies)."""

    def __init__(self):
        self.batches = []

    def update(self, group_id, neuron_ids, time_counts):
        self.batches.append((group_id,
                             np.array(neuron_ids, copy=True),
                             np.array(time_counts, copy=True)))


# ── Fixtures ─────────────────────────────────────────────────


@pytest.fixture
def network():
    """10 → 10 fully connected network; one 40 mV volley makes every output fire."""
    return NetworkConfig(n_input=10, n_output=10, duration_s=2, weight=4.0)


@pytest.fixture
def sparse_network():
    """Sub-threshold volleys; outputs fire only after temporal summation."""
    return NetworkConfig(n_input=20, n_output=15, duration_s=3, weight=1.5,
                         connection_prob=0.5, seed=7)


@pytest.fixture
def source():
    """50 Hz periodic stimulus (ISI 20 ms)."""
    return PeriodicSpikeSource(rate=50.0)


@pytest.fixture
def dropping_backend():
    return DroppingBackend


@pytest.fixture
def out_of_range_backend():
    return OutOfRangeBackend


@pytest.fixture
def nudging_backend():
    return NudgingBackend


@pytest.fixture
def recording_monitor():
    return RecordingMonitor()
