"""
Simulation loop shared by the reference backends.

Everything a backend must agree on lives here, so two backends can only
differ in how they update neuron state:

    StimulusSchedule   → queries the spike source for every input neuron
    SpikeBatcher       → collects one second of spikes for a monitor
    SimulationEngine   → 1 ms loop, 1 ms axonal delay, per-second flush

Backends subclass SimulationEngine and implement ``_reset_state`` and
``_step``.
"""

import logging
from typing import Dict, List, Mapping, Protocol, Sequence, runtime_checkable

import numpy as np

from spikeparity.errors import ConfigurationError, ContractViolation
from spikeparity.monitors.base import SpikeMonitor
from spikeparity.simulator.config import NetworkConfig
from spikeparity.sources.base import SpikeSource
from spikeparity.types.events import MS_PER_SECOND, NeuronGroupRef

logger = logging.getLogger(__name__)


@runtime_checkable
class SimulatorBackend(Protocol):
    """A simulator that can run a network against a spike source."""

    name: str

    def run(self, network: NetworkConfig, source: SpikeSource,
            monitors: Mapping[str, SpikeMonitor]) -> Dict[str, np.ndarray]:
        """Run the network for its full duration.

        Returns:
            State traces keyed ``"<group>.<variable>"``, each of shape
            (duration_ms, N).
        """
        ...


class StimulusSchedule:
    """
    Next scheduled spike time of every neuron in a stimulated group.

    Each neuron is queried once at t = 0 and again right after each of its
    spikes. A source answering with a time that is not strictly later than
    the query time would stall the neuron, so it aborts the run.
    """

    def __init__(self, source: SpikeSource, group: NeuronGroupRef):
        self._source = source
        self._group = group
        self._next = np.array(
            [self._query(i, 0) for i in range(group.n_neurons)], dtype=np.int64)

    def _query(self, neuron_id: int, current_time_ms: int) -> int:
        t_next = self._source.next_spike_time(
            self._group.group_id, neuron_id, current_time_ms)
        if int(t_next) != t_next or t_next <= current_time_ms:
            raise ContractViolation(
                f"Spike source returned {t_next!r} for neuron {neuron_id} of "
                f"group {self._group.group_id!r} at t={current_time_ms} ms; "
                f"the next spike must be strictly later")
        return int(t_next)

    def fire(self, t_ms: int) -> np.ndarray:
        """Ids spiking at ``t_ms`` (ascending); reschedules each of them."""
        ids = np.flatnonzero(self._next == t_ms)
        for i in ids:
            self._next[i] = self._query(int(i), t_ms)
        return ids


class SpikeBatcher:
    """Collects one group's spikes until the end of the current second."""

    def __init__(self, group_id: str):
        self.group_id = group_id
        self._ids: List[int] = []
        self._time_counts = np.zeros(MS_PER_SECOND, dtype=np.int64)

    def record(self, t_ms: int, neuron_ids: Sequence[int]) -> None:
        self._time_counts[t_ms % MS_PER_SECOND] += len(neuron_ids)
        self._ids.extend(int(i) for i in neuron_ids)

    def flush(self, monitor: SpikeMonitor) -> int:
        """Deliver the second's batch and start a new one. Returns its size."""
        ids = np.asarray(self._ids, dtype=np.int64)
        time_counts = self._time_counts
        # fresh buffers: the monitor may hold on to what it was given
        self._ids = []
        self._time_counts = np.zeros(MS_PER_SECOND, dtype=np.int64)
        monitor.update(self.group_id, ids, time_counts)
        return int(ids.size)


class SimulationEngine:
    """
    Base class for the reference backends.

    Input spikes emitted at t reach the output group at t + 1. Output
    neurons are LIF cells; how their state is stored and updated is up to
    the subclass.
    """

    name = "engine"

    def run(self, network: NetworkConfig, source: SpikeSource,
            monitors: Mapping[str, SpikeMonitor]) -> Dict[str, np.ndarray]:
        groups = network.groups()
        unknown = set(monitors) - set(groups)
        if unknown:
            raise ConfigurationError(
                f"Monitors registered for unknown groups {sorted(unknown)}. "
                f"Choose from: {list(groups)}")

        input_ref = groups[network.input_group]
        output_ref = groups[network.output_group]
        schedule = StimulusSchedule(source, input_ref)
        batchers = {gid: SpikeBatcher(gid) for gid in monitors}
        self._reset_state(network, network.build_weights())

        v_trace = np.empty((network.duration_ms, output_ref.n_neurons), dtype=np.float64)
        arriving = np.empty(0, dtype=np.int64)
        totals = {gid: 0 for gid in monitors}

        logger.info("[%s] running %d x %d network for %d s",
                    self.name, input_ref.n_neurons, output_ref.n_neurons,
                    network.duration_s)

        for t in range(network.duration_ms):
            input_ids = schedule.fire(t)
            output_ids = self._step(arriving)
            v_trace[t] = self._membrane()
            arriving = input_ids

            if network.input_group in batchers:
                batchers[network.input_group].record(t, input_ids)
            if network.output_group in batchers:
                batchers[network.output_group].record(t, output_ids)

            if (t + 1) % MS_PER_SECOND == 0:
                for gid, batcher in batchers.items():
                    totals[gid] += batcher.flush(monitors[gid])

        logger.info("[%s] finished: spikes per group %s", self.name, totals)
        return {f"{network.output_group}.v": v_trace}

    # ── Backend hooks ───────────────────────────────────────

    def _reset_state(self, network: NetworkConfig, weights: np.ndarray) -> None:
        raise NotImplementedError

    def _step(self, arriving: np.ndarray) -> Sequence[int]:
        """Advance output neurons by 1 ms; return the ids that fired."""
        raise NotImplementedError

    def _membrane(self) -> Sequence[float]:
        """Current membrane potentials of the output group."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
