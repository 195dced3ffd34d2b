"""
Periodic spike source — constant inter-spike interval.

Gives exactly reproducible spike times on every backend, which is what makes
two runs of the same network comparable spike for spike.

Example:
    >>> source = PeriodicSpikeSource(rate=50.0)
    >>> source.isi
    20
    >>> source.next_spike_time("input", 0, 0)
    20
    >>> source.next_spike_time("input", 0, 20)
    40
"""

import math
from typing import List

from spikeparity.errors import ConfigurationError
from spikeparity.types.events import MS_PER_SECOND


class PeriodicSpikeSource:
    """
    Spike source firing at a fixed rate.

    The inter-spike interval is ``floor(1000 / rate)`` ms and is fixed at
    construction. ``next_spike_time`` is a pure function of its arguments:
    every neuron of every group gets the same ISI, and repeated queries with
    the same time return the same answer.
    """

    def __init__(self, rate: float):
        if not math.isfinite(rate) or rate <= 0:
            raise ConfigurationError(
                f"Spike rate must be a positive number of spikes/s, got {rate!r}")
        isi = int(math.floor(MS_PER_SECOND / rate))
        if isi < 1:
            raise ConfigurationError(
                f"Spike rate {rate} Hz gives an ISI below 1 ms; "
                f"the highest supported rate is {MS_PER_SECOND} Hz")
        self._rate = float(rate)
        self._isi = isi

    @property
    def rate(self) -> float:
        """Requested firing rate (Hz)."""
        return self._rate

    @property
    def isi(self) -> int:
        """Inter-spike interval (ms)."""
        return self._isi

    @property
    def effective_rate(self) -> float:
        """Rate actually produced once the ISI is truncated to whole ms."""
        return MS_PER_SECOND / self._isi

    def next_spike_time(self, group_id: str, neuron_id: int,
                        current_time_ms: int) -> int:
        return current_time_ms + self._isi

    def spike_times(self, t0: int, count: int) -> List[int]:
        """First ``count`` spike times of a train started at ``t0``."""
        times = []
        t = t0
        for _ in range(count):
            t = self.next_spike_time("", 0, t)
            times.append(t)
        return times

    def __repr__(self) -> str:
        return f"PeriodicSpikeSource(rate={self._rate:g}Hz, isi={self._isi}ms)"
