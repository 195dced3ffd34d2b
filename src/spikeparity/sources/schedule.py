"""
Scheduled spike source — replays a fixed per-neuron pattern.
"""

import bisect
from typing import Dict, Iterable, List, Mapping, Tuple

import numpy as np

from spikeparity.errors import ConfigurationError


# Returned once a neuron's pattern is exhausted; beyond any run length
NEVER = 2 ** 62
# Largest sentinel a simulator can store in an int64 spike-time array
NEVER_MAX = int(np.iinfo(np.int64).max)


class ScheduledSpikeSource:
    """
    Spike source replaying explicit spike times.

    ``schedule`` maps a neuron id to its spike times (ms), or a
    ``(group_id, neuron_id)`` pair to restrict a pattern to one group. A
    neuron absent from the schedule never fires.

    The source holds no cursor: each query bisects the neuron's sorted
    pattern for the first time strictly after ``current_time_ms``, so it is
    as stateless as the periodic source. Times must be positive: the
    simulator makes its first query at t = 0 and only accepts later times.
    """

    def __init__(self, schedule: Mapping, never: int = NEVER):
        if not isinstance(never, (int, np.integer)) or not 0 < never <= NEVER_MAX:
            raise ConfigurationError(
                f"never must be an integer in (0, {NEVER_MAX}], got {never!r}")
        self._never = int(never)
        self._patterns: Dict[Tuple, List[int]] = {}
        for key, times in schedule.items():
            self._patterns[self._normalize_key(key)] = self._validate(key, times)

    @staticmethod
    def _normalize_key(key) -> Tuple:
        if isinstance(key, tuple):
            group_id, neuron_id = key
            return (group_id, int(neuron_id))
        return (None, int(key))

    @staticmethod
    def _validate(key, times: Iterable) -> List[int]:
        out = []
        for t in times:
            if int(t) != t or t <= 0:
                raise ConfigurationError(
                    f"Spike times for {key!r} must be positive integer ms, "
                    f"got {t!r}")
            out.append(int(t))
        return sorted(set(out))

    def pattern(self, group_id: str, neuron_id: int) -> List[int]:
        """Spike times scheduled for one neuron (group-specific first)."""
        times = self._patterns.get((group_id, neuron_id))
        if times is None:
            times = self._patterns.get((None, neuron_id), [])
        return times

    def next_spike_time(self, group_id: str, neuron_id: int,
                        current_time_ms: int) -> int:
        times = self.pattern(group_id, neuron_id)
        idx = bisect.bisect_right(times, current_time_ms)
        if idx == len(times):
            return self._never
        return times[idx]

    def __repr__(self) -> str:
        n_spikes = sum(len(t) for t in self._patterns.values())
        return (f"ScheduledSpikeSource(neurons={len(self._patterns)}, "
                f"spikes={n_spikes})")
