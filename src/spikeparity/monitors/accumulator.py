"""
SpikeAccumulator — exact per-neuron spike counting for one group.

The accumulator owns a single fixed-size counter array allocated at
construction. Counters only change through ``update``, which the simulator
calls once per simulated second from a single thread. Accessors hand out
the live array rather than a copy, so callers must treat it as read-only
between updates.

Example:
    >>> acc = SpikeAccumulator(10)
    >>> counts = [0] * 1000
    >>> counts[5] = 3
    >>> acc.update("output", [2, 2, 7], counts)
    >>> int(acc.spikes[2]), int(acc.spikes[7]), acc.total
    (2, 1, 3)
"""

import logging
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from spikeparity.errors import ConfigurationError, ContractViolation
from spikeparity.types.events import MS_PER_SECOND

logger = logging.getLogger(__name__)


class AccumulatorState(Enum):
    """Lifecycle of an accumulator. There is no way back to IDLE."""
    IDLE = "idle"
    ACCUMULATING = "accumulating"


class SpikeAccumulator:
    """
    Per-neuron and total spike counters for one neuron group.

    Args:
        n_neurons: Group size N; ids must lie in ``[0, N)``
        group_id: Optional group binding. When set, batches for any other
            group are rejected.

    Invariant: ``spikes.sum() == total`` after every ``update``.
    """

    def __init__(self, n_neurons: int, group_id: Optional[str] = None):
        if int(n_neurons) != n_neurons or n_neurons <= 0:
            raise ConfigurationError(
                f"SpikeAccumulator needs a positive neuron count, got {n_neurons!r}")
        self._n_neurons = int(n_neurons)
        self._group_id = group_id
        self._spikes = np.zeros(self._n_neurons, dtype=np.int64)
        self._total = 0
        self._n_updates = 0

    # ── Accessors ────────────────────────────────────────────

    @property
    def n_neurons(self) -> int:
        return self._n_neurons

    @property
    def group_id(self) -> Optional[str]:
        return self._group_id

    @property
    def spikes(self) -> np.ndarray:
        """Live per-neuron counter array (not a copy)."""
        return self._spikes

    @property
    def total(self) -> int:
        """Number of spikes counted across all neurons."""
        return self._total

    @property
    def n_updates(self) -> int:
        """Number of seconds delivered so far."""
        return self._n_updates

    @property
    def state(self) -> AccumulatorState:
        if self._n_updates == 0:
            return AccumulatorState.IDLE
        return AccumulatorState.ACCUMULATING

    def get_spikes(self) -> np.ndarray:
        """Live per-neuron counter array (not a copy)."""
        return self._spikes

    def get_spikes_total(self) -> int:
        return self._total

    # ── Update ───────────────────────────────────────────────

    def update(self, group_id: str, neuron_ids: Sequence[int],
               time_counts: Sequence[int]) -> None:
        """
        Count one simulated second of spikes.

        ``time_counts`` is walked in order: millisecond ``t`` consumes the
        next ``time_counts[t]`` entries of ``neuron_ids``. Each consumed id
        bumps its neuron's counter and the total.

        The whole batch is checked before any counter changes, so a
        rejected batch leaves the accumulator as it was.

        Raises:
            ContractViolation: Wrong group, malformed ``time_counts``, or
                an id outside ``[0, N)``.
        """
        if self._group_id is not None and group_id != self._group_id:
            raise ContractViolation(
                f"Accumulator bound to group {self._group_id!r} "
                f"received spikes for group {group_id!r}")

        counts = np.asarray(time_counts)
        ids = np.asarray(neuron_ids)
        if ids.size == 0:
            ids = ids.astype(np.int64)

        if counts.shape != (MS_PER_SECOND,):
            raise ContractViolation(
                f"time_counts must hold {MS_PER_SECOND} entries, "
                f"got shape {counts.shape}")
        if not np.issubdtype(counts.dtype, np.integer):
            raise ContractViolation(
                f"time_counts must be integers, got dtype {counts.dtype}")
        if np.any(counts < 0):
            t = int(np.flatnonzero(counts < 0)[0])
            raise ContractViolation(
                f"time_counts[{t}] is negative ({int(counts[t])})")
        if ids.ndim != 1 or not np.issubdtype(ids.dtype, np.integer):
            raise ContractViolation(
                f"neuron_ids must be a flat sequence of integers, "
                f"got shape {ids.shape} dtype {ids.dtype}")
        if int(counts.sum()) != ids.size:
            raise ContractViolation(
                f"time_counts sum to {int(counts.sum())} but "
                f"{ids.size} neuron ids were delivered")

        bad = (ids < 0) | (ids >= self._n_neurons)
        if np.any(bad):
            pos = int(np.flatnonzero(bad)[0])
            # millisecond whose slice of neuron_ids holds position pos
            t = int(np.searchsorted(np.cumsum(counts), pos, side="right"))
            raise ContractViolation(
                f"Neuron id {int(ids[pos])} at ms {t} of second "
                f"{self._n_updates} is outside [0, {self._n_neurons}) "
                f"for group {group_id!r}")

        if self._n_updates == 0:
            logger.debug("Accumulator for group %r (N=%d) started accumulating",
                         group_id, self._n_neurons)

        self._spikes += np.bincount(ids.astype(np.int64, copy=False),
                                    minlength=self._n_neurons)
        self._total += int(ids.size)
        self._n_updates += 1

    def __repr__(self) -> str:
        return (f"SpikeAccumulator(group={self._group_id!r}, "
                f"n_neurons={self._n_neurons}, total={self._total}, "
                f"state={self.state.value})")
