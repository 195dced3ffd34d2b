"""
Spike monitor capability.

A simulator delivers each simulated second's spikes through ``update``.
Anything with that method can be registered as a monitor for a group.
"""

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class SpikeMonitor(Protocol):
    """Receiver of one neuron group's per-second spike batches."""

    def update(self, group_id: str, neuron_ids: Sequence[int],
               time_counts: Sequence[int]) -> None:
        """Consume one second of spikes.

        Args:
            group_id: Group that emitted the spikes
            neuron_ids: Group-local ids in millisecond order
            time_counts: 1000 entries; ``time_counts[t]`` ids of
                ``neuron_ids`` belong to millisecond ``t``
        """
        ...
