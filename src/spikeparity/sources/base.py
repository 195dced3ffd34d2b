"""
Spike source capability.

The simulator depends only on the ``next_spike_time`` signature, so any
object providing it (periodic, pattern-based, stochastic with a fixed seed)
can drive a stimulated group. There is no base class to inherit from.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SpikeSource(Protocol):
    """Anything that can schedule the next spike of a stimulated neuron."""

    def next_spike_time(self, group_id: str, neuron_id: int,
                        current_time_ms: int) -> int:
        """Return the next spike time in ms, strictly after ``current_time_ms``."""
        ...
