"""
SpikeParity Types — neuron groups and spike events.

Neuron ids are local to a group and run 0..N-1 in the simulator's own
enumeration. They are not synapse ids or global ids.
"""

from dataclasses import dataclass
from typing import NamedTuple

from spikeparity.errors import ConfigurationError


# Milliseconds in one simulated second: the batch size of every monitor update
MS_PER_SECOND = 1000


@dataclass(frozen=True)
class NeuronGroupRef:
    """A named neuron group of fixed size.

    Attributes:
        group_id: Group identifier used in every callback
        n_neurons: Number of neurons N; ids are ``0..N-1``
    """
    group_id: str
    n_neurons: int

    def __post_init__(self):
        if int(self.n_neurons) != self.n_neurons or self.n_neurons <= 0:
            raise ConfigurationError(
                f"Group {self.group_id!r} needs a positive neuron count, "
                f"got {self.n_neurons!r}")

    def contains(self, neuron_id: int) -> bool:
        """True if ``neuron_id`` is a valid local id for this group."""
        return 0 <= neuron_id < self.n_neurons

    def __len__(self) -> int:
        return self.n_neurons


class SpikeEvent(NamedTuple):
    """One spike: group-local neuron id and timestamp in ms.

    Events are only ever aggregated into counters, never stored one by one.
    """
    neuron_id: int
    time_ms: int

    @property
    def second(self) -> int:
        """Index of the simulated second this spike falls in."""
        return self.time_ms // MS_PER_SECOND

    @property
    def offset_ms(self) -> int:
        """Millisecond within that second (index into ``time_counts``)."""
        return self.time_ms % MS_PER_SECOND
