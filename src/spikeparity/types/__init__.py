"""SpikeParity data types."""

from spikeparity.types.events import MS_PER_SECOND, NeuronGroupRef, SpikeEvent
from spikeparity.types.tolerance import ToleranceConfig

__all__ = [
    "MS_PER_SECOND",
    "NeuronGroupRef",
    "SpikeEvent",
    "ToleranceConfig",
]
