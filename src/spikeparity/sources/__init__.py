"""Deterministic spike sources for stimulated neuron groups."""

from spikeparity.sources.base import SpikeSource
from spikeparity.sources.periodic import PeriodicSpikeSource
from spikeparity.sources.schedule import NEVER, ScheduledSpikeSource

__all__ = [
    "SpikeSource",
    "PeriodicSpikeSource",
    "ScheduledSpikeSource",
    "NEVER",
]
