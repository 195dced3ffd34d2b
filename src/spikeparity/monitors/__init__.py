"""Spike monitors: per-second spike batch receivers."""

from spikeparity.monitors.accumulator import AccumulatorState, SpikeAccumulator
from spikeparity.monitors.base import SpikeMonitor

__all__ = [
    "SpikeMonitor",
    "SpikeAccumulator",
    "AccumulatorState",
]
