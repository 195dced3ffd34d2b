"""SpikeParity verification tools."""

from spikeparity.verification.equivalence import EquivalenceValidator, RunResult
from spikeparity.verification.report import SPIKE_COUNT, Divergence, EquivalenceReport

__all__ = [
    "EquivalenceValidator",
    "EquivalenceReport",
    "Divergence",
    "RunResult",
    "SPIKE_COUNT",
]
