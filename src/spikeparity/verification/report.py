"""
Equivalence report — the outcome of comparing two backend runs.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from spikeparity.types.tolerance import ToleranceConfig

# Quantity name used for spike count divergences
SPIKE_COUNT = "spike_count"


@dataclass(frozen=True)
class Divergence:
    """First observation that exceeded tolerance.

    Attributes:
        quantity: ``"spike_count"`` or a state trace name (``"output.v"``)
        neuron_id: Group-local neuron id
        timestep_ms: Simulation time of the observation. For spike counts
            this is the last millisecond of the second whose update first
            disagreed.
        value_a: Value seen in the first run
        value_b: Value seen in the second run
        delta: ``abs(value_b - value_a)``
        tolerance: Tolerance that was exceeded
    """
    quantity: str
    neuron_id: int
    timestep_ms: int
    value_a: float
    value_b: float
    delta: float
    tolerance: float

    def __str__(self) -> str:
        return (f"{self.quantity} of neuron {self.neuron_id} at t={self.timestep_ms} ms: "
                f"{self.value_a!r} vs {self.value_b!r} "
                f"(|delta|={self.delta:g} > {self.tolerance:g})")


@dataclass(frozen=True, eq=False)
class EquivalenceReport:
    """Comparison of one neuron group across two backend runs.

    Attributes:
        group_id: Monitored group
        backends: Names of the two backends, in comparison order
        count_delta: Per-neuron ``counts_b - counts_a`` at end of run
            (read-only array)
        total_a: Total spikes counted in the first run
        total_b: Total spikes counted in the second run
        tolerance: Tolerances applied
        first_divergence: Earliest out-of-tolerance observation, or None
        quantities_checked: Names of every compared quantity
    """
    group_id: str
    backends: Tuple[str, str]
    count_delta: np.ndarray
    total_a: int
    total_b: int
    tolerance: ToleranceConfig
    first_divergence: Optional[Divergence] = None
    quantities_checked: Tuple[str, ...] = (SPIKE_COUNT,)

    def __post_init__(self):
        delta = np.array(self.count_delta, dtype=np.int64)
        delta.setflags(write=False)
        object.__setattr__(self, "count_delta", delta)

    @property
    def passed(self) -> bool:
        return self.first_divergence is None

    @property
    def max_count_delta(self) -> int:
        """Largest absolute per-neuron count difference at end of run."""
        if self.count_delta.size == 0:
            return 0
        return int(np.max(np.abs(self.count_delta)))

    @property
    def divergent_neurons(self) -> np.ndarray:
        """Ids whose final counts differ by more than the count tolerance."""
        return np.flatnonzero(np.abs(self.count_delta) > self.tolerance.max_count_delta)

    def __bool__(self) -> bool:
        return self.passed

    def summary(self) -> str:
        """Return human-readable summary."""
        a, b = self.backends
        verdict = "EQUIVALENT" if self.passed else "DIVERGED"
        lines = [
            f"EquivalenceReport [{verdict}] group={self.group_id!r} {a} vs {b}:",
            f"  Total spikes: {self.total_a} vs {self.total_b}",
            f"  Max per-neuron count delta: {self.max_count_delta} "
            f"(tolerance {self.tolerance.max_count_delta})",
            f"  State drift tolerance: {self.tolerance.max_state_drift:g}",
            f"  Quantities checked: {', '.join(self.quantities_checked)}",
        ]
        if self.first_divergence is not None:
            lines.append(f"  First divergence: {self.first_divergence}")
        return "\n".join(lines)
