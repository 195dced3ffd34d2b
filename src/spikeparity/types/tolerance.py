"""
SpikeParity Types — equivalence tolerances.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping

from spikeparity.errors import ConfigurationError

# Default trace tolerance: absorbs rounding from a different summation order
DEFAULT_STATE_DRIFT = 1e-9


@dataclass(frozen=True)
class ToleranceConfig:
    """Allowed disagreement between two backends.

    Attributes:
        max_count_delta: Largest allowed absolute difference in a neuron's
            spike count. 0 (exact match) is the default for integer counts.
        max_state_drift: Largest allowed absolute difference in any
            continuous state trace value (membrane potential etc.). The
            default only absorbs floating-point rounding.
    """
    max_count_delta: int = 0
    max_state_drift: float = DEFAULT_STATE_DRIFT

    def __post_init__(self):
        if int(self.max_count_delta) != self.max_count_delta or self.max_count_delta < 0:
            raise ConfigurationError(
                f"max_count_delta must be a non-negative integer, "
                f"got {self.max_count_delta!r}")
        if not math.isfinite(self.max_state_drift) or self.max_state_drift < 0:
            raise ConfigurationError(
                f"max_state_drift must be a finite non-negative number, "
                f"got {self.max_state_drift!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ToleranceConfig':
        """Build from a mapping.

        Accepts both the snake_case field names and the camelCase wire
        names ``maxCountDelta`` / ``maxStateDrift``. Missing keys keep
        their defaults; unknown keys are rejected.
        """
        aliases = {
            "maxCountDelta": "max_count_delta",
            "maxStateDrift": "max_state_drift",
            "max_count_delta": "max_count_delta",
            "max_state_drift": "max_state_drift",
        }
        kwargs = {}
        for key, value in data.items():
            if key not in aliases:
                raise ConfigurationError(
                    f"Unknown tolerance key {key!r}. "
                    f"Choose from: {sorted(aliases)}")
            kwargs[aliases[key]] = value
        if "max_count_delta" in kwargs:
            kwargs["max_count_delta"] = int(kwargs["max_count_delta"])
        if "max_state_drift" in kwargs:
            kwargs["max_state_drift"] = float(kwargs["max_state_drift"])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        """Return the camelCase wire form."""
        return {
            "maxCountDelta": self.max_count_delta,
            "maxStateDrift": self.max_state_drift,
        }
