"""
Exception hierarchy for SpikeParity.

Exception Hierarchy:
====================
SpikeParityError (base) - Base exception for all SpikeParity errors
├── ConfigurationError - Invalid construction-time parameters
└── ContractViolation  - A simulator, source or monitor broke its contract

Every failure raised here is a programmer or contract level fault, never a
transient condition. Nothing in the package catches these to retry or
continue a run.
"""

from __future__ import annotations


class SpikeParityError(Exception):
    """Base exception for all SpikeParity errors."""


class ConfigurationError(SpikeParityError, ValueError):
    """Invalid construction-time parameter.

    Raised before any run starts: a non-positive firing rate, a non-positive
    neuron count, a negative tolerance, an unknown backend name.
    """


class ContractViolation(SpikeParityError, RuntimeError):
    """A collaborator broke the callback contract during a run.

    Raised for neuron ids outside ``[0, N)``, malformed per-second
    ``time_counts``, a spike source that does not advance time, or an
    accumulator that is reused across runs. These are simulator-side bugs:
    the run aborts, nothing is clamped or dropped.
    """
