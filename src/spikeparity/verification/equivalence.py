"""
Equivalence validation — same network, same stimulus, two backends.

Each run gets its own freshly built SpikeAccumulator; nothing mutable is
shared between runs, and the runs execute one after the other. The
comparison walks the runs' observable outputs in time order and stops at
the first neuron/timestep that disagrees beyond tolerance, so a CPU vs
parallel backend mismatch can be traced to where it started rather than
only reported as a failed boolean.

Example:
    >>> from spikeparity import EquivalenceValidator, NetworkConfig, PeriodicSpikeSource
    >>> validator = EquivalenceValidator(NetworkConfig(), PeriodicSpikeSource(50.0))
    >>> report = validator.validate()
    >>> report.passed
    True
"""

import logging
import weakref
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from spikeparity.errors import ConfigurationError, ContractViolation
from spikeparity.monitors.accumulator import AccumulatorState, SpikeAccumulator
from spikeparity.simulator.backends import get_backend
from spikeparity.simulator.config import NetworkConfig
from spikeparity.simulator.engine import SimulatorBackend
from spikeparity.sources.base import SpikeSource
from spikeparity.types.events import MS_PER_SECOND, NeuronGroupRef
from spikeparity.types.tolerance import ToleranceConfig
from spikeparity.verification.report import SPIKE_COUNT, Divergence, EquivalenceReport

logger = logging.getLogger(__name__)

AccumulatorFactory = Callable[[NeuronGroupRef], SpikeAccumulator]


@dataclass
class RunResult:
    """Everything observed during one backend run.

    Attributes:
        backend: Backend name
        accumulator: The run's accumulator (final counts)
        count_history: Cumulative per-neuron counts after each simulated
            second, shape (seconds, N)
        traces: State traces keyed ``"<group>.<variable>"``, each of shape
            (timesteps, N)
    """
    backend: str
    accumulator: SpikeAccumulator
    count_history: np.ndarray
    traces: Dict[str, np.ndarray] = field(default_factory=dict)

    @property
    def spikes(self) -> np.ndarray:
        return self.accumulator.spikes

    @property
    def total(self) -> int:
        return self.accumulator.total


class _CountHistory:
    """Monitor that feeds the accumulator and snapshots it every second."""

    def __init__(self, accumulator: SpikeAccumulator):
        self.accumulator = accumulator
        self._snapshots: List[np.ndarray] = []

    def update(self, group_id, neuron_ids, time_counts) -> None:
        self.accumulator.update(group_id, neuron_ids, time_counts)
        self._snapshots.append(self.accumulator.spikes.copy())

    def history(self) -> np.ndarray:
        if not self._snapshots:
            return np.zeros((0, self.accumulator.n_neurons), dtype=np.int64)
        return np.stack(self._snapshots)


def _first_exceeding(a: np.ndarray, b: np.ndarray,
                     tolerance: float) -> Optional[Tuple[int, int]]:
    """(row, column) of the first element with ``|b - a| > tolerance``.

    Rows are scanned in order, and columns in order within a row. A NaN on
    only one side always counts as exceeding.
    """
    if np.issubdtype(a.dtype, np.integer) and np.issubdtype(b.dtype, np.integer):
        bad = np.abs(b.astype(np.int64) - a.astype(np.int64)) > tolerance
    else:
        a = a.astype(np.float64)
        b = b.astype(np.float64)
        with np.errstate(invalid="ignore"):
            bad = np.abs(b - a) > tolerance
        bad |= np.isnan(a) ^ np.isnan(b)
    hits = np.argwhere(bad)
    if hits.size == 0:
        return None
    row, col = hits[0]
    return int(row), int(col)


class EquivalenceValidator:
    """
    Runs one network on two backends and compares what they produced.

    Args:
        network: Network configuration shared by both runs
        source: Deterministic spike source shared by both runs
        backends: Two backend names or backend objects
        tolerance: ToleranceConfig, or a mapping accepted by
            ``ToleranceConfig.from_dict``. Defaults to exact counts and
            rounding-level state drift.
        group: Monitored group id (default: the network's output group)
        accumulator_factory: Builds the accumulator for each run. Must
            return a new, unused accumulator sized for the group.
    """

    def __init__(self,
                 network: NetworkConfig,
                 source: SpikeSource,
                 backends: Sequence[Union[str, SimulatorBackend]] = ("sequential", "vectorized"),
                 tolerance: Union[ToleranceConfig, Mapping, None] = None,
                 group: Optional[str] = None,
                 accumulator_factory: Optional[AccumulatorFactory] = None):
        if len(backends) != 2:
            raise ConfigurationError(
                f"Equivalence needs exactly two backends, got {len(backends)}")
        if tolerance is None:
            tolerance = ToleranceConfig()
        elif not isinstance(tolerance, ToleranceConfig):
            tolerance = ToleranceConfig.from_dict(tolerance)

        self.network = network
        self.source = source
        self.backends = (get_backend(backends[0]), get_backend(backends[1]))
        self.tolerance = tolerance
        self.group = network.group(group or network.output_group)
        self._factory = accumulator_factory or self._default_factory
        # weak: a finished run's counters are freed once its result is dropped
        self._used: "weakref.WeakSet[SpikeAccumulator]" = weakref.WeakSet()

    @staticmethod
    def _default_factory(group: NeuronGroupRef) -> SpikeAccumulator:
        return SpikeAccumulator(group.n_neurons, group_id=group.group_id)

    def _fresh_accumulator(self) -> SpikeAccumulator:
        acc = self._factory(self.group)
        if acc in self._used:
            raise ContractViolation(
                "Accumulator factory returned an accumulator from a previous run; "
                "every run needs its own")
        if acc.state is not AccumulatorState.IDLE:
            raise ContractViolation(
                f"Accumulator for a new run must be idle, got {acc!r}")
        if acc.n_neurons != self.group.n_neurons:
            raise ContractViolation(
                f"Accumulator sized for {acc.n_neurons} neurons, "
                f"group {self.group.group_id!r} has {self.group.n_neurons}")
        self._used.add(acc)
        return acc

    # ── Runs ─────────────────────────────────────────────────

    def run(self, backend: Union[str, SimulatorBackend]) -> RunResult:
        """Run the network once on ``backend`` with a fresh accumulator."""
        backend = get_backend(backend)
        recorder = _CountHistory(self._fresh_accumulator())
        traces = backend.run(self.network, self.source,
                             {self.group.group_id: recorder})
        result = RunResult(
            backend=backend.name,
            accumulator=recorder.accumulator,
            count_history=recorder.history(),
            traces={name: np.asarray(trace) for name, trace in traces.items()},
        )
        logger.info("Run on %s: %d spikes in group %r over %d s",
                    result.backend, result.total, self.group.group_id,
                    result.count_history.shape[0])
        return result

    def validate(self) -> EquivalenceReport:
        """Run both backends, one after the other, and compare."""
        result_a = self.run(self.backends[0])
        result_b = self.run(self.backends[1])
        return self.compare(result_a, result_b)

    # ── Comparison ───────────────────────────────────────────

    def compare(self, result_a: RunResult, result_b: RunResult) -> EquivalenceReport:
        """Compare two runs of the same network.

        Spike counts are compared per simulated second against
        ``max_count_delta``; every state trace present in both runs is
        compared per timestep against ``max_state_drift``. The earliest
        offending (timestep, neuron) is reported.

        Raises:
            ContractViolation: The runs cover different durations or
                group sizes.
        """
        if result_a.accumulator is result_b.accumulator:
            raise ContractViolation("Both runs share one accumulator")
        hist_a, hist_b = result_a.count_history, result_b.count_history
        if hist_a.shape != hist_b.shape:
            raise ContractViolation(
                f"Count histories differ in shape: {result_a.backend} {hist_a.shape} "
                f"vs {result_b.backend} {hist_b.shape}")

        candidates: List[Divergence] = []
        tol = self.tolerance

        hit = _first_exceeding(hist_a, hist_b, tol.max_count_delta)
        if hit is not None:
            second, neuron = hit
            value_a, value_b = int(hist_a[hit]), int(hist_b[hit])
            candidates.append(Divergence(
                quantity=SPIKE_COUNT,
                neuron_id=neuron,
                timestep_ms=(second + 1) * MS_PER_SECOND - 1,
                value_a=value_a,
                value_b=value_b,
                delta=abs(value_b - value_a),
                tolerance=tol.max_count_delta,
            ))

        shared = sorted(set(result_a.traces) & set(result_b.traces))
        for name in sorted(set(result_a.traces) ^ set(result_b.traces)):
            logger.warning("State trace %r only recorded by one backend; not compared", name)
        for name in shared:
            trace_a, trace_b = result_a.traces[name], result_b.traces[name]
            if trace_a.shape != trace_b.shape:
                raise ContractViolation(
                    f"Trace {name!r} differs in shape: {trace_a.shape} vs {trace_b.shape}")
            hit = _first_exceeding(trace_a, trace_b, tol.max_state_drift)
            if hit is not None:
                value_a, value_b = float(trace_a[hit]), float(trace_b[hit])
                candidates.append(Divergence(
                    quantity=name,
                    neuron_id=hit[1],
                    timestep_ms=hit[0],
                    value_a=value_a,
                    value_b=value_b,
                    delta=abs(value_b - value_a),
                    tolerance=tol.max_state_drift,
                ))

        first = min(candidates, key=lambda d: (d.timestep_ms, d.neuron_id),
                    default=None)
        report = EquivalenceReport(
            group_id=self.group.group_id,
            backends=(result_a.backend, result_b.backend),
            count_delta=result_b.spikes - result_a.spikes,
            total_a=result_a.total,
            total_b=result_b.total,
            tolerance=tol,
            first_divergence=first,
            quantities_checked=(SPIKE_COUNT,) + tuple(shared),
        )
        if report.passed:
            logger.info("%s and %s equivalent on group %r",
                        result_a.backend, result_b.backend, self.group.group_id)
        else:
            logger.warning("%s and %s diverged: %s",
                           result_a.backend, result_b.backend, first)
        return report
