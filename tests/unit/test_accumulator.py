"""Unit tests for SpikeAccumulator."""

import numpy as np
import pytest

from spikeparity import (
    AccumulatorState,
    ConfigurationError,
    ContractViolation,
    MS_PER_SECOND,
    SpikeAccumulator,
    SpikeMonitor,
)


def one_second(spikes_by_ms):
    """Build (neuron_ids, time_counts) from {ms: [ids]}."""
    time_counts = np.zeros(MS_PER_SECOND, dtype=np.int64)
    neuron_ids = []
    for t in sorted(spikes_by_ms):
        time_counts[t] = len(spikes_by_ms[t])
        neuron_ids.extend(spikes_by_ms[t])
    return np.asarray(neuron_ids, dtype=np.int64), time_counts


class TestSpikeAccumulator:
    """Tests for construction and basic counting."""

    def test_starts_at_zero(self):
        """Test that a new accumulator is idle with zeroed counters."""
        acc = SpikeAccumulator(10)

        assert acc.n_neurons == 10
        assert acc.total == 0
        assert acc.state is AccumulatorState.IDLE
        np.testing.assert_array_equal(acc.spikes, np.zeros(10))

    def test_single_update_example(self):
        """Test three spikes at ms 5 for neurons 2, 2 and 7."""
        acc = SpikeAccumulator(10)
        time_counts = [0] * 1000
        time_counts[5] = 3

        acc.update("output", [2, 2, 7], time_counts)

        assert acc.spikes[2] == 2
        assert acc.spikes[7] == 1
        assert acc.total == 3
        assert acc.spikes.sum() == 3

    def test_walks_milliseconds_in_order(self):
        """Test spikes spread across several milliseconds."""
        acc = SpikeAccumulator(4)
        ids, counts = one_second({0: [0, 1], 17: [3], 999: [1, 2, 3]})

        acc.update("output", ids, counts)

        np.testing.assert_array_equal(acc.spikes, [1, 2, 1, 2])
        assert acc.total == 6

    def test_total_matches_sum_after_every_update(self):
        """Test the counter invariant over many seconds."""
        rng = np.random.default_rng(0)
        acc = SpikeAccumulator(25)

        for _ in range(20):
            counts = rng.integers(0, 3, size=MS_PER_SECOND)
            ids = rng.integers(0, 25, size=int(counts.sum()))
            acc.update("output", ids, counts)

            assert int(acc.spikes.sum()) == acc.total

        assert acc.n_updates == 20

    def test_empty_second(self):
        """Test a second without spikes."""
        acc = SpikeAccumulator(3)

        acc.update("output", [], [0] * 1000)

        assert acc.total == 0
        assert acc.n_updates == 1
        assert acc.state is AccumulatorState.ACCUMULATING

    def test_state_never_returns_to_idle(self):
        """Test IDLE → ACCUMULATING with no way back."""
        acc = SpikeAccumulator(3)
        ids, counts = one_second({1: [0]})

        acc.update("output", ids, counts)
        acc.update("output", [], [0] * 1000)

        assert acc.state is AccumulatorState.ACCUMULATING
        assert not hasattr(acc, "reset")

    def test_satisfies_capability(self):
        """Test that the accumulator is usable wherever a SpikeMonitor is expected."""
        assert isinstance(SpikeAccumulator(1), SpikeMonitor)


class TestSpikeAccumulatorAccessors:
    """Tests for the live-reference accessors."""

    def test_spikes_is_live_reference(self):
        """Test that accessors return the internal array, not a copy."""
        acc = SpikeAccumulator(5)
        before = acc.get_spikes()
        ids, counts = one_second({3: [4]})

        acc.update("output", ids, counts)

        assert acc.spikes is before
        assert before[4] == 1

    def test_get_spikes_total(self):
        """Test the total accessor."""
        acc = SpikeAccumulator(5)
        ids, counts = one_second({3: [4, 0], 4: [0]})

        acc.update("output", ids, counts)

        assert acc.get_spikes_total() == 3

    def test_accepts_unsigned_ids(self):
        """Test ids delivered in an unsigned integer array."""
        acc = SpikeAccumulator(5)
        counts = np.zeros(1000, dtype=np.uint32)
        counts[0] = 2

        acc.update("output", np.array([1, 4], dtype=np.uint64), counts)

        np.testing.assert_array_equal(acc.spikes, [0, 1, 0, 0, 1])


class TestSpikeAccumulatorErrors:
    """Tests for preconditions and contract violations."""

    @pytest.mark.parametrize("n", [0, -1, -4])
    def test_invalid_neuron_count(self, n):
        """Test that N <= 0 fails fast at construction."""
        with pytest.raises(ConfigurationError, match="positive neuron count"):
            SpikeAccumulator(n)

    def test_fractional_neuron_count(self):
        """Test that a non-integer N is rejected."""
        with pytest.raises(ConfigurationError):
            SpikeAccumulator(2.5)

    def test_id_too_large(self):
        """Test that id == N aborts the update."""
        acc = SpikeAccumulator(10)
        ids, counts = one_second({5: [2, 10]})

        with pytest.raises(ContractViolation, match=r"Neuron id 10 at ms 5"):
            acc.update("output", ids, counts)

    def test_negative_id(self):
        """Test that negative ids abort the update."""
        acc = SpikeAccumulator(10)
        ids, counts = one_second({0: [1], 250: [-1]})

        with pytest.raises(ContractViolation, match=r"Neuron id -1 at ms 250"):
            acc.update("output", ids, counts)

    def test_rejected_batch_changes_nothing(self):
        """Test that a bad batch is not partially counted."""
        acc = SpikeAccumulator(3)
        ids, counts = one_second({0: [0, 1], 1: [3]})

        with pytest.raises(ContractViolation):
            acc.update("output", ids, counts)

        assert acc.total == 0
        assert acc.state is AccumulatorState.IDLE
        np.testing.assert_array_equal(acc.spikes, [0, 0, 0])

    @pytest.mark.parametrize("length", [0, 999, 1001])
    def test_wrong_time_counts_length(self, length):
        """Test that time_counts must cover exactly 1000 ms."""
        acc = SpikeAccumulator(3)

        with pytest.raises(ContractViolation, match="1000 entries"):
            acc.update("output", [], [0] * length)

    def test_time_counts_sum_mismatch(self):
        """Test that time_counts must account for every id."""
        acc = SpikeAccumulator(3)
        counts = [0] * 1000
        counts[0] = 1

        with pytest.raises(ContractViolation, match="sum to 1"):
            acc.update("output", [0, 1], counts)

    def test_negative_time_count(self):
        """Test that negative per-ms counts are rejected."""
        acc = SpikeAccumulator(3)
        counts = [0] * 1000
        counts[0] = 2
        counts[9] = -1

        with pytest.raises(ContractViolation, match=r"time_counts\[9\]"):
            acc.update("output", [0], counts)

    def test_float_time_counts(self):
        """Test that time_counts must be integers."""
        acc = SpikeAccumulator(3)

        with pytest.raises(ContractViolation, match="integers"):
            acc.update("output", [], np.zeros(1000))

    def test_float_ids(self):
        """Test that neuron ids must be integers."""
        acc = SpikeAccumulator(3)
        counts = [0] * 1000
        counts[0] = 1

        with pytest.raises(ContractViolation, match="neuron_ids"):
            acc.update("output", [1.0], counts)

    def test_bound_group_mismatch(self):
        """Test that a bound accumulator rejects other groups."""
        acc = SpikeAccumulator(3, group_id="output")
        ids, counts = one_second({0: [0]})

        with pytest.raises(ContractViolation, match="bound to group 'output'"):
            acc.update("input", ids, counts)

    def test_unbound_accepts_any_group(self):
        """Test that an unbound accumulator ignores the group id."""
        acc = SpikeAccumulator(3)
        ids, counts = one_second({0: [0]})

        acc.update("anything", ids, counts)

        assert acc.total == 1
