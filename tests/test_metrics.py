"""
Unit tests for metrics module.

Tests cover:
- Counter increment (single-threaded and multi-threaded)
- Drop reason tracking
- Histogram recording and statistics
- Snapshot and reset functionality
- Thread safety
"""

import logging
import threading
import time

from geoloc_core.metrics import MetricsCollector, get_metrics, reset_metrics


class TestMetricsCollectorBasic:
    """Tests for basic metrics collector functionality."""

    def test_initialization(self):
        """Test that metrics collector initializes correctly."""
        collector = MetricsCollector()
        
        # Standard counters should be initialized to 0
        assert collector.get_counter('samples_requested') == 0
        assert collector.get_counter('geocode_fallback') == 0
        
        # Unknown counter should return 0
        assert collector.get_counter('unknown_counter') == 0

    def test_increment_counter(self):
        """Test incrementing a counter."""
        collector = MetricsCollector()
        
        collector.increment('samples_collected')
        assert collector.get_counter('samples_collected') == 1
        
        collector.increment('samples_collected', 4)
        assert collector.get_counter('samples_collected') == 5

    def test_increment_drop_with_valid_reason(self):
        """Test incrementing drop counter with valid reason."""
        collector = MetricsCollector()
        
        collector.increment_drop('outlier')
        assert collector.get_counter('dropped_total') == 1
        assert collector.get_drop_count('outlier') == 1
        
        snapshot = collector.snapshot()
        assert snapshot.drop_reasons['outlier'] == 1

    def test_increment_drop_unknown_reason(self, caplog):
        """Test incrementing drop counter with unknown reason logs warning."""
        collector = MetricsCollector()
        
        with caplog.at_level(logging.WARNING):
            collector.increment_drop('unknown_reason')
        
        assert 'unknown_reason' in caplog.text
        
        # Should still be counted
        assert collector.get_counter('dropped_total') == 1
        assert collector.get_drop_count('unknown_reason') == 1

    def test_multiple_drop_reasons(self):
        """Test tracking multiple drop reasons."""
        collector = MetricsCollector()
        
        collector.increment_drop('sample_failed', 3)
        collector.increment_drop('outlier', 5)
        collector.increment_drop('geocode_failed', 2)
        
        snapshot = collector.snapshot()
        
        assert snapshot.drop_reasons['sample_failed'] == 3
        assert snapshot.drop_reasons['outlier'] == 5
        assert snapshot.drop_reasons['geocode_failed'] == 2
        assert snapshot.total_dropped() == 10


class TestHistograms:
    """Tests for histogram functionality."""

    def test_record_histogram(self):
        """Test recording values in histogram."""
        collector = MetricsCollector()
        
        collector.record_histogram('calibrated_accuracy_m', 5.0)
        collector.record_histogram('calibrated_accuracy_m', 7.5)
        collector.record_histogram('calibrated_accuracy_m', 6.0)
        
        stats = collector.get_histogram_stats('calibrated_accuracy_m')
        
        assert stats is not None
        assert stats['count'] == 3
        assert abs(stats['mean'] - 6.1667) < 0.01
        assert stats['min'] == 5.0
        assert stats['max'] == 7.5
        assert stats['median'] == 6.0

    def test_histogram_empty(self):
        """Test getting stats for empty histogram."""
        collector = MetricsCollector()
        
        assert collector.get_histogram_stats('nonexistent') is None

    def test_histogram_percentiles(self):
        """Test histogram percentile calculations."""
        collector = MetricsCollector()
        
        for i in range(100):
            collector.record_histogram('test', float(i))
        
        stats = collector.get_histogram_stats('test')
        
        assert stats['count'] == 100
        assert 49 < stats['median'] < 51
        assert 94 < stats['p95'] < 96

    def test_histogram_max_samples_bounded(self):
        """Test that histograms are bounded to prevent memory growth."""
        collector = MetricsCollector()
        
        for i in range(15000):
            collector.record_histogram('test', float(i), max_samples=1000)
        
        snapshot = collector.snapshot()
        
        assert len(snapshot.histograms['test']) <= 1000
        # Most recent values are kept
        assert snapshot.histograms['test'][-1] == 14999.0


class TestSnapshot:
    """Tests for snapshot functionality."""

    def test_snapshot_creates_copy(self):
        """Test that snapshot creates independent copy."""
        collector = MetricsCollector()
        
        collector.increment('samples_requested', 10)
        snapshot1 = collector.snapshot()
        
        collector.increment('samples_requested', 5)
        snapshot2 = collector.snapshot()
        
        assert snapshot1.counters['samples_requested'] == 10
        assert snapshot2.counters['samples_requested'] == 15

    def test_snapshot_timestamp(self):
        """Test snapshot includes timestamp."""
        collector = MetricsCollector()
        
        before = time.time()
        snapshot = collector.snapshot()
        after = time.time()
        
        assert before <= snapshot.timestamp <= after

    def test_snapshot_drop_rate(self):
        """Test snapshot drop rate calculation."""
        collector = MetricsCollector()
        
        collector.increment_drop('sample_failed', 1)
        collector.increment_drop('sample_timeout', 1)
        
        snapshot = collector.snapshot()
        
        assert abs(snapshot.drop_rate(5) - 40.0) < 0.01
        assert snapshot.drop_rate(0) == 0.0


class TestReset:
    """Tests for reset functionality."""

    def test_reset_clears_counters(self):
        """Test that reset clears all counters."""
        collector = MetricsCollector()
        
        collector.increment('samples_collected', 100)
        collector.increment_drop('outlier', 5)
        collector.record_histogram('consistency_m', 1.2)
        
        collector.reset()
        
        assert collector.get_counter('samples_collected') == 0
        assert collector.get_counter('dropped_total') == 0
        
        snapshot = collector.snapshot()
        assert snapshot.total_dropped() == 0
        assert not snapshot.histograms

    def test_reset_reinitializes_standard_counters(self):
        """Test that reset reinitializes standard counters to 0."""
        collector = MetricsCollector()
        
        collector.increment('acquisition_runs', 3)
        collector.reset()
        
        snapshot = collector.snapshot()
        assert snapshot.counters['acquisition_runs'] == 0
        assert snapshot.drop_reasons['late_sample_discarded'] == 0


class TestThreadSafety:
    """Tests for thread-safe operations."""

    def test_concurrent_increment(self):
        """Test that concurrent increments are thread-safe."""
        collector = MetricsCollector()
        num_threads = 10
        increments_per_thread = 1000
        
        def worker():
            for _ in range(increments_per_thread):
                collector.increment('samples_requested')
        
        threads = [threading.Thread(target=worker) for _ in range(num_threads)]
        
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        
        assert collector.get_counter('samples_requested') == num_threads * increments_per_thread

    def test_concurrent_drop_reasons(self):
        """Test that concurrent drop reason increments are thread-safe."""
        collector = MetricsCollector()
        num_threads = 5
        increments_per_thread = 200
        
        def worker(reason: str):
            for _ in range(increments_per_thread):
                collector.increment_drop(reason)
        
        threads = [
            threading.Thread(target=worker, args=(reason,))
            for reason in ['outlier', 'sample_failed', 'geocode_failed']
            for _ in range(num_threads)
        ]
        
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        
        snapshot = collector.snapshot()
        expected = num_threads * increments_per_thread
        
        assert snapshot.drop_reasons['outlier'] == expected
        assert snapshot.drop_reasons['sample_failed'] == expected
        assert snapshot.drop_reasons['geocode_failed'] == expected
        assert snapshot.counters['dropped_total'] == 3 * expected


class TestGlobalSingleton:
    """Tests for global metrics singleton."""

    def test_get_metrics_returns_same_instance(self):
        """Test that get_metrics() returns the same instance."""
        assert get_metrics() is get_metrics()

    def test_reset_metrics_creates_new_instance(self):
        """Test that reset_metrics() creates fresh instance."""
        metrics1 = get_metrics()
        metrics1.increment('test_counter', 100)
        
        reset_metrics()
        
        metrics2 = get_metrics()
        assert metrics2 is not metrics1
        assert metrics2.get_counter('test_counter') == 0


class TestDropReasonCodes:
    """Tests for standard drop reason codes."""

    def test_all_standard_drop_reasons_defined(self):
        """Test that every pipeline drop reason is registered."""
        expected_reasons = [
            'sample_failed',
            'sample_timeout',
            'late_sample_discarded',
            'outlier',
            'out_of_bounds',
            'insufficient_samples',
            'acquisition_timeout',
            'geocode_failed',
        ]
        
        for reason in expected_reasons:
            assert reason in MetricsCollector.DROP_REASONS

    def test_drop_reasons_initialized_to_zero(self):
        """Test that all drop reasons are initialized to 0."""
        snapshot = MetricsCollector().snapshot()
        
        for reason in MetricsCollector.DROP_REASONS:
            assert snapshot.drop_reasons[reason] == 0


class TestPrintSummary:
    """Tests for print_summary functionality."""

    def test_print_summary_no_crash(self, capsys):
        """Test that print_summary doesn't crash with various data."""
        collector = MetricsCollector()
        
        collector.increment('samples_collected', 5)
        collector.increment_drop('outlier', 1)
        collector.record_histogram('calibrated_accuracy_m', 5.0)
        
        collector.print_summary()
        
        captured = capsys.readouterr()
        assert 'METRICS SUMMARY' in captured.out
        assert 'samples_collected' in captured.out
        assert 'calibrated_accuracy_m' in captured.out
