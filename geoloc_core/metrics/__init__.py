"""
Metrics Module: Diagnostics counters and histograms.

Every dropped reading and every failed run carries a reason code:
- Counters: samples_requested, samples_collected, acquisition_runs, ...
- Drop reasons: sample_failed, outlier, out_of_bounds, geocode_failed, ...
- Histograms: calibrated_accuracy_m

Usage:
    from geoloc_core.metrics import get_metrics
    
    metrics = get_metrics()
    metrics.increment('samples_collected')
    metrics.increment_drop('outlier')
    metrics.record_histogram('calibrated_accuracy_m', 6.2)
"""

from .counters import MetricsCollector

# Global singleton for easy access
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.
    
    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = ['MetricsCollector', 'get_metrics', 'reset_metrics']
