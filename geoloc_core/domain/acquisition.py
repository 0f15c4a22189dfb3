"""
Acquisition Controller.

Collects repeated device readings and runs them through the pipeline:

1. Sampling loop (bounded attempts, inter-sample delay, retry on failure)
2. Overall deadline racing the whole loop
3. Outlier filter + calibration
4. Geographic fence
5. Reverse geocoding (never fatal)

Usage:
    controller = AcquisitionController(source, ReverseGeocoder(session))
    
    try:
        result = await controller.acquire_calibrated_location()
    except LocationAcquisitionError as err:
        show(err.user_message)   # fall back to manual map selection
    else:
        print(result.latitude, result.longitude, result.address)

A device request that outlives its timeout (or the overall deadline) is
abandoned, not cancelled: it keeps running and its late result is
discarded.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from geoloc_core.proto.geo_sample import GeoSample, SampleSet
from geoloc_core.proto.location_result import CalibratedCoordinate, LocationResult
from geoloc_core.localization.calibration import CalibrationConfig, calibrate_samples
from geoloc_core.localization.bounds_validator import (
    BoundingBox,
    INDONESIA_BOUNDS,
    is_within_bounds,
)
from geoloc_core.io.device_source import DeviceLocationSource, PositionUnavailableError
from geoloc_core.io.geocoding import ReverseGeocoder
from geoloc_core.domain.errors import (
    AcquisitionTimeoutError,
    InsufficientSamplesError,
    OutOfBoundsError,
)
from geoloc_core.metrics import get_metrics

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


@dataclass
class AcquisitionConfig:
    """
    Configuration for one acquisition run.
    
    Attributes:
        max_samples: Attempt budget (successes and failures both count)
        min_samples: Readings required before calibration may proceed
        per_sample_timeout_ms: Timeout for a single device request (ms)
        interval_ms: Delay between successive requests (ms)
        overall_timeout_ms: Deadline for the whole sampling loop (ms)
        bounding_box: Geographic fence for the calibrated coordinate
        high_accuracy: Ask the device for a high-accuracy fix
        calibration: Outlier filter / aggregator configuration
    """
    
    max_samples: int = 5
    min_samples: int = 2
    per_sample_timeout_ms: int = 15000
    interval_ms: int = 1000
    overall_timeout_ms: int = 45000
    bounding_box: BoundingBox = INDONESIA_BOUNDS
    high_accuracy: bool = True
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    
    def __post_init__(self):
        """Validate configuration."""
        if self.max_samples < 1:
            raise ValueError("max_samples must be at least 1")
        if not 1 <= self.min_samples <= self.max_samples:
            raise ValueError("min_samples must be in [1, max_samples]")
        if self.per_sample_timeout_ms <= 0:
            raise ValueError("per_sample_timeout_ms must be positive")
        if self.overall_timeout_ms <= 0:
            raise ValueError("overall_timeout_ms must be positive")
        if self.interval_ms < 0:
            raise ValueError("interval_ms cannot be negative")


class _SamplingRun:
    """Mutable state owned by exactly one acquisition run."""
    
    def __init__(self):
        self.samples: SampleSet = []
        self.attempts = 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AcquisitionController:
    """
    Orchestrates sampling, calibration, fence check and geocoding.
    
    Each call to acquire_calibrated_location() owns its own SampleSet, so
    two overlapping calls on the same controller never share readings.
    """
    
    def __init__(
        self,
        source: DeviceLocationSource,
        geocoder: Optional[ReverseGeocoder] = None,
        config: Optional[AcquisitionConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize controller.
        
        Args:
            source: Device location source
            geocoder: Reverse geocoder (default provider chain if None)
            config: Acquisition configuration (uses defaults if None)
            progress_callback: Optional (percent, status) progress sink
        """
        self.source = source
        self.geocoder = geocoder or ReverseGeocoder()
        self.config = config or AcquisitionConfig()
        self.progress_callback = progress_callback
        self.metrics = get_metrics()
    
    async def acquire_calibrated_location(self) -> LocationResult:
        """
        Run the full pipeline once.
        
        Returns:
            LocationResult with rounded accuracy
            
        Raises:
            InsufficientSamplesError: Attempt budget exhausted below min_samples
            AcquisitionTimeoutError: Deadline elapsed below min_samples
            OutOfBoundsError: Calibrated coordinate outside the fence
        """
        self.metrics.increment('acquisition_runs')
        self._report(0.0, "Memulai kalibrasi GPS...")
        
        samples = await self.collect_samples()
        
        self._report(95.0, "Mengkalibrasi koordinat...")
        calibrated = self.calibrate(samples)
        
        if not is_within_bounds(calibrated, self.config.bounding_box):
            self.metrics.increment_drop('out_of_bounds')
            logger.warning(
                "Calibrated coordinate (%.6f, %.6f) outside fence %s",
                calibrated.latitude, calibrated.longitude, self.config.bounding_box
            )
            raise OutOfBoundsError()
        
        address = await self.geocoder.resolve_address(calibrated.latitude, calibrated.longitude)
        
        result = LocationResult(
            latitude=calibrated.latitude,
            longitude=calibrated.longitude,
            address=address,
            accuracy_m=_round_half_up(calibrated.accuracy_m),
            num_readings=len(samples),
        )
        
        self.metrics.increment('acquisition_success')
        self._report(100.0, "Lokasi dikalibrasi")
        return result
    
    async def collect_samples(self) -> SampleSet:
        """
        Collect readings under the attempt budget and the overall deadline.
        
        Returns:
            Readings in collection order (at least min_samples)
        """
        run = _SamplingRun()
        loop_task = asyncio.ensure_future(self._sampling_loop(run))
        
        try:
            done, _ = await asyncio.wait(
                {loop_task}, timeout=self.config.overall_timeout_ms / 1000.0
            )
        except asyncio.CancelledError:
            loop_task.cancel()
            raise
        
        if loop_task in done:
            samples = loop_task.result()
        else:
            # Deadline: stop the loop; an in-flight device request is left running
            samples = list(run.samples)
            loop_task.cancel()
            await asyncio.wait({loop_task})
            
            if not loop_task.cancelled():
                # Loop finished in the same iteration the deadline fired
                samples = loop_task.result()
            elif len(samples) < self.config.min_samples:
                self.metrics.increment_drop('acquisition_timeout')
                logger.warning(
                    "Acquisition deadline (%d ms) elapsed with %d/%d readings",
                    self.config.overall_timeout_ms, len(samples), self.config.min_samples
                )
                raise AcquisitionTimeoutError(len(samples), self.config.min_samples)
            else:
                logger.info("Acquisition deadline elapsed, proceeding with %d readings", len(samples))
        
        self._report(90.0, "Menganalisis pembacaan GPS...")
        return samples
    
    def calibrate(self, samples: SampleSet) -> CalibratedCoordinate:
        """Run outlier filtering and calibration, recording diagnostics."""
        calibrated = calibrate_samples(samples, self.config.calibration)
        
        if calibrated.num_outliers_dropped:
            self.metrics.increment_drop('outlier', calibrated.num_outliers_dropped)
        self.metrics.record_histogram('calibrated_accuracy_m', calibrated.accuracy_m)
        
        logger.info(
            "Calibrated GPS result: readings=%d used=%d lat=%.8f lon=%.8f accuracy=%dm",
            len(samples), calibrated.num_samples_used,
            calibrated.latitude, calibrated.longitude,
            _round_half_up(calibrated.accuracy_m)
        )
        return calibrated
    
    async def _sampling_loop(self, run: _SamplingRun) -> SampleSet:
        cfg = self.config
        interval_s = cfg.interval_ms / 1000.0
        
        while run.attempts < cfg.max_samples:
            self._report(
                run.attempts / cfg.max_samples * 100.0,
                f"Membaca GPS {run.attempts + 1}/{cfg.max_samples}..."
            )
            self.metrics.increment('samples_requested')
            
            try:
                sample = await self._request_reading()
            except PositionUnavailableError as err:
                run.attempts += 1
                reason = 'sample_timeout' if err.code == 'TIMEOUT' else 'sample_failed'
                self.metrics.increment_drop(reason)
                logger.warning("GPS reading %d failed: %s", run.attempts, err.reason)
                
                if len(run.samples) >= cfg.min_samples:
                    break
                if run.attempts >= cfg.max_samples:
                    break
                await asyncio.sleep(interval_s)
                continue
            
            run.attempts += 1
            run.samples.append(sample)
            self.metrics.increment('samples_collected')
            logger.debug(
                "GPS reading %d: lat=%.8f lon=%.8f accuracy=%dm",
                run.attempts, sample.latitude, sample.longitude,
                _round_half_up(sample.accuracy_m)
            )
            
            if run.attempts < cfg.max_samples:
                await asyncio.sleep(interval_s)
        
        if len(run.samples) < cfg.min_samples:
            self.metrics.increment_drop('insufficient_samples')
            raise InsufficientSamplesError(len(run.samples), cfg.min_samples)
        
        return list(run.samples)
    
    async def _request_reading(self) -> GeoSample:
        """One device request bounded by per_sample_timeout_ms."""
        request = asyncio.ensure_future(
            self.source.request_position(
                self.config.per_sample_timeout_ms, self.config.high_accuracy
            )
        )
        try:
            done, _ = await asyncio.wait(
                {request}, timeout=self.config.per_sample_timeout_ms / 1000.0
            )
        finally:
            if not request.done():
                request.add_done_callback(self._discard_late_reading)
        
        if not done:
            raise PositionUnavailableError("Timed out waiting for a position", code="TIMEOUT")
        
        return request.result()
    
    def _discard_late_reading(self, request: asyncio.Future):
        if request.cancelled():
            return
        err = request.exception()
        if err is not None:
            logger.debug("Abandoned GPS request failed late: %s", err)
            return
        self.metrics.increment_drop('late_sample_discarded')
        logger.warning("Discarding GPS reading that arrived after it was abandoned")
    
    def _report(self, percent: float, status: str):
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(percent, status)
        except Exception:
            logger.exception("Progress callback failed")


async def acquire_calibrated_location(
    source: DeviceLocationSource,
    config: Optional[AcquisitionConfig] = None,
    geocoder: Optional[ReverseGeocoder] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> LocationResult:
    """Run one acquisition with a throwaway controller."""
    controller = AcquisitionController(source, geocoder, config, progress_callback)
    return await controller.acquire_calibrated_location()


def create_default_controller(
    source: DeviceLocationSource,
    geocoder: Optional[ReverseGeocoder] = None,
) -> AcquisitionController:
    """
    Create controller with the field defaults: 5 readings (min 2), 15s per
    reading, 1s apart, 45s overall, Indonesia fence.
    """
    config = AcquisitionConfig(
        max_samples=5,
        min_samples=2,
        per_sample_timeout_ms=15000,
        interval_ms=1000,
        overall_timeout_ms=45000,
        bounding_box=INDONESIA_BOUNDS,
        high_accuracy=True,
        calibration=CalibrationConfig(),
    )
    
    return AcquisitionController(source, geocoder, config)
