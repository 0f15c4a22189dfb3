"""
Field Location Calibration Core Package.

GPS acquisition and calibration for customer self-registration in the ISP
field-operations app: repeated device readings are filtered, fused,
fenced and reverse geocoded into one LocationResult.

Package structure:
- proto: Data types (GeoSample, CalibratedCoordinate, LocationResult)
- localization: Outlier filter, calibration aggregator, geographic fence
- io: Device location sources, reverse geocoding providers
- domain: Acquisition controller, error taxonomy, manual selection
- metrics: Diagnostics counters and histograms
"""

__version__ = "0.1.0"
