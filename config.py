"""
Location calibration configuration.
"""

# Acquisition configuration
ACQUISITION_CONFIG = {
    "max_samples": 5,                 # Attempt budget per run
    "min_samples": 2,                 # Readings required before calibration
    "per_sample_timeout_ms": 15000,   # Single device request timeout
    "interval_ms": 1000,              # Delay between readings
    "overall_timeout_ms": 45000,      # Deadline for the whole sampling loop
    "high_accuracy": True,            # Ask for a high-accuracy fix
}

# Geographic fence (Indonesia mainland + archipelago)
BOUNDS_CONFIG = {
    "lat_min": -11.0,
    "lat_max": 6.0,
    "lon_min": 95.0,
    "lon_max": 141.0,
}

# Calibration configuration
CALIBRATION_CONFIG = {
    "iqr_multiplier": 1.5,            # Q3 + k * IQR outlier bound
    "accuracy_floor_m": 5.0,          # Lowest accuracy the result may claim
    "meters_per_degree": 111000.0,    # Flat approximation
}

# Reverse geocoding configuration
GEOCODING_CONFIG = {
    "user_agent": "ISP-Management-System/1.0",
    "timeout_s": 10.0,                # Per-provider request timeout
    "language": "id",
    "providers": ["nominatim", "photon"],   # Tried in this order
}

# Logging configuration
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
