"""
Location calibration command-line tool.

Replays recorded device readings through the acquisition pipeline, or
resolves a manually picked point, and prints the resulting location.
"""

import sys
import json
import asyncio
import logging
import argparse
from pathlib import Path
from typing import List, Optional

import aiohttp

import config
from geoloc_core.domain import (
    AcquisitionConfig,
    AcquisitionController,
    LocationAcquisitionError,
    select_manual_location,
)
from geoloc_core.io import (
    NominatimProvider,
    PhotonProvider,
    ReplayLocationSource,
    ReverseGeocoder,
)
from geoloc_core.localization import BoundingBox, CalibrationConfig
from geoloc_core.metrics import get_metrics
from geoloc_core.proto import LocationResult

logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)

PROVIDER_FACTORIES = {
    "nominatim": NominatimProvider,
    "photon": PhotonProvider,
}


def load_readings(path: Path) -> List[dict]:
    """
    Load recorded readings from a JSON file.
    
    The file holds a list, or an object with a "readings" list.
    
    Raises:
        ValueError: If the file does not contain a list of readings
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    
    if isinstance(data, dict):
        data = data.get("readings")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of readings")
    return data


def build_acquisition_config(args: argparse.Namespace) -> AcquisitionConfig:
    """Merge config.py defaults with command-line overrides."""
    settings = dict(config.ACQUISITION_CONFIG)
    for key in ("max_samples", "min_samples", "interval_ms", "overall_timeout_ms",
                "per_sample_timeout_ms"):
        value = getattr(args, key, None)
        if value is not None:
            settings[key] = value
    
    return AcquisitionConfig(
        bounding_box=BoundingBox.from_dict(config.BOUNDS_CONFIG),
        calibration=CalibrationConfig(**config.CALIBRATION_CONFIG),
        **settings,
    )


def build_geocoder(session: Optional[aiohttp.ClientSession], enabled: bool = True) -> ReverseGeocoder:
    """Reverse geocoder with the provider order from config.py."""
    providers = []
    if enabled:
        language = config.GEOCODING_CONFIG["language"]
        for name in config.GEOCODING_CONFIG["providers"]:
            factory = PROVIDER_FACTORIES.get(name)
            if factory is None:
                logger.warning("Unknown geocoding provider '%s' ignored", name)
                continue
            providers.append(factory(language=language))
    
    return ReverseGeocoder(
        session=session,
        providers=providers,
        user_agent=config.GEOCODING_CONFIG["user_agent"],
        timeout_s=config.GEOCODING_CONFIG["timeout_s"],
    )


def print_location(result: LocationResult):
    """Print a location result."""
    print("=" * 60)
    print("  LOKASI TERPILIH")
    print("=" * 60)
    print(f"  Latitude : {result.latitude:.8f}")
    print(f"  Longitude: {result.longitude:.8f}")
    if result.accuracy_m is not None:
        print(f"  Akurasi  : ±{result.accuracy_m}m ({result.accuracy_level})")
        print(f"  Readings : {result.num_readings}")
    print(f"  Alamat   : {result.address}")
    print("=" * 60)


def _progress(percent: float, status: str):
    logger.info("[%3.0f%%] %s", percent, status)


async def run(args: argparse.Namespace) -> LocationResult:
    """Run manual selection or a replayed acquisition."""
    async with aiohttp.ClientSession() as session:
        geocoder = build_geocoder(session, enabled=not args.no_geocode)
        
        if args.lat is not None and args.lon is not None:
            return await select_manual_location(args.lat, args.lon, geocoder)
        
        source = ReplayLocationSource.from_records(load_readings(args.samples))
        controller = AcquisitionController(
            source,
            geocoder,
            build_acquisition_config(args),
            progress_callback=_progress,
        )
        return await controller.acquire_calibrated_location()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='GPS location calibration')
    parser.add_argument('--samples', '-s', type=Path, default=None,
                        help='JSON file with recorded device readings')
    parser.add_argument('--lat', type=float, default=None,
                        help='Latitude of a manually picked point')
    parser.add_argument('--lon', type=float, default=None,
                        help='Longitude of a manually picked point')
    parser.add_argument('--max-samples', dest='max_samples', type=int, default=None)
    parser.add_argument('--min-samples', dest='min_samples', type=int, default=None)
    parser.add_argument('--interval-ms', dest='interval_ms', type=int, default=None)
    parser.add_argument('--per-sample-timeout-ms', dest='per_sample_timeout_ms',
                        type=int, default=None)
    parser.add_argument('--overall-timeout-ms', dest='overall_timeout_ms',
                        type=int, default=None)
    parser.add_argument('--no-geocode', action='store_true',
                        help='Skip providers and use the coordinate string')
    parser.add_argument('--stats', action='store_true',
                        help='Print metrics summary at exit')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    
    manual = args.lat is not None or args.lon is not None
    if manual and (args.lat is None or args.lon is None):
        parser.error("--lat and --lon must be given together")
    if not manual and args.samples is None:
        parser.error("either --samples or --lat/--lon is required")
    
    try:
        result = asyncio.run(run(args))
    except LocationAcquisitionError as err:
        print(f"❌ {err.user_message}")
        return 1
    except (OSError, ValueError) as err:
        logger.error("Cannot run calibration: %s", err)
        return 1
    finally:
        if args.stats:
            get_metrics().print_summary()
    
    print_location(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
