"""
Pytest configuration and shared fixtures for the location calibration tests.

Provides sample factories (offsets given in meters around a base point),
a duck-typed aiohttp session for reverse geocoding, and metrics isolation.
"""

import sys
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from geoloc_core.metrics import reset_metrics
from geoloc_core.proto import GeoSample
from geoloc_core.io import NOMINATIM_REVERSE_URL, PHOTON_REVERSE_URL


# Surabaya, well inside the default fence
BASE_LAT = -7.250445
BASE_LON = 112.768845

METERS_PER_DEGREE = 111000.0


# =============================================================================
# Metrics isolation
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Give every test its own global metrics collector."""
    reset_metrics()
    yield
    reset_metrics()


# =============================================================================
# Sample Fixtures
# =============================================================================


def make_sample(
    north_m: float = 0.0,
    east_m: float = 0.0,
    accuracy_m: float = 5.0,
    base: Tuple[float, float] = (BASE_LAT, BASE_LON),
    captured_at_ms: int = 1_700_000_000_000,
) -> GeoSample:
    """
    Create a sample offset from a base point.
    
    Offsets use the same flat 111 km/degree factor as the calibration, so
    meter distances computed by the tests match the pipeline's.
    """
    return GeoSample(
        latitude=base[0] + north_m / METERS_PER_DEGREE,
        longitude=base[1] + east_m / METERS_PER_DEGREE,
        accuracy_m=accuracy_m,
        captured_at_ms=captured_at_ms,
    )


@pytest.fixture
def tight_cluster() -> List[GeoSample]:
    """
    Five readings within 2 m of each other, accuracies 5-8 m.
    
    Distances from the centroid: 0.8, 0.8, 0.4, 0.4, 0.0 m.
    """
    return [
        make_sample(0.8, 0.0, accuracy_m=5.0, captured_at_ms=1000),
        make_sample(-0.8, 0.0, accuracy_m=6.0, captured_at_ms=2000),
        make_sample(0.0, 0.4, accuracy_m=7.0, captured_at_ms=3000),
        make_sample(0.0, -0.4, accuracy_m=8.0, captured_at_ms=4000),
        make_sample(0.0, 0.0, accuracy_m=6.0, captured_at_ms=5000),
    ]


@pytest.fixture
def cluster_with_outlier() -> Tuple[List[GeoSample], List[GeoSample]]:
    """
    Four tightly clustered readings plus one 500 m away.
    
    Returns:
        (all five samples, the four cluster samples)
    """
    cluster = [
        make_sample(0.8, 0.0, accuracy_m=5.0),
        make_sample(-0.8, 0.0, accuracy_m=6.0),
        make_sample(0.0, 0.4, accuracy_m=7.0),
        make_sample(0.0, -0.4, accuracy_m=8.0),
    ]
    outlier = make_sample(500.0, 0.0, accuracy_m=5.0)
    return cluster[:2] + [outlier] + cluster[2:], cluster


def sample_record(sample: GeoSample, delay_ms: int = 0) -> Dict:
    """Replay record for a sample."""
    record = sample.to_dict()
    if delay_ms:
        record["delay_ms"] = delay_ms
    return record


# =============================================================================
# HTTP Fakes
# =============================================================================


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status: int = 200, body=None, json_error: Optional[Exception] = None):
        self.status = status
        self._body = body
        self._json_error = json_error
        self.released = False

    def release(self):
        self.released = True

    async def json(self, content_type=None):
        if self._json_error is not None:
            raise self._json_error
        return self._body


class FakeSession:
    """
    Duck-typed aiohttp.ClientSession routing GET requests by URL.
    
    A route value may be a FakeResponse, an exception to raise, or a
    (delay_s, FakeResponse) tuple. Unknown URLs answer HTTP 404.
    """

    def __init__(self, routes: Optional[Dict[str, Union[FakeResponse, Exception, tuple]]] = None):
        self.routes = routes or {}
        self.calls: List[Dict] = []

    async def get(self, url, params=None, headers=None):
        self.calls.append({"url": url, "params": params, "headers": headers})
        outcome = self.routes.get(url)
        if isinstance(outcome, tuple):
            delay_s, outcome = outcome
            await asyncio.sleep(delay_s)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            return FakeResponse(status=404)
        return outcome

    def called_urls(self) -> List[str]:
        return [call["url"] for call in self.calls]


def nominatim_ok(address: str = "Jalan Pahlawan, Surabaya, Jawa Timur, Indonesia") -> FakeResponse:
    return FakeResponse(200, {"display_name": address, "lat": str(BASE_LAT), "lon": str(BASE_LON)})


def photon_ok(**props) -> FakeResponse:
    props = props or {
        "name": "Tugu Pahlawan",
        "street": "Jalan Pahlawan",
        "city": "Surabaya",
        "state": "Jawa Timur",
        "country": "Indonesia",
    }
    return FakeResponse(200, {"type": "FeatureCollection", "features": [{"properties": props}]})


@pytest.fixture
def failing_session() -> FakeSession:
    """Every provider answers HTTP 503."""
    return FakeSession({
        NOMINATIM_REVERSE_URL: FakeResponse(status=503),
        PHOTON_REVERSE_URL: FakeResponse(status=503),
    })
