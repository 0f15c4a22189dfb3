"""Reverse geocoding with an ordered provider chain."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiohttp

from geoloc_core.metrics import get_metrics

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ISP-Management-System/1.0"
DEFAULT_TIMEOUT_S = 10.0

NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
PHOTON_REVERSE_URL = "https://photon.komoot.io/reverse"


class GeocodingProviderError(Exception):
    """A single provider call failed (network, HTTP status, bad body)."""


class GeocodeProvider:
    """
    One reverse geocoding backend.
    
    Subclasses describe how to build the GET request and how to pull an
    address out of the JSON body. Providers hold no state.
    """

    name = ""
    url = ""

    def build_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        raise NotImplementedError

    def build_request(self, latitude: float, longitude: float) -> Tuple[str, Dict[str, Any]]:
        """Return (url, query params) for a GET request."""
        return self.url, self.build_params(latitude, longitude)

    def parse_response(self, body: Any) -> Optional[str]:
        """Extract an address from the decoded JSON body, or None."""
        raise NotImplementedError


class NominatimProvider(GeocodeProvider):
    """OpenStreetMap Nominatim; the address is the ``display_name`` field."""

    name = "Nominatim"
    url = NOMINATIM_REVERSE_URL

    def __init__(self, language: str = 'id', zoom: int = 18):
        self.language = language
        self.zoom = zoom

    def build_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        return {
            'format': 'json',
            'lat': latitude,
            'lon': longitude,
            'addressdetails': 1,
            'accept-language': self.language,
            'zoom': self.zoom,
        }

    def parse_response(self, body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        return body.get('display_name')


class PhotonProvider(GeocodeProvider):
    """Komoot Photon; joins the first feature's name/street/city/state/country."""

    name = "Photon"
    url = PHOTON_REVERSE_URL

    ADDRESS_PARTS = ('name', 'street', 'city', 'state', 'country')

    def __init__(self, language: str = 'id'):
        self.language = language

    def build_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        return {'lat': latitude, 'lon': longitude, 'lang': self.language}

    def parse_response(self, body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        features = body.get('features') or []
        if not features:
            return None
        props = features[0].get('properties')
        if not props:
            return None
        return " ".join(str(props.get(part) or "") for part in self.ADDRESS_PARTS).strip()


def default_providers() -> List[GeocodeProvider]:
    """Nominatim first, Photon as fallback."""
    return [NominatimProvider(), PhotonProvider()]


def format_coordinate_fallback(latitude: float, longitude: float) -> str:
    """Address used when no provider produced one."""
    return f"Koordinat: {latitude:.6f}, {longitude:.6f}"


class ReverseGeocoder:
    """Resolve a coordinate to an address; never raises."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        providers: Optional[Sequence[GeocodeProvider]] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        """
        Initialize resolver.
        
        Args:
            session: Shared aiohttp session (one is opened per lookup if None)
            providers: Providers in order of preference (defaults if None)
            user_agent: Client identifier sent with every request
            timeout_s: Per-provider request timeout (s)
        """
        self._session = session
        self.providers = list(default_providers() if providers is None else providers)
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.metrics = get_metrics()

    async def resolve_address(self, latitude: float, longitude: float) -> str:
        """Return the first non-empty provider address, else the coordinate string."""
        if not self.providers:
            return self._fallback(latitude, longitude)

        if self._session is not None:
            return await self._resolve_with(self._session, latitude, longitude)

        try:
            async with aiohttp.ClientSession() as session:
                return await self._resolve_with(session, latitude, longitude)
        except aiohttp.ClientError as err:
            logger.warning("Could not open HTTP session for reverse geocoding: %s", err)
            return self._fallback(latitude, longitude)

    async def _resolve_with(
        self, session: aiohttp.ClientSession, latitude: float, longitude: float
    ) -> str:
        for provider in self.providers:
            logger.debug("Trying %s reverse geocoding", provider.name)
            try:
                address = await self._query_provider(session, provider, latitude, longitude)
            except GeocodingProviderError as err:
                logger.warning("%s reverse geocoding failed: %s", provider.name, err)
                self.metrics.increment_drop('geocode_failed')
                continue

            if address:
                logger.debug("%s resolved address: %s", provider.name, address)
                self.metrics.increment('geocode_success')
                return address

            logger.warning("%s returned no address", provider.name)
            self.metrics.increment_drop('geocode_failed')

        return self._fallback(latitude, longitude)

    async def _query_provider(
        self,
        session: aiohttp.ClientSession,
        provider: GeocodeProvider,
        latitude: float,
        longitude: float,
    ) -> Optional[str]:
        """Run one provider request; raise GeocodingProviderError on any failure."""
        url, params = provider.build_request(latitude, longitude)
        headers = {'User-Agent': self.user_agent, 'Accept': 'application/json'}

        try:
            async with asyncio.timeout(self.timeout_s):
                resp = await session.get(url, params=params, headers=headers)
                if not 200 <= resp.status < 300:
                    resp.release()
                    raise GeocodingProviderError(f"HTTP {resp.status}")
                data = await resp.json(content_type=None)
        except (TimeoutError, aiohttp.ClientError) as err:
            raise GeocodingProviderError(f"Error communicating with {provider.name}: {err}") from err
        except ValueError as err:
            raise GeocodingProviderError(f"Invalid JSON from {provider.name}: {err}") from err

        try:
            address = provider.parse_response(data)
        except (AttributeError, IndexError, KeyError, TypeError) as err:
            raise GeocodingProviderError(f"Unexpected {provider.name} response: {err}") from err

        if address is None:
            return None
        return str(address).strip() or None

    def _fallback(self, latitude: float, longitude: float) -> str:
        self.metrics.increment('geocode_fallback')
        return format_coordinate_fallback(latitude, longitude)
