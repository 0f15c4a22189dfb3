"""
Device location sources.

The acquisition controller only needs one capability from the platform:
"give me one high-accuracy fix within this timeout". Sources raise
PositionUnavailableError on failure; they are never expected to support
cancellation.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Union

from geoloc_core.proto.geo_sample import GeoSample, create_sample

logger = logging.getLogger(__name__)


class PositionUnavailableError(Exception):
    """The device could not produce a position reading."""

    def __init__(self, reason: str, code: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.code = code


class DeviceLocationSource(Protocol):
    """One-shot position requests against the device location API."""

    async def request_position(
        self, timeout_ms: int, high_accuracy: bool = True
    ) -> GeoSample:
        """Return one reading or raise PositionUnavailableError."""
        ...


@dataclass
class ScriptedReading:
    """One step of a replay script: a sample or an error, after a delay."""

    outcome: Union[GeoSample, Exception]
    delay_ms: int = 0


class ReplayLocationSource:
    """
    Replays a fixed script of readings.
    
    Used by the CLI (readings recorded from a device) and by tests. Once
    the script is exhausted every further request fails.
    
    Usage:
        source = ReplayLocationSource.from_records([
            {"latitude": -7.25, "longitude": 112.76, "accuracy_m": 6},
            {"error": "POSITION_UNAVAILABLE"},
        ])
        sample = await source.request_position(timeout_ms=15000)
    """

    def __init__(self, script: Iterable[Union[ScriptedReading, GeoSample, Exception]]):
        self._script: List[ScriptedReading] = [
            step if isinstance(step, ScriptedReading) else ScriptedReading(step)
            for step in script
        ]
        self._index = 0
        self.requests: List[dict] = []

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "ReplayLocationSource":
        """
        Build from plain dicts (e.g. a JSON file).
        
        Each record is either ``{"latitude", "longitude", "accuracy_m"}``
        (optional ``captured_at_ms``) or ``{"error": reason}``; both accept
        an optional ``delay_ms``.
        
        Raises:
            ValueError: If a record is neither a reading nor an error
        """
        script = []
        for i, record in enumerate(records):
            delay_ms = int(record.get("delay_ms", 0))
            if "error" in record:
                outcome = PositionUnavailableError(str(record["error"]))
            else:
                try:
                    outcome = create_sample(
                        record["latitude"],
                        record["longitude"],
                        record.get("accuracy_m", record.get("accuracy")),
                        record.get("captured_at_ms"),
                    )
                except (KeyError, TypeError) as err:
                    raise ValueError(f"Invalid reading record #{i}: {record!r}") from err
            script.append(ScriptedReading(outcome, delay_ms))
        return cls(script)

    @property
    def remaining(self) -> int:
        """Number of scripted steps not yet replayed."""
        return len(self._script) - self._index

    async def request_position(
        self, timeout_ms: int, high_accuracy: bool = True
    ) -> GeoSample:
        """Replay the next scripted step."""
        self.requests.append({"timeout_ms": timeout_ms, "high_accuracy": high_accuracy})

        if self._index >= len(self._script):
            raise PositionUnavailableError("No more recorded readings", code="EXHAUSTED")

        step = self._script[self._index]
        self._index += 1

        if step.delay_ms > 0:
            await asyncio.sleep(step.delay_ms / 1000.0)

        if isinstance(step.outcome, Exception):
            raise step.outcome
        return step.outcome
