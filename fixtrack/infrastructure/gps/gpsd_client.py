"""Async gpsd fix source with auto-reconnect and graceful degradation."""

from __future__ import annotations

import asyncio
import json
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, AsyncIterator, Callable, Optional

from ...domain.models import Fix
from .source import FixCallback, SourceUnavailable

if TYPE_CHECKING:
    from ...config import GPSConfig

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class GPSState:
    """Internal GPS state tracking."""

    connected: bool = False
    fix_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    last_fix: Optional[datetime] = None
    satellites: int = 0


class AsyncGPSClient:
    """
    Async gpsd client with auto-reconnect.

    Features:
    - Non-blocking async connection
    - Automatic reconnection on disconnect
    - Callback-based fix updates
    - Raises SourceUnavailable once reconnect attempts are exhausted

    Usage:
        client = AsyncGPSClient(cfg.gps)

        async for fix in client.stream():
            print(f"Lat: {fix.latitude}, Lon: {fix.longitude}")
    """

    def __init__(
        self,
        config: GPSConfig | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        if config is None:
            from ...config import GPSConfig

            config = GPSConfig()
        self.config = config
        self._clock = clock
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._running = False
        self._fix: Optional[Fix] = None
        self._callbacks: list[FixCallback] = []
        self._state = GPSState()
        self._reconnect_attempts = 0

    @property
    def fix(self) -> Optional[Fix]:
        """Get last fix delivered."""
        return self._fix

    @property
    def is_connected(self) -> bool:
        """Check if connected to gpsd."""
        return self._state.connected

    @property
    def state(self) -> GPSState:
        """Get internal state for diagnostics."""
        return self._state

    def subscribe(self, callback: FixCallback) -> None:
        """Register callback for fix updates."""
        self._callbacks.append(callback)

    def unsubscribe(self, callback: FixCallback) -> None:
        """Remove fix callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def start(self) -> None:
        """Mark the source running and try an initial connection."""
        self._running = True
        if not self._reader:
            await self.connect()

    async def connect(self) -> bool:
        """
        Connect to gpsd daemon.

        Returns:
            True if connected successfully, False otherwise.
        """
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.config.host, self.config.port),
                timeout=self.config.timeout,
            )

            # Enable JSON streaming mode
            self._writer.write(b'?WATCH={"enable":true,"json":true}\n')
            await self._writer.drain()

            self._state.connected = True
            self._reconnect_attempts = 0
            logger.info("Connected to gpsd at %s:%d", self.config.host, self.config.port)
            return True

        except asyncio.TimeoutError:
            logger.warning("GPS connection timeout to %s:%d", self.config.host, self.config.port)
            self._state.error_count += 1
            return False

        except ConnectionRefusedError:
            logger.warning("GPS connection refused - is gpsd running?")
            self._state.error_count += 1
            return False

        except OSError as e:
            logger.warning("GPS connection failed: %s", e)
            self._state.error_count += 1
            return False

    async def disconnect(self) -> None:
        """Disconnect from gpsd gracefully."""
        if self._writer:
            try:
                self._writer.write(b'?WATCH={"enable":false}\n')
                await self._writer.drain()
                self._writer.close()
                await self._writer.wait_closed()
            except (OSError, ConnectionError) as e:
                logger.debug("GPS disconnect error ignored: %s", e)

        self._reader = None
        self._writer = None
        self._state.connected = False

    async def stream(self) -> AsyncIterator[Fix]:
        """
        Async generator that yields fixes.

        Handles reconnection automatically. Yields fixes as they arrive.

        Raises:
            SourceUnavailable: when max_reconnect_attempts is set and exhausted.
        """
        self._running = True

        while self._running:
            # Connect if needed
            if not self._reader:
                if not await self.connect():
                    self._reconnect_attempts += 1

                    # Check max attempts
                    if (
                        self.config.max_reconnect_attempts > 0
                        and self._reconnect_attempts >= self.config.max_reconnect_attempts
                    ):
                        logger.error("GPS max reconnect attempts reached, stopping")
                        self._running = False
                        raise SourceUnavailable(
                            f"gpsd unreachable at {self.config.host}:{self.config.port}"
                        )

                    await asyncio.sleep(self.config.reconnect_delay)
                    continue

            # Read and parse
            try:
                line = await asyncio.wait_for(
                    self._reader.readline(),  # type: ignore[union-attr]
                    timeout=self.config.timeout,
                )

                if not line:
                    raise ConnectionError("GPS connection closed by server")

                data = json.loads(line.decode("utf-8"))

                # Handle TPV (Time-Position-Velocity) messages
                if data.get("class") == "TPV":
                    fix = self._parse_tpv(data)
                    if fix is not None:
                        self._deliver(fix)
                        yield fix
                    else:
                        self._state.skipped_count += 1

                # Handle SKY messages (satellite info)
                elif data.get("class") == "SKY":
                    self._state.satellites = len(data.get("satellites", []))

            except asyncio.TimeoutError:
                # Timeout is OK - just means no new data
                logger.debug("GPS read timeout, connection still alive")

            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("GPS JSON parse error: %s", e)

            except (OSError, ConnectionError) as e:
                logger.warning("GPS stream error: %s, reconnecting...", e)
                self._state.error_count += 1
                await self.disconnect()
                await asyncio.sleep(self.config.reconnect_delay)

    def _deliver(self, fix: Fix) -> None:
        self._fix = fix
        self._state.fix_count += 1
        self._state.last_fix = datetime.now()

        # Notify callbacks
        for cb in self._callbacks:
            try:
                cb(fix)
            except Exception as e:
                logger.error("GPS callback error: %s", e)

    def _parse_tpv(self, data: dict) -> Optional[Fix]:
        """
        Parse TPV (Time-Position-Velocity) message from gpsd.

        ``eph`` is passed through unscaled as the accuracy radius. gpsd
        reports it at roughly 95% confidence, wider than a 68% radius, so
        the accuracy gate is somewhat stricter on gpsd fixes than on sources
        that report a 68% radius.

        Args:
            data: JSON dict from gpsd TPV message

        Returns:
            Fix if a 2D/3D position is present, None otherwise
        """
        try:
            # Must have lat/lon
            if "lat" not in data or "lon" not in data:
                return None

            # Mode: 0=unknown, 1=no fix, 2=2D, 3=3D
            if data.get("mode", 0) < 2:
                return None

            accuracy = data.get("eph")
            speed = data.get("speed")

            # Stamped on arrival, like a browser geolocation callback
            return Fix(
                latitude=float(data["lat"]),
                longitude=float(data["lon"]),
                accuracy=float(accuracy) if accuracy is not None else None,
                speed=float(speed) if speed is not None else None,
                timestamp=self._clock(),
            )

        except (KeyError, ValueError, TypeError) as e:
            # pydantic.ValidationError is a ValueError
            logger.error("TPV parse error: %s - data: %s", e, data)
            return None

    async def stop(self) -> None:
        """Stop streaming and disconnect."""
        self._running = False
        await self.disconnect()


class MockGPSClient(AsyncGPSClient):
    """
    Mock GPS client for testing and simulation.

    Generates fake fixes walking a circle, with synthetic timestamps
    spaced by ``interval`` seconds.
    """

    def __init__(
        self,
        start_lat: float = 41.0082,  # Istanbul
        start_lon: float = 28.9784,
        speed_mps: float | None = 1.0,
        accuracy: float | None = 5.0,
        interval: float = 1.0,
        start_ms: int | None = None,
    ) -> None:
        super().__init__()
        self._start_lat = start_lat
        self._start_lon = start_lon
        self._speed = speed_mps
        self._accuracy = accuracy
        self._interval = interval
        self._start_ms = start_ms if start_ms is not None else _now_ms()
        self._step = 0

    async def connect(self) -> bool:
        """Mock always connects."""
        self._state.connected = True
        logger.info("Mock GPS connected (simulated)")
        return True

    async def disconnect(self) -> None:
        self._state.connected = False

    async def stream(self) -> AsyncIterator[Fix]:
        """Generate fake fixes in a walking pattern."""
        self._running = True
        await self.connect()

        while self._running:
            # Walk in a circle
            angle = math.radians(self._step * 5)
            radius = 0.001  # ~111 meters

            fix = Fix(
                latitude=self._start_lat + radius * math.sin(angle),
                longitude=self._start_lon + radius * math.cos(angle),
                accuracy=self._accuracy,
                speed=self._speed,
                timestamp=self._start_ms + round(self._step * self._interval * 1000),
            )
            self._step += 1

            self._deliver(fix)
            yield fix
            await asyncio.sleep(self._interval)
