"""
Tracking Session
================

Wires a fix source to a track accumulator and keeps the state a
presentation layer reads after each fix: tracking flag, current position,
last ingest result and a user-visible error message.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import Optional

from ...domain.models import Fix, IngestResult, TrackSnapshot
from ...infrastructure.gps.distance import TrackAccumulator
from ...infrastructure.gps.source import FixSource, SourceUnavailable

logger = logging.getLogger(__name__)


class TrackingSession:
    """One start/stop tracking session around a single accumulator."""

    def __init__(self, accumulator: TrackAccumulator | None = None) -> None:
        self.accumulator = accumulator or TrackAccumulator()
        self.tracking = False
        self.error: Optional[str] = None
        self.last_result: Optional[IngestResult] = None
        self.rejected_count = 0
        self._source: Optional[FixSource] = None

    @property
    def position(self) -> Optional[Fix]:
        """Current position: the last accepted fix."""
        return self.accumulator.last_accepted

    def start(self) -> None:
        """Begin a fresh track."""
        self.tracking = True
        self.accumulator.reset()
        self.error = None
        self.last_result = None
        self.rejected_count = 0
        logger.info("Tracking started")

    async def stop(self) -> None:
        """Stop tracking; accumulated totals remain readable."""
        if self._source is not None:
            self._source.unsubscribe(self.handle_fix)
            await self._source.stop()
            self._source = None
        if self.tracking:
            logger.info(
                "Tracking stopped: %.1fm over %d points",
                self.accumulator.total_meters,
                self.accumulator.points_count,
            )
        self.tracking = False

    def handle_fix(self, fix: Fix) -> Optional[IngestResult]:
        """Ingest a fix while tracking; ignored otherwise."""
        if not self.tracking:
            return None
        result = self.accumulator.ingest(fix)
        self.last_result = result
        if result.rejected:
            self.rejected_count += 1
        return result

    async def run(self, source: FixSource, max_fixes: int | None = None) -> TrackSnapshot:
        """
        Track until the source ends, ``max_fixes`` fixes arrive or ``stop()`` is called.

        Fixes are delivered through the source's subscription, so ingestion
        happens on this task in arrival order.

        Returns:
            Snapshot of the totals when the session ended.
        """
        self.start()
        self._source = source
        source.subscribe(self.handle_fix)
        received = 0
        try:
            await source.start()
            async with aclosing(source.stream()) as fixes:
                async for _fix in fixes:
                    received += 1
                    if not self.tracking or (max_fixes is not None and received >= max_fixes):
                        break
        except SourceUnavailable as exc:
            self.error = f"Error: {exc}"
            logger.error("Fix source unavailable: %s", exc)
        finally:
            await self.stop()
        return self.snapshot()

    def snapshot(self) -> TrackSnapshot:
        return self.accumulator.snapshot()
