"""Fix source capability shared by gpsd and mock clients."""

from __future__ import annotations

from typing import AsyncGenerator, Callable, Protocol

from ...domain.models import Fix

FixCallback = Callable[[Fix], None]


class SourceUnavailable(Exception):
    """The fix source cannot produce readings at all."""


class FixSource(Protocol):
    """Anything that can deliver a stream of fixes."""

    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    def subscribe(self, callback: FixCallback) -> None: ...

    def unsubscribe(self, callback: FixCallback) -> None: ...

    def stream(self) -> AsyncGenerator[Fix, None]: ...
