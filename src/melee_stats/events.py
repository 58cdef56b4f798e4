"""Progress and match-ticker events emitted while a folder is analyzed.

The analyzer only knows the EventSink interface; how events reach a UI (a
terminal progress line, a websocket, nothing at all) is up to the sink.
"""

from dataclasses import dataclass
from typing import Callable, Protocol


@dataclass(frozen=True)
class ProgressEvent:
    processed: int
    total: int


@dataclass(frozen=True)
class CancelledEvent:
    cancelled: bool = True


@dataclass(frozen=True)
class MatchEvent:
    """A qualifying match, from self's point of view."""

    self_name: str
    opponent: str
    stage: str
    self_won: bool


class EventSink(Protocol):
    def progress(self, event: ProgressEvent) -> None: ...

    def match(self, event: MatchEvent) -> None: ...

    def cancelled(self, event: CancelledEvent) -> None: ...


class NullSink:
    """Discards every event."""

    def progress(self, event: ProgressEvent) -> None:
        pass

    def match(self, event: MatchEvent) -> None:
        pass

    def cancelled(self, event: CancelledEvent) -> None:
        pass


class CallbackSink:
    """Adapt plain callables to the EventSink interface. Missing ones are no-ops."""

    def __init__(
        self,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        on_match: Callable[[MatchEvent], None] | None = None,
        on_cancelled: Callable[[CancelledEvent], None] | None = None,
    ):
        self._on_progress = on_progress
        self._on_match = on_match
        self._on_cancelled = on_cancelled

    def progress(self, event: ProgressEvent) -> None:
        if self._on_progress:
            self._on_progress(event)

    def match(self, event: MatchEvent) -> None:
        if self._on_match:
            self._on_match(event)

    def cancelled(self, event: CancelledEvent) -> None:
        if self._on_cancelled:
            self._on_cancelled(event)
