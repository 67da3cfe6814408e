"""Observable, in-memory session state.

The view is never persisted. Every mutation is tagged with the generation it
belongs to; writes from a superseded generation are dropped so that a slow
task from an earlier submission cannot overwrite a newer one.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum

from palmleaf.database.models import ManuscriptRecord
from palmleaf.inference.models import ManuscriptAnalysis
from palmleaf.logging.logger import Log


class SessionEvent(Enum):
    STARTED = "started"
    CLEARED = "cleared"
    SELECTED = "selected"
    ORIGINAL = "original"
    RESTORED = "restored"
    ANALYSIS = "analysis"
    STATE = "state"
    COMMITTED = "committed"
    RECORDS = "records"


@dataclass(frozen=True)
class ProcessingState:
    """Per-task progress flags and the single current error message."""

    is_restoring: bool = False
    is_analyzing: bool = False
    error: str | None = None


@dataclass
class SessionView:
    original_image: str | None = None
    restored_image: str | None = None
    analysis: ManuscriptAnalysis | None = None
    processing: ProcessingState = field(default_factory=ProcessingState)
    records: list[ManuscriptRecord] = field(default_factory=list)
    committed_id: int | None = None
    generation: int = 0

    @property
    def displayed_image(self) -> str | None:
        """The image a redo acts on: the restored image if any, else the original."""
        return self.restored_image or self.original_image

    @property
    def is_loading(self) -> bool:
        return self.processing.is_restoring or self.processing.is_analyzing


Listener = Callable[[SessionEvent, SessionView], None]

_VIEW_FIELDS = frozenset({"original_image", "restored_image", "analysis", "committed_id"})


class Session:
    """Owns the SessionView and notifies subscribers of every change."""

    def __init__(self) -> None:
        self._view = SessionView()
        self._listeners: list[Listener] = []

    @property
    def view(self) -> SessionView:
        return self._view

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin(
        self,
        event: SessionEvent,
        *,
        processing: ProcessingState | None = None,
        **fields: object,
    ) -> int:
        """Start a new generation with a fresh view; the record list is kept."""
        self._check_fields(fields)
        self._view = SessionView(
            processing=processing or ProcessingState(),
            records=self._view.records,
            generation=self._view.generation + 1,
        )
        for name, value in fields.items():
            setattr(self._view, name, value)
        self._emit(event)
        return self._view.generation

    def is_current(self, generation: int) -> bool:
        return generation == self._view.generation

    def update(
        self,
        generation: int,
        event: SessionEvent,
        *,
        processing: Mapping[str, object] | None = None,
        **fields: object,
    ) -> bool:
        """Apply changes for a generation. Returns False if the generation is stale."""
        if not self.is_current(generation):
            Log.debug(f"Dropping {event.value} update from stale generation {generation}")
            return False
        self._check_fields(fields)
        for name, value in fields.items():
            setattr(self._view, name, value)
        if processing:
            self._view.processing = replace(self._view.processing, **processing)
        self._emit(event)
        return True

    def set_records(self, records: list[ManuscriptRecord]) -> None:
        self._view.records = records
        self._emit(SessionEvent.RECORDS)

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self._view)
            except Exception:
                Log.exception(f"Session listener failed on {event.value}")

    @staticmethod
    def _check_fields(fields: Mapping[str, object]) -> None:
        unknown = set(fields) - _VIEW_FIELDS
        if unknown:
            raise ValueError(f"Unknown session fields: {sorted(unknown)}")
