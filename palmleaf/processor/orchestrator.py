import asyncio
import time
from collections.abc import Callable
from pathlib import Path

from palmleaf.config.settings import Settings
from palmleaf.database.models import ManuscriptRecord, NewManuscriptRecord
from palmleaf.database.repositories.manuscript_repository import ManuscriptRepository
from palmleaf.images.encoding import encode_image, parse_encoded_image
from palmleaf.images.exceptions import InvalidImageEncodingError
from palmleaf.inference.base import BaseAnalyzer, BaseRestorer
from palmleaf.inference.client_base import BaseInferenceClient
from palmleaf.inference.factory import InferenceClientFactory
from palmleaf.inference.models import ManuscriptAnalysis
from palmleaf.logging.logger import Log
from palmleaf.processor.archive import write_archive
from palmleaf.processor.exceptions import FileDecodeError, StoreError
from palmleaf.processor.file_loader import FileLoader
from palmleaf.processor.results import Failure, Success, TaskResult, value_or_none
from palmleaf.processor.state import Listener, ProcessingState, Session, SessionEvent

ANALYSIS_FAILED_MESSAGE = "Failed to analyze text."
FILE_READ_FAILED_MESSAGE = "Error reading file."
STORE_FAILED_MESSAGE = "Failed to save manuscript."


def now_millis() -> int:
    return int(time.time() * 1000)


class ManuscriptOrchestrator:
    """Runs restoration and analysis for one submitted image and commits the outcome.

    Both tasks are dispatched together. Each one reports into the session as
    soon as it settles, and a failure in one never cancels the other. Once
    both have settled, exactly one record is written to the repository,
    whatever the individual outcomes were.
    """

    def __init__(
        self,
        *,
        restorer: BaseRestorer,
        analyzer: BaseAnalyzer,
        repository: ManuscriptRepository,
        session: Session | None = None,
        file_loader: FileLoader | None = None,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self._restorer = restorer
        self._analyzer = analyzer
        self._repository = repository
        self._session = session if session is not None else Session()
        self._file_loader = file_loader if file_loader is not None else FileLoader()
        self._clock = clock

    @property
    def session(self) -> Session:
        return self._session

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._session.subscribe(listener)

    async def submit_file(self, path: Path) -> int:
        """Read an image file and submit it.

        Raises:
            FileDecodeError: if the file cannot be read; no task is started.
            StoreError: if the commit fails.
        """
        generation = self._session.begin(
            SessionEvent.STARTED,
            processing=ProcessingState(is_restoring=True, is_analyzing=True),
        )
        try:
            image_bytes, mime_type = await asyncio.to_thread(self._file_loader.load, path)
        except FileDecodeError as exc:
            self._fail_decode(generation, exc)
            raise
        return await self._dispatch(generation, image_bytes, mime_type)

    async def submit(self, image_bytes: bytes, mime_type: str) -> int:
        """Process already-decoded image bytes and return the committed record id.

        Raises:
            ValueError: if the bytes or the mime type are empty.
            FileDecodeError: if the mime type is malformed; no task is started.
            StoreError: if the commit fails.
        """
        if not image_bytes:
            raise ValueError("image_bytes must not be empty")
        if not mime_type:
            raise ValueError("mime_type must not be empty")
        generation = self._session.begin(
            SessionEvent.STARTED,
            processing=ProcessingState(is_restoring=True, is_analyzing=True),
        )
        return await self._dispatch(generation, image_bytes, mime_type)

    def start_new(self) -> None:
        """Clear the displayed manuscript; in-flight tasks can no longer touch the view."""
        self._session.begin(SessionEvent.CLEARED)

    def select_record(self, record: ManuscriptRecord) -> None:
        """Display a stored record."""
        self._session.begin(
            SessionEvent.SELECTED,
            original_image=record.original_image,
            restored_image=record.restored_image,
            analysis=record.analysis,
            committed_id=record.id,
        )

    async def open_record(self, record_id: int) -> ManuscriptRecord | None:
        """Load a stored record by id and display it."""
        record = await asyncio.to_thread(self._repository.find_by_id, record_id)
        if record is None:
            Log.warning(f"Manuscript {record_id} not found")
            return None
        self.select_record(record)
        return record

    async def refresh_records(self) -> list[ManuscriptRecord]:
        records = await asyncio.to_thread(self._repository.list_all)
        self._session.set_records(records)
        return records

    async def delete_record(self, record_id: int) -> bool:
        """Delete a stored record and refresh the record list."""
        deleted = await asyncio.to_thread(self._repository.delete, record_id)
        if deleted:
            Log.info(f"Deleted manuscript {record_id}")
        else:
            Log.warning(f"Manuscript {record_id} not found, nothing deleted")
        await self.refresh_records()
        return deleted

    async def export_record(self, record_id: int, destination: Path) -> list[str] | None:
        """Write a stored record's zip archive; returns the member names, or None if missing.

        Raises:
            ArchiveError: if the archive cannot be written.
            InvalidImageEncodingError: if a stored image is corrupt.
        """
        record = await asyncio.to_thread(self._repository.find_by_id, record_id)
        if record is None:
            Log.warning(f"Manuscript {record_id} not found, nothing exported")
            return None
        members = await asyncio.to_thread(write_archive, record, destination)
        Log.info(f"Exported manuscript {record_id}", path=destination, members=len(members))
        return members

    async def _dispatch(self, generation: int, image_bytes: bytes, mime_type: str) -> int:
        try:
            original_image = encode_image(image_bytes, mime_type)
        except InvalidImageEncodingError as exc:
            self._fail_decode(generation, exc)
            raise FileDecodeError(str(exc)) from exc

        payload = parse_encoded_image(original_image).payload
        self._session.update(generation, SessionEvent.ORIGINAL, original_image=original_image)
        Log.info(
            "Dispatching restoration and analysis", submission=generation, mime_type=mime_type
        )

        outcomes = await asyncio.gather(
            self._run_restoration(generation, payload, mime_type),
            self._run_analysis(generation, payload, mime_type),
            return_exceptions=True,
        )
        restoration, analysis = (self._settled(outcome) for outcome in outcomes)

        record = NewManuscriptRecord(
            timestamp=self._clock(),
            original_image=original_image,
            restored_image=value_or_none(restoration),
            analysis=value_or_none(analysis),
        )
        return await self._commit(generation, record)

    async def _run_restoration(
        self, generation: int, payload: str, mime_type: str
    ) -> TaskResult[str | None]:
        try:
            restored = await self._restorer.restore(payload, mime_type)
        except Exception as exc:
            Log.error(f"Restoration failed: {exc}", submission=generation)
            self._session.update(
                generation, SessionEvent.STATE, processing={"is_restoring": False}
            )
            return Failure(str(exc))

        self._session.update(
            generation,
            SessionEvent.RESTORED,
            restored_image=restored,
            processing={"is_restoring": False},
        )
        return Success(restored)

    async def _run_analysis(
        self, generation: int, payload: str, mime_type: str
    ) -> TaskResult[ManuscriptAnalysis]:
        try:
            analysis = await self._analyzer.analyze(payload, mime_type)
        except Exception as exc:
            Log.error(f"Analysis failed: {exc}", submission=generation)
            self._session.update(
                generation,
                SessionEvent.STATE,
                processing={"is_analyzing": False, "error": ANALYSIS_FAILED_MESSAGE},
            )
            return Failure(str(exc))

        self._session.update(
            generation,
            SessionEvent.ANALYSIS,
            analysis=analysis,
            processing={"is_analyzing": False},
        )
        return Success(analysis)

    async def _commit(self, generation: int, record: NewManuscriptRecord) -> int:
        try:
            record_id = await asyncio.to_thread(self._repository.create, record)
        except StoreError:
            Log.exception("Commit failed", submission=generation)
            self._session.update(
                generation, SessionEvent.STATE, processing={"error": STORE_FAILED_MESSAGE}
            )
            raise

        Log.info(
            f"Committed manuscript {record_id}",
            submission=generation,
            restored=record.restored_image is not None,
            analyzed=record.analysis is not None,
        )
        if self._session.update(generation, SessionEvent.COMMITTED, committed_id=record_id):
            await self.refresh_records()
        return record_id

    def _fail_decode(self, generation: int, exc: Exception) -> None:
        Log.error(f"File processing error: {exc}", submission=generation)
        self._session.update(
            generation,
            SessionEvent.STATE,
            processing={
                "is_restoring": False,
                "is_analyzing": False,
                "error": FILE_READ_FAILED_MESSAGE,
            },
        )

    @staticmethod
    def _settled(outcome: object) -> TaskResult[object]:
        if isinstance(outcome, (Success, Failure)):
            return outcome
        if isinstance(outcome, BaseException):
            return Failure(str(outcome))
        return Failure(f"Unexpected task outcome: {outcome!r}")


def build_orchestrator(
    settings: Settings,
    session: Session | None = None,
    client: BaseInferenceClient | None = None,
) -> ManuscriptOrchestrator:
    """Build a ManuscriptOrchestrator with all required adapters.

    Pass ``client`` to share one provider client with a RedoController; the
    caller then owns closing it.
    """
    if client is None:
        client = InferenceClientFactory.create_client(settings)
    return ManuscriptOrchestrator(
        restorer=InferenceClientFactory.create_restorer(settings, client),
        analyzer=InferenceClientFactory.create_analyzer(settings, client),
        repository=ManuscriptRepository(),
        session=session,
    )
