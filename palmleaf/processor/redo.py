import random

from palmleaf.config.settings import Settings
from palmleaf.images.encoding import EncodedImage, parse_encoded_image
from palmleaf.images.exceptions import InvalidImageEncodingError
from palmleaf.inference.base import BaseRestorer
from palmleaf.inference.client_base import BaseInferenceClient
from palmleaf.inference.factory import InferenceClientFactory
from palmleaf.logging.logger import Log
from palmleaf.processor.state import Session, SessionEvent

EDIT_FAILED_MESSAGE = "Failed to edit image."


class RedoController:
    """Re-runs restoration on the displayed image without touching stored records.

    Only the session view changes. The committed record keeps the restored
    image it was saved with.

    A redo is refused while a submission that has not committed yet is still
    running, so the submission keeps sole control of the progress flags.
    """

    def __init__(
        self,
        *,
        restorer: BaseRestorer,
        session: Session,
        variation_max: int = 1000,
        rng: random.Random | None = None,
    ) -> None:
        if variation_max < 1:
            raise ValueError("variation_max must be at least 1")
        self._restorer = restorer
        self._session = session
        self._variation_max = variation_max
        self._rng = rng if rng is not None else random.Random()

    async def retry(self, displayed_image: str | None = None) -> str | None:
        """Ask for a different restoration of the displayed image.

        Failures keep the previous image and are only logged.

        Raises:
            InvalidImageEncodingError: if the displayed image cannot be parsed.
        """
        prepared = self._prepare(displayed_image)
        if prepared is None:
            return None
        generation, image = prepared
        variation = self._rng.randint(1, self._variation_max)
        Log.info("Retrying restoration", variation=variation, generation=generation)

        self._session.update(generation, SessionEvent.STATE, processing={"is_restoring": True})
        try:
            restored = await self._restorer.restore(
                image.payload, image.mime_type, variation=variation
            )
        except Exception as exc:
            Log.error(f"Retry failed: {exc}")
            restored = None

        if restored is None:
            Log.warning("Retry returned no image, keeping previous image")
            self._session.update(
                generation, SessionEvent.STATE, processing={"is_restoring": False}
            )
            return None
        self._session.update(
            generation,
            SessionEvent.RESTORED,
            restored_image=restored,
            processing={"is_restoring": False},
        )
        return restored

    async def edit(self, displayed_image: str | None, instruction: str) -> str | None:
        """Apply a free-text edit instruction to the displayed image.

        Failures keep the previous image and set the session error.

        Raises:
            ValueError: if the instruction is blank.
            InvalidImageEncodingError: if the displayed image cannot be parsed.
        """
        if not instruction or not instruction.strip():
            raise ValueError("instruction must not be blank")
        prepared = self._prepare(displayed_image)
        if prepared is None:
            return None
        generation, image = prepared
        Log.info(f"Editing image: {instruction.strip()!r}")

        self._session.update(
            generation,
            SessionEvent.STATE,
            processing={"is_restoring": True, "error": None},
        )
        try:
            edited = await self._restorer.restore(
                image.payload, image.mime_type, instruction=instruction
            )
        except Exception as exc:
            Log.error(f"Edit failed: {exc}")
            edited = None

        if edited is None:
            self._session.update(
                generation,
                SessionEvent.STATE,
                processing={"is_restoring": False, "error": EDIT_FAILED_MESSAGE},
            )
            return None
        self._session.update(
            generation,
            SessionEvent.RESTORED,
            restored_image=edited,
            processing={"is_restoring": False},
        )
        return edited

    def _prepare(self, displayed_image: str | None) -> tuple[int, EncodedImage] | None:
        view = self._session.view
        source = displayed_image if displayed_image is not None else view.displayed_image
        if source is None:
            Log.warning("No image is displayed, nothing to redo")
            return None
        if view.is_loading and view.committed_id is None:
            Log.warning("Submission still in progress, redo refused", generation=view.generation)
            return None
        try:
            image = parse_encoded_image(source)
        except InvalidImageEncodingError as exc:
            Log.error(f"Cannot redo restoration: {exc}")
            raise
        return view.generation, image


def build_redo_controller(
    settings: Settings,
    session: Session,
    client: BaseInferenceClient | None = None,
) -> RedoController:
    """Build a RedoController sharing the given session and, if given, client."""
    return RedoController(
        restorer=InferenceClientFactory.create_restorer(settings, client),
        session=session,
        variation_max=settings.retry_variation_max,
    )
