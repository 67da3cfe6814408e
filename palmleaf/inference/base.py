from abc import ABC, abstractmethod

from palmleaf.inference.models import ManuscriptAnalysis


class BaseRestorer(ABC):
    """Contract for the restoration service."""

    @abstractmethod
    async def restore(
        self,
        payload: str,
        mime_type: str,
        *,
        variation: int | None = None,
        instruction: str | None = None,
    ) -> str | None:
        """Restore or edit a manuscript image.

        Args:
            payload: Base64 image payload without the mime prefix.
            mime_type: Mime type of the payload.
            variation: Opaque hint that biases a retry toward a different output.
            instruction: Free-text edit instruction; replaces the default restoration brief.

        Returns:
            Encoded image string, or None when the service produced no image.

        Raises:
            InferenceError: on any service failure.
        """


class BaseAnalyzer(ABC):
    """Contract for the analysis service."""

    @abstractmethod
    async def analyze(self, payload: str, mime_type: str) -> ManuscriptAnalysis:
        """Transcribe, translate and identify the manuscript text.

        Raises:
            InferenceError: on any failure.
        """
