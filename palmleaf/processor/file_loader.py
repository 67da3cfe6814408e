import mimetypes
from pathlib import Path

from palmleaf.processor.exceptions import FileDecodeError


class FileLoader:
    """Reads an image file from disk and determines its mime type."""

    def load(self, path: Path) -> tuple[bytes, str]:
        """Read image bytes and guess the mime type from the file name.

        Raises:
            FileDecodeError: if the file is missing, unreadable, empty or not an image.
        """
        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type is None or not mime_type.startswith("image/"):
            raise FileDecodeError(f"Unsupported file type: {path.name}")
        try:
            image_bytes = path.read_bytes()
        except OSError as exc:
            raise FileDecodeError(f"Failed to read {path}: {exc}") from exc
        if not image_bytes:
            raise FileDecodeError(f"File is empty: {path}")
        return image_bytes, mime_type
