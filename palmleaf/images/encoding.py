"""Self-describing image strings (`data:image/jpeg;base64,...`)."""

import base64
import binascii
import re
from dataclasses import dataclass

from palmleaf.images.exceptions import InvalidImageEncodingError

_ENCODED_IMAGE_RE = re.compile(
    r"^data:(?P<mime_type>[a-zA-Z0-9]+/[a-zA-Z0-9.+-]+);base64,(?P<payload>[A-Za-z0-9+/]+={0,2})$"
)


@dataclass(frozen=True)
class EncodedImage:
    """An image split into its mime tag and base64 payload."""

    mime_type: str
    payload: str

    def to_string(self) -> str:
        return f"data:{self.mime_type};base64,{self.payload}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.payload)


def encode_image(image_bytes: bytes, mime_type: str) -> str:
    """Build the encoded string for raw image bytes.

    Raises:
        InvalidImageEncodingError: if the bytes are empty or the mime type is malformed.
    """
    if not image_bytes:
        raise InvalidImageEncodingError("Cannot encode an empty image")
    encoded = f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"
    parse_encoded_image(encoded)
    return encoded


def encode_payload(payload: str, mime_type: str) -> str:
    """Tag an already base64-encoded payload with its mime type."""
    return EncodedImage(mime_type=mime_type, payload=payload).to_string()


def parse_encoded_image(value: str) -> EncodedImage:
    """Split an encoded image string into mime type and payload.

    Raises:
        InvalidImageEncodingError: if the string does not match the encoded-image shape.
    """
    if not isinstance(value, str):
        raise InvalidImageEncodingError("Encoded image must be a string")
    match = _ENCODED_IMAGE_RE.match(value)
    if match is None:
        raise InvalidImageEncodingError("Invalid image data")
    payload = match.group("payload")
    try:
        base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise InvalidImageEncodingError(f"Invalid base64 payload: {exc}") from exc
    return EncodedImage(mime_type=match.group("mime_type"), payload=payload)
