"""AI-powered manuscript image restoration."""

import base64
from pathlib import Path

from palmleaf.images.encoding import encode_payload
from palmleaf.inference.base import BaseRestorer
from palmleaf.inference.client_base import BaseInferenceClient
from palmleaf.inference.exceptions import InferenceError
from palmleaf.inference.prompt_loader import load_prompt_template
from palmleaf.logging.logger import Log

RESTORED_MIME_TYPE = "image/png"


class Restorer(BaseRestorer):
    """Restores manuscript photos, or applies a free-text edit, through an image model."""

    def __init__(
        self,
        *,
        client: BaseInferenceClient,
        model: str,
        restoration_prompt_path: Path | None = None,
        edit_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._restoration_template = load_prompt_template(
            "restoration_prompt.txt", restoration_prompt_path
        )
        self._edit_template = load_prompt_template("edit_prompt.txt", edit_prompt_path)

    async def restore(
        self,
        payload: str,
        mime_type: str,
        *,
        variation: int | None = None,
        instruction: str | None = None,
    ) -> str | None:
        prompt = self._build_prompt(variation=variation, instruction=instruction)
        Log.debug(f"Restoration prompt:\n{prompt}")

        try:
            image_bytes = base64.b64decode(payload, validate=True)
        except ValueError as exc:
            raise InferenceError(f"Restoration input is not valid base64: {exc}") from exc

        restored = await self._client.edit_image(
            model=self._model,
            image_bytes=image_bytes,
            mime_type=mime_type or "image/jpeg",
            prompt=prompt,
        )
        if not restored:
            Log.warning("Restoration service returned no image")
            return None

        Log.info(f"Restoration complete: {len(restored)} base64 chars")
        return encode_payload(restored, RESTORED_MIME_TYPE)

    def _build_prompt(self, *, variation: int | None, instruction: str | None) -> str:
        if instruction is not None:
            return self._edit_template.format(instruction=instruction.strip())
        variation_note = (
            f" Generate variation #{variation} of the restoration." if variation else ""
        )
        return self._restoration_template.format(variation_note=variation_note)
