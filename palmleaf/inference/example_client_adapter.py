"""Example inference client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseInferenceClient and register the provider in InferenceClientFactory.
"""

import base64
import json
from typing import ClassVar

from palmleaf.inference.client_base import BaseInferenceClient


class ExampleClientAdapter(BaseInferenceClient):
    """Example adapter that echoes the input image and returns a fixed analysis JSON.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_ANALYSIS: ClassVar[dict[str, object]] = {
        "rawOCR": "",
        "transcription": "",
        "translation": "",
        "sourceInfo": {
            "detectedSource": "Unidentified",
            "section": "",
            "briefExplanation": "Example adapter does not analyze images.",
        },
        "regionInfo": None,
    }

    def __init__(self) -> None:
        pass

    async def edit_image(
        self,
        *,
        model: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
    ) -> str | None:
        _ = model, mime_type, prompt
        return base64.b64encode(image_bytes).decode("ascii")

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image_url: str,
        json_schema: dict[str, object],
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, image_url, json_schema
        return json.dumps(self.DEFAULT_ANALYSIS)
