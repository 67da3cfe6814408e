"""AI-powered manuscript transcription, translation and source identification."""

import json
from pathlib import Path

from palmleaf.images.encoding import encode_payload
from palmleaf.inference.base import BaseAnalyzer
from palmleaf.inference.client_base import BaseInferenceClient
from palmleaf.inference.exceptions import InferenceError
from palmleaf.inference.models import ManuscriptAnalysis
from palmleaf.inference.prompt_loader import load_json_schema, load_prompt_template
from palmleaf.inference.validator import validate_and_build
from palmleaf.logging.logger import Log


class Analyzer(BaseAnalyzer):
    """Reads the manuscript text with a vision model and returns structured analysis."""

    def __init__(
        self,
        *,
        client: BaseInferenceClient,
        model: str,
        temperature: float = 0.2,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._prompt_template = load_prompt_template("analysis_prompt.txt", prompt_template_path)
        self._system_prompt = load_prompt_template(
            "analysis_system_prompt.txt", system_prompt_path
        ).strip()
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    async def analyze(self, payload: str, mime_type: str) -> ManuscriptAnalysis:
        prompt = self._prompt_template.format(json_schema=self._json_schema)
        Log.debug(f"Analysis prompt:\n{prompt}")

        raw_response = await self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            image_url=encode_payload(payload, mime_type or "image/jpeg"),
            json_schema=self._json_schema_dict,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        result = validate_and_build(self._parse_json(raw_response))
        Log.info(
            f"Analysis complete: {len(result.transcription)} transcribed chars, "
            f"source '{result.source_info.detected_source}'"
        )
        return result

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        if not cleaned:
            raise InferenceError("No text response from model")
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise InferenceError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise InferenceError("JSON response must be an object")
        return parsed
