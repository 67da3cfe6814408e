"""Tests for prompt template and JSON schema loading."""

import json
from pathlib import Path

import pytest

from palmleaf.inference.exceptions import InferenceError
from palmleaf.inference.prompt_loader import load_json_schema, load_prompt_template


class TestLoadPromptTemplate:
    def test_loads_restoration_template(self) -> None:
        template = load_prompt_template("restoration_prompt.txt")
        assert "{variation_note}" in template

    def test_loads_edit_template(self) -> None:
        template = load_prompt_template("edit_prompt.txt")
        assert "{instruction}" in template

    def test_loads_analysis_template(self) -> None:
        template = load_prompt_template("analysis_prompt.txt")
        assert "{json_schema}" in template

    def test_loads_custom_template(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.txt"
        custom.write_text("Hello {instruction}")
        result = load_prompt_template("edit_prompt.txt", custom)
        assert result == "Hello {instruction}"

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(InferenceError, match="Failed to load prompt"):
            load_prompt_template("missing.txt", Path("/nonexistent/file.txt"))


class TestLoadJsonSchema:
    def test_loads_default_schema(self) -> None:
        schema = json.loads(load_json_schema())
        assert set(schema["required"]) == {
            "rawOCR",
            "transcription",
            "translation",
            "sourceInfo",
            "regionInfo",
        }

    def test_loads_custom_schema(self, tmp_path: Path) -> None:
        custom = tmp_path / "schema.json"
        custom.write_text('{"type": "object"}')
        result = load_json_schema(custom)
        assert result == '{"type": "object"}'

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(InferenceError, match="Failed to load JSON schema"):
            load_json_schema(Path("/nonexistent/schema.json"))
