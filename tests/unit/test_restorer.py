import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from palmleaf.inference.client_base import BaseInferenceClient
from palmleaf.inference.exceptions import InferenceError, InferenceNetworkError
from palmleaf.inference.restorer import Restorer


def _make_restorer(edited: str | None = "UkVTVA==") -> tuple[Restorer, MagicMock]:
    client = MagicMock(spec=BaseInferenceClient)
    client.edit_image = AsyncMock(return_value=edited)
    return Restorer(client=client, model="image-model"), client


class TestRestore:
    def test_returns_encoded_png(self) -> None:
        restorer, client = _make_restorer()

        result = asyncio.run(restorer.restore("bGVhZg==", "image/jpeg"))

        assert result == "data:image/png;base64,UkVTVA=="
        kwargs = client.edit_image.call_args.kwargs
        assert kwargs["model"] == "image-model"
        assert kwargs["image_bytes"] == b"leaf"
        assert kwargs["mime_type"] == "image/jpeg"

    def test_plain_restore_has_no_variation_note(self) -> None:
        restorer, client = _make_restorer()

        asyncio.run(restorer.restore("bGVhZg==", "image/jpeg"))

        prompt = client.edit_image.call_args.kwargs["prompt"]
        assert "Restore this ancient Tamil palm-leaf manuscript" in prompt
        assert "variation" not in prompt

    def test_variation_is_added_to_prompt(self) -> None:
        restorer, client = _make_restorer()

        asyncio.run(restorer.restore("bGVhZg==", "image/jpeg", variation=417))

        assert "Generate variation #417" in client.edit_image.call_args.kwargs["prompt"]

    def test_instruction_replaces_restoration_brief(self) -> None:
        restorer, client = _make_restorer()

        asyncio.run(restorer.restore("bGVhZg==", "image/png", instruction="  Sharpen text "))

        prompt = client.edit_image.call_args.kwargs["prompt"]
        assert "Instruction: Sharpen text" in prompt
        assert "Restore this ancient" not in prompt

    def test_returns_none_when_service_has_no_image(self) -> None:
        restorer, _client = _make_restorer(edited=None)

        assert asyncio.run(restorer.restore("bGVhZg==", "image/jpeg")) is None

    def test_rejects_invalid_payload(self) -> None:
        restorer, client = _make_restorer()

        with pytest.raises(InferenceError, match="not valid base64"):
            asyncio.run(restorer.restore("***", "image/jpeg"))
        client.edit_image.assert_not_called()

    def test_propagates_client_errors(self) -> None:
        restorer, client = _make_restorer()
        client.edit_image.side_effect = InferenceNetworkError("down")

        with pytest.raises(InferenceNetworkError, match="down"):
            asyncio.run(restorer.restore("bGVhZg==", "image/jpeg"))
