import httpx
import openai

from palmleaf.inference.client_base import BaseInferenceClient
from palmleaf.inference.exceptions import InferenceError, InferenceNetworkError

_UPLOAD_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class OpenAIClientAdapter(BaseInferenceClient):
    """Inference client adapter built on the OpenAI-compatible images and chat APIs."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    async def edit_image(
        self,
        *,
        model: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
    ) -> str | None:
        filename = f"manuscript.{_UPLOAD_EXTENSIONS.get(mime_type, 'png')}"
        try:
            response = await self._client.images.edit(
                model=model,
                image=(filename, image_bytes, mime_type),
                prompt=prompt,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise InferenceNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise InferenceNetworkError(f"AI provider API error: {exc}") from exc

        for image in response.data or []:
            if image.b64_json:
                return image.b64_json
        return None

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
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "manuscript_analysis",
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": user_prompt},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    },
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise InferenceNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise InferenceNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise InferenceError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise InferenceError("AI returned empty response")
        return content

    async def close(self) -> None:
        await self._client.close()
