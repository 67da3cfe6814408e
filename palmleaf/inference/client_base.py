from abc import ABC, abstractmethod


class BaseInferenceClient(ABC):
    """Contract for provider-specific image and vision AI clients."""

    @abstractmethod
    async def edit_image(
        self,
        *,
        model: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
    ) -> str | None:
        """Return the edited image as a base64 payload, or None if the provider returned none."""

    @abstractmethod
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
        """Return provider response as plain text."""

    async def close(self) -> None:
        """Release any network resources held by the client."""
