from typing import ClassVar

from palmleaf.config.settings import Settings
from palmleaf.inference.analyzer import Analyzer
from palmleaf.inference.client_base import BaseInferenceClient
from palmleaf.inference.example_client_adapter import ExampleClientAdapter
from palmleaf.inference.openai_client_adapter import OpenAIClientAdapter
from palmleaf.inference.restorer import Restorer


class InferenceClientFactory:
    """Creates the configured inference client and the services built on it."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create_client(cls, settings: Settings) -> BaseInferenceClient:
        """Create a provider client from application settings."""
        provider = settings.inference_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.inference_api_key,
            timeout_seconds=settings.inference_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def create_restorer(
        cls, settings: Settings, client: BaseInferenceClient | None = None
    ) -> Restorer:
        return Restorer(
            client=client or cls.create_client(settings),
            model=settings.restoration_model_name,
        )

    @classmethod
    def create_analyzer(
        cls, settings: Settings, client: BaseInferenceClient | None = None
    ) -> Analyzer:
        return Analyzer(
            client=client or cls.create_client(settings),
            model=settings.analysis_model_name,
            temperature=settings.analysis_temperature,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.inference_base_url.strip()
            if not url:
                raise ValueError(
                    "inference_base_url is required for inference_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.inference_base_url.strip() or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown inference provider '{provider}'. Choose from: {supported}")
