from typing import Any, ClassVar

from ecoreceipt.config.settings import Settings
from ecoreceipt.correction.base import BaseCorrector
from ecoreceipt.correction.client_base import BaseCorrectionClient
from ecoreceipt.correction.corrector import ConfidenceGatedCorrector
from ecoreceipt.correction.echo_client_adapter import EchoClientAdapter
from ecoreceipt.correction.openai_client_adapter import OpenAIClientAdapter


class CorrectorFactory:
    """Creates the confidence-gated corrector for the configured provider."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "deepseek": "https://api.deepseek.com/v1",
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseCorrector:
        """Create a configured corrector from application settings."""
        return ConfidenceGatedCorrector(
            client=cls.create_client(settings),
            model=cls.model_name(settings),
            threshold=settings.ocr_confidence_threshold,
            temperature=settings.correction_temperature,
        )

    @classmethod
    def create_client(cls, settings: Settings) -> BaseCorrectionClient:
        """Create the completion client for the configured provider."""
        provider = settings.correction_provider.lower()
        if provider == "echo":
            return EchoClientAdapter()
        return OpenAIClientAdapter(
            api_key=cls._provider_setting(provider, settings, "api_key"),
            timeout_seconds=cls._provider_setting(provider, settings, "timeout_seconds"),
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def model_name(cls, settings: Settings) -> str:
        provider = settings.correction_provider.lower()
        if provider == "echo":
            return "echo"
        return cls._provider_setting(provider, settings, "model_name")

    @classmethod
    def supported_providers(cls) -> list[str]:
        return ["echo", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.correction_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "correction_openai_compatible_base_url is required for "
                    "correction_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        raise ValueError(
            f"Unknown correction provider '{provider}'. "
            f"Choose from: {cls.supported_providers()}"
        )

    @classmethod
    def _provider_setting(cls, provider: str, settings: Settings, name: str) -> Any:
        if provider not in cls.supported_providers():
            raise ValueError(
                f"Unknown correction provider '{provider}'. "
                f"Choose from: {cls.supported_providers()}"
            )
        return getattr(settings, f"correction_{provider}_{name}")
