"""
Adapter Factory — picks and builds the ContentGenerator for a config.

Construction happens in two steps:

1. `AdapterFactory.resolve(config)` — pure: declared config × registry
   defaults → ResolvedAdapterConfig (frozen). The embedding-model default
   is decided here, once, not at request time.
2. `AdapterFactory.create_adapter(config)` — validates credentials, warns
   on models the registry does not list, and dispatches:
     openai            → OpenAIContentGenerator (translation layer)
     gemini, vertex-ai → GeminiContentGenerator, which owns a
                         google-genai client and passes requests through

Usage:
    from genbridge.llm.factory import AdapterFactory
    from genbridge.llm.validation import AdapterConfig

    generator = AdapterFactory.create_adapter(
        AdapterConfig(provider="openai", api_key="sk-...", model="gpt-4o")
    )
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional


from genbridge import __version__
from genbridge.exceptions import ConfigurationError, UnsupportedProviderError
from genbridge.llm.contract import ContentGenerator
from genbridge.llm.gemini_generator import GeminiContentGenerator
from genbridge.llm.openai_generator import OpenAIContentGenerator
from genbridge.llm.providers import (
    DEFAULT_OPENAI_EMBEDDING_MODEL,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_REGISTRY,
    LLMProvider,
    ProviderLike,
    ProviderRegistry,
    coerce_provider,
    provider_label,
)
from genbridge.llm.validation import AdapterConfig, ValidationResult, validate_config

if TYPE_CHECKING:
    from genbridge.config.settings import ContentGeneratorSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Resolved Config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolvedAdapterConfig:
    """Effective, immutable construction record for one adapter."""

    provider: LLMProvider
    api_key: str
    model: str
    embedding_model: str
    base_url: Optional[str] = None
    vertexai: bool = False


# ---------------------------------------------------------------------------
# Adapter Factory
# ---------------------------------------------------------------------------

class AdapterFactory:
    """Builds content generators; registry lookups are delegated helpers."""

    registry: ProviderRegistry = DEFAULT_REGISTRY

    @classmethod
    def resolve(cls, config: AdapterConfig) -> ResolvedAdapterConfig:
        """
        Resolve a declared config against the registry.

        Raises:
            UnsupportedProviderError: provider id is not one we can dispatch.
        """
        provider = coerce_provider(config.provider)
        if provider is None:
            label = provider_label(config.provider) or "<none>"
            raise UnsupportedProviderError(
                f"Unsupported LLM provider: {label}",
                provider=provider_label(config.provider) or None,
            )

        embedding_model = (
            config.embedding_model
            or cls.registry.default_embedding_model(provider)
        )

        return ResolvedAdapterConfig(
            provider=provider,
            api_key=config.api_key,
            model=config.model,
            embedding_model=embedding_model,
            base_url=config.base_url,
            vertexai=config.vertexai or provider == LLMProvider.VERTEX_AI,
        )

    @classmethod
    def create_adapter(
        cls,
        config: AdapterConfig,
        *,
        default_headers: Optional[dict[str, str]] = None,
    ) -> ContentGenerator:
        """
        Create the content generator for `config`.

        Raises:
            ConfigurationError: the API key is empty.
            UnsupportedProviderError: no generator exists for the provider.
        """
        provider = provider_label(config.provider)

        if not config.api_key:
            raise ConfigurationError(
                f"API key is required for {provider or 'the selected'} provider",
                provider=provider or None,
            )

        resolved = cls.resolve(config)

        if not cls.is_model_supported(resolved.provider, resolved.model):
            logger.warning(
                "model_not_in_registry",
                extra={
                    "provider": resolved.provider.value,
                    "model": resolved.model,
                },
            )

        if resolved.provider == LLMProvider.OPENAI:
            generator: ContentGenerator = OpenAIContentGenerator(
                resolved.api_key,
                resolved.model,
                resolved.embedding_model,
                resolved.base_url,
                default_headers=default_headers,
            )
        elif resolved.provider in (LLMProvider.GEMINI, LLMProvider.VERTEX_AI):
            generator = GeminiContentGenerator(
                resolved.api_key,
                resolved.model,
                resolved.embedding_model,
                vertexai=resolved.vertexai,
                default_headers=default_headers,
            )
        else:
            raise UnsupportedProviderError(
                f"Unsupported LLM provider: {resolved.provider.value}",
                provider=resolved.provider.value,
            )

        logger.info(
            "content_generator_created",
            extra={
                "provider": resolved.provider.value,
                "model": resolved.model,
                "embedding_model": resolved.embedding_model,
                "generator": type(generator).__name__,
            },
        )
        return generator

    # --- Registry Helpers ---

    @classmethod
    def is_model_supported(cls, provider: ProviderLike, model: str) -> bool:
        return cls.registry.is_model_supported(provider, model)

    @classmethod
    def get_supported_models(cls, provider: ProviderLike) -> list[str]:
        return cls.registry.supported_models(provider)

    @classmethod
    def infer_provider_from_model(cls, model: str) -> Optional[LLMProvider]:
        return cls.registry.infer_provider(model)

    @classmethod
    def get_supported_providers(cls) -> list[LLMProvider]:
        return cls.registry.all_providers()

    @classmethod
    def validate_config(cls, config: AdapterConfig) -> ValidationResult:
        return validate_config(config, cls.registry)


# ---------------------------------------------------------------------------
# Convenience Constructors
# ---------------------------------------------------------------------------

def create_openai_content_generator(
    api_key: str,
    model: str = DEFAULT_OPENAI_MODEL,
    embedding_model: str = DEFAULT_OPENAI_EMBEDDING_MODEL,
    base_url: Optional[str] = None,
) -> OpenAIContentGenerator:
    """Build an OpenAI generator directly, skipping registry checks."""
    return OpenAIContentGenerator(api_key, model, embedding_model, base_url)


def user_agent() -> str:
    """User-Agent sent to every vendor API, e.g. `GenBridge/0.1.0 (linux; x86_64)`."""
    version = os.environ.get("CLI_VERSION") or __version__
    return f"GenBridge/{version} ({sys.platform}; {platform.machine()})"


def create_content_generator(settings: "ContentGeneratorSettings") -> ContentGenerator:
    """
    Build a generator from environment-resolved settings.

    Raises:
        UnsupportedProviderError: auth type has no generator here
            (personal Google OAuth, or none selected).
        ConfigurationError: the selected auth type found no API key.
    """
    config = settings.to_adapter_config()
    return AdapterFactory.create_adapter(
        config,
        default_headers={"User-Agent": user_agent()},
    )
