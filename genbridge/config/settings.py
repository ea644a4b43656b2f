"""
Environment-driven content generator settings.

Resolves which auth mode is in use, which credentials to read, and which
model to run, once, before any generator is constructed. Generators never
re-read the environment afterwards.

Environment variables:
    GEMINI_API_KEY                      gemini-api-key auth
    GOOGLE_API_KEY, GOOGLE_CLOUD_PROJECT,
    GOOGLE_CLOUD_LOCATION               vertex-ai auth (all three required)
    OPENAI_API_KEY, OPENAI_MODEL,
    OPENAI_BASE_URL, OPENAI_EMBEDDING_MODEL
                                        openai-api-key auth
    GENBRIDGE_AUTH_TYPE                 auth type picked by the CLI (main.py)

Usage:
    settings = resolve_content_generator_settings(None, AuthType.USE_OPENAI)
    generator = create_content_generator(settings)
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Callable, Mapping, Optional

from pydantic import BaseModel

from genbridge.exceptions import UnsupportedProviderError
from genbridge.llm.providers import DEFAULT_REGISTRY, LLMProvider
from genbridge.llm.validation import AdapterConfig


class AuthType(str, Enum):
    """How the caller authenticates; decides the provider."""

    LOGIN_WITH_GOOGLE_PERSONAL = "oauth-personal"
    USE_GEMINI = "gemini-api-key"
    USE_VERTEX_AI = "vertex-ai"
    USE_OPENAI = "openai-api-key"


_PROVIDER_BY_AUTH_TYPE: dict[AuthType, LLMProvider] = {
    AuthType.USE_GEMINI: LLMProvider.GEMINI,
    AuthType.USE_VERTEX_AI: LLMProvider.VERTEX_AI,
    AuthType.USE_OPENAI: LLMProvider.OPENAI,
}

# Personal OAuth has no generator here but still reports the Gemini default
DEFAULT_MODELS_BY_AUTH_TYPE: dict[AuthType, str] = {
    auth_type: DEFAULT_REGISTRY.default_model(
        _PROVIDER_BY_AUTH_TYPE.get(auth_type, LLMProvider.GEMINI)
    )
    for auth_type in AuthType
}


class ContentGeneratorSettings(BaseModel):
    """Resolved settings; api_key stays None when no credential was found."""

    model: str
    api_key: Optional[str] = None
    vertexai: bool = False
    auth_type: Optional[AuthType] = None
    openai_base_url: Optional[str] = None
    openai_embedding_model: Optional[str] = None

    def to_adapter_config(self) -> AdapterConfig:
        """
        Map the auth type onto a provider for the adapter factory.

        Raises:
            UnsupportedProviderError: personal OAuth or no auth type.
        """
        provider = _PROVIDER_BY_AUTH_TYPE.get(self.auth_type) if self.auth_type else None
        if provider is None:
            label = self.auth_type.value if self.auth_type else "<none>"
            raise UnsupportedProviderError(
                f"Error creating content generator: Unsupported authType: {label}",
                provider=label,
            )

        is_openai = provider == LLMProvider.OPENAI
        return AdapterConfig(
            provider=provider,
            api_key=self.api_key or "",
            model=self.model,
            embedding_model=self.openai_embedding_model if is_openai else None,
            base_url=self.openai_base_url if is_openai else None,
            vertexai=self.vertexai,
        )


def _read(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name, "").strip()
    return value or None


def resolve_content_generator_settings(
    model: Optional[str],
    auth_type: Optional[AuthType],
    env: Optional[Mapping[str, str]] = None,
    runtime_model: Optional[Callable[[], str]] = None,
) -> ContentGeneratorSettings:
    """
    Build settings for `auth_type` from the environment.

    Model precedence: `runtime_model()` → (OpenAI only) OPENAI_MODEL →
    `model` → the auth type's default. A missing credential is not an
    error here; the factory rejects the empty key when building.
    """
    env = os.environ if env is None else env

    default_model = DEFAULT_MODELS_BY_AUTH_TYPE.get(
        auth_type, DEFAULT_REGISTRY.default_model(LLMProvider.GEMINI)
    )
    if auth_type == AuthType.USE_OPENAI:
        fallback = _read(env, "OPENAI_MODEL") or model or default_model
    else:
        fallback = model or default_model
    effective_model = (runtime_model() if runtime_model else None) or fallback

    settings = ContentGeneratorSettings(model=effective_model, auth_type=auth_type)

    if auth_type == AuthType.USE_GEMINI:
        settings.api_key = _read(env, "GEMINI_API_KEY")

    elif auth_type == AuthType.USE_VERTEX_AI:
        google_api_key = _read(env, "GOOGLE_API_KEY")
        if (
            google_api_key
            and _read(env, "GOOGLE_CLOUD_PROJECT")
            and _read(env, "GOOGLE_CLOUD_LOCATION")
        ):
            settings.api_key = google_api_key
            settings.vertexai = True

    elif auth_type == AuthType.USE_OPENAI:
        openai_api_key = _read(env, "OPENAI_API_KEY")
        if openai_api_key:
            settings.api_key = openai_api_key
            settings.openai_base_url = _read(env, "OPENAI_BASE_URL")
            settings.openai_embedding_model = _read(env, "OPENAI_EMBEDDING_MODEL")

    return settings
