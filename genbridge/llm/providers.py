"""
Provider Registry — supported models and defaults per LLM provider.

Static data, built once at import and never mutated. The declaration
order of DEFAULT_PROVIDER_RECORDS is significant: it is the order
`all_providers()` reports, and the tie-break order for
`infer_provider()` when a model name is listed under several providers.

Usage:
    from genbridge.llm.providers import DEFAULT_REGISTRY, LLMProvider

    DEFAULT_REGISTRY.supported_models(LLMProvider.OPENAI)
    # → ["gpt-4", "gpt-4-turbo", "gpt-4o", "gpt-4o-mini", "gpt-3.5-turbo"]

    DEFAULT_REGISTRY.infer_provider("gemini-2.5-pro")
    # → LLMProvider.GEMINI  (vertex-ai lists it too; gemini is declared first)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class LLMProvider(str, Enum):
    """Back ends a content generator can be built for."""

    GEMINI = "gemini"
    OPENAI = "openai"
    VERTEX_AI = "vertex-ai"


ProviderLike = Union[LLMProvider, str]


def coerce_provider(value: Optional[ProviderLike]) -> Optional[LLMProvider]:
    """Map a provider id (enum member or its string value) to the enum, or None."""
    if value is None:
        return None
    if isinstance(value, LLMProvider):
        return value
    try:
        return LLMProvider(value)
    except ValueError:
        return None


def provider_label(value: Optional[ProviderLike]) -> str:
    """Plain string form of a provider id, for messages and log fields."""
    if isinstance(value, LLMProvider):
        return value.value
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Provider Record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProviderRecord:
    """Everything the registry knows about one provider."""

    provider: LLMProvider
    supported_models: tuple[str, ...]   # declaration order, not sorted
    default_embedding_model: str
    default_model: str


# ---------------------------------------------------------------------------
# Default Records
# ---------------------------------------------------------------------------

DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"
DEFAULT_GEMINI_FLASH_MODEL = "gemini-2.5-flash"
DEFAULT_GEMINI_EMBEDDING_MODEL = "gemini-embedding-001"

DEFAULT_OPENAI_MODEL = "gpt-4"
DEFAULT_OPENAI_EMBEDDING_MODEL = "text-embedding-ada-002"

_GEMINI_MODELS = (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GEMINI_FLASH_MODEL,
    "gemini-1.5-pro",
    "gemini-1.5-flash",
)

DEFAULT_PROVIDER_RECORDS: tuple[ProviderRecord, ...] = (
    ProviderRecord(
        provider=LLMProvider.GEMINI,
        supported_models=_GEMINI_MODELS,
        default_embedding_model=DEFAULT_GEMINI_EMBEDDING_MODEL,
        default_model=DEFAULT_GEMINI_MODEL,
    ),
    ProviderRecord(
        provider=LLMProvider.OPENAI,
        supported_models=(
            DEFAULT_OPENAI_MODEL,
            "gpt-4-turbo",
            "gpt-4o",
            "gpt-4o-mini",
            "gpt-3.5-turbo",
        ),
        default_embedding_model=DEFAULT_OPENAI_EMBEDDING_MODEL,
        default_model=DEFAULT_OPENAI_MODEL,
    ),
    ProviderRecord(
        provider=LLMProvider.VERTEX_AI,
        supported_models=_GEMINI_MODELS,
        default_embedding_model=DEFAULT_GEMINI_EMBEDDING_MODEL,
        default_model=DEFAULT_GEMINI_MODEL,
    ),
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class ProviderRegistry:
    """
    Read-only lookup over a fixed set of provider records.

    Unknown providers are never an error here: lookups return an empty
    list / empty string / None and the caller decides what that means.
    """

    def __init__(self, records: Optional[Iterable[ProviderRecord]] = None):
        source = DEFAULT_PROVIDER_RECORDS if records is None else records
        self._records: dict[LLMProvider, ProviderRecord] = {}
        for record in source:
            # First declaration of a provider wins
            self._records.setdefault(record.provider, record)

    def get(self, provider: Optional[ProviderLike]) -> Optional[ProviderRecord]:
        key = coerce_provider(provider)
        if key is None:
            return None
        return self._records.get(key)

    def supported_models(self, provider: Optional[ProviderLike]) -> list[str]:
        record = self.get(provider)
        return list(record.supported_models) if record else []

    def default_embedding_model(self, provider: Optional[ProviderLike]) -> str:
        record = self.get(provider)
        return record.default_embedding_model if record else ""

    def default_model(self, provider: Optional[ProviderLike]) -> str:
        record = self.get(provider)
        return record.default_model if record else ""

    def all_providers(self) -> list[LLMProvider]:
        return list(self._records)

    def is_known(self, provider: Optional[ProviderLike]) -> bool:
        return self.get(provider) is not None

    def is_model_supported(self, provider: Optional[ProviderLike], model: str) -> bool:
        record = self.get(provider)
        return record is not None and model in record.supported_models

    def infer_provider(self, model: str) -> Optional[LLMProvider]:
        """
        Best-effort reverse lookup: first declared provider listing `model`.

        Model names shared between providers (gemini / vertex-ai) always
        resolve to the earlier declaration. Prefer an explicit
        (provider, model) pair wherever one is available.
        """
        for provider, record in self._records.items():
            if model in record.supported_models:
                return provider
        return None


DEFAULT_REGISTRY = ProviderRegistry()
