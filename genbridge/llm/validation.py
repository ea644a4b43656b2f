"""
Config Validator — structured checks for an adapter configuration.

`validate_config` never raises. It collects every problem it finds, in a
fixed order, so a UI or CLI can show them all at once:

    result = validate_config(AdapterConfig(provider="openai", api_key="", model=""))
    result.valid   # False
    result.errors  # ["API key is required", "Model is required"]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from genbridge.llm.providers import (
    DEFAULT_REGISTRY,
    ProviderLike,
    ProviderRegistry,
    provider_label,
)


@dataclass
class AdapterConfig:
    """Caller-owned description of the content generator to build."""

    provider: Optional[ProviderLike] = None
    api_key: str = ""
    model: str = ""
    embedding_model: Optional[str] = None
    base_url: Optional[str] = None
    vertexai: bool = False


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate_config. Not an exception; always returned."""

    valid: bool
    errors: list[str] = field(default_factory=list)


def validate_config(
    config: AdapterConfig,
    registry: Optional[ProviderRegistry] = None,
) -> ValidationResult:
    """Check provider, key and model; accumulate, do not short-circuit."""
    registry = registry or DEFAULT_REGISTRY
    errors: list[str] = []

    provider = provider_label(config.provider)

    if not provider:
        errors.append("Provider is required")

    if not config.api_key:
        errors.append("API key is required")

    if not config.model:
        errors.append("Model is required")

    if provider and not registry.is_known(config.provider):
        errors.append(f"Unsupported provider: {provider}")

    return ValidationResult(valid=not errors, errors=errors)
