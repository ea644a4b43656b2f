"""
Profile loader for GenBridge.

A profile is a small YAML file naming a provider/model pair (and
optionally a base URL, embedding model and the environment variable that
holds the key), validated against a Pydantic schema:

    # profiles/local-gateway.yaml
    provider: openai
    model: gpt-4o-mini
    base_url: http://localhost:4000/v1
    api_key_env: GATEWAY_API_KEY

Keys themselves never live in the profile; only the variable name does.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from genbridge.exceptions import ConfigurationError
from genbridge.llm.providers import LLMProvider
from genbridge.llm.validation import AdapterConfig

DEFAULT_API_KEY_ENVS: dict[LLMProvider, str] = {
    LLMProvider.GEMINI: "GEMINI_API_KEY",
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.VERTEX_AI: "GOOGLE_API_KEY",
}


class ProviderProfile(BaseModel):
    """Schema of one profile file."""

    provider: LLMProvider
    model: str
    embedding_model: Optional[str] = None
    base_url: Optional[str] = None
    api_key_env: Optional[str] = None

    @field_validator("model")
    @classmethod
    def model_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("model must not be empty")
        return v.strip()

    @property
    def key_env(self) -> str:
        return self.api_key_env or DEFAULT_API_KEY_ENVS[self.provider]

    def to_adapter_config(self, env: Optional[Mapping[str, str]] = None) -> AdapterConfig:
        """Build an AdapterConfig, reading the key from the named variable."""
        env = os.environ if env is None else env
        return AdapterConfig(
            provider=self.provider,
            api_key=env.get(self.key_env, "").strip(),
            model=self.model,
            embedding_model=self.embedding_model,
            base_url=self.base_url,
            vertexai=self.provider == LLMProvider.VERTEX_AI,
        )


def load_profile(path: str | Path) -> ProviderProfile:
    """
    Load and validate a profile file.

    Raises:
        ConfigurationError: file missing, empty, not YAML, or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Profile not found: {path}")

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Profile is not valid YAML: {path}\n{e}") from e

    if raw is None:
        raise ConfigurationError(f"Profile file is empty: {path}")
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Profile must be a mapping: {path}")

    try:
        return ProviderProfile(**raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid profile '{path}':\n{e}",
            provider=str(raw.get("provider") or "") or None,
        ) from e
