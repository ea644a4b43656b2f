"""
LLM Abstraction Layer — one content-generation contract, many providers.

Modules:
- providers: static registry of providers, models and defaults
- validation: AdapterConfig and the non-throwing config validator
- content: reduces neutral (google-genai) contents to flat text
- contract: ContentGenerator protocol every generator satisfies
- streaming: ResponseStream — lazy, closable neutral chunk stream
- openai_generator: OpenAIContentGenerator — the translation adapter
- gemini_generator: GeminiContentGenerator — owned google-genai client
- factory: AdapterFactory — config → ContentGenerator
"""

from genbridge.llm.contract import ContentGenerator
from genbridge.llm.factory import (
    AdapterFactory,
    ResolvedAdapterConfig,
    create_content_generator,
    create_openai_content_generator,
)
from genbridge.llm.gemini_generator import GeminiContentGenerator
from genbridge.llm.openai_generator import OpenAIContentGenerator
from genbridge.llm.providers import (
    DEFAULT_REGISTRY,
    LLMProvider,
    ProviderRecord,
    ProviderRegistry,
)
from genbridge.llm.streaming import ResponseStream, collect_text
from genbridge.llm.validation import AdapterConfig, ValidationResult, validate_config

__all__ = [
    "AdapterConfig",
    "AdapterFactory",
    "ContentGenerator",
    "DEFAULT_REGISTRY",
    "GeminiContentGenerator",
    "LLMProvider",
    "OpenAIContentGenerator",
    "ProviderRecord",
    "ProviderRegistry",
    "ResolvedAdapterConfig",
    "ResponseStream",
    "ValidationResult",
    "collect_text",
    "create_content_generator",
    "create_openai_content_generator",
    "validate_config",
]
