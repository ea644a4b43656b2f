"""
GenBridge — one content-generation interface over multiple LLM back ends.

Packages:
- llm: provider registry, config validation, the OpenAI translation
  adapter, and the factory that picks a content generator
- config: environment and YAML profile resolution
- observability: structured logging
"""

__version__ = "0.1.0"
