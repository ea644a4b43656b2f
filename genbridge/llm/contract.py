"""
Content Generator Contract — the one interface callers program against.

The method set and keyword-only signatures match the google-genai async
models surface (`genai.Client(...).aio.models`), so the native Gemini
client satisfies this protocol as-is and every translation adapter must
mirror it. Callers never branch on provider identity.

Usage:
    generator: ContentGenerator = AdapterFactory.create_adapter(config)

    response = await generator.generate_content(model=model, contents="Hi")
    print(response.text)

    stream = await generator.generate_content_stream(model=model, contents="Hi")
    async for chunk in stream:
        print(chunk.text, end="")
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Optional, Protocol, runtime_checkable

from google.genai import types


@runtime_checkable
class ContentGenerator(Protocol):
    """Generate, stream, count tokens and embed in the neutral shape."""

    async def generate_content(
        self,
        *,
        model: str,
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.GenerateContentResponse:
        ...

    async def generate_content_stream(
        self,
        *,
        model: str,
        contents: Any,
        config: Optional[Any] = None,
    ) -> AsyncIterator[types.GenerateContentResponse]:
        ...

    async def count_tokens(
        self,
        *,
        model: str,
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.CountTokensResponse:
        ...

    async def embed_content(
        self,
        *,
        model: str,
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.EmbedContentResponse:
        ...
