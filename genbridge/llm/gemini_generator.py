"""
Gemini Content Generator — google-genai's async models surface, owned.

Gemini and Vertex AI already speak the neutral shape, so requests and
responses pass through untouched. What this class adds:

- it holds the `genai.Client` for as long as the generator lives. The
  SDK's AsyncClient closes its shared HTTP transport when it is garbage
  collected, so handing out only `client.aio.models` is not enough;
- streams are wrapped in ResponseStream like every other provider's;
- google.genai.errors.APIError becomes TranslationCallError.

Usage:
    generator = GeminiContentGenerator(api_key="AIza...", model="gemini-2.5-pro")
    response = await generator.generate_content(model="gemini-2.5-pro", contents="Hi")
    await generator.aclose()
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, NoReturn, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from genbridge.exceptions import GenBridgeError, TranslationCallError
from genbridge.llm.providers import (
    DEFAULT_GEMINI_EMBEDDING_MODEL,
    DEFAULT_GEMINI_MODEL,
    LLMProvider,
)
from genbridge.llm.streaming import ResponseStream

logger = logging.getLogger(__name__)

_ERROR_PREFIXES = {
    "generate_content": "Gemini API call failed",
    "generate_content_stream": "Gemini streaming API call failed",
    "count_tokens": "Gemini token count failed",
    "embed_content": "Gemini embedding call failed",
}


def translate_error(operation: str, error: Exception, provider: str) -> Exception:
    """google-genai failures → TranslationCallError; ours pass through."""
    if isinstance(error, GenBridgeError):
        return error

    prefix = _ERROR_PREFIXES.get(operation, "Gemini call failed")
    status_code: Optional[int] = None

    if isinstance(error, genai_errors.APIError):
        status_code = error.code
        detail = error.message or error.status or str(error)
        if status_code is not None:
            detail = f"{detail} ({status_code})"
    else:
        detail = str(error) or type(error).__name__

    return TranslationCallError(
        f"{prefix}: {detail}",
        provider=provider,
        operation=operation,
        status_code=status_code,
    )


async def _passthrough(
    native_stream: AsyncIterator[types.GenerateContentResponse],
) -> AsyncIterator[types.GenerateContentResponse]:
    async for response in native_stream:
        yield response


class GeminiContentGenerator:
    """
    ContentGenerator backed by google-genai (Gemini API or Vertex AI).

    Unlike the OpenAI adapter, the `model` argument of each call is
    honoured; the bound models are only used when a call passes none.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        embedding_model: str = DEFAULT_GEMINI_EMBEDDING_MODEL,
        *,
        vertexai: bool = False,
        client: Any = None,
        default_headers: Optional[dict[str, str]] = None,
    ):
        self._model = model
        self._embedding_model = embedding_model
        self._provider = (LLMProvider.VERTEX_AI if vertexai else LLMProvider.GEMINI).value
        http_options = types.HttpOptions(headers=default_headers) if default_headers else None
        self._client = client or genai.Client(
            api_key=api_key,
            vertexai=vertexai,
            http_options=http_options,
        )

    @property
    def client(self) -> Any:
        return self._client

    @property
    def model(self) -> str:
        return self._model

    @property
    def embedding_model(self) -> str:
        return self._embedding_model

    @property
    def provider(self) -> str:
        return self._provider

    # --- Contract ---

    async def generate_content(
        self,
        *,
        model: str = "",
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.GenerateContentResponse:
        try:
            return await self._client.aio.models.generate_content(
                model=model or self._model, contents=contents, config=config,
            )
        except Exception as exc:
            self._raise_failed("generate_content", exc)

    async def generate_content_stream(
        self,
        *,
        model: str = "",
        contents: Any,
        config: Optional[Any] = None,
    ) -> ResponseStream:
        effective_model = model or self._model

        async def open_stream() -> Any:
            return await self._client.aio.models.generate_content_stream(
                model=effective_model, contents=contents, config=config,
            )

        return ResponseStream(
            open_stream,
            _passthrough,
            error_handler=lambda exc: self._failed("generate_content_stream", exc),
            provider=self._provider,
            model=effective_model,
        )

    async def count_tokens(
        self,
        *,
        model: str = "",
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.CountTokensResponse:
        try:
            return await self._client.aio.models.count_tokens(
                model=model or self._model, contents=contents, config=config,
            )
        except Exception as exc:
            self._raise_failed("count_tokens", exc)

    async def embed_content(
        self,
        *,
        model: str = "",
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.EmbedContentResponse:
        try:
            return await self._client.aio.models.embed_content(
                model=model or self._embedding_model, contents=contents, config=config,
            )
        except Exception as exc:
            self._raise_failed("embed_content", exc)

    async def aclose(self) -> None:
        """Close the async HTTP transport; the generator is unusable afterwards."""
        await self._client.aio.aclose()

    # --- Errors ---

    def _failed(self, operation: str, error: Exception) -> Exception:
        translated = translate_error(operation, error, self._provider)
        logger.warning(
            "llm_call_failed",
            extra={
                "provider": self._provider,
                "model": self._model,
                "operation": operation,
                "status_code": getattr(translated, "status_code", None),
                "error": str(error)[:200],
            },
        )
        return translated

    def _raise_failed(self, operation: str, error: Exception) -> NoReturn:
        translated = self._failed(operation, error)
        if translated is error:
            raise error
        raise translated from error
