"""
OpenAI Content Generator — translates the neutral (google-genai) shape to
OpenAI Chat Completions / Embeddings and back.

Request side:
    system_instruction  → one leading {"role": "system"} message
    Content(role=model) → {"role": "assistant"}
    any other role      → {"role": "user"}
    empty-text contents are dropped, multi-part contents are flattened

Response side:
    choices[0].message      → Candidate(index=0, content.role="model")
    choices[0].finish_reason→ types.FinishReason (see FINISH_REASON_MAP)
    usage                   → usage_metadata, only when the API sent usage

OpenAI has no token-counting endpoint, so count_tokens() is a
characters/4 estimate. Do not use it for billing.

Usage:
    generator = OpenAIContentGenerator(api_key="sk-...", model="gpt-4o")
    response = await generator.generate_content(
        model="gpt-4o",
        contents=[types.Content(role="user", parts=[types.Part(text="Hi")])],
        config=types.GenerateContentConfig(system_instruction="Be brief."),
    )
    print(response.text, response.candidates[0].finish_reason)
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, AsyncIterator, NoReturn, Optional

import openai
from google.genai import types

from genbridge.exceptions import GenBridgeError, TranslationCallError
from genbridge.llm.content import (
    extract_role,
    extract_text,
    iter_request_texts,
    normalize_contents,
    system_instruction_of,
)
from genbridge.llm.providers import (
    DEFAULT_OPENAI_EMBEDDING_MODEL,
    DEFAULT_OPENAI_MODEL,
    LLMProvider,
)
from genbridge.llm.streaming import ResponseStream

logger = logging.getLogger(__name__)

PROVIDER = LLMProvider.OPENAI.value

# Rough English-text ratio; OpenAI publishes ~4 chars per token.
CHARS_PER_TOKEN = 4


# ---------------------------------------------------------------------------
# Finish Reasons
# ---------------------------------------------------------------------------

FINISH_REASON_MAP: dict[str, types.FinishReason] = {
    "stop": types.FinishReason.STOP,
    "length": types.FinishReason.MAX_TOKENS,
    "content_filter": types.FinishReason.SAFETY,
}


def convert_finish_reason(reason: Optional[str]) -> Optional[types.FinishReason]:
    """Map an OpenAI finish_reason to the neutral enum; None stays unset."""
    if not reason:
        return None
    return FINISH_REASON_MAP.get(reason, types.FinishReason.OTHER)


# ---------------------------------------------------------------------------
# Error Translation
# ---------------------------------------------------------------------------

_ERROR_PREFIXES = {
    "generate_content": "OpenAI API call failed",
    "generate_content_stream": "OpenAI streaming API call failed",
    "count_tokens": "OpenAI token count failed",
    "embed_content": "OpenAI embedding call failed",
}


def translate_error(operation: str, error: Exception) -> Exception:
    """
    Convert a vendor failure into a TranslationCallError.

    Errors that are already ours pass through unchanged. openai.APIError
    keeps its message and, for HTTP failures, its status code.
    """
    if isinstance(error, GenBridgeError):
        return error

    prefix = _ERROR_PREFIXES.get(operation, "OpenAI call failed")
    status_code: Optional[int] = None

    if isinstance(error, openai.APIError):
        status_code = getattr(error, "status_code", None)
        detail = error.message
        if status_code is not None:
            detail = f"{detail} ({status_code})"
    else:
        detail = str(error) or type(error).__name__

    return TranslationCallError(
        f"{prefix}: {detail}",
        provider=PROVIDER,
        operation=operation,
        status_code=status_code,
    )


# ---------------------------------------------------------------------------
# Content Generator
# ---------------------------------------------------------------------------

class OpenAIContentGenerator:
    """
    ContentGenerator backed by the OpenAI async SDK.

    Model, embedding model, key and base URL are bound at construction and
    never change; the `model` argument of each call is accepted for
    contract compatibility and ignored.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        embedding_model: str = DEFAULT_OPENAI_EMBEDDING_MODEL,
        base_url: Optional[str] = None,
        *,
        client: Any = None,
        default_headers: Optional[dict[str, str]] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._embedding_model = embedding_model
        self._base_url = base_url
        self._client = client or openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            default_headers=default_headers,
        )

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def model(self) -> str:
        return self._model

    @property
    def embedding_model(self) -> str:
        return self._embedding_model

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    # --- Contract ---

    async def generate_content(
        self,
        *,
        model: str = "",
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.GenerateContentResponse:
        start = time.monotonic()
        try:
            messages = self.to_openai_messages(contents, config)
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                stream=False,
            )
            result = self.to_neutral_response(response)
        except Exception as exc:
            self._raise_failed("generate_content", exc)

        usage = result.usage_metadata
        logger.info(
            "llm_generate_completed",
            extra={
                "provider": PROVIDER,
                "model": self._model,
                "messages": len(messages),
                "tokens": usage.total_token_count if usage else None,
                "latency_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )
        return result

    async def generate_content_stream(
        self,
        *,
        model: str = "",
        contents: Any,
        config: Optional[Any] = None,
    ) -> ResponseStream:
        messages = self.to_openai_messages(contents, config)

        async def open_stream() -> Any:
            return await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                stream=True,
            )

        return ResponseStream(
            open_stream,
            self.iter_neutral_chunks,
            error_handler=lambda exc: self._failed("generate_content_stream", exc),
            provider=PROVIDER,
            model=self._model,
        )

    async def count_tokens(
        self,
        *,
        model: str = "",
        contents: Any,
        config: Optional[Any] = None,
    ) -> types.CountTokensResponse:
        try:
            text = "".join(f"{t} " for t in iter_request_texts(contents) if t)
            return types.CountTokensResponse(
                total_tokens=math.ceil(len(text) / CHARS_PER_TOKEN),
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
            # Single input only: the first non-empty text wins
            text = next((t for t in iter_request_texts(contents) if t), "")
            response = await self._client.embeddings.create(
                model=self._embedding_model,
                input=text,
            )
            values = list(response.data[0].embedding) if response.data else []
        except Exception as exc:
            self._raise_failed("embed_content", exc)

        logger.debug(
            "llm_embed_completed",
            extra={
                "provider": PROVIDER,
                "model": self._embedding_model,
                "dimensions": len(values),
            },
        )
        return types.EmbedContentResponse(
            embeddings=[types.ContentEmbedding(values=values)],
        )

    # --- Request Conversion ---

    @staticmethod
    def to_openai_messages(contents: Any, config: Optional[Any] = None) -> list[dict[str, str]]:
        """Flatten neutral contents (+ system instruction) into chat messages."""
        messages: list[dict[str, str]] = []

        system_instruction = system_instruction_of(config)
        if system_instruction is not None:
            system_text = extract_text(system_instruction)
            if system_text:
                messages.append({"role": "system", "content": system_text})

        for content in normalize_contents(contents):
            text = extract_text(content)
            if not text:
                continue
            role = "assistant" if extract_role(content) == "model" else "user"
            messages.append({"role": role, "content": text})

        return messages

    # --- Response Conversion ---

    @staticmethod
    def to_neutral_response(response: Any) -> types.GenerateContentResponse:
        """Convert a ChatCompletion into a one-candidate neutral response."""
        choice = response.choices[0]
        message = getattr(choice, "message", None)
        text = getattr(message, "content", None) or ""

        result = types.GenerateContentResponse(
            candidates=[_candidate(text, choice.finish_reason)],
        )

        usage = getattr(response, "usage", None)
        if usage is not None:
            result.usage_metadata = types.GenerateContentResponseUsageMetadata(
                prompt_token_count=usage.prompt_tokens,
                candidates_token_count=usage.completion_tokens,
                total_token_count=usage.total_tokens,
            )

        return result

    @staticmethod
    async def iter_neutral_chunks(
        native_stream: AsyncIterator[Any],
    ) -> AsyncIterator[types.GenerateContentResponse]:
        """
        Convert ChatCompletionChunks into neutral responses.

        Text-less chunks are never emitted. OpenAI sends the finish reason
        on a trailing chunk with an empty delta, so the latest text chunk
        is held back by one native chunk and that trailing finish reason
        is attached to it.
        """
        pending: Optional[tuple[str, Optional[str]]] = None

        async for chunk in native_stream:
            if not chunk.choices:
                continue
            choice = chunk.choices[0]
            delta = getattr(choice, "delta", None)
            text = getattr(delta, "content", None) or ""
            finish_reason = getattr(choice, "finish_reason", None)

            if text:
                if pending is not None:
                    yield types.GenerateContentResponse(
                        candidates=[_candidate(*pending)],
                    )
                pending = (text, finish_reason)
            elif finish_reason and pending is not None and pending[1] is None:
                pending = (pending[0], finish_reason)

        if pending is not None:
            yield types.GenerateContentResponse(candidates=[_candidate(*pending)])

    # --- Errors ---

    def _failed(self, operation: str, error: Exception) -> Exception:
        translated = translate_error(operation, error)
        logger.warning(
            "llm_call_failed",
            extra={
                "provider": PROVIDER,
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


def _candidate(text: str, finish_reason: Optional[str]) -> types.Candidate:
    return types.Candidate(
        content=types.Content(role="model", parts=[types.Part(text=text)]),
        finish_reason=convert_finish_reason(finish_reason),
        index=0,
    )
