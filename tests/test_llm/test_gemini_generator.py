"""
Tests for the google-genai backed generator.

Tests cover:
1. Pass-through of requests and responses to client.aio.models
2. Bound model fallback when a call passes none
3. google.genai.errors.APIError → TranslationCallError
4. Streams wrapped in ResponseStream, released on early exit
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import errors as genai_errors
from google.genai import types

from genbridge.exceptions import ConfigurationError, TranslationCallError
from genbridge.llm.contract import ContentGenerator
from genbridge.llm.gemini_generator import GeminiContentGenerator, translate_error
from genbridge.llm.streaming import ResponseStream


# ===========================================================================
# Mock Factories
# ===========================================================================

def _response(text: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(
            content=types.Content(role="model", parts=[types.Part(text=text)]),
            finish_reason=types.FinishReason.STOP,
            index=0,
        )],
    )


def _api_error(code: int = 429, message: str = "Quota exceeded") -> genai_errors.APIError:
    return genai_errors.APIError(
        code,
        {"error": {"code": code, "message": message, "status": "RESOURCE_EXHAUSTED"}},
    )


class MockNativeStream:
    """Async generator stand-in for generate_content_stream's result."""

    def __init__(self, texts: list[str]):
        self._texts = texts
        self.aclose = AsyncMock()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for text in self._texts:
            yield _response(text)


def _mock_client() -> MagicMock:
    client = MagicMock()
    models = client.aio.models
    models.generate_content = AsyncMock(return_value=_response("Hello!"))
    models.count_tokens = AsyncMock(return_value=types.CountTokensResponse(total_tokens=7))
    models.embed_content = AsyncMock(return_value=types.EmbedContentResponse(
        embeddings=[types.ContentEmbedding(values=[0.1, 0.2])],
    ))
    client.aio.aclose = AsyncMock()
    return client


def _generator(client=None, **kwargs) -> GeminiContentGenerator:
    return GeminiContentGenerator("AIza-test", client=client or _mock_client(), **kwargs)


# ===========================================================================
# Construction
# ===========================================================================

class TestConstruction:

    def test_satisfies_contract(self):
        assert isinstance(_generator(), ContentGenerator)

    def test_provider_label(self):
        assert _generator().provider == "gemini"
        assert _generator(vertexai=True).provider == "vertex-ai"

    def test_defaults(self):
        gen = _generator()
        assert gen.model == "gemini-2.5-pro"
        assert gen.embedding_model == "gemini-embedding-001"

    @pytest.mark.asyncio
    async def test_aclose_closes_async_client(self):
        client = _mock_client()
        await _generator(client).aclose()
        client.aio.aclose.assert_awaited_once()


# ===========================================================================
# Pass-through
# ===========================================================================

class TestPassThrough:

    @pytest.mark.asyncio
    async def test_generate_content_passes_call_model(self):
        client = _mock_client()
        config = types.GenerateContentConfig(system_instruction="Be brief.")

        response = await _generator(client).generate_content(
            model="gemini-2.5-flash", contents="hi", config=config,
        )

        assert response.text == "Hello!"
        client.aio.models.generate_content.assert_awaited_once_with(
            model="gemini-2.5-flash", contents="hi", config=config,
        )

    @pytest.mark.asyncio
    async def test_bound_model_used_when_call_passes_none(self):
        client = _mock_client()
        await _generator(client, model="gemini-1.5-pro").generate_content(contents="hi")
        assert client.aio.models.generate_content.call_args.kwargs["model"] == "gemini-1.5-pro"

    @pytest.mark.asyncio
    async def test_count_tokens(self):
        client = _mock_client()
        response = await _generator(client).count_tokens(model="", contents="hi")
        assert response.total_tokens == 7
        assert client.aio.models.count_tokens.call_args.kwargs["model"] == "gemini-2.5-pro"

    @pytest.mark.asyncio
    async def test_embed_falls_back_to_embedding_model(self):
        client = _mock_client()
        response = await _generator(client).embed_content(model="", contents="hi")
        assert response.embeddings[0].values == [0.1, 0.2]
        assert client.aio.models.embed_content.call_args.kwargs["model"] == "gemini-embedding-001"


# ===========================================================================
# Errors
# ===========================================================================

class TestErrors:

    def test_translate_api_error(self):
        err = translate_error("generate_content", _api_error(), "gemini")
        assert str(err) == "Gemini API call failed: Quota exceeded (429)"
        assert err.status_code == 429
        assert err.provider == "gemini"

    @pytest.mark.asyncio
    async def test_generate_content_error_translated(self):
        client = _mock_client()
        client.aio.models.generate_content.side_effect = _api_error(500, "Internal error")

        with pytest.raises(TranslationCallError) as exc_info:
            await _generator(client).generate_content(model="gemini-2.5-pro", contents="hi")

        assert str(exc_info.value) == "Gemini API call failed: Internal error (500)"
        assert exc_info.value.operation == "generate_content"
        assert isinstance(exc_info.value.__cause__, genai_errors.APIError)

    @pytest.mark.asyncio
    async def test_vertex_errors_carry_vertex_provider(self):
        client = _mock_client()
        client.aio.models.embed_content.side_effect = _api_error(403, "Permission denied")

        with pytest.raises(TranslationCallError) as exc_info:
            await _generator(client, vertexai=True).embed_content(model="m", contents="hi")

        assert exc_info.value.provider == "vertex-ai"
        assert str(exc_info.value).startswith("Gemini embedding call failed: ")

    @pytest.mark.asyncio
    async def test_own_errors_pass_through(self):
        client = _mock_client()
        original = ConfigurationError("bad config")
        client.aio.models.count_tokens.side_effect = original

        with pytest.raises(ConfigurationError) as exc_info:
            await _generator(client).count_tokens(model="m", contents="hi")
        assert exc_info.value is original


# ===========================================================================
# Streaming
# ===========================================================================

class TestStreaming:

    @pytest.mark.asyncio
    async def test_stream_passes_responses_through(self):
        native = MockNativeStream(["a", "b"])
        client = _mock_client()
        client.aio.models.generate_content_stream = AsyncMock(return_value=native)

        stream = await _generator(client).generate_content_stream(model="m", contents="hi")
        assert isinstance(stream, ResponseStream)
        client.aio.models.generate_content_stream.assert_not_called()

        texts = [r.text async for r in stream]

        assert texts == ["a", "b"]
        native.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_early_exit_releases_native_stream(self):
        native = MockNativeStream(["a", "b", "c"])
        client = _mock_client()
        client.aio.models.generate_content_stream = AsyncMock(return_value=native)

        stream = await _generator(client).generate_content_stream(model="m", contents="hi")
        async with stream:
            async for _ in stream:
                break

        native.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stream_open_error_translated(self):
        client = _mock_client()
        client.aio.models.generate_content_stream = AsyncMock(side_effect=_api_error(503, "Unavailable"))

        stream = await _generator(client).generate_content_stream(model="m", contents="hi")
        with pytest.raises(TranslationCallError) as exc_info:
            await stream.__anext__()

        assert str(exc_info.value) == "Gemini streaming API call failed: Unavailable (503)"
        assert exc_info.value.status_code == 503
