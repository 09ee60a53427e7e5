"""Unit tests for the Ollama text generation client."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from lens.features.llm import GenerationOptions, LlmApiError, OllamaClient, TextGenerator


def _make_client(handler, model: str = "llama3.2") -> OllamaClient:  # type: ignore[no-untyped-def]
    return OllamaClient(
        base_url="http://ollama.test/",
        model=model,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class TestGenerate:
    """Tests for OllamaClient.generate."""

    @pytest.mark.unit
    def test_implements_protocol(self) -> None:
        """The client satisfies the TextGenerator protocol."""
        assert isinstance(_make_client(lambda request: httpx.Response(200)), TextGenerator)

    @pytest.mark.unit
    def test_success_renders_variables(self) -> None:
        """Placeholders are filled and the completion text returned."""
        seen: list[dict[str, object]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"response": '{"score": 7}'})

        result = asyncio.run(
            _make_client(handler).generate(
                'Title: {title}\nExample: {"score": 1}',
                {"title": "Hello"},
                GenerationOptions(temperature=0.3),
            )
        )

        assert result.success
        assert result.content == '{"score": 7}'
        assert result.metadata["model"] == "llama3.2"
        body = seen[0]
        assert body["prompt"] == 'Title: Hello\nExample: {"score": 1}'
        assert body["stream"] is False
        assert body["model"] == "llama3.2"
        assert body["options"] == {"temperature": 0.3}

    @pytest.mark.unit
    def test_model_override(self) -> None:
        """Per-call options can select another model."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content)["model"])
            return httpx.Response(200, json={"response": "ok"})

        asyncio.run(
            _make_client(handler).generate("p", {}, GenerationOptions(model="mistral"))
        )

        assert seen == ["mistral"]

    @pytest.mark.unit
    def test_server_error_returned_as_failure(self) -> None:
        """Non-retryable errors become unsuccessful results."""
        result = asyncio.run(
            _make_client(lambda request: httpx.Response(500)).generate("p", {})
        )

        assert not result.success
        assert result.error == "Failed to generate with Ollama: Ollama returned 500"

    @pytest.mark.unit
    def test_connection_error_returned_as_failure(self) -> None:
        """Transport failures become unsuccessful results."""

        def handler(request: httpx.Request) -> httpx.Response:
            msg = "connection refused"
            raise httpx.ConnectError(msg, request=request)

        result = asyncio.run(_make_client(handler).generate("p", {}))

        assert not result.success
        assert "connection refused" in (result.error or "")

    @pytest.mark.unit
    def test_empty_response_text_is_failure(self) -> None:
        """A body without text is treated as a failure."""
        result = asyncio.run(
            _make_client(lambda request: httpx.Response(200, json={"done": True})).generate(
                "p", {}
            )
        )

        assert not result.success
        assert "Empty text" in (result.error or "")

    @pytest.mark.unit
    @patch("lens.features.llm.ollama_client.asyncio.sleep", new_callable=AsyncMock)
    def test_retries_on_503(self, mock_sleep: AsyncMock) -> None:
        """Retryable statuses are retried with backoff."""
        statuses = iter([503, 429, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            status = next(statuses)
            if status == 200:
                return httpx.Response(200, json={"response": "done"})
            return httpx.Response(status)

        result = asyncio.run(_make_client(handler).generate("p", {}))

        assert result.success
        assert result.content == "done"
        assert mock_sleep.await_count == 2

    @pytest.mark.unit
    @patch("lens.features.llm.ollama_client.asyncio.sleep", new_callable=AsyncMock)
    def test_retries_exhausted(self, mock_sleep: AsyncMock) -> None:
        """Persistent 503s end in a failure after the retry budget."""
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(503)

        result = asyncio.run(_make_client(handler).generate("p", {}))

        assert not result.success
        assert len(calls) == 3
        assert mock_sleep.await_count == 2


class TestListModels:
    """Tests for OllamaClient.list_models."""

    @pytest.mark.unit
    def test_lists_names(self) -> None:
        """Model names are read from /api/tags."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/tags"
            return httpx.Response(200, json={"models": [{"name": "llama3.2"}, {"size": 1}]})

        assert asyncio.run(_make_client(handler).list_models()) == ["llama3.2"]

    @pytest.mark.unit
    def test_error_status_raises(self) -> None:
        """Error statuses raise LlmApiError with the status code."""
        client = _make_client(lambda request: httpx.Response(404))

        with pytest.raises(LlmApiError) as exc_info:
            asyncio.run(client.list_models())

        assert exc_info.value.status_code == 404
