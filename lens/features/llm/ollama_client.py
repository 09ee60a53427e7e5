"""Ollama text generation client."""

import asyncio
import random
import time
from collections.abc import Mapping
from http import HTTPStatus

import httpx
import structlog

from lens.features.llm.errors import LlmApiError
from lens.features.llm.models import GenerationOptions, GenerationResult
from lens.features.llm.prompts import SYSTEM_INSTRUCTION, render_template


logger = structlog.get_logger()

_MAX_RETRIES = 2
_RETRY_BASE_DELAY = 1.0  # seconds
_RETRYABLE_STATUS_CODES = {HTTPStatus.TOO_MANY_REQUESTS, HTTPStatus.SERVICE_UNAVAILABLE}


class OllamaClient:
    """Async client for a local or remote Ollama server.

    Implements the ``TextGenerator`` protocol against the non-streaming
    ``/api/generate`` endpoint. Failures are returned as unsuccessful
    ``GenerationResult`` values; cancellation of the awaiting task closes
    the in-flight HTTP request.

    Attributes:
        base_url: Ollama server base URL.
        model: Default model identifier.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.2",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Ollama server base URL.
            model: Default model identifier.
            timeout: HTTP timeout in seconds for a single request.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._timeout = timeout
        self._transport = transport
        self._log = logger.bind(component="llm", subcomponent="ollama")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    def _build_request_body(self, prompt: str, options: GenerationOptions) -> dict[str, object]:
        """Build the /api/generate request body."""
        return {
            "model": options.model or self.model,
            "prompt": prompt,
            "system": SYSTEM_INSTRUCTION,
            "stream": False,
            "options": {"temperature": options.temperature},
        }

    async def generate(
        self,
        prompt: str,
        variables: Mapping[str, str],
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Render the prompt template and generate a completion.

        Args:
            prompt: Prompt template with ``{name}`` placeholders.
            variables: Values for the template placeholders.
            options: Optional per-call generation settings.

        Returns:
            GenerationResult with the generated text or an error message.
        """
        options = options or GenerationOptions()
        request_body = self._build_request_body(render_template(prompt, variables), options)
        start = time.perf_counter()

        try:
            response = await self._retry_loop(request_body)
            content = self._extract_text(response)
        except LlmApiError as exc:
            self._log.warning(
                "ollama_generate_failed",
                error=str(exc),
                status=exc.status_code,
            )
            return GenerationResult(
                success=False,
                error=f"Failed to generate with Ollama: {exc}",
                metadata={"model": request_body["model"]},
            )

        return GenerationResult(
            success=True,
            content=content,
            metadata={
                "model": request_body["model"],
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )

    async def _retry_loop(self, request_body: dict[str, object]) -> httpx.Response:
        """Execute the retry loop for generate requests.

        Returns:
            Successful HTTP response.

        Raises:
            LlmApiError: If the request fails after all retries.
        """
        last_exc: LlmApiError | None = None

        async with self._client() as client:
            for attempt in range(_MAX_RETRIES + 1):
                try:
                    response = await client.post("/api/generate", json=request_body)
                except httpx.HTTPError as exc:
                    msg = f"Ollama request failed: {exc}"
                    raise LlmApiError(msg) from exc

                if response.status_code == HTTPStatus.OK:
                    return response

                if response.status_code in _RETRYABLE_STATUS_CODES and attempt < _MAX_RETRIES:
                    delay = _RETRY_BASE_DELAY * (2**attempt) + random.uniform(0, 0.5)  # noqa: S311
                    self._log.warning(
                        "ollama_retryable_error",
                        status=response.status_code,
                        attempt=attempt + 1,
                        retry_delay=round(delay, 1),
                    )
                    await asyncio.sleep(delay)
                    last_exc = LlmApiError(
                        f"Ollama returned {response.status_code}",
                        status_code=response.status_code,
                    )
                    continue

                msg = f"Ollama returned {response.status_code}"
                raise LlmApiError(msg, status_code=response.status_code)

        raise last_exc or LlmApiError("All retries exhausted")

    @staticmethod
    def _extract_text(response: httpx.Response) -> str:
        """Extract generated text from the API response.

        Raises:
            LlmApiError: If the response is missing expected fields.
        """
        try:
            data = response.json()
        except ValueError as exc:
            msg = f"Ollama returned non-JSON body: {exc}"
            raise LlmApiError(msg) from exc

        text = data.get("response", "") if isinstance(data, dict) else ""
        if not isinstance(text, str) or not text:
            msg = "Empty text in Ollama response"
            raise LlmApiError(msg)
        return text

    async def list_models(self) -> list[str]:
        """List model names available on the server.

        Returns:
            Installed model names.

        Raises:
            LlmApiError: If the server is unreachable or answers with an error.
        """
        async with self._client() as client:
            try:
                response = await client.get("/api/tags")
            except httpx.HTTPError as exc:
                msg = f"Failed to connect to Ollama: {exc}"
                raise LlmApiError(msg) from exc

        if response.status_code != HTTPStatus.OK:
            msg = f"Ollama returned {response.status_code}"
            raise LlmApiError(msg, status_code=response.status_code)

        models = response.json().get("models", [])
        return [str(model["name"]) for model in models if "name" in model]
