"""Text generation capability used by the ranking adapter."""

from lens.features.llm.errors import LlmApiError, LlmProcessingError
from lens.features.llm.factory import create_text_generator
from lens.features.llm.models import GenerationOptions, GenerationResult
from lens.features.llm.ollama_client import OllamaClient
from lens.features.llm.protocols import TextGenerator


__all__ = [
    "GenerationOptions",
    "GenerationResult",
    "LlmApiError",
    "LlmProcessingError",
    "OllamaClient",
    "TextGenerator",
    "create_text_generator",
]
