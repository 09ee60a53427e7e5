"""Protocol interface for text generation capabilities."""

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from lens.features.llm.models import GenerationOptions, GenerationResult


@runtime_checkable
class TextGenerator(Protocol):
    """Protocol for LLM text completion capabilities.

    Any object implementing ``generate`` with the matching signature can
    back the ranking adapter. Output is free text that may or may not
    embed a JSON object; no schema is enforced at this layer.
    """

    async def generate(
        self,
        prompt: str,
        variables: Mapping[str, str],
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate text from a prompt template.

        Args:
            prompt: Prompt template with ``{name}`` placeholders.
            variables: Values for the template placeholders.
            options: Optional per-call generation settings.

        Returns:
            GenerationResult describing success or failure.
        """
        ...
