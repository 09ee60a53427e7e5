"""Data models for text generation requests and responses."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call generation settings.

    Attributes:
        model: Model override; the client's configured model when None.
        temperature: Sampling temperature.
    """

    model: str | None = None
    temperature: float = 0.3


@dataclass(frozen=True)
class GenerationResult:
    """Best-effort outcome of a text generation call.

    Transport and API failures are reported with ``success=False`` and an
    ``error`` message rather than raised.

    Attributes:
        success: Whether the model produced text.
        content: Generated text when successful.
        error: Failure description when unsuccessful.
        metadata: Provider details such as model name and duration.
    """

    success: bool
    content: str | None = None
    error: str | None = None
    metadata: dict[str, object] = field(default_factory=dict)
