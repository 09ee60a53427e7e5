"""Factory for creating text generation clients from settings."""

import structlog

from lens.features.llm.ollama_client import OllamaClient
from lens.features.llm.protocols import TextGenerator
from lens.settings import AppSettings, get_settings


logger = structlog.get_logger()


def create_text_generator(settings: AppSettings | None = None) -> TextGenerator:
    """Create the configured text generation client.

    Args:
        settings: Application settings; loaded from the environment when None.

    Returns:
        A TextGenerator implementation ready for use.
    """
    settings = settings or get_settings()
    logger.bind(component="llm", subcomponent="factory").info(
        "text_generator_created",
        provider="ollama",
        base_url=settings.ollama_base_url,
        model=settings.llm_model,
    )
    return OllamaClient(
        base_url=settings.ollama_base_url,
        model=settings.llm_model,
        # Leave headroom so the ranking deadline, not httpx, decides timeouts
        timeout=settings.llm_timeout * 2,
    )
