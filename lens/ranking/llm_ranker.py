"""LLM scoring adapter.

Turns an article and its reading context into a rubric-aware prompt,
asks the text generation capability for a judgement, and normalises the
free-text answer into a ``ScoringResult``. The call is bounded by a
deadline; on expiry the in-flight generation is cancelled.
"""

import asyncio
import math
import time

import structlog

from lens.features.llm import (
    GenerationOptions,
    LlmProcessingError,
    TextGenerator,
)
from lens.features.llm.json_utils import (
    extract_first_json_object,
    strip_markdown_fences,
    try_parse_json_object,
)
from lens.features.llm.prompts import build_ranking_prompt
from lens.ranking.constants import (
    COMPONENT_RANKING,
    DEFAULT_CONFIDENCE,
    DEFAULT_READ_TIME,
    DEFAULT_REASONING,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_CATEGORIES,
    MAX_READ_TIME,
    MAX_SCORE,
    MIN_READ_TIME,
    MIN_SCORE,
    SCORING_TEMPERATURE,
)
from lens.ranking.criteria import DEFAULT_CRITERIA_CONFIG, generate_criteria_prompt_text
from lens.ranking.metrics import RankingMetrics
from lens.ranking.models import (
    LlmScoringRequest,
    LlmScoringResponse,
    RankingError,
    RankingErrorType,
    ScoringMethod,
    ScoringResult,
)


logger = structlog.get_logger()


def _to_number(value: object) -> float:
    """Coerce a JSON value to a float; NaN when it is not numeric."""
    if isinstance(value, int | float):
        try:
            return float(value)
        except OverflowError:
            # Integers beyond float range saturate like an IEEE conversion
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def normalize_score(value: object) -> float:
    """Coerce to a number and clamp to 0-10; non-numeric becomes 0."""
    score = _to_number(value)
    if math.isnan(score):
        return MIN_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, score))


def normalize_categories(value: object) -> tuple[str, ...]:
    """Keep non-empty string labels, at most five."""
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item)[:MAX_CATEGORIES]


def normalize_read_time(value: object) -> float:
    """Coerce to minutes and clamp to 1-60; missing or non-positive becomes 5."""
    minutes = _to_number(value)
    if math.isnan(minutes) or minutes <= 0:
        return DEFAULT_READ_TIME
    return max(MIN_READ_TIME, min(MAX_READ_TIME, minutes))


def normalize_reasoning(value: object) -> str:
    """Use the reasoning text if present, otherwise a placeholder."""
    if isinstance(value, str) and value:
        return value
    return DEFAULT_REASONING


def parse_ranking_response(text: str) -> LlmScoringResponse:
    """Parse the judge's free-text answer.

    Args:
        text: Raw model output that should embed a JSON object.

    Returns:
        Normalised scoring fields.

    Raises:
        LlmProcessingError: If no JSON object can be extracted.
    """
    json_text = extract_first_json_object(strip_markdown_fences(text))
    if json_text is None:
        msg = "Failed to parse LLM response: No JSON found in response"
        raise LlmProcessingError(msg)

    parsed = try_parse_json_object(json_text)
    if parsed is None:
        msg = "Failed to parse LLM response: Invalid JSON object"
        raise LlmProcessingError(msg)

    return LlmScoringResponse(
        score=normalize_score(parsed.get("score")),
        reasoning=normalize_reasoning(parsed.get("reasoning")),
        categories=normalize_categories(parsed.get("categories")),
        estimated_read_time=normalize_read_time(parsed.get("estimatedReadTime")),
    )


def build_prompt_variables(request: LlmScoringRequest) -> dict[str, str]:
    """Template variables describing the article and the reading context."""
    article = request.article
    context = request.context

    def _value(item: object) -> str:
        return str(getattr(item, "value", item))

    return {
        "title": article.title,
        "summary": article.summary,
        "source": article.source or "Unknown",
        "published_at": article.published_at.date().isoformat()
        if article.published_at
        else "Unknown",
        "day_of_week": _value(context.day_of_week),
        "time_of_day": _value(context.time_of_day),
        "user_mood": _value(context.user_mood) if context.user_mood else "neutral",
        "reading_duration": _value(context.reading_duration)
        if context.reading_duration
        else "medium",
    }


class LlmRanker:
    """Scores single articles with an LLM judge.

    Confidence is a fixed placeholder until a response-quality signal
    exists. No retries happen at this level.
    """

    def __init__(
        self,
        generator: TextGenerator,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        temperature: float = SCORING_TEMPERATURE,
        metrics: RankingMetrics | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            generator: Text generation capability.
            timeout: Default scoring deadline in seconds.
            temperature: Sampling temperature for the judge.
            metrics: Optional metrics instance.
        """
        self._generator = generator
        self._timeout = timeout
        self._options = GenerationOptions(temperature=temperature)
        self._metrics = metrics or RankingMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_RANKING, subcomponent="llm_ranker")

    async def score_article(
        self,
        request: LlmScoringRequest,
        *,
        timeout: float | None = None,
    ) -> ScoringResult:
        """Score one article.

        Args:
            request: Article, context and optional rubric override.
            timeout: Deadline in seconds; the adapter default when None.

        Returns:
            Unadjusted ScoringResult.

        Raises:
            RankingError: ``timeout`` when the deadline expires, ``llm_error``
                for transport, payload or parsing failures.
        """
        deadline = self._timeout if timeout is None else timeout
        criteria = request.criteria_config or DEFAULT_CRITERIA_CONFIG
        prompt = build_ranking_prompt(generate_criteria_prompt_text(criteria))
        variables = build_prompt_variables(request)
        log = self._log.bind(title=request.article.title[:60])

        log.debug("llm_scoring_started", timeout_s=deadline)
        start = time.perf_counter()
        try:
            generation = await asyncio.wait_for(
                self._generator.generate(prompt, variables, self._options),
                timeout=deadline,
            )
        except TimeoutError as exc:
            log.warning("llm_scoring_timeout", timeout_s=deadline)
            msg = f"LLM ranking timeout after {deadline}s"
            raise RankingError(
                RankingErrorType.TIMEOUT, msg, request.article, request.context
            ) from exc
        except Exception as exc:
            log.warning("llm_scoring_failed", error=str(exc))
            msg = f"LLM scoring failed: {exc}"
            raise RankingError(
                RankingErrorType.LLM_ERROR, msg, request.article, request.context
            ) from exc
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self._metrics.record_llm_duration(duration_ms)

        if not generation.success or generation.content is None:
            error = generation.error or "Unknown error"
            log.warning("llm_generation_unsuccessful", error=error)
            raise RankingError(
                RankingErrorType.LLM_ERROR,
                f"LLM scoring failed: {error}",
                request.article,
                request.context,
            )

        try:
            parsed = parse_ranking_response(generation.content)
        except LlmProcessingError as exc:
            log.warning("llm_response_unparseable", error=str(exc))
            raise RankingError(
                RankingErrorType.LLM_ERROR,
                f"LLM scoring failed: {exc}",
                request.article,
                request.context,
            ) from exc

        log.debug(
            "llm_scoring_completed",
            score=parsed.score,
            duration_ms=round(duration_ms, 1),
        )
        return ScoringResult(
            score=parsed.score,
            confidence=DEFAULT_CONFIDENCE,
            method=ScoringMethod.LLM,
            input=request.article,
            reasoning=parsed.reasoning,
            categories=parsed.categories,
            estimated_read_time=parsed.estimated_read_time,
        )
