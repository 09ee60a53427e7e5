"""Data models for the content ranking core.

Inputs (articles and reading context) and outputs (scores and errors) are
frozen dataclasses. The criteria rubric and ranking options are validated
Pydantic models because they arrive from user-editable documents and
caller-supplied overrides.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import Field, model_validator

from lens.data_model import StrictBaseModel
from lens.ranking.constants import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_MAX_BATCH_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
)


class DayOfWeek(str, Enum):
    """Day of the week the reader is browsing on."""

    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"


class TimeOfDay(str, Enum):
    """Coarse time-of-day bucket."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class UserMood(str, Enum):
    """Reader's self-reported mood."""

    FOCUSED = "focused"
    CASUAL = "casual"
    LEARNING = "learning"
    ENTERTAINMENT = "entertainment"


class ReadingDuration(str, Enum):
    """Reading time budget."""

    QUICK = "quick"
    MEDIUM = "medium"
    DEEP = "deep"


class RankingErrorType(str, Enum):
    """Discriminant for ranking failures.

    INVALID_INPUT: Structural validation failed; no LLM call was made.
    LLM_ERROR: Transport failure, unsuccessful payload, or unparseable text.
    CONTEXT_ERROR: Unexpected defect while processing one article.
    TIMEOUT: The scoring deadline expired before the LLM answered.
    CONFIG_ERROR: The ranking criteria could not be loaded.
    """

    INVALID_INPUT = "invalid_input"
    LLM_ERROR = "llm_error"
    CONTEXT_ERROR = "context_error"
    TIMEOUT = "timeout"
    CONFIG_ERROR = "config_error"


class ScoringMethod(str, Enum):
    """How a score was produced. Only LLM scoring exists today."""

    LLM = "llm"
    EMBEDDING = "embedding"
    HYBRID = "hybrid"


class RelevanceCategory(str, Enum):
    """Coarse relevance bucket derived from a final score."""

    HIGH_INTEREST = "high-interest"
    MAYBE_INTERESTING = "maybe-interesting"
    SKIP = "skip"


@dataclass(frozen=True)
class ArticleInput:
    """An article to be scored.

    Produced upstream (feed parsing, summarization) and never mutated by
    the ranking core. Construction performs no validation; see
    ``ContentRanker.validate_article``.

    Attributes:
        title: Article title.
        summary: Article summary text.
        url: Canonical article URL.
        published_at: Publication timestamp if known.
        source: Feed or site name if known.
        categories: Feed-supplied category labels.
    """

    title: str
    summary: str
    url: str
    published_at: datetime | None = None
    source: str | None = None
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class RankingContext:
    """Situational frame a ranking request is evaluated against.

    Attributes:
        day_of_week: Day the reader is browsing on.
        time_of_day: Time-of-day bucket.
        user_mood: Optional reader mood.
        reading_duration: Optional reading time budget.
    """

    day_of_week: DayOfWeek
    time_of_day: TimeOfDay
    user_mood: UserMood | None = None
    reading_duration: ReadingDuration | None = None


class RankingCriterion(StrictBaseModel):
    """A single evaluation criterion of the rubric.

    Attributes:
        id: Unique identifier for the criterion.
        name: Display name.
        description: Question the judge should answer.
        weight: Optional importance from 1 to 10.
    """

    id: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1)]
    description: Annotated[str, Field(min_length=1)]
    weight: Annotated[float, Field(ge=1, le=10)] | None = None

    @model_validator(mode="after")
    def validate_fields_not_blank(self) -> "RankingCriterion":
        """Ensure id, name and description contain non-whitespace text."""
        for field_name in ("id", "name", "description"):
            if not getattr(self, field_name).strip():
                msg = f"Criterion {field_name} must be a non-empty string"
                raise ValueError(msg)
        return self


class ScoringGuideline(StrictBaseModel):
    """Description of one score band.

    Attributes:
        range: Score range label such as ``"7-8"``.
        description: What content in this band looks like.
        examples: Optional short examples.
    """

    range: Annotated[str, Field(min_length=1)]
    description: Annotated[str, Field(min_length=1)]
    examples: list[str] | None = None

    @model_validator(mode="after")
    def validate_fields_not_blank(self) -> "ScoringGuideline":
        """Ensure range and description contain non-whitespace text."""
        if not self.range.strip() or not self.description.strip():
            msg = "Scoring guideline range and description must be non-empty"
            raise ValueError(msg)
        return self


class RankingCriteriaConfig(StrictBaseModel):
    """Root configuration for the ranking criteria document.

    Attributes:
        version: Document version.
        description: Human-readable description of this rubric.
        criteria: Ordered evaluation criteria (at least 1).
        scoring_guidelines: Ordered score bands (at least 1).
        additional_instructions: Extra guidance for the judge.
        comments: Free-form documentation, ignored by ranking.
    """

    version: Annotated[str, Field(min_length=1)]
    description: str | None = None
    criteria: Annotated[list[RankingCriterion], Field(min_length=1)]
    scoring_guidelines: Annotated[
        list[ScoringGuideline], Field(min_length=1, alias="scoringGuidelines")
    ]
    additional_instructions: list[str] | None = Field(
        default=None, alias="additionalInstructions"
    )
    comments: dict[str, str] | None = Field(default=None, alias="_comments")


class RankingOptions(StrictBaseModel):
    """Options controlling a ranking call.

    Attributes:
        timeout: Seconds to wait for a single LLM scoring call.
        confidence_threshold: Confidence below which a warning is logged.
        enable_context_adjustments: Whether to apply contextual deltas.
        max_batch_size: Articles scored concurrently per window.
        continue_on_error: Fall back to sequential scoring when a window
            fails as a whole instead of failing the batch.
        criteria_config: Rubric override; never cached.
    """

    timeout: Annotated[float, Field(gt=0)] = DEFAULT_TIMEOUT_SECONDS
    confidence_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = (
        DEFAULT_CONFIDENCE_THRESHOLD
    )
    enable_context_adjustments: bool = True
    max_batch_size: Annotated[int, Field(gt=0)] = DEFAULT_MAX_BATCH_SIZE
    continue_on_error: bool = True
    criteria_config: RankingCriteriaConfig | None = None

    def merged_with(self, override: "RankingOptions | None") -> "RankingOptions":
        """Return a copy with the fields the override set explicitly.

        Args:
            override: Per-call options; only explicitly set fields apply.

        Returns:
            Merged options.
        """
        if override is None:
            return self
        update = {name: getattr(override, name) for name in override.model_fields_set}
        return self.model_copy(update=update)


@dataclass(frozen=True)
class ContextualAdjustments:
    """Per-axis score deltas from the contextual rule tables.

    Attributes:
        day_of_week: Delta from the day-of-week table.
        time_of_day: Delta from the time-of-day table.
        mood: Delta from the mood table.
    """

    day_of_week: int = 0
    time_of_day: int = 0
    mood: int = 0

    @property
    def total(self) -> int:
        """Sum of the three axis deltas."""
        return self.day_of_week + self.time_of_day + self.mood


@dataclass(frozen=True)
class ContextFactors:
    """Decomposed contextual adjustment recorded on a result.

    Attributes:
        day_of_week_adjustment: Day-of-week delta.
        time_of_day_adjustment: Time-of-day delta.
        mood_alignment: Mood delta.
        total_adjustment: Delta actually applied after clamping to 0..10.
    """

    day_of_week_adjustment: float = 0.0
    time_of_day_adjustment: float = 0.0
    mood_alignment: float = 0.0
    total_adjustment: float = 0.0


@dataclass(frozen=True)
class LlmScoringRequest:
    """Input to the LLM scoring adapter."""

    article: ArticleInput
    context: RankingContext
    criteria_config: RankingCriteriaConfig | None = None


@dataclass(frozen=True)
class LlmScoringResponse:
    """Normalised fields parsed from the judge's free-text answer."""

    score: float
    reasoning: str
    categories: tuple[str, ...]
    estimated_read_time: float


@dataclass(frozen=True)
class ScoringResult:
    """Successful ranking of one article.

    Attributes:
        score: Final score from 0 to 10.
        confidence: Confidence from 0 to 1.
        method: How the score was produced.
        input: The article this result belongs to.
        reasoning: Judge's explanation.
        categories: Up to five topic labels.
        estimated_read_time: Minutes, 1 to 60.
        context_factors: Applied contextual deltas, when enabled.
        kind: Union tag, always ``"score"``.
    """

    score: float
    confidence: float
    method: ScoringMethod
    input: ArticleInput
    reasoning: str | None = None
    categories: tuple[str, ...] | None = None
    estimated_read_time: float | None = None
    context_factors: ContextFactors | None = None
    kind: Literal["score"] = field(default="score", init=False)


@dataclass(frozen=True)
class RankingErrorData:
    """Failed ranking of one article, returned as data.

    Attributes:
        type: Failure discriminant.
        message: Human-readable description.
        input: The article that failed, when known.
        context: The context it was ranked against, when known.
        kind: Union tag, always ``"error"``.
    """

    type: RankingErrorType
    message: str
    input: ArticleInput | None = None
    context: RankingContext | None = None
    kind: Literal["error"] = field(default="error", init=False)


RankingResult = ScoringResult | RankingErrorData


class RankingError(Exception):
    """Typed ranking failure raised inside the core.

    The orchestrator converts it to ``RankingErrorData`` so callers never
    see it escape ``rank_article``.

    Attributes:
        type: Failure discriminant.
        input: The article being ranked.
        context: The ranking context.
    """

    def __init__(
        self,
        error_type: RankingErrorType,
        message: str,
        input: ArticleInput | None = None,  # noqa: A002
        context: RankingContext | None = None,
    ) -> None:
        super().__init__(message)
        self.type = error_type
        self.message = message
        self.input = input
        self.context = context

    def to_data(self) -> RankingErrorData:
        """Convert the exception into its value form."""
        return RankingErrorData(
            type=self.type,
            message=self.message,
            input=self.input,
            context=self.context,
        )
