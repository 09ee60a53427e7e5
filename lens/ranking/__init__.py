"""Content ranking for RSS articles.

Scores article summaries for one reader at one moment (day, time, mood,
reading budget) using an LLM judge, nudged by deterministic contextual
rules. Offers a functional API (``rank_content``, ``rank_article``) and
the class-based ``ContentRanker``.
"""

from collections.abc import Iterable
from datetime import datetime

from lens.features.llm import TextGenerator
from lens.ranking.content_types import ContentType, classify_content
from lens.ranking.context_ranker import (
    apply_contextual_adjustments,
    calculate_contextual_adjustments,
)
from lens.ranking.criteria import (
    DEFAULT_CRITERIA_CONFIG,
    CriteriaConfigError,
    create_example_criteria_config,
    generate_criteria_prompt_text,
    load_ranking_criteria,
    validate_criteria_config,
)
from lens.ranking.metrics import RankingMetrics
from lens.ranking.models import (
    ArticleInput,
    ContextFactors,
    DayOfWeek,
    RankingContext,
    RankingCriteriaConfig,
    RankingError,
    RankingErrorData,
    RankingErrorType,
    RankingOptions,
    RankingResult,
    ReadingDuration,
    RelevanceCategory,
    ScoringMethod,
    ScoringResult,
    TimeOfDay,
    UserMood,
)
from lens.ranking.orchestrator import ContentRanker
from lens.ranking.utils import (
    RankingStats,
    calculate_ranking_stats,
    categorize_relevance,
    filter_by_category,
    filter_by_score,
    format_ranking_results,
    get_error_results,
    get_successful_results,
    is_ranking_error,
    is_scoring_result,
    match_result,
    sort_by_score,
)


_DAY_NAMES = (
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
    DayOfWeek.SUNDAY,
)


async def rank_content(
    articles: Iterable[ArticleInput],
    context: RankingContext,
    options: RankingOptions | None = None,
    *,
    generator: TextGenerator | None = None,
) -> list[RankingResult]:
    """Rank many articles with a fresh ranker.

    Args:
        articles: Articles to rank.
        context: Reading context.
        options: Optional ranking configuration.
        generator: Text generation capability; built from settings when None.

    Returns:
        One result per article, in input order.
    """
    ranker = ContentRanker(generator)
    return await ranker.rank_batch(articles, context, options)


async def rank_article(
    article: ArticleInput,
    context: RankingContext,
    options: RankingOptions | None = None,
    *,
    generator: TextGenerator | None = None,
) -> RankingResult:
    """Rank a single article with a fresh ranker."""
    ranker = ContentRanker(generator)
    return await ranker.rank_article(article, context, options)


def create_current_context(
    user_mood: UserMood | None = None,
    reading_duration: ReadingDuration | None = None,
    *,
    now: datetime | None = None,
) -> RankingContext:
    """Build a context from the local clock.

    Hours 5-11 are morning, 12-16 afternoon, 17-21 evening and the rest
    night.

    Args:
        user_mood: Reader's mood, if known.
        reading_duration: Reading time budget, if known.
        now: Clock override; the current local time when None.

    Returns:
        RankingContext for the moment.
    """
    now = now or datetime.now()
    hour = now.hour
    if 5 <= hour < 12:
        time_of_day = TimeOfDay.MORNING
    elif 12 <= hour < 17:
        time_of_day = TimeOfDay.AFTERNOON
    elif 17 <= hour < 22:
        time_of_day = TimeOfDay.EVENING
    else:
        time_of_day = TimeOfDay.NIGHT

    return RankingContext(
        day_of_week=_DAY_NAMES[now.weekday()],
        time_of_day=time_of_day,
        user_mood=user_mood,
        reading_duration=reading_duration,
    )


__all__ = [
    "DEFAULT_CRITERIA_CONFIG",
    "ArticleInput",
    "ContentRanker",
    "ContentType",
    "ContextFactors",
    "CriteriaConfigError",
    "DayOfWeek",
    "RankingContext",
    "RankingCriteriaConfig",
    "RankingError",
    "RankingErrorData",
    "RankingErrorType",
    "RankingMetrics",
    "RankingOptions",
    "RankingResult",
    "RankingStats",
    "ReadingDuration",
    "RelevanceCategory",
    "ScoringMethod",
    "ScoringResult",
    "TimeOfDay",
    "UserMood",
    "apply_contextual_adjustments",
    "calculate_contextual_adjustments",
    "calculate_ranking_stats",
    "categorize_relevance",
    "classify_content",
    "create_current_context",
    "create_example_criteria_config",
    "filter_by_category",
    "filter_by_score",
    "format_ranking_results",
    "generate_criteria_prompt_text",
    "get_error_results",
    "get_successful_results",
    "is_ranking_error",
    "is_scoring_result",
    "load_ranking_criteria",
    "match_result",
    "rank_article",
    "rank_content",
    "sort_by_score",
    "validate_criteria_config",
]
