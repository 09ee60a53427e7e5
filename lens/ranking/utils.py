"""Helpers for inspecting, summarising and ordering ranking results."""

import statistics
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeGuard, TypeVar, assert_never

from lens.ranking.constants import HIGH_INTEREST_THRESHOLD, MAYBE_INTERESTING_THRESHOLD
from lens.ranking.models import (
    RankingErrorData,
    RankingResult,
    RelevanceCategory,
    ScoringResult,
)


T = TypeVar("T")

_TOP_RESULTS = 5
_SHOWN_ERRORS = 3
_REASONING_PREVIEW = 80
_RULE = "=" * 42


def is_ranking_error(result: RankingResult) -> TypeGuard[RankingErrorData]:
    """Whether the result is an error."""
    return result.kind == "error"


def is_scoring_result(result: RankingResult) -> TypeGuard[ScoringResult]:
    """Whether the result is a successful score."""
    return result.kind == "score"


def match_result(
    result: RankingResult,
    on_score: Callable[[ScoringResult], T],
    on_error: Callable[[RankingErrorData], T],
) -> T:
    """Dispatch on the result variant.

    Args:
        result: Result to inspect.
        on_score: Called with a successful result.
        on_error: Called with an error result.

    Returns:
        Whatever the selected callback returns.
    """
    match result:
        case ScoringResult():
            return on_score(result)
        case RankingErrorData():
            return on_error(result)
        case _:
            assert_never(result)


def get_successful_results(results: Sequence[RankingResult]) -> list[ScoringResult]:
    """Successful results in input order."""
    return [result for result in results if is_scoring_result(result)]


def get_error_results(results: Sequence[RankingResult]) -> list[RankingErrorData]:
    """Error results in input order."""
    return [result for result in results if is_ranking_error(result)]


def categorize_relevance(score: float) -> RelevanceCategory:
    """Bucket a final score: 7 and up is high interest, 4 and up maybe, else skip."""
    if score >= HIGH_INTEREST_THRESHOLD:
        return RelevanceCategory.HIGH_INTEREST
    if score >= MAYBE_INTERESTING_THRESHOLD:
        return RelevanceCategory.MAYBE_INTERESTING
    return RelevanceCategory.SKIP


@dataclass(frozen=True)
class RankingStats:
    """Summary statistics over a batch of results.

    Score and confidence figures cover successful results only and are 0
    when there are none.
    """

    total_articles: int
    successful_rankings: int
    error_count: int
    average_score: float
    median_score: float
    high_interest_count: int
    maybe_interesting_count: int
    skip_count: int
    average_confidence: float


def calculate_ranking_stats(results: Sequence[RankingResult]) -> RankingStats:
    """Compute summary statistics for a batch.

    Args:
        results: Results returned by a batch ranking.

    Returns:
        RankingStats for the batch.
    """
    successful = get_successful_results(results)
    scores = [result.score for result in successful]
    confidences = [result.confidence for result in successful]
    categories = [categorize_relevance(score) for score in scores]

    return RankingStats(
        total_articles=len(results),
        successful_rankings=len(successful),
        error_count=len(results) - len(successful),
        average_score=statistics.fmean(scores) if scores else 0.0,
        median_score=statistics.median(scores) if scores else 0.0,
        high_interest_count=categories.count(RelevanceCategory.HIGH_INTEREST),
        maybe_interesting_count=categories.count(RelevanceCategory.MAYBE_INTERESTING),
        skip_count=categories.count(RelevanceCategory.SKIP),
        average_confidence=statistics.fmean(confidences) if confidences else 0.0,
    )


def sort_by_score(results: Sequence[RankingResult]) -> list[RankingResult]:
    """Highest score first; errors go last in their original order."""
    return sorted(
        results,
        key=lambda result: (0, -result.score) if is_scoring_result(result) else (1, 0.0),
    )


def filter_by_score(results: Sequence[RankingResult], min_score: float) -> list[ScoringResult]:
    """Successful results scoring at least ``min_score``."""
    return [result for result in get_successful_results(results) if result.score >= min_score]


def filter_by_category(
    results: Sequence[RankingResult], category: RelevanceCategory
) -> list[ScoringResult]:
    """Successful results whose score falls in ``category``."""
    return [
        result
        for result in get_successful_results(results)
        if categorize_relevance(result.score) == category
    ]


def format_ranking_results(results: Sequence[RankingResult]) -> str:
    """Render a plain-text summary of a batch.

    Includes overall statistics, the score distribution, the five best
    articles and the first three errors.

    Args:
        results: Results returned by a batch ranking.

    Returns:
        Multi-line summary text.
    """
    stats = calculate_ranking_stats(results)
    successful = get_successful_results(results)
    errors = get_error_results(results)

    lines = [
        "Ranking Results Summary",
        _RULE,
        f"Total Articles: {stats.total_articles}",
        f"Successful Rankings: {stats.successful_rankings}",
        f"Errors: {stats.error_count}",
        f"Average Score: {stats.average_score:.2f}",
        f"Median Score: {stats.median_score:.2f}",
        f"Average Confidence: {stats.average_confidence:.2f}",
        "",
        "Score Distribution",
        _RULE,
        f"High Interest (7-10): {stats.high_interest_count}",
        f"Maybe Interesting (4-6): {stats.maybe_interesting_count}",
        f"Skip (0-3): {stats.skip_count}",
    ]

    if successful:
        lines.extend(["", "Top Ranked Articles", _RULE])
        for index, result in enumerate(sort_by_score(successful)[:_TOP_RESULTS], 1):
            title = result.input.title
            reasoning = (result.reasoning or "")[:_REASONING_PREVIEW]
            lines.append(
                f"{index}. [{categorize_relevance(result.score).value}] "
                f"{result.score:.1f} {title} - {reasoning}"
            )

    if errors:
        lines.extend(["", "Errors", _RULE])
        for index, error in enumerate(errors[:_SHOWN_ERRORS], 1):
            lines.append(f"{index}. {error.type.value}: {error.message}")
        if len(errors) > _SHOWN_ERRORS:
            lines.append(f"... and {len(errors) - _SHOWN_ERRORS} more errors")

    return "\n".join(lines) + "\n"
