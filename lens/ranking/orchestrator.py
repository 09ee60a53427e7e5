"""Ranking orchestrator.

Validates inputs, resolves the ranking criteria once per batch, scores
articles in fixed-size concurrent windows and applies contextual
adjustments. Failures are returned as ``RankingErrorData`` values at the
index of the article that produced them.
"""

import asyncio
import dataclasses
import math
from collections.abc import Callable, Iterable
from enum import Enum
from urllib.parse import urlsplit

import structlog

from lens.features.llm import TextGenerator, create_text_generator
from lens.observability import batch_log_context
from lens.ranking.constants import COMPONENT_RANKING, VALID_URL_SCHEMES, WINDOW_DELAY_SECONDS
from lens.ranking.context_ranker import calculate_contextual_adjustments, clamp_score
from lens.ranking.criteria import load_ranking_criteria
from lens.ranking.llm_ranker import LlmRanker
from lens.ranking.metrics import RankingMetrics
from lens.ranking.models import (
    ArticleInput,
    ContextFactors,
    DayOfWeek,
    LlmScoringRequest,
    RankingContext,
    RankingCriteriaConfig,
    RankingError,
    RankingErrorData,
    RankingErrorType,
    RankingOptions,
    RankingResult,
    ReadingDuration,
    ScoringResult,
    TimeOfDay,
    UserMood,
)
from lens.settings import get_settings


logger = structlog.get_logger()

CriteriaLoader = Callable[[], RankingCriteriaConfig]


class CriteriaCache:
    """Memoised ranking criteria with a single in-flight load.

    Concurrent callers share one load; the loader runs in a worker thread
    so file I/O does not block the event loop. A failed load is not
    cached, so the next call retries.
    """

    def __init__(self, loader: CriteriaLoader) -> None:
        self._loader = loader
        self._value: RankingCriteriaConfig | None = None
        self._pending: asyncio.Task[RankingCriteriaConfig] | None = None
        self._generation = 0

    @property
    def cached(self) -> RankingCriteriaConfig | None:
        """Currently cached criteria, if loaded."""
        return self._value

    async def get(self) -> RankingCriteriaConfig:
        """Return the cached criteria, loading them on first use.

        Raises:
            Exception: Whatever the loader raises.
        """
        while True:
            if self._value is not None:
                return self._value

            generation = self._generation
            pending = self._pending
            if pending is None or pending.get_loop() is not asyncio.get_running_loop():
                pending = asyncio.create_task(asyncio.to_thread(self._loader))
                self._pending = pending

            try:
                value = await asyncio.shield(pending)
            finally:
                if pending.done() and self._pending is pending:
                    self._pending = None

            # A load that started before invalidate() may hold stale criteria
            if generation == self._generation:
                self._value = value
                return value

    def invalidate(self) -> None:
        """Drop the cached criteria so the next call reloads them.

        Loads already in flight are discarded rather than cached.
        """
        self._generation += 1
        self._value = None
        self._pending = None


def _is_member(enum_type: type[Enum], value: object, *, optional: bool = False) -> bool:
    if value is None:
        return optional
    try:
        enum_type(value)
    except ValueError:
        return False
    return True


def _is_non_blank(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_valid_url(url: object) -> bool:
    if not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme in VALID_URL_SCHEMES and bool(parts.netloc)


class ContentRanker:
    """Ranks articles for a reading context with an LLM judge.

    ``rank_article`` never raises; every failure comes back as a
    ``RankingErrorData`` value. ``rank_batch`` keeps its output aligned with
    its input and raises only when a window fails as a whole while
    ``continue_on_error`` is disabled.
    """

    def __init__(
        self,
        generator: TextGenerator | None = None,
        options: RankingOptions | None = None,
        *,
        criteria_loader: CriteriaLoader | None = None,
        metrics: RankingMetrics | None = None,
        window_delay: float = WINDOW_DELAY_SECONDS,
    ) -> None:
        """Initialize the ranker.

        Args:
            generator: Text generation capability; built from settings when None.
            options: Default options for every call. The timeout defaults
                to the ``LLM_TIMEOUT`` setting unless set explicitly.
            criteria_loader: Criteria source; the criteria repository when None.
            metrics: Optional metrics instance.
            window_delay: Pause in seconds between windows.
        """
        if options is None or "timeout" not in options.model_fields_set:
            options = RankingOptions(timeout=get_settings().llm_timeout).merged_with(options)
        self._options = options
        self._metrics = metrics or RankingMetrics.get_instance()
        self._llm_ranker = LlmRanker(
            generator or create_text_generator(),
            timeout=self._options.timeout,
            metrics=self._metrics,
        )
        self._criteria = CriteriaCache(criteria_loader or load_ranking_criteria)
        self._window_delay = window_delay
        self._log = logger.bind(component=COMPONENT_RANKING, subcomponent="orchestrator")

    @property
    def options(self) -> RankingOptions:
        """Default options applied to every call."""
        return self._options

    def validate_article(self, article: ArticleInput) -> bool:
        """Check title, summary and URL are usable.

        Args:
            article: Article to check.

        Returns:
            True if title and summary are non-blank and the URL is an
            absolute http(s) URL.
        """
        return (
            _is_non_blank(article.title)
            and _is_non_blank(article.summary)
            and _is_valid_url(article.url)
        )

    def validate_context(self, context: RankingContext) -> bool:
        """Check every context field is a known value; mood and duration may be unset."""
        return (
            _is_member(DayOfWeek, context.day_of_week)
            and _is_member(TimeOfDay, context.time_of_day)
            and _is_member(UserMood, context.user_mood, optional=True)
            and _is_member(ReadingDuration, context.reading_duration, optional=True)
        )

    def invalidate_criteria_cache(self) -> None:
        """Forget the cached criteria so edits are picked up on the next call."""
        self._criteria.invalidate()
        self._log.info("criteria_cache_invalidated")

    async def rank_article(
        self,
        article: ArticleInput,
        context: RankingContext,
        options: RankingOptions | None = None,
    ) -> RankingResult:
        """Rank one article.

        Args:
            article: Article to rank.
            context: Reading context.
            options: Per-call overrides of the default options.

        Returns:
            ScoringResult on success, RankingErrorData otherwise.
        """
        merged = self._options.merged_with(options)
        try:
            criteria = await self._resolve_criteria(merged)
        except Exception as exc:
            self._log.error("ranking_criteria_unavailable", error=str(exc))
            return self._record(self._config_error(exc, article, context))

        return self._record(await self._rank_with_criteria(article, context, merged, criteria))

    async def rank_batch(
        self,
        articles: Iterable[ArticleInput],
        context: RankingContext,
        options: RankingOptions | None = None,
    ) -> list[RankingResult]:
        """Rank many articles in concurrent windows.

        Args:
            articles: Articles to rank.
            context: Reading context shared by every article.
            options: Per-call overrides of the default options.

        Returns:
            One result per article, in input order.

        Raises:
            Exception: A window-level failure when ``continue_on_error`` is False.
        """
        merged = self._options.merged_with(options)
        articles = list(articles)
        self._metrics.record_articles_in(len(articles))
        with batch_log_context(len(articles)):
            return await self._rank_all(articles, context, merged)

    async def _rank_all(
        self,
        articles: list[ArticleInput],
        context: RankingContext,
        merged: RankingOptions,
    ) -> list[RankingResult]:
        log = self._log

        try:
            criteria = await self._resolve_criteria(merged)
        except Exception as exc:
            log.error("ranking_criteria_unavailable", error=str(exc))
            return [
                self._record(self._config_error(exc, article, context)) for article in articles
            ]

        window_size = merged.max_batch_size
        total_windows = math.ceil(len(articles) / window_size)
        log.info(
            "ranking_batch_started",
            window_size=window_size,
            windows=total_windows,
            criteria_version=criteria.version,
        )

        results: list[RankingResult] = []
        for number, start in enumerate(range(0, len(articles), window_size), 1):
            window = articles[start : start + window_size]
            try:
                window_results = await self._rank_window(window, context, merged, criteria)
            except Exception as exc:
                if not merged.continue_on_error:
                    log.error("ranking_window_failed", window=number, error=str(exc))
                    raise
                log.warning(
                    "ranking_window_failed_retrying_sequentially",
                    window=number,
                    error=str(exc),
                )
                self._metrics.record_sequential_fallback()
                window_results = await self._rank_sequentially(window, context, merged, criteria)

            results.extend(self._record(result) for result in window_results)
            self._metrics.record_window()

            errors = sum(1 for result in window_results if result.kind == "error")
            log.info(
                "ranking_window_completed",
                window=number,
                windows=total_windows,
                successful=len(window_results) - errors,
                errors=errors,
            )

            if start + window_size < len(articles):
                await asyncio.sleep(self._window_delay)

        log.info(
            "ranking_batch_completed",
            successful=sum(1 for result in results if result.kind == "score"),
            errors=sum(1 for result in results if result.kind == "error"),
        )
        return results

    async def _resolve_criteria(self, options: RankingOptions) -> RankingCriteriaConfig:
        if options.criteria_config is not None:
            return options.criteria_config

        first_load = self._criteria.cached is None
        criteria = await self._criteria.get()
        if first_load:
            self._log.info(
                "criteria_resolved",
                description=criteria.description or "Default criteria",
                version=criteria.version,
                criteria_count=len(criteria.criteria),
                guideline_count=len(criteria.scoring_guidelines),
            )
        return criteria

    async def _rank_window(
        self,
        window: list[ArticleInput],
        context: RankingContext,
        options: RankingOptions,
        criteria: RankingCriteriaConfig,
    ) -> list[RankingResult]:
        """Score a window concurrently; remaining tasks are cancelled on failure."""
        tasks = [
            asyncio.create_task(self._rank_with_criteria(article, context, options, criteria))
            for article in window
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _rank_sequentially(
        self,
        window: list[ArticleInput],
        context: RankingContext,
        options: RankingOptions,
        criteria: RankingCriteriaConfig,
    ) -> list[RankingResult]:
        """Score a window one article at a time, capturing each failure."""
        results: list[RankingResult] = []
        for article in window:
            try:
                result = await self._rank_with_criteria(article, context, options, criteria)
            except Exception as exc:
                self._log.warning(
                    "individual_ranking_failed",
                    title=article.title[:60] if isinstance(article.title, str) else None,
                    error=str(exc),
                )
                result = RankingErrorData(
                    type=RankingErrorType.CONTEXT_ERROR,
                    message=f"Individual ranking failed: {exc}",
                    input=article,
                    context=context,
                )
            results.append(result)
        return results

    async def _rank_with_criteria(
        self,
        article: ArticleInput,
        context: RankingContext,
        options: RankingOptions,
        criteria: RankingCriteriaConfig,
    ) -> RankingResult:
        try:
            return await self._score(article, context, options, criteria)
        except RankingError as exc:
            return exc.to_data()
        except Exception as exc:
            self._log.warning("ranking_unexpected_error", error=str(exc))
            return RankingErrorData(
                type=RankingErrorType.CONTEXT_ERROR,
                message=f"Ranking failed: {exc}",
                input=article,
                context=context,
            )

    async def _score(
        self,
        article: ArticleInput,
        context: RankingContext,
        options: RankingOptions,
        criteria: RankingCriteriaConfig,
    ) -> ScoringResult:
        if not self.validate_article(article):
            msg = "Invalid article input: title, summary, and valid URL are required"
            raise RankingError(RankingErrorType.INVALID_INPUT, msg, article, context)
        if not self.validate_context(context):
            msg = "Invalid ranking context: invalid day, time, mood, or duration"
            raise RankingError(RankingErrorType.INVALID_INPUT, msg, article, context)

        base = await self._llm_ranker.score_article(
            LlmScoringRequest(article=article, context=context, criteria_config=criteria),
            timeout=options.timeout,
        )

        score = base.score
        context_factors = None
        if options.enable_context_adjustments:
            adjustments = calculate_contextual_adjustments(context, article)
            score = clamp_score(base.score + adjustments.total)
            context_factors = ContextFactors(
                day_of_week_adjustment=adjustments.day_of_week,
                time_of_day_adjustment=adjustments.time_of_day,
                mood_alignment=adjustments.mood,
                total_adjustment=score - base.score,
            )

        if base.confidence < options.confidence_threshold:
            self._log.warning(
                "low_confidence_score",
                confidence=base.confidence,
                threshold=options.confidence_threshold,
                title=article.title[:60],
            )

        return dataclasses.replace(base, score=score, context_factors=context_factors)

    @staticmethod
    def _config_error(
        exc: Exception, article: ArticleInput, context: RankingContext
    ) -> RankingErrorData:
        return RankingErrorData(
            type=RankingErrorType.CONFIG_ERROR,
            message=f"Failed to load ranking criteria: {exc}",
            input=article,
            context=context,
        )

    def _record(self, result: RankingResult) -> RankingResult:
        match result:
            case ScoringResult():
                self._metrics.record_scored()
            case RankingErrorData(type=error_type):
                self._metrics.record_error(error_type.value)
        return result
