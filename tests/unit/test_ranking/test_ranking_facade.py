"""Unit tests for the functional ranking API."""

import asyncio
from datetime import datetime
from unittest.mock import patch

import pytest

from lens.ranking import (
    DEFAULT_CRITERIA_CONFIG,
    DayOfWeek,
    ReadingDuration,
    TimeOfDay,
    UserMood,
    create_current_context,
    rank_article,
    rank_content,
)
from lens.ranking.metrics import RankingMetrics
from tests.helpers.ranking import FakeGenerator, make_article, make_context


class TestCreateCurrentContext:
    """Tests for create_current_context."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("hour", "expected"),
        [
            (5, TimeOfDay.MORNING),
            (11, TimeOfDay.MORNING),
            (12, TimeOfDay.AFTERNOON),
            (16, TimeOfDay.AFTERNOON),
            (17, TimeOfDay.EVENING),
            (21, TimeOfDay.EVENING),
            (22, TimeOfDay.NIGHT),
            (0, TimeOfDay.NIGHT),
            (4, TimeOfDay.NIGHT),
        ],
    )
    def test_time_of_day_buckets(self, hour: int, expected: TimeOfDay) -> None:
        """Hours map to morning, afternoon, evening or night."""
        context = create_current_context(now=datetime(2024, 6, 12, hour, 30))

        assert context.time_of_day == expected

    @pytest.mark.unit
    def test_day_of_week(self) -> None:
        """The weekday name follows the calendar."""
        assert create_current_context(now=datetime(2024, 6, 9, 9)).day_of_week == DayOfWeek.SUNDAY
        assert create_current_context(now=datetime(2024, 6, 10, 9)).day_of_week == DayOfWeek.MONDAY

    @pytest.mark.unit
    def test_mood_and_duration_passed_through(self) -> None:
        """Optional fields are copied verbatim."""
        context = create_current_context(
            UserMood.FOCUSED, ReadingDuration.QUICK, now=datetime(2024, 6, 12, 9)
        )

        assert context.user_mood == UserMood.FOCUSED
        assert context.reading_duration == ReadingDuration.QUICK


class TestFunctionalApi:
    """Tests for rank_content and rank_article."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        RankingMetrics.reset()

    @pytest.mark.unit
    def test_rank_content(self) -> None:
        """Batch ranking through the functional API."""
        generator = FakeGenerator()
        articles = [make_article(title="One"), make_article(title="Two")]

        with patch(
            "lens.ranking.orchestrator.load_ranking_criteria",
            return_value=DEFAULT_CRITERIA_CONFIG,
        ):
            results = asyncio.run(rank_content(articles, make_context(), generator=generator))

        assert [result.kind for result in results] == ["score", "score"]
        assert generator.titles == ["One", "Two"]

    @pytest.mark.unit
    def test_rank_article(self) -> None:
        """Single-article ranking through the functional API."""
        with patch(
            "lens.ranking.orchestrator.load_ranking_criteria",
            return_value=DEFAULT_CRITERIA_CONFIG,
        ):
            result = asyncio.run(
                rank_article(make_article(), make_context(), generator=FakeGenerator())
            )

        assert result.kind == "score"
