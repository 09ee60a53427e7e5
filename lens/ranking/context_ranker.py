"""Deterministic contextual score adjustments.

The LLM judge is non-deterministic; this layer is not. Each of three axes
(day of week, time of day, mood) contributes an integer delta looked up
in a static rule table keyed by (axis value, content type). The summed
delta is added to the base score and clamped to the 0-10 scale, so
re-running an adjustment is always safe.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from lens.ranking.constants import MAX_SCORE, MIN_SCORE
from lens.ranking.content_types import ContentType, classify_content
from lens.ranking.models import (
    ArticleInput,
    ContextualAdjustments,
    DayOfWeek,
    RankingContext,
    TimeOfDay,
    UserMood,
)


@dataclass(frozen=True)
class AdjustmentRule:
    """One entry of a rule table.

    Attributes:
        axis_value: Day, time-of-day or mood value the rule applies to.
        content_type: Content type that triggers the rule.
        delta: Score delta contributed when triggered.
    """

    axis_value: Enum
    content_type: ContentType
    delta: int


class RuleTable:
    """Rule table keyed by (axis value, content type).

    Rules for one axis value are kept in declaration order; the first
    rule whose content type is present supplies that axis' delta.
    """

    def __init__(self, name: str, rules: Iterable[AdjustmentRule]) -> None:
        """Build the table.

        Args:
            name: Axis name, for diagnostics.
            rules: Rules in priority order.

        Raises:
            ValueError: If the same (axis value, content type) appears twice.
        """
        self.name = name
        deltas: dict[tuple[Enum, ContentType], int] = {}
        priority: dict[Enum, list[ContentType]] = {}
        for rule in rules:
            key = (rule.axis_value, rule.content_type)
            if key in deltas:
                msg = f"Duplicate {name} rule for {rule.axis_value.value}/{rule.content_type.value}"
                raise ValueError(msg)
            deltas[key] = rule.delta
            priority.setdefault(rule.axis_value, []).append(rule.content_type)
        self._deltas = MappingProxyType(deltas)
        self._priority = MappingProxyType(
            {value: tuple(types) for value, types in priority.items()}
        )

    def lookup(self, axis_value: Enum, content_type: ContentType) -> int:
        """Delta for a single combination; 0 when no rule exists."""
        return self._deltas.get((axis_value, content_type), 0)

    def delta_for(self, axis_value: Enum | None, content_types: frozenset[ContentType]) -> int:
        """Delta for an axis value given all of an article's content types.

        Args:
            axis_value: Axis value, or None when the axis is unset.
            content_types: Content types of the article.

        Returns:
            Delta of the first matching rule, or 0.
        """
        if axis_value is None:
            return 0
        for content_type in self._priority.get(axis_value, ()):
            if content_type in content_types:
                return self.lookup(axis_value, content_type)
        return 0


def _rules(axis_value: Enum, *pairs: tuple[ContentType, int]) -> list[AdjustmentRule]:
    return [AdjustmentRule(axis_value, content_type, delta) for content_type, delta in pairs]


DAY_OF_WEEK_RULES = RuleTable(
    "day_of_week",
    [
        *_rules(
            DayOfWeek.SUNDAY,
            (ContentType.LIFESTYLE, 2),
            (ContentType.ENTERTAINMENT, 2),
            (ContentType.PERSONAL_DEVELOPMENT, 2),
        ),
        *_rules(
            DayOfWeek.MONDAY,
            (ContentType.INDUSTRY_NEWS, 2),
            (ContentType.PROFESSIONAL_DEVELOPMENT, 2),
            (ContentType.PLANNING, 2),
        ),
        *_rules(
            DayOfWeek.FRIDAY,
            (ContentType.CREATIVE, 1),
            (ContentType.HEAVY_TECHNICAL, -1),
        ),
        *_rules(DayOfWeek.SATURDAY, (ContentType.URGENT_BUSINESS, -1)),
    ],
)

TIME_OF_DAY_RULES = RuleTable(
    "time_of_day",
    [
        *_rules(
            TimeOfDay.MORNING,
            (ContentType.ACTIONABLE, 1),
            (ContentType.NEWS, 1),
            (ContentType.PLANNING, 1),
        ),
        *_rules(
            TimeOfDay.EVENING,
            (ContentType.EDUCATIONAL, 1),
            (ContentType.TUTORIAL, 1),
            (ContentType.REFLECTIVE, 1),
        ),
        *_rules(
            TimeOfDay.NIGHT,
            (ContentType.ENTERTAINMENT, 2),
            (ContentType.LIGHT_READING, 2),
            (ContentType.WORK, -2),
        ),
    ],
)

MOOD_RULES = RuleTable(
    "mood",
    [
        *_rules(
            UserMood.FOCUSED,
            (ContentType.TECHNICAL, 2),
            (ContentType.TUTORIAL, 2),
            (ContentType.ANALYSIS, 2),
        ),
        *_rules(
            UserMood.CASUAL,
            (ContentType.NEWS, 1),
            (ContentType.ENTERTAINMENT, 1),
            (ContentType.LIGHT_READING, 1),
        ),
        *_rules(
            UserMood.LEARNING,
            (ContentType.EDUCATIONAL, 3),
            (ContentType.TUTORIAL, 3),
            (ContentType.HOW_TO, 3),
        ),
        *_rules(
            UserMood.ENTERTAINMENT,
            (ContentType.HUMOR, 2),
            (ContentType.STORY, 2),
            (ContentType.INTERESTING_FACTS, 2),
        ),
    ],
)


def _coerce(enum_type: type[Enum], value: object) -> Enum | None:
    """Accept enum members or their raw string values."""
    if value is None:
        return None
    try:
        return enum_type(value)
    except ValueError:
        return None


def calculate_contextual_adjustments(
    context: RankingContext,
    article: ArticleInput,
) -> ContextualAdjustments:
    """Compute the per-axis deltas for an article in a context.

    Args:
        context: Reading context.
        article: Article being ranked.

    Returns:
        ContextualAdjustments with one delta per axis.
    """
    content_types = classify_content(article)
    return ContextualAdjustments(
        day_of_week=DAY_OF_WEEK_RULES.delta_for(
            _coerce(DayOfWeek, context.day_of_week), content_types
        ),
        time_of_day=TIME_OF_DAY_RULES.delta_for(
            _coerce(TimeOfDay, context.time_of_day), content_types
        ),
        mood=MOOD_RULES.delta_for(_coerce(UserMood, context.user_mood), content_types),
    )


def clamp_score(score: float) -> float:
    """Clamp a score to the 0-10 scale; NaN becomes 0."""
    if math.isnan(score):
        return MIN_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, score))


def apply_contextual_adjustments(
    base_score: float,
    context: RankingContext,
    article: ArticleInput,
) -> float:
    """Add the contextual delta to a base score and clamp to 0-10.

    Args:
        base_score: Score before adjustment; may lie outside 0-10.
        context: Reading context.
        article: Article being ranked.

    Returns:
        Adjusted score within 0-10.
    """
    adjustments = calculate_contextual_adjustments(context, article)
    return clamp_score(base_score + adjustments.total)
