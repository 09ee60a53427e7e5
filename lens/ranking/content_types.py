"""Keyword-based content type classification.

A coarse bias signal for the contextual adjustment engine:
substring matching against a static keyword table, with no weighting
and no stemming.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from lens.ranking.models import ArticleInput


class ContentType(str, Enum):
    """Coarse content type tags."""

    LIFESTYLE = "lifestyle"
    ENTERTAINMENT = "entertainment"
    PERSONAL_DEVELOPMENT = "personal_development"
    INDUSTRY_NEWS = "industry_news"
    PROFESSIONAL_DEVELOPMENT = "professional_development"
    PLANNING = "planning"
    CREATIVE = "creative"
    HEAVY_TECHNICAL = "heavy_technical"
    URGENT_BUSINESS = "urgent_business"
    ACTIONABLE = "actionable"
    NEWS = "news"
    EDUCATIONAL = "educational"
    TUTORIAL = "tutorial"
    REFLECTIVE = "reflective"
    LIGHT_READING = "light_reading"
    WORK = "work"
    TECHNICAL = "technical"
    ANALYSIS = "analysis"
    HOW_TO = "how_to"
    HUMOR = "humor"
    STORY = "story"
    INTERESTING_FACTS = "interesting_facts"


CONTENT_TYPE_KEYWORDS: Mapping[ContentType, tuple[str, ...]] = MappingProxyType(
    {
        ContentType.LIFESTYLE: (
            "lifestyle", "health", "fitness", "food", "recipe", "travel", "home", "family",
        ),
        ContentType.ENTERTAINMENT: (
            "entertainment", "movie", "music", "game", "celebrity", "art", "culture",
        ),
        ContentType.PERSONAL_DEVELOPMENT: (
            "personal", "development", "self-help", "productivity", "mindfulness", "career",
        ),
        ContentType.INDUSTRY_NEWS: (
            "industry", "business", "market", "economy", "company", "startup", "funding",
        ),
        ContentType.PROFESSIONAL_DEVELOPMENT: (
            "professional", "skill", "training", "certification", "leadership", "management",
        ),
        ContentType.PLANNING: (
            "plan", "strategy", "goal", "roadmap", "schedule", "organization",
        ),
        ContentType.CREATIVE: (
            "creative", "design", "art", "writing", "photography", "innovation",
        ),
        ContentType.HEAVY_TECHNICAL: (
            "algorithm", "architecture", "system", "database", "performance", "optimization",
        ),
        ContentType.URGENT_BUSINESS: (
            "breaking", "urgent", "crisis", "emergency", "market crash", "stock",
        ),
        ContentType.ACTIONABLE: (
            "how to", "guide", "tutorial", "step", "actionable", "practical",
        ),
        ContentType.NEWS: ("news", "update", "announcement", "report", "breaking"),
        ContentType.EDUCATIONAL: (
            "education", "learn", "course", "lesson", "knowledge", "understanding",
        ),
        ContentType.TUTORIAL: ("tutorial", "how-to", "guide", "walkthrough", "instruction"),
        ContentType.REFLECTIVE: (
            "reflection", "thought", "opinion", "perspective", "insight", "philosophy",
        ),
        ContentType.LIGHT_READING: (
            "light", "casual", "fun", "interesting", "story", "anecdote",
        ),
        ContentType.WORK: (
            "work", "business", "professional", "corporate", "meeting", "deadline",
        ),
        ContentType.TECHNICAL: (
            "technical", "programming", "code", "software", "development", "engineering",
        ),
        ContentType.ANALYSIS: (
            "analysis", "research", "study", "data", "statistics", "deep dive",
        ),
        ContentType.HOW_TO: ("how to", "guide", "instructions", "steps", "method"),
        ContentType.HUMOR: ("humor", "funny", "comedy", "joke", "satire", "amusing"),
        ContentType.STORY: ("story", "narrative", "tale", "experience", "journey"),
        ContentType.INTERESTING_FACTS: (
            "fact", "trivia", "interesting", "surprising", "did you know",
        ),
    }
)


def article_text(article: ArticleInput) -> str:
    """Lowercased categories, title and summary joined for matching."""
    return " ".join([*article.categories, article.title, article.summary]).lower()


def classify_content(article: ArticleInput) -> frozenset[ContentType]:
    """Tag an article with every content type whose keywords it mentions.

    Args:
        article: Article to classify.

    Returns:
        Set of matching content types, possibly empty.
    """
    text = article_text(article)
    return frozenset(
        content_type
        for content_type, keywords in CONTENT_TYPE_KEYWORDS.items()
        if any(keyword in text for keyword in keywords)
    )
