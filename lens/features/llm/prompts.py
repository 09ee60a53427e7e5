"""Prompt templates for LLM article relevance scoring."""

import re
from collections.abc import Mapping


SYSTEM_INSTRUCTION = (
    "You are a thoughtful personal reading curator. You judge how worthwhile "
    "an article is for one reader at one specific moment, given the day, the "
    "time, their mood, and how much reading time they have. "
    "Respond ONLY with a single JSON object, no markdown fences or extra text."
)

RANK_ARTICLE_TEMPLATE = """## Article
Title: {title}
Source: {source}
Published: {published_at}
Summary: {summary}

## Reader Context
Day of week: {day_of_week}
Time of day: {time_of_day}
Mood: {user_mood}
Available reading time: {reading_duration}

## Instructions
Rate how valuable this article is for the reader right now on a scale from
0 to 10.

Evaluation Criteria:
1. Content Quality: Is the content well-written, informative, and substantive?
2. Contextual Relevance: How well does this match the current context?
3. Practical Value: Does this provide actionable insights or useful information?

Response Format:
Respond with a JSON object with exactly these fields:
- "score": number from 0 to 10
- "reasoning": two or three sentences explaining the score
- "categories": up to 5 short topic labels
- "estimatedReadTime": estimated reading time in minutes (1-60)

Example:
{"score": 7, "reasoning": "Well-researched overview with practical takeaways.", "categories": ["technology", "productivity"], "estimatedReadTime": 8}
"""

_CRITERIA_SECTION = re.compile(r"Evaluation Criteria:[\s\S]*?(?=Response Format:)")
_PLACEHOLDER = re.compile(r"\{([a-z_]+)\}")


def build_ranking_prompt(criteria_text: str, template: str = RANK_ARTICLE_TEMPLATE) -> str:
    """Splice rendered ranking criteria into the prompt template.

    The template's hardcoded ``Evaluation Criteria:`` section, up to
    ``Response Format:``, is replaced with ``criteria_text``.

    Args:
        criteria_text: Rubric rendered by the criteria repository.
        template: Prompt template containing an evaluation criteria section.

    Returns:
        Prompt template with the rubric in place.
    """
    replacement = criteria_text.rstrip("\n") + "\n\n"
    return _CRITERIA_SECTION.sub(lambda _match: replacement, template, count=1)


def render_template(template: str, variables: Mapping[str, str]) -> str:
    """Substitute ``{name}`` placeholders that have a supplied value.

    Unknown placeholders and any other braces (such as the JSON example)
    are left untouched, so rubric text may contain braces freely.

    Args:
        template: Prompt template.
        variables: Placeholder values keyed by name.

    Returns:
        Rendered prompt text.
    """

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in variables:
            return str(variables[name])
        return match.group(0)

    return _PLACEHOLDER.sub(_substitute, template)
