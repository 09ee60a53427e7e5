"""Ranking criteria repository.

Loads the evaluation rubric the LLM judge scores against from a
well-known document (``<data_dir>/config/ranking-criteria.json``),
falling back to a baked-in default, and renders it into prompt text so
the rubric can change without code changes.
"""

import json
from collections.abc import Mapping
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from lens.ranking.constants import COMPONENT_RANKING
from lens.ranking.models import (
    RankingCriteriaConfig,
    RankingCriterion,
    ScoringGuideline,
)
from lens.ranking.store import LocalTextStore, TextStore
from lens.settings import get_settings
from lens.settings.app import CRITERIA_FILE_NAME


logger = structlog.get_logger()

_YAML_SUFFIXES = (".yaml", ".yml")


class CriteriaConfigError(Exception):
    """Raised when a ranking criteria document cannot be used.

    Attributes:
        errors: Validation error details (``loc``, ``msg``, ``type``).
    """

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


DEFAULT_CRITERIA_CONFIG = RankingCriteriaConfig(
    version="1.0",
    description="Default Lens Engine content ranking criteria",
    criteria=[
        RankingCriterion(
            id="content_quality",
            name="Content Quality",
            description="Is the content well-written, informative, and substantive?",
            weight=8,
        ),
        RankingCriterion(
            id="contextual_relevance",
            name="Contextual Relevance",
            description="How well does this match the current context (day/time/mood)?",
            weight=7,
        ),
        RankingCriterion(
            id="practical_value",
            name="Practical Value",
            description="Does this provide actionable insights or useful information?",
            weight=6,
        ),
        RankingCriterion(
            id="uniqueness",
            name="Uniqueness",
            description="Is this offering new perspectives or just repeating common knowledge?",
            weight=5,
        ),
        RankingCriterion(
            id="reading_time_match",
            name="Reading Time Match",
            description="Does the content depth match the available reading time?",
            weight=4,
        ),
    ],
    scoring_guidelines=[
        ScoringGuideline(
            range="0-2",
            description="Poor quality, clickbait, completely irrelevant, or misleading content",
            examples=["Obvious clickbait", "Factually incorrect", "Spam or promotional"],
        ),
        ScoringGuideline(
            range="3-4",
            description="Low quality but might have minimal interest, repetitive or shallow content",
            examples=["Rehashed content", "Minimal new insights", "Poor writing quality"],
        ),
        ScoringGuideline(
            range="5-6",
            description="Average quality, moderately interesting, standard coverage of topic",
            examples=["Decent article", "Some useful information", "Standard treatment"],
        ),
        ScoringGuideline(
            range="7-8",
            description="High quality, very relevant, valuable insights, well-researched content",
            examples=["Well-researched", "Unique insights", "Highly relevant"],
        ),
        ScoringGuideline(
            range="9-10",
            description="Exceptional quality, must-read content, unique insights, perfect context match",
            examples=["Groundbreaking insights", "Perfect timing", "Life-changing content"],
        ),
    ],
    additional_instructions=[
        "Be honest and critical in your evaluation",
        "Consider the specific context provided when scoring",
        "Provide detailed reasoning that explains your score",
        "Focus on value to the user rather than general quality metrics",
    ],
)

EXAMPLE_COMMENTS: dict[str, str] = {
    "version": "Configuration version for future compatibility",
    "criteria": "List of evaluation criteria - modify weights to prioritize different aspects",
    "scoringGuidelines": "Score ranges and descriptions - customize for your content types",
    "additionalInstructions": "Extra guidance for the AI evaluator",
}


def validate_criteria_config(data: Mapping[str, object]) -> RankingCriteriaConfig:
    """Validate a parsed criteria document.

    Args:
        data: Parsed document.

    Returns:
        Validated, immutable criteria configuration.

    Raises:
        CriteriaConfigError: If required fields are missing or malformed.
    """
    try:
        return RankingCriteriaConfig.model_validate(data)
    except ValidationError as exc:
        errors = [
            {
                "loc": ".".join(str(loc) for loc in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        details = "; ".join(f"{e['loc'] or '<root>'}: {e['msg']}" for e in errors)
        msg = f"Invalid ranking criteria: {details}"
        raise CriteriaConfigError(msg, errors) from exc


def parse_criteria_document(raw: str, path: Path) -> dict[str, object]:
    """Parse a criteria document as YAML or JSON based on its suffix.

    Args:
        raw: Document text.
        path: Document path; ``.yaml``/``.yml`` select YAML.

    Returns:
        Parsed mapping.

    Raises:
        CriteriaConfigError: If the text cannot be parsed into a mapping.
    """
    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            parsed = yaml.safe_load(raw)
        else:
            parsed = json.loads(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"Could not parse {path.name}: {exc}"
        raise CriteriaConfigError(msg) from exc

    if not isinstance(parsed, dict):
        msg = f"Criteria document must be an object, got {type(parsed).__name__}"
        raise CriteriaConfigError(msg)
    return parsed


def load_ranking_criteria(
    verbose: bool = False,
    *,
    path: Path | None = None,
    store: TextStore | None = None,
    strict: bool | None = None,
) -> RankingCriteriaConfig:
    """Load the ranking criteria, falling back to the default rubric.

    A missing document silently yields the default. A document that
    cannot be read, parsed or validated is rejected: by default a warning
    is logged and the default is used; in strict mode the failure is
    raised so operators notice the mistake.

    Args:
        verbose: Log progress at info level instead of debug.
        path: Document path; the settings' well-known path when None.
        store: Text store; the local filesystem when None.
        strict: Raise instead of falling back on unusable documents.
            Uses ``LENS_CRITERIA_STRICT`` when None.

    Returns:
        The custom criteria if valid, otherwise the default.

    Raises:
        CriteriaConfigError: In strict mode, if the document is unusable.
    """
    log = logger.bind(component=COMPONENT_RANKING, subcomponent="criteria")
    emit = log.info if verbose else log.debug

    if path is None or strict is None:
        try:
            settings = get_settings()
        except ValidationError as exc:
            if strict:
                msg = f"Failed to load settings for criteria: {exc}"
                raise CriteriaConfigError(msg) from exc
            log.warning("criteria_settings_unavailable", error=str(exc))
            if path is None:
                return DEFAULT_CRITERIA_CONFIG
            strict = False
        else:
            path = path or settings.criteria_path
            strict = settings.criteria_strict if strict is None else strict

    store = store or LocalTextStore()
    emit("criteria_loading", path=str(path))

    try:
        raw = store.read_text(path)
    except FileNotFoundError:
        emit(
            "criteria_not_found_using_defaults",
            path=str(path),
            hint=f"Create {path} to customize ranking criteria",
        )
        return DEFAULT_CRITERIA_CONFIG
    except (OSError, UnicodeDecodeError) as exc:
        return _reject(CriteriaConfigError(f"Could not read {path}: {exc}"), path, strict, log)

    try:
        criteria = validate_criteria_config(parse_criteria_document(raw, path))
    except CriteriaConfigError as exc:
        return _reject(exc, path, strict, log)

    emit(
        "criteria_loaded",
        path=str(path),
        description=criteria.description or "Custom criteria",
        version=criteria.version,
        criteria_count=len(criteria.criteria),
        guideline_count=len(criteria.scoring_guidelines),
    )
    return criteria


def _reject(
    error: CriteriaConfigError,
    path: Path,
    strict: bool,
    log: structlog.stdlib.BoundLogger,
) -> RankingCriteriaConfig:
    """Raise in strict mode, otherwise warn and return the default."""
    if strict:
        log.error("criteria_load_failed", path=str(path), error=str(error))
        raise error
    log.warning(
        "criteria_load_failed_using_defaults",
        path=str(path),
        error=str(error),
        errors=error.errors,
    )
    return DEFAULT_CRITERIA_CONFIG


def generate_criteria_prompt_text(criteria: RankingCriteriaConfig) -> str:
    """Render a rubric as prompt text.

    Args:
        criteria: Rubric to render.

    Returns:
        Numbered criteria, scoring guideline bullets and, when present,
        additional guideline bullets.
    """
    lines = ["Evaluation Criteria:"]
    lines.extend(
        f"{index}. {criterion.name}: {criterion.description}"
        for index, criterion in enumerate(criteria.criteria, 1)
    )

    lines.extend(["", "Scoring Guidelines:"])
    lines.extend(
        f"- {guideline.range}: {guideline.description}"
        for guideline in criteria.scoring_guidelines
    )

    if criteria.additional_instructions:
        lines.extend(["", "Additional Guidelines:"])
        lines.extend(f"- {instruction}" for instruction in criteria.additional_instructions)

    return "\n".join(lines) + "\n"


def create_example_criteria_config(
    data_dir: Path,
    *,
    store: TextStore | None = None,
) -> Path:
    """Write the default rubric with documentation for customization.

    Args:
        data_dir: Application data directory.
        store: Text store; the local filesystem when None.

    Returns:
        Path of the written document.
    """
    store = store or LocalTextStore()
    criteria_path = Path(data_dir) / "config" / CRITERIA_FILE_NAME

    example = DEFAULT_CRITERIA_CONFIG.model_copy(
        update={
            "description": "Example custom ranking criteria - modify to suit your preferences",
            "comments": EXAMPLE_COMMENTS,
        }
    )
    content = json.dumps(
        example.model_dump(mode="json", by_alias=True, exclude_none=True),
        indent=2,
    )
    store.write_text(criteria_path, content + "\n")

    logger.bind(component=COMPONENT_RANKING, subcomponent="criteria").info(
        "criteria_example_created", path=str(criteria_path)
    )
    return criteria_path
