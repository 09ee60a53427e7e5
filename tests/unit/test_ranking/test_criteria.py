"""Unit tests for the ranking criteria repository."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from lens.ranking.criteria import (
    DEFAULT_CRITERIA_CONFIG,
    CriteriaConfigError,
    create_example_criteria_config,
    generate_criteria_prompt_text,
    load_ranking_criteria,
    validate_criteria_config,
)
from lens.ranking.models import RankingCriteriaConfig
from lens.ranking.store import LocalTextStore
from lens.settings import AppSettings


def _make_document(**overrides: object) -> dict[str, object]:
    """Create a valid criteria document."""
    document: dict[str, object] = {
        "version": "2.0",
        "description": "Tech focus",
        "criteria": [
            {
                "id": "depth",
                "name": "Depth",
                "description": "Does it go beyond the headline?",
                "weight": 9,
            }
        ],
        "scoringGuidelines": [
            {"range": "0-5", "description": "Shallow"},
            {"range": "6-10", "description": "Deep", "examples": ["Benchmarks"]},
        ],
        "additionalInstructions": ["Prefer primary sources"],
    }
    document.update(overrides)
    return document


def _write(path: Path, document: object) -> Path:
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


class FailingStore:
    """Store whose reads fail with a permission error."""

    def read_text(self, path: Path) -> str:
        msg = f"Permission denied: {path}"
        raise PermissionError(msg)

    def write_text(self, path: Path, content: str) -> None:
        raise NotImplementedError


class TestDefaultCriteria:
    """Tests for the baked-in rubric."""

    @pytest.mark.unit
    def test_default_shape(self) -> None:
        """Five criteria, five bands and four instructions."""
        assert len(DEFAULT_CRITERIA_CONFIG.criteria) == 5
        assert [g.range for g in DEFAULT_CRITERIA_CONFIG.scoring_guidelines] == [
            "0-2",
            "3-4",
            "5-6",
            "7-8",
            "9-10",
        ]
        assert len(DEFAULT_CRITERIA_CONFIG.additional_instructions or []) == 4

    @pytest.mark.unit
    def test_default_is_immutable(self) -> None:
        """The shared default cannot be modified in place."""
        with pytest.raises(ValueError):
            DEFAULT_CRITERIA_CONFIG.version = "9"  # type: ignore[misc]


class TestValidateCriteriaConfig:
    """Tests for structural validation."""

    @pytest.mark.unit
    def test_valid_document(self) -> None:
        """camelCase keys map to the model fields."""
        config = validate_criteria_config(_make_document())

        assert config.version == "2.0"
        assert config.scoring_guidelines[1].examples == ["Benchmarks"]
        assert config.additional_instructions == ["Prefer primary sources"]

    @pytest.mark.unit
    def test_missing_criteria_lists_field(self) -> None:
        """Missing required fields are reported by name."""
        document = _make_document()
        del document["criteria"]

        with pytest.raises(CriteriaConfigError, match="criteria") as exc_info:
            validate_criteria_config(document)

        assert any(error["loc"] == "criteria" for error in exc_info.value.errors)

    @pytest.mark.unit
    def test_empty_criteria_rejected(self) -> None:
        """At least one criterion is required."""
        with pytest.raises(CriteriaConfigError):
            validate_criteria_config(_make_document(criteria=[]))

    @pytest.mark.unit
    def test_blank_criterion_name_rejected(self) -> None:
        """Whitespace-only criterion fields are rejected."""
        criteria = [{"id": "x", "name": "   ", "description": "d"}]

        with pytest.raises(CriteriaConfigError):
            validate_criteria_config(_make_document(criteria=criteria))

    @pytest.mark.unit
    def test_weight_out_of_range_rejected(self) -> None:
        """Weights must lie between 1 and 10."""
        criteria = [{"id": "x", "name": "X", "description": "d", "weight": 11}]

        with pytest.raises(CriteriaConfigError, match="weight"):
            validate_criteria_config(_make_document(criteria=criteria))

    @pytest.mark.unit
    def test_empty_guidelines_rejected(self) -> None:
        """At least one scoring guideline is required."""
        with pytest.raises(CriteriaConfigError):
            validate_criteria_config(_make_document(scoringGuidelines=[]))

    @pytest.mark.unit
    def test_comments_accepted(self) -> None:
        """The _comments documentation mapping is allowed."""
        config = validate_criteria_config(_make_document(_comments={"version": "v"}))

        assert config.comments == {"version": "v"}


class TestLoadRankingCriteria:
    """Tests for load_ranking_criteria."""

    @pytest.mark.unit
    def test_missing_file_returns_default(self, tmp_path: Path) -> None:
        """An absent document silently yields the default rubric."""
        config = load_ranking_criteria(path=tmp_path / "absent.json", strict=True)

        assert config is DEFAULT_CRITERIA_CONFIG

    @pytest.mark.unit
    def test_valid_file_loaded(self, tmp_path: Path) -> None:
        """A valid document replaces the default."""
        path = _write(tmp_path / "criteria.json", _make_document())

        config = load_ranking_criteria(path=path, strict=False)

        assert config.version == "2.0"
        assert config.criteria[0].id == "depth"

    @pytest.mark.unit
    def test_yaml_file_loaded(self, tmp_path: Path) -> None:
        """Documents with a YAML suffix are parsed as YAML."""
        path = tmp_path / "criteria.yaml"
        path.write_text(
            "version: '3'\n"
            "criteria:\n"
            "  - id: fun\n"
            "    name: Fun\n"
            "    description: Is it enjoyable?\n"
            "scoringGuidelines:\n"
            "  - range: 0-10\n"
            "    description: Anything goes\n",
            encoding="utf-8",
        )

        config = load_ranking_criteria(path=path, strict=True)

        assert config.version == "3"
        assert config.additional_instructions is None

    @pytest.mark.unit
    def test_missing_criteria_falls_back_by_default(self, tmp_path: Path) -> None:
        """An invalid document is rejected in favour of the default."""
        document = _make_document()
        del document["criteria"]
        path = _write(tmp_path / "criteria.json", document)

        config = load_ranking_criteria(path=path, strict=False)

        assert config is DEFAULT_CRITERIA_CONFIG

    @pytest.mark.unit
    def test_missing_criteria_raises_in_strict_mode(self, tmp_path: Path) -> None:
        """Strict mode surfaces invalid documents."""
        document = _make_document()
        del document["criteria"]
        path = _write(tmp_path / "criteria.json", document)

        with pytest.raises(CriteriaConfigError, match="criteria"):
            load_ranking_criteria(path=path, strict=True)

    @pytest.mark.unit
    def test_malformed_json_falls_back(self, tmp_path: Path) -> None:
        """Unparseable text yields the default when not strict."""
        path = tmp_path / "criteria.json"
        path.write_text("{not json", encoding="utf-8")

        assert load_ranking_criteria(path=path, strict=False) is DEFAULT_CRITERIA_CONFIG

    @pytest.mark.unit
    def test_non_object_document_raises_in_strict_mode(self, tmp_path: Path) -> None:
        """A JSON array is not a criteria document."""
        path = _write(tmp_path / "criteria.json", [1, 2, 3])

        with pytest.raises(CriteriaConfigError, match="must be an object"):
            load_ranking_criteria(path=path, strict=True)

    @pytest.mark.unit
    def test_read_failure_falls_back(self, tmp_path: Path) -> None:
        """Read errors other than absence are rejected like invalid documents."""
        config = load_ranking_criteria(
            path=tmp_path / "criteria.json", store=FailingStore(), strict=False
        )

        assert config is DEFAULT_CRITERIA_CONFIG

    @pytest.mark.unit
    def test_read_failure_raises_in_strict_mode(self, tmp_path: Path) -> None:
        """Strict mode reports read errors."""
        with pytest.raises(CriteriaConfigError, match="Could not read"):
            load_ranking_criteria(
                path=tmp_path / "criteria.json", store=FailingStore(), strict=True
            )

    @pytest.mark.unit
    def test_path_and_strictness_from_settings(self, tmp_path: Path) -> None:
        """Without arguments the settings' data directory and strictness apply."""
        settings = AppSettings(LENS_DATA_DIR=tmp_path, LENS_CRITERIA_STRICT=True)
        settings.criteria_path.parent.mkdir(parents=True)
        _write(settings.criteria_path, {"version": "1"})

        with (
            patch("lens.ranking.criteria.get_settings", return_value=settings),
            pytest.raises(CriteriaConfigError),
        ):
            load_ranking_criteria()

    @pytest.mark.unit
    def test_settings_failure_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A broken environment yields the default rubric."""
        monkeypatch.setenv("LLM_TIMEOUT", "not-a-number")

        assert load_ranking_criteria() is DEFAULT_CRITERIA_CONFIG


class TestGenerateCriteriaPromptText:
    """Tests for rubric rendering."""

    @pytest.mark.unit
    def test_exact_format(self) -> None:
        """Numbered criteria, guideline bullets and instruction bullets."""
        config = validate_criteria_config(_make_document())

        assert generate_criteria_prompt_text(config) == (
            "Evaluation Criteria:\n"
            "1. Depth: Does it go beyond the headline?\n"
            "\n"
            "Scoring Guidelines:\n"
            "- 0-5: Shallow\n"
            "- 6-10: Deep\n"
            "\n"
            "Additional Guidelines:\n"
            "- Prefer primary sources\n"
        )

    @pytest.mark.unit
    def test_instructions_section_omitted_when_empty(self) -> None:
        """No Additional Guidelines header without instructions."""
        config = validate_criteria_config(_make_document(additionalInstructions=[]))

        assert "Additional Guidelines" not in generate_criteria_prompt_text(config)

    @pytest.mark.unit
    def test_default_rendering_mentions_every_criterion(self) -> None:
        """Every default criterion appears in order."""
        text = generate_criteria_prompt_text(DEFAULT_CRITERIA_CONFIG)

        assert text.startswith("Evaluation Criteria:\n1. Content Quality: ")
        assert "5. Reading Time Match: " in text
        assert "- 9-10: Exceptional quality" in text


class TestCreateExampleCriteriaConfig:
    """Tests for writing the example document."""

    @pytest.mark.unit
    def test_writes_loadable_document(self, tmp_path: Path) -> None:
        """The example lands at the well-known path and loads back."""
        path = create_example_criteria_config(tmp_path)

        assert path == tmp_path / "config" / "ranking-criteria.json"
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["description"].startswith("Example custom ranking criteria")
        assert set(document["_comments"]) == {
            "version",
            "criteria",
            "scoringGuidelines",
            "additionalInstructions",
        }

        loaded = load_ranking_criteria(path=path, store=LocalTextStore(), strict=True)
        assert isinstance(loaded, RankingCriteriaConfig)
        assert loaded.criteria == DEFAULT_CRITERIA_CONFIG.criteria
