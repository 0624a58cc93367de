"""Unit tests for settings and story rules loading."""

from pathlib import Path

from feeled_ai.config import get_story_rules, load_yaml_config
from tests.fakes import make_settings


def test_story_rules_load_from_repo_config() -> None:
    rules = get_story_rules()

    assert "i'm sorry" in rules["refusal_phrases"]
    assert "{tone}" in rules["narration"]["instructions"]
    assert rules["illustration"]["style"]


def test_story_rules_from_custom_directory(tmp_path: Path) -> None:
    (tmp_path / "story_rules.yaml").write_text("refusal_phrases:\n  - nope\n")

    assert get_story_rules(str(tmp_path)) == {"refusal_phrases": ["nope"]}


def test_missing_yaml_is_empty(tmp_path: Path) -> None:
    assert load_yaml_config(tmp_path / "absent.yaml") == {}


def test_settings_defaults() -> None:
    settings = make_settings()

    assert settings.narration_max_characters == 1500
    assert settings.narration_sample_rate_hz == 24000
    assert settings.allow_client_api_keys is True
    assert settings.reload is False
