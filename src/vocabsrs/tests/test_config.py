"""Tests for configuration settings."""
import pytest

from vocabsrs.config import (
    REPETITION_INTERVALS,
    LearningSettings,
    Settings,
    ensure_directories,
    parse_intervals,
    settings,
)


def test_settings_defaults() -> None:
    """Test default settings values."""
    assert settings.learning.repetition_intervals == REPETITION_INTERVALS
    assert settings.learning.new_words_per_session == 5
    assert settings.learning.review_words_per_session == 20
    assert settings.judge.model == "gpt-4o-mini"
    assert settings.paths.progress_export_file.name == "progress.json"


def test_parse_intervals() -> None:
    """Test parsing the interval ladder from the environment."""
    assert parse_intervals("1, 2,5,") == [1, 2, 5]
    assert parse_intervals(None) == REPETITION_INTERVALS
    assert parse_intervals("") == REPETITION_INTERVALS


def test_settings_from_env(monkeypatch) -> None:
    """Test that settings can be overridden by environment variables."""
    monkeypatch.setenv("REPETITION_INTERVALS", "2,4,8")

    test_settings = Settings()

    assert test_settings.learning.repetition_intervals == [2, 4, 8]
    test_settings.validate()


@pytest.mark.parametrize("intervals", [[1], [0, 1], [3, 1], [1, -2, 5]])
def test_validate_rejects_bad_ladders(intervals) -> None:
    """Test validation of the interval ladder."""
    test_settings = Settings(learning=LearningSettings(repetition_intervals=intervals))

    with pytest.raises(ValueError):
        test_settings.validate()


def test_validate_rejects_negative_session_sizes() -> None:
    """Test validation of session sizes."""
    test_settings = Settings(learning=LearningSettings(new_words_per_session=-1))

    with pytest.raises(ValueError):
        test_settings.validate()


def test_ensure_directories(tmp_path, monkeypatch) -> None:
    """Test creating the data directory."""
    import vocabsrs.config as config

    data_dir = tmp_path / "data"
    monkeypatch.setattr(config, "DATA_DIR", data_dir)

    ensure_directories()

    assert data_dir.is_dir()


if __name__ == "__main__":
    pytest.main([__file__])
