"""Tests for configuration settings."""
import pytest

from vocabboost.config import (
    DATA_DIR,
    EXPORTS_DIR,
    LearningSettings,
    Settings,
    ensure_directories,
    settings,
)


def test_base_directories_exist():
    """Test that all required directories exist."""
    ensure_directories()

    assert DATA_DIR.exists()
    assert EXPORTS_DIR.exists()


def test_test_environment_loaded():
    """Test the .env.test values were picked up."""
    assert "vocabboost_test" in settings.database.url
    assert settings.logging.level == "DEBUG"


def test_learning_defaults():
    """Test default ladder delays."""
    learning = LearningSettings()

    assert learning.step_delays_minutes == [6, 60, 60]
    assert learning.relearn_delay_minutes == 6
    assert learning.step_delays_ms == [360_000, 3_600_000, 3_600_000]
    assert learning.relearn_delay_ms == 360_000


def test_learning_from_env(monkeypatch):
    """Test that learning settings can be overridden by environment variables."""
    monkeypatch.setenv("STEP_DELAYS_MINUTES", "1, 2,3")
    monkeypatch.setenv("RELEARN_DELAY_MINUTES", "4")

    learning = LearningSettings()

    assert learning.step_delays_minutes == [1, 2, 3]
    assert learning.relearn_delay_minutes == 4


@pytest.mark.parametrize(
    "step_delays, relearn_delay",
    [
        ([6, 60], 6),
        ([6, 60, 60, 120], 6),
        ([6, 0, 60], 6),
        ([6, 60, 60], 0),
    ],
)
def test_validate_rejects_bad_learning_settings(step_delays, relearn_delay):
    """Test invalid ladder settings are rejected."""
    invalid = Settings(
        learning=LearningSettings(step_delays_minutes=step_delays, relearn_delay_minutes=relearn_delay)
    )

    with pytest.raises(ValueError):
        invalid.validate()


def test_validate_accepts_defaults():
    """Test the default settings are valid."""
    Settings().validate()
