"""Configuration settings for vocabboost."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
EXPORTS_DIR = DATA_DIR / "exports"

# Learning settings
STEP_DELAYS_MINUTES = [6, 60, 60]  # level 0->1, 1->2, 2->3
RELEARN_DELAY_MINUTES = 6


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        EXPORTS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def _parse_int_list(value: str) -> list[int]:
    return [int(item) for item in value.split(",") if item.strip()]


def get_step_delays() -> list[int]:
    """Get the correct-answer ladder delays (minutes) from environment variable."""
    raw = os.getenv("STEP_DELAYS_MINUTES")
    if not raw:
        return list(STEP_DELAYS_MINUTES)
    return _parse_int_list(raw)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    exports_dir: Path = EXPORTS_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'vocabboost.db'}")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class LearningSettings:
    """Spaced repetition settings."""
    step_delays_minutes: list[int] = field(default_factory=get_step_delays)
    relearn_delay_minutes: int = field(
        default_factory=lambda: int(os.getenv("RELEARN_DELAY_MINUTES", str(RELEARN_DELAY_MINUTES)))
    )

    @property
    def step_delays_ms(self) -> list[int]:
        return [minutes * 60 * 1000 for minutes in self.step_delays_minutes]

    @property
    def relearn_delay_ms(self) -> int:
        return self.relearn_delay_minutes * 60 * 1000


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        # One delay per level below the last one before graduation
        if len(self.learning.step_delays_minutes) != 3:
            raise ValueError("STEP_DELAYS_MINUTES must list exactly 3 delays")

        if any(delay <= 0 for delay in self.learning.step_delays_minutes):
            raise ValueError("STEP_DELAYS_MINUTES must be positive")

        if self.learning.relearn_delay_minutes <= 0:
            raise ValueError("RELEARN_DELAY_MINUTES must be positive")

        if not 0 < self.monitoring.port < 65536:
            raise ValueError("METRICS_PORT must be a valid TCP port")


# Create global settings instance
settings = Settings()
settings.validate()
