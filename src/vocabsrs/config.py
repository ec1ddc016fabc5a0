"""Configuration settings for the vocabulary scheduler."""
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
PROGRESS_EXPORT_FILE = DATA_DIR / "progress.json"

# Learning settings
REPETITION_INTERVALS = [1, 3, 7, 14, 30, 90, 180]  # days between reviews


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def parse_intervals(raw: Optional[str]) -> list[int]:
    """Parse a comma-separated list of day counts."""
    if not raw:
        return list(REPETITION_INTERVALS)
    return [int(part) for part in raw.split(",") if part.strip()]


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    progress_export_file: Path = PROGRESS_EXPORT_FILE


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabsrs.db")
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
    """Learning process settings."""
    repetition_intervals: list[int] = field(
        default_factory=lambda: parse_intervals(os.getenv("REPETITION_INTERVALS"))
    )
    new_words_per_session: int = int(os.getenv("NEW_WORDS_PER_SESSION", "5"))
    review_words_per_session: int = int(os.getenv("REVIEW_WORDS_PER_SESSION", "20"))


@dataclass
class JudgeSettings:
    """Settings for the explanation judge."""
    api_key: str = os.getenv("LLM_API_KEY", "")
    base_url: str = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
    model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    timeout: float = float(os.getenv("LLM_TIMEOUT", "30"))
    temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.6"))


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    metrics_port: int = int(os.getenv("METRICS_PORT", "0"))


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


def get_judge_settings() -> JudgeSettings:
    """Get judge settings."""
    return JudgeSettings()


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
    judge: JudgeSettings = field(default_factory=get_judge_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        intervals = self.learning.repetition_intervals
        if len(intervals) < 2:
            raise ValueError("REPETITION_INTERVALS needs at least two entries")

        if any(days <= 0 for days in intervals):
            raise ValueError("REPETITION_INTERVALS must contain positive day counts")

        if any(later < earlier for earlier, later in zip(intervals, intervals[1:])):
            raise ValueError("REPETITION_INTERVALS must be non-decreasing")

        if self.learning.new_words_per_session < 0:
            raise ValueError("NEW_WORDS_PER_SESSION cannot be negative")

        if self.learning.review_words_per_session < 0:
            raise ValueError("REVIEW_WORDS_PER_SESSION cannot be negative")


# Create global settings instance
settings = Settings()
settings.validate()
