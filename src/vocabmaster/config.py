"""Configuration settings for vocabmaster."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(BASE_DIR / env_file)


# Scoring settings
MASTERY_HISTORY_WINDOW = 50  # most recent attempts considered per word
QUIZ_STRATEGIES = ("random", "balanced", "focus")


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabmaster.db")
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
class MasterySettings:
    """Mastery scoring and progress query settings."""
    history_window: int = int(os.getenv("MASTERY_HISTORY_WINDOW", str(MASTERY_HISTORY_WINDOW)))
    default_need_practice_threshold: int = int(os.getenv("NEED_PRACTICE_THRESHOLD", "80"))
    default_need_practice_limit: int = int(os.getenv("NEED_PRACTICE_LIMIT", "10"))
    default_attempts_limit: int = int(os.getenv("ATTEMPTS_LIMIT", "50"))


@dataclass
class QuizSettings:
    """Quiz composition settings."""
    question_count: int = int(os.getenv("QUIZ_QUESTION_COUNT", "12"))
    min_question_count: int = int(os.getenv("QUIZ_MIN_QUESTION_COUNT", "6"))
    max_question_count: int = int(os.getenv("QUIZ_MAX_QUESTION_COUNT", "24"))
    default_strategy: str = os.getenv("QUIZ_STRATEGY", "random").lower()
    mcq_options: int = int(os.getenv("QUIZ_MCQ_OPTIONS", "4"))
    mixed_spelling_ratio: float = float(os.getenv("QUIZ_MIXED_SPELLING_RATIO", "0.5"))


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_mastery_settings() -> MasterySettings:
    """Get mastery settings."""
    return MasterySettings()


def get_quiz_settings() -> QuizSettings:
    """Get quiz settings."""
    return QuizSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    mastery: MasterySettings = field(default_factory=get_mastery_settings)
    quiz: QuizSettings = field(default_factory=get_quiz_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.mastery.history_window < 1:
            raise ValueError("MASTERY_HISTORY_WINDOW must be positive")

        if self.quiz.min_question_count > self.quiz.max_question_count:
            raise ValueError("QUIZ_MIN_QUESTION_COUNT cannot be greater than QUIZ_MAX_QUESTION_COUNT")

        if self.quiz.question_count < self.quiz.min_question_count or \
           self.quiz.question_count > self.quiz.max_question_count:
            raise ValueError("QUIZ_QUESTION_COUNT must be between QUIZ_MIN_QUESTION_COUNT and QUIZ_MAX_QUESTION_COUNT")

        if self.quiz.default_strategy not in QUIZ_STRATEGIES:
            raise ValueError(f"QUIZ_STRATEGY must be one of {', '.join(QUIZ_STRATEGIES)}")

        if self.quiz.mixed_spelling_ratio < 0 or self.quiz.mixed_spelling_ratio > 1:
            raise ValueError("QUIZ_MIXED_SPELLING_RATIO must be between 0 and 1")

        if self.quiz.mcq_options < 2:
            raise ValueError("QUIZ_MCQ_OPTIONS must be at least 2")

    def clamp_question_count(self, count: int) -> int:
        """Clamp a requested quiz size to the allowed range."""
        return max(self.quiz.min_question_count, min(self.quiz.max_question_count, count))


# Create global settings instance
settings = Settings()
settings.validate()
