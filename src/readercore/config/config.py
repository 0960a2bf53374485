"""
Configuration management for readercore using Pydantic.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Pattern, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_VIDEO_PATTERN = (
    r"\/\/(www\.)?((dailymotion|youtube|youtube-nocookie|player\.vimeo|v\.qq|bilibili|live\.bilibili)\.com"
    r"|(archive|upload\.wikimedia)\.org|player\.twitch\.tv)"
)

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class ReadabilityOptions(BaseModel):
    """Tuning knobs for a single extraction run. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    debug: bool = Field(default=False, description="Log candidate scores and attempt details.")
    max_elems_to_parse: int = Field(
        default=0,
        ge=0,
        description="Abort when the document holds more elements than this. 0 disables the check.",
    )
    nb_top_candidates: int = Field(default=5, ge=1, description="How many top candidates to compare.")
    char_threshold: int = Field(
        default=500,
        ge=0,
        description="Minimum article text length an attempt needs to be accepted.",
    )
    classes_to_preserve: Tuple[str, ...] = Field(
        default=("page",),
        description="Class names kept on output elements when keep_classes is off.",
    )
    keep_classes: bool = Field(default=False, description="Keep every class attribute in the output.")
    disable_json_ld: bool = Field(default=False, description="Skip JSON-LD metadata.")
    allowed_video_regex: str | None = Field(
        default=None,
        description="Pattern for embed sources that are kept as video content.",
    )
    link_density_modifier: float = Field(
        default=0.0,
        description="Added to every link-density ceiling and subtracted from the candidate link-density penalty.",
    )
    accept_any_length: bool = Field(
        default=False,
        description="Accept the first attempt with any text instead of requiring char_threshold.",
    )
    min_usable_length: int = Field(
        default=100,
        ge=0,
        description="Best-attempt text below this length means no article was found.",
    )

    @field_validator("classes_to_preserve", mode="before")
    @classmethod
    def split_classes(cls, v: Any) -> Any:
        if isinstance(v, str):
            return tuple(name for name in v.replace(",", " ").split() if name)
        return v

    @field_validator("allowed_video_regex", mode="before")
    @classmethod
    def validate_video_regex(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, re.Pattern):
            v = v.pattern
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid video pattern {v!r}: {e}") from e
        return v

    @property
    def video_pattern(self) -> Pattern[str]:
        return re.compile(self.allowed_video_regex or DEFAULT_VIDEO_PATTERN, re.IGNORECASE)


class ReaderableOptions(BaseModel):
    """Thresholds for the quick readerability check."""

    model_config = ConfigDict(frozen=True)

    min_content_length: int = Field(
        default=140,
        ge=0,
        description="Shortest node text that contributes to the readerability score.",
    )
    min_score: float = Field(default=20.0, ge=0, description="Score the page must exceed to count as readerable.")


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    log_level: str = Field(default="WARNING", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Settings(BaseSettings):
    project_name: str = "readercore"
    readability: ReadabilityOptions = Field(default_factory=ReadabilityOptions)
    readerable: ReaderableOptions = Field(default_factory=ReaderableOptions)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="READERCORE_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Settings:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls()
        return cls(**yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "readercore.yaml",
        current_dir / "readercore.yml",
        current_dir / "config.yaml",
        current_dir / "config.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None
