"""Configuration module for Roam Tags."""

import logging
import os
import re
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from the project root .env file.
# Anchored to __file__ so it works regardless of the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config, lives alongside the rest of the user's settings
_USER_ENV = Path.home() / ".roam-tags" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

# \Z rather than $ so a title with a trailing newline is not a tag
DEFAULT_TAG_PATTERN = r"\A[a-z0-9-]+\Z"
DEFAULT_TAG_PATTERN_WITH_COLONS = r"\A[a-z0-9:-]+\Z"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class TagsConfig(BaseModel):
    """Configuration for tag recognition, the tag line and note storage."""

    # Base directory for the project
    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("ROAM_TAGS_BASE_DIR", "."))
    )
    # Directory holding the markdown notes that get indexed
    notes_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("ROAM_TAGS_NOTES_DIR", "data/notes"))
    )
    database_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("ROAM_TAGS_DATABASE_PATH", "data/db/roam-tags.db")
        )
    )
    # When True the index lives in memory and is rebuilt from files on startup
    in_memory_db: bool = Field(
        default_factory=lambda: _env_flag("ROAM_TAGS_IN_MEMORY_DB", "true")
    )
    # SQL LIKE pattern a tag title must NOT match (pushed into the index query)
    coarse_pattern: str = Field(
        default_factory=lambda: os.getenv("ROAM_TAGS_COARSE_PATTERN", "% %")
    )
    # Authoritative, case-sensitive test applied locally to candidate titles.
    # Left unset, it resolves to the default pattern (with colons if allowed).
    tag_pattern: Optional[str] = Field(
        default_factory=lambda: os.getenv("ROAM_TAGS_TAG_PATTERN") or None
    )
    allow_colons: bool = Field(
        default_factory=lambda: _env_flag("ROAM_TAGS_ALLOW_COLONS", "false")
    )
    tag_line_marker: str = Field(
        default_factory=lambda: os.getenv("ROAM_TAGS_LINE_MARKER", "+ tags ::")
    )
    # Where new tag notes are written; falls back to notes_dir
    tags_dir: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("ROAM_TAGS_TAGS_DIR"))
            if os.getenv("ROAM_TAGS_TAGS_DIR")
            else None
        )
    )

    model_config = {"validate_assignment": True}

    @model_validator(mode="after")
    def _validate_tag_settings(self) -> "TagsConfig":
        """Compile the tag pattern early and reject an empty marker."""
        try:
            re.compile(self.resolved_tag_pattern)
        except re.error as e:
            raise ValueError(f"tag_pattern is not a valid regular expression: {e}")
        if not self.tag_line_marker.strip():
            raise ValueError("tag_line_marker cannot be empty")
        if not self.coarse_pattern:
            logger.warning("Empty coarse_pattern: every title reaches the tag regex")
        return self

    @property
    def resolved_tag_pattern(self) -> str:
        """The tag regex in effect, after applying the colon switch."""
        if self.tag_pattern:
            return self.tag_pattern
        if self.allow_colons:
            return DEFAULT_TAG_PATTERN_WITH_COLONS
        return DEFAULT_TAG_PATTERN

    def get_absolute_path(self, path: Path) -> Path:
        """Convert a relative path to an absolute path based on base_dir."""
        if path.is_absolute():
            return path
        return self.base_dir / path

    def get_notes_dir(self) -> Path:
        return self.get_absolute_path(self.notes_dir)

    def get_tags_dir(self) -> Path:
        """Directory new tag notes are written to (defaults to the notes root)."""
        if self.tags_dir is None:
            return self.get_notes_dir()
        return self.get_absolute_path(self.tags_dir)

    def get_db_url(self) -> str:
        """Get the database URL for SQLite."""
        if self.in_memory_db:
            return "sqlite://"
        db_path = self.get_absolute_path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{db_path}"


# Default instance for the command line entry point. Library code receives
# its TagsConfig explicitly.
config = TagsConfig()
