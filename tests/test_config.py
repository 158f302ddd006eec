"""Tests for TagsConfig."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from roam_tags.config import (
    DEFAULT_TAG_PATTERN,
    DEFAULT_TAG_PATTERN_WITH_COLONS,
    TagsConfig,
)
from tests.builders import make_config


class TestTagPattern:
    """Tests for resolving and validating the tag regex."""

    def test_default(self, tmp_path):
        assert make_config(tmp_path).resolved_tag_pattern == DEFAULT_TAG_PATTERN

    def test_colon_switch(self, tmp_path):
        config = make_config(tmp_path, allow_colons=True)
        assert config.resolved_tag_pattern == DEFAULT_TAG_PATTERN_WITH_COLONS

    def test_explicit_pattern_wins(self, tmp_path):
        config = make_config(tmp_path, tag_pattern=r"^\w+$", allow_colons=True)
        assert config.resolved_tag_pattern == r"^\w+$"

    def test_invalid_regex_is_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            make_config(tmp_path, tag_pattern="[unclosed")

    def test_assignment_is_validated(self, tmp_path):
        config = make_config(tmp_path)
        with pytest.raises(ValidationError):
            config.tag_pattern = "(oops"


class TestTagLine:
    """Tests for the tag line marker."""

    def test_empty_marker_is_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            make_config(tmp_path, tag_line_marker="   ")

    def test_custom_marker(self, tmp_path):
        assert make_config(tmp_path, tag_line_marker="Tags:").tag_line_marker == "Tags:"


class TestPaths:
    """Tests for directory and database resolution."""

    def test_relative_paths_use_base_dir(self, tmp_path):
        config = make_config(tmp_path, notes_dir=Path("notes"))
        assert config.get_notes_dir() == tmp_path / "notes"

    def test_tags_dir_defaults_to_notes_dir(self, tmp_path):
        config = make_config(tmp_path)
        assert config.get_tags_dir() == config.get_notes_dir()

    def test_tags_dir_override(self, tmp_path):
        config = make_config(tmp_path, tags_dir=Path("tags"))
        assert config.get_tags_dir() == tmp_path / "tags"

    def test_in_memory_url(self, tmp_path):
        assert make_config(tmp_path).get_db_url() == "sqlite://"

    def test_file_url_creates_parent(self, tmp_path):
        config = make_config(tmp_path, in_memory_db=False)
        assert config.get_db_url() == f"sqlite:///{tmp_path / 'db' / 'test.db'}"
        assert (tmp_path / "db").is_dir()


class TestEnvironment:
    """Tests for environment variable defaults."""

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ROAM_TAGS_NOTES_DIR", str(tmp_path / "env-notes"))
        monkeypatch.setenv("ROAM_TAGS_ALLOW_COLONS", "yes")
        monkeypatch.setenv("ROAM_TAGS_LINE_MARKER", "#+filetags:")
        monkeypatch.setenv("ROAM_TAGS_IN_MEMORY_DB", "false")
        monkeypatch.delenv("ROAM_TAGS_TAG_PATTERN", raising=False)
        config = TagsConfig()
        assert config.notes_dir == tmp_path / "env-notes"
        assert config.allow_colons is True
        assert config.tag_line_marker == "#+filetags:"
        assert config.in_memory_db is False
        assert config.resolved_tag_pattern == DEFAULT_TAG_PATTERN_WITH_COLONS

    def test_unset_tags_dir(self, monkeypatch):
        monkeypatch.delenv("ROAM_TAGS_TAGS_DIR", raising=False)
        assert TagsConfig().tags_dir is None
