"""Tag recognition.

A title is a tag when it passes two filters: a coarse SQL ``LIKE`` filter
pushed into the index query, and the tag regular expression applied
locally. The regex is authoritative; the SQL filter only narrows the rows
fetched.
"""
import re
from typing import Iterable, List

from sqlalchemy import true
from sqlalchemy.sql.elements import ColumnElement

from roam_tags.config import TagsConfig
from roam_tags.models.db_models import DBNote


class TagClassifier:
    """Pure predicates deciding whether a title is a tag."""

    def __init__(self, config: TagsConfig):
        self.config = config
        self._pattern = re.compile(config.resolved_tag_pattern)

    @property
    def pattern(self) -> "re.Pattern[str]":
        return self._pattern

    def coarse_filter(self) -> ColumnElement:
        """SQL criterion selecting candidate tag titles from the notes table."""
        if not self.config.coarse_pattern:
            return true()
        return DBNote.title.not_like(self.config.coarse_pattern)

    def is_tag(self, title: str) -> bool:
        """True if the tag pattern matches ``title``.

        The pattern carries its own anchors; no trimming or case folding
        happens first.
        """
        if not isinstance(title, str):
            return False
        return self._pattern.search(title) is not None

    def filter_tags(self, titles: Iterable[str]) -> List[str]:
        """Keep only the tags of ``titles``, in their original order."""
        return [title for title in titles if self.is_tag(title)]
