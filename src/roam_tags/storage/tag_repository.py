"""Read-only tag lookups against the note index."""
import logging
from pathlib import Path
from typing import List, Optional

from roam_tags.services.tag_classifier import TagClassifier
from roam_tags.storage.note_index import NoteIndex

logger = logging.getLogger(__name__)


class TagRepository:
    """Translates tag questions into note index queries.

    Lookups never raise for strings that are not tags; they return ``None``
    or an empty list.
    """

    def __init__(self, index: NoteIndex, classifier: TagClassifier):
        """Initialize the tag repository.

        Args:
            index: The note index to query.
            classifier: Decides which titles are tags.
        """
        self.index = index
        self.classifier = classifier

    def list_tags(self) -> List[str]:
        """All tag titles in the index, sorted by code point."""
        candidates = self.index.titles_matching(self.classifier.coarse_filter())
        return sorted(self.classifier.filter_tags(candidates))

    def id_for_tag(self, tag: str) -> Optional[str]:
        """Id of the note titled ``tag``.

        Strings that are not tags are rejected without touching the index.
        With duplicate titles an arbitrary one of the matching ids is
        returned.
        """
        if not self.classifier.is_tag(tag):
            return None
        ids = self.index.ids_for_title(tag)
        if len(ids) > 1:
            logger.debug(f"Tag {tag!r} has {len(ids)} notes, using {ids[0]}")
        return ids[0] if ids else None

    def tag_for_id(self, note_id: str) -> Optional[str]:
        """Title of note ``note_id`` if that title is a tag."""
        title = self.index.title_for_id(note_id)
        if title is not None and self.classifier.is_tag(title):
            return title
        return None

    def file_for_id(self, note_id: str) -> Optional[Path]:
        return self.index.file_for_id(note_id)

    def tag_exists(self, tag: str) -> bool:
        return self.id_for_tag(tag) is not None

    def tags_for_note(self, note_id: str) -> List[str]:
        """Tags linked from ``note_id``, in link order and with repeats."""
        tags = []
        for link in self.index.outgoing_links(note_id):
            tag = self.tag_for_id(link.target_id)
            if tag is not None:
                tags.append(tag)
        return tags
