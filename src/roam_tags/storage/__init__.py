"""Storage layer for Roam Tags."""

from roam_tags.storage.document import Document
from roam_tags.storage.note_index import NoteIndex
from roam_tags.storage.tag_repository import TagRepository

__all__ = [
    "Document",
    "NoteIndex",
    "TagRepository",
]
