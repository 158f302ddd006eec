"""Write operations: tag notes, the per-document tag line and tag links."""
import logging
from pathlib import Path
from typing import Optional

from roam_tags.config import TagsConfig
from roam_tags.exceptions import (
    DanglingReferenceError,
    ErrorCode,
    StorageError,
    TagError,
    TagExistsError,
)
from roam_tags.models.schema import generate_id, validate_safe_path_component
from roam_tags.observability import traced
from roam_tags.services.interaction import Notifier
from roam_tags.storage.document import Document
from roam_tags.storage.markdown_parser import MarkdownParser, format_id_link
from roam_tags.storage.note_index import NoteIndex
from roam_tags.storage.tag_repository import TagRepository

logger = logging.getLogger(__name__)

# Characters that already separate an inline link from its neighbours
SEPARATORS = " \t\n-"


class TagMutator:
    """Creates tag notes and inserts tag links into documents.

    New tags are only created through :meth:`ensure_tag_exists`, which asks
    for confirmation first. :meth:`create_tag` skips the question and is
    meant for programmatic use.

    Checking for a tag and then creating it is not atomic. Two writers
    creating the same tag at once are not supported; the loser gets a
    :class:`TagExistsError`.
    """

    def __init__(
        self,
        config: TagsConfig,
        repository: TagRepository,
        index: NoteIndex,
        notifier: Notifier,
    ):
        self.config = config
        self.repository = repository
        self.index = index
        self.notifier = notifier
        self._parser = MarkdownParser()

    # ------------------------------------------------------------------
    # Tag notes
    # ------------------------------------------------------------------

    def tag_file_path(self, tag: str) -> Path:
        """File a note for ``tag`` is written to."""
        return self.config.get_tags_dir() / f"{tag}.md"

    @traced("create_tag")
    def create_tag(self, tag: str) -> str:
        """Write a new tag note, index it and return its id.

        Raises:
            TagError: If ``tag`` is not a tag or cannot be a file name.
            TagExistsError: If the tag's file already exists.
            StorageError: If the file cannot be written.
        """
        if not self.repository.classifier.is_tag(tag):
            raise TagError(f"«{tag}» is not a valid tag", tag_name=tag)
        try:
            validate_safe_path_component(tag, "Tag")
        except ValueError as e:
            raise TagError(
                str(e), tag_name=tag, code=ErrorCode.PATH_TRAVERSAL_DETECTED
            ) from e

        path = self.tag_file_path(tag)
        if path.exists():
            raise TagExistsError(tag, str(path))

        note_id = generate_id()
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            # "x" refuses to clobber a file that appeared since the check above
            with open(path, "x", encoding="utf-8") as f:
                f.write(self._parser.render_tag_note(note_id, tag))
        except FileExistsError as e:
            raise TagExistsError(tag, str(path)) from e
        except (IOError, OSError) as e:
            raise StorageError(
                f"Failed to write tag «{tag}»",
                operation="create_tag",
                path=str(path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e

        self.index.register_id(note_id, path)
        self.index.index_file(path)
        logger.info(f"Created tag {tag} ({note_id}) at {path.name}")
        self.notifier.message(f"Created tag «{tag}»")
        return note_id

    def ensure_tag_exists(self, tag: str) -> Optional[str]:
        """Return ``tag`` if it exists or was created after confirmation.

        Returns None when the user declines (or ``tag`` is not a tag).
        """
        if self.repository.tag_exists(tag):
            return tag
        if not self.repository.classifier.is_tag(tag):
            self.notifier.message(f"«{tag}» is not a valid tag")
            return None
        if not self.notifier.confirm(f"Create tag «{tag}»?"):
            self.notifier.message("Aborted")
            return None
        self.create_tag(tag)
        return tag

    # ------------------------------------------------------------------
    # Tag line
    # ------------------------------------------------------------------

    def find_file_tags_line(self, document: Document) -> int:
        """Put point right after the marker of the document's tag line.

        The last line starting with the marker wins. Without one, a marker
        line is appended to the document.
        """
        marker = self.config.tag_line_marker
        line_start = document.find_last_line_prefix(marker)
        if line_start is None:
            document.goto_end()
            document.insert("\n\n" + marker)
            return document.point
        return document.goto(line_start + len(marker))

    def clear_file_tags_line(self, document: Document) -> None:
        """Empty the tag line: everything after its marker is deleted."""
        start = self.find_file_tags_line(document)
        document.delete_region(start, len(document))
        document.goto(start)

    def insert_file_tag(self, document: Document, tag: str) -> Optional[str]:
        """Append a link to ``tag`` at the end of the tag line.

        Returns:
            The tag, or None if its creation was declined. In that case the
            separating space stays on the line.
        """
        self.find_file_tags_line(document)
        document.goto(document.line_end())
        document.delete_horizontal_space_backward()
        document.insert(" ")
        if self.ensure_tag_exists(tag) is None:
            return None
        self._insert_link(document, tag)
        return tag

    def insert_inline_tag(self, document: Document, tag: str) -> Optional[str]:
        """Insert a link to ``tag`` at point, spaced off from its neighbours."""
        before = document.char_before()
        if before is not None and before not in SEPARATORS:
            document.insert(" ")
        if self.ensure_tag_exists(tag) is None:
            return None
        self._insert_link(document, tag)
        after = document.char_after()
        if after is not None and after not in SEPARATORS:
            document.insert(" ")
        return tag

    def _insert_link(self, document: Document, tag: str) -> None:
        note_id = self.repository.id_for_tag(tag)
        if note_id is None:
            raise DanglingReferenceError(tag)
        document.insert(format_id_link(note_id, tag))
