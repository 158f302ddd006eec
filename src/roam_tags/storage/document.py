"""An editable text buffer with a cursor, backed by an optional file."""
import logging
from pathlib import Path
from typing import List, Optional

from roam_tags.exceptions import ErrorCode, StorageError
from roam_tags.models.schema import LinkElement
from roam_tags.storage.markdown_parser import MarkdownParser

logger = logging.getLogger(__name__)

HORIZONTAL_SPACE = " \t"


class Document:
    """Text of one open note plus a cursor (``point``).

    Offsets are character indices into ``text``; ``point`` ranges from 0 to
    ``len(text)`` inclusive. Insertion happens at point and leaves point after
    the inserted text.
    """

    def __init__(self, text: str = "", path: Optional[Path] = None, point: int = 0):
        self._text = text
        self.path = path
        self._point = 0
        self._parser = MarkdownParser()
        self.goto(point)

    @classmethod
    def load(cls, path: Path) -> "Document":
        try:
            with open(path, "r", encoding="utf-8") as f:
                return cls(f.read(), path=path)
        except (IOError, OSError) as e:
            raise StorageError(
                f"Failed to open {path.name}",
                operation="load",
                path=str(path),
                original_error=e,
            ) from e

    def save(self) -> None:
        if self.path is None:
            raise StorageError("Document has no file to save to", operation="save")
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(self._text)
        except (IOError, OSError) as e:
            raise StorageError(
                f"Failed to save {self.path.name}",
                operation="save",
                path=str(self.path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e
        logger.debug(f"Saved {self.path.name}")

    @property
    def text(self) -> str:
        return self._text

    @property
    def point(self) -> int:
        return self._point

    def __len__(self) -> int:
        return len(self._text)

    # -- movement ---------------------------------------------------------

    def goto(self, pos: int) -> int:
        """Move point to ``pos``, clamped to the buffer."""
        self._point = max(0, min(pos, len(self._text)))
        return self._point

    def goto_end(self) -> int:
        return self.goto(len(self._text))

    def line_start(self, pos: Optional[int] = None) -> int:
        pos = self._point if pos is None else pos
        return self._text.rfind("\n", 0, pos) + 1

    def line_end(self, pos: Optional[int] = None) -> int:
        pos = self._point if pos is None else pos
        end = self._text.find("\n", pos)
        return len(self._text) if end == -1 else end

    def char_before(self) -> Optional[str]:
        """Character left of point, or None at the start of the buffer."""
        if self._point == 0:
            return None
        return self._text[self._point - 1]

    def char_after(self) -> Optional[str]:
        """Character right of point, or None at the end of the buffer."""
        if self._point >= len(self._text):
            return None
        return self._text[self._point]

    def find_last_line_prefix(self, prefix: str) -> Optional[int]:
        """Start offset of the last line beginning with ``prefix``.

        Lines are scanned from the end of the buffer towards its start and
        the first hit wins.
        """
        lines = self._text.split("\n")
        offset = len(self._text)
        for line in reversed(lines):
            offset -= len(line)
            if line.startswith(prefix):
                return offset
            offset -= 1
        return None

    # -- editing ----------------------------------------------------------

    def insert(self, text: str) -> None:
        p = self._point
        self._text = self._text[:p] + text + self._text[p:]
        self._point = p + len(text)

    def delete_region(self, start: int, end: int) -> None:
        start, end = sorted((max(0, start), min(end, len(self._text))))
        self._text = self._text[:start] + self._text[end:]
        if self._point > end:
            self._point -= end - start
        elif self._point > start:
            self._point = start

    def delete_horizontal_space_backward(self) -> None:
        """Delete spaces and tabs immediately left of point."""
        start = self._point
        while start > 0 and self._text[start - 1] in HORIZONTAL_SPACE:
            start -= 1
        self.delete_region(start, self._point)

    # -- structure --------------------------------------------------------

    def links(self) -> List[LinkElement]:
        return self._parser.parse_links(self._text)

    def link_at(self, pos: Optional[int] = None) -> Optional[LinkElement]:
        """The link whose markup covers ``pos`` (default: point)."""
        pos = self._point if pos is None else pos
        for element in self.links():
            if element.start <= pos < element.end:
                return element
        return None

    def note_id(self) -> Optional[str]:
        return self._parser.read_note_id(self._text)
