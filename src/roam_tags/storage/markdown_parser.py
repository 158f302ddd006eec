"""Markdown parsing and serialization for notes.

Notes are markdown files with YAML frontmatter carrying the note ``id`` and
``title``. Links use the inline markdown form ``[text](target)``; a target
of ``id:<note-id>`` references another note by identifier.
"""
import logging
import re
from typing import List

import frontmatter
import yaml

from roam_tags.models.schema import LinkElement, LinkType, ParsedNote

logger = logging.getLogger(__name__)

LINK_RE = re.compile(r"\[(?P<text>[^\]\n]*)\]\((?P<target>[^)\s]+)\)")

ID_PREFIX = "id:"
FILE_PREFIX = "file:"
WEB_PREFIXES = ("http://", "https://")


def classify_target(raw: str) -> LinkElement:
    """Split a raw link target into its type and bare target (offsets unset)."""
    if raw.startswith(ID_PREFIX):
        return LinkElement(LinkType.ID, raw[len(ID_PREFIX):], "", 0, 0)
    if raw.startswith(WEB_PREFIXES):
        return LinkElement(LinkType.WEB, raw, "", 0, 0)
    if raw.startswith(FILE_PREFIX):
        return LinkElement(LinkType.FILE, raw[len(FILE_PREFIX):], "", 0, 0)
    if raw.endswith(".md") or raw.startswith(("/", "./", "../")):
        return LinkElement(LinkType.FILE, raw, "", 0, 0)
    return LinkElement(LinkType.OTHER, raw, "", 0, 0)


def format_id_link(note_id: str, text: str) -> str:
    """Render a reference to ``note_id`` displayed as ``text``."""
    return f"[{text}]({ID_PREFIX}{note_id})"


class MarkdownParser:
    """Parses note files and renders new tag notes."""

    def parse_links(self, text: str) -> List[LinkElement]:
        """Enumerate link elements in document order.

        Offsets are relative to ``text``.
        """
        elements: List[LinkElement] = []
        for match in LINK_RE.finditer(text):
            kind = classify_target(match.group("target"))
            if not kind.target:
                continue
            elements.append(
                LinkElement(
                    link_type=kind.link_type,
                    target=kind.target,
                    text=match.group("text"),
                    start=match.start(),
                    end=match.end(),
                )
            )
        return elements

    def parse_note(self, content: str) -> ParsedNote:
        """Parse a note from markdown content with YAML frontmatter.

        Raises:
            ValueError: If the id or the title cannot be found.
        """
        post = frontmatter.loads(content)
        metadata = post.metadata

        note_id = metadata.get("id")
        if not note_id:
            raise ValueError("Note ID missing from frontmatter")

        title = metadata.get("title")
        if not title:
            for line in post.content.strip().split("\n"):
                if line.startswith("# "):
                    title = line[2:].strip()
                    break
        if not title:
            raise ValueError("Note title missing from frontmatter or content")

        return ParsedNote(
            id=str(note_id),
            title=str(title),
            links=self.parse_links(post.content),
        )

    def read_note_id(self, content: str):
        """Return the frontmatter id of a document, or None."""
        try:
            note_id = frontmatter.loads(content).metadata.get("id")
        except (ValueError, yaml.YAMLError) as e:
            # Malformed YAML in a document being edited is not fatal here
            logger.debug(f"Cannot read frontmatter: {e}")
            return None
        return str(note_id) if note_id else None

    def render_tag_note(self, note_id: str, tag: str) -> str:
        """Render the minimal document of a tag note.

        Only the identity marker, the title and one top-level heading.
        """
        post = frontmatter.Post(f"# {tag}\n", id=note_id, title=tag)
        return frontmatter.dumps(post) + "\n"
