"""Data models for Roam Tags."""

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


def generate_id() -> str:
    """Mint a new note identifier (random UUID4, lower-case hex with dashes)."""
    return str(uuid.uuid4())


def validate_safe_path_component(value: str, field_name: str = "value") -> str:
    """Validate that a value can be used as a single file name component.

    Rejects empty values, path separators, parent directory references and
    names starting with a dot.

    Raises:
        ValueError: If the value would escape its directory
    """
    if not value:
        raise ValueError(f"{field_name} cannot be empty")

    if ".." in value:
        raise ValueError(f"{field_name} cannot contain '..' (path traversal)")

    if "/" in value or "\\" in value:
        raise ValueError(f"{field_name} cannot contain path separators")

    if value.startswith("."):
        raise ValueError(f"{field_name} cannot start with '.'")

    return value


class LinkType(str, Enum):
    """Kinds of link a document can contain."""

    ID = "id"  # Reference to another note by identifier
    WEB = "web"  # http(s) URL
    FILE = "file"  # Path on disk
    OTHER = "other"


class Link(BaseModel):
    """A directed identifier link between two notes."""

    source_id: str = Field(..., description="ID of the source note")
    target_id: str = Field(..., description="ID of the target note")
    position: int = Field(default=0, description="Order of the link in its source")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class LinkElement:
    """A link found in a document's text.

    Attributes:
        link_type: What the link points at.
        target: The target without its ``id:``/``file:`` prefix (URLs are kept whole).
        text: Display text of the link.
        start: Offset of the first character of the link markup.
        end: Offset just past the link markup.
    """

    link_type: LinkType
    target: str
    text: str
    start: int
    end: int

    @property
    def is_id_link(self) -> bool:
        return self.link_type is LinkType.ID


@dataclass(frozen=True)
class ParsedNote:
    """What the index needs from a note file."""

    id: str
    title: str
    links: List[LinkElement]


@dataclass(frozen=True)
class Backlink:
    """A note referencing some target, as listed by the aggregated view."""

    source_id: str
    title: str
    file: Optional[Path]
