"""User-facing tag commands wiring the tag components together."""
import logging
from typing import Iterable, List, Optional

from roam_tags.config import TagsConfig
from roam_tags.models.schema import LinkElement, LinkType
from roam_tags.observability import timed_operation
from roam_tags.services.interaction import BacklinkView, Notifier, Selector
from roam_tags.services.link_redirector import (
    LinkHandlerChain,
    LinkOpenResult,
    TagLinkRedirector,
)
from roam_tags.services.tag_classifier import TagClassifier
from roam_tags.services.tag_mutator import TagMutator
from roam_tags.storage.document import Document
from roam_tags.storage.note_index import NoteIndex
from roam_tags.storage.tag_repository import TagRepository

logger = logging.getLogger(__name__)


class TagService:
    """Tag commands for one note collection."""

    def __init__(
        self,
        config: TagsConfig,
        index: NoteIndex,
        selector: Selector,
        notifier: Notifier,
        view: BacklinkView,
        chain: Optional[LinkHandlerChain] = None,
    ):
        """Build the classifier, repository, mutator and redirector.

        Args:
            config: Tag settings shared by every component.
            index: The note index to query and update.
            selector: How a tag is picked from the known tags.
            notifier: Where messages and confirmations go.
            view: Displays a tag's backlinks.
            chain: Link handler chain to join. A new one, with a fallback
                handler that reports where a link points, is created if None.
        """
        self.config = config
        self.index = index
        self.selector = selector
        self.notifier = notifier
        self.classifier = TagClassifier(config)
        self.repository = TagRepository(index, self.classifier)
        self.mutator = TagMutator(config, self.repository, index, notifier)
        self.redirector = TagLinkRedirector(self.repository, index, view)
        if chain is None:
            chain = LinkHandlerChain()
            chain.register(
                "default-open", lambda link: True, self._default_open, priority=1000
            )
        self.chain = chain
        self.redirector.install(self.chain)

    def _default_open(self, link: LinkElement) -> LinkOpenResult:
        if link.is_id_link:
            path = self.repository.file_for_id(link.target)
            if path is None:
                self.notifier.message(f"Unknown note {link.target}")
                return LinkOpenResult.NOT_HANDLED
            self.notifier.message(f"Open {path}")
        else:
            self.notifier.message(f"Open {link.target}")
        return LinkOpenResult.HANDLED

    def read_tag(self, prompt: str = "Tag") -> Optional[str]:
        """Ask for a tag among the existing ones (a new name is accepted)."""
        with timed_operation("list_tags") as op:
            tags = self.repository.list_tags()
            op["result_count"] = len(tags)
        choice = self.selector.pick_one(tags, prompt)
        return choice or None

    def tag_note(self, document: Document, tag: Optional[str] = None) -> Optional[str]:
        """Add a tag to the document's tag line."""
        tag = tag or self.read_tag()
        if tag is None:
            return None
        return self.mutator.insert_file_tag(document, tag)

    def tag_at_point(
        self, document: Document, tag: Optional[str] = None
    ) -> Optional[str]:
        """Insert a tag link at the document's cursor."""
        tag = tag or self.read_tag()
        if tag is None:
            return None
        return self.mutator.insert_inline_tag(document, tag)

    def set_file_tags(self, document: Document, tags: Iterable[str]) -> List[str]:
        """Replace the tag line's content with links to ``tags``.

        Returns the tags that were actually inserted.
        """
        self.mutator.clear_file_tags_line(document)
        inserted = []
        for tag in tags:
            if self.mutator.insert_file_tag(document, tag) is not None:
                inserted.append(tag)
        return inserted

    def open_tag(self, tag: Optional[str] = None) -> LinkOpenResult:
        """Show the notes tagged with an existing tag."""
        tag = tag or self.read_tag("Open tag")
        if tag is None:
            return LinkOpenResult.NOT_HANDLED
        note_id = self.repository.id_for_tag(tag)
        if note_id is None:
            self.notifier.message(f"No tag «{tag}»")
            return LinkOpenResult.NOT_HANDLED
        return self.redirector(
            LinkElement(
                link_type=LinkType.ID,
                target=note_id,
                text=tag,
                start=0,
                end=0,
            )
        )

    def document_tags(self, document: Document) -> List[str]:
        """Tags linked from the document, in link order and with repeats."""
        note_id = document.note_id()
        if note_id is None:
            return []
        return self.repository.tags_for_note(note_id)

    def follow_link(self, document: Document, pos: Optional[int] = None) -> LinkOpenResult:
        """Follow the link under ``pos`` through the handler chain."""
        link = document.link_at(pos)
        if link is None:
            self.notifier.message("No link at point")
            return LinkOpenResult.NOT_HANDLED
        return self.chain.dispatch(link)
