"""Link-follow dispatch.

Following a link runs it through a :class:`LinkHandlerChain`: a list of
``(predicate, handler)`` entries tried in priority order until one reports
that it handled the link. :class:`TagLinkRedirector` is one such entry;
it turns "open the tag note" into "show every note tagged with it".
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from roam_tags.models.schema import LinkElement
from roam_tags.services.interaction import BacklinkView
from roam_tags.storage.note_index import NoteIndex
from roam_tags.storage.tag_repository import TagRepository

logger = logging.getLogger(__name__)


class LinkOpenResult(str, Enum):
    HANDLED = "handled"
    NOT_HANDLED = "not_handled"


LinkPredicate = Callable[[LinkElement], bool]
LinkHandler = Callable[[LinkElement], LinkOpenResult]


@dataclass(order=True)
class _ChainEntry:
    priority: int
    sequence: int
    name: str = field(compare=False)
    predicate: LinkPredicate = field(compare=False)
    handler: LinkHandler = field(compare=False)


class LinkHandlerChain:
    """Prioritized link handlers; lower priority numbers run first.

    Handlers registered with the same priority run in registration order.
    """

    def __init__(self):
        self._entries: List[_ChainEntry] = []
        self._sequence = 0

    def register(
        self,
        name: str,
        predicate: LinkPredicate,
        handler: LinkHandler,
        priority: int = 100,
    ) -> None:
        self._entries.append(
            _ChainEntry(priority, self._sequence, name, predicate, handler)
        )
        self._sequence += 1
        self._entries.sort()

    def unregister(self, name: str) -> bool:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.name != name]
        return len(self._entries) != before

    @property
    def names(self) -> List[str]:
        return [e.name for e in self._entries]

    def dispatch(self, link: LinkElement) -> LinkOpenResult:
        """Offer ``link`` to each handler until one handles it."""
        for entry in self._entries:
            if not entry.predicate(link):
                continue
            result = entry.handler(link)
            if result is LinkOpenResult.HANDLED:
                logger.debug(f"Link {link.target} handled by {entry.name}")
                return result
        return LinkOpenResult.NOT_HANDLED


class TagLinkRedirector:
    """Opens the backlink view instead of the note when a link targets a tag.

    Links that are not identifier links, or whose target is not a tag, are
    declined so the next handler can open them normally.
    """

    name = "tag-backlinks"

    def __init__(
        self, repository: TagRepository, index: NoteIndex, view: BacklinkView
    ):
        self.repository = repository
        self.index = index
        self.view = view

    @staticmethod
    def accepts(link: LinkElement) -> bool:
        return link.is_id_link

    def target_tag(self, link: LinkElement) -> Optional[str]:
        if not self.accepts(link):
            return None
        return self.repository.tag_for_id(link.target)

    def __call__(self, link: LinkElement) -> LinkOpenResult:
        tag = self.target_tag(link)
        if tag is None:
            return LinkOpenResult.NOT_HANDLED
        self.view.show(link.target, tag, self.index.backlinks(link.target))
        return LinkOpenResult.HANDLED

    def install(self, chain: LinkHandlerChain, priority: int = 10) -> None:
        chain.register(self.name, self.accepts, self, priority=priority)
