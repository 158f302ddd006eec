"""User interaction ports and their console implementations.

The tag components only see the protocols. Which selector, notifier or view
is used is decided by whoever wires the components together.
"""
import difflib
import logging
import sys
from typing import Callable, List, Optional, Protocol, Sequence, TextIO

from roam_tags.models.schema import Backlink

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], str]


class Selector(Protocol):
    """Pick one of ``candidates``, or type a value that is not listed."""

    def pick_one(self, candidates: Sequence[str], prompt: str) -> Optional[str]:
        """The chosen or typed value, or None when the user cancels."""
        ...


class Notifier(Protocol):
    """Fire-and-forget status messages and yes/no questions."""

    def message(self, text: str) -> None:
        """Show ``text`` to the user without waiting for an answer."""
        ...

    def confirm(self, question: str) -> bool:
        """Ask ``question``; True means yes."""
        ...


class BacklinkView(Protocol):
    """Displays every note referencing a target note."""

    def show(self, note_id: str, title: str, backlinks: Sequence[Backlink]) -> None:
        """Present ``backlinks`` for the note ``note_id`` titled ``title``."""
        ...


class ListSelector:
    """Numbered list prompt.

    Answer with a number to take a listed candidate, or with any other text
    to use that text as is. An empty answer cancels.
    """

    def __init__(self, input_func: InputFunc = input, out: Optional[TextIO] = None):
        self._input = input_func
        self._out = out

    def pick_one(self, candidates: Sequence[str], prompt: str) -> Optional[str]:
        for number, candidate in enumerate(candidates, start=1):
            print(f"{number:>3}. {candidate}", file=self._out)
        answer = self._input(f"{prompt}: ").strip()
        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(candidates):
            return candidates[int(answer) - 1]
        return answer


class FuzzySelector:
    """Narrows the candidates to close matches of what was typed.

    Typing an exact candidate (or a new value) returns it directly; otherwise
    the closest matches are offered and one can be chosen by number.
    """

    def __init__(
        self,
        input_func: InputFunc = input,
        out: Optional[TextIO] = None,
        limit: int = 10,
        cutoff: float = 0.4,
    ):
        self._input = input_func
        self._out = out
        self.limit = limit
        self.cutoff = cutoff

    def rank(self, query: str, candidates: Sequence[str]) -> List[str]:
        """Candidates ordered by how well they match ``query``.

        Substring hits come first, then difflib close matches.
        """
        substring = [c for c in candidates if query in c]
        close = difflib.get_close_matches(
            query, list(candidates), n=self.limit, cutoff=self.cutoff
        )
        ranked = substring + [c for c in close if c not in substring]
        return ranked[: self.limit]

    def pick_one(self, candidates: Sequence[str], prompt: str) -> Optional[str]:
        query = self._input(f"{prompt}: ").strip()
        if not query:
            return None
        if query in candidates:
            return query
        matches = self.rank(query, candidates)
        if not matches:
            return query
        print(f"  0. {query} (new)", file=self._out)
        for number, match in enumerate(matches, start=1):
            print(f"{number:>3}. {match}", file=self._out)
        answer = self._input("Choose a number [0]: ").strip() or "0"
        if answer.isdigit() and 1 <= int(answer) <= len(matches):
            return matches[int(answer) - 1]
        return query


class ConsoleNotifier:
    """Prints messages and asks questions on the terminal."""

    def __init__(self, input_func: InputFunc = input, out: Optional[TextIO] = None):
        self._input = input_func
        self._out = out

    def message(self, text: str) -> None:
        print(text, file=self._out)

    def confirm(self, question: str) -> bool:
        answer = self._input(f"{question} (y or n) ").strip().lower()
        return answer in ("y", "yes")


class LogNotifier:
    """Non-interactive notifier: gives a fixed answer to every question.

    Messages are logged and also written to ``out`` (stderr by default), so
    they stay visible whatever the log level.
    """

    def __init__(self, answer: bool = False, out: Optional[TextIO] = None):
        self.answer = answer
        self._out = out

    def message(self, text: str) -> None:
        logger.info(text)
        print(text, file=self._out or sys.stderr)

    def confirm(self, question: str) -> bool:
        logger.info(f"{question} -> {'yes' if self.answer else 'no'}")
        return self.answer


class ConsoleBacklinkView:
    """Prints the notes referencing a target."""

    def __init__(self, out: Optional[TextIO] = None):
        self._out = out

    def show(self, note_id: str, title: str, backlinks: Sequence[Backlink]) -> None:
        print(f"{title} ({len(backlinks)} notes)", file=self._out)
        for backlink in backlinks:
            location = backlink.file.name if backlink.file else backlink.source_id
            print(f"  - {backlink.title}  [{location}]", file=self._out)
