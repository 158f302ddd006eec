"""Scripted stand-ins for the interactive ports.

Each fake records what it was asked so tests can assert on prompts and
messages without a terminal.
"""
from typing import List, Optional, Sequence, Tuple

from roam_tags.models.schema import Backlink


class FakeSelector:
    """Returns a fixed choice and remembers the candidates it was shown."""

    def __init__(self, choice: Optional[str] = None) -> None:
        self.choice = choice
        self.calls: List[Tuple[List[str], str]] = []

    def pick_one(self, candidates: Sequence[str], prompt: str) -> Optional[str]:
        self.calls.append((list(candidates), prompt))
        return self.choice


class FakeNotifier:
    """Answers every confirmation with ``answer``."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.messages: List[str] = []
        self.questions: List[str] = []

    def message(self, text: str) -> None:
        self.messages.append(text)

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer


class RecordingView:
    """Backlink view that stores what it was asked to show."""

    def __init__(self) -> None:
        self.shown: List[Tuple[str, str, List[Backlink]]] = []

    def show(self, note_id: str, title: str, backlinks: Sequence[Backlink]) -> None:
        self.shown.append((note_id, title, list(backlinks)))


def scripted_input(*answers: str):
    """An ``input`` replacement replaying ``answers`` in order."""
    remaining = list(answers)
    prompts: List[str] = []

    def _input(prompt: str) -> str:
        prompts.append(prompt)
        return remaining.pop(0)

    _input.prompts = prompts  # type: ignore[attr-defined]
    return _input
