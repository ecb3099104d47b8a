"""Interactive prompts.

``RichPrompter`` asks on the terminal through ``rich.prompt``;
``ScriptedPrompter`` replays canned answers so step and OTP flows can be
tested without a TTY.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["Prompter", "RichPrompter", "ScriptedPrompter"]


class Prompter(Protocol):
    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question."""
        ...

    def ask(self, message: str, *, secret: bool = False) -> str:
        """Ask for free text (returns "" when the user just presses enter)."""
        ...


class RichPrompter:
    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console()

    def confirm(self, message: str, default: bool = True) -> bool:
        from rich.prompt import Confirm

        return Confirm.ask(message, default=default, console=self._console)

    def ask(self, message: str, *, secret: bool = False) -> str:
        from rich.prompt import Prompt

        return Prompt.ask(message, password=secret, default="", console=self._console).strip()


def _answers() -> deque[bool | str]:
    return deque()


def _questions() -> list[str]:
    return []


@dataclass
class ScriptedPrompter:
    """Prompter that answers from a queue, recording every question.

    Usage:
        prompter = ScriptedPrompter.of(True, "123456")
        prompter.confirm("Publish?")   # True
        prompter.ask("OTP")            # "123456"
    """

    answers: deque[bool | str] = field(default_factory=_answers)
    questions: list[str] = field(default_factory=_questions)

    @classmethod
    def of(cls, *answers: bool | str) -> ScriptedPrompter:
        return cls(answers=deque(answers))

    def _next(self, message: str) -> bool | str:
        self.questions.append(message)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {message}")
        return self.answers.popleft()

    def confirm(self, message: str, default: bool = True) -> bool:
        answer = self._next(message)
        if not isinstance(answer, bool):
            raise AssertionError(f"expected a yes/no answer for {message!r}, got {answer!r}")
        return answer

    def ask(self, message: str, *, secret: bool = False) -> str:
        answer = self._next(message)
        if not isinstance(answer, str):
            raise AssertionError(f"expected a text answer for {message!r}, got {answer!r}")
        return answer
