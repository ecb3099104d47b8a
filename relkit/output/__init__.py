"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .prompt import Prompter, RichPrompter, ScriptedPrompter

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "Prompter",
    "RichConsole",
    "RichPrompter",
    "ScriptedPrompter",
    "Style",
]
