"""UI collaborator contract for interactive sessions.

All methods block on terminal/human input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class UI(ABC):
    @abstractmethod
    def confirm(self, prompt: str) -> bool: ...

    @abstractmethod
    def prompt_select(self, options: list[str]) -> str: ...

    @abstractmethod
    def open_editor(self, content: str) -> str: ...

    @abstractmethod
    def pager(self, content: str) -> None: ...

    @abstractmethod
    def pretty_print(self, obj: Any) -> None: ...

    def echo(self, message: str) -> None:
        print(message)
