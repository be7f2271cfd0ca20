"""Terminal UI built on rich, with $EDITOR for free-form edits."""

from __future__ import annotations

import json
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from contracts.ui import UI

DEFAULT_EDITOR = "vi"


class TerminalUI(UI):
    def __init__(self, console: Console | None = None, editor: str | None = None) -> None:
        self.console = console or Console()
        self.editor = editor or os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR

    def confirm(self, prompt: str) -> bool:
        return Confirm.ask(prompt, console=self.console, default=False)

    def prompt_select(self, options: list[str]) -> str:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Option", justify="center")
        table.add_column("Choice")
        for idx, option in enumerate(options, start=1):
            table.add_row(str(idx), option)
        self.console.print(table)
        choice = Prompt.ask(
            "Select an option",
            console=self.console,
            choices=[str(i) for i in range(1, len(options) + 1)],
            default="1",
        )
        return options[int(choice) - 1]

    def open_editor(self, content: str) -> str:
        """Open *content* in the configured editor and return the saved text."""
        fd, tmp = tempfile.mkstemp(suffix=".txt", prefix="rolechain-")
        path = Path(tmp)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            subprocess.run([*shlex.split(self.editor), str(path)], check=True)
            return path.read_text(encoding="utf-8").strip()
        finally:
            path.unlink(missing_ok=True)

    def pager(self, content: str) -> None:
        with self.console.pager():
            self.console.print(content, markup=False, highlight=False)

    def pretty_print(self, obj: Any) -> None:
        self.console.print_json(json.dumps(obj, default=str))

    def echo(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False)
