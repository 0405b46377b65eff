from __future__ import annotations

import re
import textwrap
from typing import Optional

from rich.console import Console
from rich.text import Text

MAX_LINE_LENGTH = 80

# Readline must be told which prompt characters take no space on screen.
_ANSI_RE = re.compile(r"(\x1b\[[0-9;]*m)")


def center_text(text: str, width: int, pad: str) -> str:
    """Pad `text` on both sides with `pad` until it fills `width`."""

    while len(text) < width:
        text = f"{pad}{text}{pad}"
    return text[:width]


def collapse(text: str) -> str:
    # Source strings are indented triple-quoted paragraphs.
    return " ".join(text.split())


class Terminal:
    """Colored, word-wrapped output for the operator."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def line_length(self) -> int:
        return min(self.console.width, MAX_LINE_LENGTH)

    def paragraph(self, text: str, width: Optional[int] = None) -> str:
        return textwrap.fill(collapse(text), width=width or self.line_length())

    def _print(self, text: str, style: Optional[str] = None) -> None:
        self.console.print(Text(text, style=style or ""), soft_wrap=True)

    def blank(self) -> None:
        self.console.print()

    def banner(self, title: str, pad: str) -> None:
        self.blank()
        self._print(center_text(f" {title} ", self.line_length(), pad))
        self.blank()

    def centered(self, text: str) -> None:
        self._print(center_text(text, self.line_length(), " ").rstrip())

    def bullet(self, text: str, bullet: str = "*", style: Optional[str] = None) -> None:
        lead = f"{bullet} "
        self._print(
            textwrap.fill(
                collapse(text),
                width=self.line_length(),
                initial_indent=lead,
                subsequent_indent=" " * len(lead),
            ),
            style,
        )

    def info(self, text: str) -> None:
        self._print(self.paragraph(text))

    def success(self, text: str) -> None:
        self._print(self.paragraph(text), "green")

    def warn(self, text: str) -> None:
        self._print(self.paragraph(text), "yellow")

    def error(self, text: str) -> None:
        self._print(self.paragraph(text), "red")

    def status(self, message: str, color: str) -> None:
        self.bullet(message, "Status:", color)

    def page(self, text: str) -> None:
        """Show a long listing through the pager when on a terminal."""

        if self.console.is_terminal:
            with self.console.pager():
                self.console.print(text, markup=False, highlight=False)
        else:
            self.console.print(text, markup=False, highlight=False)

    def prompt(self, text: str, style: str) -> str:
        """Render a prompt string for readline, with escapes marked invisible."""

        with self.console.capture() as capture:
            self.console.print(Text(text + " ", style=style), end="")
        return _ANSI_RE.sub(lambda m: f"\001{m.group(1)}\002", capture.get())
