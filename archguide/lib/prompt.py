from __future__ import annotations

import glob
import logging
import os
import readline
import shlex
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ..errors import OperatorAbort
from .command import CmdResult, run_shell
from .ui import Terminal

logger = logging.getLogger(__name__)


Reader = Callable[[str, str], str]
ShellRunner = Callable[[str], CmdResult]


@dataclass(frozen=True)
class ProposedAction:
    """A command proposed to the operator.

    Arguments are shell-quoted when substituted into the template, so values
    typed by the operator cannot change the shape of the command.
    """

    template: str
    args: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        return self.template.format(**{k: shlex.quote(str(v)) for k, v in self.args.items()})


def action(template: str, **args: str) -> ProposedAction:
    return ProposedAction(template, dict(args))


def readline_input(prompt: str, default: str = "") -> str:
    """input() with the line pre-filled with `default` for editing."""

    readline.set_startup_hook(lambda: readline.insert_text(default))
    try:
        return input(prompt)
    finally:
        readline.set_startup_hook()


def _complete_path(text: str, state: int) -> Optional[str]:
    matches = sorted(glob.glob(os.path.expanduser(text) + "*"))
    matches = [m + "/" if os.path.isdir(m) else m for m in matches]
    return matches[state] if state < len(matches) else None


def parse_yes_no(text: str) -> Optional[bool]:
    """True for yes, False for no, None for empty input."""

    answer = text.strip().lower()
    if answer in ("y", "yes"):
        return True
    if answer in ("n", "no"):
        return False
    if answer == "":
        return None
    raise ValueError(f"Not a yes/no answer: {text!r}")


class Prompter:
    """Prompts used by step bodies. Every call here may block on the operator."""

    def __init__(
        self,
        term: Optional[Terminal] = None,
        reader: Optional[Reader] = None,
        shell: Optional[ShellRunner] = None,
    ):
        self.term = term or Terminal()
        self._reader = reader or readline_input
        self._shell = shell or run_shell

    def _read(self, prompt: str, default: str = "", style: str = "yellow") -> str:
        try:
            return self._reader(self.term.prompt(prompt, style), default)
        except (KeyboardInterrupt, EOFError) as e:
            self.term.blank()
            raise OperatorAbort("Interrupted by operator") from e

    def ask_text(self, prompt: str, default: str = "") -> str:
        answer = self._read(prompt, default)
        logger.debug("ask_text %r -> %r", prompt, answer)
        return answer

    def ask_path(self, prompt: str, default: str = "") -> str:
        """ask_text with Tab completion of file names."""

        old_completer = readline.get_completer()
        old_delims = readline.get_completer_delims()
        readline.set_completer(_complete_path)
        readline.set_completer_delims(" \t\n")
        readline.parse_and_bind("tab: complete")
        try:
            return self.ask_text(prompt, default)
        finally:
            readline.set_completer(old_completer)
            readline.set_completer_delims(old_delims)

    def ask_yes_no(self, prompt: str, default: Optional[bool] = None) -> bool:
        choices = {True: "Y/n", False: "y/N", None: "y/n"}[default]
        text = f"{prompt} [{choices}]"

        while True:
            try:
                answer = parse_yes_no(self._read(text))
            except ValueError:
                problem = "Invalid input."
            else:
                if answer is None:
                    answer = default
                if answer is not None:
                    logger.info("%s -> %s", prompt, "yes" if answer else "no")
                    return answer
                problem = "No default selection."

            self.term.console.print(f"{problem} Please enter y[es] or n[o].", markup=False, highlight=False)

    def ask_run(self, proposed: ProposedAction | str) -> Optional[CmdResult]:
        """Let the operator edit a command, then run it on Enter.

        Clearing the line skips the command. The result is returned so the
        body can report a failure; nothing is raised for one.
        """

        command = proposed.render() if isinstance(proposed, ProposedAction) else proposed
        line = self._read("Press Enter to run:", command, style="green").strip()
        if not line:
            logger.info("Operator skipped command: %s", command)
            return None
        if line != command:
            logger.info("Operator edited command: %s -> %s", command, line)

        try:
            return self._shell(line)
        except KeyboardInterrupt as e:
            self.term.blank()
            raise OperatorAbort("Interrupted by operator") from e

    def pause(self, message: str = "Press Enter to continue...") -> None:
        self._read(message, style="green")
