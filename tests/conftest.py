from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any, List, Tuple

import pytest
from rich.console import Console

from archguide.context import InstallContext
from archguide.lib.command import CmdResult
from archguide.lib.env import Paths
from archguide.lib.prompt import Prompter
from archguide.lib.ui import Terminal
from archguide.state_store import PersistentStore

# Scripted answer meaning "press Enter on the pre-filled line".
KEEP = object()


class ScriptedReader:
    def __init__(self, answers=()):
        self.answers: List[Any] = list(answers)
        self.prompts: List[Tuple[str, str]] = []

    def __call__(self, prompt: str, default: str = "") -> str:
        self.prompts.append((prompt, default))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt!r}")
        answer = self.answers.pop(0)
        if answer is KEEP:
            return default
        if isinstance(answer, BaseException) or (isinstance(answer, type) and issubclass(answer, BaseException)):
            raise answer
        return answer


class RecordingShell:
    def __init__(self, returncode: int = 0):
        self.commands: List[str] = []
        self.returncode = returncode

    def __call__(self, line: str) -> CmdResult:
        self.commands.append(line)
        return CmdResult(argv=["bash", "-c", line], returncode=self.returncode, stdout="", stderr="")


@dataclass
class Harness:
    ctx: InstallContext
    reader: ScriptedReader
    shell: RecordingShell
    output: io.StringIO

    @property
    def text(self) -> str:
        return self.output.getvalue()

    def answer(self, *answers: Any) -> None:
        self.reader.answers.extend(answers)


@pytest.fixture
def make_harness(tmp_path):
    def _make(answers=(), *, persist: bool = True, force: bool = False, returncode: int = 0) -> Harness:
        output = io.StringIO()
        term = Terminal(Console(file=output, width=80, color_system=None, highlight=False))
        reader = ScriptedReader(answers)
        shell = RecordingShell(returncode)
        paths = Paths.under(tmp_path / "sysroot")
        store = PersistentStore(paths.persist_dir)
        if persist:
            store.set_enabled(True)
        ctx = InstallContext(store=store, ui=Prompter(term, reader=reader, shell=shell), paths=paths, force=force)
        return Harness(ctx=ctx, reader=reader, shell=shell, output=output)

    return _make


@pytest.fixture
def harness(make_harness):
    return make_harness()
