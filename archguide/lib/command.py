from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)


DEFAULT_SHELL = "/bin/bash"


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    capture: bool = True,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False lets the operator see the output (and interact with
      the command); only the exit status is recorded.
    - A missing executable is reported as exit status 127, like a shell.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    pipe = subprocess.PIPE if capture else None
    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=pipe,
            stderr=pipe,
        )
    except FileNotFoundError as e:
        logger.warning("Command not found: %s", argv_list[0])
        if check:
            raise RuntimeError(f"Command not found: {argv_list[0]}") from e
        return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise RuntimeError(f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{p.stderr}")

    return CmdResult(
        argv=argv_list,
        returncode=p.returncode,
        stdout=p.stdout or "",
        stderr=p.stderr or "",
    )


def run_shell(command_line: str, *, shell: str = DEFAULT_SHELL) -> CmdResult:
    """Run an operator-approved command line in a child shell.

    Output goes straight to the terminal. The exit status is logged but a
    failure is never raised: the operator saw the output and decides.
    """

    logger.info("SHELL %s", command_line)
    with subprocess.Popen([shell, "-c", command_line]) as proc:
        try:
            returncode = proc.wait()
        except KeyboardInterrupt:
            proc.terminate()
            proc.wait()
            raise

    if returncode != 0:
        logger.warning("Shell command exited with %s: %s", returncode, command_line)

    return CmdResult(argv=[shell, "-c", command_line], returncode=returncode, stdout="", stderr="")
