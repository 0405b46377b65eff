from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Callable, Optional

from ..context import InstallContext
from ..errors import PersistenceDisabled
from ..lib.command import run_cmd
from ..lib.pacman import first_missing
from ..status import StatusCode, StepStatus, marked_status

logger = logging.getLogger(__name__)


EDITORS = ("nano", "vi", "vim")

_CONTENT_RE = re.compile(r"^(#.*|\s*)$")


def has_content(path: str) -> bool:
    """True if the file has a line that is neither blank nor a comment."""

    p = Path(path)
    if not p.is_file():
        return False
    return any(not _CONTENT_RE.match(line) for line in p.read_text(encoding="utf-8", errors="replace").splitlines())


def file_status(
    path: str,
    present: str,
    absent: str,
    *,
    check: Callable[[str], bool] = os.path.exists,
) -> StepStatus:
    if check(path):
        return StepStatus(StatusCode.DONE, present)
    return StepStatus(StatusCode.NOT_DONE, absent)


class MarkedStep:
    """Base for steps with no live signal: status comes from the completion log."""

    step_id = ""

    def probe(self, ctx: InstallContext) -> StepStatus:
        return marked_status(ctx, self.step_id)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        raise NotImplementedError


def ask_mark_complete(ctx: InstallContext, step_id: str) -> bool:
    if not ctx.store.enabled:
        ctx.term.warn(
            f"""Cannot mark this step ({step_id}) as complete,
            because persistence is disabled."""
        )
        return False
    if ctx.ui.ask_yes_no(f"Mark this step ({step_id}) as complete?", True):
        return ctx.store.mark_complete(step_id)
    return False


def remember(ctx: InstallContext, key: str, value: str) -> bool:
    """Store a preference; without persistence the operator is asked again next time."""

    try:
        ctx.store.config_set(key, value)
    except PersistenceDisabled:
        logger.info("Not remembering %s (persistence disabled)", key)
        return False
    return True


def tty_reminder(ctx: InstallContext) -> None:
    ctx.term.bullet(
        """To leave archguide and perform this action manually, you may
        wish to switch to another TTY using Alt+(arrow key)."""
    )


def show_chroot_command(ctx: InstallContext) -> None:
    ctx.term.bullet(f"cd {ctx.paths.chroot_copy} && python -m archguide chroot", "#")


def ctrl_c_reminder(ctx: InstallContext) -> None:
    ctx.term.bullet(
        """To exit archguide and perform this action manually, you may use
        Ctrl+C to access the chroot shell. Once you are finished, the
        following command will start archguide again:"""
    )
    show_chroot_command(ctx)


def get_editor(ctx: InstallContext) -> str:
    editor = ctx.store.config_get("text_editor")
    if editor:
        return editor

    editor = ""
    while editor not in EDITORS:
        if editor:
            ctx.term.error("Input does not match the available options.")
        ctx.term.blank()
        ctx.term.info(
            f"""The text editors available in the Arch Linux live environment
            are {', '.join(repr(e) for e in EDITORS)}. Please choose your
            preferred text editor."""
        )
        editor = ctx.ui.ask_text("Text editor:", "nano").strip()

    remember(ctx, "text_editor", editor)
    return editor


def ask_edit(ctx: InstallContext, path: str, default: Optional[bool] = None) -> bool:
    if not ctx.ui.ask_yes_no(f"Edit '{path}'?", default):
        return False
    r = run_cmd([get_editor(ctx), path], check=False, capture=False)
    return r.ok


def _keymaps() -> list[str]:
    r = run_cmd(["localectl", "list-keymaps"], check=False)
    return r.stdout.split()


def ask_keyboard_layout(ctx: InstallContext) -> str:
    keymaps = _keymaps()
    keymap: Optional[str] = None

    while keymap is None or keymap not in keymaps:
        if keymap == "":
            ctx.term.page("\n".join(keymaps))
        elif keymap is not None:
            ctx.term.error(f"'{keymap}' is not a valid layout name.")

        ctx.term.blank()
        ctx.term.info("Enter the name of the desired keyboard layout.")
        ctx.term.bullet(
            """To view a list of valid layout names, press Enter without
            typing anything."""
        )
        keymap = ctx.ui.ask_text("Keyboard layout name:").strip()

    return keymap


def known_package_names(ctx: InstallContext) -> Optional[set[str]]:
    path = ctx.store.package_names_path
    if not ctx.store.enabled or not path.is_file():
        return None
    return set(path.read_text(encoding="utf-8", errors="replace").split())


def ask_packages(ctx: InstallContext, default: str = "") -> list[str]:
    """Ask for package names, re-asking until every name exists."""

    known = known_package_names(ctx)
    packages = ctx.ui.ask_text("Enter package name(s):", default).split()

    while True:
        missing = first_missing(packages, known)
        if missing is None:
            return packages
        ctx.term.error(f"The package '{missing}' does not exist.")
        packages = ctx.ui.ask_text("Enter package name(s):", " ".join(packages)).split()


def guess_cpu_vendor(ctx: InstallContext) -> Optional[str]:
    try:
        cpuinfo = Path(ctx.paths.cpuinfo).read_text(encoding="utf-8", errors="replace")
    except OSError:
        cpuinfo = ""
    vendor_lines = [line for line in cpuinfo.splitlines() if line.startswith("vendor_id")]
    vendor_id = "\n".join(vendor_lines)

    if "AuthenticAMD" in vendor_id:
        ctx.term.info("Detected AMD CPU.")
        return "amd"
    if "GenuineIntel" in vendor_id:
        ctx.term.info("Detected Intel CPU.")
        return "intel"
    ctx.term.warn("Failed to guess CPU manufacturer.")
    return None


_LOCALE_RE = re.compile(r"^[^#\s]\S*")


def guess_locale(ctx: InstallContext) -> Optional[str]:
    path = Path(ctx.paths.locale_gen)
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines() if path.is_file() else []
    for line in lines:
        m = _LOCALE_RE.match(line)
        if m:
            ctx.term.info(f"Guessed locale from '{path}': '{m.group(0)}'.")
            return m.group(0)
    ctx.term.warn(f"Failed to guess locale from '{path}'.")
    return None
