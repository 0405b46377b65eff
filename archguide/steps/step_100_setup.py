from __future__ import annotations

import logging
from typing import Optional

from ..context import InstallContext
from ..lib.prompt import action
from ..status import StatusCode, StepStatus

logger = logging.getLogger(__name__)


WIKI_URL = "https://wiki.archlinux.org/title/Installation_guide"


class ReadmeStep:
    step_id = "111_readme"

    def probe(self, ctx: InstallContext) -> StepStatus:
        # Always shown.
        return StepStatus(StatusCode.NOT_DONE)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        term = ctx.term
        term.centered("archguide: A Respectful Install Guide for Arch")
        term.blank()
        term.info(
            """Throughout the installation process, you may be prompted to
            switch to another TTY to perform an action manually. This can be
            done using the Alt+(arrow key) shortcut."""
        )
        term.blank()
        term.info(
            """You will be prompted before any commands that alter the system
            are run. These commands will be executed in the Bash shell, and
            you will see their output. You may also edit these commands, or
            delete them entirely if you don't want to run them. For
            example:"""
        )
        ctx.ui.ask_run(action("echo {greeting}", greeting="Hello World!"))
        ctx.ui.pause()
        term.blank()
        term.info(
            f"""It is highly recommended to have the Arch Linux installation
            guide at <{WIKI_URL}> open during the installation process,
            whether in another TTY using 'elinks' or on another device."""
        )
        term.blank()
        term.info(
            """You may press Ctrl+C to exit archguide at any time, and your
            progress will be remembered when you run archguide again."""
        )
        ctx.ui.pause()
        return True


class CreatePersistDirStep:
    step_id = "121_create_persist_dir"

    def probe(self, ctx: InstallContext) -> StepStatus:
        persist_dir = ctx.store.persist_dir
        if ctx.store.enabled:
            return StepStatus(StatusCode.DONE, f"The directory '{persist_dir}' exists.")
        return StepStatus(StatusCode.NOT_DONE, f"The directory '{persist_dir}' does not exist.")

    def run(self, ctx: InstallContext) -> Optional[bool]:
        term = ctx.term
        term.info(
            f"""The optional persistence directory '{ctx.store.persist_dir}'
            is used for the following purposes:"""
        )
        term.bullet("Storing user preferences (e.g. keyboard layout, text editor)")
        term.bullet("Remembering which steps have been marked as complete")
        term.blank()
        if not ctx.ui.ask_yes_no("Create the optional persistence directory?", True):
            return False

        if not ctx.store.set_enabled(True):
            term.error(
                f"""Could not create '{ctx.store.persist_dir}'. Continuing
                without persistence."""
            )
            return False
        term.success(f"Created '{ctx.store.persist_dir}'.")
        return True
