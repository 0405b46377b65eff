from __future__ import annotations

import logging
import os
from typing import Optional

from ..context import InstallContext
from ..lib.prompt import action
from ..status import StatusCode, StepStatus

logger = logging.getLogger(__name__)


class CleanupStep:
    step_id = "511_cleanup"

    def probe(self, ctx: InstallContext) -> StepStatus:
        if ctx.store.enabled or os.path.exists(ctx.paths.chroot_copy):
            return StepStatus(StatusCode.NOT_DONE, "Cleanup not complete.")
        return StepStatus(StatusCode.DONE, "Cleanup complete.")

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Delete archguide and associated files?", True):
            return False

        if os.path.exists(ctx.paths.chroot_copy):
            ctx.ui.ask_run(action("rm -rv {path}", path=ctx.paths.chroot_copy))
        if ctx.store.enabled:
            ctx.store.set_enabled(False)
            ctx.term.success(f"Removed '{ctx.store.persist_dir}'.")
        return True


class RebootStep:
    step_id = "611_reboot"

    def probe(self, ctx: InstallContext) -> StepStatus:
        return StepStatus(StatusCode.NOT_DONE, "A reboot is required to boot the newly installed system.")

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Reboot into the installed system?", True):
            return False
        ctx.term.info("Please remember to remove the installation medium, if necessary.")
        ctx.ui.ask_run("reboot")
        return True
