from __future__ import annotations

import logging
import os
from typing import Optional

from ..context import InstallContext
from ..lib.command import run_cmd
from ..lib.prompt import action
from ..status import StatusCode, StepStatus
from .common import MarkedStep, ask_keyboard_layout, ask_mark_complete, remember, tty_reminder

logger = logging.getLogger(__name__)


class SetKeyboardLayoutStep(MarkedStep):
    step_id = "211_set_keyboard_layout"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        ctx.term.info(
            """If you prefer a keyboard layout other than US QWERTY, you may
            change it now."""
        )
        ctx.term.bullet(
            """If you have already changed the keyboard layout (e.g. using
            'loadkeys'), you may skip this step."""
        )
        ctx.term.blank()
        if ctx.ui.ask_yes_no("Change current keyboard layout?", False):
            layout = ask_keyboard_layout(ctx)
            remember(ctx, "keyboard_layout", layout)
            ctx.ui.ask_run(action("loadkeys {layout}", layout=layout))

        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)


class VerifyBootModeStep:
    step_id = "221_verify_boot_mode"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.efivars
        if os.path.isdir(path):
            return StepStatus(StatusCode.NEVER_RUN, "This system is booted in UEFI mode.")
        return StepStatus(
            StatusCode.INAPPLICABLE,
            f"Could not access the directory '{path}'. This system is probably not booted in UEFI mode.",
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        # The firmware mode is reported, never changed.
        return None


class InternetConnectionStep(MarkedStep):
    step_id = "231_test_internet_connection"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        ctx.term.info(
            """Please connect to the internet. (You may have already done
            this before downloading archguide.)"""
        )
        tty_reminder(ctx)

        ctx.term.blank()
        if not ctx.ui.ask_yes_no("Test internet connection with 'ping'?", True):
            return False
        ctx.ui.ask_run("ping -c 4 archlinux.org")

        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)


class UpdateSystemClockStep:
    step_id = "241_update_system_clock"

    def probe(self, ctx: InstallContext) -> StepStatus:
        r = run_cmd(["timedatectl", "status"], check=False)
        if "NTP service: active" in r.stdout:
            return StepStatus(StatusCode.DONE, "The NTP service is active.")
        return StepStatus(StatusCode.NOT_DONE, "The NTP service has not been started yet.")

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Sync the system clock using NTP?", True):
            return False
        ctx.ui.ask_run("timedatectl set-ntp true")
        return True


class PartitionDisksStep(MarkedStep):
    step_id = "251_partition_disks"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        ctx.term.info(
            """Please partition your disk(s) using 'fdisk' or similar. (This
            step is not automated, to give you full control.) Consider
            including the following:"""
        )
        ctx.term.bullet("Root partition (required)")
        ctx.term.bullet("EFI system partition (for UEFI booting; might already exist)")
        ctx.term.bullet("Swap partition (or a swap file, if supported)")
        ctx.term.blank()
        tty_reminder(ctx)
        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)


class FormatPartitionsStep(MarkedStep):
    step_id = "252_format_partitions"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        term = ctx.term
        term.info("Please format the partitions you created in the previous step.")
        for title, commands in (
            ("EFI partition example:", ["mkfs.fat -F32 /dev/sdX1"]),
            ("Root partition example:", ["mkfs.ext4 /dev/sdX2"]),
            ("Swap partition example:", ["mkswap /dev/sdX3", "swapon /dev/sdX3"]),
        ):
            term.blank()
            term.info(title)
            for command in commands:
                term.bullet(command, "#")
        term.blank()
        tty_reminder(ctx)
        term.blank()
        return ask_mark_complete(ctx, self.step_id)


class MountFilesystemsStep(MarkedStep):
    step_id = "253_mount_filesystems"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        term = ctx.term
        target = ctx.paths.target_root
        term.info("Please mount the partitions you formatted in the previous step.")
        term.blank()
        term.info("Root partition example:")
        term.bullet(f"mount /dev/sdX2 {target}", "#")
        term.blank()
        term.info("EFI partition example:")
        term.bullet(f"mkdir {target}/efi", "#")
        term.bullet(f"mount /dev/sdX1 {target}/efi", "#")
        term.blank()
        tty_reminder(ctx)
        term.blank()
        return ask_mark_complete(ctx, self.step_id)
