from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from ..context import InstallContext
from ..lib.command import run_cmd
from ..lib.pacman import package_installed
from ..lib.prompt import action
from ..status import StatusCode, StepStatus, marked_status
from .common import (
    MarkedStep,
    ask_edit,
    ask_keyboard_layout,
    ask_mark_complete,
    ctrl_c_reminder,
    file_status,
    guess_locale,
    has_content,
)

logger = logging.getLogger(__name__)


class SetTimeZoneStep:
    step_id = "411_set_time_zone"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.localtime
        return file_status(
            path,
            f"Time zone set ('{path}' exists).",
            f"Time zone not set ('{path}' does not exist).",
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Set time zone?", True):
            return False
        ctx.term.blank()

        zoneinfo = ctx.paths.zoneinfo.rstrip("/") + "/"
        tz_file: Optional[str] = None
        while tz_file is None or not os.path.isfile(tz_file):
            if tz_file is not None and os.path.isdir(tz_file):
                ctx.term.error(
                    f"""'{tz_file}' is a directory, not a file. Did you mean
                    to select a file within that directory?"""
                )
            elif tz_file is not None:
                ctx.term.error(f"The file '{tz_file}' does not exist.")

            ctx.term.info(
                """Select the time zone information file corresponding to
                this system's geographic location."""
            )
            ctx.term.bullet("To list available options, press Tab twice.")
            tz_file = ctx.ui.ask_path("Time zone file:", zoneinfo).strip()

        ctx.term.blank()
        ctx.ui.ask_run(action("ln -sf {src} {dst}", src=tz_file, dst=ctx.paths.localtime))
        return True


class GenerateAdjtimeStep:
    step_id = "412_generate_etc_adjtime"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.adjtime
        return file_status(
            path,
            f"The file '{path}' exists.",
            f"The file '{path}' does not exist.",
            check=os.path.isfile,
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        path = ctx.paths.adjtime
        ctx.term.info(
            f"""The file '{path}' stores configuration and calibration data
            for the hardware clock. This file can be generated by setting
            the hardware clock from the system time."""
        )
        ctx.term.bullet("For more information, see 'man hwclock'.")
        if not ctx.ui.ask_yes_no(f"Generate '{path}'?", True):
            return False

        ctx.term.blank()
        ctx.term.info(
            """If you would like the hardware clock to use local time instead
            of UTC, add the option '--localtime'."""
        )
        ctx.ui.ask_run("hwclock --systohc")
        return True


class SelectLocalesStep:
    step_id = "421_select_locales"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.locale_gen
        return file_status(
            path,
            f"Locales have been selected in '{path}'.",
            f"Locales have not been selected in '{path}'.",
            check=has_content,
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Select system locale(s)?", True):
            return False
        path = ctx.paths.locale_gen
        ctx.term.blank()
        ctx.term.info(
            f"""Please uncomment the desired locale entries (e.g.
            'en_US.UTF-8') in '{path}'."""
        )
        return ask_edit(ctx, path, True)


class GenerateLocalesStep(MarkedStep):
    step_id = "422_generate_locales"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Generate system locale(s)?", True):
            return False
        ctx.term.blank()
        ctx.ui.ask_run("locale-gen")
        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)


class CreateLocaleConfStep:
    step_id = "423_create_locale_conf"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.locale_conf
        return file_status(
            path,
            f"The file '{path}' exists.",
            f"The file '{path}' does not exist.",
            check=os.path.isfile,
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Set default system locale?", True):
            return False
        ctx.term.blank()
        locale = guess_locale(ctx) or ""
        ctx.ui.ask_run(action("echo {line} > {path}", line=f"LANG={locale}", path=ctx.paths.locale_conf))
        return True


_KEYMAP_RE = re.compile(r"^KEYMAP=", re.MULTILINE)


class SetDefaultKeyboardLayoutStep:
    step_id = "424_set_default_keyboard_layout"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = Path(ctx.paths.vconsole_conf)
        if path.is_file() and _KEYMAP_RE.search(path.read_text(encoding="utf-8", errors="replace")):
            return StepStatus(StatusCode.DONE, f"Console keyboard layout is set in '{path}'.")
        # Keeping US QWERTY leaves no trace on disk.
        return marked_status(ctx, self.step_id)

    def _write_keymap(self, ctx: InstallContext, layout: str) -> None:
        ctx.ui.ask_run(action("echo {line} >> {path}", line=f"KEYMAP={layout}", path=ctx.paths.vconsole_conf))

    def run(self, ctx: InstallContext) -> Optional[bool]:
        layout = ctx.store.config_get("keyboard_layout")
        if layout:
            ctx.term.info(
                f"""You previously selected the '{layout}' keyboard layout
                for use during the installation process. Would you like to
                make this the default keyboard layout for the installed
                system?"""
            )
            if ctx.ui.ask_yes_no(f"Make '{layout}' the default?", True):
                ctx.term.blank()
                self._write_keymap(ctx, layout)
                return True
            ctx.term.blank()

        ctx.term.info("Choose the default virtual console keyboard layout for the installed system.")
        ctx.term.bullet(
            """If you selected an alternate keyboard layout earlier in the
            installation process, you may wish to select the same layout in
            this step. Otherwise, the installed system will use US QWERTY."""
        )
        ctx.term.blank()
        if ctx.ui.ask_yes_no("Change default layout?", False):
            self._write_keymap(ctx, ask_keyboard_layout(ctx))
            return True

        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)


class SetHostnameStep:
    step_id = "431_set_hostname"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.hostname
        return file_status(
            path,
            f"Hostname file '{path}' exists.",
            f"Hostname file '{path}' does not exist.",
            check=os.path.isfile,
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Set system hostname?", True):
            return False
        hostname = ctx.ui.ask_text("Enter hostname:").strip()
        ctx.ui.ask_run(action("echo {name} > {path}", name=hostname, path=ctx.paths.hostname))
        return True


class GenerateHostsStep:
    step_id = "432_generate_etc_hosts"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.hosts
        return file_status(
            path,
            f"Host table '{path}' has been generated.",
            f"Host table '{path}' has not been generated.",
            check=has_content,
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        path = ctx.paths.hosts
        if not ctx.ui.ask_yes_no(f"Generate static host table '{path}'?", True):
            return False

        hostname_path = Path(ctx.paths.hostname)
        if hostname_path.is_file():
            hn = hostname_path.read_text(encoding="utf-8").strip()
        else:
            ctx.term.error(
                f"""Hostname not set in '{hostname_path}'! Please change the
                dummy hostname in the following commands."""
            )
            hn = "MYHOSTNAME"

        ctx.term.blank()
        ctx.term.info(
            """Enter this system's permanent IP address, or leave the
            provided value unchanged if this system will not have a
            permanent IP address."""
        )
        ip = ctx.ui.ask_text("IP address:", "127.0.1.1").strip()

        ctx.term.blank()
        for fields in (
            ["127.0.0.1", "localhost"],
            ["::1", "localhost"],
            [ip, f"{hn}.localdomain", hn],
        ):
            fmt = "\\t".join(["%s"] * len(fields)) + "\\n"
            args = {f"f{i}": v for i, v in enumerate(fields)}
            template = "printf {fmt} " + " ".join(f"{{f{i}}}" for i in range(len(fields))) + " >> {path}"
            ctx.ui.ask_run(action(template, fmt=fmt, path=path, **args))

        ctx.term.blank()
        ask_edit(ctx, path, True)
        return True


class RecreateInitramfsStep(MarkedStep):
    step_id = "441_recreate_initramfs"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        path = ctx.paths.mkinitcpio_conf
        ctx.term.info(
            f"""If you need to customize the initramfs (e.g. to support LVM,
            disk encryption, or RAID), you may make these changes by editing
            '{path}' and regenerating the initramfs."""
        )
        if ctx.ui.ask_yes_no(f"Edit '{path}' and regenerate initramfs?", False):
            ctx.term.blank()
            ask_edit(ctx, path, True)
            ctx.term.blank()
            ctx.ui.ask_run("mkinitcpio -P")

        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)


def root_password_state() -> Optional[str]:
    """Return the `passwd -S` state (P, NP, L) for root, or None if not root."""

    r = run_cmd(["passwd", "-S"], check=False)
    parts = r.stdout.split()
    if r.returncode != 0 or len(parts) < 2 or parts[0] != "root":
        return None
    return parts[1]


class SetRootPasswordStep:
    step_id = "451_set_root_password"

    MESSAGES = {
        "P": (StatusCode.DONE, "Root password is set."),
        "NP": (StatusCode.NOT_DONE, "No root password set."),
        "L": (StatusCode.NOT_DONE, "Root password is locked."),
    }

    def probe(self, ctx: InstallContext) -> StepStatus:
        state = root_password_state()
        if state is None:
            return StepStatus(StatusCode.INAPPLICABLE, "Not running as root.")
        code, message = self.MESSAGES.get(state, (StatusCode.NOT_DONE, f"Unknown root password status '{state}'."))
        return StepStatus(code, message)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Set root password?", True):
            return False
        ctx.ui.ask_run("passwd")
        return True


GRUB_NOT_INSTALLED = "The GRUB package is not installed."


class InstallGrubStep:
    step_id = "461_install_grub"

    def probe(self, ctx: InstallContext) -> StepStatus:
        if os.path.isdir(ctx.paths.grub_dir):
            return StepStatus(StatusCode.DONE, "GRUB is installed.")
        if package_installed("grub"):
            return StepStatus(StatusCode.NOT_DONE, "GRUB has not been installed.")
        return StepStatus(StatusCode.INAPPLICABLE, GRUB_NOT_INSTALLED)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Install the GRUB boot manager?", True):
            return False
        term = ctx.term
        term.blank()
        term.info("See 'man grub-install' for more information.")
        term.blank()
        term.info("Example for BIOS+MBR systems:")
        term.bullet("grub-install --target=i386-pc /dev/sdX", "#")
        term.blank()
        term.info("Example for UEFI+GPT systems:")
        term.bullet("grub-install --target=x86_64-efi --efi-directory=/efi --bootloader-id=GRUB", "#")
        term.blank()
        term.info(
            """If you are using UEFI and installing to a removable drive,
            consider adding the '--removable' option to make the drive
            itself bootable."""
        )
        term.blank()
        ctx.ui.ask_run("grub-install")
        return True


class RunOsProberStep:
    step_id = "462_run_os_prober"

    def probe(self, ctx: InstallContext) -> StepStatus:
        if not package_installed("os-prober"):
            return StepStatus(StatusCode.INAPPLICABLE, "The 'os-prober' package is not installed.")
        return marked_status(ctx, self.step_id)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        ctx.term.info(
            """The 'os-prober' utility detects other installed operating
            systems and adds GRUB boot entries for them."""
        )
        if not ctx.ui.ask_yes_no("Detect other operating systems?", True):
            return False
        ctx.term.blank()
        ctx.term.info(
            """Please ensure that all partitions containing other operating
            systems are mounted before proceeding."""
        )
        ctrl_c_reminder(ctx)
        ctx.term.blank()
        ctx.ui.ask_run("os-prober")
        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)


class GrubMkconfigStep:
    step_id = "463_grub_mkconfig"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.grub_cfg
        if os.path.isfile(path):
            return StepStatus(StatusCode.DONE, f"The GRUB config file '{path}' exists.")
        if package_installed("grub"):
            return StepStatus(StatusCode.NOT_DONE, f"The GRUB config file '{path}' does not exist.")
        return StepStatus(StatusCode.INAPPLICABLE, GRUB_NOT_INSTALLED)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        path = ctx.paths.grub_cfg
        ctx.term.info(
            f"""For GRUB to boot the system, the GRUB main configuration file
            at '{path}' must be generated."""
        )
        if not ctx.ui.ask_yes_no(f"Generate '{path}'?", True):
            return False
        ctx.term.blank()
        ctx.term.info("Would you like to edit the GRUB settings file first?")
        ask_edit(ctx, ctx.paths.grub_defaults, True)
        ctx.term.blank()
        ctx.ui.ask_run(action("grub-mkconfig -o {path}", path=path))
        return True


class OtherBootManagerStep:
    step_id = "469_other_boot_manager"

    def probe(self, ctx: InstallContext) -> StepStatus:
        if package_installed("grub"):
            return StepStatus(StatusCode.INAPPLICABLE, "GRUB is installed; no other boot manager needed.")
        return marked_status(ctx, self.step_id)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        ctx.term.warn(
            """The GRUB package is not installed. If you will use another
            boot manager (e.g. rEFInd) you may now install it manually."""
        )
        ctrl_c_reminder(ctx)
        ctx.ui.pause()
        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)
