from __future__ import annotations

import logging
import os
from typing import List, Optional

from ..context import InstallContext
from ..lib import mirrorlist
from ..lib.pacman import list_package_names
from ..lib.prompt import action
from ..status import StatusCode, StepStatus
from .common import (
    MarkedStep,
    ask_edit,
    ask_mark_complete,
    ask_packages,
    file_status,
    guess_cpu_vendor,
    has_content,
    show_chroot_command,
    tty_reminder,
)

logger = logging.getLogger(__name__)


# (prompt, suggestions) for the optional package groups offered before pacstrap.
OPTIONAL_PACKAGE_GROUPS = [
    (
        "Add support for additional filesystems? Suggestions:",
        [
            "btrfs-progs",
            "dosfstools (for FAT filesystems)",
            "exfatprogs",
            "f2fs-tools",
            "jfsutils",
            "nilfs-utils",
            "ntfs-3g",
            "udftools",
            "xfsprogs",
        ],
    ),
    (
        "Add a boot manager? Suggestions:",
        ["grub", "os-prober (detect other operating systems for GRUB)", "refind"],
    ),
]

LATER_PACKAGE_GROUPS = [
    (
        "Add networking software? Suggestions:",
        [
            "networkmanager",
            "dhcpcd (DHCP client daemon)",
            "iwd (wireless daemon)",
        ],
    ),
    ("Add security and permissions tools? Suggestions:", ["sudo", "polkit"]),
    (
        "Add documentation and related tools? Suggestions:",
        ["man-db (read man pages)", "man-pages (Linux man pages)", "texinfo (read info pages)"],
    ),
]


class SelectMirrorsStep(MarkedStep):
    step_id = "311_select_mirrors"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        path = ctx.paths.mirrorlist
        term = ctx.term
        term.info(f"Please configure the pacman mirrorlist in '{path}'.")
        term.bullet(
            """This mirrorlist will be used during installation, and will
            also be copied to the installed system."""
        )
        term.bullet(
            """Mirrors placed higher in the mirrorlist will be tried first
            for downloading packages, so it is recommended to have
            geographically closer mirrors at the top of the mirrorlist."""
        )
        term.bullet(
            f"""You may edit the existing mirrorlist, or generate a
            customized mirrorlist tailored by geography, protocol, etc.
            using the mirrorlist generator at '{mirrorlist.MIRRORLIST_URL}'."""
        )

        term.blank()
        if ctx.ui.ask_yes_no("Generate customized mirrorlist?", True):
            term.blank()
            generate_mirrorlist(ctx)

        term.blank()
        ask_edit(ctx, path, True)

        term.blank()
        return ask_mark_complete(ctx, self.step_id)


def _ask_country(ctx: InstallContext, countries: List[tuple]) -> tuple:
    answer: Optional[str] = None
    while True:
        if answer == "":
            ctx.term.page(mirrorlist.format_countries(countries))
        elif answer is not None:
            match = mirrorlist.match_country(countries, answer)
            if match:
                return match
            ctx.term.error(f"'{answer}' does not correspond to a valid country name or country code.")

        ctx.term.info(
            """Enter the country name (e.g. 'United States') or the
            two-letter country code (e.g. 'US') matching your geographic
            location."""
        )
        ctx.term.bullet("To use mirrors in all countries, enter 'all'.")
        ctx.term.bullet(
            """To view the list of available country names and country
            codes, press Enter without typing anything."""
        )
        answer = ctx.ui.ask_text("Enter country name or two-letter code:").strip()


def generate_mirrorlist(ctx: InstallContext) -> bool:
    term = ctx.term
    path = ctx.paths.mirrorlist

    term.info(f"Fetching list of countries from '{mirrorlist.MIRRORLIST_URL}'...")
    countries = mirrorlist.fetch_countries()
    if not countries:
        term.error("Unable to fetch list of countries.")
        return False
    term.success("Fetched list of countries.")

    term.blank()
    code, name = _ask_country(ctx, countries)
    term.success(f"Selected country '{name}' ('{code}').")

    ask = ctx.ui.ask_yes_no
    term.blank()
    term.info("Mirrors using the 'http' and 'https' protocols are available.")
    http = ask("Include mirrors using the 'http' protocol?", True)
    https = ask("Include mirrors using the 'https' protocol?", True)
    term.blank()
    term.info("Mirrors using IPv4 and IPv6 are available.")
    ipv4 = ask("Include mirrors using IPv4?", True)
    ipv6 = ask("Include mirrors using IPv6?", True)
    term.blank()
    term.info("Mirror status info can be used to exclude outdated mirrors.")
    use_status = ask("Exclude outdated mirrors?", True)

    url = mirrorlist.build_request_url(
        code, http=http, https=https, ipv4=ipv4, ipv6=ipv6, use_mirror_status=use_status
    )

    term.blank()
    term.info(f"Downloading the generated mirrorlist will overwrite the existing mirrorlist at '{path}'.")
    if not ask("Download generated mirrorlist?", True):
        return False
    ctx.ui.ask_run(action("curl {url} > {path}", url=url, path=path))

    term.blank()
    if not ask("Uncomment all mirrors in mirrorlist?", True):
        return True
    ctx.ui.ask_run(action("sed -i 's/^#Server/Server/' {path}", path=path))
    return True


class GeneratePackageNamesFileStep:
    step_id = "312_generate_package_names_file"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.store.package_names_path
        if path.is_file():
            return StepStatus(StatusCode.DONE, f"The file '{path}' exists.")
        if ctx.store.enabled:
            return StepStatus(StatusCode.NOT_DONE, f"The file '{path}' does not exist.")
        return StepStatus(StatusCode.INAPPLICABLE, "Persistence disabled.")

    def run(self, ctx: InstallContext) -> Optional[bool]:
        path = ctx.store.package_names_path
        ctx.term.info(
            f"""To validate the names of packages you select for
            installation, archguide can store a list of all available
            package names in the file '{path}'."""
        )
        if not ctx.ui.ask_yes_no("Generate list of package names?", True):
            return False

        names = list_package_names()
        if names is None:
            ctx.term.blank()
            ctx.term.info(
                """To generate the list of package names, the package
                databases must be refreshed first."""
            )
            if not ctx.ui.ask_yes_no("Refresh package databases?", True):
                return False
            ctx.ui.ask_run("pacman -Sy")
            names = list_package_names()

        # An empty file would make every package name invalid.
        if names is None:
            ctx.term.error("Unable to list package names.")
            return False

        ctx.store.write_package_names(names)
        return True


class PacstrapStep:
    step_id = "313_pacstrap"

    def probe(self, ctx: InstallContext) -> StepStatus:
        return file_status(
            ctx.paths.in_target("/var/cache/pacman"),
            "The base system has been installed.",
            "The base system has not been installed.",
            check=os.path.isdir,
        )

    def _group(self, ctx: InstallContext, prompt: str, suggestions: List[str], default: str = "") -> List[str]:
        ctx.term.blank()
        ctx.term.info(prompt)
        for s in suggestions:
            ctx.term.bullet(s)
        return ask_packages(ctx, default)

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Install the base system with pacstrap?", True):
            return False

        term = ctx.term
        packages = ["base"]

        term.blank()
        term.info("Choose a kernel package. (May be optional for containers.)")
        packages += ask_packages(ctx, "linux")

        term.blank()
        term.info(
            """Add any desired firmware packages. (May be optional for
            virtual machines and containers.) Note that 'linux-firmware'
            does not support all devices, so additional firmware packages
            may be necessary."""
        )
        packages += ask_packages(ctx, "linux-firmware")

        term.blank()
        vendor = guess_cpu_vendor(ctx)
        packages += self._group(
            ctx,
            """Add the microcode package corresponding to the installed CPU.
            (Not required for virtual machines and containers.)
            Suggestions:""",
            ["amd-ucode", "intel-ucode"],
            f"{vendor}-ucode" if vendor else "",
        )

        for prompt, suggestions in OPTIONAL_PACKAGE_GROUPS:
            packages += self._group(ctx, prompt, suggestions)

        packages += self._group(
            ctx,
            "Add a text editor? Suggestions:",
            ["emacs", "nano", "vim"],
            ctx.store.config_get("text_editor") or "",
        )

        for prompt, suggestions in LATER_PACKAGE_GROUPS:
            packages += self._group(ctx, prompt, suggestions)

        term.blank()
        term.info(
            """Add any other packages? archguide needs 'python' and
            'python-rich' to continue inside the chroot."""
        )
        packages += ask_packages(ctx, ctx.store.config_get("extra_pkgs") or "python python-rich")

        term.blank()
        ctx.ui.ask_run(f"pacstrap {ctx.paths.target_root} " + " ".join(packages))
        return True


class GenerateFstabStep:
    step_id = "321_generate_fstab"

    def probe(self, ctx: InstallContext) -> StepStatus:
        path = ctx.paths.in_target("/etc/fstab")
        return file_status(
            path,
            f"The file '{path}' has been generated.",
            f"The file '{path}' has not been generated.",
            check=has_content,
        )

    def run(self, ctx: InstallContext) -> Optional[bool]:
        target = ctx.paths.target_root
        path = ctx.paths.in_target("/etc/fstab")
        ctx.term.info(
            f"""The file '/etc/fstab' defines mountpoints and mounting
            options for each filesystem. Please ensure that all additional
            filesystems (e.g. home partition, EFI system partition) are
            mounted appropriately under '{target}' before proceeding."""
        )
        tty_reminder(ctx)
        if not ctx.ui.ask_yes_no("Generate fstab?", True):
            return False

        ctx.term.blank()
        ctx.term.info(
            """To define mountpoints using filesystem labels instead of
            UUIDs, use the option '-L' instead of '-U'."""
        )
        ctx.ui.ask_run(action("genfstab -U {target} >> {path}", target=target, path=path))

        ctx.term.blank()
        ask_edit(ctx, path, True)
        return True


class ChrootStep(MarkedStep):
    step_id = "331_chroot"

    def run(self, ctx: InstallContext) -> Optional[bool]:
        if not ctx.ui.ask_yes_no("Change root into the new system?", True):
            return False

        paths = ctx.paths
        app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        copy_dir = paths.in_target(paths.chroot_copy)

        ctx.term.info(
            """To continue using archguide in the new system, the program and
            its persistence directory (if any) must be copied into the
            chroot."""
        )
        ctx.ui.ask_run(action("mkdir -p {dst} && cp -rv {src} {dst}/", src=app_dir, dst=copy_dir))
        if ctx.store.enabled:
            ctx.ui.ask_run(
                action(
                    "cp -rvT {src} {dst}",
                    src=str(ctx.store.persist_dir),
                    dst=paths.in_target(str(ctx.store.persist_dir)),
                )
            )

        ctx.term.blank()
        ctx.term.info(
            """Please chroot into the new system. You may start archguide in
            the chroot by entering the following command into the chroot
            shell:"""
        )
        show_chroot_command(ctx)
        ctx.term.info(
            """Once archguide is running in the chroot, you may regain access
            to the chroot shell using Ctrl+C. To continue with archguide,
            simply enter the above command again."""
        )
        ctx.ui.ask_run(action("arch-chroot {target}", target=paths.target_root))

        ctx.term.blank()
        ctx.term.info("Exited chroot.")
        ctx.term.blank()
        return ask_mark_complete(ctx, self.step_id)
