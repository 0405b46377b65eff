from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    persist_dir: str = "/root/.archguide"
    # Where the program is copied in the new system so it can run in the chroot.
    chroot_copy: str = "/root/.archguide-app"
    target_root: str = "/mnt"

    efivars: str = "/sys/firmware/efi/efivars"
    cpuinfo: str = "/proc/cpuinfo"
    mirrorlist: str = "/etc/pacman.d/mirrorlist"
    localtime: str = "/etc/localtime"
    zoneinfo: str = "/usr/share/zoneinfo/"
    adjtime: str = "/etc/adjtime"
    locale_gen: str = "/etc/locale.gen"
    locale_conf: str = "/etc/locale.conf"
    vconsole_conf: str = "/etc/vconsole.conf"
    hostname: str = "/etc/hostname"
    hosts: str = "/etc/hosts"
    mkinitcpio_conf: str = "/etc/mkinitcpio.conf"
    grub_dir: str = "/boot/grub"
    grub_cfg: str = "/boot/grub/grub.cfg"
    grub_defaults: str = "/etc/default/grub"

    def in_target(self, path: str) -> str:
        """Return `path` as seen from the live environment (under target_root)."""

        return str(Path(self.target_root) / path.lstrip("/"))

    @classmethod
    def under(cls, root: str | Path, **overrides: str) -> "Paths":
        """Rebase every default path below `root`, e.g. for a test sysroot."""

        base = cls()
        rebased = {
            f.name: str(Path(root) / getattr(base, f.name).lstrip("/"))
            for f in fields(cls)
        }
        rebased.update(overrides)
        return replace(base, **rebased)


PATHS = Paths()
