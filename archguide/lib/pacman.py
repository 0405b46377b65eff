from __future__ import annotations

import logging
from typing import Iterable, Optional, Set

from .command import run_cmd

logger = logging.getLogger(__name__)


def package_installed(package: str) -> bool:
    r = run_cmd(["pacman", "-Q", package], check=False)
    return r.returncode == 0


def list_package_names() -> Optional[str]:
    """Return `pacman -Ssq` output, or None when the sync databases are unusable."""

    r = run_cmd(["pacman", "-Ssq"], check=False)
    if r.returncode != 0 or not r.stdout.strip():
        logger.info("pacman -Ssq failed (%s)", r.returncode)
        return None
    return r.stdout


def first_missing(packages: Iterable[str], known: Optional[Set[str]]) -> Optional[str]:
    """Return the first name not in `known`. Without a name list, nothing is missing."""

    if known is None:
        return None
    for name in packages:
        if name not in known:
            return name
    return None
