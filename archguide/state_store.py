from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterator, Optional, Set, Tuple

from .errors import PersistenceDisabled

logger = logging.getLogger(__name__)


PROGRESS_FILE = "marked-complete"
CONFIG_FILE = "config"
PACKAGE_NAMES_FILE = "package-names"


def _append_line(path: Path, line: str) -> None:
    # Durable before returning: an interrupted run must keep earlier entries.
    with open(path, "a", encoding="utf-8") as f:
        f.write(line + "\n")
        f.flush()
        os.fsync(f.fileno())


def _read_lines(path: Path) -> list[str]:
    if not path.is_file():
        return []
    # Hand-edited files may contain stray bytes.
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def _replace_file(path: Path, text: str) -> None:
    # The final name only ever holds a complete file.
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)


class PersistentStore:
    """Optional on-disk progress log and configuration.

    Both files are plain text and append-only so they can be inspected and
    edited by hand:

    - marked-complete: one step name per line
    - config: one "key value" pair per line, the last match for a key wins

    Persistence is enabled iff the directory exists. Nothing here raises when
    it is disabled except config_set(), whose callers must know the value was
    not remembered.
    """

    def __init__(self, persist_dir: str | Path):
        self.persist_dir = Path(persist_dir)

    @property
    def progress_path(self) -> Path:
        return self.persist_dir / PROGRESS_FILE

    @property
    def config_path(self) -> Path:
        return self.persist_dir / CONFIG_FILE

    @property
    def package_names_path(self) -> Path:
        return self.persist_dir / PACKAGE_NAMES_FILE

    @property
    def enabled(self) -> bool:
        return self.persist_dir.is_dir()

    def set_enabled(self, enabled: bool) -> bool:
        """Create or delete the persistence directory.

        Returns True when persistence ended up in the requested state.
        """

        if enabled:
            try:
                self.persist_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning("Cannot create persistence directory %s: %s", self.persist_dir, e)
                return False
            logger.info("Persistence enabled at %s", self.persist_dir)
            return True

        if self.persist_dir.exists():
            shutil.rmtree(self.persist_dir)
            logger.info("Persistence directory %s removed", self.persist_dir)
        return True

    # Completion log

    def mark_complete(self, name: str) -> bool:
        if not self.enabled:
            logger.info("Not marking %s complete (persistence disabled)", name)
            return False
        try:
            _append_line(self.progress_path, name)
        except OSError as e:
            logger.warning("Cannot mark %s complete: %s", name, e)
            return False
        logger.info("Marked step %s complete", name)
        return True

    def completed(self) -> Set[str]:
        if not self.enabled:
            return set()
        return {line.strip() for line in _read_lines(self.progress_path) if line.strip()}

    def is_complete(self, name: str) -> bool:
        return name in self.completed()

    # Configuration

    def config_entries(self) -> Iterator[Tuple[str, str]]:
        if not self.enabled:
            return
        for line in _read_lines(self.config_path):
            parts = line.split(None, 1)
            if not parts:
                continue
            key = parts[0]
            value = parts[1].strip() if len(parts) > 1 else ""
            yield key, value

    def config_get(self, key: str) -> Optional[str]:
        value: Optional[str] = None
        for k, v in self.config_entries():
            if k == key:
                value = v
        return value

    def config_set(self, key: str, value: str) -> None:
        if not key or len(key.split()) != 1 or key != key.strip():
            raise ValueError(f"Config key must be a single word, got {key!r}")
        if "\n" in value or "\r" in value:
            raise ValueError("Config values must fit on one line")
        if not self.enabled:
            raise PersistenceDisabled(f"Cannot remember {key!r}: persistence is disabled")
        value = value.strip()
        try:
            _append_line(self.config_path, f"{key} {value}")
        except OSError as e:
            raise PersistenceDisabled(f"Cannot remember {key!r}: {e}") from e
        logger.info("Config %s=%s", key, value)

    # Package names

    def write_package_names(self, names: str) -> None:
        if not self.enabled:
            raise PersistenceDisabled("Cannot cache package names: persistence is disabled")
        _replace_file(self.package_names_path, names)
        logger.info("Wrote %s", self.package_names_path)
