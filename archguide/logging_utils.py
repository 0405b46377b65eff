from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Tuple

DEFAULT_LOG_PATH = "/var/log/archguide.log"
FALLBACK_LOG_NAME = "archguide.log"

_CONFIGURED_ATTR = "_archguide_configured"
_PATH_ATTR = "_archguide_log_path"


def _open_file_handler(log_path: str) -> Tuple[logging.Handler, str]:
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        # Read-only or missing /var/log in some live media.
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
) -> str:
    """Configure logging once per process and return the file actually used.

    Every command proposed, edited and run is recorded in the log file, along
    with skip/run decisions. The terminal belongs to the operator, so there is
    no console handler.
    """

    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, _CONFIGURED_ATTR, False):
        return getattr(root, _PATH_ATTR, log_path)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler, chosen_path = _open_file_handler(log_path)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    setattr(root, _CONFIGURED_ATTR, True)
    setattr(root, _PATH_ATTR, chosen_path)

    if chosen_path != log_path:
        logging.getLogger(__name__).warning("Cannot write %s; logging to %s", log_path, chosen_path)
    return chosen_path
