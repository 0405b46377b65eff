from __future__ import annotations

import argparse
import logging
from typing import Optional

from . import __version__
from .context import InstallContext
from .errors import OperatorAbort
from .lib.env import PATHS, Paths
from .lib.prompt import Prompter
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, run_pipeline
from .state_store import PersistentStore
from .steps import STAGE_NAMES, build_stages

logger = logging.getLogger(__name__)


EXIT_ABORTED = 130
EXIT_FAILED = 1

VERSION_TEXT = f"""archguide: A Respectful Install Guide for Arch
Version {__version__}

Licensed under the MIT License."""

STAGES_HELP = """installation stages:
  start    Begin the installation process.
  chroot   Continue the installation process from within the chroot.
"""


def run(stage: str, ctx: InstallContext) -> PipelineResult:
    """Run one installation stage against an already built context."""

    stages = build_stages()
    result = run_pipeline(ctx, stages[stage])

    if stage == "chroot":
        ctx.term.blank()
        ctx.term.warn(
            """You are now in a chroot shell. To exit the chroot shell and go
            back to archguide outside the chroot, use the 'exit' command or
            press Ctrl+D."""
        )
    return result


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="archguide",
        description="Walk through an Arch Linux installation, one confirmed step at a time.",
        epilog=STAGES_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("stage", choices=STAGE_NAMES, metavar="stage", help="start | chroot")
    p.add_argument(
        "--no-skip-completed",
        action="store_true",
        help="Do not automatically skip previously completed steps. Useful if a step needs to be redone.",
    )
    p.add_argument("--persist-dir", default=PATHS.persist_dir, help="Persistence directory")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the archguide log")
    p.add_argument("--debug", action="store_true", help="Also log prompts and answers")
    p.add_argument("--version", action="version", version=VERSION_TEXT)
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    actual_log_path = configure_logging(log_path=args.log, level=logging.DEBUG if args.debug else logging.INFO)
    logger.info("archguide %s stage=%s log=%s", __version__, args.stage, actual_log_path)

    ctx = InstallContext(
        store=PersistentStore(args.persist_dir),
        ui=Prompter(),
        paths=Paths(persist_dir=args.persist_dir),
        force=bool(args.no_skip_completed),
    )

    try:
        run(args.stage, ctx)
    except (OperatorAbort, KeyboardInterrupt):
        logger.info("Run aborted by operator")
        ctx.term.blank()
        ctx.term.warn("Exiting. Your progress will be remembered when you run archguide again.")
        return EXIT_ABORTED
    except Exception as e:
        logger.exception("archguide failed")
        ctx.term.error(f"archguide stopped because of an unexpected error: {e}")
        ctx.term.error(f"See the log at '{actual_log_path}' for details.")
        return EXIT_FAILED
    return 0
