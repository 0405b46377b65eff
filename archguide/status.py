from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from .context import InstallContext

logger = logging.getLogger(__name__)


class StatusCode(enum.Enum):
    DONE = "done"
    NOT_DONE = "not-done"
    UNKNOWN_PERSISTENCE_DISABLED = "unknown-persistence-disabled"
    # A fact about the machine the tool cannot change (e.g. firmware mode).
    NEVER_RUN = "never-run"
    INAPPLICABLE = "inapplicable"


class StepStatus(NamedTuple):
    code: StatusCode
    message: str = ""


class Decision(enum.Enum):
    RUN = "run"
    SKIP = "skip"


def status_color(code: StatusCode) -> str:
    if code in (StatusCode.DONE, StatusCode.NEVER_RUN):
        return "green"
    if code is StatusCode.NOT_DONE:
        return "red"
    return "yellow"


def decide(code: StatusCode, *, force: bool = False) -> Decision:
    """Skip/run policy for a probed leaf step.

    Informational codes are never run, even when forced. Anything that is
    not known to be done runs.
    """

    if code in (StatusCode.NEVER_RUN, StatusCode.INAPPLICABLE):
        return Decision.SKIP
    if code is StatusCode.DONE and not force:
        return Decision.SKIP
    return Decision.RUN


def marked_status(ctx: "InstallContext", name: str) -> StepStatus:
    """Probe for steps with no live signal: consult the completion log."""

    if not ctx.store.enabled:
        return StepStatus(StatusCode.UNKNOWN_PERSISTENCE_DISABLED, "Status unknown (persistence disabled).")
    if ctx.store.is_complete(name):
        return StepStatus(StatusCode.DONE, "This step was marked as complete.")
    return StepStatus(StatusCode.NOT_DONE, "This step has not been marked as complete yet.")


def probe_step(ctx: "InstallContext", step: Any) -> StepStatus:
    status = step.probe(ctx)
    if not isinstance(status, StepStatus):
        raise TypeError(f"Probe for {step.step_id} returned {status!r}, expected StepStatus")
    logger.debug("Probe %s -> %s (%s)", step.step_id, status.code.value, status.message)
    return status
