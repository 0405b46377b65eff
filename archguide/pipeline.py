from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .context import InstallContext
from .errors import StepError
from .status import Decision, StatusCode, StepStatus, decide, probe_step, status_color
from .tree import Node, Step, StepGroup, banner_pad, is_composite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    step_id: str
    status: StepStatus
    ran: bool


@dataclass
class PipelineResult:
    outcomes: List[StepOutcome] = field(default_factory=list)

    @property
    def ran_steps(self) -> List[str]:
        return [o.step_id for o in self.outcomes if o.ran]

    @property
    def skipped_steps(self) -> List[str]:
        return [o.step_id for o in self.outcomes if not o.ran]

    def status_of(self, step_id: str) -> Optional[StatusCode]:
        for o in self.outcomes:
            if o.step_id == step_id:
                return o.status.code
        return None


def _report(ctx: InstallContext, status: StepStatus) -> None:
    if status.message:
        ctx.term.status(status.message, status_color(status.code))


def run_leaf(ctx: InstallContext, step: Step) -> StepOutcome:
    """Probe, decide, run, reprobe."""

    status = probe_step(ctx, step)
    _report(ctx, status)

    if decide(status.code, force=ctx.force) is Decision.SKIP:
        logger.info("Skipping step %s (%s)", step.step_id, status.code.value)
        return StepOutcome(step_id=step.step_id, status=status, ran=False)

    if status.message:
        ctx.term.blank()

    logger.info("Running step %s (%s)", step.step_id, status.code.value)
    try:
        finished = step.run(ctx)
    except StepError as e:
        logger.warning("Step %s stopped: %s", step.step_id, e)
        ctx.term.error(str(e))
    else:
        if finished is False:
            logger.info("Step %s declined or left partial", step.step_id)

    status = probe_step(ctx, step)
    if status.message:
        ctx.term.blank()
    _report(ctx, status)
    logger.info("Step %s now %s", step.step_id, status.code.value)
    return StepOutcome(step_id=step.step_id, status=status, ran=True)


def _run_node(ctx: InstallContext, node: Node, depth: int, result: PipelineResult) -> None:
    ctx.term.banner(node.step_id, banner_pad(node, depth))

    if is_composite(node):
        for child in node.children:
            _run_node(ctx, child, depth + 1, result)
        return

    result.outcomes.append(run_leaf(ctx, node))


def run_pipeline(ctx: InstallContext, stage: StepGroup) -> PipelineResult:
    """Walk a stage depth-first.

    OperatorAbort from any prompt propagates and ends the walk; everything
    recorded so far is already durable in the store.
    """

    result = PipelineResult()
    logger.info("Starting stage %s (force=%s)", stage.step_id, ctx.force)
    for child in stage.children:
        _run_node(ctx, child, 0, result)
    logger.info(
        "Finished stage %s (ran=%s, skipped=%s)",
        stage.step_id,
        result.ran_steps,
        result.skipped_steps,
    )
    return result
