from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterator, Mapping, Optional, Protocol, Tuple, Union

if TYPE_CHECKING:
    from .context import InstallContext
    from .status import StepStatus


class Step(Protocol):
    """A single leaf step: a probe plus an interactive body."""

    step_id: str

    def probe(self, ctx: "InstallContext") -> "StepStatus":
        ...

    def run(self, ctx: "InstallContext") -> Optional[bool]:
        ...


class StepKind(enum.Enum):
    COMPOSITE = "composite"
    LEAF = "leaf"


@dataclass(frozen=True)
class StepGroup:
    """A composite step; its status is that of its children."""

    step_id: str
    children: Tuple["Node", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))
        if not self.children:
            raise ValueError(f"Step group {self.step_id} must have at least one child")


Node = Union[StepGroup, Step]


def kind_of(node: Node) -> StepKind:
    return StepKind.COMPOSITE if isinstance(node, StepGroup) else StepKind.LEAF


def is_composite(node: Node) -> bool:
    return kind_of(node) is StepKind.COMPOSITE


def children(node: Node) -> Tuple[Node, ...]:
    if isinstance(node, StepGroup):
        return node.children
    return ()


def walk(node: Node, depth: int = 0) -> Iterator[Tuple[Node, int]]:
    """Depth-first, pre-order traversal yielding (node, depth)."""

    yield node, depth
    for child in children(node):
        yield from walk(child, depth + 1)


def banner_pad(node: Node, depth: int) -> str:
    """Visual weight of a step banner. Depth 0 is a stage's direct child."""

    if not is_composite(node):
        return "-"
    return "#" if depth == 0 else "="


def validate_stages(stages: Mapping[str, StepGroup]) -> None:
    """Check step identity across all stages.

    A step id is the completion-log key, so it must name exactly one step.
    The same step object may appear in more than one stage.
    """

    seen: Dict[str, Any] = {}
    for stage_name, stage in stages.items():
        for node, _ in walk(stage):
            step_id = getattr(node, "step_id", None)
            if not step_id:
                raise ValueError(f"Stage {stage_name}: step {node!r} has no step_id")
            other = seen.setdefault(step_id, node)
            if other is not node and not (is_composite(node) and node == other):
                raise ValueError(f"Step id {step_id!r} is used by more than one step")
            if not is_composite(node):
                for attr in ("probe", "run"):
                    if not callable(getattr(node, attr, None)):
                        raise ValueError(f"Leaf step {step_id} has no {attr}()")
