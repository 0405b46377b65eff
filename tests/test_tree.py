from __future__ import annotations

import pytest

from archguide.status import StatusCode, StepStatus
from archguide.steps import STAGE_NAMES, build_stages
from archguide.tree import (
    StepGroup,
    StepKind,
    banner_pad,
    children,
    is_composite,
    kind_of,
    validate_stages,
    walk,
)


class Leaf:
    def __init__(self, step_id):
        self.step_id = step_id

    def probe(self, ctx):
        return StepStatus(StatusCode.NOT_DONE)

    def run(self, ctx):
        return None


def test_group_requires_children():
    with pytest.raises(ValueError):
        StepGroup("100_empty", [])


def test_group_children_are_immutable_tuple():
    kids = [Leaf("a")]
    group = StepGroup("g", kids)
    kids.append(Leaf("b"))
    assert len(group.children) == 1
    assert isinstance(group.children, tuple)


def test_kind_and_children():
    leaf = Leaf("a")
    group = StepGroup("g", [leaf])
    assert kind_of(group) is StepKind.COMPOSITE
    assert kind_of(leaf) is StepKind.LEAF
    assert is_composite(group) and not is_composite(leaf)
    assert children(group) == (leaf,)
    assert children(leaf) == ()


def test_walk_is_depth_first_without_fixed_depth():
    deep = StepGroup("g1", [StepGroup("g2", [StepGroup("g3", [StepGroup("g4", [Leaf("deep")])])]), Leaf("after")])
    order = [(node.step_id, depth) for node, depth in walk(deep)]
    assert order == [("g1", 0), ("g2", 1), ("g3", 2), ("g4", 3), ("deep", 4), ("after", 1)]


def test_banner_pad_depends_on_kind_and_depth():
    leaf = Leaf("a")
    group = StepGroup("g", [leaf])
    assert banner_pad(group, 0) == "#"
    assert banner_pad(group, 1) == "="
    assert banner_pad(group, 3) == "="
    assert banner_pad(leaf, 0) == "-"


def test_validate_rejects_reused_step_id():
    stages = {"start": StepGroup("start", [Leaf("111_readme"), Leaf("111_readme")])}
    with pytest.raises(ValueError, match="111_readme"):
        validate_stages(stages)


def test_validate_allows_shared_step_object():
    shared = Leaf("511_cleanup")
    stages = {
        "start": StepGroup("start", [Leaf("111_readme"), shared]),
        "chroot": StepGroup("chroot", [Leaf("411_set_time_zone"), shared]),
    }
    validate_stages(stages)


def test_validate_rejects_leaf_without_body():
    class ProbeOnly:
        step_id = "x"

        def probe(self, ctx):
            return StepStatus(StatusCode.NOT_DONE)

    with pytest.raises(ValueError, match="run"):
        validate_stages({"start": StepGroup("start", [ProbeOnly()])})


def test_build_stages_shape():
    stages = build_stages()
    assert tuple(stages) == STAGE_NAMES

    start_ids = [node.step_id for node, _ in walk(stages["start"])]
    assert start_ids[:3] == ["start", "100_setup", "111_readme"]
    assert start_ids[-2:] == ["511_cleanup", "611_reboot"]
    assert "313_pacstrap" in start_ids

    chroot_ids = [node.step_id for node, _ in walk(stages["chroot"])]
    assert chroot_ids[-1] == "511_cleanup"
    assert "463_grub_mkconfig" in chroot_ids

    for stage in stages.values():
        assert max(depth for _, depth in walk(stage)) <= 4
        for node, _ in walk(stage):
            if is_composite(node):
                assert node.children
