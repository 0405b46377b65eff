from __future__ import annotations

import pytest

from archguide.status import (
    Decision,
    StatusCode,
    StepStatus,
    decide,
    marked_status,
    probe_step,
    status_color,
)


@pytest.mark.parametrize(
    "code,color",
    [
        (StatusCode.DONE, "green"),
        (StatusCode.NEVER_RUN, "green"),
        (StatusCode.NOT_DONE, "red"),
        (StatusCode.UNKNOWN_PERSISTENCE_DISABLED, "yellow"),
        (StatusCode.INAPPLICABLE, "yellow"),
    ],
)
def test_status_color(code, color):
    assert status_color(code) == color


@pytest.mark.parametrize(
    "code,force,decision",
    [
        (StatusCode.DONE, False, Decision.SKIP),
        (StatusCode.DONE, True, Decision.RUN),
        (StatusCode.NOT_DONE, False, Decision.RUN),
        (StatusCode.UNKNOWN_PERSISTENCE_DISABLED, False, Decision.RUN),
        (StatusCode.NEVER_RUN, False, Decision.SKIP),
        (StatusCode.NEVER_RUN, True, Decision.SKIP),
        (StatusCode.INAPPLICABLE, True, Decision.SKIP),
    ],
)
def test_decide(code, force, decision):
    assert decide(code, force=force) is decision


def test_marked_status_without_persistence(make_harness):
    h = make_harness(persist=False)
    status = marked_status(h.ctx, "231_test_internet_connection")
    assert status.code is StatusCode.UNKNOWN_PERSISTENCE_DISABLED
    assert "persistence disabled" in status.message


def test_marked_status_follows_completion_log(harness):
    assert marked_status(harness.ctx, "231_test_internet_connection").code is StatusCode.NOT_DONE
    harness.ctx.store.mark_complete("231_test_internet_connection")
    status = marked_status(harness.ctx, "231_test_internet_connection")
    assert status == StepStatus(StatusCode.DONE, "This step was marked as complete.")


def test_probe_step_rejects_bad_probe(harness):
    class Broken:
        step_id = "999_broken"

        def probe(self, ctx):
            return 0

    with pytest.raises(TypeError):
        probe_step(harness.ctx, Broken())
