from __future__ import annotations

import pytest

from archguide.errors import OperatorAbort
from archguide.lib.prompt import ProposedAction, action, parse_yes_no
from archguide.lib.ui import center_text
from conftest import KEEP


@pytest.mark.parametrize(
    "text,expected",
    [("y", True), ("YES", True), (" Yes ", True), ("n", False), ("No", False), ("", None), ("  ", None)],
)
def test_parse_yes_no(text, expected):
    assert parse_yes_no(text) is expected


@pytest.mark.parametrize("text", ["yep", "nah", "1", "ja"])
def test_parse_yes_no_rejects_other_text(text):
    with pytest.raises(ValueError):
        parse_yes_no(text)


@pytest.mark.parametrize("default,expected", [(True, True), (False, False)])
def test_empty_answer_takes_default(make_harness, default, expected):
    h = make_harness([""])
    assert h.ctx.ui.ask_yes_no("Continue?", default) is expected
    choices = "Y/n" if default else "y/N"
    assert h.reader.prompts[0][0].startswith(f"Continue? [{choices}]")


def test_invalid_answer_reprompts(make_harness):
    h = make_harness(["maybe", "", "y"])
    assert h.ctx.ui.ask_yes_no("Continue?") is True
    assert len(h.reader.prompts) == 3
    assert h.reader.prompts[0][0].startswith("Continue? [y/n]")
    assert "Invalid input. Please enter y[es] or n[o]." in h.text
    assert "No default selection. Please enter y[es] or n[o]." in h.text


def test_ask_text_prefills_default(make_harness):
    h = make_harness([KEEP, "vim"])
    assert h.ctx.ui.ask_text("Text editor:", "nano") == "nano"
    assert h.ctx.ui.ask_text("Text editor:", "nano") == "vim"
    assert h.reader.prompts[0][1] == "nano"


def test_ask_run_runs_prefilled_command(make_harness):
    h = make_harness([KEEP])
    result = h.ctx.ui.ask_run(action("loadkeys {layout}", layout="de-latin1"))
    assert h.reader.prompts[0] == ("Press Enter to run: ", "loadkeys de-latin1")
    assert h.shell.commands == ["loadkeys de-latin1"]
    assert result.ok


def test_ask_run_runs_edited_command(make_harness):
    h = make_harness(["ping -c 1 archlinux.org"])
    h.ctx.ui.ask_run("ping -c 4 archlinux.org")
    assert h.shell.commands == ["ping -c 1 archlinux.org"]


def test_ask_run_blank_line_skips(make_harness):
    h = make_harness(["   "])
    assert h.ctx.ui.ask_run("reboot") is None
    assert h.shell.commands == []


def test_ask_run_reports_failure_without_raising(make_harness):
    h = make_harness([KEEP], returncode=2)
    result = h.ctx.ui.ask_run("false")
    assert result.returncode == 2
    assert not result.ok


@pytest.mark.parametrize("interrupt", [KeyboardInterrupt, EOFError])
def test_interrupt_at_prompt_aborts(make_harness, interrupt):
    h = make_harness([interrupt])
    with pytest.raises(OperatorAbort):
        h.ctx.ui.ask_yes_no("Continue?", True)


def test_pause_waits_for_enter(make_harness):
    h = make_harness([""])
    h.ctx.ui.pause()
    assert h.reader.prompts[0][0].startswith("Press Enter to continue...")


def test_proposed_action_quotes_arguments():
    proposed = action("echo {line} > {path}", line="LANG=en_US.UTF-8", path="/etc/locale conf")
    assert proposed.render() == "echo LANG=en_US.UTF-8 > '/etc/locale conf'"

    hostile = ProposedAction("loadkeys {layout}", {"layout": "us; reboot"})
    assert hostile.render() == "loadkeys 'us; reboot'"


def test_center_text():
    assert center_text(" hi ", 10, "#") == "### hi ###"
    assert len(center_text(" odd ", 10, "=")) == 10
    assert center_text("too long for it", 5, "-") == "too l"
