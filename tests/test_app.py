from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import pytest

from todotui.app import (
    AppState,
    Browse,
    Editing,
    InfoOverlay,
    checkboxes,
    handle_key,
)
from todotui.models import DESCRIPTION_MAX, NAME_MAX, PALETTES, timestamp
from todotui.storage import SaveError, read_file
from todotui.store import TaskStore

TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def press(state: AppState, keys: Iterable[str]) -> bool:
    running = True
    for key in keys:
        running = handle_key(state, key)
    return running


def type_text(state: AppState, text: str) -> None:
    press(state, list(text))


# -------------------- browse --------------------


@pytest.mark.unit
@pytest.mark.parametrize("key", ["q", "esc"])
def test_quit_keys(make_state, key: str) -> None:
    assert handle_key(make_state(), key) is False


@pytest.mark.unit
def test_navigation_wraps(make_state, make_task) -> None:
    state = make_state(make_task("a"), make_task("b"), make_task("c"))
    press(state, ["j", "down"])
    assert state.selected == 2
    press(state, ["j"])
    assert state.selected == 0
    press(state, ["k"])
    assert state.selected == 2
    press(state, ["up", "up"])
    assert state.selected == 0


@pytest.mark.unit
def test_navigation_on_empty_store(make_state) -> None:
    state = make_state()
    press(state, ["j", "k", "down", "up"])
    assert state.selected == 0


@pytest.mark.unit
def test_color_cycles_and_wraps(make_state) -> None:
    state = make_state()
    press(state, ["l"])
    assert state.palette == PALETTES[1]
    press(state, ["h", "left"])
    assert state.palette == PALETTES[-1]
    press(state, ["right"])
    assert state.color_index == 0


@pytest.mark.unit
def test_lock_color_suppresses_cycling(make_state) -> None:
    state = make_state(lock_color=True)
    press(state, ["l", "right", "h", "left"])
    assert state.color_index == 0


@pytest.mark.unit
def test_toggle_hide_completed_twice_is_identity(make_state, make_task) -> None:
    state = make_state(make_task("a", "Done"), make_task("b"))
    before = (state.hide_completed, state.selected, [t.name for t in state.view()])
    press(state, ["t", "t"])
    assert (state.hide_completed, state.selected, [t.name for t in state.view()]) == before


@pytest.mark.unit
def test_hiding_completed_clamps_selection(make_state, make_task) -> None:
    state = make_state(make_task("A", "Done"), make_task("B", "Waiting"))
    assert state.selected == 0
    press(state, ["t"])
    assert [t.name for t in state.view()] == ["B"]
    assert state.selected == 0
    assert state.view()[state.selected].name == "B"


@pytest.mark.unit
def test_hiding_completed_resets_out_of_range_selection(make_state, make_task) -> None:
    state = make_state(make_task("A"), make_task("B", "Done"))
    press(state, ["j"])
    press(state, ["t"])
    assert state.selected == 0


@pytest.mark.integration
def test_delete_last_task_then_create_has_no_target(make_state, make_task, data_path: str) -> None:
    state = make_state(make_task("X"))
    press(state, ["x"])
    assert state.store.tasks == []
    assert read_file(data_path) == []
    assert state.selected == 0
    press(state, ["a"])
    assert isinstance(state.mode, Editing)
    assert state.mode.form.target is None


@pytest.mark.integration
def test_delete_resolves_through_filtered_view(make_state, make_task) -> None:
    state = make_state(make_task("A", "Done"), make_task("B"), make_task("C"))
    press(state, ["t", "j", "delete"])
    assert [t.name for t in state.store.tasks] == ["A", "B"]
    assert state.selected == 0


@pytest.mark.integration
def test_delete_on_empty_view_is_noop(make_state, make_task) -> None:
    state = make_state(make_task("A", "Done"))
    press(state, ["t", "x"])
    assert len(state.store) == 1


@pytest.mark.integration
def test_cycle_progress_of_selected(make_state, make_task, data_path: str) -> None:
    state = make_state(make_task("A", "InProgress"), make_task("B"))
    press(state, ["j", "n"])
    assert state.store.tasks[1].progress == "Done"
    assert read_file(data_path)[1].progress == "Done"
    press(state, ["n"])
    assert state.store.tasks[1].progress == "InProgress"


@pytest.mark.integration
def test_cycling_to_done_while_hidden_reclamps(make_state, make_task) -> None:
    state = make_state(make_task("A"), make_task("B"), hide_completed=True)
    press(state, ["j", "n"])
    assert [t.name for t in state.view()] == ["A"]
    assert state.selected == 0


@pytest.mark.integration
def test_save_failure_is_reported_not_fatal(tmp_path: Path, make_task) -> None:
    state = AppState(TaskStore(str(tmp_path / "gone" / "data.json"), [make_task("A")]))
    assert press(state, ["n"]) is True
    assert state.store.tasks[0].progress == "Done"
    assert "Error saving JSON" in state.status
    press(state, ["j"])
    assert state.status == ""


# -------------------- editing --------------------


@pytest.mark.integration
def test_create_task_scenario(make_state, data_path: str, fixed_clock: str) -> None:
    state = make_state()
    press(state, ["a"])
    type_text(state, "Task1")
    press(state, ["tab"])
    type_text(state, "desc")
    press(state, ["enter"])

    assert isinstance(state.mode, Browse)
    assert len(state.store) == 1
    task = state.store.tasks[0]
    assert (task.name, task.description, task.progress) == ("Task1", "desc", "InProgress")
    assert task.created == fixed_clock
    assert read_file(data_path) == state.store.tasks


@pytest.mark.unit
def test_enter_on_name_moves_to_description(make_state) -> None:
    state = make_state()
    press(state, ["a"])
    type_text(state, "x")
    press(state, ["enter"])
    assert isinstance(state.mode, Editing)
    assert state.mode.form.focus == "description"
    assert len(state.store) == 0


@pytest.mark.unit
def test_tab_swaps_focus(make_state) -> None:
    state = make_state()
    press(state, ["a", "tab"])
    assert state.mode.form.focus == "description"
    press(state, ["tab"])
    assert state.mode.form.focus == "name"


@pytest.mark.unit
@pytest.mark.parametrize("name", ["", "   "])
def test_blank_name_never_submits(make_state, make_task, name: str) -> None:
    state = make_state(make_task("A"))
    press(state, ["a"])
    type_text(state, name)
    press(state, ["tab"])
    type_text(state, "something")
    press(state, ["enter"])
    assert isinstance(state.mode, Editing)
    assert [t.name for t in state.store.tasks] == ["A"]
    assert state.status


@pytest.mark.integration
def test_blank_name_never_submits_an_edit(make_state, make_task, data_path: str) -> None:
    state = make_state(make_task("AB", "Done"))
    state.store.save()
    before = read_file(data_path)
    press(state, ["r", "backspace", "backspace", "enter", "enter"])
    assert isinstance(state.mode, Editing)
    assert state.mode.form.target == 1
    assert state.store.tasks == before
    assert read_file(data_path) == before
    assert state.status == "Name cannot be empty."


@pytest.mark.unit
def test_timestamp_format() -> None:
    assert TIMESTAMP_RE.match(timestamp())


@pytest.mark.unit
def test_length_caps(make_state) -> None:
    state = make_state()
    press(state, ["a"])
    type_text(state, "n" * (NAME_MAX + 5))
    press(state, ["tab"])
    type_text(state, "d" * (DESCRIPTION_MAX + 5))
    form = state.mode.form
    assert len(form.name) == NAME_MAX
    assert len(form.description) == DESCRIPTION_MAX


@pytest.mark.unit
def test_backspace_edits_focused_buffer(make_state) -> None:
    state = make_state()
    press(state, ["a"])
    type_text(state, "ab")
    press(state, ["backspace"])
    press(state, ["tab", "backspace"])
    form = state.mode.form
    assert (form.name, form.description) == ("a", "")


@pytest.mark.unit
def test_browse_keys_are_text_while_editing(make_state) -> None:
    state = make_state()
    press(state, ["a"])
    assert press(state, ["q", "x", "i", "t"]) is True
    assert state.mode.form.name == "qxit"
    assert state.hide_completed is False


@pytest.mark.unit
def test_escape_discards_form(make_state) -> None:
    state = make_state()
    press(state, ["a"])
    type_text(state, "draft")
    press(state, ["esc"])
    assert isinstance(state.mode, Browse)
    assert len(state.store) == 0
    press(state, ["a"])
    assert state.mode.form.name == ""
    assert state.mode.form.focus == "name"


@pytest.mark.integration
def test_edit_preserves_progress_and_id(
    make_state, make_task, data_path: str, fixed_clock: str
) -> None:
    state = make_state(make_task("A"), make_task("B", "Done", "old"))
    press(state, ["j", "r"])
    form = state.mode.form
    assert (form.name, form.description, form.target) == ("B", "old", 2)

    type_text(state, "2")
    press(state, ["tab", "backspace", "enter"])

    assert isinstance(state.mode, Browse)
    edited = state.store.tasks[1]
    assert (edited.name, edited.description, edited.progress) == ("B2", "ol", "Done")
    assert edited.id == 2
    assert edited.created == fixed_clock
    assert [t.name for t in read_file(data_path)] == ["A", "B2"]


@pytest.mark.unit
def test_edit_on_empty_view_stays_in_browse(make_state) -> None:
    state = make_state()
    press(state, ["r"])
    assert isinstance(state.mode, Browse)


@pytest.mark.integration
def test_first_task_save_failure_is_fatal(tmp_path: Path) -> None:
    state = AppState(TaskStore(str(tmp_path / "gone" / "data.json")))
    press(state, ["a", "A", "enter"])
    with pytest.raises(SaveError):
        press(state, ["enter"])


@pytest.mark.integration
def test_later_save_failure_closes_form(tmp_path: Path, make_task) -> None:
    state = AppState(TaskStore(str(tmp_path / "gone" / "data.json"), [make_task("A")]))
    press(state, ["a", "B", "enter", "enter"])
    assert isinstance(state.mode, Browse)
    assert [t.name for t in state.store.tasks] == ["A", "B"]
    assert "Error saving JSON" in state.status


# -------------------- info overlay --------------------


@pytest.mark.unit
def test_info_opens_and_closes(make_state) -> None:
    state = make_state()
    press(state, ["i"])
    assert isinstance(state.mode, InfoOverlay)
    press(state, ["i"])
    assert isinstance(state.mode, Browse)
    press(state, ["i", "esc"])
    assert isinstance(state.mode, Browse)


@pytest.mark.unit
def test_info_cursor_wraps(make_state) -> None:
    state = make_state()
    press(state, ["i"])
    count = len(checkboxes(state))
    press(state, ["up"])
    assert state.mode.cursor == count - 1
    press(state, ["down"])
    assert state.mode.cursor == 0
    press(state, ["left"])
    assert state.mode.cursor == count - 1
    press(state, ["right"])
    assert state.mode.cursor == 0


@pytest.mark.unit
def test_hide_completed_checkbox(make_state, make_task) -> None:
    state = make_state(make_task("A"), make_task("B", "Done"))
    press(state, ["j", "i", "enter"])
    assert state.hide_completed is True
    assert state.selected == 0
    assert checkboxes(state)[0].checked is True
    press(state, ["esc", "t"])
    assert checkboxes(state)[0].checked is False


@pytest.mark.unit
def test_lock_color_checkbox(make_state) -> None:
    state = make_state()
    press(state, ["i", "down", "enter", "esc", "l"])
    assert state.lock_color is True
    assert state.color_index == 0
    press(state, ["i", "down", "enter", "esc", "l"])
    assert state.color_index == 1


@pytest.mark.unit
def test_tab_is_ignored_in_info(make_state) -> None:
    state = make_state()
    press(state, ["i", "tab", "a"])
    assert isinstance(state.mode, InfoOverlay)
