"""Application state and key routing for todotui.

The app is always in exactly one mode. Sub-state that only makes sense in a
mode (the input form, the checkbox cursor) lives inside that mode's object,
so leaving the mode throws it away.

Keys arrive already normalised by the front end: a one-character string for
printable input, otherwise one of "up", "down", "left", "right", "enter",
"esc", "tab", "backspace" or "delete".
"""

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple, Union

from .core import (
    clamp_selection,
    compute_view,
    next_index,
    previous_index,
    view_to_store_index,
)
from .models import DESCRIPTION_MAX, NAME_MAX, PALETTES, Task, timestamp
from .storage import SaveError
from .store import TaskStore

logger = logging.getLogger(__name__)

Focus = Literal["name", "description"]

# (label, AppState attribute)
CHECKBOXES: Tuple[Tuple[str, str], ...] = (
    ("Hide Completed", "hide_completed"),
    ("Lock Color", "lock_color"),
)


@dataclass
class Checkbox:
    label: str
    checked: bool


@dataclass
class InputForm:
    """Name/description buffers of the create/edit popup."""

    focus: Focus = "name"
    name: str = ""
    description: str = ""
    target: Optional[int] = None  # id of the task being edited

    def insert(self, ch: str) -> None:
        if self.focus == "name":
            if len(self.name) < NAME_MAX:
                self.name += ch
        elif len(self.description) < DESCRIPTION_MAX:
            self.description += ch

    def backspace(self) -> None:
        if self.focus == "name":
            self.name = self.name[:-1]
        else:
            self.description = self.description[:-1]

    def toggle_focus(self) -> None:
        self.focus = "description" if self.focus == "name" else "name"


@dataclass
class Browse:
    pass


@dataclass
class Editing:
    form: InputForm = field(default_factory=InputForm)


@dataclass
class InfoOverlay:
    cursor: int = 0


Mode = Union[Browse, Editing, InfoOverlay]


@dataclass
class AppState:
    store: TaskStore
    mode: Mode = field(default_factory=Browse)
    hide_completed: bool = False
    lock_color: bool = False
    selected: int = 0
    color_index: int = 0
    status: str = ""

    @property
    def palette(self) -> str:
        return PALETTES[self.color_index]

    def view(self) -> List[Task]:
        return compute_view(self.store.tasks, self.hide_completed)

    def selected_store_index(self) -> Optional[int]:
        return view_to_store_index(self.view(), self.selected, self.store.tasks)

    def reclamp(self) -> None:
        self.selected = clamp_selection(len(self.view()), self.selected)


def checkboxes(state: AppState) -> List[Checkbox]:
    """Checkbox rows of the info panel, checked state read from `state`."""
    return [Checkbox(label, getattr(state, attr)) for label, attr in CHECKBOXES]


def report_save_error(state: AppState, error: SaveError) -> None:
    logger.error("%s", error)
    state.status = f"{error} (changes kept in memory)"


# -------------------- browse actions --------------------


def select_next(state: AppState) -> None:
    state.selected = next_index(len(state.view()), state.selected)


def select_previous(state: AppState) -> None:
    state.selected = previous_index(len(state.view()), state.selected)


def next_color(state: AppState) -> None:
    if not state.lock_color:
        state.color_index = (state.color_index + 1) % len(PALETTES)


def previous_color(state: AppState) -> None:
    if not state.lock_color:
        state.color_index = (state.color_index - 1) % len(PALETTES)


def toggle_hide_completed(state: AppState) -> None:
    state.hide_completed = not state.hide_completed
    state.reclamp()


def delete_selected(state: AppState) -> None:
    index = state.selected_store_index()
    if index is None:
        return
    try:
        state.store.remove_at(index)
    except SaveError as e:
        report_save_error(state, e)
    state.reclamp()


def cycle_selected_progress(state: AppState) -> None:
    index = state.selected_store_index()
    if index is None:
        return
    try:
        state.store.cycle_progress_at(index)
    except SaveError as e:
        report_save_error(state, e)
    state.reclamp()


def open_create(state: AppState) -> None:
    state.mode = Editing(InputForm())


def open_edit(state: AppState) -> None:
    index = state.selected_store_index()
    if index is None:
        return
    task = state.store.tasks[index]
    state.mode = Editing(
        InputForm(name=task.name, description=task.description, target=task.id)
    )


def open_info(state: AppState) -> None:
    state.mode = InfoOverlay()


def close_popup(state: AppState) -> None:
    state.mode = Browse()


# -------------------- editing --------------------


def submit_form(state: AppState, form: InputForm) -> None:
    """Save the form as a new or edited task and return to Browse.

    A blank name keeps the form open and leaves the store untouched. A failed
    save is reported and kept in memory, except when the very first task of
    an empty store cannot be saved: that SaveError is re-raised.
    """
    if not form.name.strip():
        state.status = "Name cannot be empty."
        return

    store = state.store
    index = store.index_of(form.target) if form.target is not None else None
    first_task = index is None and len(store) == 0
    try:
        if index is None:
            store.append(
                Task(
                    name=form.name,
                    description=form.description,
                    progress="InProgress",
                    created=timestamp(),
                )
            )
        else:
            store.replace_at(
                index,
                Task(
                    name=form.name,
                    description=form.description,
                    progress=store.tasks[index].progress,
                    created=timestamp(),
                ),
            )
    except SaveError as e:
        if first_task:
            raise
        report_save_error(state, e)
    state.mode = Browse()
    state.reclamp()


def handle_editing_key(state: AppState, form: InputForm, key: str) -> None:
    if key == "esc":
        close_popup(state)
    elif key == "enter":
        if form.focus == "name":
            form.focus = "description"
        else:
            submit_form(state, form)
    elif key == "tab":
        form.toggle_focus()
    elif key == "backspace":
        form.backspace()
    elif len(key) == 1:
        form.insert(key)


# -------------------- info overlay --------------------


def toggle_checkbox(state: AppState, index: int) -> None:
    _, attr = CHECKBOXES[index]
    if attr == "hide_completed":
        toggle_hide_completed(state)
    else:
        setattr(state, attr, not getattr(state, attr))


def handle_info_key(state: AppState, overlay: InfoOverlay, key: str) -> None:
    count = len(CHECKBOXES)
    if key in ("esc", "i"):
        close_popup(state)
    elif key in ("down", "right"):
        overlay.cursor = (overlay.cursor + 1) % count
    elif key in ("up", "left"):
        overlay.cursor = (overlay.cursor - 1) % count
    elif key == "enter":
        toggle_checkbox(state, overlay.cursor)


# -------------------- browse --------------------


def handle_browse_key(state: AppState, key: str) -> bool:
    if key in ("q", "esc"):
        return False
    elif key in ("j", "down"):
        select_next(state)
    elif key in ("k", "up"):
        select_previous(state)
    elif key in ("l", "right"):
        next_color(state)
    elif key in ("h", "left"):
        previous_color(state)
    elif key in ("x", "delete"):
        delete_selected(state)
    elif key == "a":
        open_create(state)
    elif key == "r":
        open_edit(state)
    elif key == "n":
        cycle_selected_progress(state)
    elif key == "t":
        toggle_hide_completed(state)
    elif key == "i":
        open_info(state)
    return True


def handle_key(state: AppState, key: str) -> bool:
    """Route one key press to the active mode. Returns False to quit."""
    state.status = ""
    mode = state.mode
    if isinstance(mode, Editing):
        handle_editing_key(state, mode.form, key)
    elif isinstance(mode, InfoOverlay):
        handle_info_key(state, mode, key)
    else:
        return handle_browse_key(state, key)
    return True
