"""todotui - a terminal to-do list manager."""

__version__ = "0.1.0"

from .models import Task, DEFAULT_PATH
from .storage import read_file, write_file, LoadError, SaveError
from .store import TaskStore
from .core import (
    next_progress,
    compute_view,
    view_to_store_index,
    next_index,
    previous_index,
    clamp_selection,
)
from .app import AppState, Browse, Editing, InfoOverlay, InputForm, handle_key

__all__ = [
    "Task",
    "DEFAULT_PATH",
    "read_file",
    "write_file",
    "LoadError",
    "SaveError",
    "TaskStore",
    "next_progress",
    "compute_view",
    "view_to_store_index",
    "next_index",
    "previous_index",
    "clamp_selection",
    "AppState",
    "Browse",
    "Editing",
    "InfoOverlay",
    "InputForm",
    "handle_key",
]
