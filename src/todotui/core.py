"""todotui view and navigation helpers (pure functions, no I/O)."""

from typing import Dict, List, Optional, Sequence

from .models import Task

NEXT_PROGRESS: Dict[str, str] = {
    "InProgress": "Waiting",
    "Waiting": "Done",
    "Done": "InProgress",
}


def next_progress(progress: str) -> str:
    """Return the progress state that follows `progress` in the cycle."""
    return NEXT_PROGRESS[progress]


def compute_view(tasks: Sequence[Task], hide_completed: bool) -> List[Task]:
    """Return the tasks to display, in store order."""
    if hide_completed:
        return [t for t in tasks if t.progress != "Done"]
    return list(tasks)


def view_to_store_index(
    view: Sequence[Task], view_index: int, tasks: Sequence[Task]
) -> Optional[int]:
    """Resolve a row of the view to its 0-based store index, or None."""
    if view_index < 0 or view_index >= len(view):
        return None
    task_id = view[view_index].id
    for i, t in enumerate(tasks):
        if t.id == task_id:
            return i
    return None


def next_index(length: int, current: int) -> int:
    if length <= 0 or current >= length - 1:
        return 0
    return current + 1


def previous_index(length: int, current: int) -> int:
    if length <= 0:
        return 0
    if current <= 0 or current >= length:
        return length - 1
    return current - 1


def clamp_selection(length: int, current: int) -> int:
    """Keep the selection on a valid row; fall back to the first row."""
    if 0 <= current < length:
        return current
    return 0
