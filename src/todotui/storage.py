"""JSON file I/O for todotui task lists."""

import json
from typing import Any, Iterable, List

from .models import PROGRESS_VALUES, Task

FIELDS = ("name", "description", "progress", "created")


class StorageError(RuntimeError):
    pass


class LoadError(StorageError):
    pass


class SaveError(StorageError):
    pass


def _task_from_dict(raw: Any, position: int) -> Task:
    if not isinstance(raw, dict):
        raise LoadError(f"Entry {position} is not an object")
    values = {}
    for key in FIELDS:
        value = raw.get(key)
        if not isinstance(value, str):
            raise LoadError(f"Entry {position}: missing or invalid '{key}'")
        values[key] = value
    if values["progress"] not in PROGRESS_VALUES:
        raise LoadError(f"Entry {position}: unknown progress '{values['progress']}'")
    return Task(**values)


def read_file(path: str) -> List[Task]:
    """Load the task list stored at `path`.

    Raises LoadError when the file is missing, unreadable or not a JSON
    array of task objects. Ids are left unset; the store assigns them.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise LoadError(f"Error opening file: {e}") from e
    except ValueError as e:
        raise LoadError(f"Error parsing JSON: {e}") from e

    if not isinstance(data, list):
        raise LoadError("Error parsing JSON: expected a list of tasks")
    return [_task_from_dict(raw, i) for i, raw in enumerate(data)]


def write_file(path: str, tasks: Iterable[Task]) -> None:
    """Rewrite the file from in-memory state."""
    data = [
        {
            "name": t.name,
            "description": t.description,
            "progress": t.progress,
            "created": t.created,
        }
        for t in tasks
    ]
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise SaveError(f"Error saving JSON: {e}") from e
