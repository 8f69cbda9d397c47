"""Data models and constants for todotui."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Literal, Tuple

DEFAULT_PATH = "data.json"
LOG_PATH = "todotui.log"

NAME_MAX = 50
DESCRIPTION_MAX = 255

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

PALETTES: Tuple[str, ...] = ("blue", "emerald", "indigo", "red")

Progress = Literal["InProgress", "Waiting", "Done"]

PROGRESS_VALUES: Tuple[str, ...] = ("InProgress", "Waiting", "Done")
PROGRESS_LABELS: Dict[str, str] = {
    "Waiting": "Waiting",
    "InProgress": "In Progress",
    "Done": "Done",
}


def timestamp() -> str:
    """Return the current local time as a creation timestamp string."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass
class Task:
    """A single to-do entry.

    `id` is assigned by the store and never written to disk; it is left out
    of equality so tasks still compare by their four data fields.
    """

    name: str
    description: str = ""
    progress: Progress = "Waiting"
    created: str = ""
    id: int = field(default=0, compare=False)
