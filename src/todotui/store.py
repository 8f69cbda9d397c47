"""Canonical, persisted task list."""

import logging
from typing import Iterable, List, Optional

from .core import next_progress
from .models import Task
from .storage import LoadError, read_file, write_file

logger = logging.getLogger(__name__)


class TaskStore:
    """Ordered list of tasks backed by a JSON file.

    Every mutation is applied in memory, then written to disk. A failed
    write raises SaveError but leaves the in-memory change in place, so the
    next successful save catches the file up.
    """

    def __init__(self, path: str, tasks: Iterable[Task] = ()):
        self.path = path
        self.tasks: List[Task] = []
        self.load_error: Optional[LoadError] = None
        self._next_id = 1
        for t in tasks:
            t.id = self._allocate_id()
            self.tasks.append(t)

    @classmethod
    def open(cls, path: str) -> "TaskStore":
        """Load the store from `path`, starting empty if the file is unusable."""
        try:
            tasks = read_file(path)
        except LoadError as e:
            logger.warning("Could not load %s: %s", path, e)
            store = cls(path)
            store.load_error = e
            return store
        logger.info("Loaded %d tasks from %s", len(tasks), path)
        return cls(path, tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def index_of(self, task_id: int) -> Optional[int]:
        for i, t in enumerate(self.tasks):
            if t.id == task_id:
                return i
        return None

    def save(self) -> None:
        write_file(self.path, self.tasks)

    def append(self, task: Task) -> Task:
        task.id = self._allocate_id()
        self.tasks.append(task)
        logger.info("Added task %d: %s", task.id, task.name)
        self.save()
        return task

    def replace_at(self, index: int, task: Task) -> Task:
        task.id = self.tasks[index].id
        self.tasks[index] = task
        logger.info("Edited task %d: %s", task.id, task.name)
        self.save()
        return task

    def remove_at(self, index: int) -> Task:
        task = self.tasks.pop(index)
        logger.info("Removed task %d: %s", task.id, task.name)
        self.save()
        return task

    def cycle_progress_at(self, index: int) -> Task:
        task = self.tasks[index]
        task.progress = next_progress(task.progress)
        logger.debug("Task %d progress -> %s", task.id, task.progress)
        self.save()
        return task
