"""JSON file storage adapter."""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Sequence

from taskpad.core.tasks import Task
from taskpad.ports.task_store import StorageError

logger = logging.getLogger(__name__)


class JsonFileTaskStore:
    """
    File-based task storage.

    Implements TaskStore protocol. The whole collection lives in one JSON
    array; each save rewrites it atomically via a temp file and os.replace.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> list[Task]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            # ValueError covers invalid UTF-8 as well as bad JSON
            raise StorageError(f"Could not read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise StorageError(f"Expected a list of tasks in {self.path}")
        if not all(isinstance(item, dict) for item in data):
            raise StorageError(f"Expected task objects in {self.path}")
        try:
            return [Task.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed task record in {self.path}: {e}") from e

    def _write(self, tasks: Sequence[Task]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([t.to_dict() for t in tasks], indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".tasks-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def load_all(self) -> list[Task]:
        """Load every stored task. Returns [] when the file does not exist."""
        return await asyncio.to_thread(self._read)

    async def save_all(self, tasks: Sequence[Task]) -> bool:
        """Replace the file's contents with this collection."""
        snapshot = list(tasks)
        try:
            await asyncio.to_thread(self._write, snapshot)
        except OSError as e:
            logger.error(f"Failed to save tasks to {self.path}: {e}")
            return False
        logger.debug(f"Saved {len(snapshot)} tasks to {self.path}")
        return True
