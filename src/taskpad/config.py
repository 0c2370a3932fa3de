"""Configuration management for Taskpad."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.dates import DUE_SOON_DAYS
from .core.filters import TaskFilter
from .core.sorting import SortMode

logger = logging.getLogger(__name__)

TASKPAD_HOME = Path(os.environ.get("TASKPAD_HOME", Path.home() / "taskpad"))
CONFIG_FILE = TASKPAD_HOME / "config" / "taskpad.conf"
DATA_DIR = TASKPAD_HOME / "data"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Config:
    """Taskpad configuration."""

    data_file: Path = field(default_factory=lambda: DATA_DIR / "tasks.json")
    default_sort: SortMode = SortMode.SMART
    default_filter: TaskFilter = TaskFilter.ALL
    due_soon_days: int = DUE_SOON_DAYS
    log_level: str = "WARNING"


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from taskpad.conf."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_file":
                config.data_file = Path(value).expanduser()
            case "default_sort":
                if value not in {m.value for m in SortMode} and value != "dueDate":
                    logger.warning(f"Unknown DEFAULT_SORT: {value}")
                    continue
                config.default_sort = SortMode.parse(value)
            case "default_filter":
                if value.lower() not in {f.value for f in TaskFilter}:
                    logger.warning(f"Unknown DEFAULT_FILTER: {value}")
                    continue
                config.default_filter = TaskFilter.parse(value)
            case "due_soon_days":
                try:
                    config.due_soon_days = int(value)
                except ValueError:
                    logger.warning(f"Invalid DUE_SOON_DAYS: {value}")
            case "log_level":
                config.log_level = value.upper()

    return config


def configure_logging(level: str = "WARNING") -> None:
    """Set up root logging with the standard format."""
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level.upper(), logging.WARNING),
    )
