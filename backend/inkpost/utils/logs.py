"""Process-wide logging setup: console always, JSON-lines log files when configured."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

CONSOLE_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message (+ exc)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


_MARKER = "_inkpost_handler"


def configure_logging(level: str = "INFO", log_dir: Path | None = None) -> None:
    """Install inkpost handlers on the root logger.

    Idempotent: handlers installed by a previous call are replaced, so
    building several apps in one process (tests) does not duplicate output.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _MARKER, False):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    handlers: list[logging.Handler] = [console]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        info_file = logging.FileHandler(log_dir / "info.log", encoding="utf-8")
        info_file.setLevel(logging.INFO)
        error_file = logging.FileHandler(log_dir / "errors.log", encoding="utf-8")
        error_file.setLevel(logging.ERROR)
        for handler in (info_file, error_file):
            handler.setFormatter(JsonLinesFormatter())
        handlers.extend([info_file, error_file])

    for handler in handlers:
        setattr(handler, _MARKER, True)
        root.addHandler(handler)
    root.setLevel(level.upper())
