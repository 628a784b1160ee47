import time
import uuid
from typing import Any

from .config import LOG_LIMIT
from .models import ConsoleLog, LogType


def make_log(log_type: LogType | str, message: str, details: Any = None) -> ConsoleLog:
    return ConsoleLog(
        id=f"log_{uuid.uuid4().hex}",
        timestamp=int(time.time() * 1000),
        type=LogType(log_type),
        message=message,
        details=details,
    )


def append_log(
    logs: tuple[ConsoleLog, ...],
    log_type: LogType | str,
    message: str,
    details: Any = None,
    *,
    limit: int = LOG_LIMIT,
) -> tuple[ConsoleLog, ...]:
    """Return ``logs`` with a new entry at the front, capped at ``limit``."""
    return push_log(logs, make_log(log_type, message, details), limit=limit)


def push_log(logs: tuple[ConsoleLog, ...], entry: ConsoleLog, *, limit: int = LOG_LIMIT) -> tuple[ConsoleLog, ...]:
    return (entry, *logs)[:limit]
