"""Loguru setup shared by every pagegraph module.

Attribution is a best-effort enrichment step, so heuristic misses (unresolved
specifiers, unparseable files, unknown barrel names) go to DEBUG and only the
per-run summary reaches INFO. Records can be emitted as Pino NDJSON so that
pagegraph output interleaves with the Node tooling that usually consumes it.

Environment:
    PAGEGRAPH_LOG_LEVEL   minimum console level, INFO when unset
    PAGEGRAPH_LOG_JSON    "1" switches the console to NDJSON on stdout
    PAGEGRAPH_LOG_FILE    append NDJSON records (all levels) to this path
    PAGEGRAPH_REQUEST_ID  correlation id stamped on every JSON record
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

from pagegraph.utils.constants import ENV_PREFIX

PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _env(name: str, default: str | None = None) -> str | None:
    return os.environ.get(f"{ENV_PREFIX}_LOG_{name}", default)


_request_id = os.environ.get(f"{ENV_PREFIX}_REQUEST_ID") or uuid.uuid4().hex


def to_pino(record: dict) -> dict:
    """Flatten a loguru record into the Pino field layout.

    Bound extras become top-level keys; an attached exception becomes ``err``.
    """
    entry = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "pid": record["process"].id,
        "msg": record["message"],
    }
    extra = dict(record["extra"])
    entry["request_id"] = extra.pop("request_id", _request_id)
    entry.update(extra)

    exc = record["exception"]
    if exc is not None:
        entry["err"] = {
            "type": exc.type.__name__ if exc.type else "Error",
            "message": "" if exc.value is None else str(exc.value),
        }
    return entry


class PinoSink:
    """Loguru sink writing one JSON object per line.

    With no path the sink writes to whatever ``sys.stdout`` is at emit time.
    Sinks must never log themselves; loguru would re-enter them.
    """

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = path

    def __call__(self, message) -> None:
        line = json.dumps(to_pino(message.record), default=str) + "\n"
        if self.path is None:
            sys.stdout.write(line)
            sys.stdout.flush()
            return
        with open(self.path, "a", encoding="utf-8") as handle:
            handle.write(line)


pino_compatible_sink = PinoSink()


def _install_default_handlers() -> None:
    logger.remove()
    level = (_env("LEVEL", "INFO") or "INFO").upper()

    if _env("JSON", "0") == "1":
        logger.add(pino_compatible_sink, level=level, colorize=False)
    else:
        for name, color in (("DEBUG", "<blue>"), ("WARNING", "<yellow>"), ("ERROR", "<red>")):
            logger.level(name, color=color)
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=None)

    log_file = _env("FILE")
    if log_file:
        logger.add(PinoSink(log_file), level="DEBUG")


_install_default_handlers()

_file_handlers: dict[str, int] = {}


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Attach a rotating plain-text log under ``log_dir``.

    Calling again for the same directory reuses the existing handler, so
    repeated ``enrich_repository`` runs do not duplicate lines.
    """
    log_dir = Path(log_dir)
    key = str(log_dir.resolve())
    if key in _file_handlers:
        return _file_handlers[key]

    log_dir.mkdir(parents=True, exist_ok=True)
    handler_id = logger.add(
        log_dir / "pagegraph.log",
        rotation="10 MB",
        retention="7 days",
        level=level.upper(),
        format=FILE_FORMAT,
    )
    _file_handlers[key] = handler_id
    return handler_id


def get_request_id() -> str:
    return _request_id


__all__ = [
    "logger",
    "PinoSink",
    "pino_compatible_sink",
    "to_pino",
    "configure_file_logging",
    "get_request_id",
]
