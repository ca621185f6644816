"""Centralized logging configuration using Loguru with Pino-compatible output.

This module configures the single loguru logger used by scriptnav. Components
never import a global logger implicitly: they accept a ``log`` argument at
construction and fall back to ``component_logger(<name>)``.

Usage:
    from scriptnav.utils.logging import component_logger
    log = component_logger("indexer")
    log.info("Indexed {count} manifests", count=12)

Environment Variables:
    SCRIPTNAV_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    SCRIPTNAV_LOG_JSON: 0|1 (default: 0, human-readable)
    SCRIPTNAV_LOG_FILE: path to log file (optional)
    SCRIPTNAV_REQUEST_ID: correlation ID for cross-process tracing
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

# Remove default handler
logger.remove()

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("SCRIPTNAV_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("SCRIPTNAV_LOG_JSON", "0") == "1"
_log_file = os.environ.get("SCRIPTNAV_LOG_FILE")
_request_id = os.environ.get("SCRIPTNAV_REQUEST_ID") or str(uuid.uuid4())


def _pino_record(record) -> dict:
    """Translate a loguru record into a Pino log line."""
    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key not in ("request_id",):
            pino_log[key] = value

    if record["exception"]:
        pino_log["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }
    return pino_log


def pino_compatible_sink(message):
    """Format log records as Pino-compatible NDJSON on stdout.

    {"level":30,"time":1715629847123,"msg":"...","pid":12345,"request_id":"..."}
    """
    # Never call logger.* inside a sink - causes infinite recursion
    sys.stdout.write(json.dumps(_pino_record(message.record), default=str) + "\n")
    sys.stdout.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - "
    "<level>{message}</level>"
)

logger.configure(extra={"component": "scriptnav"})

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

if _json_mode:
    logger.add(
        pino_compatible_sink,
        level=_log_level,
        colorize=False,
    )
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )

if _log_file:

    def _file_pino_sink(message):
        """Write Pino-format JSON to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(_pino_record(message.record), default=str) + "\n")

    logger.add(
        _file_pino_sink,
        level="DEBUG",
    )


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add rotating file handler for persistent logs.

    Args:
        log_dir: Directory for log files (e.g., Path(".scriptnav"))
        level: Minimum log level for file output

    Returns:
        The loguru handler id, so callers can remove it again.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "scriptnav.log"

    return logger.add(
        log_file,
        rotation="10 MB",
        retention="7 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} - {message}",
    )


def component_logger(component: str):
    """Return the shared logger bound to a component name."""
    return logger.bind(component=component)


__all__ = [
    "logger",
    "component_logger",
    "configure_file_logging",
]
