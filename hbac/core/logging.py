"""Structured ECS logging for configuration loading diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
import json
import logging
from pathlib import Path


VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
VALID_LOG_SINKS = {"stdout", "file"}


@dataclass(slots=True)
class LoggingConfig:
    level: str = "WARNING"
    sink: str = "stdout"
    file_path: str | None = None
    service_name: str = "hbac"

    def __post_init__(self) -> None:
        self.level = str(self.level).upper()
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(f"invalid log level '{self.level}'")
        if self.sink not in VALID_LOG_SINKS:
            raise ValueError(f"invalid log sink '{self.sink}'")


def _strip_empty(value: object) -> object | None:
    if isinstance(value, dict):
        cleaned = {key: _strip_empty(item) for key, item in value.items()}
        return {key: item for key, item in cleaned.items() if item is not None} or None
    if value in ("", None):
        return None
    return value


class ECSJsonFormatter(logging.Formatter):
    def __init__(self, service_name: str = "hbac") -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).isoformat(timespec="microseconds")
        payload: dict[str, object] = {
            "@timestamp": timestamp,
            "message": record.getMessage(),
            "log": {
                "level": record.levelname.lower(),
                "logger": record.name,
            },
            "service": {
                "name": getattr(record, "service_name", self.service_name),
            },
            "event": {
                "kind": "event",
                "category": "configuration",
                "action": getattr(record, "event_action", None),
                "outcome": getattr(record, "event_outcome", None),
            },
            "file": {
                "path": getattr(record, "config_file", None),
            },
            "hbac": {
                "line_number": getattr(record, "line_number", None),
                "error_code": getattr(record, "error_code", None),
                "config_key": getattr(record, "config_key", None),
            },
        }
        if record.exc_info:
            payload["error"] = {"message": self.formatException(record.exc_info)}
        cleaned = _strip_empty(payload) or {}
        return json.dumps(cleaned, separators=(",", ":"))


def _sink_handler(config: LoggingConfig, formatter: logging.Formatter) -> logging.Handler:
    if config.sink == "file":
        file_path = config.file_path or "logs/hbac.log"
        log_file = Path(file_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: LoggingConfig, force: bool = False) -> None:
    root = logging.getLogger("hbac")
    if getattr(root, "_hbac_configured", False) and not force:
        return

    formatter = ECSJsonFormatter(service_name=config.service_name)
    root.setLevel(config.level)
    for existing in list(root.handlers):
        existing.close()
    root.handlers.clear()
    root.addHandler(_sink_handler(config, formatter))
    root.propagate = False
    setattr(root, "_hbac_configured", True)


def get_logger(name: str, level: str = "WARNING") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if name.startswith("hbac"):
        parent = logging.getLogger("hbac")
        if parent.handlers:
            logger.setLevel(logging.NOTSET)
            logger.propagate = True
            return logger

    handler = logging.StreamHandler()
    handler.setFormatter(ECSJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
