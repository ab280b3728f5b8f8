"""Config loading and initialization."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import os
from pathlib import Path
import shutil
from typing import IO, Any, Iterator

from hbac.config.defaults import HostnameLookup, resolve_defaults
from hbac.config.errors import AllocationFailure, CannotOpenFile, ConfigError, MalformedLine
from hbac.config.parser import dispatch, sanitize_line, split_key_value
from hbac.config.schema import MAX_LINE, ConfigDraft, HbacConfig
from hbac.core.logging import get_logger


STARTER_CONFIG_PATH = Path(__file__).with_name("defaults.conf")


def _config_logger(logger: logging.Logger | None) -> logging.Logger:
    return logger if logger is not None else get_logger("hbac.config")


def _read_lines(handle: IO[bytes], config_file: str, logger: logging.Logger) -> Iterator[tuple[int, bytes]]:
    """Yield ``(line_number, raw)`` pairs, keeping at most ``MAX_LINE - 1`` bytes per line.

    Anything past the limit is read up to and including the next newline and
    thrown away, so an overlong line never spills into the following one.
    """
    line_number = 0
    while True:
        chunk = handle.readline(MAX_LINE - 1)
        if not chunk:
            return
        line_number += 1
        dropped = 0
        if not chunk.endswith(b"\n"):
            rest = handle.readline(MAX_LINE)
            while rest:
                dropped += len(rest.rstrip(b"\n"))
                if rest.endswith(b"\n"):
                    break
                rest = handle.readline(MAX_LINE)
        if dropped:
            logger.warning(
                f"line {line_number} is longer than {MAX_LINE - 1} bytes; {dropped} discarded",
                extra={"event_action": "config_line_truncated", "config_file": config_file, "line_number": line_number},
            )
        yield line_number, chunk


def _decode_line(raw: bytes, line_number: int) -> str | None:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        # latin-1 maps every byte, and ASCII whitespace and '#' keep their positions.
        if sanitize_line(raw.decode("latin-1")) is None:
            return None
        raise MalformedLine(f"line is not valid UTF-8: {exc.reason}", line="", line_number=line_number) from exc


def _read_draft(handle: IO[bytes], config_file: str, logger: logging.Logger) -> ConfigDraft:
    draft = ConfigDraft()
    for line_number, raw in _read_lines(handle, config_file, logger):
        text = _decode_line(raw, line_number)
        line = sanitize_line(text) if text is not None else None
        if line is None:
            continue
        try:
            key, value = split_key_value(line)
        except MalformedLine as exc:
            exc.line_number = line_number
            raise
        dispatch(draft, key, value, logger=logger)
    return draft


def load_config(
    path: str | os.PathLike[str],
    *,
    logger: logging.Logger | None = None,
    hostname_lookup: HostnameLookup | None = None,
) -> HbacConfig:
    log = _config_logger(logger)
    config_file = os.fspath(path)
    log.debug(
        f"config file: {config_file}",
        extra={"event_action": "config_opening", "config_file": config_file},
    )

    try:
        handle = open(config_file, "rb")
    except OSError as exc:
        # PAM expects config file errors at LOG_ALERT; CRITICAL is the closest level.
        log.critical(
            f"cannot open config file {config_file} [{exc.errno}]: {exc.strerror}",
            extra={
                "event_action": "config_opening",
                "event_outcome": "failure",
                "config_file": config_file,
                "error_code": exc.errno,
            },
        )
        raise CannotOpenFile(config_file, exc.errno, exc.strerror) from exc

    with handle:
        try:
            log.debug("reading config", extra={"event_action": "config_reading", "config_file": config_file})
            draft = _read_draft(handle, config_file, log)
            log.debug("resolving defaults", extra={"event_action": "config_defaulting", "config_file": config_file})
            config = resolve_defaults(draft, hostname_lookup=hostname_lookup, logger=log).freeze()
        except ConfigError as exc:
            log.error(
                f"cannot read config: {exc}",
                extra={
                    "event_action": "config_failed",
                    "event_outcome": "failure",
                    "config_file": config_file,
                    "line_number": getattr(exc, "line_number", None),
                    "error_code": exc.kind,
                },
            )
            raise
        except MemoryError as exc:
            log.error(
                "out of memory while reading config",
                extra={
                    "event_action": "config_failed",
                    "event_outcome": "failure",
                    "config_file": config_file,
                    "error_code": AllocationFailure.kind,
                },
            )
            raise AllocationFailure(f"out of memory while reading {config_file}") from exc

    log.debug(
        "config loaded",
        extra={"event_action": "config_done", "event_outcome": "success", "config_file": config_file},
    )
    return config


def release_config(config: HbacConfig | None, *, logger: logging.Logger | None = None) -> None:
    if config is None:
        return
    _config_logger(logger).debug("config released", extra={"event_action": "config_released"})


@contextmanager
def loaded_config(path: str | os.PathLike[str], **kwargs: Any) -> Iterator[HbacConfig]:
    config = load_config(path, **kwargs)
    try:
        yield config
    finally:
        release_config(config, logger=kwargs.get("logger"))


def dump_config(config: HbacConfig | None, *, logger: logging.Logger | None = None) -> None:
    log = _config_logger(logger)
    if config is None:
        log.info("no config loaded", extra={"event_action": "config_dump"})
        return
    extra = {"event_action": "config_dump"}
    log.debug(f"URI: {config.uri}", extra=extra)
    log.debug(f"search base: {config.search_base}", extra=extra)
    log.debug(f"bind DN: {config.bind_dn}", extra=extra)
    log.debug(f"timeout: {config.timeout}", extra=extra)
    log.debug(f"client host name: {config.host_name}", extra=extra)


def initialize_config(path: Path, force: bool = False) -> Path:
    if path.exists() and not force:
        raise FileExistsError(f"config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(STARTER_CONFIG_PATH, path)
    return path
