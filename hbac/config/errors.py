"""Typed failures raised while loading the HBAC configuration file."""

from __future__ import annotations

import errno as errno_codes
import os


class ConfigError(Exception):
    kind = "config_error"


class CannotOpenFile(ConfigError, OSError):
    kind = "cannot_open_file"

    def __init__(self, path: str | os.PathLike[str], code: int | None, strerror: str | None = None) -> None:
        self.path = os.fspath(path)
        code = code if code is not None else errno_codes.EIO
        strerror = strerror or os.strerror(code)
        OSError.__init__(self, code, strerror, self.path)

    def __str__(self) -> str:
        return f"cannot open config file {self.path} [{self.errno}]: {self.strerror}"


class MalformedLine(ConfigError, ValueError):
    kind = "malformed_line"

    def __init__(self, message: str, *, line: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.line_number = line_number

    def __str__(self) -> str:
        message = self.args[0] if self.args else "malformed line"
        if self.line_number is None:
            return message
        return f"line {self.line_number}: {message}"


class AllocationFailure(ConfigError, MemoryError):
    kind = "allocation_failure"


class DefaultResolutionFailure(ConfigError):
    kind = "default_resolution_failure"

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field
