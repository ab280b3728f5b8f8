"""Dataclasses and constants for the HBAC module configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from hbac.config.errors import DefaultResolutionFailure


DEFAULT_CONFIG_PATH = Path("/etc/pam_hbac.conf")
DEFAULT_URI = "ldap://localhost"
DEFAULT_SEARCH_BASE = "dc=example,dc=com"
DEFAULT_TIMEOUT = 5

# Buffer sizes: one slot is reserved for the terminator, so at most
# MAX_LINE - 1 bytes of a line and HOST_NAME_MAX - 1 characters of a host
# name are kept.
MAX_LINE = 1024
HOST_NAME_MAX = 64

SEPARATOR = "="
COMMENT = "#"
REDACTED = "********"


class ConfigKey(str, Enum):
    """Directive names accepted in the configuration file."""

    URI = "uri"
    BIND_DN = "bind_dn"
    BIND_PW = "bind_pw"
    SEARCH_BASE = "search_base"
    HOST_NAME = "host_name"

    @property
    def attribute(self) -> str:
        return self.value

    @property
    def secret(self) -> bool:
        return self is ConfigKey.BIND_PW


RECOGNIZED_KEYS: Mapping[str, ConfigKey] = MappingProxyType({key.value: key for key in ConfigKey})


@dataclass(slots=True, frozen=True)
class HbacConfig:
    uri: str
    search_base: str
    host_name: str
    timeout: int
    bind_dn: str | None = None
    bind_pw: str | None = field(default=None, repr=False)

    def as_dict(self, *, show_secrets: bool = False) -> dict[str, Any]:
        bind_pw = self.bind_pw
        if bind_pw is not None and not show_secrets:
            bind_pw = REDACTED
        return {
            "uri": self.uri,
            "bind_dn": self.bind_dn,
            "bind_pw": bind_pw,
            "search_base": self.search_base,
            "host_name": self.host_name,
            "timeout": self.timeout,
        }


@dataclass(slots=True)
class ConfigDraft:
    """Mutable record filled while a file is being read."""

    uri: str | None = None
    bind_dn: str | None = None
    bind_pw: str | None = field(default=None, repr=False)
    search_base: str | None = None
    host_name: str | None = None
    timeout: int = 0

    def freeze(self) -> HbacConfig:
        for name in ("uri", "search_base", "host_name"):
            if not getattr(self, name):
                raise DefaultResolutionFailure(f"'{name}' is unset after default resolution", field=name)
        if self.timeout <= 0:
            raise DefaultResolutionFailure("'timeout' must be greater than zero", field="timeout")
        return HbacConfig(
            uri=self.uri,
            search_base=self.search_base,
            host_name=self.host_name,
            timeout=self.timeout,
            bind_dn=self.bind_dn,
            bind_pw=self.bind_pw,
        )
