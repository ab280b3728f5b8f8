"""Fallback values for settings the configuration file leaves unset."""

from __future__ import annotations

import logging
import socket
from typing import Callable

from hbac.config.errors import DefaultResolutionFailure
from hbac.config.schema import (
    DEFAULT_SEARCH_BASE,
    DEFAULT_TIMEOUT,
    DEFAULT_URI,
    HOST_NAME_MAX,
    ConfigDraft,
)


HostnameLookup = Callable[[], str]


def local_host_name(lookup: HostnameLookup | None = None) -> str:
    try:
        name = (lookup or socket.gethostname)()
    except OSError as exc:
        raise DefaultResolutionFailure(f"cannot query local host name: {exc}", field="host_name") from exc
    name = (name or "")[: HOST_NAME_MAX - 1]
    if not name:
        raise DefaultResolutionFailure("local host name is empty", field="host_name")
    return name


def resolve_defaults(
    draft: ConfigDraft,
    *,
    hostname_lookup: HostnameLookup | None = None,
    logger: logging.Logger | None = None,
) -> ConfigDraft:
    defaulted: list[str] = []
    if not draft.uri:
        draft.uri = DEFAULT_URI
        defaulted.append("uri")
    if not draft.search_base:
        draft.search_base = DEFAULT_SEARCH_BASE
        defaulted.append("search_base")
    if not draft.host_name:
        draft.host_name = local_host_name(hostname_lookup)
        defaulted.append("host_name")
    if draft.timeout <= 0:
        draft.timeout = DEFAULT_TIMEOUT
        defaulted.append("timeout")

    if logger is not None and defaulted:
        logger.debug(
            f"applied defaults: {', '.join(defaulted)}",
            extra={"event_action": "config_defaults", "event_outcome": "success"},
        )
    return draft
