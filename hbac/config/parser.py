"""Line-level parsing of the HBAC configuration file."""

from __future__ import annotations

import logging

from hbac.config.errors import MalformedLine
from hbac.config.schema import COMMENT, RECOGNIZED_KEYS, SEPARATOR, ConfigDraft, ConfigKey


# ASCII whitespace only; Unicode spaces belong to keys and values.
WHITESPACE = " \t\n\r\v\f"


def strip(value: str) -> str:
    return value.strip(WHITESPACE)


def sanitize_line(raw: str) -> str | None:
    """Return the trimmed line, or None when it is blank or a comment."""
    line = strip(raw)
    if not line or line.startswith(COMMENT):
        return None
    return line


def split_key_value(line: str) -> tuple[str, str]:
    key, sep, value = line.partition(SEPARATOR)
    if not sep:
        raise MalformedLine("malformed line; no separator", line=line)
    return strip(key), strip(value)


def dispatch(
    draft: ConfigDraft,
    key: str,
    value: str,
    *,
    logger: logging.Logger | None = None,
) -> ConfigKey | None:
    """Store ``value`` in the draft field named by ``key``.

    Matching is case-insensitive and the last occurrence of a key wins. An
    empty value leaves the field unset so defaults still apply. Unknown keys
    are dropped and reported as ``None``.
    """
    config_key = RECOGNIZED_KEYS.get(key.lower())
    if config_key is None:
        if logger is not None:
            logger.debug(
                "ignoring unknown key",
                extra={"event_action": "config_key_ignored", "config_key": key},
            )
        return None

    setattr(draft, config_key.attribute, value or None)
    if logger is not None and not config_key.secret:
        logger.debug(
            f"{config_key.value}: {value}",
            extra={"event_action": "config_key_set", "config_key": config_key.value},
        )
    return config_key
