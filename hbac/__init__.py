"""Configuration reader for the pam_hbac host-based access control module."""

from hbac.config.errors import (
    AllocationFailure,
    CannotOpenFile,
    ConfigError,
    DefaultResolutionFailure,
    MalformedLine,
)
from hbac.config.loader import dump_config, load_config, loaded_config, release_config
from hbac.config.schema import HbacConfig

__all__ = [
    "AllocationFailure",
    "CannotOpenFile",
    "ConfigError",
    "DefaultResolutionFailure",
    "HbacConfig",
    "MalformedLine",
    "dump_config",
    "load_config",
    "loaded_config",
    "release_config",
]
