"""Configuration module for neo-membership."""

from .constants import (
    TableNames,
    CacheKeys,
    PermissionSyntax,
    DisplayNameSyntax,
    RefusalReason,
)

from .settings import MembershipSettings, get_settings

from .logging_config import LogFormat, LoggingConfig, setup_logging

__all__ = [
    # Constants
    "TableNames",
    "CacheKeys",
    "PermissionSyntax",
    "DisplayNameSyntax",
    "RefusalReason",

    # Settings
    "MembershipSettings",
    "get_settings",

    # Logging
    "LogFormat",
    "LoggingConfig",
    "setup_logging",
]
