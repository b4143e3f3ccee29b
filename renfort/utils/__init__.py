"""
Utility modules for Renfort.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
"""

from renfort.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    settings,
    ROOT_DIR,
)
from renfort.utils.constants import (
    APP_NAME,
    VERSION,
    DEFAULT_SCORING_WEIGHTS,
    ApplicationStatus,
    AuditAction,
    MissionStatus,
    MissionUrgency,
    UserRole,
    UserStatus,
)
from renfort.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "settings",
    "ROOT_DIR",
    # Constants
    "APP_NAME",
    "VERSION",
    "DEFAULT_SCORING_WEIGHTS",
    "ApplicationStatus",
    "AuditAction",
    "MissionStatus",
    "MissionUrgency",
    "UserRole",
    "UserStatus",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
]
