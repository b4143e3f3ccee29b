"""
Logging for the Renfort matching service.

Loguru writes to stderr and to a rotating log file. Mission, application
and matching events additionally go to ``audit.log`` through ``audit_log``.
"""

import sys
from typing import Any

from loguru import logger

from renfort.utils.config import LoggingSettings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[audit_type]} | {message}"

# Keys whose values never reach the audit file
REDACTED_KEYS = frozenset(
    {"password", "secret", "token", "api_key", "credential", "email", "phone", "cover_letter"}
)


def _add_file_sinks(log_settings: LoggingSettings, diagnose: bool) -> None:
    log_file = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        diagnose=diagnose,
        enqueue=True,
    )
    logger.add(
        log_file.parent / "audit.log",
        format=AUDIT_FORMAT,
        level="INFO",
        filter=lambda record: "audit_type" in record["extra"],
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )


def setup_logging() -> None:
    """Replace loguru's default handler with the configured sinks."""
    settings = get_settings()
    log_settings = settings.logging

    logger.remove()

    # Variable values stay out of tracebacks except in local debugging
    diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            diagnose=diagnose,
        )
    if log_settings.file_output:
        _add_file_sinks(log_settings, diagnose)

    logger.debug(f"Logging configured at {log_settings.level} for {settings.environment}")


def get_logger(name: str) -> Any:
    """Module logger, bound with ``name`` (pass ``__name__``)."""
    return logger.bind(name=name)


def redact(data: Any) -> Any:
    """Mask contact details and secrets, recursing into dicts and lists."""
    if isinstance(data, dict):
        return {
            k: "***REDACTED***" if any(s in k.lower() for s in REDACTED_KEYS) else redact(v)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


def audit_log(action: str, details: dict[str, Any], audit_type: str = "EVENT") -> None:
    """
    Write one audit entry.

    Args:
        action: AuditAction value, e.g. ``mission_created``
        details: Event fields; sensitive keys are redacted
        audit_type: EVENT or MATCHING
    """
    logger.bind(audit_type=audit_type).info(f"{action} | {redact(details)}")


setup_logging()
