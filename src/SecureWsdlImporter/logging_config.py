# === NAVMAP v1 ===
# {
#   "module": "SecureWsdlImporter.logging_config",
#   "purpose": "Console and JSON-lines logging setup for the WSDL importer",
#   "sections": [
#     {"id": "mask", "name": "mask_sensitive_data", "anchor": "function-mask-sensitive-data", "kind": "function"},
#     {"id": "json-formatter", "name": "JSONFormatter", "anchor": "class-jsonformatter", "kind": "class"},
#     {"id": "setup-logging", "name": "setup_logging", "anchor": "function-setup-logging", "kind": "function"}
#   ]
# }
# === /NAVMAP ===
"""
Structured Logging Utilities

This module centralizes logging setup for the importer. Console output stays
human readable; an optional rotating file receives one JSON object per record
so a run over a large schema graph can be inspected afterwards. Secrets such as
the certificate password are masked before anything is emitted.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional, Union

LOGGER_NAME = "SecureWsdlImporter"

_RESERVED_ATTRS = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Remove secrets from structured payloads prior to logging.

    Args:
        payload: Arbitrary key-value pairs that may contain credentials.

    Returns:
        Copy of the payload where secret fields are replaced with
        `***masked***`.

    Examples:
        >>> mask_sensitive_data({"password": "secret", "status": "ok"})
        {'password': '***masked***', 'status': 'ok'}
    """
    sensitive_keys = {"authorization", "password", "pfx_password", "token", "secret"}
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        if key.lower() in sensitive_keys:
            masked[key] = "***masked***"
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting JSON structured logs.

    Fields passed through ``extra=`` are copied into the emitted object.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        log_obj: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            log_obj[key] = value if isinstance(value, (str, int, float, bool, type(None))) else str(value)
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj))


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Path] = None,
    *,
    max_log_size_mb: float = 10.0,
) -> logging.Logger:
    """Configure console and optional JSON file handlers for the importer.

    Calling this more than once replaces the handlers installed by earlier
    calls rather than stacking duplicates.

    Args:
        level: Logging level name or number.
        log_file: Optional path for JSON-lines output; parent directories are
            created as needed.
        max_log_size_mb: Rotation threshold for ``log_file``.

    Returns:
        The ``SecureWsdlImporter`` package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_wsdlimport_managed", False):
            logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stream_handler._wsdlimport_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=int(max_log_size_mb * 1024 * 1024),
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._wsdlimport_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = True
    return logger


__all__ = ["LOGGER_NAME", "JSONFormatter", "mask_sensitive_data", "setup_logging"]
