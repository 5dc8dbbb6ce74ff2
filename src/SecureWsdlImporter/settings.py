"""Configuration models for the WSDL importer.

Two layers are kept apart:

* :class:`ImporterSettings` carries process-wide knobs (timeouts, TLS
  verification, logging) and reads ``WSDLIMPORT_*`` environment variables via
  ``pydantic-settings``.
* :class:`ImportOptions` captures one invocation: which certificate to
  present, which WSDL to fetch, and where to write the results. The CLI builds
  it from parsed arguments and validation errors surface as
  :class:`~SecureWsdlImporter.errors.UserConfigError`.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import UserConfigError

__all__ = [
    "ORIGINAL_WSDL_NAME",
    "UPDATED_WSDL_NAME",
    "FALLBACK_SCHEMA_PREFIX",
    "FALLBACK_SCHEMA_SUFFIX",
    "XML_SCHEMA_NAMESPACE",
    "ImporterSettings",
    "ImportOptions",
    "build_import_options",
    "get_settings",
]

ORIGINAL_WSDL_NAME = "originaldownloaded.wsdl"
UPDATED_WSDL_NAME = "updated.wsdl"
FALLBACK_SCHEMA_PREFIX = "imported_"
FALLBACK_SCHEMA_SUFFIX = ".xsd"
XML_SCHEMA_NAMESPACE = "http://www.w3.org/2001/XMLSchema"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ImporterSettings(BaseSettings):
    """Process-wide HTTP and logging settings."""

    verify_tls: bool = Field(
        default=True,
        description=(
            "Validate the server certificate chain. Disabling this is an explicit opt-in "
            "for trusted internal endpoints with self-signed certificates."
        ),
    )
    timeout_sec: float = Field(default=30.0, gt=0.0, le=600.0)
    connect_timeout_sec: float = Field(default=10.0, gt=0.0, le=120.0)
    follow_redirects: bool = Field(default=True)
    user_agent: str = Field(default="SecureWsdlImporter/0.1")
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = Field(default=None)
    pfx_password: Optional[SecretStr] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="WSDLIMPORT_", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return upper

    def config_hash(self) -> str:
        """Return a short digest of the non-secret settings for log correlation."""

        payload = self.model_dump(mode="json", exclude={"pfx_password"})
        digest = hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8"))
        return digest.hexdigest()[:16]


class ImportOptions(BaseModel):
    """Options for a single import run.

    Attributes:
        pfx_file: Path to the client certificate bundle.
        pfx_password: Optional password protecting the private key.
        wsdl_url: Absolute http(s) URL of the root WSDL.
        output_dir: Flat directory receiving every artifact.
        verbose: Raise log verbosity to DEBUG.
        insecure: Skip server certificate validation.
    """

    pfx_file: Path
    pfx_password: Optional[SecretStr] = None
    wsdl_url: str
    output_dir: Path = Path(".")
    verbose: bool = False
    insecure: bool = False

    @field_validator("wsdl_url")
    @classmethod
    def _validate_wsdl_url(cls, value: str) -> str:
        value = value.strip()
        parts = urlsplit(value)
        if parts.scheme.lower() not in {"http", "https"} or not parts.netloc:
            raise ValueError("wsdl must be an absolute http(s) URL")
        return value

    def password(self) -> Optional[str]:
        if self.pfx_password is None:
            return None
        return self.pfx_password.get_secret_value()


def build_import_options(**values: object) -> ImportOptions:
    """Validate raw option values, translating pydantic errors to ``UserConfigError``."""

    try:
        return ImportOptions(**values)
    except PydanticValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise UserConfigError(f"Invalid options: {messages}") from exc


def get_settings() -> ImporterSettings:
    """Load settings from the environment."""

    try:
        return ImporterSettings()
    except PydanticValidationError as exc:
        raise UserConfigError(f"Invalid WSDLIMPORT_* environment configuration: {exc}") from exc
