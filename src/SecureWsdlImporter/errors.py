# === NAVMAP v1 ===
# {
#   "module": "SecureWsdlImporter.errors",
#   "purpose": "Define the exception hierarchy used across certificate loading, download, and rewriting",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "configuration", "name": "Configuration Errors", "anchor": "CFG", "kind": "api"},
#     {"id": "download", "name": "Download & Format Errors", "anchor": "DWN", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared across certificate loading, download, and rewriting.

The importer spans argument parsing, client-certificate loading, HTTP retrieval,
XML parsing, and local persistence. Grouping the failure modes lets the CLI
abort on the categories that must stop a run (bad arguments, unusable
credentials, an unreachable root WSDL) while the import rewriter records the
per-schema categories and keeps going.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "WsdlImportError",
    "UserConfigError",
    "CertificateError",
    "DownloadFailure",
    "SchemaFormatError",
    "OutputError",
]


class WsdlImportError(RuntimeError):
    """Base exception for WSDL download, schema resolution, or persistence failures."""


class UserConfigError(WsdlImportError):
    """Raised when CLI arguments or environment configuration are invalid."""


class CertificateError(WsdlImportError):
    """Raised when the client certificate is missing or cannot be loaded."""


class DownloadFailure(WsdlImportError):
    """Raised when an HTTP GET fails at the transport level or with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class SchemaFormatError(WsdlImportError):
    """Raised when a downloaded document is not well-formed XML."""

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class OutputError(WsdlImportError):
    """Raised when an artifact cannot be written to the output directory."""
