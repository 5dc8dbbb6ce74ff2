"""Download a WSDL over mutual TLS and localise its XML Schema imports.

The package fetches a root WSDL with a client certificate, follows every
``xs:import`` it references (recursively, once per distinct URL), saves each
schema into one flat output directory, and rewrites ``schemaLocation``
attributes so the WSDL and schemas can be consumed offline.

Example:
    >>> from SecureWsdlImporter import WsdlImporter  # doctest: +SKIP
    >>> report = WsdlImporter(client, "https://host/svc?wsdl", Path("out")).run()  # doctest: +SKIP
"""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import (
    CertificateError,
    DownloadFailure,
    OutputError,
    SchemaFormatError,
    UserConfigError,
    WsdlImportError,
)
from .schemas import ImportOutcome, SchemaFetcher, VisitedUrlCache
from .urls import resolve_url
from .wsdl import ImportReport, WsdlImporter

__all__ = [
    "__version__",
    "CertificateError",
    "DownloadFailure",
    "ImportOutcome",
    "ImportReport",
    "OutputError",
    "SchemaFetcher",
    "SchemaFormatError",
    "UserConfigError",
    "VisitedUrlCache",
    "WsdlImportError",
    "WsdlImporter",
    "resolve_url",
]
