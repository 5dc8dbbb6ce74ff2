"""HTTP client construction and client-certificate identity loading."""

from .client import create_http_client, create_ssl_context, fetch_bytes
from .identity import ClientIdentity, load_client_identity

__all__ = [
    "ClientIdentity",
    "create_http_client",
    "create_ssl_context",
    "fetch_bytes",
    "load_client_identity",
]
