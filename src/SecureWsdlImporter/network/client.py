# === NAVMAP v1 ===
# {
#   "module": "SecureWsdlImporter.network.client",
#   "purpose": "HTTPX client factory with client-certificate TLS and a fetch helper.",
#   "sections": [
#     {
#       "id": "create-ssl-context",
#       "name": "create_ssl_context",
#       "anchor": "function-create-ssl-context",
#       "kind": "function"
#     },
#     {
#       "id": "create-http-client",
#       "name": "create_http_client",
#       "anchor": "function-create-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "fetch-bytes",
#       "name": "fetch_bytes",
#       "anchor": "function-fetch-bytes",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""HTTPX client factory for mutually authenticated downloads.

One client is built per run and shared read-only by every fetch: the WSDL and
all schemas travel over the same connection pool with the same client
certificate.

Key design:
- **Client identity**: the certificate chain and key are installed into the
  SSL context through a private temporary PEM file, since :mod:`ssl` only
  loads key material from disk.
- **Server verification**: on by default, using the certifi CA bundle.
  Disabling it is an explicit opt-in that logs a warning on every client
  build.
- **No retries**: transport failures surface immediately as
  :class:`~SecureWsdlImporter.errors.DownloadFailure`.
"""

import logging
import os
import ssl
import tempfile
from pathlib import Path
from typing import Optional

import certifi
import httpx

from ..errors import DownloadFailure
from ..settings import ImporterSettings
from .identity import ClientIdentity

logger = logging.getLogger(__name__)


def _install_identity(ctx: ssl.SSLContext, identity: ClientIdentity) -> None:
    # Random per-call passphrase; the key never touches disk unencrypted.
    passphrase = os.urandom(24).hex().encode("ascii")
    with tempfile.TemporaryDirectory(prefix="wsdlimport-") as tmp:
        cert_path = Path(tmp) / "client-chain.pem"
        key_path = Path(tmp) / "client-key.pem"
        cert_path.write_bytes(identity.certificate_chain_pem())
        key_path.write_bytes(identity.private_key_pem(passphrase))
        ctx.load_cert_chain(str(cert_path), str(key_path), password=passphrase)


def create_ssl_context(
    identity: Optional[ClientIdentity] = None,
    *,
    verify: bool = True,
) -> ssl.SSLContext:
    """Create an SSL context presenting ``identity`` to the server.

    Args:
        identity: Client certificate to present; ``None`` builds a context
            without client authentication.
        verify: Validate the server certificate chain and hostname.

    Returns:
        Configured ssl.SSLContext for use with HTTPX.
    """
    if verify:
        ctx = ssl.create_default_context(cafile=certifi.where())
        ctx.check_hostname = True
        ctx.verify_mode = ssl.CERT_REQUIRED
    else:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        logger.warning(
            "Server certificate validation DISABLED; only use against trusted endpoints",
            extra={"stage": "tls"},
        )

    if identity is not None:
        _install_identity(ctx, identity)
    return ctx


def create_http_client(
    settings: ImporterSettings,
    identity: Optional[ClientIdentity] = None,
    *,
    verify: Optional[bool] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create the shared HTTPX client for a run.

    Args:
        settings: Timeouts, redirect policy and User-Agent.
        identity: Client certificate to present.
        verify: Overrides ``settings.verify_tls`` when given.
        transport: Optional transport (tests install ``httpx.MockTransport``).

    Returns:
        Fully configured httpx.Client; callers own closing it.
    """
    verify_tls = settings.verify_tls if verify is None else verify
    ssl_ctx = create_ssl_context(identity, verify=verify_tls)

    client = httpx.Client(
        transport=transport,
        verify=ssl_ctx,
        timeout=httpx.Timeout(settings.timeout_sec, connect=settings.connect_timeout_sec),
        follow_redirects=settings.follow_redirects,
        headers={"User-Agent": settings.user_agent},
    )

    logger.debug(
        "HTTPX client created",
        extra={
            "stage": "client",
            "verify_tls": verify_tls,
            "client_certificate": identity.subject if identity else None,
            "config_hash": settings.config_hash(),
        },
    )
    return client


def fetch_bytes(client: httpx.Client, url: str) -> bytes:
    """GET ``url`` and return the response body.

    Raises:
        DownloadFailure: On an unusable URL, transport errors, or a non-success
            status code.
    """
    try:
        response = client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise DownloadFailure(f"GET {url} failed: {exc}", url=url) from exc

    if not response.is_success:
        raise DownloadFailure(
            f"GET {url} returned HTTP {response.status_code}",
            url=url,
            status_code=response.status_code,
        )
    logger.debug(
        "fetched document",
        extra={"stage": "fetch", "url": url, "bytes": len(response.content)},
    )
    return response.content


__all__ = [
    "create_ssl_context",
    "create_http_client",
    "fetch_bytes",
]
