"""Client-certificate loading for mutually authenticated HTTPS.

Certificates are normally delivered as PKCS#12 (``.pfx``/``.p12``) bundles.
:func:`load_client_identity` reads them with ``cryptography`` and exposes the
key and chain as PEM so they can be installed into an :class:`ssl.SSLContext`.
PEM bundles containing both a key and a certificate are accepted as well.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from ..errors import CertificateError

logger = logging.getLogger(__name__)

_PEM_MARKER = b"-----BEGIN"


@dataclass(frozen=True)
class ClientIdentity:
    """Private key plus certificate chain presented during the TLS handshake.

    Attributes:
        source: File the identity was loaded from.
        private_key: Key matching ``certificate``.
        certificate: Leaf client certificate.
        chain: Intermediate certificates shipped in the same bundle.
    """

    source: Path
    private_key: object
    certificate: x509.Certificate
    chain: List[x509.Certificate] = field(default_factory=list)

    @property
    def subject(self) -> str:
        return self.certificate.subject.rfc4514_string()

    def certificate_chain_pem(self) -> bytes:
        """Return the leaf followed by the intermediates, PEM encoded."""

        parts = [self.certificate, *self.chain]
        return b"".join(cert.public_bytes(serialization.Encoding.PEM) for cert in parts)

    def private_key_pem(self, password: Optional[bytes] = None) -> bytes:
        """Return the private key as PKCS#8 PEM, encrypted when ``password`` is given."""

        if password:
            encryption = serialization.BestAvailableEncryption(password)
        else:
            encryption = serialization.NoEncryption()
        return self.private_key.private_bytes(  # type: ignore[attr-defined]
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption,
        )


def _load_pkcs12(data: bytes, password: Optional[bytes], path: Path) -> ClientIdentity:
    key, certificate, additional = pkcs12.load_key_and_certificates(data, password)
    if key is None or certificate is None:
        raise CertificateError(f"{path} does not contain both a private key and a certificate")
    return ClientIdentity(
        source=path,
        private_key=key,
        certificate=certificate,
        chain=list(additional or []),
    )


def _load_pem(data: bytes, password: Optional[bytes], path: Path) -> ClientIdentity:
    certificates = x509.load_pem_x509_certificates(data)
    key = serialization.load_pem_private_key(data, password=password)
    return ClientIdentity(
        source=path,
        private_key=key,
        certificate=certificates[0],
        chain=certificates[1:],
    )


def load_client_identity(path: Path, password: Optional[str] = None) -> ClientIdentity:
    """Load a client certificate bundle from ``path``.

    Args:
        path: PKCS#12 or PEM bundle containing a private key and certificate.
        password: Password protecting the private key, if any.

    Returns:
        ClientIdentity ready to be installed into an SSL context.

    Raises:
        CertificateError: If the file is missing, unreadable, the password is
            wrong, or the bundle lacks a key or certificate.
    """

    path = Path(path).expanduser()
    if not path.is_file():
        raise CertificateError(f"Certificate file not found: {path}")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise CertificateError(f"Unable to read certificate file {path}: {exc}") from exc

    password_bytes = password.encode("utf-8") if password else None
    loader = _load_pem if data.lstrip().startswith(_PEM_MARKER) else _load_pkcs12
    try:
        identity = loader(data, password_bytes, path)
    except CertificateError:
        raise
    except (ValueError, TypeError) as exc:
        raise CertificateError(f"Error loading certificate from {path}: {exc}") from exc

    logger.info(
        "Certificate loaded successfully from %s",
        path,
        extra={"stage": "identity", "subject": identity.subject},
    )
    return identity


__all__ = ["ClientIdentity", "load_client_identity"]
