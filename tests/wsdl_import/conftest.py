"""Shared fixtures for the wsdl_import test suite."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from SecureWsdlImporter.logging_config import LOGGER_NAME
from SecureWsdlImporter.testing import StaticSchemaServer

XS_NS = "http://www.w3.org/2001/XMLSchema"
WSDL_NS = "http://schemas.xmlsoap.org/wsdl/"
PFX_PASSWORD = "changeit"


def make_schema(*locations: str, target: str = "urn:test") -> str:
    """Build a schema document importing ``locations`` in order."""

    imports = "".join(
        f'\n  <xs:import namespace="urn:import:{index}" schemaLocation="{location}"/>'
        for index, location in enumerate(locations)
    )
    return (
        f'<xs:schema xmlns:xs="{XS_NS}" targetNamespace="{target}">{imports}\n'
        f'  <xs:element name="root" type="xs:string"/>\n'
        f"</xs:schema>"
    )


def make_wsdl(*locations: str) -> str:
    """Build a WSDL whose embedded schema imports ``locations`` in order."""

    imports = "".join(
        f'\n      <xs:import namespace="urn:import:{index}" schemaLocation="{location}"/>'
        for index, location in enumerate(locations)
    )
    return (
        f'<wsdl:definitions xmlns:wsdl="{WSDL_NS}" xmlns:xs="{XS_NS}" name="Orders">\n'
        f"  <!-- generated by the service -->\n"
        f"  <wsdl:types>\n"
        f'    <xs:schema targetNamespace="urn:orders">{imports}\n'
        f"    </xs:schema>\n"
        f"  </wsdl:types>\n"
        f'  <wsdl:portType name="OrdersPort"/>\n'
        f"</wsdl:definitions>"
    )


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_wsdlimport_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def server() -> StaticSchemaServer:
    return StaticSchemaServer()


@pytest.fixture
def client(server: StaticSchemaServer) -> Iterator[httpx.Client]:
    http_client = server.client()
    try:
        yield http_client
    finally:
        http_client.close()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture(scope="session")
def client_key_and_cert():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "wsdl-import-test")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return key, cert


@pytest.fixture
def pfx_file(tmp_path: Path, client_key_and_cert) -> Path:
    key, cert = client_key_and_cert
    data = pkcs12.serialize_key_and_certificates(
        b"client",
        key,
        cert,
        None,
        serialization.BestAvailableEncryption(PFX_PASSWORD.encode("utf-8")),
    )
    path = tmp_path / "client.pfx"
    path.write_bytes(data)
    return path


@pytest.fixture
def pem_file(tmp_path: Path, client_key_and_cert) -> Path:
    key, cert = client_key_and_cert
    data = cert.public_bytes(serialization.Encoding.PEM) + key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    path = tmp_path / "client.pem"
    path.write_bytes(data)
    return path
