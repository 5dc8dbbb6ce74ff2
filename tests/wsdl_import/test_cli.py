"""Command line behaviour: exit codes, credential failures, and a full mocked run."""

from __future__ import annotations

import logging

import pytest
from typer.testing import CliRunner

from SecureWsdlImporter import __version__
from SecureWsdlImporter import cli as cli_module
from SecureWsdlImporter.settings import ORIGINAL_WSDL_NAME, UPDATED_WSDL_NAME, build_import_options
from tests.wsdl_import.conftest import PFX_PASSWORD, make_schema, make_wsdl

WSDL_URL = "https://services.internal/orders/OrderService.svc?wsdl"


@pytest.fixture
def mocked_client(monkeypatch, server):
    """Route the CLI's HTTP client through ``server``, recording the verify flag."""

    calls = []

    def _factory(settings, identity, *, verify=None, transport=None):
        calls.append({"identity": identity, "verify": verify})
        return server.client()

    monkeypatch.setattr(cli_module, "create_http_client", _factory)
    return calls


def test_missing_required_arguments_exit_1(capsys, caplog):
    with caplog.at_level(logging.ERROR):
        assert cli_module.cli_main([]) == 1
    assert "pfx" in capsys.readouterr().err.lower()
    assert "Failed to parse command line arguments" in caplog.text


def test_unknown_option_exit_1(caplog):
    with caplog.at_level(logging.ERROR):
        assert cli_module.cli_main(["--pfx", "a.pfx", "--wsdl", WSDL_URL, "--bogus"]) == 1
    assert "Failed to parse command line arguments" in caplog.text


def test_version_flag_exit_0(capsys):
    assert cli_module.cli_main(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_invalid_wsdl_url_exit_1(pfx_file, caplog):
    with caplog.at_level(logging.ERROR):
        exit_code = cli_module.cli_main(["--pfx", str(pfx_file), "--wsdl", "orders.wsdl"])
    assert exit_code == 1
    assert "Failed to parse command line arguments" in caplog.text


def test_missing_certificate_is_logged_before_any_request(tmp_path, server, mocked_client, caplog):
    with caplog.at_level(logging.ERROR):
        exit_code = cli_module.cli_main(
            ["--pfx", str(tmp_path / "absent.pfx"), "--wsdl", WSDL_URL, "--output", str(tmp_path / "out")]
        )
    assert exit_code == 0
    assert "Certificate file not found" in caplog.text
    assert mocked_client == []
    assert server.requests == []


def test_wrong_password_is_logged(pfx_file, tmp_path, server, mocked_client, caplog):
    with caplog.at_level(logging.ERROR):
        exit_code = cli_module.cli_main(
            ["-p", str(pfx_file), "-s", "wrong", "-w", WSDL_URL, "-o", str(tmp_path / "out")]
        )
    assert exit_code == 0
    assert "Error loading certificate" in caplog.text
    assert server.requests == []


def test_full_run_writes_artifacts(pfx_file, tmp_path, server, mocked_client):
    server.add(WSDL_URL, make_wsdl("schemas/orders.xsd"))
    server.add("https://services.internal/orders/schemas/orders.xsd", make_schema())
    output = tmp_path / "out"

    exit_code = cli_module.cli_main(
        [
            "--pfx",
            str(pfx_file),
            "--password",
            PFX_PASSWORD,
            "--wsdl",
            WSDL_URL,
            "--output",
            str(output),
            "--verbose",
        ]
    )

    assert exit_code == 0
    assert sorted(p.name for p in output.iterdir()) == sorted(
        [ORIGINAL_WSDL_NAME, UPDATED_WSDL_NAME, "orders.xsd"]
    )
    assert mocked_client[0]["verify"] is True
    assert "wsdl-import-test" in mocked_client[0]["identity"].subject


def test_insecure_flag_disables_verification(pfx_file, tmp_path, server, mocked_client):
    server.add(WSDL_URL, make_wsdl())

    exit_code = cli_module.cli_main(
        ["--pfx", str(pfx_file), "--password", PFX_PASSWORD, "--wsdl", WSDL_URL, "-o", str(tmp_path), "--insecure"]
    )

    assert exit_code == 0
    assert mocked_client[0]["verify"] is False


def test_password_from_environment(pfx_file, tmp_path, server, mocked_client, monkeypatch):
    server.add(WSDL_URL, make_wsdl())
    monkeypatch.setenv("WSDLIMPORT_PFX_PASSWORD", PFX_PASSWORD)

    exit_code = cli_module.cli_main(["--pfx", str(pfx_file), "--wsdl", WSDL_URL, "-o", str(tmp_path)])

    assert exit_code == 0
    assert (tmp_path / UPDATED_WSDL_NAME).exists()


def test_root_failure_is_logged_and_exit_0(pfx_file, tmp_path, server, mocked_client, caplog):
    with caplog.at_level(logging.ERROR):
        exit_code = cli_module.cli_main(
            ["--pfx", str(pfx_file), "--password", PFX_PASSWORD, "--wsdl", WSDL_URL, "-o", str(tmp_path)]
        )
    assert exit_code == 0
    assert "An error occurred during WSDL processing" in caplog.text
    assert not (tmp_path / ORIGINAL_WSDL_NAME).exists()


def test_run_import_with_transport(pfx_file, tmp_path, server):
    server.add(WSDL_URL, make_wsdl("a.xsd"))
    server.add("https://services.internal/orders/a.xsd", make_schema())
    options = build_import_options(
        pfx_file=pfx_file, pfx_password=PFX_PASSWORD, wsdl_url=WSDL_URL, output_dir=tmp_path
    )

    report = cli_module.run_import(options, transport=server.transport())

    assert report is not None
    assert report.ok
    assert report.schemas == {"https://services.internal/orders/a.xsd": tmp_path / "a.xsd"}


def test_version_flag_with_runner():
    result = CliRunner().invoke(cli_module.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
