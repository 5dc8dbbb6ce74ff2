# === NAVMAP v1 ===
# {
#   "module": "SecureWsdlImporter.cli",
#   "purpose": "Typer command line entry point for the WSDL importer.",
#   "sections": [
#     {
#       "id": "run-import",
#       "name": "run_import",
#       "anchor": "function-run-import",
#       "kind": "function"
#     },
#     {
#       "id": "import-wsdl",
#       "name": "import_wsdl",
#       "anchor": "function-import-wsdl",
#       "kind": "function"
#     },
#     {
#       "id": "cli-main",
#       "name": "cli_main",
#       "anchor": "function-cli-main",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Command line entry point.

Example:
    $ secure-wsdl-import --pfx client.pfx --password secret \\
        --wsdl https://services.internal/orders?wsdl --output ./orders

Exit codes:
    0: arguments parsed and the run was dispatched (runtime failures are logged)
    1: arguments could not be parsed or validated
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import httpx
import typer

from . import __version__
from .errors import UserConfigError, WsdlImportError
from .io import ensure_output_dir
from .logging_config import setup_logging
from .network import create_http_client, load_client_identity
from .settings import ImporterSettings, ImportOptions, build_import_options, get_settings
from .wsdl import ImportReport, WsdlImporter

logger = logging.getLogger(__name__)

PROG_NAME = "secure-wsdl-import"

# Exit status Typer uses for usage errors (missing or unknown options).
USAGE_ERROR_EXIT_CODE = 2

app = typer.Typer(
    name=PROG_NAME,
    help="Download a WSDL over mutual TLS and localise all of its XML Schema imports.",
    add_completion=False,
)


def run_import(
    options: ImportOptions,
    settings: Optional[ImporterSettings] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> Optional[ImportReport]:
    """Load the certificate, build the client, and run the importer.

    Errors are logged rather than raised so the CLI can always finish cleanly.

    Args:
        options: Validated per-run options.
        settings: Process settings; read from the environment when omitted.
        transport: Optional HTTPX transport override.

    Returns:
        The run report, or ``None`` when the run was aborted.
    """
    settings = settings or get_settings()

    try:
        output_dir = ensure_output_dir(options.output_dir)
    except WsdlImportError as exc:
        logger.error("%s", exc, extra={"stage": "setup"})
        return None

    try:
        identity = load_client_identity(options.pfx_file, options.password())
    except WsdlImportError as exc:
        logger.error("%s", exc, extra={"stage": "identity", "path": str(options.pfx_file)})
        return None

    verify = False if options.insecure else settings.verify_tls
    try:
        with create_http_client(settings, identity, verify=verify, transport=transport) as client:
            return WsdlImporter(client, options.wsdl_url, output_dir).run()
    except WsdlImportError as exc:
        logger.error(
            "An error occurred during WSDL processing: %s",
            exc,
            extra={"stage": "wsdl", "url": options.wsdl_url},
        )
    except Exception:
        logger.exception(
            "Unexpected error during WSDL processing",
            extra={"stage": "wsdl", "url": options.wsdl_url},
        )
    return None


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} {__version__}")
        raise typer.Exit(0)


@app.command()
def import_wsdl(
    pfx: Path = typer.Option(..., "--pfx", "-p", help="Path to the PFX client certificate."),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-s",
        envvar="WSDLIMPORT_PFX_PASSWORD",
        help="Password for the PFX file.",
    ),
    wsdl: str = typer.Option(..., "--wsdl", "-w", help="URL of the WSDL file to download."),
    output: Path = typer.Option(
        Path("."),
        "--output",
        "-o",
        help="Output directory to save the downloaded files.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Skip server certificate validation (trusted internal endpoints only).",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write JSON-lines logs to this file.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Download the WSDL, resolve its schema imports, and save everything locally."""
    try:
        settings = get_settings()
        options = build_import_options(
            pfx_file=pfx,
            pfx_password=password if password is not None else settings.pfx_password,
            wsdl_url=wsdl,
            output_dir=output,
            verbose=verbose,
            insecure=insecure,
        )
    except UserConfigError as exc:
        setup_logging("INFO")
        logger.error("Failed to parse command line arguments: %s", exc)
        raise typer.Exit(1)

    setup_logging("DEBUG" if options.verbose else settings.log_level, log_file or settings.log_file)
    logger.info("Starting WSDL import...", extra={"stage": "start", "url": options.wsdl_url})
    run_import(options, settings)


def cli_main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse ``argv`` and run the importer, returning the process exit code.

    The app runs in standalone mode so Typer reports usage errors itself;
    its usage exit status is then folded into exit code 1.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        app(args=args, prog_name=PROG_NAME, standalone_mode=True)
    except SystemExit as exc:
        code = exc.code
    else:
        code = 0

    if code is None:
        return 0
    if code == USAGE_ERROR_EXIT_CODE:
        setup_logging("INFO")
        logger.error("Failed to parse command line arguments.")
        return 1
    return code if isinstance(code, int) else 1


def run() -> None:
    """Console-script entry point."""
    raise SystemExit(cli_main())


if __name__ == "__main__":
    run()
