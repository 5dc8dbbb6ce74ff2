"""Top-level WSDL download and rewrite.

:class:`WsdlImporter` fetches the root WSDL, keeps a verbatim copy for
traceability, rewrites every schema import reachable from it, and writes the
rewritten WSDL next to the downloaded schemas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import httpx

from .documents import has_xml_declaration, parse_document, serialize_document
from .io import ensure_output_dir, write_bytes
from .network import fetch_bytes
from .schemas import ImportOutcome, SchemaFetcher
from .settings import ORIGINAL_WSDL_NAME, UPDATED_WSDL_NAME

logger = logging.getLogger(__name__)

__all__ = ["ImportReport", "WsdlImporter"]


@dataclass
class ImportReport:
    """Summary of one importer run.

    Attributes:
        wsdl_url: Root WSDL that was processed.
        original_path: Verbatim copy of the downloaded WSDL.
        updated_path: Rewritten WSDL.
        imports: Outcomes for the imports found directly in the WSDL.
        schemas: Every schema URL saved during the run and its local file.
        failures: Imports left unrewritten anywhere in the graph.
    """

    wsdl_url: str
    original_path: Path
    updated_path: Path
    imports: List[ImportOutcome] = field(default_factory=list)
    schemas: Dict[str, Path] = field(default_factory=dict)
    failures: List[ImportOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class WsdlImporter:
    """Download a WSDL and localise its schema imports.

    Args:
        client: Authenticated HTTP client shared by every request.
        wsdl_url: Absolute URL of the root WSDL.
        output_dir: Flat directory for every artifact; created if absent.
        fetcher: Schema engine to use; built around ``client`` when omitted.
    """

    def __init__(
        self,
        client: httpx.Client,
        wsdl_url: str,
        output_dir: Path,
        *,
        fetcher: Optional[SchemaFetcher] = None,
    ) -> None:
        self.client = client
        self.wsdl_url = wsdl_url
        self.output_dir = Path(output_dir)
        reserved = {ORIGINAL_WSDL_NAME, UPDATED_WSDL_NAME}
        if fetcher is None:
            fetcher = SchemaFetcher(client, self.output_dir, reserved_names=reserved)
        else:
            fetcher.reserved_names = fetcher.reserved_names | reserved
        self.fetcher = fetcher

    def run(self) -> ImportReport:
        """Fetch, persist, rewrite and persist again.

        Raises:
            DownloadFailure: The root WSDL could not be fetched.
            SchemaFormatError: The root WSDL is not well-formed XML.
            OutputError: Either WSDL file could not be written.
        """
        ensure_output_dir(self.output_dir)
        logger.info("Downloading WSDL from: %s", self.wsdl_url, extra={"stage": "wsdl", "url": self.wsdl_url})
        content = fetch_bytes(self.client, self.wsdl_url)

        original_path = write_bytes(self.output_dir / ORIGINAL_WSDL_NAME, content)
        logger.info("Original WSDL saved as %s", original_path, extra={"stage": "wsdl"})

        document = parse_document(content, source=self.wsdl_url)
        outcomes = self.fetcher.rewrite_imports(document, self.wsdl_url)

        updated = serialize_document(document, xml_declaration=has_xml_declaration(content))
        updated_path = write_bytes(self.output_dir / UPDATED_WSDL_NAME, updated)
        logger.info("Updated WSDL saved as %s", updated_path, extra={"stage": "wsdl"})

        report = ImportReport(
            wsdl_url=self.wsdl_url,
            original_path=original_path,
            updated_path=updated_path,
            imports=outcomes,
            schemas=self.fetcher.schemas,
            failures=list(self.fetcher.failures),
        )
        if report.failures:
            logger.warning(
                "%d schema import(s) could not be resolved and still point at their original location",
                len(report.failures),
                extra={"stage": "summary", "failed": [outcome.url for outcome in report.failures]},
            )
        else:
            logger.info(
                "Resolved %d schema(s) with no failures",
                len(report.schemas),
                extra={"stage": "summary"},
            )
        return report
