# === NAVMAP v1 ===
# {
#   "module": "SecureWsdlImporter.schemas",
#   "purpose": "Recursive XML Schema import resolution, download, and rewriting",
#   "sections": [
#     {"id": "visitedurlcache", "name": "VisitedUrlCache", "anchor": "class-visitedurlcache", "kind": "class"},
#     {"id": "importoutcome", "name": "ImportOutcome", "anchor": "class-importoutcome", "kind": "class"},
#     {"id": "schemafetcher", "name": "SchemaFetcher", "anchor": "class-schemafetcher", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Recursive schema-import resolution and rewriting.

:class:`SchemaFetcher` walks the graph of ``xs:import`` references reachable
from a document. Each distinct schema URL is downloaded once, its own imports
are rewritten (recursively), and the result is saved to the output directory
under a collision-free name. The parent's ``schemaLocation`` is then pointed at
that local file.

Cycles terminate because a schema's URL is recorded in the visited cache, with
its claimed local name, before its imports are followed: re-entering the same
URL deeper in the graph returns the claimed name without fetching again.

There is no depth or fetch-count limit. A graph made of many distinct URLs is
followed to the end; the visited cache only guards against repeats.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set

import httpx
from lxml import etree

from .documents import has_xml_declaration, parse_document, serialize_document
from .errors import WsdlImportError
from .io import filename_from_url, unique_path, write_bytes
from .network import fetch_bytes
from .settings import XML_SCHEMA_NAMESPACE
from .urls import resolve_url

logger = logging.getLogger(__name__)

SCHEMA_LOCATION_ATTR = "schemaLocation"
_IMPORT_TAG = f"{{{XML_SCHEMA_NAMESPACE}}}import"

__all__ = [
    "SCHEMA_LOCATION_ATTR",
    "ImportOutcome",
    "SchemaFetcher",
    "VisitedUrlCache",
    "iter_schema_imports",
]


class VisitedUrlCache:
    """Per-run mapping of absolute schema URL to the local file that holds it.

    Keys compare case-insensitively. A URL is stored at most once; the first
    path recorded for it wins and later lookups return that same path.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Path] = {}
        self._urls: Dict[str, str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(url: str) -> str:
        return url.casefold()

    def get(self, url: str) -> Optional[Path]:
        with self._lock:
            return self._entries.get(self._key(url))

    def claim(self, url: str, path: Path) -> Path:
        """Record ``url -> path`` unless present; return the path now on record."""

        key = self._key(url)
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            self._entries[key] = path
            self._urls[key] = url
            return path

    def release(self, url: str) -> None:
        with self._lock:
            key = self._key(url)
            self._entries.pop(key, None)
            self._urls.pop(key, None)

    def names(self) -> Set[str]:
        with self._lock:
            return {path.name for path in self._entries.values()}

    def as_dict(self) -> Dict[str, Path]:
        """Return ``{url: path}`` using each URL as first recorded."""

        with self._lock:
            return {self._urls[key]: path for key, path in self._entries.items()}

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.get(url) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(frozen=True)
class ImportOutcome:
    """Result of resolving one ``xs:import`` element.

    Attributes:
        location: ``schemaLocation`` value as it appeared in the document.
        url: Absolute URL the location resolved to.
        local_path: Saved schema file on success, ``None`` on failure.
        error: Failure description when the import was left unrewritten.
    """

    location: str
    url: str
    local_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def iter_schema_imports(document: etree._ElementTree) -> Iterator[etree._Element]:
    """Yield every schema ``import`` element carrying a location, in document order."""

    for element in document.iter(_IMPORT_TAG):
        if element.get(SCHEMA_LOCATION_ATTR) is not None:
            yield element


class SchemaFetcher:
    """Download schemas, rewrite their imports, and save them side by side.

    Args:
        client: Shared HTTP client used for every GET.
        output_dir: Flat directory receiving each schema file.
        cache: Visited-URL cache; a fresh one is created when omitted.
        reserved_names: File names in ``output_dir`` that schemas must never
            take, even before those files exist.
    """

    def __init__(
        self,
        client: httpx.Client,
        output_dir: Path,
        cache: Optional[VisitedUrlCache] = None,
        *,
        reserved_names: Iterable[str] = (),
    ) -> None:
        self.client = client
        self.output_dir = Path(output_dir)
        self.cache = cache if cache is not None else VisitedUrlCache()
        self.reserved_names: FrozenSet[str] = frozenset(reserved_names)
        self.failures: List[ImportOutcome] = []
        self._claim_lock = threading.Lock()

    def rewrite_imports(self, document: etree._ElementTree, base_url: str) -> List[ImportOutcome]:
        """Point every schema import in ``document`` at a local copy.

        Imports are handled in document order. A failing import is logged,
        left with its original location, and reported in the returned list;
        the remaining imports are still processed.
        """
        outcomes: List[ImportOutcome] = []
        for element in list(iter_schema_imports(document)):
            location = element.get(SCHEMA_LOCATION_ATTR)
            url = resolve_url(base_url, location)
            logger.debug("Processing import: %s", url, extra={"stage": "import", "url": url})
            try:
                local_path = self.fetch_and_rewrite(url)
            except WsdlImportError as exc:
                outcome = ImportOutcome(location=location, url=url, error=str(exc))
                self.failures.append(outcome)
                logger.error(
                    "Error processing import '%s': %s",
                    url,
                    exc,
                    extra={"stage": "import", "url": url, "base_url": base_url},
                )
            else:
                element.set(SCHEMA_LOCATION_ATTR, local_path.name)
                outcome = ImportOutcome(location=location, url=url, local_path=local_path)
            outcomes.append(outcome)
        return outcomes

    def fetch_and_rewrite(self, url: str) -> Path:
        """Return the local path of a saved, fully rewritten copy of ``url``.

        The first call for a URL downloads and parses it, claims a local name,
        rewrites its imports relative to ``url``, then writes it. Every later
        call (including re-entry through an import cycle) returns the claimed
        path without network access.

        Raises:
            DownloadFailure: The GET failed or returned a non-success status.
            SchemaFormatError: The body is not well-formed XML.
            OutputError: The rewritten schema could not be written.
        """
        cached = self.cache.get(url)
        if cached is not None:
            logger.debug(
                "Schema already downloaded: %s -> %s",
                url,
                cached,
                extra={"stage": "cache", "url": url},
            )
            return cached

        logger.info("Downloading schema: %s", url, extra={"stage": "fetch", "url": url})
        content = fetch_bytes(self.client, url)
        document = parse_document(content, source=url)

        local_path = self._claim(url)
        self.rewrite_imports(document, url)

        try:
            write_bytes(
                local_path,
                serialize_document(document, xml_declaration=has_xml_declaration(content)),
            )
        except WsdlImportError:
            self.cache.release(url)
            raise
        logger.info(
            "Saved schema from %s as %s",
            url,
            local_path,
            extra={"stage": "save", "url": url, "path": str(local_path)},
        )
        return local_path

    def _claim(self, url: str) -> Path:
        with self._claim_lock:
            existing = self.cache.get(url)
            if existing is not None:
                return existing
            taken = self.cache.names() | self.reserved_names
            path = unique_path(self.output_dir, filename_from_url(url), taken)
            return self.cache.claim(url, path)

    @property
    def schemas(self) -> Dict[str, Path]:
        return self.cache.as_dict()
