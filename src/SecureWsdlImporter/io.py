"""
Output Directory Helpers

Name selection and persistence for downloaded artifacts. Every file lands in
one flat output directory, so names derived from remote URLs are sanitised
(no separators, no traversal) and disambiguated with a numeric suffix when a
file of the same name already exists.
"""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path, PurePosixPath
from typing import AbstractSet, Optional
from urllib.parse import unquote, urlsplit

from .errors import OutputError
from .settings import FALLBACK_SCHEMA_PREFIX, FALLBACK_SCHEMA_SUFFIX

logger = logging.getLogger(__name__)

__all__ = [
    "sanitize_filename",
    "filename_from_url",
    "fallback_filename",
    "unique_path",
    "ensure_output_dir",
    "write_bytes",
]

_MAX_NAME_LENGTH = 255


def sanitize_filename(filename: str) -> str:
    """Sanitize filenames to prevent directory traversal and unsafe characters.

    Returns an empty string when nothing usable remains, leaving the fallback
    choice to the caller.

    Examples:
        >>> sanitize_filename("types v2.xsd")
        'types_v2.xsd'
        >>> sanitize_filename("..")
        ''
    """

    original = filename
    safe = filename.replace("/", "_").replace("\\", "_")
    safe = re.sub(r"[^A-Za-z0-9._-]", "_", safe)
    safe = safe.strip("._")
    if len(safe) > _MAX_NAME_LENGTH:
        safe = safe[:_MAX_NAME_LENGTH]
    if safe and safe != original:
        logger.warning(
            "sanitized unsafe filename",
            extra={"stage": "sanitize", "original": original, "sanitized": safe},
        )
    return safe


def fallback_filename() -> str:
    """Generate a unique schema file name for URLs without a usable path segment."""

    return f"{FALLBACK_SCHEMA_PREFIX}{uuid.uuid4()}{FALLBACK_SCHEMA_SUFFIX}"


def filename_from_url(url: str) -> str:
    """Derive a local file name from the last path segment of ``url``.

    Examples:
        >>> filename_from_url("https://host/schemas/common%20types.xsd")
        'common_types.xsd'
        >>> filename_from_url("https://host/schemas/").startswith("imported_")
        True
    """

    try:
        path = urlsplit(url).path
    except ValueError:
        path = ""
    name = sanitize_filename(unquote(path).rsplit("/", 1)[-1])
    return name or fallback_filename()


def unique_path(
    directory: Path,
    filename: str,
    reserved: Optional[AbstractSet[str]] = None,
) -> Path:
    """Return a path in ``directory`` that no existing file or reserved name uses.

    Starting from ``filename``, appends ``_1``, ``_2``, ... before the extension
    until a free name is found. ``reserved`` holds names claimed for files that
    have not been written yet.

    Examples:
        >>> import tempfile
        >>> tmp = Path(tempfile.mkdtemp())
        >>> _ = (tmp / "foo.xsd").write_text("x")
        >>> unique_path(tmp, "foo.xsd").name
        'foo_1.xsd'
    """

    reserved = reserved or frozenset()
    base = PurePosixPath(filename)
    stem, suffix = base.stem, base.suffix
    candidate = directory / filename
    counter = 1
    while candidate.exists() or candidate.name in reserved:
        candidate = directory / f"{stem}_{counter}{suffix}"
        counter += 1
    return candidate


def ensure_output_dir(directory: Path) -> Path:
    """Create ``directory`` (and parents) if needed and return it."""

    directory = Path(directory).expanduser()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"Failed to create output directory {directory}: {exc}") from exc
    return directory


def write_bytes(path: Path, data: bytes) -> Path:
    """Write ``data`` to ``path``, wrapping filesystem errors in ``OutputError``."""

    try:
        path.write_bytes(data)
    except OSError as exc:
        raise OutputError(f"Failed to write {path}: {exc}") from exc
    return path
