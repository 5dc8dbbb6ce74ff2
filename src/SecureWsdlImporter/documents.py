"""XML parsing and serialization for WSDL and schema documents.

Documents are parsed with ``lxml`` so namespace prefixes, comments, CDATA
sections, processing instructions and whitespace survive a parse/serialize
round trip; only the attributes the rewriter touches change. The parser never
resolves external entities and never reaches the network on its own.
"""

from __future__ import annotations

from typing import Optional

from lxml import etree

from .errors import SchemaFormatError

__all__ = ["has_xml_declaration", "parse_document", "serialize_document"]

_UTF8_BOM = b"\xef\xbb\xbf"
_UTF16_BOMS = (b"\xff\xfe", b"\xfe\xff")


def _parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_blank_text=False,
        remove_comments=False,
        strip_cdata=False,
        huge_tree=False,
    )


def has_xml_declaration(content: bytes) -> bool:
    """Return whether ``content`` should be written back with an XML declaration.

    UTF-16 documents always keep one since their encoding must stay declared.

    Examples:
        >>> has_xml_declaration(b'<?xml version="1.0"?><a/>')
        True
        >>> has_xml_declaration(b"<a/>")
        False
    """
    if content.startswith(_UTF16_BOMS):
        return True
    if content.startswith(_UTF8_BOM):
        content = content[len(_UTF8_BOM):]
    return content.startswith(b"<?xml")


def parse_document(content: bytes, *, source: Optional[str] = None) -> etree._ElementTree:
    """Parse ``content`` into a mutable element tree.

    Raises:
        SchemaFormatError: If ``content`` is not well-formed XML.
    """
    try:
        root = etree.fromstring(content, _parser(), base_url=source)
    except etree.XMLSyntaxError as exc:
        raise SchemaFormatError(f"{source or 'document'} is not well-formed XML: {exc}", url=source) from exc
    return root.getroottree()


def serialize_document(tree: etree._ElementTree, *, xml_declaration: bool = True) -> bytes:
    """Serialize ``tree`` in its original encoding.

    Pass ``xml_declaration=False`` for documents that arrived without one.
    """

    encoding = tree.docinfo.encoding or "UTF-8"
    return etree.tostring(tree, xml_declaration=xml_declaration, encoding=encoding)
