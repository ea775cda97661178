"""
Manifest (content.opf) cleanup for kepub output.

Adds properties="cover-image" to the cover item so the Kobo finds the cover
without guessing, and drops calibre bookkeeping metadata.
"""

import logging
import re
from typing import Union

from lxml import etree

from kepub.utils.errors import ParseError

logger = logging.getLogger(__name__)

DC_NAMESPACE = "http://purl.org/dc/elements/1.1/"
NAMESPACES = {"dc": DC_NAMESPACE}

DEFAULT_COVER_ID = "cover"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

META_XPATH = "//*[local-name()='meta'][@name=$name]"
ID_XPATH = "//*[@id=$id]"
CONTRIBUTOR_XPATH = "//dc:contributor[@*[local-name()='role']=$role]"

# Encoding pseudo-attribute of a leading <?xml ...?> declaration
DECLARED_ENCODING_RE = re.compile(r'^(\ufeff?\s*<\?xml\b[^>]*?)\s+encoding\s*=\s*(["\x27])[^"\x27]*\2')


def parse_opf(opf_text: Union[str, bytes]) -> etree._ElementTree:
    if not isinstance(opf_text, (str, bytes)):
        raise ParseError(f"expected manifest text, got {type(opf_text).__name__}")

    if isinstance(opf_text, str):
        # Already decoded, so whatever encoding the declaration names no longer applies
        data = DECLARED_ENCODING_RE.sub(r"\1", opf_text, count=1).encode("utf-8")
    else:
        data = opf_text
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"malformed manifest: {e}") from e
    return root.getroottree()


def _remove(element) -> bool:
    parent = element.getparent()
    if parent is None:
        return False
    parent.remove(element)
    return True


def mark_cover_image(tree) -> int:
    """Add properties="cover-image" to every element whose id a cover meta names."""
    marked = 0
    for meta in tree.xpath(META_XPATH, name="cover"):
        cover_id = meta.get("content", "") or DEFAULT_COVER_ID
        for item in tree.xpath(ID_XPATH, id=cover_id):
            item.set("properties", "cover-image")
            marked += 1
    return marked


def remove_calibre_timestamp(tree) -> int:
    return sum(1 for meta in tree.xpath(META_XPATH, name="calibre:timestamp") if _remove(meta))


def remove_calibre_contributor(tree) -> int:
    """Remove the dc:contributor calibre adds with role bkp (book producer)."""
    return sum(1 for c in tree.xpath(CONTRIBUTOR_XPATH, namespaces=NAMESPACES, role="bkp") if _remove(c))


def serialize_opf(tree, indent: int = 4, xml_declaration: bool = True) -> str:
    etree.indent(tree, space=" " * indent)
    body = etree.tostring(tree, encoding="unicode")
    if xml_declaration:
        return f"{XML_DECLARATION}\n{body}\n"
    return f"{body}\n"


def normalize_opf(opf_text: Union[str, bytes], indent: int = 4) -> str:
    """
    Clean up extra calibre metadata from a content.opf and add a reference
    to the cover image. Missing elements are not an error.

    Raises:
        ParseError: the manifest is not well-formed XML
    """
    tree = parse_opf(opf_text)
    head = opf_text[:100] if isinstance(opf_text, str) else opf_text[:100].decode("utf-8", "ignore")
    has_declaration = head.lstrip("﻿ \t\r\n").startswith("<?xml")

    marked = mark_cover_image(tree)
    timestamps = remove_calibre_timestamp(tree)
    contributors = remove_calibre_contributor(tree)
    logger.debug(
        f"Normalized OPF: cover items marked={marked}, "
        f"timestamps removed={timestamps}, contributors removed={contributors}"
    )

    return serialize_opf(tree, indent=indent, xml_declaration=has_declaration)
