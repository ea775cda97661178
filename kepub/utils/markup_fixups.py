"""
Literal text fixups applied to serialized markup.

These run on the output string, after the tree has been rendered, and must
run last: the comment repair undoes damage the dash replacement does to
comment delimiters.
"""

import logging

logger = logging.getLogger(__name__)

EN_DASH_ENTITY = "&#x2013;"
EM_DASH_ENTITY = "&#x2014;"
REPLACEMENT_CHAR = "�"

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
COMMENTED_XML_DECLARATIONS = (
    '<!-- ?xml version="1.0" encoding="utf-8"? -->',
    '<!--?xml version="1.0" encoding="utf-8"?-->',
)


def smarten_punctuation(html: str) -> str:
    """Replace dash runs with dash entities, then repair the comments it broke."""
    # en and em dashes
    html = html.replace("---", f" {EN_DASH_ENTITY} ")
    html = html.replace("--", f" {EM_DASH_ENTITY} ")

    # TODO: smart quotes

    # Fix comments
    html = html.replace(f"<! {EM_DASH_ENTITY} ", "<!--")
    html = html.replace(f" {EM_DASH_ENTITY} >", "-->")
    return html


def remove_replacement_chars(html: str) -> str:
    return html.replace(REPLACEMENT_CHAR, "")


def restore_xml_declaration(html: str) -> str:
    """Undo the HTML parser turning <?xml ...?> into a comment."""
    for commented in COMMENTED_XML_DECLARATIONS:
        html = html.replace(commented, XML_DECLARATION, 1)
    return html


def fix_markup(html: str, smarten: bool = True) -> str:
    if smarten:
        html = smarten_punctuation(html)
    html = remove_replacement_chars(html)
    html = restore_xml_declaration(html)
    return html
