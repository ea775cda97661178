"""
Kobo page structure: the book-inner/book-columns wrapper divs and the
stylesheet rule that goes with them.
"""

import logging

from bs4 import BeautifulSoup

from kepub.utils.errors import ValidationError

logger = logging.getLogger(__name__)

INNER_CLASS = "book-inner"
COLUMNS_CLASS = "book-columns"
KOBO_STYLE_CSS = "div#book-inner{margin-top: 0;margin-bottom: 0;}"


def add_kobo_divs(soup: BeautifulSoup) -> bool:
    """
    Wrap the body's children in <div class="book-inner"> inside
    <div class="book-columns">.

    If there are more divs than ps, divs are probably being used as
    paragraphs and the wrapper would break the book, so nothing is done.
    Returns True when the wrapper was added.
    """
    div_count = len(soup.find_all("div"))
    p_count = len(soup.find_all("p"))
    if div_count > p_count:
        logger.debug(f"Skipping kobo divs ({div_count} divs > {p_count} paragraphs)")
        return False

    body = soup.body
    if body is None or body.find(True, recursive=False) is None:
        return False

    inner = soup.new_tag("div", attrs={"class": INNER_CLASS})
    for child in list(body.contents):
        inner.append(child.extract())

    columns = soup.new_tag("div", attrs={"class": COLUMNS_CLASS})
    columns.append(inner)
    body.append(columns)
    return True


def add_kobo_styles(soup: BeautifulSoup):
    """Append the kobo stylesheet to the first <head>."""
    head = soup.head
    if head is None:
        raise ValidationError("could not append kobo styles: document has no <head>")

    before = len(head.contents)
    style = soup.new_tag("style", attrs={"type": "text/css"})
    style.string = KOBO_STYLE_CSS
    head.append(style)

    added = len(head.contents) - before
    if added != 1:
        raise ValidationError(f"could not append kobo styles: expected 1 new node in <head>, got {added}")
