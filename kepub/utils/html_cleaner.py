import logging
from typing import Dict

from bs4 import BeautifulSoup
from bs4.element import Tag

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
BLANK_CHARS = "\t \n"


def _qualified_name(tag: Tag) -> str:
    if tag.prefix:
        return f"{tag.prefix}:{tag.name}"
    return tag.name


def _is_blank(tag: Tag) -> bool:
    return tag.get_text().strip(BLANK_CHARS) == ""


def _decompose_all(tags) -> int:
    count = 0
    for tag in tags:
        # An earlier removal may already have taken this one out with its parent
        if tag.decomposed:
            continue
        tag.decompose()
        count += 1
    return count


def remove_adobe_drm_meta(soup: BeautifulSoup) -> int:
    return _decompose_all(soup.find_all("meta", attrs={"name": "Adept.expected.resource"}))


def remove_empty_office_paragraphs(soup: BeautifulSoup) -> int:
    """Remove empty MS Word <o:p> tags."""
    tags = [t for t in soup.find_all(True) if _qualified_name(t) == "o:p" and _is_blank(t)]
    return _decompose_all(tags)


def remove_empty_headings(soup: BeautifulSoup) -> int:
    return _decompose_all([t for t in soup.find_all(HEADING_TAGS) if _is_blank(t)])


def remove_smart_tags(soup: BeautifulSoup) -> int:
    """Remove MS Word <st1:whatever> smart tags, content included."""
    return _decompose_all([t for t in soup.find_all(True) if _qualified_name(t).startswith("st1:")])


def open_empty_paragraphs(soup: BeautifulSoup) -> int:
    """Give blank <p> tags explicit empty content so they never serialize as <p/>."""
    count = 0
    for p in soup.find_all("p"):
        if p.find(True) is None and _is_blank(p):
            p.string = ""
            count += 1
    return count


def set_style_types(soup: BeautifulSoup) -> int:
    styles = soup.find_all("style")
    for style in styles:
        style["type"] = "text/css"
    return len(styles)


def clean_html(soup: BeautifulSoup) -> Dict[str, int]:
    """
    Clean up html for a kobo epub.

    Every rule is independent and safe to run again on cleaned output.
    Returns the number of elements each rule touched.
    """
    stats = {
        "adobe_drm_meta": remove_adobe_drm_meta(soup),
        "empty_office_paragraphs": remove_empty_office_paragraphs(soup),
        "empty_headings": remove_empty_headings(soup),
        "smart_tags": remove_smart_tags(soup),
        "opened_paragraphs": open_empty_paragraphs(soup),
        "style_types": set_style_types(soup),
    }
    logger.debug(f"Cleaned html: {stats}")
    return stats
