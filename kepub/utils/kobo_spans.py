"""
Kobo span insertion.

Kobo readers track reading position and highlights per sentence. Every
sentence of body text is wrapped in <span class="koboSpan" id="kobo.P.S">,
where P counts paragraph-level blocks and S counts segments inside the
current block.
"""

import logging
import re
from dataclasses import dataclass
from typing import List

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

logger = logging.getLogger(__name__)

KOBO_SPAN_CLASS = "koboSpan"

# Shortest run ending in terminal punctuation, an optional closing quote or
# ellipsis, then any trailing ASCII whitespace (NBSP stays with the next run).
SENTENCE_RE = re.compile(r'.*?[.!?:][\'"”’“…]?[\t\n\f\r ]*', re.DOTALL)

BLOCK_TAGS = ("p", "ol", "ul")
OPAQUE_TAGS = ("img",)


@dataclass
class SpanContext:
    """Counters threaded through one document walk."""
    paragraph: int = 0
    segment: int = 0
    inserted: int = 0

    def start_block(self):
        self.segment = 0
        self.paragraph += 1

    @property
    def span_id(self) -> str:
        return f"kobo.{self.paragraph}.{self.segment}"


def split_sentences(text: str) -> List[str]:
    """
    Split text into sentence fragments without dropping any characters.

    Text between (or around) sentence matches is kept as its own fragment,
    so ''.join(split_sentences(t)) == t always holds.
    """
    fragments = []
    last_end = 0
    for match in SENTENCE_RE.finditer(text):
        if match.start() != last_end:
            fragments.append(text[last_end:match.start()])
        fragments.append(match.group(0))
        last_end = match.end()
    if last_end != len(text):
        fragments.append(text[last_end:])
    return fragments


def has_kobo_spans(soup: BeautifulSoup) -> bool:
    for span in soup.find_all("span"):
        classes = span.get("class")
        if not classes:
            continue
        if isinstance(classes, (list, tuple)):
            classes = " ".join(classes)
        if KOBO_SPAN_CLASS in classes:
            return True
    return False


def create_span(soup: BeautifulSoup, span_id: str, text: str) -> Tag:
    span = soup.new_tag("span", attrs={"class": KOBO_SPAN_CLASS, "id": span_id})
    span.string = text
    return span


def _is_text(node) -> bool:
    # Comments, doctypes, CDATA and processing instructions are strings in bs4 too
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _add_spans_to_text(soup: BeautifulSoup, node: NavigableString, ctx: SpanContext):
    ctx.segment += 1

    for sentence in split_sentences(str(node)):
        if sentence.strip() != "":
            node.insert_before(create_span(soup, ctx.span_id, sentence))
            ctx.segment += 1
            ctx.inserted += 1

    node.extract()


def _add_spans_to_node(soup: BeautifulSoup, node, ctx: SpanContext, ancestors: List[str]):
    if _is_text(node):
        if ancestors and ancestors[-1] == "pre":
            # Do not add spans to pre elements
            return
        _add_spans_to_text(soup, node, ctx)
        return

    if not isinstance(node, Tag):
        return
    if node.name in OPAQUE_TAGS:
        return
    if node.name in BLOCK_TAGS:
        ctx.start_block()

    # Snapshot first, the loop below replaces text children with spans
    children = list(node.contents)
    ancestors.append(node.name)
    try:
        for child in children:
            _add_spans_to_node(soup, child, ctx, ancestors)
    finally:
        ancestors.pop()


def add_kobo_spans(soup: BeautifulSoup) -> int:
    """
    Wrap every sentence under <body> in a kobo span.

    Documents that already carry kobo spans are left alone.
    Returns the number of spans inserted.
    """
    if has_kobo_spans(soup):
        logger.debug("Document already has kobo spans, skipping")
        return 0

    ctx = SpanContext()
    for body in soup.find_all("body"):
        if body.find_parent("body") is not None:
            continue
        _add_spans_to_node(soup, body, ctx, [])

    logger.debug(f"Inserted {ctx.inserted} kobo spans across {ctx.paragraph} paragraphs")
    return ctx.inserted
