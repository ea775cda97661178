"""
Kepub Service.
Turns the content files and manifest of an ordinary EPUB into their kepub
form. Callers hand over one file's text at a time and get the rewritten text
back; archive handling and file discovery live outside this service.
"""

import logging
import warnings
from typing import Optional, Union

from bs4 import BeautifulSoup, ParserRejectedMarkup, XMLParsedAsHTMLWarning

from kepub.utils.config_loader import ConfigLoader, KepubSettings
from kepub.utils.errors import KepubError, ParseError
from kepub.utils.html_cleaner import clean_html
from kepub.utils.kobo_spans import add_kobo_spans
from kepub.utils.kobo_structure import add_kobo_divs, add_kobo_styles
from kepub.utils.logging_utils import sanitize_log_data, time_execution
from kepub.utils.markup_fixups import fix_markup
from kepub.utils.opf_normalizer import normalize_opf
from kepub.version import get_version

logger = logging.getLogger(__name__)

# HTML5 parsing mirrors what reading systems do with the markup: html/head/body
# are always present afterwards.
HTML_PARSER = "html5lib"


def parse_content(content: Union[str, bytes]) -> BeautifulSoup:
    if not isinstance(content, (str, bytes)):
        raise ParseError(f"expected markup text, got {type(content).__name__}")
    try:
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
            return BeautifulSoup(content, HTML_PARSER)
    except ParserRejectedMarkup as e:
        raise ParseError(f"could not parse content: {e}") from e


class KepubService:
    def __init__(self, settings: Optional[KepubSettings] = None):
        self.settings = settings if settings is not None else ConfigLoader.load_settings()
        logger.debug(f"KepubService initialized (version={get_version()}, settings={self.settings})")

    @time_execution
    def transform_content(self, content: Union[str, bytes]) -> str:
        """
        Convert one XHTML content file to kepub markup.

        Steps (fail-fast, nothing is returned on error):
        1. Parse
        2. Wrap the body in the kobo divs
        3. Wrap each sentence in a kobo span
        4. Add the kobo stylesheet rule
        5. Clean authoring-tool leftovers
        6. Serialize and apply the text fixups

        Raises:
            ParseError: the markup could not be parsed
            ValidationError: a rewrite step left the document in a bad state
        """
        try:
            soup = parse_content(content)

            if self.settings.add_divs:
                add_kobo_divs(soup)
            if self.settings.add_spans:
                add_kobo_spans(soup)
            if self.settings.add_styles:
                add_kobo_styles(soup)
            if self.settings.clean_html:
                clean_html(soup)

            html = str(soup)
            return fix_markup(html, smarten=self.settings.smarten_punctuation)
        except KepubError as e:
            logger.error(f"❌ Failed to convert content '{sanitize_log_data(content)}': {e}")
            raise

    @time_execution
    def normalize_manifest(self, opf_text: Union[str, bytes]) -> str:
        """
        Add the cover-image property and drop calibre metadata from a content.opf.

        Raises:
            ParseError: the manifest is not well-formed XML
        """
        try:
            return normalize_opf(opf_text, indent=self.settings.opf_indent)
        except KepubError as e:
            logger.error(f"❌ Failed to normalize manifest '{sanitize_log_data(opf_text)}': {e}")
            raise


def transform_content(content: Union[str, bytes]) -> str:
    """Convert one content file using settings from the environment."""
    return KepubService().transform_content(content)


def normalize_manifest(opf_text: Union[str, bytes]) -> str:
    """Normalize a content.opf using settings from the environment."""
    return KepubService().normalize_manifest(opf_text)
