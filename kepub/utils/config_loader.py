import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Full list of settings to manage
ALL_SETTINGS = [
    # System
    'LOG_LEVEL', 'DATA_DIR',

    # Content pipeline stages
    'KEPUB_ADD_DIVS', 'KEPUB_ADD_SPANS', 'KEPUB_ADD_STYLES', 'KEPUB_CLEAN_HTML',
    'KEPUB_SMARTEN_PUNCTUATION',

    # Manifest
    'KEPUB_OPF_INDENT',
]

# Default values
DEFAULT_CONFIG = {
    'LOG_LEVEL': 'INFO',
    'DATA_DIR': '/data',
    'KEPUB_ADD_DIVS': 'true',
    'KEPUB_ADD_SPANS': 'true',
    'KEPUB_ADD_STYLES': 'true',
    'KEPUB_CLEAN_HTML': 'true',
    'KEPUB_SMARTEN_PUNCTUATION': 'true',
    'KEPUB_OPF_INDENT': '4',
}

TRUE_VALUES = ('true', '1', 'yes', 'on')


@dataclass
class KepubSettings:
    log_level: str = 'INFO'
    data_dir: str = '/data'
    add_divs: bool = True
    add_spans: bool = True
    add_styles: bool = True
    clean_html: bool = True
    smarten_punctuation: bool = True
    opf_indent: int = 4


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in TRUE_VALUES


class ConfigLoader:
    """
    Builds KepubSettings from environment variables.
    Missing keys fall back to DEFAULT_CONFIG, so an empty environment
    reproduces the stock conversion.
    """

    @staticmethod
    def get_raw_settings(environ: Optional[Mapping[str, str]] = None) -> dict:
        """Return every known setting as a string, env value winning over the default."""
        if environ is None:
            environ = os.environ

        raw = {}
        for key in ALL_SETTINGS:
            val = environ.get(key, DEFAULT_CONFIG.get(key, ""))
            if val is None:
                val = ""
            raw[key] = str(val)
        return raw

    @staticmethod
    def load_settings(environ: Optional[Mapping[str, str]] = None) -> KepubSettings:
        """
        Load settings from the environment.

        Args:
            environ: Mapping to read from, defaults to os.environ
        """
        raw = ConfigLoader.get_raw_settings(environ)

        try:
            indent = int(raw['KEPUB_OPF_INDENT'])
            if indent < 0:
                raise ValueError(indent)
        except ValueError:
            logger.warning(f"⚠️  Invalid KEPUB_OPF_INDENT '{raw['KEPUB_OPF_INDENT']}', using {DEFAULT_CONFIG['KEPUB_OPF_INDENT']}")
            indent = int(DEFAULT_CONFIG['KEPUB_OPF_INDENT'])

        settings = KepubSettings(
            log_level=raw['LOG_LEVEL'].upper() or DEFAULT_CONFIG['LOG_LEVEL'],
            data_dir=raw['DATA_DIR'] or DEFAULT_CONFIG['DATA_DIR'],
            add_divs=_as_bool(raw['KEPUB_ADD_DIVS']),
            add_spans=_as_bool(raw['KEPUB_ADD_SPANS']),
            add_styles=_as_bool(raw['KEPUB_ADD_STYLES']),
            clean_html=_as_bool(raw['KEPUB_CLEAN_HTML']),
            smarten_punctuation=_as_bool(raw['KEPUB_SMARTEN_PUNCTUATION']),
            opf_indent=indent,
        )

        logger.debug(f"⚙️  Loaded {len(raw)} settings: {settings}")
        return settings
