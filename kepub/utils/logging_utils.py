import logging
import time
from pathlib import Path
from logging.handlers import RotatingFileHandler
from functools import wraps

from kepub.utils.config_loader import ConfigLoader

logger = logging.getLogger(__name__)


def _handler_level(settings):
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def setup_file_logging(settings=None):
    """Setup file logging handler. Returns the log path, or "" when the data dir is missing."""
    settings = settings or ConfigLoader.load_settings()
    data_dir = Path(settings.data_dir)
    if not data_dir.exists():
        logger.warning(f"⚠️  Not setting up file logging, missing data dir '{data_dir}'")
        return ""

    log_dir = data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "kepub.log"

    file_handler = RotatingFileHandler(str(log_path), maxBytes=10*1024*1024, backupCount=5, encoding='utf-8')
    file_handler.setLevel(_handler_level(settings))
    file_handler.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s - %(name)s: %(message)s'))
    logging.getLogger().addHandler(file_handler)

    return log_path


def setup_console_logging(settings=None):
    """Attach a stderr handler at the configured LOG_LEVEL."""
    settings = settings or ConfigLoader.load_settings()
    console_handler = logging.StreamHandler()
    console_handler.setLevel(_handler_level(settings))
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

    root_logger = logging.getLogger()
    root_logger.addHandler(console_handler)
    # handlers do the filtering
    root_logger.setLevel(logging.DEBUG)

    return console_handler


def sanitize_log_data(data, keep: int = 50):
    """Shorten long input for log lines, keeping `keep` characters from each end."""
    if data is None:
        return ""
    try:
        text = str(data)
    except Exception:
        return "[unrepresentable]"
    if len(text) <= keep * 2:
        return text
    return f"{text[:keep]}... [truncated] ...{text[-keep:]}"


def time_execution(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.time()
        result = func(*args, **kwargs)
        ms = int((time.time() - start) * 1000)
        logger.debug(f"⏱️ [{func.__name__}] took {ms}ms")
        return result
    return wrapper
