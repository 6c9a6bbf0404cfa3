# storefront/utils/logging.py
import logging
import sys

from storefront.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Konfiguracja loggera "storefront" raz, przy starcie aplikacji/workera."""
    logger = logging.getLogger("storefront")
    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))

    # bez duplikatow przy reloadzie uvicorna
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
