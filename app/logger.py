import logging
import os

LOG_LEVEL = os.getenv("SYNC_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Librerías de Google muy ruidosas en DEBUG/INFO
NOISY_LOGGERS = ("googleapiclient.discovery_cache", "google_auth_httplib2", "urllib3")


def get_logger(name: str) -> logging.Logger:
    """
    Return a configured logger. Initializes basicConfig once.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)
    return logger


def set_log_level(level: str) -> None:
    """Aplica el nivel configurado en Settings a los loggers de la app."""
    global LOG_LEVEL
    LOG_LEVEL = level.upper()
    logging.getLogger().setLevel(LOG_LEVEL)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("app."):
            logging.getLogger(name).setLevel(LOG_LEVEL)
