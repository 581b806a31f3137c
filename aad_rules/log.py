import logging
import os

PACKAGE_LOGGER = "aad_rules"


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Return a logger under the package logger, configuring the package logger
    on first use. The level comes from AAD_RULES_LOG_LEVEL (default WARNING).
    """
    base = logging.getLogger(PACKAGE_LOGGER)
    if not base.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter('[%(asctime)s][%(levelname)s][%(name)s] %(message)s')
        handler.setFormatter(formatter)
        base.addHandler(handler)
        level_name = os.getenv("AAD_RULES_LOG_LEVEL", "WARNING").upper()
        base.setLevel(getattr(logging, level_name, logging.WARNING))
    return logging.getLogger(name)
