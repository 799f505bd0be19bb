import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV = "SALES_INSIGHTS_LOG_LEVEL"


def setup_logger(name: str = "sales_insights") -> logging.Logger:
    """
    Configure and return a logger for one stage of the sales report pipeline.

    The level defaults to INFO and can be raised or lowered with the
    SALES_INSIGHTS_LOG_LEVEL environment variable (e.g. DEBUG, WARNING).
    """
    logger = logging.getLogger(name)
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
