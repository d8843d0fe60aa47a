import logging
import sys

PACKAGE_LOGGER = "civic_intake"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stdout handler to the package logger.

    Modules log through logging.getLogger(__name__), so everything under
    civic_intake.* ends up here. Calling this twice does not duplicate output.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
        logger.addHandler(handler)

    return logger
