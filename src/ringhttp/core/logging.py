import logging
import sys


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """
    Callbacks for async requests run on the transport loop thread, so their log
    records are easy to lose when the host application never configured the root
    logger. This assigns a single StreamHandler that writes to STDOUT.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove default handlers to avoid duplication
    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)


def set_transport_logging_level(level: int = logging.WARNING) -> None:
    """Lowers aiohttp's own loggers to avoid noisy access and client logs."""
    for name in ("aiohttp.client", "aiohttp.access", "aiohttp.internal"):
        logging.getLogger(name).setLevel(level)
