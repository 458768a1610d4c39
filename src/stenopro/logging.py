import logging
import sys

from pythonjsonlogger import jsonlogger

UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

_handler: logging.Handler | None = None


def setup_logging() -> logging.Logger:
    """
    Configures JSON logging for stenopro and the Uvicorn server on stdout.

    The first call replaces the handlers of the root and Uvicorn loggers
    with a single stdout handler whose records carry the Datadog trace and
    span ids. Every module calls this at import time, so later calls only
    return the root logger and leave handlers added since then in place.

    Returns:
        logging.Logger: The root logger.
    """
    global _handler

    root_logger = logging.getLogger()
    if _handler is not None:
        return root_logger

    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
        )
    )

    root_logger.setLevel(logging.INFO)
    root_logger.handlers = [_handler]

    for logger_name in UVICORN_LOGGERS:
        server_logger = logging.getLogger(logger_name)
        server_logger.setLevel(logging.INFO)
        server_logger.handlers = [_handler]
        server_logger.propagate = False

    return root_logger
