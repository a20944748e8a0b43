"""Console logging setup shared by the API server and the desktop launcher."""
import logging
from logging.config import dictConfig


def setup_logging(level="INFO"):
    """Install a single console handler on the root logger.

    Console output carries no timestamp; uvicorn adds its own access log.
    """
    if isinstance(level, int):
        level = logging.getLevelName(level)
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": "[ %(levelname)5s ] %(name)s : %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["console"], "level": level},
    })
    logging.getLogger(__name__).debug(f"logging configured at {level}")
