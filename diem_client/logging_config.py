import logging
import logging.config
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-6s %(name)s:%(lineno)d %(message)s"


def build_logging_config(level: str | None = None) -> dict:
    """dictConfig for applications embedding the client.

    The level defaults to the LOG_LEVEL environment variable, then INFO.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "diem_client": {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
            # httpx logs every request at INFO
            "httpx": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
    }


def setup_logging(level: str | None = None) -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(build_logging_config(level))
