"""
Logging setup.

Everything goes to stdout so gunicorn / the container runtime captures it
alongside the access log.
"""
import logging.config

from tracking_metrics.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "tracking_metrics": {
                "handlers": ["stdout"],
                "level": (level or settings.LOG_LEVEL).upper(),
                "propagate": False,
            },
        },
    })
