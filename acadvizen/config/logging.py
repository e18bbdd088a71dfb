import logging
import logging.config
from typing import Any


# Outbound clients that log every request or retry at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3", "razorpay")


def setup_logging(app_level: str = "INFO", library_level: str = "WARNING") -> dict[str, Any]:
    """Configure logging for the application.

    Workflow modules log at ``app_level`` with the emitting function in each
    line, so a payment or confirmation can be followed step by step. Everything
    else goes through the root logger at INFO, and the gateway and store
    clients only report ``library_level`` and above.
    """
    app_level = app_level.upper()
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
            "workflow": {
                "format": "%(asctime)s - %(name)s.%(funcName)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
            "workflow": {
                "class": "logging.StreamHandler",
                "formatter": "workflow",
            },
        },
        "loggers": {
            "acadvizen": {"level": app_level, "handlers": ["workflow"], "propagate": False},
            **{name: {"level": library_level} for name in NOISY_LOGGERS},
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }

    logging.config.dictConfig(config)
    return config
