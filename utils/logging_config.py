"""Unified logging configuration with Rich"""
import logging
import logging.config

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            # RichHandler renders time and level itself
            "format": "%(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "default": {
            "class": "rich.logging.RichHandler",
            "formatter": "default",
            "level": "DEBUG",
            "rich_tracebacks": True,
            "show_time": True,
            "show_path": False,
            "log_time_format": "%Y-%m-%d %H:%M:%S",
            "markup": False
        },
    },
    "loggers": {
        "pymongo": {
            "handlers": ["default"],
            "level": "WARNING",
            "propagate": False,
        },
        "": { # Root logger for our application
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
    },
}


def setup_logging(level: str = "INFO") -> None:
    """Applies LOGGING_CONFIG with the root logger set to `level`."""
    config = {**LOGGING_CONFIG, "loggers": {**LOGGING_CONFIG["loggers"]}}
    config["loggers"][""] = {**config["loggers"][""], "level": level}
    logging.config.dictConfig(config)
