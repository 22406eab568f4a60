import json
import logging
import logging.config
import sys


class JsonFormatter(logging.Formatter):
    """Simple JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        log_record = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%d %H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        return json.dumps(log_record, ensure_ascii=False)


def setup_logging(log_level: str = "INFO", json_logs: bool = False):
    log_level = log_level.upper()
    console_formatter = "json" if json_logs else "simple"

    LOGGING_CONFIG = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s\n%(pathname)s:%(lineno)d\n%(message)s",
            },
            "simple": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
            },
            "json": {
                "()": JsonFormatter,
            },
        },
        "handlers": {
            "console": {
                "formatter": console_formatter,
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
            },
            "error_console": {
                "formatter": "detailed",
                "class": "logging.StreamHandler",
                "stream": sys.stderr,
                "level": "WARNING",
            },
        },
        "loggers": {
            "": {  # root logger
                "handlers": ["console"],
                "level": log_level,
                "propagate": True,
            },
            "uvicorn.error": {
                "handlers": ["console", "error_console"],
                "level": log_level,
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
            "auroapi": {
                "handlers": ["console", "error_console"],
                "level": log_level,
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(LOGGING_CONFIG)
    logging.getLogger("auroapi").info("Logging initialized (level=%s)", log_level)
