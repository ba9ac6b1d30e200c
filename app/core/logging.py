import logging
import logging.config
from pathlib import Path
from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def _rotating_file(log_dir: Path, filename: str, level: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "default",
        "filename": str(log_dir / filename),
        "maxBytes": 10485760,  # 10MB
        "backupCount": 5,
        "delay": True,
    }

def build_logging_config(log_dir: Path) -> dict:
    """dictConfig for the API process.

    Everything under ``app`` propagates to root so the console and both files
    see it. Realtime delivery only reports failures, and uvicorn's per-request
    access lines are dropped in favour of RequestLoggingMiddleware.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "file": _rotating_file(log_dir, "app.log", "INFO"),
            "error_file": _rotating_file(log_dir, "error.log", "ERROR"),
        },
        "root": {"level": "INFO", "handlers": ["console", "file", "error_file"]},
        "loggers": {
            "app": {"level": "INFO"},
            "app.realtime": {"level": "WARNING"},
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    }

def configure_logging():
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir))
