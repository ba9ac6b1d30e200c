import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.core.config import settings

AUDIT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s'

def setup_logger(name: str, log_file: str = None, level: int = logging.INFO) -> logging.Logger:
    """Logger for an integration that also keeps its own rotating audit file.

    Records still propagate to the root handlers installed by
    ``app.core.logging.configure_logging``, so no console handler is added here.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not log_file or any(getattr(h, "audit_file", None) == log_file for h in logger.handlers):
        return logger

    log_path = Path(settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path / log_file,
        maxBytes=10485760,  # 10MB
        backupCount=5,
        delay=True,
    )
    file_handler.audit_file = log_file
    file_handler.setFormatter(logging.Formatter(AUDIT_FORMAT))
    logger.addHandler(file_handler)

    return logger
