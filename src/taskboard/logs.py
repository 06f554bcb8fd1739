import logging
import logging.handlers
import os
import sys
from pathlib import Path

ROOT_LOGGER = 'taskboard'
LOG_LEVEL_ENV = 'TASKBOARD_LOG_LEVEL'
DEBUG_ENV = 'TASKBOARD_DEBUG'
LOG_DIR_ENV = 'TASKBOARD_LOG_DIR'

LOG_FILE = 'taskboard.log'
LOG_FILE_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3

FILE_FORMAT = '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV, '').lower() in ('1', 'true', 'yes')

def console_level() -> int:
    """Console threshold: TASKBOARD_DEBUG wins, then TASKBOARD_LOG_LEVEL, else WARNING."""
    if debug_enabled():
        return logging.DEBUG
    name = os.getenv(LOG_LEVEL_ENV, '').upper()
    if not name:
        return logging.WARNING
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING

def log_dir() -> Path:
    override = os.getenv(LOG_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".local" / "share" / "taskboard" / "logs"

def _file_handler(directory: Path):
    # A read-only home must not stop the CLI from working
    try:
        directory.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            directory / LOG_FILE, maxBytes=LOG_FILE_BYTES, backupCount=LOG_FILE_BACKUPS, encoding='utf-8')
    except OSError:
        return None
    handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
    handler.setLevel(logging.DEBUG)
    return handler

def _console_handler(level: int):
    detailed = level <= logging.DEBUG
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        '%(levelname)-8s [%(name)s] %(message)s' if detailed else '%(levelname)s: %(message)s'
    ))
    handler.setLevel(level)
    handler.name = 'console'
    return handler

def setup_logging(level: int = None, directory: Path = None):
    """
    Attach a rotating file handler and a stderr console handler to the
    ``taskboard`` logger.

    The file gets every record. The console only shows ``level`` and above,
    taken from the environment when not given.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler = _file_handler(directory or log_dir())
    if file_handler is not None:
        logger.addHandler(file_handler)
    logger.addHandler(_console_handler(console_level() if level is None else level))

    logger.propagate = False
    return logger

def set_console_level(level: int):
    """Change the console threshold without touching the log file."""
    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        if handler.name == 'console':
            handler.setLevel(level)

setup_logging()

def get_logger(name: str = None):
    """Get a logger instance for a specific module."""
    if name:
        return logging.getLogger(f'{ROOT_LOGGER}.{name}')
    return logging.getLogger(ROOT_LOGGER)
