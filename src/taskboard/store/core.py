"""
BoardCore - locates the board data and hands out stores for it.

Paths come from the environment when set, otherwise from the defaults below.
"""
import os
from pathlib import Path
from typing import Optional, Union

from taskboard.logs import get_logger
from .file import YAMLStore

log = get_logger("store.core")

class BoardCore:
    DATA_DIR = Path(".taskboard")
    BOARD_FILE = "board.yml"
    DATA_DIR_ENV = "TASKBOARD_DATA_DIR"
    USER_ENV = "TASKBOARD_USER"

    @classmethod
    def data_dir(cls, override: Optional[Union[Path, str]] = None) -> Path:
        if override:
            return Path(override)
        env_dir = os.getenv(cls.DATA_DIR_ENV)
        if env_dir:
            return Path(env_dir)
        return cls.DATA_DIR

    @classmethod
    def board_path(cls, override: Optional[Union[Path, str]] = None) -> Path:
        return cls.data_dir(override) / cls.BOARD_FILE

    @classmethod
    def default_user(cls) -> Optional[str]:
        return os.getenv(cls.USER_ENV) or None

    @classmethod
    def open_store(cls, override: Optional[Union[Path, str]] = None) -> YAMLStore:
        path = cls.board_path(override)
        log.debug(f"Opening board store at {path}")
        return YAMLStore(path)
