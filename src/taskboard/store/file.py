from pathlib import Path
from typing import Union

from taskboard.logs import get_logger
from taskboard.models import Board
from .io import atomic_write, load_yaml_file, DATA_YAML
from .memory import MemoryStore
from .validate import load_board

log = get_logger("store.file")

class YAMLStore(MemoryStore):
    """
    Board persisted in a single YAML file.

    Every transaction reloads the file on entry and, if anything changed,
    writes it back atomically on exit. A failed transaction leaves the file
    untouched. Nothing is cached between transactions.
    """

    def __init__(self, path: Union[Path, str]):
        super().__init__()
        self.path = Path(path)
        self._board = None

    @property
    def board(self) -> Board:
        if self._board is None:
            self._board = self._load()
        return self._board

    def _load(self) -> Board:
        data = load_yaml_file(self.path)
        if not data:
            # Missing and empty files both mean a fresh board
            log.debug(f"No board content at {self.path}; starting empty")
            return Board()
        return load_board(data, self.path)

    def initialize(self) -> bool:
        """Write an empty board if none exists. Returns True when created."""
        if self.path.exists():
            return False
        atomic_write(DATA_YAML, self.path, Board().model_dump(mode='json'), create_dirs=True)
        log.info(f"Created board file {self.path}")
        return True

    def _begin(self):
        self._board = self._load()
        self._dirty = False

    def _commit(self):
        try:
            if self._dirty:
                atomic_write(DATA_YAML, self.path, self._board.model_dump(mode='json'), create_dirs=True)
        finally:
            self._board = None
            self._dirty = False

    def _rollback(self):
        log.debug(f"Discarding uncommitted changes to {self.path}")
        self._board = None
        self._dirty = False
