"""
Storage submodule: the abstract task store and its backends.
"""

from .base import TaskStore
from .memory import MemoryStore
from .file import YAMLStore
from .core import BoardCore

__all__ = [
    'TaskStore',
    'MemoryStore',
    'YAMLStore',
    'BoardCore',
]
