"""
Fresh index variable allocation.

Names must be unique across a whole rendered document, so allocation
goes through one counter per run that is never reset between
productions.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Optional

from ddllang.config import lowering_config
from ddllang.expr.model import Apply, symbol

_index_logger = logging.getLogger("ddllang.index_vars")


class IndexVarAllocator:
    """Thread-safe, monotonically increasing source of index variables."""

    def __init__(self, prefix: Optional[str] = None, start: int = 0) -> None:
        self.prefix = prefix if prefix is not None else lowering_config.INDEX_VAR_PREFIX
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def allocate(self) -> Apply:
        with self._lock:
            n = next(self._counter)
        var = symbol(f"{self.prefix}{n}")
        _index_logger.debug("allocated %s", var.name)
        return var


_default_allocator = IndexVarAllocator()


def default_allocator() -> IndexVarAllocator:
    return _default_allocator


def index_var() -> Apply:
    """Allocate a fresh index variable from the process-wide allocator."""
    return _default_allocator.allocate()


def reset_index_vars(prefix: Optional[str] = None) -> IndexVarAllocator:
    """Start a new run: replace the process-wide allocator.

    Only call this before lowering starts; resetting mid-run breaks
    uniqueness of emitted names.
    """
    global _default_allocator
    _default_allocator = IndexVarAllocator(prefix)
    return _default_allocator
