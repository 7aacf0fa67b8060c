from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QRunnable, Slot

_log = logging.getLogger(__name__)


def safe_call(fn: Optional[Callable], *args, **kwargs) -> None:
    """Call a callback if present; a failing callback never takes the worker down."""
    if fn is None:
        return
    try:
        fn(*args, **kwargs)
    except Exception:
        _log.debug("callback %r raised", fn, exc_info=True)


class JobRunnable(QRunnable):
    """
    Thin QRunnable wrapper that executes a callable on a pool thread.
    """
    def __init__(self, work: Callable[[], None]) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._work = work

    @Slot()
    def run(self) -> None:  # type: ignore[override]
        self._work()
