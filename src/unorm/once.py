from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Once(Generic[T]):
    """
    Process-wide one-time initialization.

    The first caller of `get()` runs the loader while holding the lock;
    concurrent first callers block on the lock and then see the finished
    value. `_done` is published only after the value (or the failure) is
    stored, so readers that skip the lock never observe a partial result.

    A loader failure is recorded and re-raised on every later `get()`: the
    loader is never retried behind the caller's back.
    """

    def __init__(self, loader: Callable[[], T], name: str = "value") -> None:
        self._loader = loader
        self._name = name
        self._lock = threading.Lock()
        self._done = False
        self._value: Optional[T] = None
        self._error: Optional[Exception] = None

    @property
    def done(self) -> bool:
        return self._done

    def get(self) -> T:
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = self._loader()
                    except Exception as e:
                        logger.error("loading %s failed: %s", self._name, e)
                        self._error = e
                    self._done = True
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        """Forget the stored value or failure so the next `get()` loads again."""
        with self._lock:
            self._done = False
            self._value = None
            self._error = None
