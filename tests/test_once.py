from __future__ import annotations

import threading
import time
from typing import List

import pytest

from unorm.once import Once


def test_concurrent_first_use_loads_once() -> None:
    calls: List[int] = []

    def loader() -> object:
        calls.append(1)
        time.sleep(0.05)
        return object()

    once: Once[object] = Once(loader)
    start = threading.Barrier(8)
    seen: List[object] = []

    def worker() -> None:
        start.wait()
        seen.append(once.get())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert len(calls) == 1
    assert len(seen) == 8
    assert all(v is seen[0] for v in seen)
    assert once.done


def test_failure_is_recorded_not_retried() -> None:
    calls: List[int] = []

    def loader() -> int:
        calls.append(1)
        raise RuntimeError("boom")

    once: Once[int] = Once(loader, name="numbers")
    with pytest.raises(RuntimeError, match="boom") as first:
        once.get()
    with pytest.raises(RuntimeError) as second:
        once.get()

    assert first.value is second.value
    assert len(calls) == 1
    assert once.done


def test_reset_loads_again() -> None:
    values = iter([1, 2])
    once: Once[int] = Once(lambda: next(values))
    assert once.get() == 1
    assert once.get() == 1
    once.reset()
    assert not once.done
    assert once.get() == 2
