from __future__ import annotations

from operator import itemgetter
from typing import Iterable, List, Optional

from .tables import TableStore, get_tables


def reorder(seq: Iterable[int], tables: Optional[TableStore] = None) -> List[int]:
    """Put combining marks into canonical order.

    Each maximal run of nonzero-class codepoints is stable-sorted by combining
    class. Starters (class 0) never move, so runs never cross them, and marks
    of equal class keep their relative order.
    """

    if tables is None:
        tables = get_tables()

    out = list(seq)
    classes = [tables.combining_class(cp) for cp in out]
    n = len(out)
    i = 0
    while i < n:
        if classes[i] == 0:
            i += 1
            continue
        j = i + 1
        while j < n and classes[j] != 0:
            j += 1
        if j - i > 1:
            run = sorted(zip(classes[i:j], out[i:j]), key=itemgetter(0))
            out[i:j] = [cp for _, cp in run]
        i = j
    return out


def is_canonically_ordered(seq: Iterable[int], tables: Optional[TableStore] = None) -> bool:
    if tables is None:
        tables = get_tables()

    last = 0
    for cp in seq:
        ccc = tables.combining_class(cp)
        if ccc != 0 and last > ccc:
            return False
        last = ccc
    return True
