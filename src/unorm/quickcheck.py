from __future__ import annotations

from typing import Any, Iterable, Optional

from .forms import QuickCheck, parse_form
from .tables import TableStore, get_tables


def quick_check(seq: Iterable[int], form: Any, tables: Optional[TableStore] = None) -> QuickCheck:
    """Classify `seq` as certainly (YES), certainly not (NO) or possibly
    (MAYBE) in `form`, in one pass and without normalizing it.

    NO short-circuits: either a codepoint that can never occur in `form`, or
    a combining mark whose class is lower than the nonzero class right before
    it (the sequence is not in canonical order). MAYBE only means the caller
    has to normalize to find out.
    """

    f = parse_form(form)
    if tables is None:
        tables = get_tables()

    result = QuickCheck.YES
    last_class = 0
    for cp in seq:
        ccc = tables.combining_class(cp)
        if ccc != 0 and last_class > ccc:
            return QuickCheck.NO
        check = tables.quick_check(cp, f)
        if check is QuickCheck.NO:
            return QuickCheck.NO
        if check is QuickCheck.MAYBE:
            result = QuickCheck.MAYBE
        last_class = ccc
    return result
