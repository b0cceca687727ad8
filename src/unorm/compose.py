"""Canonical composition of a decomposed, canonically ordered sequence.

State carried through the single left-to-right pass:
  - `starter`: index in the output of the last starter that can still take
    combining codepoints (None before the first starter),
  - `last_class`: combining class of the last codepoint emitted after that
    starter without being absorbed into it.

A candidate C is blocked from the starter when something was emitted between
them and that last emitted codepoint has class 0 or a class >= class(C).
Because the input is canonically ordered, only the last emitted codepoint has
to be looked at. A mark that fails to combine is emitted and blocks later
marks of the same or lower class, but a later mark of a higher class may
still reach the starter.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from . import hangul
from .tables import TableStore, get_tables


def combine(first: int, second: int, tables: TableStore) -> Optional[int]:
    """Primary composite of the pair, or None (Hangul first, then the table)."""

    composite = hangul.compose_pair(first, second)
    if composite is not None:
        return composite
    composite = tables.composite(first, second)
    if composite is None or tables.is_excluded(composite):
        return None
    return composite


def compose(seq: Iterable[int], tables: Optional[TableStore] = None) -> List[int]:
    if tables is None:
        tables = get_tables()

    out: List[int] = []
    starter: Optional[int] = None
    last_class = 0

    for cp in seq:
        ccc = tables.combining_class(cp)
        if starter is not None:
            adjacent = starter == len(out) - 1
            if adjacent or 0 < last_class < ccc:
                composite = combine(out[starter], cp, tables)
                if composite is not None:
                    out[starter] = composite
                    continue
        out.append(cp)
        if ccc == 0:
            starter = len(out) - 1
        last_class = ccc
    return out
