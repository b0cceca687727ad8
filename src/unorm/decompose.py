from __future__ import annotations

from typing import Iterable, List, Optional

from . import hangul
from .forms import DecompositionKind
from .tables import TableStore, get_tables


def decompose(seq: Iterable[int], compatibility: bool = False, tables: Optional[TableStore] = None) -> List[int]:
    """Fully expand every codepoint of `seq`.

    Canonical mappings only, or canonical and compatibility mappings when
    `compatibility` is set. Mappings are followed through an explicit stack,
    so the depth of a decomposition chain never touches the call stack. The
    result is not reordered.
    """

    if tables is None:
        tables = get_tables()
    kind = DecompositionKind.COMPATIBILITY if compatibility else DecompositionKind.CANONICAL

    out: List[int] = []
    for cp in seq:
        stack = [cp]
        while stack:
            c = stack.pop()
            if hangul.is_syllable(c):
                out.extend(hangul.decompose_syllable(c))
                continue
            mapping = tables.decomposition(c, kind)
            if mapping is None:
                out.append(c)
            else:
                # Reversed so the first codepoint of the mapping pops first.
                stack.extend(reversed(mapping))
    return out
