"""Public normalization entry points.

    >>> normalize([0x61, 0x300])
    [224]
    >>> normalize([0xE0], "nfd")
    [97, 768]
    >>> is_normalized("a\\u0300"), is_normalized("a\\u0300", "nfd")
    (False, True)

Text is either a `str` or a sequence of integer codepoints; results keep that
shape (`str` in, `str` out; codepoints in, `list[int]` out). The form defaults
to "nfc" and must be exactly one of "nfc", "nfd", "nfkc", "nfkd".

Input is checked in full before anything is transformed: a lone surrogate, a
value outside U+0000..U+10FFFF or a non-integer element raises EncodingError
and nothing is returned.
"""

from __future__ import annotations

from collections.abc import MutableSequence
from typing import Any, List, Optional, Sequence, Union

from .compose import compose
from .decompose import decompose
from .errors import EncodingError
from .forms import DecompositionKind, NormalizationForm, QuickCheck, parse_form
from .quickcheck import quick_check
from .reorder import reorder
from .tables import MAX_CODEPOINT, TableStore, get_tables, is_surrogate

Text = Union[str, Sequence[int]]


def to_codepoints(text: Any) -> List[int]:
    if isinstance(text, str):
        cps = [ord(ch) for ch in text]
    elif isinstance(text, (bytes, bytearray, memoryview)):
        raise EncodingError("expected str or a codepoint sequence, got bytes (see unorm.encoded for encoded input)")
    else:
        try:
            cps = list(text)
        except TypeError as e:
            raise EncodingError(f"expected str or a codepoint sequence, got {type(text).__name__}") from e

    for i, cp in enumerate(cps):
        if isinstance(cp, bool) or not isinstance(cp, int):
            raise EncodingError(f"element {i} is not a codepoint: {cp!r}")
        if cp < 0 or cp > MAX_CODEPOINT:
            raise EncodingError(f"codepoint out of range at index {i}: {cp:#x}")
        if is_surrogate(cp):
            raise EncodingError(f"unpaired surrogate U+{cp:04X} at index {i}")
    return cps


def _same_shape(text: Any, cps: List[int]) -> Any:
    if isinstance(text, str):
        return "".join(map(chr, cps))
    return cps


def _pipeline(cps: List[int], form: NormalizationForm, tables: TableStore) -> List[int]:
    if not cps:
        return []
    out = decompose(cps, compatibility=form.kind is DecompositionKind.COMPATIBILITY, tables=tables)
    out = reorder(out, tables)
    if form.composes:
        out = compose(out, tables)
    return out


def normalize(text: Text, form: Any = "nfc", *, tables: Optional[TableStore] = None) -> Any:
    f = parse_form(form)
    cps = to_codepoints(text)
    if tables is None:
        tables = get_tables()
    return _same_shape(text, _pipeline(cps, f, tables))


def is_normalized(text: Text, form: Any = "nfc", *, tables: Optional[TableStore] = None) -> bool:
    f = parse_form(form)
    cps = to_codepoints(text)
    if tables is None:
        tables = get_tables()

    check = quick_check(cps, f, tables)
    if check is QuickCheck.YES:
        return True
    if check is QuickCheck.NO:
        return False
    return _pipeline(cps, f, tables) == cps


def normalize_in_place(buffer: MutableSequence, form: Any = "nfc", *, tables: Optional[TableStore] = None) -> MutableSequence:
    """Replace the contents of a caller-owned codepoint buffer with its
    normalized form and return the buffer.

    The new contents are computed before the buffer is touched, so a failing
    call leaves it unchanged.
    """

    if not isinstance(buffer, MutableSequence):
        raise TypeError(f"normalize_in_place needs a mutable codepoint sequence, got {type(buffer).__name__}")
    result = normalize(list(buffer), form, tables=tables)
    buffer[:] = result
    return buffer
