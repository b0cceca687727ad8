"""Normalization of encoded byte strings.

Only Unicode encodings are accepted: UTF-8, UTF-16BE/LE, UTF-32BE/LE (with
or without a BOM), GB18030, UCS-2BE and UCS-4BE. Bytes are decoded with the
standard codec registry, normalized as text and encoded back in the same
encoding. US-ASCII passes through unchanged, since ASCII text is already in
every normalization form. Anything else is an EncodingError, raised before any
transformation.
"""

from __future__ import annotations

import codecs
import sys
from typing import Any, Dict, Tuple

from .errors import EncodingError
from .forms import parse_form
from .normalize import is_normalized, normalize

UNICODE_ENCODINGS = frozenset({
    "utf-8",
    "utf-8-sig",
    "utf-16",
    "utf-16-be",
    "utf-16-le",
    "utf-32",
    "utf-32-be",
    "utf-32-le",
    "gb18030",
})

ASCII = "ascii"

# UCS-2/UCS-4 have no codec of their own; their BMP/full-range contents are
# byte-identical to UTF-16BE/UTF-32BE.
_UCS_ALIASES = {
    "ucs-2be": "utf-16-be",
    "ucs2be": "utf-16-be",
    "ucs-4be": "utf-32-be",
    "ucs4be": "utf-32-be",
}

# UCS-2 stops at the BMP; a surrogate pair is not UCS-2.
_UCS2 = frozenset({"ucs-2be", "ucs2be"})
BMP_MAX = 0xFFFF

# Codecs whose output starts with a byte order mark: the BOMs they accept
# with the fixed-order codec to encode with after each, and the codec for
# input without one (decoded in native order, or plain UTF-8).
_NATIVE = "le" if sys.byteorder == "little" else "be"
_BOMS: Dict[str, Tuple[Tuple[Tuple[bytes, str], ...], str]] = {
    "utf-8-sig": (((codecs.BOM_UTF8, "utf-8"),), "utf-8"),
    "utf-16": (
        ((codecs.BOM_UTF16_BE, "utf-16-be"), (codecs.BOM_UTF16_LE, "utf-16-le")),
        f"utf-16-{_NATIVE}",
    ),
    "utf-32": (
        ((codecs.BOM_UTF32_BE, "utf-32-be"), (codecs.BOM_UTF32_LE, "utf-32-le")),
        f"utf-32-{_NATIVE}",
    ),
}


def _key(encoding: str) -> str:
    if not isinstance(encoding, str):
        raise EncodingError(f"encoding name must be a str, got {type(encoding).__name__}")
    return encoding.strip().lower().replace("_", "-")


def codec_name(encoding: str) -> str:
    """Canonical codec name for `encoding`, or EncodingError if it is not a
    Unicode encoding."""

    key = _key(encoding)
    key = _UCS_ALIASES.get(key, key)
    try:
        name = codecs.lookup(key).name
    except LookupError as e:
        raise EncodingError(f"unknown encoding: {encoding!r}") from e
    if name != ASCII and name not in UNICODE_ENCODINGS:
        raise EncodingError(f"Unicode normalization not appropriate for {encoding}")
    return name


def _decode(data: bytes, name: str, encoding: str) -> str:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise EncodingError(f"expected bytes, got {type(data).__name__}")
    try:
        text = bytes(data).decode(name)
    except UnicodeDecodeError as e:
        raise EncodingError(f"invalid {name} data: {e}") from e
    if _key(encoding) in _UCS2:
        for i, ch in enumerate(text):
            if ord(ch) > BMP_MAX:
                raise EncodingError(f"U+{ord(ch):04X} at index {i} is outside UCS-2 (surrogate pair in {encoding} data)")
    return text


def _encode(text: str, data: bytes, name: str) -> bytes:
    """Encode in the byte order (and with the BOM, if any) of the input."""

    if name not in _BOMS:
        return text.encode(name)
    boms, fallback = _BOMS[name]
    raw = bytes(data)
    for bom, fixed in boms:
        if raw.startswith(bom):
            return bom + text.encode(fixed)
    return text.encode(fallback)


def normalize_encoded(data: bytes, encoding: str, form: Any = "nfc") -> bytes:
    f = parse_form(form)
    name = codec_name(encoding)
    text = _decode(data, name, encoding)
    if name == ASCII:
        return bytes(data)
    return _encode(normalize(text, f), data, name)


def is_normalized_encoded(data: bytes, encoding: str, form: Any = "nfc") -> bool:
    f = parse_form(form)
    name = codec_name(encoding)
    text = _decode(data, name, encoding)
    if name == ASCII:
        return True
    return is_normalized(text, f)
