"""Runner for the Unicode normalization conformance file (NormalizationTest.txt).

Each data line holds five columns of space separated hex codepoints,
`c1;c2;c3;c4;c5;`, followed by an optional `# comment`. Lines starting with
`@` open a new part (`@Part1 # ...`). For every record:

    c2 == NFC(c1) == NFC(c2) == NFC(c3)      c4 == NFC(c4) == NFC(c5)
    c3 == NFD(c1) == NFD(c2) == NFD(c3)      c5 == NFD(c4) == NFD(c5)
    c4 == NFKC(c1) == ... == NFKC(c5)
    c5 == NFKD(c1) == ... == NFKD(c5)

and, optionally, every codepoint that is not listed in column 1 of Part 1
must be unchanged by all four forms.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .forms import NormalizationForm
from .normalize import normalize
from .tables import MAX_CODEPOINT, TableStore, get_tables, is_surrogate

logger = logging.getLogger(__name__)

# Part of the file that lists every single codepoint with a non-trivial mapping.
SINGLE_CODEPOINT_PART = "Part1"

NFC = NormalizationForm.NFC
NFD = NormalizationForm.NFD
NFKC = NormalizationForm.NFKC
NFKD = NormalizationForm.NFKD

# (form, expected column, source columns), 0-based columns.
INVARIANTS: Tuple[Tuple[NormalizationForm, int, Tuple[int, ...]], ...] = (
    (NFC, 1, (0, 1, 2)),
    (NFC, 3, (3, 4)),
    (NFD, 2, (0, 1, 2)),
    (NFD, 4, (3, 4)),
    (NFKC, 3, (0, 1, 2, 3, 4)),
    (NFKD, 4, (0, 1, 2, 3, 4)),
)


class ConformanceFormatError(ValueError):
    pass


@dataclass(frozen=True)
class Record:
    line_no: int
    part: Optional[str]
    columns: Tuple[Tuple[int, ...], ...]
    comment: str = ""


@dataclass(frozen=True)
class ConformanceResult:
    ok: bool
    errors: List[str]
    checked: int


def format_codepoints(cps: Iterable[int]) -> str:
    return " ".join(f"{cp:04X}" for cp in cps)


def parse_line(line: str, line_no: int = 0, part: Optional[str] = None) -> Optional[Record]:
    """Parse one data line; None for blank, comment and `@Part` lines."""

    body, _, comment = line.partition("#")
    body = body.strip()
    if not body or body.startswith("@"):
        return None

    fields = body.split(";")
    # Data lines end with a ';', leaving an empty sixth field.
    if len(fields) < 5 or any(f.strip() for f in fields[5:]):
        raise ConformanceFormatError(f"line {line_no}: expected 5 columns, got {body!r}")
    try:
        columns = tuple(tuple(int(tok, 16) for tok in f.split()) for f in fields[:5])
    except ValueError as e:
        raise ConformanceFormatError(f"line {line_no}: bad codepoint: {e}") from e
    if any(not col for col in columns):
        raise ConformanceFormatError(f"line {line_no}: empty column")
    return Record(line_no=line_no, part=part, columns=columns, comment=comment.strip())


def iter_records(lines: Iterable[str]) -> Iterator[Record]:
    part: Optional[str] = None
    for n, line in enumerate(lines, start=1):
        stripped = line.strip()
        if stripped.startswith("@"):
            part = stripped[1:].split("#", 1)[0].strip()
            continue
        rec = parse_line(line, n, part)
        if rec is not None:
            yield rec


def check_record(rec: Record, tables: Optional[TableStore] = None) -> List[str]:
    if tables is None:
        tables = get_tables()

    errors: List[str] = []
    for form, expected_col, source_cols in INVARIANTS:
        expected = list(rec.columns[expected_col])
        for col in source_cols:
            got = normalize(list(rec.columns[col]), form, tables=tables)
            if got != expected:
                errors.append(
                    f"line {rec.line_no}: {form.name}(c{col + 1}) = {format_codepoints(got)},"
                    f" expected c{expected_col + 1} = {format_codepoints(expected)}"
                )
    return errors


def check_unlisted(
    listed: Set[int], tables: Optional[TableStore] = None, candidates: Optional[Iterable[int]] = None
) -> List[str]:
    """Every codepoint missing from Part 1 must be a fixed point of all forms.

    `candidates` defaults to the whole codespace.
    """

    if tables is None:
        tables = get_tables()

    errors: List[str] = []
    if candidates is None:
        candidates = range(MAX_CODEPOINT + 1)
    for cp in candidates:
        if cp in listed or is_surrogate(cp):
            continue
        for form in NormalizationForm:
            got = normalize([cp], form, tables=tables)
            if got != [cp]:
                errors.append(f"U+{cp:04X}: {form.name} = {format_codepoints(got)}, expected unchanged")
    return errors


def run_file(path: Path, unlisted: bool = False, tables: Optional[TableStore] = None) -> ConformanceResult:
    if tables is None:
        tables = get_tables()

    errors: List[str] = []
    listed: Set[int] = set()
    checked = 0
    with Path(path).open(encoding="utf-8") as f:
        for rec in iter_records(f):
            checked += 1
            errors.extend(check_record(rec, tables))
            if rec.part == SINGLE_CODEPOINT_PART and len(rec.columns[0]) == 1:
                listed.add(rec.columns[0][0])

    if unlisted:
        errors.extend(check_unlisted(listed, tables))

    logger.info("conformance %s: %d records, %d failures", path, checked, len(errors))
    return ConformanceResult(ok=(len(errors) == 0), errors=errors, checked=checked)
