#!/usr/bin/env python3
"""Generate the normalization table artifact from the Unicode Character Database.

Usage:
  python tools/gen_tables.py \\
      --unicode-data UnicodeData.txt \\
      --derived-props DerivedNormalizationProps.txt \\
      --unicode-version 14.0.0 \\
      --out src/unorm/data/ucd-14.0.0.json

Writes the artifact as canonical JSON (sorted keys, compact separators) and
its `.sha256` pin next to it. Hangul syllables and conjoining jamo are left
out of every table; they are handled arithmetically at runtime.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from unorm import hangul
from unorm.artifact import write_artifact

logger = logging.getLogger("unorm.gen_tables")

ARTIFACT_FORMAT = 1

QC_PROPERTIES = {
    "NFC_QC": "NFC",
    "NFD_QC": "NFD",
    "NFKC_QC": "NFKC",
    "NFKD_QC": "NFKD",
}


def _hex(cp: int) -> str:
    return f"{cp:04X}"


def _data_lines(path: Path) -> Iterable[str]:
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            line = line.split("#", 1)[0].strip()
            if line:
                yield line


def _cp_range(field: str) -> Tuple[int, int]:
    field = field.strip()
    if ".." in field:
        a, b = field.split("..")
        return int(a, 16), int(b, 16)
    cp = int(field, 16)
    return cp, cp


def parse_unicode_data(path: Path) -> Dict[str, Any]:
    """Decompositions and nonzero combining classes from UnicodeData.txt."""

    canonical: Dict[int, List[int]] = {}
    compatibility: Dict[int, List[int]] = {}
    ccc: Dict[int, int] = {}

    for line in _data_lines(path):
        fields = line.split(";")
        if len(fields) < 15:
            continue
        cp = int(fields[0], 16)
        if hangul.is_hangul(cp):
            continue

        klass = int(fields[3]) if fields[3] else 0
        if klass:
            ccc[cp] = klass

        decomp = fields[5].strip()
        if not decomp:
            continue
        if decomp.startswith("<"):
            # "<compat> 0020 0308": the tag only says which kind it is.
            _, _, rest = decomp.partition(">")
            compatibility[cp] = [int(t, 16) for t in rest.split()]
        else:
            canonical[cp] = [int(t, 16) for t in decomp.split()]

    return {"canonical": canonical, "compatibility": compatibility, "ccc": ccc}


def parse_derived_props(path: Path) -> Dict[str, Any]:
    """Full_Composition_Exclusion and the four *_QC properties."""

    exclusions: List[int] = []
    qc: Dict[str, Dict[int, str]] = {form: {} for form in QC_PROPERTIES.values()}

    for line in _data_lines(path):
        fields = [f.strip() for f in line.split(";")]
        start, end = _cp_range(fields[0])
        prop = fields[1]
        if prop == "Full_Composition_Exclusion":
            exclusions.extend(cp for cp in range(start, end + 1) if not hangul.is_hangul(cp))
        elif prop in QC_PROPERTIES:
            value = fields[2]
            if value not in ("N", "M"):
                raise ValueError(f"{path}: unexpected {prop} value {value!r}")
            form = QC_PROPERTIES[prop]
            for cp in range(start, end + 1):
                if not hangul.is_hangul(cp):
                    qc[form][cp] = value

    return {"exclusions": sorted(set(exclusions)), "qc": qc}


def merge_ranges(values: Dict[int, Any]) -> List[List[Any]]:
    """[[start, end, value], ...] over runs of consecutive codepoints with equal values."""

    rows: List[List[Any]] = []
    for cp in sorted(values):
        v = values[cp]
        if rows and rows[-1][1] == cp - 1 and rows[-1][2] == v:
            rows[-1][1] = cp
        else:
            rows.append([cp, cp, v])
    return [[_hex(a), _hex(b), v] for a, b, v in rows]


def build_payload(unicode_data: Dict[str, Any], derived: Dict[str, Any], unicode_version: str) -> Dict[str, Any]:
    def mappings(m: Dict[int, List[int]]) -> Dict[str, str]:
        return {_hex(cp): " ".join(_hex(c) for c in seq) for cp, seq in sorted(m.items())}

    exclusion_rows = merge_ranges({cp: True for cp in derived["exclusions"]})
    return {
        "format": ARTIFACT_FORMAT,
        "unicode_version": unicode_version,
        "canonical_decompositions": mappings(unicode_data["canonical"]),
        "compatibility_decompositions": mappings(unicode_data["compatibility"]),
        "combining_classes": merge_ranges(unicode_data["ccc"]),
        "composition_exclusions": [[a, b] for a, b, _ in exclusion_rows],
        "quick_check": {form: merge_ranges(values) for form, values in derived["qc"].items()},
    }


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Generate the unorm table artifact from UCD files.")
    ap.add_argument("--unicode-data", required=True, help="Path to UnicodeData.txt")
    ap.add_argument("--derived-props", required=True, help="Path to DerivedNormalizationProps.txt")
    ap.add_argument("--unicode-version", required=True, help="Unicode version of the input files, e.g. 14.0.0")
    ap.add_argument("--out", required=True, help="Artifact path; the pin is written to <out>.sha256")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(message)s")

    unicode_data = parse_unicode_data(Path(args.unicode_data))
    derived = parse_derived_props(Path(args.derived_props))
    payload = build_payload(unicode_data, derived, args.unicode_version)
    digest = write_artifact(payload, Path(args.out))

    logger.info(
        "wrote %s: %d canonical, %d compatibility decompositions, sha256 %s",
        args.out,
        len(payload["canonical_decompositions"]),
        len(payload["compatibility_decompositions"]),
        digest,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
