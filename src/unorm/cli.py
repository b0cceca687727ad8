from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .conformance import run_file
from .errors import EncodingError, NormalizationError
from .forms import QuickCheck, parse_form
from .normalize import is_normalized, normalize, to_codepoints
from .quickcheck import quick_check
from .tables import get_tables

FORMS = ["nfc", "nfd", "nfkc", "nfkd"]

EXIT_OK = 0
EXIT_NOT_NORMALIZED = 1
EXIT_ERROR = 2


def parse_codepoints(s: str) -> List[int]:
    """Parse "0061 0300", "U+0061 U+0300" or "0061,0300"."""
    out: List[int] = []
    for tok in s.replace(",", " ").split():
        t = tok.upper()
        if t.startswith("U+"):
            t = t[2:]
        try:
            out.append(int(t, 16))
        except ValueError:
            raise EncodingError(f"not a hex codepoint: {tok!r}") from None
    return out


def _input(args: argparse.Namespace) -> List[int]:
    if args.input_codepoints:
        return parse_codepoints(args.text)
    return to_codepoints(args.text)


def cmd_normalize(args: argparse.Namespace) -> int:
    try:
        out = normalize(_input(args), args.form)
    except NormalizationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    if args.codepoints:
        print(" ".join(f"U+{cp:04X}" for cp in out))
    else:
        print("".join(map(chr, out)))
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    try:
        cps = _input(args)
        form = parse_form(args.form)
        qc = quick_check(cps, form)
        ok = is_normalized(cps, form)
    except NormalizationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    print(f"quick check: {qc.name}")
    if qc is QuickCheck.MAYBE:
        print(f"full check: {'normalized' if ok else 'not normalized'}")
    else:
        print("normalized" if ok else "not normalized")
    return EXIT_OK if ok else EXIT_NOT_NORMALIZED


def cmd_tables(args: argparse.Namespace) -> int:
    try:
        store = get_tables()
    except NormalizationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    print(f"unicode_version: {store.unicode_version}")
    print(f"source: {store.source}")
    print(f"sha256: {store.sha256}")
    for k, v in sorted(store.stats().items()):
        print(f"{k}: {v}")
    return EXIT_OK


def cmd_conformance(args: argparse.Namespace) -> int:
    p = Path(args.path)
    if not p.exists():
        raise SystemExit(f"no such file: {p}")
    try:
        r = run_file(p, unlisted=args.unlisted)
    except (NormalizationError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    if r.ok:
        print(f"OK ({r.checked} lines)")
        return EXIT_OK
    for e in r.errors:
        print(e)
    print(f"FAILED: {len(r.errors)} failure(s) in {r.checked} lines", file=sys.stderr)
    return EXIT_ERROR


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="unorm", description="Unicode normalization (NFC, NFD, NFKC, NFKD).")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr.")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_text_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("text", help="Text to process (or hex codepoints with --input-codepoints).")
        sp.add_argument("--form", "-f", choices=FORMS, default="nfc", help="Normalization form (default: nfc).")
        sp.add_argument(
            "--input-codepoints",
            action="store_true",
            help='Read TEXT as hex codepoints, e.g. "0061 0300" or "U+0061 U+0300".',
        )

    p_norm = sub.add_parser("normalize", help="Print the normalized text.")
    add_text_args(p_norm)
    p_norm.add_argument("--codepoints", action="store_true", help="Print U+XXXX codepoints instead of text.")
    p_norm.set_defaults(fn=cmd_normalize)

    p_chk = sub.add_parser("check", help="Quick check + verdict; exit 0 if normalized, 1 if not.")
    add_text_args(p_chk)
    p_chk.set_defaults(fn=cmd_check)

    p_tab = sub.add_parser("tables", help="Show the loaded Unicode tables (version, source, digest, sizes).")
    p_tab.set_defaults(fn=cmd_tables)

    p_conf = sub.add_parser("conformance", help="Run a NormalizationTest.txt file.")
    p_conf.add_argument("path")
    p_conf.add_argument(
        "--unlisted",
        action="store_true",
        help="Also check that every codepoint not in Part 1 is unchanged by all forms (slow).",
    )
    p_conf.set_defaults(fn=cmd_conformance)

    return p


def main(argv: List[str] | None = None) -> None:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(args.fn(args))


if __name__ == "__main__":
    main()
