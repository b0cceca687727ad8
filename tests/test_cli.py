from __future__ import annotations

from typing import List

import pytest

from conftest import FIXTURES
from unorm.cli import main, parse_codepoints


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as ei:
        main(argv)
    return ei.value.code


def test_parse_codepoints() -> None:
    assert parse_codepoints("0061 0300") == [0x61, 0x300]
    assert parse_codepoints("U+0061,u+0300") == [0x61, 0x300]


def test_normalize_codepoints(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["normalize", "--codepoints", "--input-codepoints", "0061 0300"]) == 0
    assert capsys.readouterr().out == "U+00E0\n"

    assert _run(["normalize", "-f", "nfd", "--codepoints", "--input-codepoints", "AC00"]) == 0
    assert capsys.readouterr().out == "U+1100 U+1161\n"


def test_normalize_text(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["normalize", "--form", "nfkc", "x" + chr(0xFB01)]) == 0
    assert capsys.readouterr().out == "xfi\n"


def test_check_exit_codes(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["check", "--input-codepoints", "0061 0300"]) == 1
    out = capsys.readouterr().out
    assert "quick check: MAYBE" in out
    assert "not normalized" in out

    assert _run(["check", "--form", "nfd", "--input-codepoints", "0061 0300"]) == 0
    assert capsys.readouterr().out == "quick check: YES\nnormalized\n"

    assert _run(["check", "--form", "nfd", "--input-codepoints", "00E0"]) == 1
    assert capsys.readouterr().out == "quick check: NO\nnot normalized\n"


def test_errors_go_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["normalize", "--input-codepoints", "0061 D800"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "surrogate" in captured.err

    assert _run(["check", "--input-codepoints", "zz"]) == 2
    assert "not a hex codepoint" in capsys.readouterr().err

    # argparse rejects unknown forms itself
    assert _run(["normalize", "--form", "NFC", "a"]) == 2


def test_tables(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["tables"]) == 0
    out = capsys.readouterr().out
    assert "unicode_version: 14.0.0" in out
    assert "canonical_decompositions: " in out


def test_conformance(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["conformance", str(FIXTURES / "NormalizationTest-excerpt.txt")]) == 0
    assert capsys.readouterr().out == "OK (59 lines)\n"
