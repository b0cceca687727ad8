from __future__ import annotations

from unorm.compose import combine, compose
from unorm.decompose import decompose
from unorm.forms import NormalizationForm, QuickCheck
from unorm.normalize import normalize
from unorm.quickcheck import quick_check
from unorm.reorder import is_canonically_ordered, reorder


def test_decompose_follows_chains(mini) -> None:
    assert decompose([0x1EA5], tables=mini) == [0x61, 0x302, 0x301]
    assert decompose([0x212B], tables=mini) == [0x41, 0x30A]
    assert decompose([0x41, 0xE0, 0x42], tables=mini) == [0x41, 0x61, 0x300, 0x42]


def test_decompose_compatibility_uses_both_tables(mini) -> None:
    assert decompose([0x1E9B], tables=mini) == [0x17F, 0x307]
    assert decompose([0x1E9B], compatibility=True, tables=mini) == [0x73, 0x307]
    assert decompose([0xFB01], tables=mini) == [0xFB01]
    assert decompose([0xFB01], compatibility=True, tables=mini) == [0x66, 0x69]


def test_decompose_hangul_without_tables(mini) -> None:
    assert decompose([0xAC01], tables=mini) == [0x1100, 0x1161, 0x11A8]
    assert decompose([0x1100, 0x1161], tables=mini) == [0x1100, 0x1161]


def test_decompose_does_not_mutate_input(mini) -> None:
    seq = [0x1EA5, 0xAC00]
    decompose(seq, tables=mini)
    assert seq == [0x1EA5, 0xAC00]


def test_reorder_stable_within_runs(mini) -> None:
    # 0x316 is class 220, 0x300/0x301 are 230, 0x93C is 7
    assert reorder([0x61, 0x301, 0x316], mini) == [0x61, 0x316, 0x301]
    assert reorder([0x61, 0x301, 0x300, 0x316], mini) == [0x61, 0x316, 0x301, 0x300]
    assert reorder([0x61, 0x315, 0x301, 0x93C], mini) == [0x61, 0x93C, 0x301, 0x315]
    # Never across a starter.
    assert reorder([0x301, 0x61, 0x316], mini) == [0x301, 0x61, 0x316]

    assert is_canonically_ordered([0x61, 0x316, 0x301], mini)
    assert not is_canonically_ordered([0x61, 0x301, 0x316], mini)


def test_compose_chain(mini) -> None:
    assert compose([0x61, 0x302, 0x301], mini) == [0x1EA5]
    assert compose([0x41, 0x30A], mini) == [0xC5]
    assert compose([0x17F, 0x307], mini) == [0x1E9B]


def test_compose_lower_class_mark_does_not_block(mini) -> None:
    assert compose([0x61, 0x316, 0x300], mini) == [0xE0, 0x316]


def test_compose_equal_class_mark_blocks(mini) -> None:
    assert compose([0x61, 0x308, 0x300], mini) == [0x61, 0x308, 0x300]


def test_compose_starter_blocks(mini) -> None:
    assert compose([0x61, 0x62, 0x300], mini) == [0x61, 0x62, 0x300]


def test_compose_skips_exclusions(mini) -> None:
    assert combine(0x915, 0x93C, mini) is None
    assert compose([0x915, 0x93C], mini) == [0x915, 0x93C]
    assert compose([0x308, 0x301], mini) == [0x308, 0x301]


def test_compose_leading_marks_have_no_starter(mini) -> None:
    assert compose([0x300, 0x61, 0x300], mini) == [0x300, 0xE0]


def test_compose_hangul(mini) -> None:
    assert compose([0x1100, 0x1161, 0x11A8], mini) == [0xAC01]
    assert compose([0xAC00, 0x11A8], mini) == [0xAC01]
    assert combine(0x1100, 0x1161, mini) == 0xAC00


def test_forms_on_small_tables(mini) -> None:
    s = [0x1E9B, 0x301]
    assert normalize(s, "nfd", tables=mini) == [0x17F, 0x307, 0x301]
    assert normalize(s, "nfc", tables=mini) == [0x1E9B, 0x301]
    assert normalize(s, "nfkd", tables=mini) == [0x73, 0x307, 0x301]
    assert normalize([0x212B], "nfc", tables=mini) == [0xC5]
    assert normalize([0x958], "nfc", tables=mini) == [0x915, 0x93C]
    assert normalize([0x344], "nfc", tables=mini) == [0x308, 0x301]


def test_quick_check_on_small_tables(mini) -> None:
    nfc, nfd = NormalizationForm.NFC, NormalizationForm.NFD
    assert quick_check([0x61, 0x62], nfc, mini) is QuickCheck.YES
    assert quick_check([0x61, 0x300], nfc, mini) is QuickCheck.MAYBE
    assert quick_check([0x61, 0x300], nfd, mini) is QuickCheck.YES
    assert quick_check([0xE0], nfd, mini) is QuickCheck.NO
    assert quick_check([0x212B], "nfc", mini) is QuickCheck.NO
    # A later NO still wins over an earlier MAYBE.
    assert quick_check([0x61, 0x300, 0x212B], "nfc", mini) is QuickCheck.NO
    assert quick_check([0x1100, 0x1161], nfc, mini) is QuickCheck.MAYBE
    assert quick_check([0xAC00], nfd, mini) is QuickCheck.NO
    # Out of canonical order: NO whatever the per-codepoint values say.
    assert quick_check([0x61, 0x301, 0x316], nfd, mini) is QuickCheck.NO
