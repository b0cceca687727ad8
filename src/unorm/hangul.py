"""Arithmetic decomposition and composition of Hangul syllables.

The precomposed syllable block U+AC00..U+D7A3 is laid out as
L (19 leading consonants) x V (21 vowels) x T (28 trailing slots, slot 0
meaning "no trailing consonant"), so a syllable is

    S = S_BASE + (L_index * V_COUNT + V_index) * T_COUNT + T_index

None of these codepoints (nor the conjoining jamo they decompose into) has
an entry in the table artifact.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .forms import NormalizationForm, QuickCheck

S_BASE = 0xAC00
L_BASE = 0x1100
V_BASE = 0x1161
T_BASE = 0x11A7

L_COUNT = 19
V_COUNT = 21
T_COUNT = 28
N_COUNT = V_COUNT * T_COUNT  # 588
S_COUNT = L_COUNT * N_COUNT  # 11172


def is_syllable(cp: int) -> bool:
    return S_BASE <= cp < S_BASE + S_COUNT


def is_leading(cp: int) -> bool:
    return L_BASE <= cp < L_BASE + L_COUNT


def is_vowel(cp: int) -> bool:
    return V_BASE <= cp < V_BASE + V_COUNT


def is_trailing(cp: int) -> bool:
    # T_BASE itself is the "no trailing consonant" slot, not a jamo.
    return T_BASE < cp < T_BASE + T_COUNT


def is_hangul(cp: int) -> bool:
    return is_syllable(cp) or is_leading(cp) or is_vowel(cp) or is_trailing(cp)


BLOCKS = (
    (L_BASE, L_BASE + L_COUNT - 1),
    (V_BASE, V_BASE + V_COUNT - 1),
    (T_BASE + 1, T_BASE + T_COUNT - 1),
    (S_BASE, S_BASE + S_COUNT - 1),
)


def overlaps(start: int, end: int) -> bool:
    """Whether [start, end] touches any codepoint handled by this module."""
    return any(start <= hi and end >= lo for lo, hi in BLOCKS)


def decompose_syllable(cp: int) -> Tuple[int, ...]:
    s_index = cp - S_BASE
    if not 0 <= s_index < S_COUNT:
        raise ValueError(f"not a Hangul syllable: U+{cp:04X}")

    lead = L_BASE + s_index // N_COUNT
    vowel = V_BASE + (s_index % N_COUNT) // T_COUNT
    t_index = s_index % T_COUNT
    if t_index == 0:
        return (lead, vowel)
    return (lead, vowel, T_BASE + t_index)


def compose_pair(first: int, second: int) -> Optional[int]:
    """L+V -> LV syllable, LV+T -> LVT syllable, anything else -> None."""

    if is_leading(first) and is_vowel(second):
        return S_BASE + ((first - L_BASE) * V_COUNT + (second - V_BASE)) * T_COUNT
    if is_syllable(first) and (first - S_BASE) % T_COUNT == 0 and is_trailing(second):
        return first + (second - T_BASE)
    return None


def quick_check(cp: int, form: NormalizationForm) -> Optional[QuickCheck]:
    if is_syllable(cp):
        return QuickCheck.YES if form.composes else QuickCheck.NO
    if is_vowel(cp) or is_trailing(cp):
        # May combine with a preceding L or LV.
        return QuickCheck.MAYBE if form.composes else QuickCheck.YES
    if is_leading(cp):
        return QuickCheck.YES
    return None
