from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import InvalidFormError


class DecompositionKind(Enum):
    CANONICAL = "canonical"
    COMPATIBILITY = "compatibility"


class NormalizationForm(Enum):
    NFC = "nfc"
    NFD = "nfd"
    NFKC = "nfkc"
    NFKD = "nfkd"

    @property
    def kind(self) -> DecompositionKind:
        if self in (NormalizationForm.NFKC, NormalizationForm.NFKD):
            return DecompositionKind.COMPATIBILITY
        return DecompositionKind.CANONICAL

    @property
    def composes(self) -> bool:
        return self in (NormalizationForm.NFC, NormalizationForm.NFKC)


class QuickCheck(Enum):
    YES = "Y"
    NO = "N"
    MAYBE = "M"


def parse_form(form: Any) -> NormalizationForm:
    """Resolve a form token.

    Only the exact lowercase tokens are accepted ("nfc", "nfd", "nfkc",
    "nfkd"); "NFC", " nfc" or "nfc\\n" are rejected like any other value.
    """

    if isinstance(form, NormalizationForm):
        return form
    if isinstance(form, str):
        try:
            return NormalizationForm(form)
        except ValueError:
            pass
    raise InvalidFormError(form)
