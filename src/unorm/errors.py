from __future__ import annotations

from typing import Any, Dict, List


class NormalizationError(Exception):
    pass


class EncodingError(NormalizationError, ValueError):
    """Input is not clean Unicode codepoint data."""


class InvalidFormError(NormalizationError, ValueError):
    def __init__(self, token: Any) -> None:
        super().__init__(f"invalid normalization form {token!r} (expected one of: nfc, nfd, nfkc, nfkd)")
        self.token = token


class TableLoadError(NormalizationError, RuntimeError):
    """The Unicode table artifact is missing, tampered with or malformed.

    Raised on first use of the tables and on every use after that; a process
    that hit it has no normalization capability.
    """

    def __init__(self, message: str, schema_errors: List[Dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.schema_errors: List[Dict[str, Any]] = list(schema_errors or [])
