from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict

import pytest

from unorm.config import TABLES_ENV, VERIFY_DIGEST_ENV
from unorm.tables import TableStore, reset_tables

FIXTURES = Path(__file__).resolve().parent / "fixtures"

# A few Latin, Devanagari and compatibility entries: enough for chains,
# singletons, exclusions, non-starter decompositions and blocking.
MINI_PAYLOAD: Dict[str, Any] = {
    "format": 1,
    "unicode_version": "14.0.0",
    "canonical_decompositions": {
        "00C5": "0041 030A",
        "00E0": "0061 0300",
        "00E2": "0061 0302",
        "0344": "0308 0301",
        "0958": "0915 093C",
        "1E9B": "017F 0307",
        "1EA5": "00E2 0301",
        "212B": "00C5",
    },
    "compatibility_decompositions": {
        "017F": "0073",
        "FB01": "0066 0069",
    },
    "combining_classes": [
        ["0300", "0302", 230],
        ["0307", "0308", 230],
        ["030A", "030A", 230],
        ["0315", "0315", 232],
        ["0316", "0316", 220],
        ["0344", "0344", 230],
        ["093C", "093C", 7],
    ],
    "composition_exclusions": [
        ["0344", "0344"],
        ["0958", "0958"],
    ],
    "quick_check": {
        "NFC": [
            ["0300", "0302", "M"],
            ["0307", "0308", "M"],
            ["030A", "030A", "M"],
            ["0344", "0344", "N"],
            ["0958", "0958", "N"],
            ["212B", "212B", "N"],
        ],
        "NFD": [
            ["00C5", "00C5", "N"],
            ["00E0", "00E0", "N"],
            ["00E2", "00E2", "N"],
            ["0344", "0344", "N"],
            ["0958", "0958", "N"],
            ["1E9B", "1E9B", "N"],
            ["1EA5", "1EA5", "N"],
            ["212B", "212B", "N"],
        ],
        "NFKC": [
            ["017F", "017F", "N"],
            ["0300", "0302", "M"],
            ["0307", "0308", "M"],
            ["030A", "030A", "M"],
            ["0344", "0344", "N"],
            ["0958", "0958", "N"],
            ["1E9B", "1E9B", "N"],
            ["212B", "212B", "N"],
            ["FB01", "FB01", "N"],
        ],
        "NFKD": [
            ["00C5", "00C5", "N"],
            ["00E0", "00E0", "N"],
            ["00E2", "00E2", "N"],
            ["017F", "017F", "N"],
            ["0344", "0344", "N"],
            ["0958", "0958", "N"],
            ["1E9B", "1E9B", "N"],
            ["1EA5", "1EA5", "N"],
            ["212B", "212B", "N"],
            ["FB01", "FB01", "N"],
        ],
    },
}


def mini_payload() -> Dict[str, Any]:
    return copy.deepcopy(MINI_PAYLOAD)


@pytest.fixture
def mini() -> TableStore:
    return TableStore.from_artifact(mini_payload(), source="<mini>")


@pytest.fixture
def clean_tables(monkeypatch: pytest.MonkeyPatch):
    """Process-wide tables reloaded from scratch, with env overrides cleared."""
    monkeypatch.delenv(TABLES_ENV, raising=False)
    monkeypatch.delenv(VERIFY_DIGEST_ENV, raising=False)
    reset_tables()
    yield
    reset_tables()
