from __future__ import annotations

import os
from pathlib import Path

UNICODE_VERSION = "14.0.0"

TABLES_ENV = "UNORM_TABLES"
VERIFY_DIGEST_ENV = "UNORM_VERIFY_DIGEST"


def _truthy(v: str) -> bool:
    s = v.strip().lower()
    return s in ("1", "true", "yes", "y", "on")


def _falsey(v: str) -> bool:
    s = v.strip().lower()
    return s in ("0", "false", "no", "n", "off")


def data_dir() -> Path:
    return Path(__file__).resolve().parent / "data"


def default_artifact_path() -> Path:
    return data_dir() / f"ucd-{UNICODE_VERSION}.json"


def pin_path(artifact: Path) -> Path:
    """Pin file for an artifact: `<artifact>.sha256`, one line of 64 hex."""
    artifact = Path(artifact)
    return artifact.with_name(artifact.name + ".sha256")


def artifact_path() -> Path:
    """
    Table artifact to load.

    Controls:
      - Env: UNORM_TABLES points at an alternative artifact (its pin file sits
        next to it, see `pin_path`).

    Unset or blank => the artifact shipped with the package.
    """
    v = os.environ.get(TABLES_ENV)
    if v is None or not v.strip():
        return default_artifact_path()
    return Path(v.strip()).expanduser()


def digest_check_enabled() -> bool:
    """
    Maximal safety default: ON.

    Controls:
      - Env: UNORM_VERIFY_DIGEST overrides (true/false)

    Unknown env values => default ON.
    """
    v = os.environ.get(VERIFY_DIGEST_ENV)
    if v is None:
        return True

    if _truthy(v):
        return True
    if _falsey(v):
        return False

    return True
