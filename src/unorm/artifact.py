"""Versioned Unicode table artifact: reading, pinning and schema validation.

The artifact is one JSON document holding every table the normalizer needs
for a single Unicode version. It is an input to this package, not something
it derives: `tools/gen_tables.py` produces it from the Unicode data files.

Loading is schema-first and fails closed:
  - the SHA-256 of the raw bytes must equal the pin in `<artifact>.sha256`
    (unless UNORM_VERIFY_DIGEST is off),
  - the document must validate against `ucd-tables.schema.json`
    (Draft 2020-12),
and any failure is a `TableLoadError`.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from jsonschema import Draft202012Validator
from referencing import Registry, Resource

from . import config
from .errors import TableLoadError

logger = logging.getLogger(__name__)

TABLES_SCHEMA_ID = "unorm:ucd-tables-v1"
CODEPOINTS_SCHEMA_ID = "unorm:codepoints-v1"

# Number of schema errors quoted in a TableLoadError message.
MAX_QUOTED_ERRORS = 5


@dataclass(frozen=True)
class Artifact:
    path: Path
    sha256: str
    payload: Dict[str, Any]

    @property
    def unicode_version(self) -> str:
        return self.payload["unicode_version"]


def canon_json_bytes(obj: Any) -> bytes:
    """Deterministic JSON bytes: UTF-8, sorted keys, no whitespace, trailing newline."""

    s = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return (s + "\n").encode("utf-8")


def _load_json(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def build_validator() -> Draft202012Validator:
    tables = _load_json(config.data_dir() / "ucd-tables.schema.json")
    codepoints = _load_json(config.data_dir() / "codepoints.schema.json")

    reg = Registry().with_resources([
        (TABLES_SCHEMA_ID, Resource.from_contents(tables)),
        (CODEPOINTS_SCHEMA_ID, Resource.from_contents(codepoints)),
    ])
    return Draft202012Validator(tables, registry=reg)


def _json_pointer(path_parts: Any) -> str:
    # jsonschema error.path / error.schema_path are deques of keys/indices.
    parts = list(path_parts)

    def esc(p: Any) -> str:
        s = str(p)
        return s.replace("~", "~0").replace("/", "~1")

    return "" if not parts else "/" + "/".join(esc(p) for p in parts)


def schema_errors(payload: Any, validator: Draft202012Validator | None = None) -> List[Dict[str, Any]]:
    """All schema violations of `payload`, in a deterministic order."""

    v = validator or build_validator()
    out: List[Dict[str, Any]] = []
    for err in v.iter_errors(payload):
        out.append(
            {
                "path": _json_pointer(err.path),
                "schema_path": _json_pointer(err.schema_path),
                "validator": str(err.validator),
                "message": str(err.message),
            }
        )

    def k(e: Dict[str, Any]) -> Tuple[str, str, str, str]:
        return (e["path"], e["validator"], e["message"], e["schema_path"])

    return sorted(out, key=k)


def validate_payload(payload: Any, source: Path | str = "<payload>") -> None:
    errs = schema_errors(payload)
    if errs:
        quoted = "; ".join(f"{e['path'] or '/'}: {e['message']}" for e in errs[:MAX_QUOTED_ERRORS])
        more = f" (+{len(errs) - MAX_QUOTED_ERRORS} more)" if len(errs) > MAX_QUOTED_ERRORS else ""
        raise TableLoadError(f"table artifact failed schema validation: {source}: {quoted}{more}", errs)


def read_pin(artifact: Path) -> str:
    pin = config.pin_path(artifact)
    if not pin.exists():
        raise TableLoadError(f"missing digest pin for table artifact: {pin}")
    return pin.read_text(encoding="utf-8").strip()


def load_artifact(path: Path | None = None, verify_digest: bool | None = None) -> Artifact:
    p = Path(path) if path is not None else config.artifact_path()
    if verify_digest is None:
        verify_digest = config.digest_check_enabled()

    if not p.exists():
        raise TableLoadError(f"missing table artifact: {p}")
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise TableLoadError(f"cannot read table artifact: {p}: {e}") from e

    digest = hashlib.sha256(raw).hexdigest()
    if verify_digest:
        pinned = read_pin(p)
        if pinned != digest:
            raise TableLoadError(
                "table artifact digest pin mismatch\n"
                f"  pinned:   {pinned}\n"
                f"  actual:   {digest}\n"
                f"  artifact: {p}"
            )
    else:
        logger.warning("digest check disabled (%s); loading unpinned table artifact %s", config.VERIFY_DIGEST_ENV, p)

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise TableLoadError(f"table artifact is not valid JSON: {p}: {e}") from e

    validate_payload(payload, p)
    logger.debug("loaded table artifact %s (Unicode %s, sha256 %s)", p, payload["unicode_version"], digest)
    return Artifact(path=p, sha256=digest, payload=payload)


def write_artifact(payload: Dict[str, Any], path: Path) -> str:
    """Validate and write an artifact plus its pin file; return the digest."""

    dst = Path(path)
    validate_payload(payload, dst)
    data = canon_json_bytes(payload)
    digest = hashlib.sha256(data).hexdigest()

    dst.parent.mkdir(parents=True, exist_ok=True)
    # Use replace-atomic temp -> rename to avoid partial writes.
    tmp = dst.with_suffix(dst.suffix + ".tmp")
    tmp.write_bytes(data)
    tmp.replace(dst)
    config.pin_path(dst).write_text(digest + "\n", encoding="utf-8")
    return digest
