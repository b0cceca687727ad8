"""Table Store: read-only lookups over one Unicode version's normalization data.

Loaded at most once per process (see `get_tables`) and shared by every
normalization call; nothing here is mutated after construction.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from . import hangul
from .artifact import load_artifact
from .errors import TableLoadError
from .forms import DecompositionKind, NormalizationForm, QuickCheck
from .once import Once

logger = logging.getLogger(__name__)

MAX_CODEPOINT = 0x10FFFF


def is_surrogate(cp: int) -> bool:
    return 0xD800 <= cp <= 0xDFFF


def _codepoint(s: str, where: str) -> int:
    cp = int(s, 16)
    if cp > MAX_CODEPOINT or is_surrogate(cp):
        raise TableLoadError(f"{where}: invalid codepoint U+{cp:04X}")
    return cp


@dataclass(frozen=True)
class RangeTable:
    """Sorted, non-overlapping [start, end] ranges with a value; binary search lookup."""

    starts: Tuple[int, ...]
    ends: Tuple[int, ...]
    values: Tuple[Any, ...]
    default: Any

    @staticmethod
    def from_rows(
        rows: Iterable[Sequence[Any]],
        where: str,
        default: Any = None,
        convert: Callable[[Any], Any] = lambda v: v,
    ) -> "RangeTable":
        starts: List[int] = []
        ends: List[int] = []
        values: List[Any] = []
        for i, row in enumerate(rows):
            start = _codepoint(row[0], f"{where}[{i}]")
            end = _codepoint(row[1], f"{where}[{i}]")
            if end < start:
                raise TableLoadError(f"{where}[{i}]: range end U+{end:04X} before start U+{start:04X}")
            if ends and start <= ends[-1]:
                raise TableLoadError(f"{where}[{i}]: range U+{start:04X} overlaps or is out of order")
            if start <= 0xDFFF and end >= 0xD800:
                raise TableLoadError(f"{where}[{i}]: range spans surrogates")
            if hangul.overlaps(start, end):
                raise TableLoadError(f"{where}[{i}]: Hangul codepoints must not appear in the tables")
            starts.append(start)
            ends.append(end)
            values.append(convert(row[2]) if len(row) > 2 else True)
        return RangeTable(tuple(starts), tuple(ends), tuple(values), default)

    def lookup(self, cp: int) -> Any:
        i = bisect_right(self.starts, cp) - 1
        if i >= 0 and cp <= self.ends[i]:
            return self.values[i]
        return self.default

    def codepoints(self) -> Iterable[int]:
        for start, end in zip(self.starts, self.ends):
            yield from range(start, end + 1)

    def __len__(self) -> int:
        return len(self.starts)


def _decompositions(raw: Mapping[str, str], where: str) -> Dict[int, Tuple[int, ...]]:
    out: Dict[int, Tuple[int, ...]] = {}
    for key, value in raw.items():
        cp = _codepoint(key, f"{where}/{key}")
        if hangul.is_hangul(cp):
            raise TableLoadError(f"{where}/{key}: Hangul codepoint U+{cp:04X} must not appear in the tables")
        mapping = tuple(int(part, 16) for part in value.split())
        for c in mapping:
            if c > MAX_CODEPOINT or is_surrogate(c):
                raise TableLoadError(f"{where}/{key}: invalid codepoint U+{c:04X} in mapping")
        if not mapping:
            raise TableLoadError(f"{where}/{key}: empty mapping")
        out[cp] = mapping
    return out


def check_acyclic(graph: Mapping[int, Tuple[int, ...]], where: str) -> None:
    """Fail if expanding any mapping in `graph` would never terminate.

    Iterative three-colour DFS; absent state = unvisited, 1 = on the current
    path, 2 = fully expanded.
    """

    state: Dict[int, int] = {}
    for root in graph:
        if state.get(root) == 2:
            continue
        state[root] = 1
        stack = [(root, iter(graph[root]))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                state[node] = 2
                stack.pop()
                continue
            s = state.get(child)
            if s == 1:
                raise TableLoadError(f"{where}: decomposition cycle through U+{child:04X} (from U+{root:04X})")
            if s is None and child in graph:
                state[child] = 1
                stack.append((child, iter(graph[child])))


def _composites(
    canonical: Mapping[int, Tuple[int, ...]], exclusions: FrozenSet[int]
) -> Dict[Tuple[int, int], int]:
    out: Dict[Tuple[int, int], int] = {}
    for cp, mapping in canonical.items():
        # Singletons and excluded codepoints are never composed.
        if len(mapping) != 2 or cp in exclusions:
            continue
        pair = (mapping[0], mapping[1])
        prev = out.get(pair)
        if prev is not None:
            raise TableLoadError(
                f"ambiguous composition: U+{prev:04X} and U+{cp:04X} both decompose to "
                + " ".join(f"U+{c:04X}" for c in mapping)
            )
        out[pair] = cp
    return out


@dataclass(frozen=True)
class TableStore:
    unicode_version: str
    canonical: Mapping[int, Tuple[int, ...]]
    compatibility: Mapping[int, Tuple[int, ...]]
    combining_classes: RangeTable
    composites: Mapping[Tuple[int, int], int]
    exclusions: FrozenSet[int]
    quick_checks: Mapping[NormalizationForm, RangeTable]
    source: Optional[str] = None
    sha256: Optional[str] = None

    @staticmethod
    def from_artifact(payload: Mapping[str, Any], source: Optional[str] = None, sha256: Optional[str] = None) -> "TableStore":
        """Build the store from a schema-valid artifact payload.

        Checks the structural invariants the schema cannot express: ranges are
        sorted and disjoint, no Hangul codepoints, no surrogates, and every
        decomposition expands in finitely many steps.
        """

        canonical = _decompositions(payload["canonical_decompositions"], "canonical_decompositions")
        compatibility = _decompositions(payload["compatibility_decompositions"], "compatibility_decompositions")
        check_acyclic(canonical, "canonical_decompositions")
        check_acyclic({**canonical, **compatibility}, "compatibility_decompositions")

        ccc = RangeTable.from_rows(payload["combining_classes"], "combining_classes", default=0, convert=int)
        exclusions = frozenset(RangeTable.from_rows(payload["composition_exclusions"], "composition_exclusions").codepoints())

        qc = payload["quick_check"]
        quick_checks = {
            form: RangeTable.from_rows(qc[form.name], f"quick_check/{form.name}", default=QuickCheck.YES, convert=QuickCheck)
            for form in NormalizationForm
        }

        return TableStore(
            unicode_version=payload["unicode_version"],
            canonical=MappingProxyType(canonical),
            compatibility=MappingProxyType(compatibility),
            combining_classes=ccc,
            composites=MappingProxyType(_composites(canonical, exclusions)),
            exclusions=exclusions,
            quick_checks=MappingProxyType(quick_checks),
            source=source,
            sha256=sha256,
        )

    def decomposition(self, cp: int, kind: DecompositionKind = DecompositionKind.CANONICAL) -> Optional[Tuple[int, ...]]:
        """Single-level mapping of `cp`, or None when it decomposes to itself."""
        if kind is DecompositionKind.COMPATIBILITY:
            mapping = self.compatibility.get(cp)
            if mapping is not None:
                return mapping
        return self.canonical.get(cp)

    def combining_class(self, cp: int) -> int:
        return self.combining_classes.lookup(cp)

    def composite(self, starter: int, cp: int) -> Optional[int]:
        return self.composites.get((starter, cp))

    def is_excluded(self, cp: int) -> bool:
        return cp in self.exclusions

    def quick_check(self, cp: int, form: NormalizationForm) -> QuickCheck:
        check = hangul.quick_check(cp, form)
        if check is not None:
            return check
        return self.quick_checks[form].lookup(cp)

    def stats(self) -> Dict[str, int]:
        return {
            "canonical_decompositions": len(self.canonical),
            "compatibility_decompositions": len(self.compatibility),
            "combining_class_ranges": len(self.combining_classes),
            "compositions": len(self.composites),
            "composition_exclusions": len(self.exclusions),
            **{f"quick_check_{form.name}_ranges": len(self.quick_checks[form]) for form in NormalizationForm},
        }


def load_tables(path: Path | None = None, verify_digest: bool | None = None) -> TableStore:
    artifact = load_artifact(path, verify_digest=verify_digest)
    store = TableStore.from_artifact(artifact.payload, source=str(artifact.path), sha256=artifact.sha256)
    logger.debug("table store ready: Unicode %s, %s", store.unicode_version, store.stats())
    return store


_TABLES: Once[TableStore] = Once(load_tables, name="Unicode normalization tables")


def get_tables() -> TableStore:
    """The process-wide Table Store, loaded on first use.

    Raises TableLoadError (the same one, every time) if the artifact could not
    be loaded.
    """
    return _TABLES.get()


def init_tables() -> TableStore:
    """Load the tables now; call at startup to surface TableLoadError early."""
    store = get_tables()
    logger.info("Unicode %s normalization tables loaded from %s", store.unicode_version, store.source)
    return store


def reset_tables() -> None:
    """Drop the loaded tables (or the recorded failure).

    For tests and tools that point UNORM_TABLES at another artifact; running
    normalizations keep the store they already hold.
    """
    _TABLES.reset()
