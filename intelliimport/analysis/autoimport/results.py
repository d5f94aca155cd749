"""
Result map of one auto-import query.

Results are grouped by name and keyed by ``(name, source)`` inside a group;
the map never holds two records for the same key. Groups and records keep
insertion order so repeated queries over the same inputs list their results
in the same order.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..foundation.models import AutoImportResult

ResultKey = Tuple[str, str]


class AutoImportResultMap:
    """
    Args:
        excludes: names treated as already present (never emitted)
    """

    def __init__(self, excludes: Iterable[str] = ()):
        self._excludes = frozenset(excludes)
        self._by_name: Dict[str, Dict[str, AutoImportResult]] = {}

    def contains_name(self, name: str, source: Optional[str]) -> bool:
        if name in self._excludes:
            return True
        return (source or "") in self._by_name.get(name, {})

    def add(self, result: AutoImportResult) -> None:
        entries = self._by_name.setdefault(result.name, {})
        source = result.source or ""
        if source in entries:
            raise ValueError(f"duplicate auto-import result {result.name!r} from {source!r}")
        entries[source] = result

    def withdraw(self, name: str, source: Optional[str]) -> Optional[AutoImportResult]:
        entries = self._by_name.get(name)
        if not entries:
            return None
        withdrawn = entries.pop(source or "", None)
        if not entries:
            del self._by_name[name]
        return withdrawn

    def get(self, name: str) -> List[AutoImportResult]:
        return list(self._by_name.get(name, {}).values())

    def keys(self) -> List[ResultKey]:
        return [(name, source) for name, entries in self._by_name.items() for source in entries]

    def to_list(self) -> List[AutoImportResult]:
        return [result for entries in self._by_name.values() for result in entries.values()]

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._by_name.values())

    def __iter__(self) -> Iterator[AutoImportResult]:
        return iter(self.to_list())
