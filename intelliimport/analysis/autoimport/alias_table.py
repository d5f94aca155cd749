"""
Alias Resolution Table

Collapses the re-export paths that reach one declaration into a single
import path. Competitors are keyed by the declaration they reach,
``(module_path, original_name)``, and compared by:

1. import group rank (lower wins)
2. number of dots in the import path (fewer wins)
3. backed by an analyzed symbol (wins over index-only metadata)
4. ``import_name``, ordinal comparison
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Tuple

from ..foundation.cancellation import CancellationToken, throw_if_cancellation_requested
from ..foundation.models import (
    AliasCandidate,
    AutoImportResult,
    ImportGroup,
    IndexAliasData,
    to_completion_item_kind,
)
from ...performance.perf_counters import PerfCounters

if TYPE_CHECKING:
    from .import_statements import ImportStatements
    from .insertion import InsertionTextDecider
    from .results import AutoImportResultMap

logger = logging.getLogger(__name__)

AliasKey = Tuple[str, str]


def _compare_strings(left: str, right: str) -> int:
    return (left > right) - (left < right)


def compare_alias_candidates(
    left: AliasCandidate,
    right: AliasCandidate,
    group_rank: Callable[[ImportGroup], int] = int,
) -> int:
    """Negative when ``left`` is the better import path, positive when ``right`` is."""
    group_comparison = group_rank(left.import_group) - group_rank(right.import_group)
    if group_comparison != 0:
        return group_comparison

    dot_comparison = left.import_parts.dot_count - right.import_parts.dot_count
    if dot_comparison != 0:
        return dot_comparison

    if left.symbol is not None and right.symbol is None:
        return -1
    if left.symbol is None and right.symbol is not None:
        return 1

    return _compare_strings(left.import_parts.import_name, right.import_parts.import_name)


class AliasResolutionTable:
    """
    Call-scoped table of alias competitors.

    Seeds (``AliasCandidate.is_direct``) stand for symbols already emitted
    straight from their declaring file. A seed that keeps its key produces
    nothing; a re-export that beats a seed replaces the direct record.
    """

    def __init__(
        self,
        group_rank: Callable[[ImportGroup], int] = int,
        perf_counters: Optional[PerfCounters] = None,
    ):
        self.group_rank = group_rank
        self.perf_counters = perf_counters
        self._entries: Dict[AliasKey, AliasCandidate] = {}
        self._seeds: Dict[AliasKey, AliasCandidate] = {}

    def add(self, alias: IndexAliasData, candidate: AliasCandidate) -> bool:
        """
        Offer ``candidate`` for the declaration ``alias`` points at.

        Returns:
            True if the candidate is now the stored winner for its key
        """
        if not alias.module_path or not alias.original_name:
            logger.debug(
                f"Dropping alias data without a target for {candidate.import_parts.import_name} "
                f"in {candidate.import_parts.file_path}"
            )
            if self.perf_counters is not None:
                self.perf_counters.dropped_alias_count += 1
            return False

        key = (alias.module_path, alias.original_name)
        if candidate.is_direct:
            self._seeds[key] = candidate

        existing = self._entries.get(key)
        if existing is None or compare_alias_candidates(existing, candidate, self.group_rank) > 0:
            self._entries[key] = candidate
            return True
        return False

    def get(self, module_path: str, original_name: str) -> Optional[AliasCandidate]:
        return self._entries.get((module_path, original_name))

    def items(self) -> Iterator[Tuple[AliasKey, AliasCandidate]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def resolve_all(
        self,
        results: "AutoImportResultMap",
        import_statements: "ImportStatements",
        decider: "InsertionTextDecider",
        abbreviation: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> List[AutoImportResult]:
        """
        Turn every surviving entry into a result and merge it into ``results``.

        Returns:
            the records added to ``results``
        """
        emitted: List[AutoImportResult] = []
        for key, winner in self.items():
            throw_if_cancellation_requested(token)
            if winner.is_direct:
                continue

            if self.perf_counters is not None:
                self.perf_counters.alias_count += 1

            parts = winner.import_parts
            seed = self._seeds.get(key)
            if seed is not None and seed.import_parts.import_name == parts.import_name:
                withdrawn = results.withdraw(seed.import_parts.import_name, seed.import_parts.import_from)
                if withdrawn is not None:
                    logger.debug(
                        f"{parts.import_name}: preferring {parts.import_from} over "
                        f"{seed.import_parts.import_from}"
                    )

            if abbreviation and import_statements.already_imports(
                parts.file_path, parts.import_from, parts.symbol_name
            ):
                continue

            if results.contains_name(parts.import_name, parts.import_from):
                continue

            kind = winner.kind
            if kind is None and seed is not None:
                kind = seed.kind

            decision = decider.decide(
                parts.import_from or parts.import_name,
                parts.symbol_name,
                abbreviation,
                parts.import_name,
                winner.import_group,
                parts.file_path,
            )
            result = AutoImportResult(
                name=parts.import_name,
                insertion_text=decision.insertion_text,
                source=parts.import_from,
                edits=decision.edits,
                alias=abbreviation,
                kind=to_completion_item_kind(kind),
                symbol=winner.symbol,
            )
            results.add(result)
            emitted.append(result)
        return emitted
