"""
Candidate Aggregator

``AutoImporter`` answers auto-import queries for one file. Each query runs
in three phases that feed one result map and one alias table:

1. project modules (analyzed files of the workspace)
2. library index (prebuilt index results, skipping files seen in phase 1)
3. alias resolution (one winner per re-exported declaration)

All working state (result map, alias table, perf counters, memoized module
names) belongs to a ``CandidateAggregator`` created for the query and thrown
away afterwards. The symbol maps handed to the importer are never mutated.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Tuple

from ...performance.perf_counters import PerfCounters, Stopwatch, accumulate_ms
from ..foundation.cancellation import CancellationToken, throw_if_cancellation_requested
from ..foundation.errors import ModuleResolutionError
from ..foundation.models import (
    AbbreviationInfo,
    AliasCandidate,
    AutoImportOptions,
    AutoImportResult,
    AutoImportSymbol,
    ExecutionEnvironment,
    ImportGroup,
    ImportParts,
    ImportType,
    IndexAliasData,
    IndexResults,
    ModuleNameAndType,
    SymbolKind,
    to_completion_item_kind,
)
from .alias_table import AliasResolutionTable
from .import_statements import (
    ImportStatements,
    get_import_group,
    get_import_group_from_module_name_and_type,
)
from .insertion import InsertionTextDecider
from .module_symbols import ModuleSymbolMap, ModuleSymbolTable, module_symbol_table_from_index
from .results import AutoImportResultMap
from .similarity import SimilarityMatcher
from .visibility import VisibilityFilter

if TYPE_CHECKING:
    from ...interfaces import EditSynthesizer, ModuleResolver

logger = logging.getLogger(__name__)

SymbolImportSource = Tuple[str, ImportGroup, ModuleNameAndType]


def is_stub_file_or_has_init(symbol_map: Mapping[str, object], file_path: str) -> Tuple[bool, bool]:
    """Return ``(is_stub, has_init)`` for ``file_path`` within ``symbol_map``."""
    init_path = os.path.join(os.path.dirname(file_path), "__init__.py")
    is_stub = file_path.endswith(".pyi")
    has_init = init_path in symbol_map or init_path + "i" in symbol_map
    return is_stub, has_init


class AutoImporter:
    """
    Auto-import candidates for the current file.

    Args:
        exec_env: execution environment used for module-name resolution
        resolver: ModuleResolver mapping file paths to module names
        import_statements: existing imports of the current file
        module_symbol_map: candidate tables of the analyzed project files
        library_map: prebuilt library index, file path -> IndexResults
        excludes: names never suggested (typically names already bound in the file)
        options: AutoImportOptions (matcher, variable policy, lazy edits, group order)
        edit_synthesizer: EditSynthesizer producing import edits; required
            unless ``options.lazy_edit`` is set
    """

    def __init__(
        self,
        exec_env: ExecutionEnvironment,
        resolver: "ModuleResolver",
        import_statements: ImportStatements,
        module_symbol_map: ModuleSymbolMap,
        library_map: Optional[Mapping[str, IndexResults]] = None,
        excludes: Iterable[str] = (),
        options: Optional[AutoImportOptions] = None,
        edit_synthesizer: Optional["EditSynthesizer"] = None,
    ):
        self.options = options or AutoImportOptions()
        if edit_synthesizer is None and not self.options.lazy_edit:
            raise ValueError("edit_synthesizer is required unless lazy_edit is set")

        self.exec_env = exec_env
        self.resolver = resolver
        self.import_statements = import_statements
        self.module_symbol_map = module_symbol_map
        self.library_map = library_map
        self.excludes = frozenset(excludes)
        self.edit_synthesizer = edit_synthesizer

        self.similarity = SimilarityMatcher(self.options.pattern_matcher)
        self.visibility = VisibilityFilter(self.options.allow_variable_in_all)
        self._last_perf = PerfCounters(index_used=library_map is not None)

    def get_auto_import_candidates(
        self,
        word: str,
        exact: bool = False,
        abbreviation: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> List[AutoImportResult]:
        """
        Candidates whose name matches ``word``.

        Raises:
            OperationCanceledError: if ``token`` is cancelled during the query
        """
        return self._get_candidates(word, exact, abbreviation, token).to_list()

    def get_candidates_for_abbr(
        self,
        abbreviation: Optional[str],
        abbreviation_info: AbbreviationInfo,
        token: Optional[CancellationToken] = None,
    ) -> List[AutoImportResult]:
        """Exact candidates for ``abbreviation_info.import_name`` from ``abbreviation_info.import_from``."""
        results = self._get_candidates(abbreviation_info.import_name, True, abbreviation, token)
        return [r for r in results.get(abbreviation_info.import_name) if r.source == abbreviation_info.import_from]

    def get_perf_info(self) -> PerfCounters:
        """Counters of the most recent query."""
        return self._last_perf

    def _get_candidates(
        self,
        word: str,
        exact: bool,
        abbreviation: Optional[str],
        token: Optional[CancellationToken],
    ) -> AutoImportResultMap:
        aggregator = CandidateAggregator(self, word, exact, abbreviation, token)
        self._last_perf = aggregator.perf_counters
        return aggregator.run()


class CandidateAggregator:
    """Working state of a single query."""

    def __init__(
        self,
        importer: AutoImporter,
        word: str,
        exact: bool,
        abbreviation: Optional[str],
        token: Optional[CancellationToken],
    ):
        self.importer = importer
        self.word = word
        self.exact = exact
        self.abbreviation = abbreviation
        self.token = token

        options = importer.options
        self.perf_counters = PerfCounters(index_used=importer.library_map is not None)
        self.results = AutoImportResultMap(importer.excludes)
        self.alias_table = AliasResolutionTable(options.group_rank, self.perf_counters)
        self.decider = InsertionTextDecider(
            importer.import_statements,
            importer.edit_synthesizer,
            lazy_edit=options.lazy_edit,
            perf_counters=self.perf_counters,
        )

        self._module_names: Dict[str, Optional[ModuleNameAndType]] = {}
        self._symbol_sources: Dict[str, Optional[SymbolImportSource]] = {}

    def run(self) -> AutoImportResultMap:
        stopwatch = Stopwatch()
        try:
            self.add_from_module_map()
            self.add_from_library_map()
            self.add_from_alias_table()
        finally:
            self.perf_counters.total_time_ms = stopwatch.elapsed_ms()
        return self.results

    # ------------------------
    # Phases
    # ------------------------

    def add_from_module_map(self) -> None:
        module_map = self.importer.module_symbol_map
        with accumulate_ms(self.perf_counters, "module_time_ms"):
            for file_path, table in module_map.items():
                is_stub, has_init = is_stub_file_or_has_init(module_map, file_path)
                self._process_module_symbol_table(table, file_path, is_stub, has_init)

    def add_from_library_map(self) -> None:
        library_map = self.importer.library_map
        if library_map is None:
            return

        with accumulate_ms(self.perf_counters, "index_time_ms"):
            for file_path, index_results in library_map.items():
                if index_results.private_or_protected:
                    continue
                if file_path in self.importer.module_symbol_map:
                    continue
                is_stub, has_init = is_stub_file_or_has_init(library_map, file_path)
                table = module_symbol_table_from_index(index_results, library=True)
                self._process_module_symbol_table(table, file_path, is_stub, has_init)

    def add_from_alias_table(self) -> None:
        throw_if_cancellation_requested(self.token)
        with accumulate_ms(self.perf_counters, "alias_time_ms"):
            self.alias_table.resolve_all(
                self.results,
                self.importer.import_statements,
                self.decider,
                self.abbreviation,
                self.token,
            )

    # ------------------------
    # Per-file processing
    # ------------------------

    def _process_module_symbol_table(
        self, table: ModuleSymbolTable, file_path: str, is_stub: bool, has_init: bool
    ) -> None:
        throw_if_cancellation_requested(self.token)

        symbol_source = self._import_source_for_symbols(file_path)
        if symbol_source is None:
            return
        import_source, import_group, module_name_and_type = symbol_source
        dot_count = import_source.count(".")

        for candidate in table:
            throw_if_cancellation_requested(self.token)
            self._count_symbol(candidate, table.library)

            name = candidate.name
            if not self.importer.visibility.include(candidate, is_stub, table.library):
                continue
            if not self.importer.similarity.match(self.word, name, self.exact):
                continue
            if self.results.contains_name(name, import_source):
                continue

            parts = ImportParts(
                import_name=name,
                file_path=file_path,
                dot_count=dot_count,
                module_name_and_type=module_name_and_type,
                symbol_name=name,
                import_from=import_source,
            )

            if candidate.import_alias is not None:
                self.alias_table.add(
                    candidate.import_alias,
                    AliasCandidate(
                        parts,
                        import_group,
                        symbol=candidate.symbol,
                        kind=candidate.import_alias.kind or candidate.kind,
                    ),
                )
                continue

            self._emit_direct(candidate, parts, import_group)

        if not is_stub and not has_init:
            return

        module_parts = self._module_import_parts(file_path)
        if module_parts is None:
            return
        if not self.importer.similarity.match(self.word, module_parts.import_name, self.exact):
            return
        if self.results.contains_name(module_parts.import_name, module_parts.import_from):
            return

        self.alias_table.add(
            IndexAliasData(file_path, module_parts.import_name, SymbolKind.MODULE),
            AliasCandidate(module_parts, import_group, kind=SymbolKind.MODULE),
        )

    def _emit_direct(self, candidate: AutoImportSymbol, parts: ImportParts, import_group: ImportGroup) -> None:
        import_statements = self.importer.import_statements
        if self.abbreviation and import_statements.already_imports(
            parts.file_path, parts.import_from, parts.symbol_name
        ):
            return

        decision = self.decider.decide(
            parts.import_from or parts.import_name,
            parts.import_name,
            self.abbreviation,
            parts.import_name,
            import_group,
            parts.file_path,
        )
        self.results.add(
            AutoImportResult(
                name=parts.import_name,
                insertion_text=decision.insertion_text,
                source=parts.import_from,
                edits=decision.edits,
                alias=self.abbreviation,
                kind=to_completion_item_kind(candidate.kind),
                symbol=candidate.symbol,
            )
        )

        # a re-export reaching the same declaration may still win in phase 3
        self.alias_table.add(
            IndexAliasData(parts.file_path, parts.import_name, candidate.kind),
            AliasCandidate(parts, import_group, symbol=candidate.symbol, kind=candidate.kind, is_direct=True),
        )

    def _count_symbol(self, candidate: AutoImportSymbol, library: bool) -> None:
        if candidate.symbol is not None:
            self.perf_counters.symbol_count += 1
        elif library:
            self.perf_counters.index_count += 1
        else:
            self.perf_counters.user_index_count += 1

    # ------------------------
    # Import parts
    # ------------------------

    def _import_source_for_symbols(self, file_path: str) -> Optional[SymbolImportSource]:
        """Module name, group and resolution of the file whose symbols are being imported."""
        if file_path in self._symbol_sources:
            return self._symbol_sources[file_path]

        source: Optional[SymbolImportSource] = None
        local_import = self.importer.import_statements.by_file_path(file_path)
        if local_import is not None:
            source = (
                local_import.module_name,
                get_import_group(local_import),
                ModuleNameAndType(local_import.module_name, ImportType.LOCAL, False),
            )
        else:
            module = self._module_name_and_type(file_path)
            if module is not None:
                source = (module.module_name, get_import_group_from_module_name_and_type(module), module)

        self._symbol_sources[file_path] = source
        return source

    def _module_import_parts(self, file_path: str) -> Optional[ImportParts]:
        """Import parts of the module itself, as a candidate of its parent package."""
        module_path = file_path
        if os.path.splitext(os.path.basename(file_path))[0] == "__init__":
            module_path = os.path.dirname(file_path)

        module = self._module_name_and_type(module_path)
        if module is None:
            return None

        module_name = module.module_name
        index = module_name.rfind(".")
        symbol_name = module_name[index + 1 :] if index > 0 else None
        import_from = module_name[:index] if index > 0 else None
        return ImportParts(
            import_name=symbol_name or module_name,
            file_path=file_path,
            dot_count=module_name.count("."),
            module_name_and_type=module,
            symbol_name=symbol_name,
            import_from=import_from,
        )

    def _module_name_and_type(self, file_path: str) -> Optional[ModuleNameAndType]:
        if file_path in self._module_names:
            return self._module_names[file_path]

        module: Optional[ModuleNameAndType] = None
        with accumulate_ms(self.perf_counters, "module_resolve_time_ms"):
            try:
                module = self.importer.resolver.get_module_name_for_import(file_path, self.importer.exec_env)
            except ModuleResolutionError as e:
                logger.debug(f"No module name for {file_path}: {e}")

        if module is not None and not module.module_name:
            logger.debug(f"No module name for {file_path}")
            module = None

        self._module_names[file_path] = module
        return module
