"""
IntelliImport API

High-level entry point wiring the auto-import engine to its default
collaborators: the search-path module resolver, the ast-based import reader
and the libcst-backed edit builder.
"""

import logging
from typing import Iterable, List, Mapping, Optional

from .analysis.autoimport.auto_importer import AutoImporter
from .analysis.autoimport.import_statements import get_top_level_imports
from .analysis.autoimport.module_symbols import ModuleSymbolMap, build_module_symbols_map
from .analysis.foundation.cancellation import CancellationToken, OperationCanceledError
from .analysis.foundation.models import (
    AbbreviationInfo,
    AutoImportOptions,
    AutoImportResult,
    ExecutionEnvironment,
    IndexResults,
    SourceFileInfo,
)
from .analysis.foundation.source_text import SourceText
from .analysis.index.indexer import index_files
from .analysis.resolution.module_resolver import SearchPathModuleResolver
from .config import IntelliImportConfig
from .interfaces import ModuleResolver
from .performance.perf_counters import PerfCounters
from .refactoring.import_edits import ImportEditBuilder

logger = logging.getLogger(__name__)


class AutoImportEngine:
    """
    One auto-import engine per workspace snapshot.

    The symbol maps are owned by the engine's caller and read only; every
    query builds its own ``AutoImporter`` over the current file's text.
    A cancelled query returns an empty list.
    """

    def __init__(
        self,
        exec_env: ExecutionEnvironment,
        module_symbol_map: Optional[ModuleSymbolMap] = None,
        library_map: Optional[Mapping[str, IndexResults]] = None,
        resolver: Optional[ModuleResolver] = None,
        config: Optional[IntelliImportConfig] = None,
        options: Optional[AutoImportOptions] = None,
    ):
        self.exec_env = exec_env
        self.module_symbol_map: ModuleSymbolMap = module_symbol_map or {}
        self.library_map = library_map
        self.resolver: ModuleResolver = resolver or SearchPathModuleResolver()
        self.config = config or IntelliImportConfig.default()
        self.options = options or self.config.to_options()
        self._last_perf = PerfCounters(index_used=library_map is not None)

    @classmethod
    def from_files(
        cls,
        exec_env: ExecutionEnvironment,
        files: Iterable[SourceFileInfo] = (),
        library_paths: Optional[Iterable[str]] = None,
        resolver: Optional[ModuleResolver] = None,
        config: Optional[IntelliImportConfig] = None,
        token: Optional[CancellationToken] = None,
    ) -> "AutoImportEngine":
        """
        Build an engine from analyzed project files and library module paths.

        Library modules are indexed from disk; unreadable ones are skipped.
        """
        config = config or IntelliImportConfig.default()
        resolver = resolver or SearchPathModuleResolver()
        module_symbol_map = build_module_symbols_map(
            files, config.candidate_settings.include_index_user_symbols, token
        )
        library_map = None
        if library_paths is not None:
            library_map = index_files(library_paths, resolver, exec_env)
        return cls(exec_env, module_symbol_map, library_map, resolver=resolver, config=config)

    def get_candidates(
        self,
        source_text: str,
        file_path: str,
        word: str,
        exact: bool = False,
        abbreviation: Optional[str] = None,
        excludes: Iterable[str] = (),
        token: Optional[CancellationToken] = None,
    ) -> List[AutoImportResult]:
        """
        Auto-import candidates for ``word`` typed in ``file_path``.

        Args:
            source_text: current content of the file being edited
            file_path: path of the file being edited
            word: typed prefix, or the exact name when ``exact`` is set
            exact: require the candidate name to equal ``word``
            abbreviation: alias the user wants the import to use
            excludes: names never suggested, on top of the configured ones
            token: cancellation token

        Returns:
            List of AutoImportResult, empty when the query was cancelled
        """
        importer = self._create_importer(source_text, file_path, excludes)
        return self._run(
            importer, lambda: importer.get_auto_import_candidates(word, exact, abbreviation, token)
        )

    def get_candidates_for_abbr(
        self,
        source_text: str,
        file_path: str,
        abbreviation: Optional[str],
        abbreviation_info: AbbreviationInfo,
        excludes: Iterable[str] = (),
        token: Optional[CancellationToken] = None,
    ) -> List[AutoImportResult]:
        """Exact lookup of ``abbreviation_info`` for an abbreviation typed in ``file_path``."""
        importer = self._create_importer(source_text, file_path, excludes)
        return self._run(
            importer, lambda: importer.get_candidates_for_abbr(abbreviation, abbreviation_info, token)
        )

    def get_perf_info(self) -> PerfCounters:
        """Counters of the most recent query."""
        return self._last_perf

    def _create_importer(self, source_text: str, file_path: str, excludes: Iterable[str]) -> AutoImporter:
        source = SourceText(source_text)
        import_statements = get_top_level_imports(source_text, file_path, self.resolver, self.exec_env)
        return AutoImporter(
            self.exec_env,
            self.resolver,
            import_statements,
            self.module_symbol_map,
            library_map=self.library_map,
            excludes=set(self.config.candidate_settings.excluded_names) | set(excludes),
            options=self.options,
            edit_synthesizer=ImportEditBuilder(source, self.options.group_rank),
        )

    def _run(self, importer: AutoImporter, query) -> List[AutoImportResult]:
        try:
            results = query()
        except OperationCanceledError:
            logger.debug("Auto-import query cancelled")
            results = []
        finally:
            self._last_perf = importer.get_perf_info()

        logger.debug(f"Auto-import query: {len(results)} result(s), {self._last_perf.summary()}")
        return results
