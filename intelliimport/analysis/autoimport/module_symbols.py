"""
Candidate symbol tables.

A ``ModuleSymbolMap`` maps a module file path to the candidates it declares.
Tables come either from analyzed project files (``Symbol`` objects with
declarations) or from prebuilt index results; the aggregator reads both the
same way and never mutates them.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

from ..foundation.cancellation import CancellationToken, throw_if_cancellation_requested
from ..foundation.models import (
    AutoImportSymbol,
    DeclarationType,
    IndexAliasData,
    IndexResults,
    SourceFileInfo,
    Symbol,
    SymbolKind,
)
from ..foundation.symbol_names import is_private_or_protected_name

logger = logging.getLogger(__name__)


class ModuleSymbolTable:
    """
    Candidates of one module file.

    Args:
        symbols: candidates in declaration order
        library: True when the table comes from the library index
    """

    def __init__(self, symbols: Iterable[AutoImportSymbol] = (), library: bool = False):
        self._symbols: Tuple[AutoImportSymbol, ...] = tuple(symbols)
        self.library = library

    def __iter__(self) -> Iterator[AutoImportSymbol]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def names(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self._symbols)


ModuleSymbolMap = Dict[str, ModuleSymbolTable]

_KIND_BY_DECLARATION_TYPE = {
    DeclarationType.FUNCTION: SymbolKind.FUNCTION,
    DeclarationType.CLASS: SymbolKind.CLASS,
    DeclarationType.SPECIAL_BUILTIN_CLASS: SymbolKind.CLASS,
}


def _symbol_kind(symbol: Symbol) -> Optional[SymbolKind]:
    declaration = symbol.declarations[0]
    if declaration.type == DeclarationType.VARIABLE:
        if declaration.is_constant or declaration.is_final:
            return SymbolKind.CONSTANT
        return SymbolKind.VARIABLE
    return _KIND_BY_DECLARATION_TYPE.get(declaration.type)


def module_symbol_table_from_symbols(symbols: Mapping[str, Symbol]) -> ModuleSymbolTable:
    """
    Build a table from an analyzed module symbol table.

    Symbols without declarations are skipped. A symbol first declared by an
    alias import is kept only when the alias resolved to a file; it then
    reaches the results through alias resolution.
    """
    candidates = []
    for name, symbol in symbols.items():
        if not symbol.declarations:
            continue

        declaration = symbol.declarations[0]
        if declaration.type == DeclarationType.ALIAS:
            if not declaration.alias_module_path:
                continue
            alias = IndexAliasData(
                module_path=declaration.alias_module_path,
                original_name=declaration.alias_symbol_name or name,
            )
            candidates.append(AutoImportSymbol(name=name, symbol=symbol, import_alias=alias))
            continue

        candidates.append(AutoImportSymbol(name=name, kind=_symbol_kind(symbol), symbol=symbol))

    return ModuleSymbolTable(candidates, library=False)


def module_symbol_table_from_index(index_results: IndexResults, library: bool) -> ModuleSymbolTable:
    """Build a table from index results, skipping entries that are not externally visible."""
    return ModuleSymbolTable(
        (
            AutoImportSymbol(name=data.name, kind=data.kind, import_alias=data.alias)
            for data in index_results.symbols
            if data.externally_visible
        ),
        library=library,
    )


def _module_stem(file_path: str) -> str:
    return os.path.splitext(os.path.basename(file_path))[0]


def build_module_symbols_map(
    files: Iterable[SourceFileInfo],
    include_index_user_symbols: bool = False,
    token: Optional[CancellationToken] = None,
) -> ModuleSymbolMap:
    """
    Build the project ``ModuleSymbolMap`` from analyzed files.

    Args:
        files: project files known to the analyzer
        include_index_user_symbols: fall back to cached index results for
            files that have no analyzed symbol table
        token: cancellation token, checked once per file

    Returns:
        Mapping of file path to its candidate table
    """
    module_symbol_map: ModuleSymbolMap = {}

    for file in files:
        throw_if_cancellation_requested(token)

        if file.shadows:
            logger.debug(f"Skipping shadowed file {file.file_path}")
            continue

        if is_private_or_protected_name(_module_stem(file.file_path)):
            continue

        if file.module_symbol_table is not None:
            module_symbol_map[file.file_path] = module_symbol_table_from_symbols(file.module_symbol_table)
            continue

        index_results = file.cached_index_results
        if index_results is not None and include_index_user_symbols and not index_results.private_or_protected:
            module_symbol_map[file.file_path] = module_symbol_table_from_index(index_results, library=False)

    return module_symbol_map
