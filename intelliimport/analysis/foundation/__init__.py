"""
Foundation layer for IntelliImport.

Data contracts, naming predicates, cancellation and error types that every
other part of the engine depends on. It has no dependencies on other
analysis modules.
"""

from .cancellation import (
    CancellationToken,
    CancellationTokenSource,
    OperationCanceledError,
    throw_if_cancellation_requested,
)
from .errors import IntelliImportError, ModuleResolutionError
from .models import (
    AbbreviationInfo,
    AliasCandidate,
    AutoImportOptions,
    AutoImportResult,
    AutoImportSymbol,
    CompletionItemKind,
    Declaration,
    DeclarationType,
    DEFAULT_IMPORT_GROUP_ORDER,
    ExecutionEnvironment,
    ImportedName,
    ImportGroup,
    ImportParts,
    ImportResult,
    ImportStatement,
    ImportStatementKind,
    ImportType,
    IndexAliasData,
    IndexResults,
    IndexSymbolData,
    ModuleNameAndType,
    PatternMatcher,
    Position,
    Range,
    SourceFileInfo,
    Symbol,
    SymbolKind,
    TextEdit,
    to_completion_item_kind,
)
from .source_text import SourceText

__all__ = [
    "CancellationToken",
    "CancellationTokenSource",
    "OperationCanceledError",
    "throw_if_cancellation_requested",
    "IntelliImportError",
    "ModuleResolutionError",
    "AbbreviationInfo",
    "AliasCandidate",
    "AutoImportOptions",
    "AutoImportResult",
    "AutoImportSymbol",
    "CompletionItemKind",
    "Declaration",
    "DeclarationType",
    "DEFAULT_IMPORT_GROUP_ORDER",
    "ExecutionEnvironment",
    "ImportedName",
    "ImportGroup",
    "ImportParts",
    "ImportResult",
    "ImportStatement",
    "ImportStatementKind",
    "ImportType",
    "IndexAliasData",
    "IndexResults",
    "IndexSymbolData",
    "ModuleNameAndType",
    "PatternMatcher",
    "Position",
    "Range",
    "SourceFileInfo",
    "Symbol",
    "SymbolKind",
    "TextEdit",
    "to_completion_item_kind",
    "SourceText",
]
