"""
Foundation models for IntelliImport.

This module provides the data contract shared by the auto-import engine and
its collaborators (module resolver, symbol indexer, edit synthesizer).

Everything here is an immutable value object except ``AutoImportOptions``,
which callers build once per engine. None of these records hold state across
queries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Dict, Mapping, Optional, Tuple


class ImportType(Enum):
    """Where a module comes from, as reported by the module resolver."""

    BUILT_IN = "builtin"
    THIRD_PARTY = "thirdparty"
    LOCAL = "local"


class ImportGroup(IntEnum):
    """
    Tier of an import statement.

    The numeric values are only the default order. Comparisons go through
    ``AutoImportOptions.group_rank`` so a project can inject another order.
    """

    BUILT_IN = 0
    THIRD_PARTY = 1
    LOCAL = 2
    LOCAL_RELATIVE = 3


DEFAULT_IMPORT_GROUP_ORDER: Tuple[ImportGroup, ...] = (
    ImportGroup.BUILT_IN,
    ImportGroup.THIRD_PARTY,
    ImportGroup.LOCAL,
    ImportGroup.LOCAL_RELATIVE,
)


class SymbolKind(IntEnum):
    """LSP symbol kinds."""

    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26


class CompletionItemKind(IntEnum):
    """LSP completion item kinds."""

    TEXT = 1
    METHOD = 2
    FUNCTION = 3
    CONSTRUCTOR = 4
    FIELD = 5
    VARIABLE = 6
    CLASS = 7
    INTERFACE = 8
    MODULE = 9
    PROPERTY = 10
    UNIT = 11
    VALUE = 12
    ENUM = 13
    KEYWORD = 14
    SNIPPET = 15
    COLOR = 16
    FILE = 17
    REFERENCE = 18
    FOLDER = 19
    ENUM_MEMBER = 20
    CONSTANT = 21
    STRUCT = 22
    EVENT = 23
    OPERATOR = 24
    TYPE_PARAMETER = 25


_COMPLETION_KIND_BY_SYMBOL_KIND: Dict[SymbolKind, CompletionItemKind] = {
    SymbolKind.FILE: CompletionItemKind.FILE,
    SymbolKind.MODULE: CompletionItemKind.MODULE,
    SymbolKind.NAMESPACE: CompletionItemKind.MODULE,
    SymbolKind.PACKAGE: CompletionItemKind.FOLDER,
    SymbolKind.CLASS: CompletionItemKind.CLASS,
    SymbolKind.METHOD: CompletionItemKind.METHOD,
    SymbolKind.PROPERTY: CompletionItemKind.PROPERTY,
    SymbolKind.FIELD: CompletionItemKind.FIELD,
    SymbolKind.CONSTRUCTOR: CompletionItemKind.CONSTRUCTOR,
    SymbolKind.ENUM: CompletionItemKind.ENUM,
    SymbolKind.INTERFACE: CompletionItemKind.INTERFACE,
    SymbolKind.FUNCTION: CompletionItemKind.FUNCTION,
    SymbolKind.VARIABLE: CompletionItemKind.VARIABLE,
    SymbolKind.ARRAY: CompletionItemKind.VARIABLE,
    SymbolKind.STRING: CompletionItemKind.CONSTANT,
    SymbolKind.NUMBER: CompletionItemKind.VALUE,
    SymbolKind.BOOLEAN: CompletionItemKind.VALUE,
    SymbolKind.CONSTANT: CompletionItemKind.CONSTANT,
    SymbolKind.NULL: CompletionItemKind.CONSTANT,
    SymbolKind.OBJECT: CompletionItemKind.VALUE,
    SymbolKind.KEY: CompletionItemKind.VALUE,
    SymbolKind.ENUM_MEMBER: CompletionItemKind.ENUM_MEMBER,
    SymbolKind.STRUCT: CompletionItemKind.STRUCT,
    SymbolKind.EVENT: CompletionItemKind.EVENT,
    SymbolKind.OPERATOR: CompletionItemKind.OPERATOR,
    SymbolKind.TYPE_PARAMETER: CompletionItemKind.TYPE_PARAMETER,
}


def to_completion_item_kind(kind: Optional[SymbolKind]) -> Optional[CompletionItemKind]:
    """Map a symbol kind to the completion kind shown in completion lists."""
    if kind is None:
        return None
    return _COMPLETION_KIND_BY_SYMBOL_KIND.get(kind)


# ============================================================================
# Analyzer-side symbols
# ============================================================================


class DeclarationType(Enum):
    INTRINSIC = "intrinsic"
    VARIABLE = "variable"
    PARAMETER = "parameter"
    FUNCTION = "function"
    CLASS = "class"
    SPECIAL_BUILTIN_CLASS = "special_builtin_class"
    ALIAS = "alias"


@dataclass(frozen=True)
class Declaration:
    """
    One declaration of a module-level symbol.

    Alias declarations (``from .impl import Widget``) may carry the file the
    alias resolves to and the name it has there.
    """

    type: DeclarationType
    is_constant: bool = False
    is_final: bool = False
    alias_module_path: Optional[str] = None
    alias_symbol_name: Optional[str] = None


@dataclass(frozen=True)
class Symbol:
    """A module-level symbol produced by the analyzer for a project file."""

    name: str
    declarations: Tuple[Declaration, ...] = ()
    externally_hidden: bool = False
    in_dunder_all: bool = False

    def is_externally_hidden(self) -> bool:
        return self.externally_hidden

    def is_in_dunder_all(self) -> bool:
        return self.in_dunder_all


# ============================================================================
# Library index
# ============================================================================


@dataclass(frozen=True)
class IndexAliasData:
    """Points a re-exported name back to the file and name it was declared with."""

    module_path: str
    original_name: str
    kind: Optional[SymbolKind] = None


@dataclass(frozen=True)
class IndexSymbolData:
    name: str
    kind: Optional[SymbolKind] = None
    externally_visible: bool = True
    alias: Optional[IndexAliasData] = None


@dataclass(frozen=True)
class IndexResults:
    """Prebuilt index entry for one module file."""

    symbols: Tuple[IndexSymbolData, ...] = ()
    private_or_protected: bool = False


@dataclass(frozen=True)
class SourceFileInfo:
    """What the analyzer knows about one project file."""

    file_path: str
    shadows: Tuple[str, ...] = ()
    module_symbol_table: Optional[Mapping[str, Symbol]] = None
    cached_index_results: Optional[IndexResults] = None


# ============================================================================
# Candidates
# ============================================================================


@dataclass(frozen=True)
class AutoImportSymbol:
    """
    A candidate read from a module symbol table.

    Exactly one of ``symbol`` (analyzed project symbol) or index metadata
    backs the candidate; ``import_alias`` is set when the candidate is a
    re-export that must go through alias resolution.
    """

    name: str
    kind: Optional[SymbolKind] = None
    symbol: Optional[Symbol] = None
    import_alias: Optional[IndexAliasData] = None

    def is_variable(self) -> bool:
        return self.kind == SymbolKind.VARIABLE

    def is_externally_hidden(self) -> bool:
        return self.symbol is not None and self.symbol.is_externally_hidden()

    def is_alias_only(self) -> bool:
        """True when every declaration of the backing symbol is an alias import."""
        if self.symbol is None or not self.symbol.declarations:
            return False
        return all(d.type == DeclarationType.ALIAS for d in self.symbol.declarations)

    def is_in_dunder_all(self) -> bool:
        return self.symbol is not None and self.symbol.is_in_dunder_all()


# ============================================================================
# Module resolution
# ============================================================================


@dataclass(frozen=True)
class ExecutionEnvironment:
    """Search roots used to turn file paths into dotted module names."""

    root: str
    extra_paths: Tuple[str, ...] = ()
    stub_path: Optional[str] = None
    stdlib_paths: Tuple[str, ...] = ()
    python_search_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleNameAndType:
    module_name: str
    import_type: ImportType = ImportType.LOCAL
    is_local_typings_file: bool = False


@dataclass(frozen=True)
class ImportResult:
    """Outcome of resolving one import statement's module."""

    import_name: str
    is_import_found: bool = False
    resolved_path: Optional[str] = None
    import_type: ImportType = ImportType.LOCAL
    is_relative: bool = False
    is_local_typings_file: bool = False
    implicit_imports: Mapping[str, str] = field(default_factory=dict)


# ============================================================================
# Text edits
# ============================================================================


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line and character offset."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


@dataclass(frozen=True)
class TextEdit:
    range: Range
    new_text: str


# ============================================================================
# Current-file import statements
# ============================================================================


class ImportStatementKind(Enum):
    IMPORT = "import"
    IMPORT_FROM = "import_from"


@dataclass(frozen=True)
class ImportedName:
    """One ``name [as alias]`` entry of an import statement."""

    name: str
    alias: Optional[str] = None
    range: Optional[Range] = None


@dataclass(frozen=True)
class ImportStatement:
    """
    A top-level import statement of the current file.

    ``import a, b`` produces one statement per module, each with the module
    entry in ``names`` and the shared statement ``range``. ``module_name``
    keeps the leading dots of relative imports.
    """

    kind: ImportStatementKind
    module_name: str
    range: Range
    level: int = 0
    names: Tuple[ImportedName, ...] = ()
    import_result: Optional[ImportResult] = None
    resolved_path: Optional[str] = None
    follows_non_import_statement: bool = False
    is_wildcard: bool = False

    @property
    def is_import_from(self) -> bool:
        return self.kind == ImportStatementKind.IMPORT_FROM

    @property
    def alias(self) -> Optional[str]:
        """Alias of a bare ``import module as alias`` statement."""
        if self.kind != ImportStatementKind.IMPORT or not self.names:
            return None
        return self.names[0].alias

    def find_name(self, name: str) -> Optional[ImportedName]:
        for imported in self.names:
            if imported.name == name:
                return imported
        return None


# ============================================================================
# Engine records
# ============================================================================


@dataclass(frozen=True)
class ImportParts:
    """How a file (or a module-as-candidate) is imported, computed once per file."""

    import_name: str
    file_path: str
    dot_count: int
    module_name_and_type: ModuleNameAndType
    symbol_name: Optional[str] = None
    import_from: Optional[str] = None


@dataclass(frozen=True)
class AliasCandidate:
    """
    One competitor for an alias key ``(module_path, original_name)``.

    ``is_direct`` marks the seed registered for a symbol that was already
    emitted directly from its declaring file.
    """

    import_parts: ImportParts
    import_group: ImportGroup
    symbol: Optional[Symbol] = None
    kind: Optional[SymbolKind] = None
    is_direct: bool = False


@dataclass(frozen=True)
class AutoImportResult:
    """
    A single auto-import suggestion.

    ``edits`` is None when edit computation was skipped (lazy edit mode) and
    an empty tuple when no file change is needed.
    """

    name: str
    insertion_text: str
    source: Optional[str] = None
    edits: Optional[Tuple[TextEdit, ...]] = ()
    alias: Optional[str] = None
    kind: Optional[CompletionItemKind] = None
    symbol: Optional[Symbol] = None


@dataclass(frozen=True)
class AbbreviationInfo:
    import_name: str
    import_from: Optional[str] = None


PatternMatcher = Callable[[str, str], bool]


@dataclass
class AutoImportOptions:
    """Per-engine options of the auto-import query."""

    pattern_matcher: Optional[PatternMatcher] = None
    allow_variable_in_all: bool = False
    lazy_edit: bool = False
    import_group_order: Tuple[ImportGroup, ...] = DEFAULT_IMPORT_GROUP_ORDER

    def group_rank(self, group: ImportGroup) -> int:
        try:
            return self.import_group_order.index(group)
        except ValueError:
            return len(self.import_group_order) + int(group)
