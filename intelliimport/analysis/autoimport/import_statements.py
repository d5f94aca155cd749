"""
Import-Statement Inspector

Read-only view over the current file's module-level import statements, used
to avoid duplicate suggestions and to reuse imports that are already there.
"""

from __future__ import annotations

import ast
import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from ..foundation.models import (
    ExecutionEnvironment,
    ImportedName,
    ImportGroup,
    ImportResult,
    ImportStatement,
    ImportStatementKind,
    ImportType,
    ModuleNameAndType,
    Range,
)
from ..foundation.source_text import SourceText

if TYPE_CHECKING:
    from ...interfaces import ModuleResolver

logger = logging.getLogger(__name__)


class ImportStatements:
    """
    Existing imports of one file.

    ``by_file_path`` prefers ``from`` statements over bare ``import``
    statements that load the same file.
    """

    def __init__(
        self,
        ordered_imports: Iterable[ImportStatement] = (),
        map_by_file_path: Optional[Dict[str, ImportStatement]] = None,
        implicit_imports: Optional[Dict[str, ImportedName]] = None,
    ):
        self.ordered_imports: List[ImportStatement] = list(ordered_imports)
        self._map_by_file_path: Dict[str, ImportStatement] = dict(map_by_file_path or {})
        self._implicit_imports: Dict[str, ImportedName] = dict(implicit_imports or {})

    def _add(self, statement: ImportStatement) -> None:
        self.ordered_imports.append(statement)
        path = statement.resolved_path
        if not path:
            return
        if statement.is_import_from or path not in self._map_by_file_path:
            self._map_by_file_path[path] = statement

    def _add_implicit_import(self, path: str, imported: ImportedName) -> None:
        self._implicit_imports[path] = imported

    def by_file_path(self, path: str) -> Optional[ImportStatement]:
        return self._map_by_file_path.get(path)

    def has_file_path(self, path: str) -> bool:
        return path in self._map_by_file_path

    def by_module_name(self, module_name: str) -> Optional[ImportStatement]:
        """First ``from <module_name> import ...`` statement, if any."""
        for statement in self.ordered_imports:
            if statement.is_import_from and statement.module_name == module_name:
                return statement
        return None

    def already_imports(self, path: str, import_from: Optional[str], symbol_name: Optional[str]) -> bool:
        """
        True when the file at ``path`` is imported, or when the first statement
        for ``import_from`` is a ``from`` statement that already names ``symbol_name``.
        """
        if self.has_file_path(path):
            return True
        if not import_from:
            return False
        statement = next((s for s in self.ordered_imports if s.module_name == import_from), None)
        return (
            statement is not None
            and statement.is_import_from
            and symbol_name is not None
            and statement.find_name(symbol_name) is not None
        )

    def implicit_import(self, path: str) -> Optional[ImportedName]:
        """The ``from pkg import sub`` entry that already binds the module at ``path``."""
        return self._implicit_imports.get(path)

    def __len__(self) -> int:
        return len(self.ordered_imports)


def get_import_group(statement: ImportStatement) -> ImportGroup:
    result = statement.import_result
    if result is None:
        return ImportGroup.LOCAL
    if result.import_type == ImportType.BUILT_IN:
        return ImportGroup.BUILT_IN
    if result.import_type == ImportType.THIRD_PARTY or result.is_local_typings_file:
        return ImportGroup.THIRD_PARTY
    if result.is_relative:
        return ImportGroup.LOCAL_RELATIVE
    return ImportGroup.LOCAL


def get_import_group_from_module_name_and_type(module: ModuleNameAndType) -> ImportGroup:
    if module.is_local_typings_file or module.import_type == ImportType.THIRD_PARTY:
        return ImportGroup.THIRD_PARTY
    if module.import_type == ImportType.BUILT_IN:
        return ImportGroup.BUILT_IN
    return ImportGroup.LOCAL


def get_top_level_imports(
    source_text: str,
    file_path: str,
    resolver: Optional["ModuleResolver"] = None,
    exec_env: Optional[ExecutionEnvironment] = None,
    include_implicit_imports: bool = True,
) -> ImportStatements:
    """
    Parse ``source_text`` and collect its module-level import statements.

    Args:
        source_text: content of the current file
        file_path: path of the current file (anchor for relative imports)
        resolver: ModuleResolver used to find the file each import loads;
            without one, statements are collected unresolved
        exec_env: execution environment passed to the resolver
        include_implicit_imports: record submodules bound by ``from pkg import sub``

    Returns:
        ImportStatements (empty when the file does not parse)
    """
    try:
        tree = ast.parse(source_text, filename=file_path)
    except (SyntaxError, ValueError) as e:
        logger.warning(f"Cannot read imports of {file_path}: {e}")
        return ImportStatements()

    return collect_top_level_imports(
        tree,
        SourceText(source_text),
        file_path,
        resolver=resolver,
        exec_env=exec_env,
        include_implicit_imports=include_implicit_imports,
    )


def collect_top_level_imports(
    tree: ast.Module,
    source: SourceText,
    file_path: str,
    resolver: Optional["ModuleResolver"] = None,
    exec_env: Optional[ExecutionEnvironment] = None,
    include_implicit_imports: bool = True,
) -> ImportStatements:
    imports = ImportStatements()
    found_first_import = False
    follows_non_import = False

    for node in tree.body:
        if isinstance(node, ast.Import):
            found_first_import = True
            for statement in _process_import(node, source, file_path, resolver, exec_env, follows_non_import):
                imports._add(statement)
            follows_non_import = False
        elif isinstance(node, ast.ImportFrom):
            found_first_import = True
            statement, implicit = _process_import_from(
                node, source, file_path, resolver, exec_env, follows_non_import
            )
            imports._add(statement)
            if include_implicit_imports:
                for path, imported in implicit:
                    imports._add_implicit_import(path, imported)
            follows_non_import = False
        else:
            follows_non_import = found_first_import

    return imports


def _node_range(source: SourceText, node: ast.AST) -> Range:
    start = source.position_from_ast(node.lineno, node.col_offset)
    end = source.position_from_ast(node.end_lineno or node.lineno, node.end_col_offset or 0)
    return Range(start, end)


def _alias_range(source: SourceText, alias: ast.alias) -> Optional[Range]:
    if getattr(alias, "lineno", None) is None:
        return None
    return _node_range(source, alias)


def _resolve(
    resolver, exec_env, module_name: str, level: int, file_path: str, names: Tuple[str, ...] = ()
) -> Tuple[Optional[ImportResult], Optional[str]]:
    if resolver is None or exec_env is None:
        return None, None
    result = resolver.resolve_import(module_name, level, file_path, exec_env, names)
    resolved_path = result.resolved_path if result.is_import_found else None
    return result, resolved_path


def _process_import(
    node: ast.Import,
    source: SourceText,
    file_path: str,
    resolver: Optional["ModuleResolver"],
    exec_env,
    follows_non_import: bool,
) -> List[ImportStatement]:
    statements: List[ImportStatement] = []
    node_range = _node_range(source, node)
    for alias in node.names:
        import_result, resolved_path = _resolve(resolver, exec_env, alias.name, 0, file_path)
        statements.append(
            ImportStatement(
                kind=ImportStatementKind.IMPORT,
                module_name=alias.name,
                range=node_range,
                names=(ImportedName(alias.name, alias.asname, _alias_range(source, alias)),),
                import_result=import_result,
                resolved_path=resolved_path,
                follows_non_import_statement=follows_non_import,
            )
        )
    return statements


def _process_import_from(
    node: ast.ImportFrom,
    source: SourceText,
    file_path: str,
    resolver: Optional["ModuleResolver"],
    exec_env,
    follows_non_import: bool,
) -> Tuple[ImportStatement, List[Tuple[str, ImportedName]]]:
    level = int(node.level or 0)
    module = node.module or ""
    names = tuple(
        ImportedName(a.name, a.asname, _alias_range(source, a)) for a in node.names if a.name != "*"
    )
    is_wildcard = any(a.name == "*" for a in node.names)

    import_result, resolved_path = _resolve(
        resolver, exec_env, module, level, file_path, tuple(n.name for n in names)
    )

    implicit: List[Tuple[str, ImportedName]] = []
    if import_result is not None:
        for name, path in import_result.implicit_imports.items():
            imported = next((n for n in names if n.name == name), None)
            if imported is not None:
                implicit.append((path, imported))

    statement = ImportStatement(
        kind=ImportStatementKind.IMPORT_FROM,
        module_name="." * level + module,
        range=_node_range(source, node),
        level=level,
        names=names,
        import_result=import_result,
        resolved_path=resolved_path,
        follows_non_import_statement=follows_non_import,
        is_wildcard=is_wildcard,
    )
    return statement, implicit
