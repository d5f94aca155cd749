"""
Module indexer.

Builds ``IndexResults`` for module files from their source text, the way the
library index consumed by the auto-importer is laid out:

- top-level classes, functions and assigned names become symbols;
- re-exports become alias entries that point at the file the name is
  declared in, so alias resolution can pick one import path per declaration;
- names that are private or protected, or left out of a literal ``__all__``,
  are recorded as not externally visible.

Re-export rules:
- ``import X as X`` / ``from m import X as X`` (redundant alias form) always
  re-exports.
- ``from .impl import X`` (relative import) re-exports from ``.py`` files;
  stubs only re-export in the redundant form or through ``__all__``.
- a name listed in ``__all__`` is always re-exported.
"""

import ast
import logging
import os
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Set

from ..foundation.models import (
    ExecutionEnvironment,
    IndexAliasData,
    IndexResults,
    IndexSymbolData,
    SymbolKind,
)
from ..foundation.symbol_names import is_constant_name, is_private_or_protected_name

if TYPE_CHECKING:
    from ...interfaces import ModuleResolver

logger = logging.getLogger(__name__)


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _collect_dunder_all(tree: ast.Module) -> Optional[Set[str]]:
    """
    Names listed in ``__all__``, or None when the module has no usable ``__all__``.

    Supports ``__all__ = [...]``, ``__all__ += [...]``, ``__all__.extend([...])``
    and ``__all__.append("...")`` with string literals only.
    """
    names: Optional[Set[str]] = None

    def literal_strings(node: ast.AST) -> Optional[List[str]]:
        if not isinstance(node, (ast.List, ast.Tuple)):
            return None
        values = []
        for elt in node.elts:
            if not (isinstance(elt, ast.Constant) and isinstance(elt.value, str)):
                return None
            values.append(elt.value)
        return values

    for node in tree.body:
        if isinstance(node, ast.Assign):
            if any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets):
                values = literal_strings(node.value)
                if values is None:
                    return None
                names = set(values)
        elif isinstance(node, ast.AnnAssign):
            if isinstance(node.target, ast.Name) and node.target.id == "__all__" and node.value is not None:
                values = literal_strings(node.value)
                if values is None:
                    return None
                names = set(values)
        elif isinstance(node, ast.AugAssign):
            if isinstance(node.target, ast.Name) and node.target.id == "__all__":
                values = literal_strings(node.value)
                if values is None or names is None:
                    return None
                names.update(values)
        elif isinstance(node, ast.Expr) and isinstance(node.value, ast.Call):
            func = node.value.func
            if (
                isinstance(func, ast.Attribute)
                and isinstance(func.value, ast.Name)
                and func.value.id == "__all__"
            ):
                if names is None or len(node.value.args) != 1:
                    return None
                arg = node.value.args[0]
                if func.attr == "append" and isinstance(arg, ast.Constant) and isinstance(arg.value, str):
                    names.add(arg.value)
                elif func.attr == "extend" and literal_strings(arg) is not None:
                    names.update(literal_strings(arg) or [])
                else:
                    return None

    return names


def _assigned_names(node: ast.stmt) -> List[str]:
    targets: List[ast.expr] = []
    if isinstance(node, ast.Assign):
        targets = list(node.targets)
    elif isinstance(node, ast.AnnAssign):
        targets = [node.target]

    names: List[str] = []
    for target in targets:
        if isinstance(target, ast.Name):
            names.append(target.id)
        elif isinstance(target, (ast.Tuple, ast.List)):
            names.extend(e.id for e in target.elts if isinstance(e, ast.Name))
    return names


def _is_final_annotation(node: ast.stmt) -> bool:
    if not isinstance(node, ast.AnnAssign):
        return False
    annotation = node.annotation
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    if isinstance(annotation, ast.Attribute):
        return annotation.attr == "Final"
    return isinstance(annotation, ast.Name) and annotation.id == "Final"


class ModuleIndexer:
    """
    Index one module.

    Args:
        file_path: path of the module being indexed
        resolver: ModuleResolver used to locate re-exported declarations
        exec_env: execution environment passed to the resolver
    """

    def __init__(
        self,
        file_path: str,
        resolver: Optional["ModuleResolver"] = None,
        exec_env: Optional[ExecutionEnvironment] = None,
    ):
        self.file_path = file_path
        self.resolver = resolver
        self.exec_env = exec_env
        self.is_stub = file_path.endswith(".pyi")
        self._symbols: Dict[str, IndexSymbolData] = {}
        self._dunder_all: Optional[Set[str]] = None

    def index(self, tree: ast.Module) -> IndexResults:
        self._dunder_all = _collect_dunder_all(tree)

        for node in tree.body:
            if isinstance(node, ast.ClassDef):
                self._add(node.name, SymbolKind.CLASS)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self._add(node.name, SymbolKind.FUNCTION)
            elif isinstance(node, (ast.Assign, ast.AnnAssign)):
                is_final = _is_final_annotation(node)
                for name in _assigned_names(node):
                    if name == "__all__":
                        continue
                    kind = SymbolKind.CONSTANT if is_final or is_constant_name(name) else SymbolKind.VARIABLE
                    self._add(name, kind)
            elif isinstance(node, ast.Import):
                self._index_import(node)
            elif isinstance(node, ast.ImportFrom):
                self._index_import_from(node)

        stem = os.path.splitext(os.path.basename(self.file_path))[0]
        return IndexResults(
            symbols=tuple(self._symbols.values()),
            private_or_protected=is_private_or_protected_name(stem),
        )

    def _is_visible(self, name: str) -> bool:
        if self._dunder_all is not None:
            return name in self._dunder_all
        return not is_private_or_protected_name(name)

    def _add(self, name: str, kind: Optional[SymbolKind], alias: Optional[IndexAliasData] = None) -> None:
        self._symbols[name] = IndexSymbolData(
            name=name, kind=kind, externally_visible=self._is_visible(name), alias=alias
        )

    def _is_reexport(self, name: str, redundant_alias: bool, relative: bool) -> bool:
        if redundant_alias:
            return True
        if self._dunder_all is not None and name in self._dunder_all:
            return True
        return relative and not self.is_stub

    def _index_import(self, node: ast.Import) -> None:
        for alias in node.names:
            # ``import a.b`` binds ``a`` only
            if alias.asname is None:
                continue
            if not self._is_reexport(alias.asname, alias.asname == alias.name, relative=False):
                continue
            resolved = self._resolve(alias.name, 0)
            if resolved is None:
                continue
            self._add(
                alias.asname,
                SymbolKind.MODULE,
                IndexAliasData(resolved, alias.name.rsplit(".", 1)[-1], SymbolKind.MODULE),
            )

    def _index_import_from(self, node: ast.ImportFrom) -> None:
        level = int(node.level or 0)
        module = node.module or ""
        if module == "__future__":
            return

        exported = []
        for alias in node.names:
            if alias.name == "*":
                continue
            bound = alias.asname or alias.name
            if self._is_reexport(bound, alias.asname == alias.name, level > 0):
                exported.append((alias.name, bound))
        if not exported:
            return

        result = self._resolve_import(module, level, [name for name, _ in exported])
        if result is None:
            return

        for name, bound in exported:
            submodule = result.implicit_imports.get(name)
            if submodule is not None:
                self._add(bound, SymbolKind.MODULE, IndexAliasData(submodule, name, SymbolKind.MODULE))
            elif result.resolved_path:
                self._add(bound, None, IndexAliasData(result.resolved_path, name))

    def _resolve(self, module: str, level: int) -> Optional[str]:
        result = self._resolve_import(module, level, [])
        return result.resolved_path if result is not None else None

    def _resolve_import(self, module: str, level: int, names: List[str]):
        if self.resolver is None or self.exec_env is None:
            return None
        result = self.resolver.resolve_import(module, level, self.file_path, self.exec_env, names)
        if not result.is_import_found:
            logger.debug(f"Re-export source {'.' * level + module} of {self.file_path} did not resolve")
            return None
        return result


def index_module_source(
    text: str,
    file_path: str,
    resolver: Optional["ModuleResolver"] = None,
    exec_env: Optional[ExecutionEnvironment] = None,
) -> IndexResults:
    """
    Index module source text.

    Raises:
        SyntaxError: if ``text`` does not parse
        ValueError: if ``text`` contains null bytes (Python < 3.12)
    """
    tree = ast.parse(text, filename=file_path)
    return ModuleIndexer(file_path, resolver, exec_env).index(tree)


def index_files(
    file_paths: Iterable[str],
    resolver: Optional["ModuleResolver"] = None,
    exec_env: Optional[ExecutionEnvironment] = None,
    read_text: Callable[[str], str] = _read_text,
) -> Dict[str, IndexResults]:
    """
    Build a library index for ``file_paths``.

    Unreadable or unparseable files are skipped with a warning.

    Returns:
        Mapping of file path to IndexResults
    """
    library_map: Dict[str, IndexResults] = {}
    for path in file_paths:
        try:
            text = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable module {path}: {e}")
            continue

        try:
            library_map[path] = index_module_source(text, path, resolver, exec_env)
        except (SyntaxError, ValueError) as e:
            logger.warning(f"Skipping unparseable module {path}: {e}")
            continue

    logger.debug(f"Indexed {len(library_map)} module(s)")
    return library_map
