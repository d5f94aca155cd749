"""
Search-path module resolution.

Maps a file path to the dotted name it is imported by, and an import
statement's module back to the file it loads, using the search roots of an
``ExecutionEnvironment``:

- stdlib paths (built-in modules)
- the project root and extra paths (local code)
- the local stub path (local typings)
- python search paths such as site-packages (third-party code)
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..foundation.errors import ModuleResolutionError
from ..foundation.models import (
    ExecutionEnvironment,
    ImportResult,
    ImportType,
    ModuleNameAndType,
)

logger = logging.getLogger(__name__)

STUBS_SUFFIX = "-stubs"
SOURCE_EXTENSIONS = (".pyi", ".py")
NATIVE_EXTENSIONS = (".so", ".pyd")


class SearchPathModuleResolver:
    """
    Default module resolver.

    Module names are memoized per execution root for the lifetime of the
    resolver instance. File existence checks go through ``file_exists`` so
    callers can resolve against an in-memory view of the workspace.
    """

    def __init__(self, file_exists: Optional[Callable[[str], bool]] = None):
        self._file_exists = file_exists or os.path.isfile
        self._module_name_cache: Dict[str, Dict[str, ModuleNameAndType]] = {}

    # ------------------------
    # File path -> module name
    # ------------------------

    def get_module_name_for_import(
        self, file_path: str, exec_env: ExecutionEnvironment
    ) -> ModuleNameAndType:
        if not file_path:
            raise ModuleResolutionError(file_path, "empty path")

        cache = self._module_name_cache.setdefault(exec_env.root, {})
        cached = cache.get(file_path)
        if cached is None:
            cached = self._compute_module_name(file_path, exec_env)
            cache[file_path] = cached
        return cached

    def _compute_module_name(
        self, file_path: str, exec_env: ExecutionEnvironment
    ) -> ModuleNameAndType:
        for stdlib_path in exec_env.stdlib_paths:
            module_name = module_name_from_path(stdlib_path, file_path)
            if module_name:
                return ModuleNameAndType(module_name, ImportType.BUILT_IN)

        module_name = module_name_from_path(exec_env.root, file_path)
        import_type = ImportType.LOCAL
        is_local_typings_file = False

        candidates: List[Tuple[str, ImportType, bool]] = [
            (p, ImportType.LOCAL, False) for p in exec_env.extra_paths
        ]
        if exec_env.stub_path:
            candidates.append((exec_env.stub_path, ImportType.LOCAL, True))
        candidates.extend((p, ImportType.THIRD_PARTY, False) for p in exec_env.python_search_paths)

        # the shortest dotted name wins among overlapping roots
        for container, candidate_type, is_typings in candidates:
            candidate = module_name_from_path(container, file_path)
            if not candidate:
                continue
            if not module_name or len(candidate) < len(module_name):
                module_name = candidate
                import_type = candidate_type
                is_local_typings_file = is_typings

        if module_name:
            return ModuleNameAndType(module_name, import_type, is_local_typings_file)

        logger.debug(f"No search root contains {file_path}")
        return ModuleNameAndType("", ImportType.LOCAL, False)

    # ------------------------
    # Import statement -> file path
    # ------------------------

    def resolve_import(
        self,
        module_name: str,
        level: int,
        importing_file: str,
        exec_env: ExecutionEnvironment,
        imported_names: Sequence[str] = (),
    ) -> ImportResult:
        """
        Resolve ``import module_name`` / ``from <dots>module_name import ...``.

        Args:
            module_name: dotted module name without leading dots
            level: number of leading dots of a relative import
            importing_file: file containing the statement
            exec_env: search roots
            imported_names: names of a from-import, checked for submodules

        Returns:
            ImportResult (``is_import_found`` False when nothing matched)
        """
        name_parts = [p for p in module_name.split(".") if p] if module_name else []
        display_name = "." * level + module_name

        if level > 0:
            base_dir = os.path.dirname(importing_file)
            for _ in range(level - 1):
                base_dir = os.path.dirname(base_dir)
            roots: Iterable[Tuple[str, ImportType, bool]] = [(base_dir, ImportType.LOCAL, False)]
        else:
            if not name_parts:
                return ImportResult(import_name=display_name)
            roots = self._absolute_roots(exec_env)

        for root, import_type, is_typings in roots:
            found, resolved_path, package_dir = self._resolve_in_root(root, name_parts, level > 0)
            if not found:
                continue
            implicit = self._find_implicit_imports(package_dir, imported_names) if package_dir else {}
            return ImportResult(
                import_name=display_name,
                is_import_found=True,
                resolved_path=resolved_path,
                import_type=import_type,
                is_relative=level > 0,
                is_local_typings_file=is_typings,
                implicit_imports=implicit,
            )

        logger.debug(f"Import {display_name!r} in {importing_file} did not resolve")
        return ImportResult(import_name=display_name, is_relative=level > 0)

    def _absolute_roots(self, exec_env: ExecutionEnvironment) -> List[Tuple[str, ImportType, bool]]:
        roots: List[Tuple[str, ImportType, bool]] = []
        if exec_env.stub_path:
            roots.append((exec_env.stub_path, ImportType.LOCAL, True))
        roots.append((exec_env.root, ImportType.LOCAL, False))
        roots.extend((p, ImportType.LOCAL, False) for p in exec_env.extra_paths)
        roots.extend((p, ImportType.BUILT_IN, False) for p in exec_env.stdlib_paths)
        roots.extend((p, ImportType.THIRD_PARTY, False) for p in exec_env.python_search_paths)
        return roots

    def _resolve_in_root(
        self, root: str, name_parts: List[str], is_relative: bool
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """Return (found, resolved file, package directory for submodule lookups)."""
        if not name_parts:
            init_file = self._find_init(root)
            # a directory without __init__ is a namespace package
            return True, init_file, root

        first, rest = name_parts[0], name_parts[1:]
        first_dirs = [first]
        if not is_relative:
            first_dirs.insert(0, first + STUBS_SUFFIX)

        for first_dir in first_dirs:
            resolved = self._walk_parts(root, [first_dir] + rest)
            if resolved is not None:
                return resolved
        return False, None, None

    def _walk_parts(
        self, root: str, parts: List[str]
    ) -> Optional[Tuple[bool, Optional[str], Optional[str]]]:
        current = root
        for index, part in enumerate(parts):
            is_last = index == len(parts) - 1
            package_dir = os.path.join(current, part)
            init_file = self._find_init(package_dir)
            if is_last:
                if init_file:
                    return True, init_file, package_dir
                module_file = self._find_module_file(current, part)
                if module_file:
                    return True, module_file, None
                return None
            current = package_dir
        return None

    def _find_init(self, directory: str) -> Optional[str]:
        for ext in SOURCE_EXTENSIONS:
            candidate = os.path.join(directory, "__init__" + ext)
            if self._file_exists(candidate):
                return candidate
        return None

    def _find_module_file(self, directory: str, name: str) -> Optional[str]:
        for ext in SOURCE_EXTENSIONS:
            candidate = os.path.join(directory, name + ext)
            if self._file_exists(candidate):
                return candidate
        return None

    def _find_implicit_imports(self, package_dir: str, imported_names: Sequence[str]) -> Dict[str, str]:
        implicit: Dict[str, str] = {}
        for name in imported_names:
            if name == "*":
                continue
            path = self._find_init(os.path.join(package_dir, name)) or self._find_module_file(
                package_dir, name
            )
            if path:
                implicit[name] = path
        return implicit


def module_name_from_path(container_path: str, file_path: str) -> Optional[str]:
    """
    Dotted module name of ``file_path`` relative to ``container_path``.

    Examples:
        - ("/lib", "/lib/numpy/_core.pyi") -> "numpy._core"
        - ("/lib", "/lib/pkg/__init__.py") -> "pkg"
        - ("/lib", "/lib/foo-stubs/bar.pyi") -> "foo.bar"
        - ("/lib", "/other/x.py") -> None

    Returns:
        The dotted name, or None when the file is outside the container or a
        path component is not an identifier.
    """
    if not container_path or not file_path:
        return None

    container = os.path.normpath(container_path)
    path = os.path.normpath(file_path)

    stem, ext = os.path.splitext(path)
    if ext in NATIVE_EXTENSIONS:
        # foo.cpython-311-x86_64-linux-gnu.so
        stem = os.path.join(os.path.dirname(stem), os.path.basename(stem).split(".")[0])
    elif ext not in SOURCE_EXTENSIONS:
        stem = path

    prefix = container.rstrip(os.sep) + os.sep
    if not stem.startswith(prefix):
        return None

    parts = stem[len(prefix):].split(os.sep)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts:
        return None

    if parts[0].endswith(STUBS_SUFFIX):
        parts[0] = parts[0][: -len(STUBS_SUFFIX)]

    if any(not p.isidentifier() for p in parts):
        return None

    return ".".join(parts)
