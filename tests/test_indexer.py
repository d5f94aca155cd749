"""
Tests for the module indexer.
"""

import logging

import pytest

from intelliimport.analysis.foundation.models import IndexAliasData, SymbolKind
from intelliimport.analysis.index import index_files, index_module_source


def symbols_by_name(results):
    return {s.name: s for s in results.symbols}


def index(text, file_path="/lib/mod.py", resolver=None, exec_env=None):
    return symbols_by_name(index_module_source(text, file_path, resolver, exec_env))


class TestDeclarations:
    """Tests for symbols declared in the module itself."""

    def test_kinds(self):
        """Test classes, functions and assignments."""
        text = (
            "from typing import Final\n"
            "class Widget: pass\n"
            "def helper(): pass\n"
            "async def fetch(): pass\n"
            "MAX_SIZE = 10\n"
            "counter = 0\n"
            "limit: Final = 3\n"
            "a, b = 1, 2\n"
        )
        symbols = index(text)
        assert {name: s.kind for name, s in symbols.items()} == {
            "Widget": SymbolKind.CLASS,
            "helper": SymbolKind.FUNCTION,
            "fetch": SymbolKind.FUNCTION,
            "MAX_SIZE": SymbolKind.CONSTANT,
            "counter": SymbolKind.VARIABLE,
            "limit": SymbolKind.CONSTANT,
            "a": SymbolKind.VARIABLE,
            "b": SymbolKind.VARIABLE,
        }

    def test_private_names_hidden(self):
        """Test that private and protected names are not externally visible."""
        symbols = index("_cache = {}\n__secret = 1\npublic = 2\n")
        assert not symbols["_cache"].externally_visible
        assert not symbols["__secret"].externally_visible
        assert symbols["public"].externally_visible

    def test_private_module(self):
        """Test that a private module stem is recorded."""
        assert index_module_source("x = 1\n", "/lib/pkg/_impl.py").private_or_protected
        assert not index_module_source("x = 1\n", "/lib/pkg/impl.py").private_or_protected

    def test_syntax_error(self):
        """Test that unparseable text raises."""
        with pytest.raises(SyntaxError):
            index_module_source("def (\n", "/lib/mod.py")


class TestDunderAll:
    """Tests for __all__ handling."""

    def test_all_limits_visibility(self):
        """Test that names outside __all__ are hidden."""
        symbols = index("__all__ = ['a']\na = 1\nb = 2\n")
        assert "__all__" not in symbols
        assert symbols["a"].externally_visible
        assert not symbols["b"].externally_visible

    def test_all_mutations(self):
        """Test +=, append and extend on a literal __all__."""
        text = (
            "__all__ = ['a']\n"
            "__all__ += ['b']\n"
            "__all__.append('c')\n"
            "__all__.extend(['d'])\n"
            "a = b = c = d = e = 1\n"
        )
        symbols = index(text)
        assert [n for n, s in symbols.items() if s.externally_visible] == ["a", "b", "c", "d"]

    def test_private_name_in_all(self):
        """Test that __all__ can export a protected name."""
        symbols = index("__all__ = ['_x']\n_x = 1\n")
        assert symbols["_x"].externally_visible

    def test_non_literal_all_ignored(self):
        """Test that a computed __all__ falls back to naming rules."""
        symbols = index("__all__ = names()\n_a = 1\nb = 2\n")
        assert not symbols["_a"].externally_visible
        assert symbols["b"].externally_visible


class TestReexports:
    """Tests for re-exported names."""

    def test_relative_import_in_source_file(self, resolver, exec_env):
        """Test that a relative from-import re-exports from a .py file."""
        symbols = index("from .impl import Widget\n", "/proj/pkg/__init__.py", resolver, exec_env)
        assert symbols["Widget"].alias == IndexAliasData("/proj/pkg/impl.py", "Widget")
        assert symbols["Widget"].kind is None

    def test_relative_import_in_stub_needs_redundant_alias(self, resolver, exec_env):
        """Test the stub re-export convention."""
        assert index("from ._core import MAX_SIZE\n", "/lib/numpy/__init__.pyi", resolver, exec_env) == {}
        symbols = index(
            "from ._core import MAX_SIZE as MAX_SIZE\n", "/lib/numpy/__init__.pyi", resolver, exec_env
        )
        assert symbols["MAX_SIZE"].alias == IndexAliasData("/lib/numpy/_core.pyi", "MAX_SIZE")

    def test_dunder_all_reexport(self, resolver, exec_env):
        """Test that names listed in __all__ are re-exported from stubs."""
        text = "from ._core import MAX_SIZE\n__all__ = ['MAX_SIZE']\n"
        symbols = index(text, "/lib/numpy/__init__.pyi", resolver, exec_env)
        assert symbols["MAX_SIZE"].alias.module_path == "/lib/numpy/_core.pyi"
        assert symbols["MAX_SIZE"].externally_visible

    def test_renamed_reexport_keeps_original_name(self, resolver, exec_env):
        """Test that `from .impl import Widget as W` points at Widget."""
        text = "from .impl import Widget as W\n"
        symbols = index(text, "/proj/pkg/__init__.py", resolver, exec_env)
        assert symbols["W"].alias == IndexAliasData("/proj/pkg/impl.py", "Widget")

    def test_submodule_reexport(self, resolver, exec_env):
        """Test that `from . import impl` re-exports the submodule."""
        symbols = index("from . import impl\n", "/proj/pkg/__init__.py", resolver, exec_env)
        assert symbols["impl"].kind == SymbolKind.MODULE
        assert symbols["impl"].alias == IndexAliasData("/proj/pkg/impl.py", "impl", SymbolKind.MODULE)

    def test_module_import_redundant_alias(self, resolver, exec_env):
        """Test that `import numpy as numpy` re-exports the module."""
        symbols = index("import numpy as numpy\nimport numpy as np\nimport os\n", "/proj/main.py", resolver, exec_env)
        assert list(symbols) == ["numpy"]
        assert symbols["numpy"].alias == IndexAliasData("/lib/numpy/__init__.pyi", "numpy", SymbolKind.MODULE)

    def test_absolute_import_not_reexported(self, resolver, exec_env):
        """Test that plain absolute from-imports are not re-exports."""
        assert index("from pkg import Widget\n", "/proj/main.py", resolver, exec_env) == {}

    def test_unresolved_reexport_skipped(self, resolver, exec_env):
        """Test that re-exports of missing modules are dropped."""
        assert index("from .missing import X\n", "/proj/pkg/__init__.py", resolver, exec_env) == {}

    def test_without_resolver(self):
        """Test that re-exports need a resolver."""
        assert index("from .impl import Widget\n", "/proj/pkg/__init__.py") == {}


class TestIndexFiles:
    """Tests for index_files."""

    def test_bad_files_skipped(self, caplog):
        """Test that unreadable and unparseable files are skipped with a warning."""
        sources = {"/lib/good.py": "X = 1\n", "/lib/bad.py": "def (\n"}

        def read_text(path):
            if path not in sources:
                raise FileNotFoundError(path)
            return sources[path]

        with caplog.at_level(logging.WARNING):
            library_map = index_files(["/lib/good.py", "/lib/bad.py", "/lib/gone.py"], read_text=read_text)

        assert list(library_map) == ["/lib/good.py"]
        assert "unparseable" in caplog.text
        assert "unreadable" in caplog.text

    def test_null_bytes_skipped(self, caplog):
        """Test that a module containing null bytes is skipped instead of aborting the run."""
        sources = {"/lib/good.py": "X = 1\n", "/lib/nul.py": "Y = 1\x00\n"}
        with caplog.at_level(logging.WARNING):
            library_map = index_files(["/lib/nul.py", "/lib/good.py"], read_text=sources.__getitem__)
        assert list(library_map) == ["/lib/good.py"]
        assert "unparseable" in caplog.text

    def test_reads_from_disk(self, tmp_path):
        """Test the default reader."""
        path = tmp_path / "mod.py"
        path.write_text("def helper():\n    pass\n", encoding="utf-8")
        library_map = index_files([str(path)])
        assert [s.name for s in library_map[str(path)].symbols] == ["helper"]
