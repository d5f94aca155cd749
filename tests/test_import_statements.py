"""
Tests for the import-statement inspector.
"""

import logging

from intelliimport.analysis.autoimport.import_statements import (
    get_import_group,
    get_import_group_from_module_name_and_type,
    get_top_level_imports,
)
from intelliimport.analysis.foundation.models import (
    ImportGroup,
    ImportType,
    ModuleNameAndType,
    Position,
    Range,
)

from factories import CURRENT_FILE

SOURCE = '''"""Module docstring."""
import os
import numpy as np
from pkg import impl, Widget as W

x = 1
import late
'''


def read_imports(text, resolver=None, exec_env=None, file_path=CURRENT_FILE):
    return get_top_level_imports(text, file_path, resolver, exec_env)


class TestTopLevelImports:
    """Tests for get_top_level_imports."""

    def test_ordered_imports(self, resolver, exec_env):
        """Test that every module-level import is collected in order."""
        imports = read_imports(SOURCE, resolver, exec_env)
        assert [s.module_name for s in imports.ordered_imports] == ["os", "numpy", "pkg", "late"]
        assert len(imports) == 4

    def test_statement_range(self, resolver, exec_env):
        """Test that statement ranges are zero-based lines and characters."""
        imports = read_imports(SOURCE, resolver, exec_env)
        assert imports.ordered_imports[0].range == Range(Position(1, 0), Position(1, 9))

    def test_follows_non_import_statement(self, resolver, exec_env):
        """Test that an import after other code is marked."""
        imports = read_imports(SOURCE, resolver, exec_env)
        flags = [s.follows_non_import_statement for s in imports.ordered_imports]
        assert flags == [False, False, False, True]

    def test_by_file_path(self, resolver, exec_env):
        """Test lookup by the resolved file."""
        imports = read_imports(SOURCE, resolver, exec_env)
        numpy_import = imports.by_file_path("/lib/numpy/__init__.pyi")
        assert numpy_import.module_name == "numpy"
        assert numpy_import.alias == "np"
        assert imports.by_file_path("/proj/pkg/__init__.py").is_import_from
        assert imports.by_file_path("/proj/util.py") is None

    def test_by_module_name(self, resolver, exec_env):
        """Test that only from-imports are found by module name."""
        imports = read_imports(SOURCE, resolver, exec_env)
        statement = imports.by_module_name("pkg")
        assert statement.find_name("Widget").alias == "W"
        assert imports.by_module_name("os") is None

    def test_implicit_import(self, resolver, exec_env):
        """Test that `from pkg import impl` binds the submodule file."""
        imports = read_imports(SOURCE, resolver, exec_env)
        implicit = imports.implicit_import("/proj/pkg/impl.py")
        assert implicit.name == "impl"
        assert implicit.alias is None

    def test_unresolved_without_resolver(self):
        """Test that statements are collected unresolved without a resolver."""
        imports = read_imports(SOURCE)
        assert len(imports) == 4
        assert all(s.import_result is None for s in imports.ordered_imports)
        assert imports.by_module_name("pkg") is not None

    def test_nested_imports_ignored(self):
        """Test that imports inside functions and blocks are not collected."""
        text = "def f():\n    import json\n\ntry:\n    import yaml\nexcept ImportError:\n    pass\n"
        assert len(read_imports(text)) == 0

    def test_one_statement_per_module(self):
        """Test that `import a, b` yields one statement per module."""
        imports = read_imports("import os, sys\n")
        assert [s.module_name for s in imports.ordered_imports] == ["os", "sys"]

    def test_relative_module_name_keeps_dots(self, resolver, exec_env):
        """Test relative from-imports."""
        imports = read_imports("from .impl import Thing\n", resolver, exec_env, "/proj/pkg/__init__.py")
        statement = imports.ordered_imports[0]
        assert statement.module_name == ".impl"
        assert statement.level == 1
        assert statement.resolved_path == "/proj/pkg/impl.py"

    def test_wildcard(self):
        """Test that wildcard imports are flagged and carry no names."""
        statement = read_imports("from pkg import *\n").ordered_imports[0]
        assert statement.is_wildcard
        assert statement.names == ()

    def test_from_import_preferred_by_file_path(self, resolver, exec_env):
        """Test that a from-import wins the file-path slot whatever the order."""
        for text in ("import pkg\nfrom pkg import Widget\n", "from pkg import Widget\nimport pkg\n"):
            imports = read_imports(text, resolver, exec_env)
            assert imports.by_file_path("/proj/pkg/__init__.py").is_import_from

    def test_syntax_error(self, caplog):
        """Test that an unparseable file yields no statements and a warning."""
        with caplog.at_level(logging.WARNING):
            imports = read_imports("import (\n")
        assert len(imports) == 0
        assert "Cannot read imports" in caplog.text

    def test_null_bytes(self, caplog):
        """Test that a file containing null bytes yields no statements."""
        with caplog.at_level(logging.WARNING):
            imports = read_imports("import os\x00\n")
        assert len(imports) == 0
        assert "Cannot read imports" in caplog.text


class TestAlreadyImports:
    """Tests for ImportStatements.already_imports."""

    def test_file_imported(self, resolver, exec_env):
        """Test that an imported file counts as imported."""
        imports = read_imports("import numpy\n", resolver, exec_env)
        assert imports.already_imports("/lib/numpy/__init__.pyi", None, None)

    def test_name_from_module(self):
        """Test that a from-import naming the symbol counts as imported."""
        imports = read_imports("from pkg import foo\n")
        assert imports.already_imports("/proj/pkg/__init__.py", "pkg", "foo")
        assert not imports.already_imports("/proj/pkg/__init__.py", "pkg", "bar")

    def test_bare_import_of_module(self):
        """Test that a bare import of import_from does not cover a symbol."""
        imports = read_imports("import pkg\n")
        assert not imports.already_imports("/proj/pkg/__init__.py", "pkg", "foo")


class TestImportGroups:
    """Tests for import group classification."""

    def test_statement_groups(self, resolver, exec_env):
        """Test groups of resolved statements."""
        text = "import os\nimport numpy\nimport pkg\nfrom . import util\nimport missing\n"
        imports = read_imports(text, resolver, exec_env)
        groups = [get_import_group(s) for s in imports.ordered_imports]
        assert groups == [
            ImportGroup.BUILT_IN,
            ImportGroup.THIRD_PARTY,
            ImportGroup.LOCAL,
            ImportGroup.LOCAL_RELATIVE,
            ImportGroup.LOCAL,
        ]

    def test_unresolved_statement_is_local(self):
        """Test that a statement without a resolution is local."""
        statement = read_imports("import anything\n").ordered_imports[0]
        assert get_import_group(statement) == ImportGroup.LOCAL

    def test_module_name_and_type_groups(self):
        """Test groups derived from module-name resolution."""
        assert get_import_group_from_module_name_and_type(
            ModuleNameAndType("os", ImportType.BUILT_IN)
        ) == ImportGroup.BUILT_IN
        assert get_import_group_from_module_name_and_type(
            ModuleNameAndType("numpy", ImportType.THIRD_PARTY)
        ) == ImportGroup.THIRD_PARTY
        assert get_import_group_from_module_name_and_type(
            ModuleNameAndType("requests", ImportType.LOCAL, is_local_typings_file=True)
        ) == ImportGroup.THIRD_PARTY
        assert get_import_group_from_module_name_and_type(
            ModuleNameAndType("util", ImportType.LOCAL)
        ) == ImportGroup.LOCAL
