"""
Tests for the insertion-text decision tree.
"""

from unittest.mock import Mock

import pytest

from intelliimport.analysis.autoimport.import_statements import get_top_level_imports
from intelliimport.analysis.autoimport.insertion import InsertionTextDecider
from intelliimport.analysis.foundation.models import ImportGroup, Position, Range, TextEdit
from intelliimport.performance.perf_counters import PerfCounters

from factories import CURRENT_FILE

EDIT = TextEdit(Range(Position(0, 0), Position(0, 0)), "edit")


@pytest.fixture
def synthesizer():
    mock = Mock()
    mock.insertion_edits.return_value = [EDIT]
    mock.symbol_addition_edits.return_value = [EDIT]
    return mock


def make_decider(text, synthesizer, resolver=None, exec_env=None, **kwargs):
    imports = get_top_level_imports(text, CURRENT_FILE, resolver, exec_env)
    return InsertionTextDecider(imports, synthesizer, **kwargs)


class TestBareImportReuse:
    """Tests for files already loaded by `import module`."""

    def test_attribute_access_through_alias(self, synthesizer, resolver, exec_env):
        """Test that `import numpy as np` yields `np.array`."""
        decider = make_decider("import numpy as np\n", synthesizer, resolver, exec_env)
        decision = decider.decide("numpy", "array", None, "array", ImportGroup.THIRD_PARTY, "/lib/numpy/__init__.pyi")
        assert decision.insertion_text == "np.array"
        assert decision.edits == ()
        synthesizer.insertion_edits.assert_not_called()

    def test_attribute_access_through_module_name(self, synthesizer, resolver, exec_env):
        """Test that `import numpy` yields `numpy.array`."""
        decider = make_decider("import numpy\n", synthesizer, resolver, exec_env)
        decision = decider.decide("numpy", "array", None, "array", ImportGroup.THIRD_PARTY, "/lib/numpy/__init__.pyi")
        assert decision.insertion_text == "numpy.array"

    def test_module_itself(self, synthesizer, resolver, exec_env):
        """Test that the module candidate reuses the alias."""
        decider = make_decider("import numpy as np\n", synthesizer, resolver, exec_env)
        decision = decider.decide("numpy", None, None, "numpy", ImportGroup.THIRD_PARTY, "/lib/numpy/__init__.pyi")
        assert decision.insertion_text == "np"

    def test_dotted_import_binds_module_candidate(self, synthesizer, resolver, exec_env):
        """Test that `import pkg.impl` already names the module candidate `impl`."""
        decider = make_decider("import pkg.impl\n", synthesizer, resolver, exec_env)
        decision = decider.decide("pkg", "impl", None, "impl", ImportGroup.LOCAL, "/proj/pkg/impl.py")
        assert decision.insertion_text == "pkg.impl"
        assert decision.edits == ()


class TestFromImportReuse:
    """Tests for files already loaded by `from module import ...`."""

    def test_existing_name_reused_with_alias(self, synthesizer, resolver, exec_env):
        """Test that an imported name is reused under its alias."""
        decider = make_decider("from pkg import Widget as W\n", synthesizer, resolver, exec_env)
        decision = decider.decide("pkg", "Widget", None, "Widget", ImportGroup.LOCAL, "/proj/pkg/__init__.py")
        assert decision.insertion_text == "W"
        assert decision.edits == ()

    def test_missing_name_appended(self, synthesizer, resolver, exec_env):
        """Test that a missing name is added to the statement."""
        decider = make_decider("from pkg import Widget\n", synthesizer, resolver, exec_env)
        decision = decider.decide("pkg", "Gadget", None, "Gadget", ImportGroup.LOCAL, "/proj/pkg/__init__.py")
        assert decision.insertion_text == "Gadget"
        assert decision.edits == (EDIT,)
        name, statement, alias = synthesizer.symbol_addition_edits.call_args[0]
        assert (name, statement.module_name, alias) == ("Gadget", "pkg", None)

    def test_abbreviation_used_for_new_name(self, synthesizer, resolver, exec_env):
        """Test that the abbreviation becomes the insertion text."""
        decider = make_decider("from pkg import Widget\n", synthesizer, resolver, exec_env)
        decision = decider.decide("pkg", "Gadget", "G", "Gadget", ImportGroup.LOCAL, "/proj/pkg/__init__.py")
        assert decision.insertion_text == "G"
        assert synthesizer.symbol_addition_edits.call_args[0][2] == "G"


class TestModuleNameReuse:
    """Tests for from-imports found by module name."""

    def test_existing_name(self, synthesizer):
        """Test that a name already imported from the module is reused."""
        decider = make_decider("from util import helper\n", synthesizer)
        decision = decider.decide("util", "helper", None, "helper", ImportGroup.LOCAL, "/proj/util.py")
        assert decision.insertion_text == "helper"
        assert decision.edits == ()

    def test_name_added_to_statement(self, synthesizer):
        """Test that a new name is added to the matching statement."""
        decider = make_decider("from util import helper\n", synthesizer)
        decision = decider.decide("util", "MAX_SIZE", None, "MAX_SIZE", ImportGroup.LOCAL, "/proj/util.py")
        assert decision.insertion_text == "MAX_SIZE"
        assert decision.edits == (EDIT,)
        synthesizer.insertion_edits.assert_not_called()


class TestImplicitImportReuse:
    """Tests for submodules bound by `from pkg import sub`."""

    def test_attribute_access_through_submodule(self, synthesizer, resolver, exec_env):
        """Test that a symbol of pkg.impl is reached through `impl`."""
        decider = make_decider("from pkg import impl\n", synthesizer, resolver, exec_env)
        decision = decider.decide("pkg.impl", "Thing", None, "Thing", ImportGroup.LOCAL, "/proj/pkg/impl.py")
        assert decision.insertion_text == "impl.Thing"
        assert decision.edits == ()


class TestNewStatement:
    """Tests for the fallback branch."""

    def test_new_statement(self, synthesizer):
        """Test that a new statement is synthesized."""
        decider = make_decider("", synthesizer)
        decision = decider.decide("pkg", "Widget", "W", "Widget", ImportGroup.LOCAL, "/proj/pkg/__init__.py")
        assert decision.insertion_text == "W"
        assert decision.edits == (EDIT,)
        args = synthesizer.insertion_edits.call_args[0]
        assert (args[0], args[2], args[3], args[4]) == ("Widget", "pkg", ImportGroup.LOCAL, "W")

    def test_lazy_edit_skips_synthesis(self, synthesizer):
        """Test that lazy requests carry no edits."""
        decider = make_decider("", synthesizer, lazy_edit=True)
        decision = decider.decide("pkg", "Widget", None, "Widget", ImportGroup.LOCAL, "/proj/pkg/__init__.py")
        assert decision.insertion_text == "Widget"
        assert decision.edits is None
        synthesizer.insertion_edits.assert_not_called()

    def test_edit_time_recorded(self, synthesizer):
        """Test that edit synthesis time is accumulated."""
        counters = PerfCounters()
        decider = make_decider("", synthesizer, perf_counters=counters)
        decider.decide("pkg", "Widget", None, "Widget", ImportGroup.LOCAL, "/proj/pkg/__init__.py")
        assert counters.edit_time_ms >= 0.0
        synthesizer.insertion_edits.assert_called_once()
