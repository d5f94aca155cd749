"""
Insertion-Text Decision Tree

For a winning candidate, decide what to insert at the cursor and whether the
file needs an import edit. Branches, first match wins:

1. a bare ``import module`` already loads the file -> attribute access
2. a ``from module import ...`` already loads the file -> reuse the name, or
   append it to that statement
3. another ``from <module_name> import ...`` statement exists -> reuse or append
4. an implicit package import binds the file -> attribute access
5. otherwise -> synthesize a new import statement
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from ..foundation.models import ImportGroup, TextEdit
from ...performance.perf_counters import PerfCounters, accumulate_ms
from .import_statements import ImportStatements

if TYPE_CHECKING:
    from ...interfaces import EditSynthesizer


@dataclass(frozen=True)
class InsertionDecision:
    """``edits`` is None when edits were skipped for a lazy request."""

    insertion_text: str
    edits: Optional[Tuple[TextEdit, ...]] = ()


class InsertionTextDecider:
    def __init__(
        self,
        import_statements: ImportStatements,
        edit_synthesizer: "EditSynthesizer",
        lazy_edit: bool = False,
        perf_counters: Optional[PerfCounters] = None,
    ):
        self.import_statements = import_statements
        self.edit_synthesizer = edit_synthesizer
        self.lazy_edit = lazy_edit
        self.perf_counters = perf_counters

    def decide(
        self,
        module_name: str,
        import_name: Optional[str],
        abbreviation: Optional[str],
        default_insertion_text: str,
        import_group: ImportGroup,
        file_path: str,
    ) -> InsertionDecision:
        if self.perf_counters is None:
            return self._decide(
                module_name, import_name, abbreviation, default_insertion_text, import_group, file_path
            )
        with accumulate_ms(self.perf_counters, "edit_time_ms"):
            return self._decide(
                module_name, import_name, abbreviation, default_insertion_text, import_group, file_path
            )

    def _decide(
        self,
        module_name: str,
        import_name: Optional[str],
        abbreviation: Optional[str],
        default_insertion_text: str,
        import_group: ImportGroup,
        file_path: str,
    ) -> InsertionDecision:
        """
        Args:
            module_name: module to import from (or to import, for module candidates)
            import_name: name to import from ``module_name``; None imports the module
            abbreviation: user-chosen alias, used for new names
            default_insertion_text: text to insert when nothing can be reused
            import_group: group of ``module_name``, drives new-statement placement
            file_path: file that declares the candidate
        """
        imports = self.import_statements
        statement = imports.by_file_path(file_path)

        if statement is not None:
            if not statement.is_import_from:
                alias = statement.alias
                if import_name:
                    if statement.module_name == f"{module_name}.{import_name}":
                        # ``import pkg.sub`` already binds the candidate module itself
                        return InsertionDecision(alias or statement.module_name)
                    return InsertionDecision(f"{alias or statement.module_name}.{import_name}")
                return InsertionDecision(alias or statement.module_name)

            if import_name:
                imported = statement.find_name(import_name)
                if imported is not None:
                    return InsertionDecision(imported.alias or import_name)
                if module_name == statement.module_name:
                    return InsertionDecision(
                        abbreviation or default_insertion_text,
                        self._edits(
                            lambda: self.edit_synthesizer.symbol_addition_edits(
                                import_name, statement, abbreviation
                            )
                        ),
                    )

        elif import_name:
            existing = imports.by_module_name(module_name)
            if existing is not None:
                imported = existing.find_name(import_name)
                if imported is not None:
                    return InsertionDecision(imported.alias or import_name)
                return InsertionDecision(
                    abbreviation or default_insertion_text,
                    self._edits(
                        lambda: self.edit_synthesizer.symbol_addition_edits(
                            import_name, existing, abbreviation
                        )
                    ),
                )

            implicit = imports.implicit_import(file_path)
            if implicit is not None:
                return InsertionDecision(f"{implicit.alias or implicit.name}.{import_name}")

        return InsertionDecision(
            abbreviation or default_insertion_text,
            self._edits(
                lambda: self.edit_synthesizer.insertion_edits(
                    import_name, imports, module_name, import_group, abbreviation
                )
            ),
        )

    def _edits(self, build: Callable[[], List[TextEdit]]) -> Optional[Tuple[TextEdit, ...]]:
        if self.lazy_edit:
            return None
        return tuple(build())
