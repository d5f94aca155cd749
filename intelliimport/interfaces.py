"""
Collaborator interfaces for IntelliImport.

The auto-import engine does not parse files, resolve module names, or format
import statements itself. This module defines the Protocol interfaces for
those collaborators; each has a default implementation elsewhere in the
package:

- ModuleResolver -> analysis.resolution.module_resolver.SearchPathModuleResolver
- EditSynthesizer -> refactoring.import_edits.ImportEditBuilder
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence

from .analysis.foundation.models import (
    ExecutionEnvironment,
    ImportGroup,
    ImportResult,
    ImportStatement,
    ModuleNameAndType,
    TextEdit,
)

if TYPE_CHECKING:
    from .analysis.autoimport.import_statements import ImportStatements


class ModuleResolver(Protocol):
    """Maps file paths to dotted module names and import statements to files."""

    def get_module_name_for_import(
        self, file_path: str, exec_env: ExecutionEnvironment
    ) -> ModuleNameAndType:
        """Return the module name a file is imported by (empty name when unknown)."""
        ...

    def resolve_import(
        self,
        module_name: str,
        level: int,
        importing_file: str,
        exec_env: ExecutionEnvironment,
        imported_names: Sequence[str] = (),
    ) -> ImportResult:
        """Resolve the module of an import statement to the file it loads."""
        ...


class EditSynthesizer(Protocol):
    """Produces the text edits that bring a name into scope."""

    def insertion_edits(
        self,
        import_name: Optional[str],
        import_statements: "ImportStatements",
        module_name: str,
        import_group: ImportGroup,
        alias: Optional[str] = None,
    ) -> List[TextEdit]:
        """Edits inserting a brand-new import statement."""
        ...

    def symbol_addition_edits(
        self,
        import_name: str,
        statement: ImportStatement,
        alias: Optional[str] = None,
    ) -> List[TextEdit]:
        """Edits adding ``import_name`` to an existing ``from ... import`` statement."""
        ...
