"""
Visibility & Inclusion Filter

Decides whether a module-level symbol is a legal, non-noisy auto-import
candidate. Rules are applied in order and the first decisive rule wins:

1. externally hidden symbols are rejected;
2. symbols declared only through alias imports are rejected unless they
   carry resolved alias metadata (those go to the alias table, never
   straight to the results);
3. anything that is not a variable is eligible;
4. variables are eligible from stubs, from ``__all__`` of project code when
   ``allow_variable_in_all`` is set, or when named like a public constant or
   type alias.
"""

from __future__ import annotations

from ..foundation.models import AutoImportSymbol
from ..foundation.symbol_names import is_public_constant_or_type_alias


class VisibilityFilter:
    def __init__(self, allow_variable_in_all: bool = False):
        self.allow_variable_in_all = allow_variable_in_all

    def include(self, candidate: AutoImportSymbol, is_stub: bool, library: bool) -> bool:
        if candidate.is_externally_hidden():
            return False

        if candidate.is_alias_only() and candidate.import_alias is None:
            return False

        if not candidate.is_variable():
            return True

        if is_stub:
            return True

        if self.allow_variable_in_all and not library and candidate.is_in_dunder_all():
            return True

        return is_public_constant_or_type_alias(candidate.name)
