"""
refactoring/import_edits.py

Text edits that bring a name into scope: a brand-new import statement placed
among the existing import groups, or one more name appended to an existing
``from ... import`` statement.

Notes:
- New statements are built as LibCST nodes and rendered with the module's
  code generator, so dotted and relative module names come out well-formed.
- Placement follows the PEP 8 grouping: built-in, then third-party, then
  local imports, each group sorted by module name. The group order itself is
  injected through ``group_rank``.
"""

from __future__ import annotations

import ast
import logging
from typing import Callable, List, Optional, Sequence, Union

import libcst as cst

from ..analysis.autoimport.import_statements import ImportStatements, get_import_group
from ..analysis.foundation.models import (
    ImportGroup,
    ImportStatement,
    Position,
    Range,
    TextEdit,
)
from ..analysis.foundation.source_text import SourceText
from ..analysis.foundation.symbol_names import is_dunder_name

logger = logging.getLogger(__name__)

FUTURE_MODULE = "__future__"


def _dotted_name(name: str) -> Union[cst.Name, cst.Attribute]:
    parts = name.split(".")
    expr: Union[cst.Name, cst.Attribute] = cst.Name(parts[0])
    for part in parts[1:]:
        expr = cst.Attribute(value=expr, attr=cst.Name(part))
    return expr


def _import_alias(name: str, alias: Optional[str]) -> cst.ImportAlias:
    asname = cst.AsName(name=cst.Name(alias)) if alias and alias != name else None
    return cst.ImportAlias(name=_dotted_name(name), asname=asname)


def render_import_statement(
    module_name: str, import_name: Optional[str] = None, alias: Optional[str] = None
) -> str:
    """
    Render ``from module import name [as alias]`` or ``import module [as alias]``.

    ``module_name`` may carry leading dots for relative imports.
    """
    level = len(module_name) - len(module_name.lstrip("."))
    dotted = module_name[level:]

    if import_name:
        node: cst.CSTNode = cst.ImportFrom(
            module=_dotted_name(dotted) if dotted else None,
            names=[_import_alias(import_name, alias)],
            relative=[cst.Dot() for _ in range(level)],
        )
    else:
        node = cst.Import(names=[_import_alias(dotted, alias)])

    return cst.Module(body=[]).code_for_node(node)


class ImportEditBuilder:
    """
    Default edit synthesizer over the text of the current file.

    Args:
        source_text: current file content
        group_rank: total order of import groups (lower sorts first)
    """

    def __init__(
        self,
        source_text: Union[str, SourceText],
        group_rank: Optional[Callable[[ImportGroup], int]] = None,
    ):
        self.source = source_text if isinstance(source_text, SourceText) else SourceText(source_text)
        self.group_rank: Callable[[ImportGroup], int] = group_rank or int
        try:
            self._tree: Optional[ast.Module] = ast.parse(self.source.text)
        except (SyntaxError, ValueError):
            self._tree = None

    # ------------------------
    # New statements
    # ------------------------

    def insertion_edits(
        self,
        import_name: Optional[str],
        import_statements: ImportStatements,
        module_name: str,
        import_group: ImportGroup,
        alias: Optional[str] = None,
    ) -> List[TextEdit]:
        statement_text = render_import_statement(module_name, import_name, alias)
        if import_statements.ordered_imports:
            edit = self._insert_among_imports(
                statement_text, import_statements.ordered_imports, module_name, import_group
            )
        else:
            edit = self._insert_at_top(statement_text)
        return [edit]

    def _insert_among_imports(
        self,
        statement_text: str,
        ordered_imports: Sequence[ImportStatement],
        module_name: str,
        import_group: ImportGroup,
    ) -> TextEdit:
        eol = self.source.eol

        # __future__ imports must stay first
        future_count = 0
        for statement in ordered_imports:
            if statement.module_name != FUTURE_MODULE:
                break
            future_count += 1
        if future_count:
            rest = ordered_imports[future_count:]
            if not rest or rest[0].follows_non_import_statement:
                position = ordered_imports[future_count - 1].range.end
                return TextEdit(Range(position, position), eol + eol + statement_text)
            ordered_imports = rest

        new_rank = self.group_rank(import_group)
        prev_rank = min(self.group_rank(g) for g in ImportGroup)
        insert_before = True
        insertion_import = ordered_imports[0]
        text = statement_text

        for current in ordered_imports:
            # unresolved imports are assumed to belong to the previous group
            current_rank = (
                self.group_rank(get_import_group(current)) if current.import_result else prev_rank
            )

            if new_rank < current_rank:
                if not insert_before and prev_rank < new_rank:
                    text = eol + text
                break

            # the leading import block ends here
            if current.follows_non_import_statement:
                if new_rank > prev_rank:
                    text = eol + text
                break

            if current is ordered_imports[-1] and new_rank > current_rank:
                text = eol + text

            insert_before = (
                not insert_before and new_rank < prev_rank and new_rank == current_rank
            )
            prev_rank = current_rank
            insertion_import = current

            if new_rank == current_rank and current.module_name > module_name:
                insert_before = True
                break

        if insert_before:
            position = insertion_import.range.start
            new_text = text + eol
        else:
            position = insertion_import.range.end
            new_text = eol + text
        return TextEdit(Range(position, position), new_text)

    def _insert_at_top(self, statement_text: str) -> TextEdit:
        """Insert below a leading docstring / dunder header, or at the very top."""
        eol = self.source.eol
        position = Position(0, 0)
        after_header = False

        for node in self._tree.body if self._tree is not None else []:
            if self._is_header_statement(node):
                position = self.source.position_from_ast(
                    node.end_lineno or node.lineno, node.end_col_offset or 0
                )
                after_header = True
                continue
            if not after_header:
                position = self.source.position_from_ast(node.lineno, node.col_offset)
                return TextEdit(Range(position, position), statement_text + eol + eol)
            break

        if after_header:
            return TextEdit(Range(position, position), eol + eol + statement_text + eol)
        return TextEdit(Range(position, position), statement_text + eol)

    @staticmethod
    def _is_header_statement(node: ast.stmt) -> bool:
        if isinstance(node, ast.Expr) and isinstance(node.value, ast.Constant):
            return isinstance(node.value.value, str)
        if isinstance(node, ast.Assign) and len(node.targets) == 1:
            target = node.targets[0]
            return isinstance(target, ast.Name) and is_dunder_name(target.id)
        return False

    # ------------------------
    # Additions to existing statements
    # ------------------------

    def symbol_addition_edits(
        self,
        import_name: str,
        statement: ImportStatement,
        alias: Optional[str] = None,
    ) -> List[TextEdit]:
        entry = import_name if not alias or alias == import_name else f"{import_name} as {alias}"
        names = [n for n in statement.names if n.range is not None]

        if not names:
            # wildcard-only statement: add a sibling statement right below it
            position = statement.range.end
            text = render_import_statement(statement.module_name, import_name, alias)
            return [TextEdit(Range(position, position), self.source.eol + text)]

        for imported in names:
            if imported.name > import_name:
                position = imported.range.start
                return [TextEdit(Range(position, position), f"{entry}, ")]

        position = names[-1].range.end
        return [TextEdit(Range(position, position), f", {entry}")]


def apply_text_edits(text: str, edits: Sequence[TextEdit]) -> str:
    """
    Apply non-overlapping edits to ``text``.

    Edits are applied from the end of the document backwards so earlier
    offsets stay valid.

    Raises:
        ValueError: if two edits overlap
    """
    source = SourceText(text)
    spans = sorted(
        ((source.offset_at(e.range.start), source.offset_at(e.range.end), e.new_text) for e in edits),
        key=lambda span: (span[0], span[1]),
    )
    for (_, prev_end, _), (start, _, _) in zip(spans, spans[1:]):
        if start < prev_end:
            raise ValueError("overlapping text edits")

    result = text
    for start, end, new_text in reversed(spans):
        result = result[:start] + new_text + result[end:]
    return result
