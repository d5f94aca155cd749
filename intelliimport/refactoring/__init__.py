"""
Refactoring module for IntelliImport

Text-edit primitives for bringing a name into scope:
- rendering a new import statement
- placing it among the existing import groups
- adding a name to an existing ``from ... import`` statement
"""

from .import_edits import ImportEditBuilder, apply_text_edits, render_import_statement

__all__ = ["ImportEditBuilder", "apply_text_edits", "render_import_statement"]
