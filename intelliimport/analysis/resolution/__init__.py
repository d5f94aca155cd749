"""Module-name resolution between file paths and dotted import names."""

from .module_resolver import SearchPathModuleResolver, module_name_from_path

__all__ = ["SearchPathModuleResolver", "module_name_from_path"]
