"""
Auto-import candidate resolution.

Similarity matching, visibility filtering, import-statement inspection,
insertion decisions, alias resolution and the aggregator that runs them.
"""

from .alias_table import AliasResolutionTable, compare_alias_candidates
from .auto_importer import AutoImporter, CandidateAggregator, is_stub_file_or_has_init
from .import_statements import (
    ImportStatements,
    get_import_group,
    get_import_group_from_module_name_and_type,
    get_top_level_imports,
)
from .insertion import InsertionDecision, InsertionTextDecider
from .module_symbols import (
    ModuleSymbolMap,
    ModuleSymbolTable,
    build_module_symbols_map,
    module_symbol_table_from_index,
    module_symbol_table_from_symbols,
)
from .results import AutoImportResultMap
from .similarity import SimilarityMatcher, get_pattern_matcher, is_pattern_in_symbol
from .visibility import VisibilityFilter

__all__ = [
    "AliasResolutionTable",
    "compare_alias_candidates",
    "AutoImporter",
    "CandidateAggregator",
    "is_stub_file_or_has_init",
    "ImportStatements",
    "get_import_group",
    "get_import_group_from_module_name_and_type",
    "get_top_level_imports",
    "InsertionDecision",
    "InsertionTextDecider",
    "ModuleSymbolMap",
    "ModuleSymbolTable",
    "build_module_symbols_map",
    "module_symbol_table_from_index",
    "module_symbol_table_from_symbols",
    "AutoImportResultMap",
    "SimilarityMatcher",
    "get_pattern_matcher",
    "is_pattern_in_symbol",
    "VisibilityFilter",
]
