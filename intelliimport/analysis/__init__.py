"""
Analysis module for IntelliImport

Provides the auto-import engine and the analysis pieces it is built from:
- foundation data model, naming predicates and cancellation
- module-name resolution
- library indexing
- candidate aggregation and alias resolution
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

__all__ = [
    "AbbreviationInfo",
    "AutoImportOptions",
    "AutoImportResult",
    "AutoImporter",
    "CancellationTokenSource",
    "ExecutionEnvironment",
    "OperationCanceledError",
    "SearchPathModuleResolver",
    "index_files",
]

_LAZY_EXPORTS: Dict[str, str] = {
    "AbbreviationInfo": "intelliimport.analysis.foundation.models",
    "AutoImportOptions": "intelliimport.analysis.foundation.models",
    "AutoImportResult": "intelliimport.analysis.foundation.models",
    "ExecutionEnvironment": "intelliimport.analysis.foundation.models",
    "CancellationTokenSource": "intelliimport.analysis.foundation.cancellation",
    "OperationCanceledError": "intelliimport.analysis.foundation.cancellation",
    "AutoImporter": "intelliimport.analysis.autoimport.auto_importer",
    "SearchPathModuleResolver": "intelliimport.analysis.resolution.module_resolver",
    "index_files": "intelliimport.analysis.index.indexer",
}

if TYPE_CHECKING:
    from intelliimport.analysis.foundation.models import AbbreviationInfo as AbbreviationInfo
    from intelliimport.analysis.foundation.models import AutoImportOptions as AutoImportOptions
    from intelliimport.analysis.foundation.models import AutoImportResult as AutoImportResult
    from intelliimport.analysis.foundation.models import ExecutionEnvironment as ExecutionEnvironment
    from intelliimport.analysis.foundation.cancellation import (
        CancellationTokenSource as CancellationTokenSource,
    )
    from intelliimport.analysis.foundation.cancellation import (
        OperationCanceledError as OperationCanceledError,
    )
    from intelliimport.analysis.autoimport.auto_importer import AutoImporter as AutoImporter
    from intelliimport.analysis.resolution.module_resolver import (
        SearchPathModuleResolver as SearchPathModuleResolver,
    )
    from intelliimport.analysis.index.indexer import index_files as index_files


def __getattr__(name: str) -> Any:
    """
    Lazy attribute loading (PEP 562).
    Allows `from intelliimport.analysis import AutoImporter` without eager imports.
    """
    mod_path = _LAZY_EXPORTS.get(name)
    if not mod_path:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    import importlib

    mod = importlib.import_module(mod_path)
    try:
        return getattr(mod, name)
    except AttributeError as e:
        raise AttributeError(
            f"module {mod_path!r} does not define {name!r} (lazy export from {__name__!r})"
        ) from e


def __dir__() -> List[str]:
    return sorted(set(globals().keys()) | set(_LAZY_EXPORTS.keys()))
