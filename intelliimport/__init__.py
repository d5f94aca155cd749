"""
IntelliImport - Auto-import candidate resolution for Python code

Given a partially typed name in a source file, finds the importable symbols
and modules that match it across the project and a prebuilt library index,
picks one import path per re-exported declaration, and computes the edit that
brings each candidate into scope.
"""

__version__ = "0.1.0"
__author__ = "IntelliImport Team"


def __getattr__(name):
    """Lazy loading of main API classes to prevent heavy imports at module level."""
    if name == "AutoImportEngine":
        from .api import AutoImportEngine

        return AutoImportEngine

    if name in {"IntelliImportConfig", "ConfigurationError", "load_config"}:
        from .config import IntelliImportConfig, ConfigurationError, load_config

        return {
            "IntelliImportConfig": IntelliImportConfig,
            "ConfigurationError": ConfigurationError,
            "load_config": load_config,
        }[name]

    if name in {"AutoImporter", "build_module_symbols_map"}:
        from .analysis.autoimport import AutoImporter, build_module_symbols_map

        return {
            "AutoImporter": AutoImporter,
            "build_module_symbols_map": build_module_symbols_map,
        }[name]

    if name in {
        "AbbreviationInfo",
        "AutoImportOptions",
        "AutoImportResult",
        "ExecutionEnvironment",
        "CancellationTokenSource",
        "OperationCanceledError",
    }:
        from . import analysis

        return getattr(analysis, name)

    if name == "PerfCounters":
        from .performance import PerfCounters

        return PerfCounters

    raise AttributeError(f"module 'intelliimport' has no attribute '{name}'")


__all__ = [
    "__version__",
    # Main API
    "AutoImportEngine",
    "IntelliImportConfig",
    "ConfigurationError",
    "load_config",
    # Core components (for advanced usage)
    "AutoImporter",
    "build_module_symbols_map",
    "AbbreviationInfo",
    "AutoImportOptions",
    "AutoImportResult",
    "ExecutionEnvironment",
    "CancellationTokenSource",
    "OperationCanceledError",
    "PerfCounters",
]
