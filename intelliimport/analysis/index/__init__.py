"""Library index construction."""

from .indexer import ModuleIndexer, index_files, index_module_source

__all__ = ["ModuleIndexer", "index_files", "index_module_source"]
