"""Exception types shared by the engine and its collaborators."""

from __future__ import annotations


class IntelliImportError(Exception):
    """Base class for IntelliImport errors."""

    pass


class ModuleResolutionError(IntelliImportError):
    """
    A file path could not be turned into an importable module name.

    The aggregator treats this as a resolution gap for that file only.
    """

    def __init__(self, file_path: str, reason: str = ""):
        self.file_path = file_path
        self.reason = reason
        message = f"cannot resolve module name for {file_path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
