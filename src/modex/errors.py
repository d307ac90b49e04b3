"""
Exception hierarchy. The tracer turns these into diagnostics on the result.
"""

from __future__ import annotations


class ModexError(Exception):
    """Base class for all modex failures."""


class ModuleNotFoundInIndex(ModexError):
    def __init__(self, spec: str):
        super().__init__(f"Module not found: {spec}")
        self.spec = spec


class EntrypointNotFound(ModexError):
    def __init__(self, label: str, module: str):
        super().__init__(f"Entrypoint object not found: {label} in {module}")
        self.label = label
        self.module = module


class ModuleLoadError(ModexError):
    def __init__(self, module: str, reason: str):
        super().__init__(f"Failed to load {module}: {reason}")
        self.module = module
        self.reason = reason
