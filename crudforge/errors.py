# File: crudforge/errors.py
"""
crudforge - Generation Errors
===============================

Every failure that aborts generation of a model derives from
``GenerationError``.  The pipeline catches this base class per model, so a
bad model never takes its siblings down with it.

    GenerationError
     ├── ConfigurationError   unknown backend, composite identifiers
     ├── TypeMappingError     field type with no target representation
     └── ValidationError      structural precondition failed
"""

from __future__ import annotations

import logging
from typing import Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.errors")


class GenerationError(Exception):
    """Base class for generation-time failures."""

    def __init__(self, message: str, model_name: Optional[str] = None) -> None:
        self.message: str = message
        self.model_name: Optional[str] = model_name
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.model_name:
            return f"[{self.model_name}] {self.message}"
        return self.message


class ConfigurationError(GenerationError):
    """The requested configuration cannot be honoured."""


class TypeMappingError(GenerationError):
    """A field type has no representation in the target language."""

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        field_name: Optional[str] = None,
    ) -> None:
        self.field_name: Optional[str] = field_name
        if field_name:
            message = f"Field '{field_name}': {message}"
        super().__init__(message, model_name)


class ValidationError(GenerationError):
    """The model violates a structural precondition of a generator."""


__all__ = [
    "GenerationError",
    "ConfigurationError",
    "TypeMappingError",
    "ValidationError",
]

logger.debug("crudforge.errors loaded")
