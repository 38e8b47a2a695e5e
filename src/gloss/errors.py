"""Exceptions raised by the gloss store and relation engine.

Parse failures of individual records never surface as exceptions: the store
logs them and treats the record as absent. Everything here is raised to the
caller.
"""

from __future__ import annotations

from typing import Any


class GlossError(Exception):
    """Base exception for all gloss store errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EmptySlugError(GlossError, ValueError):
    """Content is empty or yields no usable identifier after stripping."""


class UnknownFieldError(GlossError, ValueError):
    """Relation field is not one of the twelve known fields."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Unknown relation field: {field}", details={"field": field})
        self.field = field


class LanguageMismatchError(GlossError, ValueError):
    """A within-language relation was attached across languages."""

    def __init__(self, field: str, base_language: str, target_language: str) -> None:
        super().__init__(
            f"Relation '{field}' must stay within one language "
            f"({base_language} != {target_language})",
            details={
                "field": field,
                "base_language": base_language,
                "target_language": target_language,
            },
        )
        self.field = field
        self.base_language = base_language
        self.target_language = target_language


class IncompleteRecordError(GlossError, ValueError):
    """A gloss without language and slug cannot be saved or referenced."""


class GlossNotFoundError(GlossError, LookupError):
    """A referenced gloss does not exist in the store."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"Gloss not found: {ref}", details={"ref": ref})
        self.ref = ref
