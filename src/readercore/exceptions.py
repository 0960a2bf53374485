"""
Typed failure outcomes for article extraction.
"""

from __future__ import annotations


class ReadabilityError(Exception):
    """Base class for every error raised by readercore."""

    pass


class UnparseableInputError(ReadabilityError, ValueError):
    """Raised when markup cannot be turned into a document tree."""

    pass


class ResourceExceededError(ReadabilityError):
    """Raised when a document holds more elements than the configured ceiling."""

    def __init__(self, element_count: int, limit: int) -> None:
        self.element_count = element_count
        self.limit = limit
        super().__init__(f"Aborting parsing document; {element_count} elements found (limit {limit})")


class ArticleNotFoundError(ReadabilityError):
    """Raised when no attempt produced usable article text."""

    def __init__(self, best_length: int, min_length: int) -> None:
        self.best_length = best_length
        self.min_length = min_length
        super().__init__(f"No article found: best attempt had {best_length} characters, need {min_length}")
