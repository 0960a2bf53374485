"""
readercore - Reader-mode article extraction for HTML documents.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import ReadabilityOptions, ReaderableOptions, Settings
from .exceptions import ArticleNotFoundError, ReadabilityError, ResourceExceededError, UnparseableInputError
from .extractor import Article, Readability, extract_article, is_probably_readerable

__all__ = [
    "__version__",
    "Article",
    "ArticleNotFoundError",
    "Readability",
    "ReadabilityError",
    "ReadabilityOptions",
    "ReaderableOptions",
    "ResourceExceededError",
    "Settings",
    "UnparseableInputError",
    "extract_article",
    "is_probably_readerable",
]
