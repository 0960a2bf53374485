"""
readercore metadata extraction

Resolves article title, byline, excerpt, site name, publication time and
language from JSON-LD, meta tags and the document <title>.

Components:
- MetadataExtractor: applies field priorities and the title heuristics
- StructuredDataParser: JSON-LD and meta tag parsing
"""

from .metadata_extractor import ArticleMetadata, MetadataExtractor, get_article_title
from .structured_data_parser import (
    JsonLdMetadata,
    MetaTagParser,
    SchemaOrgParser,
    StructuredDataParser,
    StructuredDataResult,
)

__all__ = [
    "ArticleMetadata",
    "JsonLdMetadata",
    "MetaTagParser",
    "MetadataExtractor",
    "SchemaOrgParser",
    "StructuredDataParser",
    "StructuredDataResult",
    "get_article_title",
]
