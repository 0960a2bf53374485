"""
Structured Data Parser - JSON-LD and meta tags

Reads article metadata that publishers embed for machines: schema.org
JSON-LD blocks and the Dublin Core, OpenGraph, Twitter, Parse.ly and
Weibo meta tags.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from bs4 import BeautifulSoup

from readercore.extractor import patterns
from readercore.extractor.tree import text_similarity

logger = logging.getLogger(__name__)

TITLE_SIMILARITY = 0.75


@dataclass
class JsonLdMetadata:
    """Article fields read from a schema.org JSON-LD block."""

    title: Optional[str] = None
    byline: Optional[str] = None
    excerpt: Optional[str] = None
    site_name: Optional[str] = None
    date_published: Optional[str] = None


@dataclass
class StructuredDataResult:
    """Everything the structured sources offered, before field priorities apply."""

    json_ld: JsonLdMetadata = field(default_factory=JsonLdMetadata)
    meta: Dict[str, str] = field(default_factory=dict)


def _is_article_type(value: Any) -> bool:
    if isinstance(value, str):
        return bool(patterns.JSON_LD_ARTICLE_TYPES.match(value))
    if isinstance(value, list):
        return any(isinstance(item, str) and patterns.JSON_LD_ARTICLE_TYPES.match(item) for item in value)
    return False


def _has_schema_context(data: Dict[str, Any]) -> bool:
    context = data.get("@context")
    if isinstance(context, str):
        return bool(patterns.SCHEMA_ORG_CONTEXT.match(context))
    if isinstance(context, dict):
        vocab = context.get("@vocab")
        return isinstance(vocab, str) and bool(patterns.SCHEMA_ORG_CONTEXT.match(vocab))
    return False


class SchemaOrgParser:
    """Parser for schema.org JSON-LD article data."""

    @staticmethod
    def find_article(data: Any) -> Optional[Dict[str, Any]]:
        """Locate the first article-typed object in a decoded JSON-LD payload."""
        if isinstance(data, list):
            data = next((item for item in data if isinstance(item, dict) and _is_article_type(item.get("@type"))), None)
        if not isinstance(data, dict) or not _has_schema_context(data):
            return None

        if "@type" not in data and isinstance(data.get("@graph"), list):
            data = next(
                (item for item in data["@graph"] if isinstance(item, dict) and _is_article_type(item.get("@type"))),
                None,
            )
        if not isinstance(data, dict) or not _is_article_type(data.get("@type")):
            return None
        return data

    @staticmethod
    def parse_author(author: Any) -> Optional[str]:
        if isinstance(author, dict) and isinstance(author.get("name"), str):
            return author["name"].strip()
        if isinstance(author, list) and author and isinstance(author[0], dict) and author[0].get("name"):
            names = [
                item["name"].strip() for item in author if isinstance(item, dict) and isinstance(item.get("name"), str)
            ]
            return ", ".join(names)
        return None

    @staticmethod
    def parse_json_ld(soup: BeautifulSoup, page_title: Callable[[], str]) -> JsonLdMetadata:
        """Parse the first usable JSON-LD article block.

        `page_title` is only called when `name` and `headline` disagree and the
        document title has to break the tie.
        """
        for script in soup.find_all("script", type="application/ld+json"):
            raw = script.string or script.get_text()
            if not raw:
                continue
            content = patterns.CDATA.sub("", raw)

            try:
                parsed = json.loads(content)
            except json.JSONDecodeError as e:
                logger.debug("Skipping malformed JSON-LD block: %s", e)
                continue

            article = SchemaOrgParser.find_article(parsed)
            if article is None:
                continue

            metadata = JsonLdMetadata()
            name = article.get("name")
            headline = article.get("headline")
            if isinstance(name, str) and isinstance(headline, str) and name != headline:
                title = page_title()
                name_matches = text_similarity(name, title) > TITLE_SIMILARITY
                headline_matches = text_similarity(headline, title) > TITLE_SIMILARITY
                metadata.title = headline if headline_matches and not name_matches else name
            elif isinstance(name, str):
                metadata.title = name.strip()
            elif isinstance(headline, str):
                metadata.title = headline.strip()

            metadata.byline = SchemaOrgParser.parse_author(article.get("author"))

            if isinstance(article.get("description"), str):
                metadata.excerpt = article["description"].strip()

            publisher = article.get("publisher")
            if isinstance(publisher, dict) and isinstance(publisher.get("name"), str):
                metadata.site_name = publisher["name"].strip()

            if isinstance(article.get("datePublished"), str):
                metadata.date_published = article["datePublished"].strip()

            return metadata

        return JsonLdMetadata()


class MetaTagParser:
    """Parser for <meta> tags keyed by `property` or `name`."""

    @staticmethod
    def normalize_name(name: str) -> str:
        return patterns.WHITESPACE.sub("", name.lower()).replace(".", ":")

    @staticmethod
    def parse(soup: BeautifulSoup) -> Dict[str, str]:
        """Collect recognised meta values; later tags overwrite earlier ones."""
        values: Dict[str, str] = {}

        for tag in soup.find_all("meta"):
            content = tag.get("content")
            if not content:
                continue
            content = content.strip()

            matched = False
            prop = tag.get("property")
            if prop:
                for match in patterns.META_PROPERTY.finditer(prop):
                    values[patterns.WHITESPACE.sub("", match.group(0).lower())] = content
                    matched = True

            name = tag.get("name")
            if not matched and name and patterns.META_NAME.match(name):
                values[MetaTagParser.normalize_name(name)] = content

        return values


class StructuredDataParser:
    """Runs every structured-data parser over a document."""

    def __init__(self, disable_json_ld: bool = False) -> None:
        self.disable_json_ld = disable_json_ld

    def parse_all(self, soup: BeautifulSoup, page_title: Callable[[], str]) -> StructuredDataResult:
        result = StructuredDataResult()
        if not self.disable_json_ld:
            result.json_ld = SchemaOrgParser.parse_json_ld(soup, page_title)
        result.meta = MetaTagParser.parse(soup)
        return result


def first_value(values: Dict[str, str], *keys: str) -> Optional[str]:
    for key in keys:
        value = values.get(key)
        if value:
            return value
    return None
