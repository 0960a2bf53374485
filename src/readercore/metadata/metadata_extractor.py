"""
Main Metadata Extractor

Resolves the article-level metadata fields (title, byline, excerpt, site
name, publication time and language) from structured data, meta tags and
the document title, in that order of preference.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from readercore.extractor import patterns
from readercore.extractor.tree import inner_text, word_count

from .structured_data_parser import StructuredDataParser, first_value

logger = logging.getLogger(__name__)

SEPARATOR_CLASS = r"[\|\-–—\\\/>»]"
TITLE_BEFORE_LAST_SEPARATOR = re.compile(rf"(.*){SEPARATOR_CLASS} .*", re.IGNORECASE)
TITLE_AFTER_FIRST_SEPARATOR = re.compile(rf"[^\|\-–—\\\/>»]*{SEPARATOR_CLASS}(.*)", re.IGNORECASE)
SEPARATOR_RUN = re.compile(rf"{SEPARATOR_CLASS}+")
URL_VALUE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)

TITLE_KEYS = (
    "dc:title",
    "dcterm:title",
    "og:title",
    "weibo:article:title",
    "weibo:webpage:title",
    "title",
    "twitter:title",
    "parsely-title",
)
BYLINE_KEYS = ("dc:creator", "dcterm:creator", "author", "parsely-author")
EXCERPT_KEYS = (
    "dc:description",
    "dcterm:description",
    "og:description",
    "weibo:article:description",
    "weibo:webpage:description",
    "description",
    "twitter:description",
)
PUBLISHED_KEYS = ("article:published_time", "parsely-pub-date")


@dataclass
class ArticleMetadata:
    """Document-level metadata resolved before content extraction."""

    title: Optional[str] = None
    byline: Optional[str] = None
    excerpt: Optional[str] = None
    site_name: Optional[str] = None
    published_time: Optional[str] = None
    lang: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _unescape(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return patterns.WHITESPACE.sub(" ", html.unescape(value)).strip()


def get_article_title(soup: BeautifulSoup) -> str:
    """Clean the <title> text of site names and section prefixes."""
    title_node = soup.find("title")
    original = inner_text(title_node) if title_node is not None else ""
    current = original
    had_hierarchical_separators = False

    if patterns.TITLE_SEPARATORS.search(current):
        had_hierarchical_separators = bool(patterns.TITLE_HIERARCHY_SEPARATORS.search(current))
        current = TITLE_BEFORE_LAST_SEPARATOR.sub(r"\1", original)
        if word_count(current) < 3:
            current = TITLE_AFTER_FIRST_SEPARATOR.sub(r"\1", original)
    elif ": " in current:
        trimmed = current.strip()
        headings = soup.find_all(["h1", "h2"])
        if not any(inner_text(heading) == trimmed for heading in headings):
            current = original[original.rfind(":") + 1 :]
            if word_count(current) < 3:
                current = original[original.find(":") + 1 :]
            elif word_count(original[: original.find(":")]) > 5:
                current = original
    elif len(current) > 150 or len(current) < 15:
        first_headings = soup.find_all("h1")
        if len(first_headings) == 1:
            current = inner_text(first_headings[0])

    current = patterns.NORMALIZE_WHITESPACE.sub(" ", current.strip())

    current_words = word_count(current)
    if current_words <= 4 and (
        not had_hierarchical_separators or current_words != word_count(SEPARATOR_RUN.sub("", original)) - 1
    ):
        current = original

    return current


def first_heading_text(soup: BeautifulSoup) -> Optional[str]:
    for heading in soup.find_all("h1"):
        text = inner_text(heading)
        if text:
            return text
    return None


class MetadataExtractor:
    """Reads document metadata from an unmodified parse tree."""

    def __init__(self, disable_json_ld: bool = False) -> None:
        self.parser = StructuredDataParser(disable_json_ld=disable_json_ld)

    def extract(self, soup: BeautifulSoup) -> ArticleMetadata:
        structured = self.parser.parse_all(soup, lambda: get_article_title(soup))
        json_ld = structured.json_ld
        values = structured.meta

        article_author = values.get("article:author")
        if article_author and URL_VALUE.match(article_author):
            article_author = None

        title = json_ld.title or first_value(values, *TITLE_KEYS)
        if not title:
            title = get_article_title(soup) or first_heading_text(soup)

        metadata = ArticleMetadata(
            title=title,
            byline=json_ld.byline or first_value(values, *BYLINE_KEYS) or article_author,
            excerpt=json_ld.excerpt or first_value(values, *EXCERPT_KEYS),
            site_name=json_ld.site_name or values.get("og:site_name"),
            published_time=json_ld.date_published or first_value(values, *PUBLISHED_KEYS),
            lang=self._language(soup),
        )

        metadata.title = _unescape(metadata.title)
        metadata.byline = _unescape(metadata.byline)
        metadata.excerpt = _unescape(metadata.excerpt)
        metadata.site_name = _unescape(metadata.site_name)
        metadata.published_time = _unescape(metadata.published_time)

        logger.debug("Resolved metadata: %s", metadata)
        return metadata

    @staticmethod
    def _language(soup: BeautifulSoup) -> Optional[str]:
        root = soup.find("html")
        if root is None:
            return None
        return root.get("lang") or None
