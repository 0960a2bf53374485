"""
Shared test configuration for readercore.

Provides sample documents and fixtures used across unit and integration tests.
"""

import logging

import pytest
import structlog

from readercore.config import ReadabilityOptions
from readercore.extractor.tree import DocumentTree, parse_markup
from tests.helpers import ARTICLE_TITLE, OTHER_SENTENCE, SIDEBAR_SENTENCE, page, prose

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Sample Documents
# ============================================================================


SIMPLE_ARTICLE_HTML = page(
    f"<article><h1>{ARTICLE_TITLE}</h1>"
    f"<p>{prose(600)}</p>"
    f"<p>{prose(650, OTHER_SENTENCE)}</p></article>"
)

SHORT_PARAGRAPH_HTML = page(f"<p>{prose(50)}</p>")

SIDEBAR_HTML = page(
    '<div class="ad-sidebar">'
    + "".join(f"<p>{prose(200, SIDEBAR_SENTENCE)}</p>" for _ in range(10))
    + "</div><div>"
    + "".join(f"<p>{prose(600)}</p>" for _ in range(3))
    + "</div>"
)


@pytest.fixture
def simple_article_html():
    return SIMPLE_ARTICLE_HTML


@pytest.fixture
def short_paragraph_html():
    return SHORT_PARAGRAPH_HTML


@pytest.fixture
def sidebar_html():
    return SIDEBAR_HTML


@pytest.fixture
def default_options():
    return ReadabilityOptions()


@pytest.fixture
def make_tree():
    """Build a DocumentTree from markup."""

    def _make(markup):
        return DocumentTree(parse_markup(markup))

    return _make


@pytest.fixture
def restore_logging():
    """Undo global logging configuration made by the code under test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()

