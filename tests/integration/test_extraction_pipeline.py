"""
Integration tests for the end-to-end extraction pipeline.

Runs Readability over whole documents and checks the accepted attempt, the
cleaned output and the metadata that ends up on the Article.
"""

import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from readercore import (
    ArticleNotFoundError,
    ReadabilityOptions,
    Readability,
    ResourceExceededError,
    UnparseableInputError,
    extract_article,
)
from tests.helpers import ARTICLE_TITLE, OTHER_SENTENCE, SIDEBAR_SENTENCE, page, prose

pytestmark = pytest.mark.integration


class TestArticleExtraction:
    """Test cases for documents that hold an article."""

    def test_simple_article(self, simple_article_html):
        """The heading repeating the title is dropped and both paragraphs are kept."""
        reader = Readability(simple_article_html, url="https://example.com/bread")
        article = reader.parse()

        assert article is not None
        assert len(reader.attempts) == 1
        assert article.title == ARTICLE_TITLE
        assert article.length == 1250
        assert article.text_content == prose(600) + prose(650, OTHER_SENTENCE)
        assert "<h1" not in article.content and "<h2" not in article.content
        assert 'id="readability-page-1"' in article.content
        assert article.excerpt == prose(600)
        assert article.lang == "en"
        assert article.dir is None
        assert article.byline is None

    def test_raw_content_kept_before_cleaning(self, simple_article_html):
        article = extract_article(simple_article_html)
        assert ARTICLE_TITLE in article.raw_content
        assert ARTICLE_TITLE not in article.content

    def test_sidebar_removed(self, sidebar_html):
        reader = Readability(sidebar_html)
        article = reader.parse()

        assert article is not None
        assert len(reader.attempts) == 1
        assert article.length == 1800
        assert SIDEBAR_SENTENCE.strip() not in article.text_content

    def test_parse_is_repeatable(self, simple_article_html):
        reader = Readability(simple_article_html)
        first = reader.parse()
        second = reader.parse()

        assert first == second

    def test_byline_from_document(self):
        markup = page(
            f'<article><p class="byline">By Ada Baker</p><p>{prose(600)}</p><p>{prose(300)}</p></article>'
        )
        article = extract_article(markup)

        assert article.byline == "By Ada Baker"
        assert "By Ada Baker" not in article.text_content

    def test_metadata_integration(self):
        json_ld = {
            "@context": "https://schema.org",
            "@type": "Article",
            "headline": "Feeding a Starter",
            "author": {"@type": "Person", "name": "Ada Baker"},
            "publisher": {"@type": "Organization", "name": "Kitchen Weekly"},
            "datePublished": "2024-03-01",
        }
        head = (
            f'<script type="application/ld+json">{json.dumps(json_ld)}</script>'
            '<meta name="description" content="How to keep a starter alive.">'
        )
        body = f'<article><p>{prose(600)}</p><p>{prose(300)}</p><a href="/next">Next part</a></article>'
        article = extract_article(page(body, head=head, lang="en-GB"), url="https://example.com/posts/1")

        assert article.title == "Feeding a Starter"
        assert article.byline == "Ada Baker"
        assert article.site_name == "Kitchen Weekly"
        assert article.published_time == "2024-03-01"
        assert article.excerpt == "How to keep a starter alive."
        assert article.lang == "en-GB"
        assert 'href="https://example.com/next"' in article.content

    def test_direction_from_root(self):
        markup = f'<html dir="rtl"><body><article><p>{prose(600)}</p></article></body></html>'
        assert extract_article(markup).dir == "rtl"

    def test_base_href(self):
        head = '<base href="/static/">'
        reader = Readability(page(f"<p>{prose(600)}</p>", head=head), url="https://example.com/a/b")

        assert reader.base_url == "https://example.com/static/"

    def test_base_url_without_base_tag(self, simple_article_html):
        reader = Readability(simple_article_html, url="https://example.com/a/b")
        assert reader.base_url == "https://example.com/a/b"


class TestRelaxation:
    """Test cases for the retry loop over relaxed heuristics."""

    def test_article_recovered_by_relaxing(self):
        """Content inside an unlikely, negatively weighted block needs two relaxations."""
        markup = page(f'<div class="sidebar"><p>{prose(600)}</p><p>{prose(600)}</p></div>')
        reader = Readability(markup)
        article = reader.parse()

        assert article is not None
        assert [attempt.text_length for attempt in reader.attempts] == [0, 0, 1200]
        assert article.length == 1200

    def test_short_document_not_found(self, short_paragraph_html):
        reader = Readability(short_paragraph_html)

        assert reader.parse() is None
        assert len(reader.attempts) == 4
        assert all(attempt.text_length == 50 for attempt in reader.attempts)

    def test_flags_only_shrink(self, short_paragraph_html):
        reader = Readability(short_paragraph_html)
        reader.parse()

        flags = [attempt.flags for attempt in reader.attempts]
        for earlier, later in zip(flags, flags[1:]):
            assert later.is_subset_of(earlier)
            assert later != earlier
        assert flags[-1].enabled() == frozenset()

    def test_longest_attempt_taken(self):
        markup = page(f"<p>{prose(200)}</p>")
        reader = Readability(markup)
        article = reader.parse()

        assert len(reader.attempts) == 4
        assert article.length == 200

    def test_accept_any_length(self):
        markup = page(f"<p>{prose(200)}</p>")
        reader = Readability(markup, options=ReadabilityOptions(accept_any_length=True))
        article = reader.parse()

        assert len(reader.attempts) == 1
        assert article.length == 200

    def test_extract_article_raises(self, short_paragraph_html):
        with pytest.raises(ArticleNotFoundError) as exc_info:
            extract_article(short_paragraph_html)

        assert exc_info.value.best_length == 50
        assert exc_info.value.min_length == 100

    def test_article_emptied_by_cleaning_not_found(self):
        """Forms score like prose but are dropped by cleaning, leaving nothing to return."""
        form = f"<form><p>{prose(600)}</p><p>{prose(600)}</p></form>"
        markup = page(f"<div>{form}{form}</div>")
        reader = Readability(markup)

        assert reader.parse() is None
        assert [attempt.text_length for attempt in reader.attempts] == [2400]
        assert reader.best_length == 0

        with pytest.raises(ArticleNotFoundError) as exc_info:
            extract_article(markup)
        assert exc_info.value.best_length == 0


class TestFailureModes:
    """Test cases for rejected input."""

    def test_element_limit(self, simple_article_html):
        with pytest.raises(ResourceExceededError) as exc_info:
            Readability(simple_article_html, options=ReadabilityOptions(max_elems_to_parse=3))

        assert exc_info.value.limit == 3
        assert exc_info.value.element_count > 3

    def test_element_limit_zero_disables_check(self, simple_article_html):
        reader = Readability(simple_article_html, options=ReadabilityOptions(max_elems_to_parse=0))
        assert reader.element_count > 0

    @pytest.mark.parametrize("markup", ["", "   ", "<!-- no content -->"])
    def test_unparseable(self, markup):
        with pytest.raises(UnparseableInputError):
            Readability(markup)

    def test_plain_text_accepted(self):
        reader = Readability("no markup here")
        assert reader.element_count == 3


class TestInvariants:
    """Property checks over generated documents."""

    @settings(max_examples=25, deadline=None)
    @given(
        lengths=st.lists(st.integers(min_value=0, max_value=900), min_size=1, max_size=5),
        wrap=st.sampled_from(["article", "div", "section"]),
    )
    def test_length_matches_text(self, lengths, wrap):
        body = f"<{wrap}>" + "".join(f"<p>{prose(length)}</p>" for length in lengths) + f"</{wrap}>"
        article = Readability(page(body)).parse()

        if article is not None:
            assert article.length == len(article.text_content)
            assert article.length >= 100
