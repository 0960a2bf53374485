"""
Unit tests for candidate selection and container assembly.
"""

import pytest

from readercore.config import ReadabilityOptions
from readercore.extractor.assembler import CandidateAssembler, is_data_table, row_and_column_count
from readercore.extractor.models import ExtractionFlags, ScoreTable
from readercore.extractor.patterns import PAGE_CLASS, PAGE_ID
from readercore.extractor.preprocess import filter_document, prepare_document
from readercore.extractor.scoring import score_elements
from readercore.extractor.tree import DocumentTree, inner_text, parse_markup
from tests.helpers import page, prose


def assemble(markup, flags=None, options=None):
    flags = flags or ExtractionFlags()
    tree = DocumentTree(prepare_document(parse_markup(markup)))
    filtered = filter_document(tree, flags)
    options = options or ReadabilityOptions()
    table = score_elements(tree, filtered.elements, flags, options.link_density_modifier)
    assembler = CandidateAssembler(tree, table, flags, options)
    return tree, assembler.assemble()


def bare_assembler(tree, flags=None, options=None):
    return CandidateAssembler(tree, ScoreTable(), flags or ExtractionFlags(), options or ReadabilityOptions())


class TestAssemble:
    """Test cases for the full assembly of one attempt."""

    def test_siblings_gathered_into_page_wrapper(self):
        """Prose siblings join the article; link-only siblings do not."""
        link_text = "See the full archive of old posts."
        markup = page(
            f'<div id="main"><p>{prose(300)}</p><p>{prose(300)}</p></div>'
            f"<p>{prose(100)}</p>"
            f'<p><a href="/archive">{link_text}</a></p>'
        )
        tree, assembly = assemble(markup)

        assert assembly.top_candidate.get("id") == "main"
        assert not assembly.created_top_candidate

        wrapper = assembly.container.find(True)
        assert wrapper.get("id") == PAGE_ID
        assert wrapper.get("class") == [PAGE_CLASS]

        text = inner_text(assembly.container)
        assert prose(100) in text
        assert link_text not in text
        assert len(text) == 700

    def test_body_wrapped_when_nothing_scores(self):
        tree, assembly = assemble(page("<p>Too short to score.</p>"))

        assert assembly.created_top_candidate
        assert assembly.top_candidate.get("id") == PAGE_ID
        assert assembly.top_candidate.get("class") == [PAGE_CLASS]
        assert inner_text(assembly.container) == "Too short to score."

    def test_direction_taken_from_candidate(self):
        markup = page(f'<div id="main" dir="rtl"><p>{prose(300)}</p><p>{prose(300)}</p></div>')
        tree, assembly = assemble(markup)

        assert assembly.direction == "rtl"

    def test_direction_missing(self, simple_article_html):
        tree, assembly = assemble(simple_article_html)
        assert assembly.direction is None

    def test_conditional_cleaning_skipped_when_relaxed(self):
        """A negatively weighted block survives once conditional cleaning is off."""
        markup = page(
            f'<div id="main"><p>{prose(300)}</p><p>{prose(300)}</p>'
            f'<div class="share-tools"><p>{prose(120)}</p><p>Share this</p></div></div>'
        )
        tree, strict = assemble(markup)
        assert strict.container.find(class_="share-tools") is None

        tree, relaxed = assemble(markup, ExtractionFlags(clean_conditionally=False))
        assert relaxed.container.find(class_="share-tools") is not None


class TestPromoteCandidate:
    """Test cases for widening the winning candidate."""

    def test_common_ancestor_of_close_alternatives(self, make_tree):
        tree = make_tree(
            page(
                '<section id="s"><div id="a">a</div><div id="b">b</div>'
                '<div id="c">c</div><div id="d">d</div></section>'
            )
        )
        table = ScoreTable()
        for node_id, score in (("a", 100), ("b", 90), ("c", 80), ("d", 80)):
            node = tree.soup.find(id=node_id)
            table.initialize(tree.ordinal(node), node, score)
        assembler = CandidateAssembler(tree, table, ExtractionFlags(), ReadabilityOptions())

        top = assembler.promote_candidate(table.top(5))
        assert top.get("id") == "s"

    def test_no_promotion_without_enough_alternatives(self, make_tree):
        tree = make_tree(page('<section><div id="a">a</div><div id="b">b</div><div id="c">c</div></section>'))
        table = ScoreTable()
        for node_id, score in (("a", 100), ("b", 90), ("c", 50)):
            node = tree.soup.find(id=node_id)
            table.initialize(tree.ordinal(node), node, score)
        assembler = CandidateAssembler(tree, table, ExtractionFlags(), ReadabilityOptions())

        assert assembler.promote_candidate(table.top(5)).get("id") == "a"

    def test_climbs_to_higher_scoring_ancestor(self, make_tree):
        tree = make_tree(
            page('<div id="g"><div id="p"><div id="t">t</div><div id="x">x</div></div><div id="y">y</div></div>')
        )
        table = ScoreTable()
        for node_id, score in (("t", 10), ("p", 8), ("g", 9)):
            node = tree.soup.find(id=node_id)
            table.initialize(tree.ordinal(node), node, score)
        assembler = CandidateAssembler(tree, table, ExtractionFlags(), ReadabilityOptions())

        assert assembler.promote_candidate(table.top(5)).get("id") == "g"

    def test_stops_below_threshold(self, make_tree):
        tree = make_tree(
            page('<div id="g"><div id="p"><div id="t">t</div><div id="x">x</div></div><div id="y">y</div></div>')
        )
        table = ScoreTable()
        for node_id, score in (("t", 30), ("p", 5), ("g", 100)):
            node = tree.soup.find(id=node_id)
            table.initialize(tree.ordinal(node), node, score)
        assembler = CandidateAssembler(tree, table, ExtractionFlags(), ReadabilityOptions())

        assert assembler.promote_candidate([table.get(tree.ordinal(tree.soup.find(id="t")))]).get("id") == "t"

    def test_climbs_through_only_children(self, make_tree):
        tree = make_tree(page('<article id="outer"><div id="mid"><div id="t">t</div></div></article><p>x</p>'))
        node = tree.soup.find(id="t")
        table = ScoreTable()
        table.initialize(tree.ordinal(node), node, 10)
        assembler = CandidateAssembler(tree, table, ExtractionFlags(), ReadabilityOptions())

        assert assembler.promote_candidate(table.top(5)).get("id") == "outer"


class TestDataTables:
    """Test cases for data table detection."""

    @pytest.mark.parametrize(
        "markup,expected",
        [
            ('<table role="presentation"><tr><th>a</th></tr></table>', False),
            ('<table role="grid"><tr><td>a</td></tr></table>', True),
            ('<table datatable="0"><tr><th>a</th></tr></table>', False),
            ('<table summary="figures"><tr><td>a</td></tr></table>', True),
            ("<table><caption>Totals</caption><tr><td>a</td></tr></table>", True),
            ("<table><tr><th>a</th><th>b</th></tr></table>", True),
            ("<table><tr><td>a</td><td>b</td><td>c</td></tr></table>", False),
            ("<table>" + "<tr><td>a</td><td>b</td></tr>" * 10 + "</table>", True),
            ("<table>" + "<tr><td>a</td><td>b</td><td>c</td></tr>" * 3 + "</table>", False),
            ("<table>" + "<tr><td>a</td><td>b</td><td>c</td><td>d</td></tr>" * 3 + "</table>", True),
        ],
    )
    def test_is_data_table(self, make_tree, markup, expected):
        tree = make_tree(markup)
        assert is_data_table(tree.soup.find("table")) is expected

    def test_nested_table_is_layout(self, make_tree):
        tree = make_tree("<table><tr><td><table><tr><td>x</td></tr></table></td><td>y</td></tr></table>")
        assert is_data_table(tree.soup.find("table")) is False

    def test_row_and_column_count_uses_spans(self, make_tree):
        tree = make_tree('<table><tr rowspan="2"><td colspan="3">a</td></tr><tr><td>b</td></tr></table>')
        assert row_and_column_count(tree.soup.find("table")) == (3, 3)


class TestCleanConditionally:
    """Test cases for conditional removal of container-level blocks."""

    def test_negative_class_removed(self, make_tree):
        tree = make_tree(f'<div id="c"><div class="comment-box"><p>{prose(200)}</p></div></div>')
        assembler = bare_assembler(tree)

        assert assembler.clean_conditionally(tree.soup.find(id="c"), "div") == 1
        assert tree.soup.find(class_="comment-box") is None

    def test_negative_class_ignored_without_class_weights(self, make_tree):
        tree = make_tree(f'<div id="c"><div class="comment-box"><p>{prose(200)}</p></div></div>')
        assembler = bare_assembler(tree, ExtractionFlags(weight_classes=False))

        assembler.clean_conditionally(tree.soup.find(id="c"), "div")
        assert tree.soup.find(class_="comment-box") is not None

    def test_link_heavy_block_removed(self, make_tree):
        tree = make_tree(
            '<div id="c"><div id="links"><p><a href="/a">Related story number one</a> '
            '<a href="/b">Related story number two</a></p></div></div>'
        )
        bare_assembler(tree).clean_conditionally(tree.soup.find(id="c"), "div")

        assert tree.soup.find(id="links") is None

    def test_link_density_modifier_relaxes_ceiling(self, make_tree):
        tree = make_tree(
            f'<div id="c"><div id="mixed"><p>{prose(120)} <a href="/a">{prose(60)}</a></p></div></div>'
        )
        options = ReadabilityOptions(link_density_modifier=0.3)
        bare_assembler(tree, options=options).clean_conditionally(tree.soup.find(id="c"), "div")

        assert tree.soup.find(id="mixed") is not None

    def test_ad_placeholder_removed(self, make_tree):
        tree = make_tree('<div id="c"><div id="ad"><p>Advertisement</p></div></div>')
        bare_assembler(tree).clean_conditionally(tree.soup.find(id="c"), "div")

        assert tree.soup.find(id="ad") is None

    def test_allowed_video_kept(self, make_tree):
        tree = make_tree(
            '<div id="c"><div id="video"><iframe src="https://www.youtube.com/embed/abc"></iframe></div>'
            '<div id="frame"><iframe src="https://widgets.example.com/poll"></iframe></div></div>'
        )
        bare_assembler(tree).clean_conditionally(tree.soup.find(id="c"), "div")

        assert tree.soup.find(id="video") is not None
        assert tree.soup.find(id="frame") is None

    def test_custom_video_pattern(self, make_tree):
        tree = make_tree(
            '<div id="c"><div id="frame"><iframe src="https://widgets.example.com/poll"></iframe></div></div>'
        )
        options = ReadabilityOptions(allowed_video_regex=r"widgets\.example\.com")
        bare_assembler(tree, options=options).clean_conditionally(tree.soup.find(id="c"), "div")

        assert tree.soup.find(id="frame") is not None

    def test_data_table_kept(self, make_tree):
        tree = make_tree(
            '<div id="c"><table class="sidebar"><thead><tr><th>Year</th></tr></thead>'
            "<tr><td>2024</td></tr></table></div>"
        )
        assembler = bare_assembler(tree)
        container = tree.soup.find(id="c")
        assembler.mark_data_tables(container)

        assert assembler.clean_conditionally(container, "table") == 0

    def test_comma_rich_block_kept(self, make_tree):
        text = ", ".join(["item"] * 12)
        tree = make_tree(f'<div id="c"><div id="list"><p><a href="/x">{text}</a></p></div></div>')
        bare_assembler(tree).clean_conditionally(tree.soup.find(id="c"), "div")

        assert tree.soup.find(id="list") is not None


class TestPruneLinks:
    """Test cases for link-density pruning of the assembled container."""

    def test_link_heavy_child_removed(self, make_tree):
        links = "".join(f'<a href="/{i}">{prose(60)}</a>' for i in range(5))
        tree = make_tree(f'<div id="c"><p id="top">{prose(100)}</p><div id="nav">{links}</div></div>')
        container = tree.soup.find(id="c")

        bare_assembler(tree).prune_links(container, tree.soup.find(id="top"))

        assert tree.soup.find(id="nav") is None
        assert tree.soup.find(id="top") is not None

    def test_top_candidate_never_pruned(self, make_tree):
        tree = make_tree(f'<div id="c"><p id="top"><a href="/x">{prose(100)}</a></p></div>')
        container = tree.soup.find(id="c")

        bare_assembler(tree).prune_links(container, tree.soup.find(id="top"))

        assert tree.soup.find(id="top") is not None

    def test_most_link_dense_child_goes_first(self, make_tree):
        tree = make_tree(
            f'<div id="c"><p id="top">{prose(100)}</p>'
            f'<p id="mostly">{prose(80)}<a href="/a">{prose(120)}</a></p>'
            f'<p id="all"><a href="/b">{prose(200)}</a></p></div>'
        )
        container = tree.soup.find(id="c")

        bare_assembler(tree).prune_links(container, tree.soup.find(id="top"))

        assert tree.soup.find(id="all") is None
        assert tree.soup.find(id="mostly") is not None
