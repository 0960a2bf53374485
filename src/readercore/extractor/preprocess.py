"""
Document preparation and unlikely-candidate filtering.

`prepare_document` runs once per parse and produces the baseline tree that
every attempt copies. `filter_document` runs once per attempt on that copy,
applies the flag-gated removals and collects the elements to score.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import structlog
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from . import patterns
from .models import ExtractionFlags
from .tree import (
    DocumentTree,
    element_children,
    following_node,
    has_ancestor_tag,
    has_child_block_element,
    has_single_tag_inside,
    inner_text,
    is_element,
    is_element_without_content,
    is_phrasing_content,
    is_probably_visible,
    is_whitespace,
    link_density,
    match_string,
)

logger = structlog.get_logger(__name__)

UNCONDITIONAL_REMOVALS = ("script", "noscript", "style", "template")


@dataclass
class FilterResult:
    """Elements collected for scoring plus anything captured on the way."""

    elements: List[Tag] = field(default_factory=list)
    byline: Optional[str] = None
    removed: int = 0


def prepare_document(soup: BeautifulSoup) -> BeautifulSoup:
    """Strip scripts, styles and comments and normalise legacy markup in place."""
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for node in soup.find_all(list(UNCONDITIONAL_REMOVALS)):
        node.decompose()

    for font in soup.find_all("font"):
        font.name = "span"

    tree = DocumentTree(soup)
    replace_brs(tree, tree.body)
    return soup


def _next_significant(node: Optional[object]) -> Optional[object]:
    while node is not None and isinstance(node, NavigableString) and not node.strip():
        node = node.next_sibling
    return node


def replace_brs(tree: DocumentTree, root: Tag) -> None:
    """Turn runs of two or more <br> into paragraphs holding the following text."""
    for br in root.find_all("br"):
        if br.parent is None:
            continue

        following = br.next_sibling
        replaced = False
        following = _next_significant(following)
        while is_element(following) and following.name == "br":
            replaced = True
            sibling = following.next_sibling
            following.extract()
            following = _next_significant(sibling)

        if not replaced:
            continue

        paragraph = tree.new_tag("p")
        br.replace_with(paragraph)

        following = paragraph.next_sibling
        while following is not None:
            if is_element(following) and following.name == "br":
                after = _next_significant(following.next_sibling)
                if is_element(after) and after.name == "br":
                    break
            if not is_phrasing_content(following):
                break
            sibling = following.next_sibling
            paragraph.append(following.extract())
            following = sibling

        while paragraph.contents and is_whitespace(paragraph.contents[-1]):
            paragraph.contents[-1].extract()

        if is_element(paragraph.parent) and paragraph.parent.name == "p":
            paragraph.parent.name = "div"


def is_valid_byline(node: Tag, match: str) -> bool:
    rel = node.get("rel")
    if isinstance(rel, list):
        rel = " ".join(rel)
    itemprop = node.get("itemprop") or ""
    if not (rel == "author" or "author" in itemprop or patterns.BYLINE.search(match)):
        return False
    text = node.get_text().strip()
    return 0 < len(text) < 100


def is_unlikely_candidate(node: Tag, match: str) -> bool:
    if node.name in ("body", "a") or node.name in patterns.STRUCTURAL_CONTENT_TAGS:
        return False
    if not patterns.UNLIKELY_CANDIDATES.search(match) or patterns.MAYBE_CANDIDATE.search(match):
        return False
    return not has_ancestor_tag(node, "table") and not has_ancestor_tag(node, "code")


def wrap_phrasing_content(tree: DocumentTree, node: Tag) -> None:
    """Group consecutive phrasing children of a div into paragraphs."""
    paragraph: Optional[Tag] = None
    for child in list(node.children):
        if is_phrasing_content(child):
            if paragraph is not None:
                paragraph.append(child.extract())
            elif not is_whitespace(child):
                paragraph = tree.new_tag("p")
                child.replace_with(paragraph)
                paragraph.append(child)
        elif paragraph is not None:
            while paragraph.contents and is_whitespace(paragraph.contents[-1]):
                paragraph.contents[-1].extract()
            paragraph = None


def filter_document(tree: DocumentTree, flags: ExtractionFlags, capture_byline: bool = True) -> FilterResult:
    """Walk the working copy, removing unlikely nodes and collecting paragraphs."""
    result = FilterResult()
    body = tree.body
    node: Optional[Tag] = body

    while node is not None:
        match = match_string(node)

        remove = False
        if node is not body:
            if not is_probably_visible(node):
                remove = True
            elif node.get("aria-modal") == "true" and node.get("role") == "dialog":
                remove = True
            elif capture_byline and result.byline is None and is_valid_byline(node, match):
                result.byline = inner_text(node)
                remove = True
            elif flags.strip_unlikely and is_unlikely_candidate(node, match):
                logger.debug("Removing unlikely candidate", tag=node.name, match=match.strip())
                remove = True
            elif flags.strip_unlikely and node.get("role") in patterns.UNLIKELY_ROLES:
                logger.debug("Removing content with role", tag=node.name, role=node.get("role"))
                remove = True
            elif node.name in ("div", "section", "header") + patterns.HEADING_ELEMS and is_element_without_content(
                node
            ):
                remove = True

        if remove:
            following = following_node(node, skip_children=True, stop=body)
            node.extract()
            result.removed += 1
            node = following
            continue

        if node.name in patterns.TAGS_TO_SCORE:
            result.elements.append(node)

        if node.name == "div":
            wrap_phrasing_content(tree, node)

            if has_single_tag_inside(node, "p") and link_density(node) < patterns.SIBLING_LINK_DENSITY_CEILING:
                paragraph = element_children(node)[0]
                node.replace_with(paragraph.extract())
                node = paragraph
                result.elements.append(node)
            elif not has_child_block_element(node):
                node.name = "p"
                result.elements.append(node)

        node = following_node(node, stop=body)

    return result
