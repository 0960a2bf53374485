"""
Quick check for whether a page is worth running full extraction on.
"""

from __future__ import annotations

import math
from typing import List, Optional, Union

from bs4 import BeautifulSoup, Tag

from ..config import ReaderableOptions
from . import patterns
from .tree import PARSER, has_ancestor_tag, is_probably_visible, match_string


def _candidate_nodes(soup: BeautifulSoup) -> List[Tag]:
    nodes: List[Tag] = soup.find_all(["p", "pre", "article"])
    seen = {id(node) for node in nodes}
    for br in soup.select("div > br"):
        parent = br.parent
        if id(parent) not in seen:
            seen.add(id(parent))
            nodes.append(parent)
    return nodes


def is_probably_readerable(
    markup: Union[str, bytes, BeautifulSoup],
    options: Optional[ReaderableOptions] = None,
) -> bool:
    """Decide from paragraph lengths alone whether the page holds an article.

    Never mutates `markup` when given a parsed tree.
    """
    options = options or ReaderableOptions()

    if isinstance(markup, BeautifulSoup):
        soup = markup
    else:
        if not markup or not markup.strip():
            return False
        soup = BeautifulSoup(markup, PARSER)

    score = 0.0
    for node in _candidate_nodes(soup):
        if not is_probably_visible(node):
            continue

        match = match_string(node)
        if patterns.UNLIKELY_CANDIDATES.search(match) and not patterns.MAYBE_CANDIDATE.search(match):
            continue

        if node.name == "p" and has_ancestor_tag(node, "li", max_depth=0):
            continue

        text_length = len(node.get_text().strip())
        if text_length < options.min_content_length:
            continue

        score += math.sqrt(text_length - options.min_content_length)
        if score > options.min_score:
            return True

    return False
