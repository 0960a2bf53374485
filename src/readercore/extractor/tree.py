"""
Tree adapter over BeautifulSoup.

Parses markup into a mutable tree and gives every element a stable integer
ordinal (document order) so that score tables can be keyed by identity
instead of by node reference.
"""

from __future__ import annotations

import copy
import math
from typing import Callable, Dict, List, Optional, Union

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
from bs4.exceptions import ParserRejectedMarkup

from ..exceptions import UnparseableInputError
from . import patterns

PARSER = "html.parser"

Markup = Union[str, bytes]


def parse_markup(markup: Markup) -> BeautifulSoup:
    """Build a tree from raw markup, failing fast on input that is not markup."""
    if not isinstance(markup, (str, bytes)):
        raise UnparseableInputError(f"Markup must be str or bytes, not {type(markup).__name__}")
    if not markup.strip():
        raise UnparseableInputError("Markup is empty")

    try:
        soup = BeautifulSoup(markup, PARSER)
    except ParserRejectedMarkup as e:
        raise UnparseableInputError(f"Markup rejected by parser: {e}") from e

    if soup.find(True) is None:
        if not soup.get_text().strip():
            raise UnparseableInputError("Markup contains no elements or text")
        wrap_in_document(soup)
    return soup


def wrap_in_document(soup: BeautifulSoup) -> None:
    """Move bare top-level text into an html/head/body skeleton."""
    root = soup.new_tag("html")
    root.append(soup.new_tag("head"))
    body = soup.new_tag("body")
    root.append(body)
    for node in list(soup.contents):
        body.append(node.extract())
    soup.append(root)


def count_elements(soup: BeautifulSoup) -> int:
    return sum(1 for _ in soup.find_all(True))


class DocumentTree:
    """An owned working copy of a document with ordinal node identities."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup
        # Holding the nodes keeps id() values from being recycled while indexed.
        self._nodes: List[Tag] = []
        self._ordinals: Dict[int, int] = {}
        for node in soup.find_all(True):
            self.ordinal(node)

    @classmethod
    def copy_of(cls, baseline: BeautifulSoup) -> DocumentTree:
        return cls(copy.copy(baseline))

    def ordinal(self, node: Tag) -> int:
        key = id(node)
        ordinal = self._ordinals.get(key)
        if ordinal is None:
            ordinal = len(self._nodes)
            self._nodes.append(node)
            self._ordinals[key] = ordinal
        return ordinal

    @property
    def root(self) -> Optional[Tag]:
        return self.soup.find("html")

    @property
    def body(self) -> Tag:
        body = self.soup.find("body")
        if body is None:
            body = self.soup.new_tag("body")
            root = self.root
            container = root if root is not None else self.soup
            for child in list(container.children):
                if isinstance(child, Doctype) or (isinstance(child, Tag) and child.name == "head"):
                    continue
                body.append(child.extract())
            container.append(body)
            self.ordinal(body)
        return body

    def new_tag(self, name: str, **attrs: str) -> Tag:
        tag = self.soup.new_tag(name, attrs=attrs)
        self.ordinal(tag)
        return tag


def is_element(node: object) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def element_children(node: Tag) -> List[Tag]:
    return [child for child in node.children if is_element(child)]


def next_element(node: Tag) -> Optional[Tag]:
    sibling = node.next_sibling
    while sibling is not None and not is_element(sibling):
        sibling = sibling.next_sibling
    return sibling


def following_node(node: Tag, skip_children: bool = False, stop: Optional[Tag] = None) -> Optional[Tag]:
    if not skip_children:
        for child in node.children:
            if is_element(child):
                return child
    current: Optional[Tag] = node
    while current is not None and current is not stop:
        sibling = next_element(current)
        if sibling is not None:
            return sibling
        parent = current.parent
        current = parent if is_element(parent) else None
    return None


def class_name(node: Tag) -> str:
    value = node.get("class")
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def match_string(node: Tag) -> str:
    return f"{class_name(node)} {node.get('id') or ''}"


def inner_text(node: Tag, normalize: bool = True) -> str:
    text = node.get_text().strip()
    if normalize:
        return patterns.NORMALIZE_WHITESPACE.sub(" ", text)
    return text


def char_count(node: Tag) -> int:
    return len(patterns.COMMAS.findall(inner_text(node)))


def link_density(node: Tag) -> float:
    text_length = len(inner_text(node))
    if text_length == 0:
        return 0.0

    link_length = 0.0
    for link in node.find_all("a"):
        href = link.get("href")
        coefficient = 0.3 if href and patterns.HASH_URL.match(href) else 1.0
        link_length += len(inner_text(link)) * coefficient
    return link_length / text_length


def class_weight(node: Tag, enabled: bool = True) -> int:
    """Keyword bonus for class and id, applied once; a positive match wins."""
    if not enabled:
        return 0

    value = match_string(node)
    if patterns.POSITIVE.search(value):
        return patterns.CLASS_WEIGHT
    if patterns.NEGATIVE.search(value):
        return -patterns.CLASS_WEIGHT
    return 0


def ancestors(node: Tag, max_depth: int = 0) -> List[Tag]:
    """Element ancestors, nearest first; `max_depth` 0 means unbounded."""
    found: List[Tag] = []
    parent = node.parent
    while is_element(parent):
        found.append(parent)
        if max_depth and len(found) == max_depth:
            break
        parent = parent.parent
    return found


def has_ancestor_tag(
    node: Tag,
    tag_name: str,
    max_depth: int = 3,
    predicate: Optional[Callable[[Tag], bool]] = None,
) -> bool:
    depth = 0
    parent = node.parent
    while is_element(parent):
        if max_depth > 0 and depth > max_depth:
            return False
        if parent.name == tag_name and (predicate is None or predicate(parent)):
            return True
        parent = parent.parent
        depth += 1
    return False


def is_probably_visible(node: Tag) -> bool:
    style = node.get("style") or ""
    if patterns.DISPLAY_NONE.search(style) or patterns.VISIBILITY_HIDDEN.search(style):
        return False
    if node.has_attr("hidden"):
        return False
    if node.get("aria-hidden") == "true" and "fallback-image" not in class_name(node):
        return False
    return True


def has_media(node: Tag) -> bool:
    if node.name in patterns.MEDIA_ELEMS:
        return True
    return node.find(list(patterns.MEDIA_ELEMS)) is not None


def is_element_without_content(node: Tag) -> bool:
    if node.get_text().strip():
        return False
    children = element_children(node)
    return all(child.name in ("br", "hr") for child in children)


def has_single_tag_inside(node: Tag, tag_name: str) -> bool:
    children = element_children(node)
    if len(children) != 1 or children[0].name != tag_name:
        return False
    return not any(
        isinstance(child, NavigableString) and not isinstance(child, Comment) and child.strip()
        for child in node.children
    )


def has_child_block_element(node: Tag) -> bool:
    return any(
        child.name in patterns.DIV_TO_P_ELEMS or has_child_block_element(child) for child in element_children(node)
    )


def is_phrasing_content(node: object) -> bool:
    if isinstance(node, NavigableString):
        return True
    if not is_element(node):
        return False
    if node.name in patterns.PHRASING_ELEMS:
        return True
    return node.name in ("a", "del", "ins") and all(is_phrasing_content(child) for child in node.children)


def is_whitespace(node: object) -> bool:
    if isinstance(node, NavigableString):
        return not node.strip()
    return is_element(node) and node.name == "br"


def is_single_image(node: Tag) -> bool:
    while node.name != "img":
        children = element_children(node)
        if len(children) != 1 or node.get_text().strip():
            return False
        node = children[0]
    return True


def text_similarity(text_a: str, text_b: str) -> float:
    """Share of `text_b` (by token length) that also appears in `text_a`."""
    tokens_a = [token for token in patterns.TOKENIZE.split(text_a.lower()) if token]
    tokens_b = [token for token in patterns.TOKENIZE.split(text_b.lower()) if token]
    if not tokens_a or not tokens_b:
        return 0.0
    unique_b = [token for token in tokens_b if token not in tokens_a]
    distance_b = len(" ".join(unique_b)) / len(" ".join(tokens_b))
    return 1 - distance_b


def word_count(text: str) -> int:
    return len([word for word in patterns.WHITESPACE.split(text.strip()) if word])


def score_for_length(text_length: int) -> int:
    return min(math.floor(text_length / 100), 3)
