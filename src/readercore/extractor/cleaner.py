"""
Post-extraction cleaning of the accepted article container.
"""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urljoin

import structlog
from bs4 import NavigableString, Tag

from ..config import ReadabilityOptions
from . import patterns
from .tree import (
    DocumentTree,
    class_weight,
    element_children,
    following_node,
    has_media,
    has_single_tag_inside,
    is_element,
    is_element_without_content,
    is_phrasing_content,
    match_string,
)

logger = structlog.get_logger(__name__)

LAZY_SRCSET = re.compile(r"\.(jpg|jpeg|png|webp)\s+\d", re.IGNORECASE)
LAZY_SRC = re.compile(r"^\s*\S+\.(jpg|jpeg|png|webp)\S*\s*$", re.IGNORECASE)
MAX_PLACEHOLDER_BYTES = 133
URL_ATTRIBUTES = ("src", "poster")
MEDIA_URL_TAGS = ("img", "picture", "figure", "video", "audio", "source")
NAVIGATION_TAGS = ("nav", "div", "section", "ul", "ol")
WRAPPER_TAGS = ("div", "section")


def normalize_title(text: str) -> str:
    return patterns.WHITESPACE.sub(" ", text).strip().casefold()


def headings_match(heading: str, title: str) -> bool:
    """Equal, or one contains the other and their lengths are close."""
    if heading == title:
        return True
    if heading in title or title in heading:
        shorter, longer = sorted((len(heading), len(title)))
        return longer > 0 and shorter / longer >= patterns.TITLE_MATCH_RATIO
    return False


def _next_non_whitespace(node: object) -> Optional[object]:
    node = getattr(node, "next_sibling", None)
    while isinstance(node, NavigableString) and not node.strip():
        node = node.next_sibling
    return node


class ArticleCleaner:
    """Runs the cleaning pipeline once over the accepted container."""

    def __init__(
        self,
        tree: DocumentTree,
        options: ReadabilityOptions,
        title: Optional[str] = None,
        base_url: Optional[str] = None,
        document_url: Optional[str] = None,
        weight_classes: bool = True,
    ) -> None:
        self.tree = tree
        self.options = options
        self.title = title
        self.base_url = base_url
        self.document_url = document_url
        self.weight_classes = weight_classes

    def clean(self, container: Tag) -> Tag:
        self.clean_styles(container)
        self.fix_lazy_images(container)
        self.remove_never_content(container)
        self.remove_share_elements(container)
        self.remove_navigation(container)
        if self.weight_classes:
            self.clean_headers(container)
        removed = self.remove_empty_paragraphs(container)
        deduped = self.remove_title_heading(container)
        self.normalize_structure(container)
        self.fix_relative_uris(container)
        self.simplify_nested_elements(container)
        self.clean_classes(container)
        logger.debug("Cleaned article", empty_paragraphs=removed, title_heading_removed=deduped)
        return container

    # --- Attribute and media normalisation ---

    def clean_styles(self, root: Tag) -> None:
        stack: List[Tag] = [root]
        while stack:
            node = stack.pop()
            if node.name == "svg":
                continue
            for attribute in patterns.PRESENTATIONAL_ATTRIBUTES:
                if attribute in node.attrs:
                    del node[attribute]
            if node.name in patterns.DEPRECATED_SIZE_ATTRIBUTE_ELEMS:
                for attribute in ("width", "height"):
                    if attribute in node.attrs:
                        del node[attribute]
            stack.extend(element_children(node))

    def fix_lazy_images(self, root: Tag) -> None:
        for node in root.find_all(["img", "picture", "figure"]):
            src = node.get("src")
            if src:
                match = patterns.B64_DATA_URL.match(src)
                if match and match.group(1) != "image/svg+xml":
                    has_alternative = any(
                        name != "src" and isinstance(value, str) and patterns.IMAGE_EXTENSION.search(value)
                        for name, value in node.attrs.items()
                    )
                    if has_alternative and len(src) - match.end() < MAX_PLACEHOLDER_BYTES:
                        del node["src"]

            classes = " ".join(node.get("class") or [])
            if (node.get("src") or node.get("srcset")) and "lazy" not in classes.lower():
                continue

            for name, value in list(node.attrs.items()):
                if name in ("src", "srcset", "alt") or not isinstance(value, str):
                    continue
                copy_to = None
                if LAZY_SRCSET.search(value):
                    copy_to = "srcset"
                elif LAZY_SRC.match(value):
                    copy_to = "src"
                if copy_to is None:
                    continue

                if node.name in ("img", "picture"):
                    node[copy_to] = value
                elif node.name == "figure" and node.find(["img", "picture"]) is None:
                    image = self.tree.new_tag("img")
                    image[copy_to] = value
                    node.append(image)

    def is_allowed_video(self, node: Tag) -> bool:
        videos = self.options.video_pattern
        for value in node.attrs.values():
            if isinstance(value, list):
                value = " ".join(value)
            if videos.search(str(value)):
                return True
        return node.name == "object" and bool(videos.search(node.decode_contents()))

    def remove_never_content(self, root: Tag) -> int:
        removed = 0
        for node in root.find_all(list(patterns.NEVER_CONTENT_TAGS)):
            if node.name in patterns.EMBED_TAGS and self.is_allowed_video(node):
                continue
            node.extract()
            removed += 1
        return removed

    # --- Boilerplate removal ---

    def remove_share_elements(self, root: Tag) -> int:
        removed = 0
        for node in root.find_all(True):
            if not patterns.SHARE_ELEMENTS.search(match_string(node)):
                continue
            if len(node.get_text()) < patterns.SHARE_ELEMENT_THRESHOLD:
                node.extract()
                removed += 1
        return removed

    def _prune_empty_wrappers(self, node: Optional[Tag], root: Tag) -> None:
        while (
            is_element(node)
            and node is not root
            and node.name in WRAPPER_TAGS
            and node.get("id") != patterns.PAGE_ID
            and not node.get_text().strip()
            and not has_media(node)
        ):
            parent = node.parent
            node.extract()
            node = parent

    def remove_navigation(self, root: Tag) -> int:
        removed = 0
        for node in root.find_all(list(NAVIGATION_TAGS)):
            if node.name != "nav" and not patterns.NAVIGATION.search(match_string(node)):
                continue
            parent = node.parent
            node.extract()
            removed += 1
            self._prune_empty_wrappers(parent, root)
        return removed

    def clean_headers(self, root: Tag) -> int:
        removed = 0
        for heading in root.find_all(["h1", "h2"]):
            if class_weight(heading) < 0:
                heading.extract()
                removed += 1
        return removed

    def remove_empty_paragraphs(self, root: Tag) -> int:
        """Remove text-less, media-less paragraphs until a pass removes nothing."""
        total = 0
        while True:
            removed = 0
            for paragraph in root.find_all("p"):
                if not paragraph.get_text().strip() and not has_media(paragraph):
                    paragraph.extract()
                    removed += 1
            if not removed:
                return total
            total += removed

    def remove_title_heading(self, root: Tag) -> bool:
        """Drop the first heading that repeats the article title."""
        title = normalize_title(self.title or "")
        if not title:
            return False
        for heading in root.find_all(list(patterns.HEADING_ELEMS)):
            text = normalize_title(heading.get_text())
            if text and headings_match(text, title):
                heading.extract()
                return True
        return False

    def normalize_structure(self, root: Tag) -> None:
        for heading in root.find_all("h1"):
            heading.name = "h2"

        for br in root.find_all("br"):
            following = _next_non_whitespace(br)
            if is_element(following) and following.name == "p":
                br.extract()

        for table in root.find_all("table"):
            if table.parent is None:
                continue
            body = table
            if has_single_tag_inside(table, "tbody"):
                body = element_children(table)[0]
            if not has_single_tag_inside(body, "tr"):
                continue
            row = element_children(body)[0]
            if not has_single_tag_inside(row, "td"):
                continue
            cell = element_children(row)[0]
            cell.name = "p" if all(is_phrasing_content(child) for child in cell.children) else "div"
            cell.attrs = {}
            table.replace_with(cell.extract())

    # --- Post-processing ---

    def to_absolute(self, uri: str) -> str:
        if not self.base_url:
            return uri
        if self.base_url == self.document_url and uri.startswith("#"):
            return uri
        try:
            return urljoin(self.base_url, uri)
        except ValueError:
            return uri

    def _absolute_srcset(self, srcset: str) -> str:
        return patterns.SRCSET_URL.sub(
            lambda m: self.to_absolute(m.group(1)) + (m.group(2) or "") + m.group(3),
            srcset,
        )

    def fix_relative_uris(self, root: Tag) -> None:
        for link in root.find_all("a", href=True):
            href = link["href"].strip()
            if href.lower().startswith("javascript:"):
                if len(link.contents) == 1 and isinstance(link.contents[0], NavigableString):
                    link.replace_with(NavigableString(link.get_text()))
                else:
                    link.name = "span"
                    link.attrs = {}
                continue
            link["href"] = self.to_absolute(href)

        for node in root.find_all(list(MEDIA_URL_TAGS)):
            for attribute in URL_ATTRIBUTES:
                value = node.get(attribute)
                if value:
                    node[attribute] = self.to_absolute(value)
            srcset = node.get("srcset")
            if srcset:
                node["srcset"] = self._absolute_srcset(srcset)

    def simplify_nested_elements(self, root: Tag) -> None:
        node = following_node(root, stop=root)
        while node is not None:
            if node.name in WRAPPER_TAGS and not (node.get("id") or "").startswith("readability"):
                if is_element_without_content(node):
                    following = following_node(node, skip_children=True, stop=root)
                    node.extract()
                    node = following
                    continue
                if has_single_tag_inside(node, "div") or has_single_tag_inside(node, "section"):
                    child = element_children(node)[0]
                    for name, value in node.attrs.items():
                        child[name] = value
                    node.replace_with(child.extract())
                    node = child
                    continue
            node = following_node(node, stop=root)

    def clean_classes(self, root: Tag) -> None:
        if self.options.keep_classes:
            return
        preserved = set(self.options.classes_to_preserve) | {patterns.PAGE_CLASS}
        for node in [root] + root.find_all(True):
            classes = node.get("class")
            if classes is None:
                continue
            if isinstance(classes, str):
                classes = classes.split()
            kept = [name for name in classes if name in preserved]
            if kept:
                node["class"] = kept
            else:
                del node["class"]
