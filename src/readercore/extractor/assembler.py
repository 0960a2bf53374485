"""
Top-candidate selection and article container assembly.

Given a scored working tree, pick the winning container, widen it to a
common ancestor when the scores say so, gather qualifying siblings into a
fresh container and prune what is left of the boilerplate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

import structlog
from bs4 import Tag

from ..config import ReadabilityOptions
from . import patterns
from .models import CandidateScore, ExtractionFlags, ScoreTable
from .scoring import ensure_candidate
from .tree import (
    DocumentTree,
    ancestors,
    class_name,
    class_weight,
    element_children,
    has_ancestor_tag,
    inner_text,
    is_element,
    link_density,
)

logger = structlog.get_logger(__name__)

CONDITIONAL_TAGS = ("form", "fieldset", "table", "ul", "div")


@dataclass
class Assembly:
    container: Tag
    top_candidate: Tag
    direction: Optional[str] = None
    created_top_candidate: bool = False


def _safe_int(value: object, default: int = 1) -> int:
    try:
        parsed = int(str(value))
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def row_and_column_count(table: Tag) -> Tuple[int, int]:
    rows = 0
    columns = 0
    for tr in table.find_all("tr"):
        rows += _safe_int(tr.get("rowspan"))
        columns_in_row = sum(_safe_int(cell.get("colspan")) for cell in tr.find_all("td"))
        columns = max(columns, columns_in_row)
    return rows, columns


def is_data_table(table: Tag) -> bool:
    """Guess whether a table holds tabular data rather than page layout."""
    role = table.get("role")
    if role == "presentation":
        return False
    if role in patterns.DATA_TABLE_ROLES:
        return True
    if table.get("datatable") == "0":
        return False
    if table.get("summary"):
        return True

    caption = table.find("caption")
    if caption is not None and caption.contents:
        return True
    if any(table.find(tag) is not None for tag in ("col", "colgroup", "tfoot", "thead", "th")):
        return True
    if table.find("table") is not None:
        return False

    rows, columns = row_and_column_count(table)
    if rows == 1 or columns == 1:
        return False
    if rows >= 10 or columns > 4:
        return True
    return rows * columns > 10


def text_density(node: Tag, tags: Iterable[str]) -> float:
    text_length = len(inner_text(node))
    if text_length == 0:
        return 0.0
    children_length = sum(len(inner_text(child)) for child in node.find_all(list(tags)))
    return children_length / text_length


class CandidateAssembler:
    """Builds the article container for one attempt."""

    def __init__(
        self,
        tree: DocumentTree,
        table: ScoreTable,
        flags: ExtractionFlags,
        options: ReadabilityOptions,
    ) -> None:
        self.tree = tree
        self.table = table
        self.flags = flags
        self.options = options
        self.data_tables: Set[int] = set()

    def assemble(self) -> Assembly:
        body = self.tree.body
        top_entries = self.table.top(self.options.nb_top_candidates)

        created = False
        if not top_entries or top_entries[0].node is body or top_entries[0].node.name == "body":
            top = self._wrap_body(body)
            created = True
        else:
            top = self.promote_candidate(top_entries)

        parent = top.parent if is_element(top.parent) else body
        direction = self._direction(top, parent)

        container = self.gather_siblings(top, parent)
        self.prune_links(container, top)

        if self.flags.clean_conditionally:
            self.mark_data_tables(container)
            for tag in CONDITIONAL_TAGS:
                self.clean_conditionally(container, tag)

        self._wrap_page(container, top, created)
        return Assembly(container=container, top_candidate=top, direction=direction, created_top_candidate=created)

    def score_of(self, node: Tag) -> float:
        entry = self.table.get(self.tree.ordinal(node))
        return entry.score if entry is not None else 0.0

    def _entry(self, node: Tag) -> CandidateScore:
        return ensure_candidate(self.tree, self.table, node, self.flags)

    def _wrap_body(self, body: Tag) -> Tag:
        logger.debug("No usable candidate, wrapping body contents")
        wrapper = self.tree.new_tag("div")
        for child in list(body.children):
            wrapper.append(child.extract())
        body.append(wrapper)
        self._entry(wrapper)
        return wrapper

    def promote_candidate(self, top_entries: List[CandidateScore]) -> Tag:
        """Widen the winner to a shared ancestor and climb while scores allow."""
        best = top_entries[0]
        top = best.node
        top_score = best.score

        alternatives = [
            ancestors(entry.node)
            for entry in top_entries[1:]
            if top_score > 0 and entry.score / top_score >= 0.75
        ]
        if len(alternatives) >= patterns.MINIMUM_TOPCANDIDATES:
            parent = top.parent
            while is_element(parent) and parent.name != "body":
                lists_containing = sum(
                    1 for lineage in alternatives if any(node is parent for node in lineage)
                )
                if lists_containing >= patterns.MINIMUM_TOPCANDIDATES:
                    top = parent
                    break
                parent = parent.parent

        self._entry(top)

        parent = top.parent
        last_score = self.score_of(top)
        threshold = last_score / 3
        hops = 0
        while is_element(parent) and parent.name != "body" and hops < patterns.MAX_PARENT_HOPS:
            hops += 1
            if self.tree.ordinal(parent) not in self.table:
                parent = parent.parent
                continue
            parent_score = self.score_of(parent)
            if parent_score < threshold:
                break
            if parent_score > last_score:
                top = parent
                break
            last_score = parent_score
            parent = parent.parent

        parent = top.parent
        while is_element(parent) and parent.name != "body" and len(element_children(parent)) == 1:
            top = parent
            parent = top.parent

        self._entry(top)
        return top

    def _direction(self, top: Tag, parent: Tag) -> Optional[str]:
        for node in [parent, top] + ancestors(parent):
            value = node.get("dir")
            if value:
                return value
        return None

    def gather_siblings(self, top: Tag, parent: Tag) -> Tag:
        """Collect the winner and any sibling that scores or reads like prose."""
        container = self.tree.new_tag("div")
        top_score = self.score_of(top)
        threshold = max(10.0, top_score * 0.2)
        top_class = class_name(top)
        ceiling = patterns.SIBLING_LINK_DENSITY_CEILING + self.options.link_density_modifier

        for sibling in element_children(parent):
            append = sibling is top
            if not append:
                bonus = top_score * 0.2 if top_class and class_name(sibling) == top_class else 0.0
                entry = self.table.get(self.tree.ordinal(sibling))
                if entry is not None and entry.score + bonus >= threshold:
                    append = True
                elif sibling.name == "p":
                    density = link_density(sibling)
                    text = inner_text(sibling)
                    if len(text) > patterns.SIBLING_MIN_TEXT_LENGTH and density < ceiling:
                        append = True
                    elif (
                        0 < len(text) <= patterns.SIBLING_MIN_TEXT_LENGTH
                        and density == 0
                        and patterns.SENTENCE_END.search(text)
                    ):
                        append = True

            if append:
                if sibling.name not in patterns.ALTER_TO_DIV_EXCEPTIONS:
                    sibling.name = "div"
                container.append(sibling.extract())

        return container

    def prune_links(self, container: Tag, top: Tag) -> None:
        ceiling = patterns.CONTAINER_LINK_DENSITY_CEILING + self.options.link_density_modifier
        while link_density(container) > ceiling:
            removable = [
                child for child in element_children(container) if child is not top and link_density(child) > ceiling
            ]
            if not removable:
                break
            victim = max(
                removable,
                key=lambda child: (link_density(child), -self.score_of(child), self.tree.ordinal(child)),
            )
            logger.debug("Pruning link-heavy sibling", tag=victim.name, link_density=link_density(victim))
            victim.extract()

    def mark_data_tables(self, container: Tag) -> None:
        for table in container.find_all("table"):
            if is_data_table(table):
                self.data_tables.add(self.tree.ordinal(table))

    def _is_data_table(self, node: Tag) -> bool:
        return self.tree.ordinal(node) in self.data_tables

    def _embed_count(self, node: Tag) -> Optional[int]:
        """Count non-video embeds, or return None when an allowed video is present."""
        videos = self.options.video_pattern
        count = 0
        for embed in node.find_all(list(patterns.EMBED_TAGS)):
            for value in embed.attrs.values():
                if isinstance(value, list):
                    value = " ".join(value)
                if videos.search(str(value)):
                    return None
            if embed.name == "object" and videos.search(embed.decode_contents()):
                return None
            count += 1
        return count

    def should_remove(self, node: Tag, tag: str) -> bool:
        """Decide whether a container-level element is boilerplate."""
        if tag == "table" and self._is_data_table(node):
            return False
        if has_ancestor_tag(node, "table", -1, self._is_data_table):
            return False
        if has_ancestor_tag(node, "code"):
            return False
        if any(self._is_data_table(table) for table in node.find_all("table")):
            return False

        is_list = tag in ("ul", "ol")
        if not is_list:
            node_text_length = len(inner_text(node))
            if node_text_length:
                list_length = sum(len(inner_text(listing)) for listing in node.find_all(["ul", "ol"]))
                is_list = list_length / node_text_length > 0.9

        weight = class_weight(node, self.flags.weight_classes)
        if weight < 0:
            return True

        if len(patterns.COMMAS.findall(inner_text(node))) >= 10:
            return False

        paragraphs = len(node.find_all("p"))
        images = len(node.find_all("img"))
        list_items = len(node.find_all("li")) - 100
        inputs = len(node.find_all("input"))
        heading_density = text_density(node, patterns.HEADING_ELEMS)

        embeds = self._embed_count(node)
        if embeds is None:
            return False

        text = inner_text(node)
        if patterns.AD_WORDS.match(text) or patterns.LOADING_WORDS.match(text):
            return True

        content_length = len(text)
        density = link_density(node)
        modifier = self.options.link_density_modifier
        textish = text_density(node, ("span", "li", "td") + tuple(patterns.DIV_TO_P_ELEMS))
        is_figure_child = has_ancestor_tag(node, "figure")

        remove = (
            (not is_figure_child and images > 1 and paragraphs / images < 0.5)
            or (not is_list and list_items > paragraphs)
            or (inputs > math.floor(paragraphs / 3))
            or (
                not is_list
                and not is_figure_child
                and heading_density < 0.9
                and content_length < 25
                and (images == 0 or images > 2)
                and density > 0
            )
            or (not is_list and weight < 25 and density > 0.2 + modifier)
            or (weight >= 25 and density > 0.5 + modifier)
            or ((embeds == 1 and content_length < 75) or embeds > 1)
            or (images == 0 and textish == 0)
        )

        # Simple lists of images stay.
        if is_list and remove:
            for child in element_children(node):
                if len(element_children(child)) > 1:
                    return remove
            if images == len(node.find_all("li")):
                return False
        return remove

    def clean_conditionally(self, container: Tag, tag: str) -> int:
        removed = 0
        for node in reversed(container.find_all(tag)):
            if self.should_remove(node, tag):
                logger.debug("Conditionally removing", tag=tag, match=class_name(node))
                node.extract()
                removed += 1
        return removed

    def _wrap_page(self, container: Tag, top: Tag, created: bool) -> None:
        if created:
            top["id"] = patterns.PAGE_ID
            top["class"] = [patterns.PAGE_CLASS]
            return
        page = self.tree.new_tag("div", id=patterns.PAGE_ID)
        page["class"] = [patterns.PAGE_CLASS]
        for child in list(container.children):
            page.append(child.extract())
        container.append(page)
