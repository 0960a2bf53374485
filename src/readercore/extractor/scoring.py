"""
Paragraph scoring and propagation into candidate containers.
"""

from __future__ import annotations

from typing import Iterable

from bs4 import Tag

from . import patterns
from .models import CandidateScore, ExtractionFlags, ScoreTable
from .tree import DocumentTree, ancestors, class_weight, inner_text, is_element, link_density, score_for_length


def initial_score(node: Tag, flags: ExtractionFlags) -> float:
    """Tag-kind bias plus keyword class weight."""
    return patterns.TAG_WEIGHTS.get(node.name, 0) + class_weight(node, flags.weight_classes)


def paragraph_score(text: str) -> float:
    return 1 + len(patterns.COMMAS.findall(text)) + score_for_length(len(text))


def propagation_divisor(depth: int) -> int:
    """Parent takes the full score, grandparent half, deeper ancestors 1/depth."""
    return 1 if depth == 1 else depth


def ensure_candidate(tree: DocumentTree, table: ScoreTable, node: Tag, flags: ExtractionFlags) -> CandidateScore:
    node_id = tree.ordinal(node)
    entry = table.get(node_id)
    if entry is None:
        entry = table.initialize(node_id, node, initial_score(node, flags))
        entry.link_density = link_density(node)
    return entry


def score_elements(
    tree: DocumentTree,
    elements: Iterable[Tag],
    flags: ExtractionFlags,
    link_density_modifier: float = 0.0,
) -> ScoreTable:
    """Score each collected paragraph and credit up to five ancestors."""
    table = ScoreTable(link_density_modifier=link_density_modifier)

    for element in elements:
        if not is_element(element.parent):
            continue

        text = inner_text(element)
        if len(text) < patterns.MIN_PARAGRAPH_LENGTH:
            continue

        lineage = ancestors(element, patterns.MAX_ANCESTOR_DEPTH)
        if not lineage:
            continue

        content_score = paragraph_score(text)
        for depth, ancestor in enumerate(lineage, start=1):
            # The root element never becomes a candidate.
            if not is_element(ancestor.parent):
                continue
            node_id = tree.ordinal(ancestor)
            entry = table.get(node_id)
            if entry is None:
                entry = table.initialize(node_id, ancestor, initial_score(ancestor, flags))
            entry.add(content_score / propagation_divisor(depth))

    for entry in table:
        entry.link_density = link_density(entry.node)

    return table
