"""
Data models for extraction results and per-attempt scoring state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from bs4 import Tag

if TYPE_CHECKING:
    from .tree import DocumentTree


@dataclass(slots=True, frozen=True)
class Article:
    """A successfully extracted article."""

    title: Optional[str]
    content: Optional[str]
    text_content: Optional[str]
    length: int
    excerpt: Optional[str] = None
    byline: Optional[str] = None
    dir: Optional[str] = None
    site_name: Optional[str] = None
    lang: Optional[str] = None
    published_time: Optional[str] = None
    raw_content: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the result."""
        if self.length != len(self.text_content or ""):
            raise ValueError("length must equal the character count of text_content")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class ExtractionFlags:
    """Heuristic switches; relaxed one at a time, never switched back on."""

    strip_unlikely: bool = True
    weight_classes: bool = True
    clean_conditionally: bool = True

    RELAX_ORDER = ("strip_unlikely", "weight_classes", "clean_conditionally")

    def relax(self) -> Optional[ExtractionFlags]:
        """Return a copy with the next flag turned off, or None when all are off."""
        for name in self.RELAX_ORDER:
            if getattr(self, name):
                return replace(self, **{name: False})
        return None

    def enabled(self) -> frozenset[str]:
        return frozenset(name for name in self.RELAX_ORDER if getattr(self, name))

    def is_subset_of(self, other: ExtractionFlags) -> bool:
        return self.enabled() <= other.enabled()


@dataclass(slots=True)
class CandidateScore:
    """Score table entry for one candidate container."""

    node_id: int
    node: Tag
    initial_score: float
    content_score: float = 0.0
    link_density: float = 0.0
    link_density_modifier: float = 0.0

    @property
    def score(self) -> float:
        penalty = min(max(self.link_density - self.link_density_modifier, 0.0), 1.0)
        return self.content_score * (1 - penalty)

    def add(self, contribution: float) -> None:
        if contribution < 0:
            raise ValueError("score contributions must be non-negative")
        self.content_score += contribution


@dataclass
class ScoreTable:
    """Content scores keyed by node ordinal."""

    entries: Dict[int, CandidateScore] = field(default_factory=dict)
    link_density_modifier: float = 0.0

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CandidateScore]:
        return iter(self.entries.values())

    def get(self, node_id: Optional[int]) -> Optional[CandidateScore]:
        if node_id is None:
            return None
        return self.entries.get(node_id)

    def initialize(self, node_id: int, node: Tag, initial_score: float) -> CandidateScore:
        entry = self.entries.get(node_id)
        if entry is None:
            entry = CandidateScore(
                node_id=node_id,
                node=node,
                initial_score=initial_score,
                content_score=initial_score,
                link_density_modifier=self.link_density_modifier,
            )
            self.entries[node_id] = entry
        return entry

    def top(self, limit: int) -> List[CandidateScore]:
        """Best `limit` candidates, highest score first, earlier node on ties."""
        ranked = sorted(self.entries.values(), key=lambda entry: (-entry.score, entry.node_id))
        return ranked[:limit]


@dataclass(slots=True)
class AttemptRecord:
    """Outcome of one pass of the relaxation loop."""

    index: int
    flags: ExtractionFlags
    text_length: int
    container: Tag = field(repr=False)
    top_candidate: Optional[Tag] = field(default=None, repr=False)
    byline: Optional[str] = None
    direction: Optional[str] = None
    tree: Optional[DocumentTree] = field(default=None, repr=False)
