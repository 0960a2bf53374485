"""
Extraction orchestrator: parse, prepare, retry with relaxed heuristics, clean.
"""

from __future__ import annotations

import copy
import time
from typing import List, Optional
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag

from ..config import ReadabilityOptions
from ..exceptions import ArticleNotFoundError, ResourceExceededError
from ..metadata import ArticleMetadata, MetadataExtractor
from ..observability.logging import parse_context
from .assembler import CandidateAssembler
from .cleaner import ArticleCleaner
from .models import Article, AttemptRecord, ExtractionFlags
from .preprocess import filter_document, prepare_document
from .scoring import score_elements
from .tree import DocumentTree, Markup, count_elements, inner_text, parse_markup

logger = structlog.get_logger(__name__)


class Readability:
    """
    Extracts the main article from one HTML document.

    The constructor parses the markup and enforces the element ceiling; no
    extraction work happens until `parse()` is called. The parsed tree itself
    is never modified, so `parse()` may be called more than once.
    """

    def __init__(
        self,
        markup: Markup,
        url: Optional[str] = None,
        options: Optional[ReadabilityOptions] = None,
    ) -> None:
        self.options = options or ReadabilityOptions()
        self.url = url
        self.attempts: List[AttemptRecord] = []
        self.best_length = 0

        self._soup = parse_markup(markup)
        self.element_count = count_elements(self._soup)

        limit = self.options.max_elems_to_parse
        if limit and self.element_count > limit:
            logger.warning("Document exceeds element limit", element_count=self.element_count, limit=limit)
            raise ResourceExceededError(self.element_count, limit)

    @property
    def base_url(self) -> Optional[str]:
        """Document URL adjusted by a <base href>, if the page declares one."""
        base = self._soup.find("base", href=True)
        if base is None:
            return self.url
        href = base["href"].strip()
        if not self.url:
            return href or None
        try:
            return urljoin(self.url, href)
        except ValueError:
            return self.url

    def parse(self) -> Optional[Article]:
        """Run extraction; None means no article could be found."""
        with parse_context(self.url):
            start_time = time.perf_counter()

            metadata = MetadataExtractor(disable_json_ld=self.options.disable_json_ld).extract(self._soup)
            baseline = prepare_document(copy.copy(self._soup))

            accepted = self._run_attempts(baseline, metadata)
            self.best_length = accepted.text_length
            if accepted.text_length < self.options.min_usable_length:
                logger.info(
                    "No article found",
                    best_length=accepted.text_length,
                    min_length=self.options.min_usable_length,
                    attempts=len(self.attempts),
                )
                return None

            article = self._build_article(accepted, metadata)
            if article is None:
                logger.info(
                    "No article left after cleaning",
                    attempt=accepted.index,
                    best_length=self.best_length,
                    min_length=self.options.min_usable_length,
                )
                return None
            logger.info(
                "Article extracted",
                attempt=accepted.index,
                length=article.length,
                processing_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            return article

    def _run_attempts(self, baseline: BeautifulSoup, metadata: ArticleMetadata) -> AttemptRecord:
        self.attempts = []
        flags: Optional[ExtractionFlags] = ExtractionFlags()

        while flags is not None:
            attempt = self._attempt(baseline, flags, metadata, len(self.attempts))
            self.attempts.append(attempt)

            logger.debug(
                "Extraction attempt finished",
                attempt=attempt.index,
                flags=sorted(flags.enabled()),
                text_length=attempt.text_length,
            )

            if attempt.text_length >= self.options.char_threshold:
                return attempt
            if self.options.accept_any_length and attempt.text_length > 0:
                return attempt

            flags = flags.relax()

        # max() keeps the first of equally long attempts.
        best = max(self.attempts, key=lambda record: record.text_length)
        logger.debug("All heuristics relaxed, taking longest attempt", attempt=best.index, text_length=best.text_length)
        return best

    def _attempt(
        self,
        baseline: BeautifulSoup,
        flags: ExtractionFlags,
        metadata: ArticleMetadata,
        index: int,
    ) -> AttemptRecord:
        tree = DocumentTree.copy_of(baseline)

        filtered = filter_document(tree, flags, capture_byline=not metadata.byline)
        table = score_elements(tree, filtered.elements, flags, self.options.link_density_modifier)

        if self.options.debug:
            for entry in table.top(self.options.nb_top_candidates):
                logger.debug(
                    "Candidate",
                    attempt=index,
                    node_id=entry.node_id,
                    tag=entry.node.name,
                    score=round(entry.score, 3),
                    link_density=round(entry.link_density, 3),
                )

        assembly = CandidateAssembler(tree, table, flags, self.options).assemble()
        return AttemptRecord(
            index=index,
            flags=flags,
            text_length=len(inner_text(assembly.container)),
            container=assembly.container,
            top_candidate=assembly.top_candidate,
            byline=filtered.byline,
            direction=assembly.direction,
            tree=tree,
        )

    def _build_article(self, accepted: AttemptRecord, metadata: ArticleMetadata) -> Optional[Article]:
        container = accepted.container
        raw_content = container.decode_contents()

        cleaner = ArticleCleaner(
            accepted.tree,
            self.options,
            title=metadata.title,
            base_url=self.base_url,
            document_url=self.url,
            weight_classes=accepted.flags.weight_classes,
        )
        cleaner.clean(container)

        # Cleaning drops forms and navigation outright and can empty the container.
        self.best_length = len(inner_text(container))
        if self.best_length < self.options.min_usable_length:
            return None

        text_content = container.get_text()
        excerpt = metadata.excerpt or first_paragraph_text(container)

        return Article(
            title=metadata.title,
            content=container.decode_contents(),
            text_content=text_content,
            length=len(text_content),
            excerpt=excerpt,
            byline=metadata.byline or accepted.byline,
            dir=accepted.direction,
            site_name=metadata.site_name,
            lang=metadata.lang,
            published_time=metadata.published_time,
            raw_content=raw_content,
        )


def first_paragraph_text(container: Tag) -> Optional[str]:
    for paragraph in container.find_all("p"):
        text = paragraph.get_text().strip()
        if text:
            return text
    return None


def extract_article(
    markup: Markup,
    url: Optional[str] = None,
    options: Optional[ReadabilityOptions] = None,
) -> Article:
    """Extract an article or raise ArticleNotFoundError."""
    reader = Readability(markup, url=url, options=options)
    article = reader.parse()
    if article is None:
        raise ArticleNotFoundError(reader.best_length, reader.options.min_usable_length)
    return article
