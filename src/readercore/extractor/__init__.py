"""
readercore Content Extraction Module

Finds the main article of an HTML page in four stages:
1. Preparation: strip scripts and styles, normalise legacy markup
2. Scoring: score paragraphs and credit their ancestors
3. Assembly: pick the best container and gather its related siblings
4. Cleaning: remove leftover boilerplate and normalise the output markup

Stages 2 and 3 are retried with progressively relaxed heuristics until enough
text is found.
"""

from . import patterns, tree
from .models import Article, AttemptRecord, CandidateScore, ExtractionFlags, ScoreTable
from .readability import Readability, extract_article
from .readerable import is_probably_readerable

__all__ = [
    "Article",
    "AttemptRecord",
    "CandidateScore",
    "ExtractionFlags",
    "Readability",
    "ScoreTable",
    "extract_article",
    "is_probably_readerable",
    "patterns",
    "tree",
]
