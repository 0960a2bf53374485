"""
Helpers for building test documents with predictable text lengths.
"""

SENTENCE = "Readers keep returning to long, careful explanations of how things actually work. "
OTHER_SENTENCE = "Bakers still argue about hydration ratios while the oven slowly comes up to heat. "
SIDEBAR_SENTENCE = "Subscribe now and save on the best deals of the season only. "
ARTICLE_TITLE = "Understanding Sourdough Starters"


def prose(length, sentence=SENTENCE):
    """Return text of exactly `length` characters with no surrounding whitespace."""
    repeats = length // len(sentence) + 1
    text = (sentence * repeats)[:length]
    if text.endswith(" "):
        text = text[:-1] + "."
    return text


def page(body, head="", lang="en"):
    """Wrap body markup in a complete HTML document."""
    return f'<!DOCTYPE html><html lang="{lang}"><head>{head}</head><body>{body}</body></html>'
