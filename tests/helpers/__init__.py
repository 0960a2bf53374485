from .markup import ARTICLE_TITLE, OTHER_SENTENCE, SENTENCE, SIDEBAR_SENTENCE, page, prose

__all__ = ["ARTICLE_TITLE", "OTHER_SENTENCE", "SENTENCE", "SIDEBAR_SENTENCE", "page", "prose"]
