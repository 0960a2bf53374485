"""
Keyword and markup pattern tables used across the extraction engine.

Everything here is compiled at import time and only ever read afterwards.
"""

from __future__ import annotations

import re

UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|footer|gdpr|header|"
    r"legends|menu|related|remark|replies|rss|shoutbox|sidebar|skyscraper|social|sponsor|supplemental|"
    r"ad-break|agegate|pagination|pager|popup|yom-remote",
    re.IGNORECASE,
)
MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|mathjax|shadow", re.IGNORECASE)

POSITIVE = re.compile(
    r"article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story",
    re.IGNORECASE,
)
NEGATIVE = re.compile(
    r"-ad-|hidden|^hid$| hid$| hid |^hid |banner|combx|comment|com-|contact|footer|gdpr|masthead|media|meta|"
    r"outbrain|promo|related|scroll|share|shoutbox|sidebar|skyscraper|sponsor|shopping|tags|widget",
    re.IGNORECASE,
)
BYLINE = re.compile(r"byline|author|dateline|writtenby|p-author", re.IGNORECASE)

SHARE_ELEMENTS = re.compile(r"(\b|_)(share|sharedaddy|social)(\b|_)", re.IGNORECASE)
NAVIGATION = re.compile(r"(^|[\s_-])(nav|navbar|navigation|menu|breadcrumbs?)($|[\s_-])", re.IGNORECASE)

# Latin, Arabic, small, vertical, CJK and fullwidth commas
COMMAS = re.compile("[,،﹐︐︑⹁⸴⸲，]")
NORMALIZE_WHITESPACE = re.compile(r"\s{2,}")
WHITESPACE = re.compile(r"\s+")
TOKENIZE = re.compile(r"\W+")
HASH_URL = re.compile(r"^#.+")
SENTENCE_END = re.compile(r"\.( |$)")
DISPLAY_NONE = re.compile(r"display\s*:\s*none", re.IGNORECASE)
VISIBILITY_HIDDEN = re.compile(r"visibility\s*:\s*hidden", re.IGNORECASE)
IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png|webp)", re.IGNORECASE)
SRCSET_URL = re.compile(r"(\S+)(\s+[\d.]+[xw])?(\s*(?:,|$))")
B64_DATA_URL = re.compile(r"^data:\s*([^\s;,]+)\s*;\s*base64\s*,", re.IGNORECASE)
CDATA = re.compile(r"^\s*<!\[CDATA\[|\]\]>\s*$")

SCHEMA_ORG_CONTEXT = re.compile(r"^https?\:\/\/schema\.org\/?$")
JSON_LD_ARTICLE_TYPES = re.compile(
    r"^(Article|AdvertiserContentArticle|NewsArticle|AnalysisNewsArticle|AskPublicNewsArticle|"
    r"BackgroundNewsArticle|OpinionNewsArticle|ReportageNewsArticle|ReviewNewsArticle|Report|"
    r"SatiricalArticle|ScholarlyArticle|MedicalScholarlyArticle|SocialMediaPosting|BlogPosting|"
    r"LiveBlogPosting|DiscussionForumPosting|TechArticle|APIReference)$"
)
META_PROPERTY = re.compile(
    r"\s*(article|dc|dcterm|og|twitter)\s*:\s*(author|creator|description|published_time|title|site_name)\s*",
    re.IGNORECASE,
)
META_NAME = re.compile(
    r"^\s*(?:(dc|dcterm|og|twitter|parsely|weibo:(article|webpage))\s*[-\.:]\s*)?"
    r"(author|creator|pub-date|description|title|site_name)\s*$",
    re.IGNORECASE,
)
TITLE_SEPARATORS = re.compile(r" [\|\-–—\\\/>»] ")
TITLE_HIERARCHY_SEPARATORS = re.compile(r" [\\\/>»] ")

UNLIKELY_ROLES = frozenset(["menu", "menubar", "complementary", "navigation", "alert", "alertdialog", "dialog"])
DATA_TABLE_ROLES = frozenset(["grid", "table", "treegrid"])

DIV_TO_P_ELEMS = frozenset(["blockquote", "dl", "div", "img", "ol", "p", "pre", "table", "ul"])
ALTER_TO_DIV_EXCEPTIONS = frozenset(["div", "article", "section", "p", "ol", "ul"])
PRESENTATIONAL_ATTRIBUTES = (
    "align",
    "background",
    "bgcolor",
    "border",
    "cellpadding",
    "cellspacing",
    "frame",
    "hspace",
    "rules",
    "style",
    "valign",
    "vspace",
)
DEPRECATED_SIZE_ATTRIBUTE_ELEMS = frozenset(["table", "th", "td", "hr", "pre"])
PHRASING_ELEMS = frozenset(
    [
        "abbr",
        "audio",
        "b",
        "bdo",
        "br",
        "button",
        "cite",
        "code",
        "data",
        "datalist",
        "dfn",
        "em",
        "embed",
        "i",
        "img",
        "input",
        "kbd",
        "label",
        "mark",
        "math",
        "meter",
        "noscript",
        "object",
        "output",
        "progress",
        "q",
        "ruby",
        "samp",
        "script",
        "select",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "textarea",
        "time",
        "var",
        "wbr",
    ]
)
MEDIA_ELEMS = frozenset(["img", "embed", "object", "iframe", "video", "audio", "picture", "svg"])
HEADING_ELEMS = ("h1", "h2", "h3", "h4", "h5", "h6")
TAGS_TO_SCORE = frozenset(["section", "h2", "h3", "h4", "h5", "h6", "p", "td", "pre"])
STRUCTURAL_CONTENT_TAGS = frozenset(["article", "main", "td", "th"])

# Tags that never carry article content
NEVER_CONTENT_TAGS = (
    "form",
    "fieldset",
    "footer",
    "aside",
    "object",
    "embed",
    "iframe",
    "input",
    "textarea",
    "select",
    "button",
    "link",
)
EMBED_TAGS = frozenset(["object", "embed", "iframe"])

TAG_WEIGHTS = {
    "div": 5,
    "pre": 3,
    "td": 3,
    "blockquote": 3,
    "address": -3,
    "ol": -3,
    "ul": -3,
    "dl": -3,
    "dd": -3,
    "dt": -3,
    "li": -3,
    "form": -3,
    "h1": -5,
    "h2": -5,
    "h3": -5,
    "h4": -5,
    "h5": -5,
    "h6": -5,
    "th": -5,
}

CLASS_WEIGHT = 25
MAX_ANCESTOR_DEPTH = 5
MIN_PARAGRAPH_LENGTH = 25
MINIMUM_TOPCANDIDATES = 3
MAX_PARENT_HOPS = 5
SIBLING_LINK_DENSITY_CEILING = 0.25
SIBLING_MIN_TEXT_LENGTH = 80
CONTAINER_LINK_DENSITY_CEILING = 0.5
SHARE_ELEMENT_THRESHOLD = 500
TITLE_MATCH_RATIO = 0.8
PAGE_ID = "readability-page-1"
PAGE_CLASS = "page"

AD_WORDS = re.compile(r"^(ad(vertising|vertisement)?|pub(licité)?|werb(ung)?|广告|Реклама|Anuncio)$", re.IGNORECASE)
LOADING_WORDS = re.compile(r"^((loading|正在加载|Загрузка|chargement|cargando)(…|\.\.\.)?)$", re.IGNORECASE)
