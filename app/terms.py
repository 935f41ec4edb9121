"""Search text normalization and fuzzy term parsing.

Two steps run before the catalog is queried:

    1) :func:`normalize_search_text` sanitizes the raw ``s`` parameter and keeps
       only letters, numbers and separators (any script). Every run of other
       characters becomes a single space.
    2) :func:`parse_search_terms` splits the normalized text into terms. Each
       term is matched independently as a substring of the title, so
       ``"red shirt"`` also finds ``"Shirt, Red"``.
"""
from __future__ import annotations

import logging
import re
import unicodedata

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
# A quoted phrase stays one token; everything else splits on whitespace.
_TOKEN_RE = re.compile(r'"[^"]*"|\S+')
_EXACT_MATCH_RE = re.compile(r'".+"', re.DOTALL)
# Single stray letters and dashes are noise.
_NOISE_RE = re.compile(r"[a-zA-Z\-]")

_KEPT_CATEGORIES = frozenset({"L", "N", "Z"})
QUOTE_CHARS = "\"'"


def _sanitize(text: str) -> str:
    text = _TAG_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _is_kept(ch: str) -> bool:
    return unicodedata.category(ch)[0] in _KEPT_CATEGORIES


def normalize_search_text(raw: str | None) -> str:
    """Reduce user input to letters, numbers and single spaces."""
    if not raw:
        return ""
    chars: list[str] = []
    for ch in _sanitize(raw):
        if _is_kept(ch):
            chars.append(ch)
        elif not chars or chars[-1] != " ":
            chars.append(" ")
    return _WHITESPACE_RE.sub(" ", "".join(chars)).strip()


def parse_search_terms(search: str) -> list[str]:
    """Split search text into the terms every matching title must contain."""
    checked: list[str] = []
    for token in _TOKEN_RE.findall(search or ""):
        # Keep before/after spaces when the token is an exact match.
        if _EXACT_MATCH_RE.fullmatch(token):
            term = token.strip(QUOTE_CHARS)
        else:
            term = token.strip(QUOTE_CHARS + " \t\r\n")

        if not term or _NOISE_RE.fullmatch(term):
            continue
        checked.append(term)

    logger.debug("parsed terms search=%r terms=%s", search, checked)
    return checked
