"""
Text helpers for user supplied content
"""
import html
import re

import bleach


def strip_html(value: str | None) -> str:
    """Remove every HTML tag from value and trim surrounding whitespace.

    The result is plain text: bleach escapes what it keeps, so entities are
    decoded again. None becomes an empty string.
    """
    if not value:
        return ""
    return html.unescape(bleach.clean(value, tags=[], strip=True)).strip()


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so term matches literally (use with escape="\\")"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def slugify(text: str, max_length: int = 100) -> str:
    """Convert text to a URL-friendly slug"""
    slug = text.lower().strip()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w\-]+", "", slug)
    slug = re.sub(r"-{2,}", "-", slug)
    slug = slug.strip("-")
    return slug[:max_length]
