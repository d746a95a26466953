"""Allowlist sanitizer for model-written feedback HTML."""

from __future__ import annotations

import nh3

ALLOWED_TAGS = frozenset(
    {
        "p", "br", "ul", "ol", "li", "strong", "em", "b", "i", "u",
        "code", "pre", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6",
    }
)
# Content inside these is dropped entirely.
DROPPED_TAGS = frozenset({"script", "style", "iframe", "object", "embed", "template", "noscript"})


def _drop_attribute(tag: str, attribute: str, value: str) -> None:
    return None


def sanitize_feedback_html(raw: str) -> str:
    """
    Reduce model output to a safe formatting subset.

    Allowed tags are kept without attributes, dangerous blocks are removed
    with their content, and any other markup is dropped while its text is kept
    and escaped.
    """
    cleaned = nh3.clean(
        raw or "",
        tags=set(ALLOWED_TAGS),
        clean_content_tags=set(DROPPED_TAGS),
        attributes={},
        attribute_filter=_drop_attribute,
        link_rel=None,
    )
    return cleaned.strip()
