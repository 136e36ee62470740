"""Serialize a paper into bounded model input."""

from __future__ import annotations

import math

from loguru import logger

from .models import PaperDocument


MAX_CHARS = 12000
HEAD_RATIO = 0.7
TRUNCATION_MARKER = "\n\n[... content truncated for brevity ...]\n\n"
_TAIL_SLACK = 50


def serialize_document(document: PaperDocument) -> str:
    """Render title, authors, abstract and sections as one text block."""

    parts = [
        f"Title: {document.title}\n\n",
        f"Authors: {document.authors}\n\n",
        f"Abstract:\n{document.abstract}\n\n",
    ]
    for section in document.sections:
        parts.append(f"## {section.title}\n{section.text}\n\n")
    return "".join(parts)


def truncate_text(text: str, max_chars: int = MAX_CHARS, head_ratio: float = HEAD_RATIO) -> str:
    """Keep the head and tail of ``text`` when it exceeds ``max_chars``.

    The middle is replaced by :data:`TRUNCATION_MARKER`; the result is at
    most ``max_chars + len(TRUNCATION_MARKER)`` characters long.
    """

    if len(text) <= max_chars:
        return text

    head_length = math.floor(max_chars * head_ratio)
    tail_length = max(max_chars - head_length - _TAIL_SLACK, 0)
    tail = text[len(text) - tail_length:] if tail_length else ""
    return text[:head_length] + TRUNCATION_MARKER + tail


def build_full_text(
    document: PaperDocument,
    *,
    max_chars: int = MAX_CHARS,
    head_ratio: float = HEAD_RATIO,
) -> PaperDocument:
    """Populate ``document.full_text`` and return the document."""

    serialized = serialize_document(document)
    document.full_text = truncate_text(serialized, max_chars=max_chars, head_ratio=head_ratio)
    if len(serialized) > max_chars:
        logger.info(
            "Truncated paper {} from {} to {} characters",
            document.paper_id or "<unknown>",
            len(serialized),
            len(document.full_text),
        )
    return document


__all__ = [
    "MAX_CHARS",
    "HEAD_RATIO",
    "TRUNCATION_MARKER",
    "serialize_document",
    "truncate_text",
    "build_full_text",
]
