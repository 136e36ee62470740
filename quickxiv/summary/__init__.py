"""Extraction, prompting, streaming and parsing of paper summaries."""

from __future__ import annotations

from .extractor import clean_latex, parse_paper_html
from .models import PaperDocument, PromptRequest, Section, SummaryResult
from .normalizer import build_full_text, truncate_text
from .parser import parse_summary_response
from .prompt import build_prompt
from .streaming import (
    AuthError,
    NetworkOrServerError,
    StreamingSummaryClient,
    SummarizationError,
    TransientUnavailableError,
)

__all__ = [
    "AuthError",
    "NetworkOrServerError",
    "PaperDocument",
    "PromptRequest",
    "Section",
    "StreamingSummaryClient",
    "SummarizationError",
    "SummaryResult",
    "TransientUnavailableError",
    "build_full_text",
    "build_prompt",
    "clean_latex",
    "parse_paper_html",
    "parse_summary_response",
    "truncate_text",
]
