"""Split generated text into the four summary fields."""

from __future__ import annotations

import re

from loguru import logger

from .models import SUMMARY_KEYS, SummaryResult
from .prompt import HEADING_METHOD, HEADING_PROBLEM, HEADING_RESULTS


EMPTY_SUMMARY_PLACEHOLDER = "Could not generate summary. Please retry."
MIN_FIELD_LENGTH = 10

_LIMITATIONS_HEADING = r"Limitations\s*(?:&|and)?\s*Future\s+Work"


def _span_pattern(heading: str, boundary: str | None) -> re.Pattern[str]:
    end = rf"(?=\*?\*?{boundary}|\Z)" if boundary else r"\Z"
    return re.compile(rf"\*?\*?{heading}:?\*?\*?\s*(.*?){end}", re.IGNORECASE | re.DOTALL)


_FIELD_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("problem", _span_pattern(re.escape(HEADING_PROBLEM), re.escape(HEADING_METHOD))),
    ("method", _span_pattern(re.escape(HEADING_METHOD), re.escape(HEADING_RESULTS))),
    ("results", _span_pattern(re.escape(HEADING_RESULTS), "Limitations")),
    ("limitations", _span_pattern(_LIMITATIONS_HEADING, None)),
)


def parse_summary_response(text: str) -> SummaryResult:
    """Map partial or complete model output to a :class:`SummaryResult`.

    Stateless, so it can be re-run on every streamed prefix. When no field
    reaches :data:`MIN_FIELD_LENGTH` characters the whole text is routed to
    ``problem`` so unstructured output still renders.
    """

    fields: dict[str, str] = dict.fromkeys(SUMMARY_KEYS, "")
    for key, pattern in _FIELD_PATTERNS:
        match = pattern.search(text)
        if match is None:
            # Headings arrive in order; later fields cannot be settled yet.
            break
        fields[key] = match.group(1).strip()

    if all(len(value) < MIN_FIELD_LENGTH for value in fields.values()):
        logger.debug("No summary headings recognised in {} characters; using fallback", len(text))
        fields = dict.fromkeys(SUMMARY_KEYS, "")
        fields["problem"] = text.strip() or EMPTY_SUMMARY_PLACEHOLDER

    return SummaryResult(**fields)


__all__ = ["EMPTY_SUMMARY_PLACEHOLDER", "MIN_FIELD_LENGTH", "parse_summary_response"]
