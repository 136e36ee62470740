"""Locate papers and download their rendered HTML."""

from __future__ import annotations

import re
from typing import Callable, Optional, Protocol

import requests
from loguru import logger

from quickxiv.config.summary import FetchConfig


_ARXIV_URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^https://arxiv\.org/abs/(.+?)(?:\?|#|$)"),
    re.compile(r"^https://arxiv\.org/pdf/(.+?)(?:\.pdf)?(?:\?|#|$)"),
)
_BARE_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d{4}\.\d{4,5}(?:v\d+)?$"),
    re.compile(r"^[a-z\-]+(?:\.[A-Z]{2})?/\d{7}(?:v\d+)?$", re.IGNORECASE),
)

ActiveDocumentQuery = Callable[[], Optional[str]]


def extract_paper_id(url: str) -> str | None:
    """Return the arXiv id for an abstract or PDF page address, else ``None``."""

    for pattern in _ARXIV_URL_PATTERNS:
        match = pattern.match(url)
        if match:
            return match.group(1)
    return None


def resolve_paper_reference(value: str) -> str | None:
    """Accept either a paper page address or a bare arXiv identifier."""

    candidate = value.strip()
    from_url = extract_paper_id(candidate)
    if from_url:
        return from_url
    if any(pattern.match(candidate) for pattern in _BARE_ID_PATTERNS):
        return candidate
    return None


class PaperFetchError(RuntimeError):
    """Raised when the paper HTML cannot be downloaded."""


class PaperHtmlFetcher(Protocol):
    def fetch_html(self, paper_id: str) -> str:
        """Return the full HTML document for ``paper_id``."""


class Ar5ivHtmlFetcher:
    """Download ar5iv renderings of arXiv papers."""

    def __init__(self, config: FetchConfig | None = None, *, session: requests.Session | None = None) -> None:
        self.config = config or FetchConfig()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.config.user_agent})

    def url_for(self, paper_id: str) -> str:
        return f"{self.config.html_base_url.rstrip('/')}/{paper_id}"

    def fetch_html(self, paper_id: str) -> str:
        url = self.url_for(paper_id)
        logger.info("Fetching paper HTML for {} from {}", paper_id, url)
        try:
            response = self.session.get(url, timeout=self.config.timeout)
        except requests.RequestException as exc:
            logger.warning("HTML fetch failed for {}: {}", paper_id, exc)
            raise PaperFetchError(f"Failed to fetch paper HTML ({exc})") from exc

        if not response.ok:
            logger.warning("HTML fetch for {} returned status {}", paper_id, response.status_code)
            raise PaperFetchError(f"Failed to fetch paper HTML (status {response.status_code})")
        if not response.encoding or response.encoding.lower() in ("iso-8859-1", "us-ascii"):
            response.encoding = response.apparent_encoding
        return response.text


__all__ = [
    "ActiveDocumentQuery",
    "extract_paper_id",
    "resolve_paper_reference",
    "PaperFetchError",
    "PaperHtmlFetcher",
    "Ar5ivHtmlFetcher",
]
