"""Extract structured paper content from ar5iv-style HTML."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag
from loguru import logger

from .models import PaperDocument, Section


DEFAULT_TITLE = "Unknown Title"

TITLE_SELECTORS: tuple[str, ...] = (".ltx_title.ltx_title_document", "h1", "title")
AUTHOR_SELECTOR = ".ltx_personname"
ABSTRACT_SELECTOR = ".ltx_abstract"
SECTION_SELECTOR = "section.ltx_section, .ltx_section, section.ltx_chapter"
HEADING_SELECTOR = "h2, h3, h4, .ltx_title.ltx_title_section"
PARAGRAPH_SELECTOR = "p, .ltx_para"

# Matched case-insensitively against section titles.
EXCLUDED_SECTION_MARKERS: tuple[str, ...] = ("reference", "bibliograph", "appendix", "acknowledgment")

_REPEATED_DIGITS = re.compile(r"(\d{1,4})\1{2,}")
_WHITESPACE_RUN = re.compile(r"\s{2,}")
_ABSTRACT_LABEL = re.compile(r"^Abstract\s*", re.IGNORECASE)


def clean_latex(text: str) -> str:
    """Repair LaTeX-to-HTML artefacts.

    A run of 1-4 digits repeated three or more times in a row collapses to a
    single occurrence (``"181818"`` -> ``"18"``) and whitespace runs collapse
    to a single space.
    """

    collapsed = _REPEATED_DIGITS.sub(r"\1", text)
    return _WHITESPACE_RUN.sub(" ", collapsed).strip()


def is_excluded_section(title: str) -> bool:
    lowered = title.lower()
    return any(marker in lowered for marker in EXCLUDED_SECTION_MARKERS)


def parse_paper_html(html: str, paper_id: str = "") -> PaperDocument:
    """Parse rendered paper HTML into a :class:`PaperDocument`.

    Missing elements never raise; each field falls back to its default. The
    returned document has no ``full_text`` yet, see
    :func:`quickxiv.summary.normalizer.build_full_text`.
    """

    soup = BeautifulSoup(html, "lxml")

    title = clean_latex(_extract_title(soup, paper_id))
    authors = _extract_authors(soup)
    abstract = clean_latex(_extract_abstract(soup, paper_id))
    sections = _extract_sections(soup)

    logger.debug(
        "Parsed paper {}: title={!r}, {} authors chars, {} abstract chars, {} sections",
        paper_id or "<unknown>",
        title[:60],
        len(authors),
        len(abstract),
        len(sections),
    )
    return PaperDocument(
        paper_id=paper_id,
        title=title,
        authors=authors,
        abstract=abstract,
        sections=sections,
    )


def _extract_title(soup: BeautifulSoup, paper_id: str) -> str:
    for selector in TITLE_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            return element.get_text().strip()
    logger.debug("No title element found for {}; using default", paper_id or "<unknown>")
    return DEFAULT_TITLE


def _extract_authors(soup: BeautifulSoup) -> str:
    names = [element.get_text().strip() for element in soup.select(AUTHOR_SELECTOR)]
    return ", ".join(names)


def _extract_abstract(soup: BeautifulSoup, paper_id: str) -> str:
    element = soup.select_one(ABSTRACT_SELECTOR)
    if element is None:
        logger.debug("No abstract container found for {}", paper_id or "<unknown>")
        return ""
    return _ABSTRACT_LABEL.sub("", element.get_text().strip()).strip()


def _extract_sections(soup: BeautifulSoup) -> list[Section]:
    sections: list[Section] = []
    for element in soup.select(SECTION_SELECTOR):
        heading = element.select_one(HEADING_SELECTOR)
        raw_title = heading.get_text().strip() if heading is not None else ""

        if is_excluded_section(raw_title):
            logger.debug("Skipping section {!r}", raw_title)
            continue

        text = "\n".join(_paragraph_texts(element)).strip()
        if not text:
            continue

        sections.append(Section(title=clean_latex(raw_title), text=clean_latex(text)))
    return sections


def _paragraph_texts(section: Tag) -> list[str]:
    """Return paragraph texts, counting a paragraph nested in another match once."""

    matches = section.select(PARAGRAPH_SELECTOR)
    matched_ids = {id(element) for element in matches}
    texts: list[str] = []
    for element in matches:
        if any(id(parent) in matched_ids for parent in element.parents):
            continue
        texts.append(element.get_text().strip())
    return texts


__all__ = [
    "DEFAULT_TITLE",
    "EXCLUDED_SECTION_MARKERS",
    "clean_latex",
    "is_excluded_section",
    "parse_paper_html",
]
