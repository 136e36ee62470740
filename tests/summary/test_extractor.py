from __future__ import annotations

import pytest

from quickxiv.summary.extractor import DEFAULT_TITLE, clean_latex, is_excluded_section, parse_paper_html
from tests.utils import PAPER_HTML


def test_parse_paper_html_extracts_metadata() -> None:
    document = parse_paper_html(PAPER_HTML, "2401.12345")

    assert document.paper_id == "2401.12345"
    assert document.title == "Sparse Attention for Long Documents"
    assert document.authors == "Ada Lovelace, Alan Turing"
    assert document.abstract == "We study sparse attention over long inputs."
    assert document.full_text == ""


def test_parse_paper_html_filters_sections() -> None:
    document = parse_paper_html(PAPER_HTML, "2401.12345")

    assert document.section_titles == ["1 Introduction", "2 Method"]
    introduction, method = document.sections
    assert introduction.text == "Transformers scale poorly with sequence length."
    # Nested paragraph containers are only counted once.
    assert method.text == "We route tokens to 18 blocks.\nEach block attends locally."


def test_parse_paper_html_defaults_for_bare_page() -> None:
    document = parse_paper_html("<html><body><div>nothing here</div></body></html>")

    assert document.title == DEFAULT_TITLE
    assert document.authors == ""
    assert document.abstract == ""
    assert document.sections == []


def test_title_falls_back_to_h1_then_title_tag() -> None:
    with_h1 = parse_paper_html("<html><head><title>Tab</title></head><body><h1>Heading</h1></body></html>")
    only_title = parse_paper_html("<html><head><title>Tab Title</title></head><body></body></html>")

    assert with_h1.title == "Heading"
    assert only_title.title == "Tab Title"


def test_untitled_section_is_kept() -> None:
    html = '<section class="ltx_section"><p>Body without heading.</p></section>'

    document = parse_paper_html(html)

    assert len(document.sections) == 1
    assert document.sections[0].title == ""
    assert document.section_titles == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("181818", "18"),
        ("333333", "33"),
        ("1818", "1818"),
        ("value 777 here", "value 7 here"),
        ("a   b\t\tc", "a b c"),
        ("  padded  ", "padded"),
    ],
)
def test_clean_latex(raw: str, expected: str) -> None:
    assert clean_latex(raw) == expected


@pytest.mark.parametrize(
    ("title", "excluded"),
    [
        ("References", True),
        ("Bibliography", True),
        ("Appendix B: Extra Results", True),
        ("Acknowledgments", True),
        ("5 Experiments", False),
    ],
)
def test_is_excluded_section(title: str, excluded: bool) -> None:
    assert is_excluded_section(title) is excluded
