from __future__ import annotations

from quickxiv.summary.models import DocumentSnapshot, PaperDocument, SummaryResult
from quickxiv.summary.renderer import SummaryRenderer, format_section_references


def test_format_section_references() -> None:
    text = "- Point one [Sec: 2 Method]\n- Point two [Section: Results]"

    assert format_section_references(text) == "- Point one `2 Method`\n- Point two `Results`"


def test_render_full_document() -> None:
    document = PaperDocument(paper_id="2401.12345", title="Sparse Attention", authors="Ada Lovelace", abstract="")
    summary = SummaryResult(
        problem="- Long inputs [Sec: 1 Introduction]",
        method="- Local blocks",
        results="- Faster",
        limitations="",
    )

    markdown = SummaryRenderer().render(summary, document)

    assert markdown.startswith("# Sparse Attention\n")
    assert "**Paper ID:** 2401.12345" in markdown
    assert "**Authors:** Ada Lovelace" in markdown
    assert "## \U0001F3AF What It Solved" in markdown
    assert "- Long inputs `1 Introduction`" in markdown
    assert "## \U0001F4CA Key Results" in markdown
    assert "Limitations & Future Work" not in markdown
    assert markdown.rstrip().endswith("[Read full paper](https://arxiv.org/abs/2401.12345)")


def test_render_snapshot_without_authors() -> None:
    snapshot = DocumentSnapshot(title="Cached Paper", authors="", abstract="")

    markdown = SummaryRenderer().render(SummaryResult(problem="Only the problem."), snapshot, paper_id="2401.1")

    assert "# Cached Paper" in markdown
    assert "**Authors:** Unknown Authors" in markdown
    assert "How It Solved It" not in markdown


def test_render_custom_template() -> None:
    renderer = SummaryRenderer("{{ title }}|{% for s in sections %}{{ s.title }};{% endfor %}")

    rendered = renderer.render(SummaryResult(problem="p", results="r"))

    assert rendered == "Untitled Paper|What It Solved;Key Results;\n"
