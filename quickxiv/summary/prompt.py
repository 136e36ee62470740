"""Prompt construction for four-part paper summaries."""

from __future__ import annotations

from collections.abc import Sequence

from quickxiv.config.llm import LLMConfig

from .models import PaperDocument, PromptRequest


# Shared with parser.py; the model is asked to emit these verbatim.
HEADING_PROBLEM = "What It Solved"
HEADING_METHOD = "How It Solved It"
HEADING_RESULTS = "Key Results"
HEADING_LIMITATIONS = "Limitations & Future Work"

SUMMARY_HEADINGS: tuple[str, ...] = (
    HEADING_PROBLEM,
    HEADING_METHOD,
    HEADING_RESULTS,
    HEADING_LIMITATIONS,
)

SYSTEM_PROMPT = f"""You are an expert scientific paper summarizer. You produce clear, well-structured summaries that help researchers quickly understand a paper.

Rules:
- Use bullet points (starting with "- ") for each key point.
- Each bullet should be one clear, specific sentence; avoid vague generalities.
- Include concrete details: method names, dataset names, metrics, numbers.
- When a point comes from a specific section of the paper, add a reference like [Sec: Introduction] or [Sec: Experiments] at the end of that bullet.
- Do NOT repeat the paper title or author names.

Respond with EXACTLY these four sections:

**{HEADING_PROBLEM}:**
<bullet points about the problem, gap, or challenge this paper addresses>

**{HEADING_METHOD}:**
<bullet points about the proposed method, architecture, or approach>

**{HEADING_RESULTS}:**
<bullet points with concrete numbers, comparisons, or findings>

**{HEADING_LIMITATIONS}:**
<bullet points about acknowledged weaknesses, open questions, or suggested extensions>"""


def build_user_content(full_text: str, section_titles: Sequence[str] = ()) -> str:
    section_list = ""
    if section_titles:
        section_list = (
            f"\nThe paper has these sections: {', '.join(section_titles)}.\n"
            "When referencing where information comes from, use the format [Sec: <section name>] inline."
        )
    return f"Summarize the following research paper.{section_list}\n\n{full_text}"


def build_prompt(document: PaperDocument, llm: LLMConfig | None = None) -> PromptRequest:
    """Build the system/user request for ``document``.

    Sampling parameters come from ``llm`` when given, otherwise the
    defaults on :class:`PromptRequest` apply.
    """

    request = PromptRequest(
        system_instructions=SYSTEM_PROMPT,
        user_content=build_user_content(document.full_text, document.section_titles),
    )
    if llm is not None:
        request.max_tokens = llm.max_tokens
        request.temperature = llm.temperature
        request.top_p = llm.top_p
    return request


__all__ = [
    "HEADING_PROBLEM",
    "HEADING_METHOD",
    "HEADING_RESULTS",
    "HEADING_LIMITATIONS",
    "SUMMARY_HEADINGS",
    "SYSTEM_PROMPT",
    "build_user_content",
    "build_prompt",
]
