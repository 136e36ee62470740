"""Render summaries as Markdown."""

from __future__ import annotations

import re

from jinja2 import BaseLoader, Environment

from .models import SUMMARY_SECTIONS, DocumentSnapshot, PaperDocument, SummaryResult


_SECTION_REFERENCE = re.compile(r"\[Sec(?:tion)?:\s*([^\]]+)\]", re.IGNORECASE)

_DEFAULT_TEMPLATE = """# {{ title }}
{% if paper_id %}**Paper ID:** {{ paper_id }}
{% endif %}**Authors:** {{ authors or "Unknown Authors" }}

{% for section in sections %}
## {{ section.emoji }} {{ section.title }}

{{ section.body }}

{% endfor %}
{% if paper_id %}[Read full paper](https://arxiv.org/abs/{{ paper_id }})
{% endif %}
"""


def format_section_references(text: str) -> str:
    """Turn inline ``[Sec: Name]`` tags into code-styled references."""
    return _SECTION_REFERENCE.sub(lambda match: f"`{match.group(1).strip()}`", text)


class SummaryRenderer:
    """Render a summary and its paper metadata into a Markdown string."""

    def __init__(self, template: str | None = None) -> None:
        env = Environment(loader=BaseLoader(), autoescape=False, trim_blocks=True, lstrip_blocks=True)
        self._template = env.from_string(template or _DEFAULT_TEMPLATE)

    def render(
        self,
        summary: SummaryResult,
        document: PaperDocument | DocumentSnapshot | None = None,
        *,
        paper_id: str = "",
    ) -> str:
        values = summary.to_dict()
        sections = [
            {"emoji": section.emoji, "title": section.title, "body": format_section_references(values[section.key])}
            for section in SUMMARY_SECTIONS
            if values[section.key]
        ]
        if isinstance(document, PaperDocument):
            paper_id = paper_id or document.paper_id
        return self._template.render(
            title=(document.title if document else "") or "Untitled Paper",
            authors=document.authors if document else "",
            paper_id=paper_id,
            sections=sections,
        ).strip() + "\n"


__all__ = ["SummaryRenderer", "format_section_references"]
