"""Data models shared by extraction, prompting, streaming and persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


SUMMARY_KEYS: tuple[str, ...] = ("problem", "method", "results", "limitations")


@dataclass(frozen=True, slots=True)
class SummarySection:
    """Display metadata for one of the four summary fields."""

    key: str
    title: str
    emoji: str


SUMMARY_SECTIONS: tuple[SummarySection, ...] = (
    SummarySection("problem", "What It Solved", "\U0001F3AF"),
    SummarySection("method", "How It Solved It", "\U0001F527"),
    SummarySection("results", "Key Results", "\U0001F4CA"),
    SummarySection("limitations", "Limitations & Future Work", "\U0001F52E"),
)


@dataclass(slots=True)
class Section:
    """A retained body section of a paper."""

    title: str
    text: str


@dataclass(slots=True)
class PaperDocument:
    """Structured paper content extracted from HTML."""

    paper_id: str
    title: str
    authors: str
    abstract: str
    sections: list[Section] = field(default_factory=list)
    full_text: str = ""

    @property
    def section_titles(self) -> list[str]:
        return [section.title for section in self.sections if section.title]

    def snapshot(self) -> dict[str, Any]:
        """Return the cacheable subset of the document (no full text)."""
        return {
            "title": self.title,
            "authors": self.authors,
            "abstract": self.abstract,
            "section_titles": self.section_titles,
        }


@dataclass(slots=True)
class DocumentSnapshot:
    """Document metadata restored from the summary cache."""

    title: str
    authors: str
    abstract: str
    section_titles: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DocumentSnapshot":
        return cls(
            title=str(payload.get("title") or ""),
            authors=str(payload.get("authors") or ""),
            abstract=str(payload.get("abstract") or ""),
            section_titles=[str(item) for item in payload.get("section_titles") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "authors": self.authors,
            "abstract": self.abstract,
            "section_titles": list(self.section_titles),
        }


@dataclass(slots=True)
class SummaryResult:
    """Four-part structured summary; every field is always present."""

    problem: str = ""
    method: str = ""
    results: str = ""
    limitations: str = ""

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, key) for key in SUMMARY_KEYS}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "SummaryResult":
        return cls(**{key: str(payload.get(key) or "") for key in SUMMARY_KEYS})

    def total_chars(self) -> int:
        return sum(len(getattr(self, key)) for key in SUMMARY_KEYS)


@dataclass(slots=True)
class PromptRequest:
    """A role-structured chat-completion request."""

    system_instructions: str
    user_content: str
    max_tokens: int = 1500
    temperature: float = 0.5
    top_p: float = 0.7
    stream: bool = True

    @property
    def messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system_instructions},
            {"role": "user", "content": self.user_content},
        ]

    def to_payload(self, model: str) -> dict[str, Any]:
        """Return the JSON request body for ``model``."""
        return {
            "model": model,
            "messages": self.messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "stream": self.stream,
        }


__all__ = [
    "SUMMARY_KEYS",
    "SUMMARY_SECTIONS",
    "SummarySection",
    "Section",
    "PaperDocument",
    "DocumentSnapshot",
    "SummaryResult",
    "PromptRequest",
]
