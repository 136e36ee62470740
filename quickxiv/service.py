"""High-level orchestration: detect a paper, stream its summary, persist the outcome."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Callable

from loguru import logger

from quickxiv.config import AppConfig, LLMConfig, SummaryConfig
from quickxiv.storage import JsonFileStore, SummaryCache, UsageTracker
from quickxiv.summary.extractor import parse_paper_html
from quickxiv.summary.fetcher import ActiveDocumentQuery, Ar5ivHtmlFetcher, PaperHtmlFetcher
from quickxiv.summary.models import DocumentSnapshot, PaperDocument, SummaryResult
from quickxiv.summary.normalizer import HEAD_RATIO, MAX_CHARS, build_full_text
from quickxiv.summary.parser import parse_summary_response
from quickxiv.summary.prompt import build_prompt
from quickxiv.summary.streaming import StreamingSummaryClient


class SummarizationInProgressError(RuntimeError):
    """Raised when a session already has a summarization running."""


@dataclass(slots=True)
class SummarySession:
    """Caller-owned state for one viewer of one paper at a time.

    ``document`` holds freshly extracted content; ``snapshot`` holds the
    metadata restored from the cache when no extraction was needed.
    """

    api_key: str | None = None
    paper_id: str | None = None
    document: PaperDocument | None = None
    snapshot: DocumentSnapshot | None = None
    summary: SummaryResult | None = None
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def in_flight(self) -> bool:
        return self._guard.locked()

    @property
    def title(self) -> str:
        if self.document is not None:
            return self.document.title
        if self.snapshot is not None:
            return self.snapshot.title
        return ""

    def try_begin(self) -> bool:
        return self._guard.acquire(blocking=False)

    def finish(self) -> None:
        self._guard.release()

    def reset(self, paper_id: str | None) -> None:
        self.paper_id = paper_id
        self.document = None
        self.snapshot = None
        self.summary = None


class SummaryService:
    """Wire extraction, prompting, streaming, caching and usage tracking together."""

    def __init__(
        self,
        llm: LLMConfig,
        *,
        fetcher: PaperHtmlFetcher,
        cache: SummaryCache,
        usage: UsageTracker,
        client: StreamingSummaryClient | None = None,
        max_chars: int = MAX_CHARS,
        head_ratio: float = HEAD_RATIO,
    ) -> None:
        self._llm = llm
        self._fetcher = fetcher
        self._client = client or StreamingSummaryClient(llm)
        self._max_chars = max_chars
        self._head_ratio = head_ratio
        self.cache = cache
        self.usage = usage

    @classmethod
    def from_config(cls, config: AppConfig, *, base_path: Path | None = None) -> "SummaryService":
        if config.summary is None:
            raise ValueError("summary config is required for summary operations")
        summary_cfg: SummaryConfig = config.summary
        llm = config.resolve_llm(summary_cfg.model)

        store = JsonFileStore(_resolve_path(config.cache.store_path, base_path or Path.cwd()))
        return cls(
            llm,
            fetcher=Ar5ivHtmlFetcher(config.fetch),
            cache=SummaryCache(store, ttl=timedelta(days=config.cache.ttl_days)),
            usage=UsageTracker(store),
            client=StreamingSummaryClient(llm, render_interval=summary_cfg.render_interval_ms / 1000),
            max_chars=summary_cfg.max_chars,
            head_ratio=summary_cfg.head_ratio,
        )

    # ------------------------------------------------------------------
    def detect_paper(
        self,
        session: SummarySession,
        paper_id: str | None,
        *,
        use_cache: bool = True,
    ) -> SummaryResult | None:
        """Make ``paper_id`` the session's active paper.

        Returns the cached summary when one is still fresh, otherwise fetches
        and extracts the paper so that :meth:`summarize` can run. Returns
        ``None`` when there is no active paper or no cached summary.
        """

        if not paper_id:
            logger.info("No paper detected on the active page")
            return None

        if paper_id == session.paper_id and (session.document is not None or session.snapshot is not None):
            return session.summary

        session.reset(paper_id)

        if use_cache:
            cached = self.cache.get(paper_id)
            if cached is not None:
                logger.info("Loaded summary from cache for {}", paper_id)
                session.snapshot = cached.document_snapshot
                session.summary = cached.summary
                return cached.summary

        session.document = self._load_document(paper_id)
        return None

    def detect_active_paper(
        self,
        session: SummarySession,
        query: ActiveDocumentQuery,
        *,
        use_cache: bool = True,
    ) -> SummaryResult | None:
        """Ask ``query`` which paper is open and detect it."""
        return self.detect_paper(session, query(), use_cache=use_cache)

    def summarize(
        self,
        session: SummarySession,
        on_partial: Callable[[SummaryResult], None] | None = None,
        *,
        on_text: Callable[[str], None] | None = None,
    ) -> SummaryResult:
        """Stream a fresh summary for the session's paper.

        ``on_partial`` receives the re-parsed summary for each throttled
        partial text and once for the final text; ``on_text`` receives the
        raw accumulated text at the same moments. On failure the cache and
        usage statistics are left untouched.
        """

        if not session.try_begin():
            raise SummarizationInProgressError(
                f"A summary for {session.paper_id or 'this paper'} is already being generated"
            )
        try:
            if session.paper_id is None:
                raise ValueError("No paper selected; call detect_paper first")
            if session.document is None:
                session.document = self._load_document(session.paper_id)
            document = session.document

            def _forward(text: str) -> None:
                if on_text is not None:
                    on_text(text)
                if on_partial is not None:
                    on_partial(parse_summary_response(text))

            request = build_prompt(document, self._llm)
            callback = _forward if (on_partial is not None or on_text is not None) else None
            summary = self._client.stream_summary(request, callback, api_key=session.api_key)

            session.summary = summary
            self.cache.set(session.paper_id, document, summary)
            self.usage.record(session.paper_id, document.title, len(document.full_text), summary.total_chars())
            return summary
        finally:
            session.finish()

    # ------------------------------------------------------------------
    def _load_document(self, paper_id: str) -> PaperDocument:
        html = self._fetcher.fetch_html(paper_id)
        document = parse_paper_html(html, paper_id)
        return build_full_text(document, max_chars=self._max_chars, head_ratio=self._head_ratio)


def _resolve_path(fragment: str | Path, base_path: Path) -> Path:
    path = Path(fragment)
    if not path.is_absolute():
        path = (base_path / path).resolve()
    return path


__all__ = ["SummarizationInProgressError", "SummarySession", "SummaryService"]
