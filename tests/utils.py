"""Shared helpers for tests."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from loguru import logger


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def sse_line(content: str) -> str:
    """Encode one streamed content delta the way chat-completion servers do."""

    payload = {"choices": [{"delta": {"content": content}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n"


class FakeFetcher:
    """Serves canned HTML instead of downloading it."""

    def __init__(self, html: str | None = None, *, error: Exception | None = None) -> None:
        self.html = PAPER_HTML if html is None else html
        self.error = error
        self.calls: list[str] = []

    def fetch_html(self, paper_id: str) -> str:
        self.calls.append(paper_id)
        if self.error is not None:
            raise self.error
        return self.html


class FakeStreamResponse:
    """Minimal stand-in for a streamed ``requests.Response``."""

    def __init__(self, chunks: Iterable[bytes], *, status_code: int = 200, text: str = "") -> None:
        self._chunks = list(chunks)
        self.status_code = status_code
        self.text = text
        self.closed = False

    def iter_content(self, chunk_size: Any = None):  # noqa: ARG002 - mirrors requests
        yield from self._chunks

    def __enter__(self) -> "FakeStreamResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True


class FakeSession:
    """Records POST calls and replays a prepared response."""

    def __init__(self, response: FakeStreamResponse | None = None, *, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeStreamResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


PAPER_HTML = """
<html>
  <head><title>Fallback Title</title></head>
  <body>
    <h1 class="ltx_title ltx_title_document">Sparse  Attention for   Long Documents</h1>
    <div class="ltx_authors">
      <span class="ltx_personname">Ada Lovelace</span>
      <span class="ltx_personname">Alan Turing</span>
    </div>
    <div class="ltx_abstract"><h6>Abstract</h6><p>We study sparse attention over long inputs.</p></div>
    <section class="ltx_section">
      <h2 class="ltx_title ltx_title_section">1 Introduction</h2>
      <div class="ltx_para"><p>Transformers scale poorly with sequence length.</p></div>
    </section>
    <section class="ltx_section">
      <h2 class="ltx_title ltx_title_section">2 Method</h2>
      <div class="ltx_para"><p>We route tokens to 181818 blocks.</p></div>
      <p>Each block attends locally.</p>
    </section>
    <section class="ltx_section">
      <h2 class="ltx_title ltx_title_section">3 Empty Section</h2>
    </section>
    <section class="ltx_section">
      <h2 class="ltx_title ltx_title_section">References</h2>
      <p>[1] Someone. A cited paper.</p>
    </section>
    <section class="ltx_section">
      <h2 class="ltx_title ltx_title_section">Appendix A Proofs</h2>
      <p>Proof details.</p>
    </section>
  </body>
</html>
"""

FULL_RESPONSE = """**What It Solved:**
- Attention cost grows quadratically with input length [Sec: 1 Introduction]

**How It Solved It:**
- Tokens are routed to local blocks [Sec: 2 Method]

**Key Results:**
- 3x faster inference at equal accuracy

**Limitations & Future Work:**
- Only evaluated on English benchmarks"""
