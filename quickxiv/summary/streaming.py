"""Streaming chat-completion client that rebuilds text from server-sent events."""

from __future__ import annotations

import codecs
import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

import requests
from loguru import logger

from quickxiv.config.llm import LLMConfig

from .models import PromptRequest, SummaryResult
from .parser import parse_summary_response


DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
RENDER_INTERVAL_SECONDS = 0.150

PartialCallback = Callable[[str], None]


class SummarizationError(RuntimeError):
    """Raised when a summarization attempt is aborted.

    The message is suitable for showing to the user as-is.
    """


class AuthError(SummarizationError):
    """The endpoint rejected the credential (HTTP 401/403)."""


class TransientUnavailableError(SummarizationError):
    """The model is still loading (HTTP 503)."""


class NetworkOrServerError(SummarizationError):
    """Any other non-success status or a transport failure."""

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


def classify_http_error(status: int, body: str) -> SummarizationError:
    """Translate a non-2xx status received before streaming into an exception."""

    if status in (401, 403):
        return AuthError("Invalid API key. Please update it in settings.")
    if status == 503:
        return TransientUnavailableError("Model is loading. Please retry in a few seconds.")
    return NetworkOrServerError(f"API error ({status}): {body}", status=status, body=body)


LineKind = Literal["ignored", "done", "delta", "empty", "malformed"]


@dataclass(frozen=True, slots=True)
class DecodedLine:
    """Outcome of decoding one event-stream line."""

    kind: LineKind
    delta: str = ""


def decode_event_line(line: str) -> DecodedLine:
    """Classify a complete event-stream line and extract its content delta.

    ``malformed`` marks a ``data:`` payload that is not a JSON object; callers
    skip it and keep reading. ``empty`` marks well-formed events without text,
    such as the initial role announcement.
    """

    stripped = line.strip()
    if not stripped or not stripped.startswith(DATA_PREFIX):
        return DecodedLine("ignored")

    payload = stripped[len(DATA_PREFIX):].strip()
    if payload == DONE_SENTINEL:
        return DecodedLine("done")

    try:
        event = json.loads(payload)
    except json.JSONDecodeError:
        return DecodedLine("malformed")
    if not isinstance(event, dict):
        return DecodedLine("malformed")

    content = _delta_content(event)
    if content:
        return DecodedLine("delta", content)
    return DecodedLine("empty")


def _delta_content(event: dict[str, Any]) -> str:
    choices = event.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


class EventLineBuffer:
    """Turn raw byte chunks into complete text lines.

    Multi-byte UTF-8 sequences and lines split across chunks are held back
    until the rest arrives.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes) -> list[str]:
        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return lines

    def flush(self) -> list[str]:
        """Return whatever is left once the stream has ended."""
        remainder = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return [remainder] if remainder.strip() else []


class RenderThrottle:
    """Rate-limiting gate for partial renders.

    The first call passes; afterwards at most one call per ``interval``
    seconds passes, as measured by ``clock``.
    """

    def __init__(self, interval: float = RENDER_INTERVAL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval = interval
        self._clock = clock
        self._last_emit: float | None = None

    def ready(self) -> bool:
        now = self._clock()
        if self._last_emit is not None and now - self._last_emit < self.interval:
            return False
        self._last_emit = now
        return True


@dataclass(slots=True)
class StreamStats:
    """Counters collected while decoding a single stream."""

    chunks: int = 0
    deltas: int = 0
    malformed: int = 0
    partial_renders: int = 0


class StreamingSummaryClient:
    """Send a :class:`PromptRequest` and accumulate the streamed answer."""

    def __init__(
        self,
        llm: LLMConfig,
        *,
        session: requests.Session | None = None,
        render_interval: float = RENDER_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._llm = llm
        self._session = session or requests.Session()
        self._render_interval = render_interval
        self._clock = clock
        self.last_text = ""
        self.last_stats = StreamStats()

    def stream_summary(
        self,
        request: PromptRequest,
        on_partial: PartialCallback | None = None,
        *,
        api_key: str | None = None,
    ) -> SummaryResult:
        """Stream ``request`` and return the parsed final summary.

        ``on_partial`` receives the whole accumulated text (never a delta),
        throttled while streaming and once more after the stream ends unless
        the final text was already the last one delivered.
        """

        text = self.stream_text(request, on_partial, api_key=api_key)
        return parse_summary_response(text)

    def stream_text(
        self,
        request: PromptRequest,
        on_partial: PartialCallback | None = None,
        *,
        api_key: str | None = None,
    ) -> str:
        headers = {
            "Authorization": f"Bearer {api_key or self._llm.api_key_secret}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        payload = request.to_payload(self._llm.name)
        logger.info(
            "Sending streaming request to {} (model {}, {} input chars)",
            self._llm.base_url,
            self._llm.name,
            len(request.user_content),
        )

        try:
            with self._session.post(
                self._llm.base_url,
                json=payload,
                headers=headers,
                stream=True,
                timeout=self._llm.timeout,
            ) as response:
                if not 200 <= response.status_code < 300:
                    body = response.text
                    logger.error("API error {}: {}", response.status_code, body[:500])
                    raise classify_http_error(response.status_code, body)
                text = self._consume(response.iter_content(chunk_size=None), on_partial)
        except requests.RequestException as exc:
            logger.error("Streaming request failed: {}", exc)
            raise NetworkOrServerError(f"Network error: {exc}") from exc

        logger.info(
            "Streaming complete: {} chars from {} deltas ({} malformed lines skipped)",
            len(text),
            self.last_stats.deltas,
            self.last_stats.malformed,
        )
        logger.debug("Final text: {}", text[:400])
        return text

    def _consume(self, chunks: Any, on_partial: PartialCallback | None) -> str:
        buffer = EventLineBuffer()
        throttle = RenderThrottle(self._render_interval, clock=self._clock)
        stats = StreamStats()
        parts: list[str] = []
        last_rendered: str | None = None

        def _handle(lines: list[str]) -> None:
            nonlocal last_rendered
            appended = False
            for line in lines:
                decoded = decode_event_line(line)
                if decoded.kind == "delta":
                    parts.append(decoded.delta)
                    stats.deltas += 1
                    appended = True
                elif decoded.kind == "malformed":
                    stats.malformed += 1
                    logger.debug("Skipping malformed event line: {!r}", line[:200])
            if appended and on_partial is not None and throttle.ready():
                stats.partial_renders += 1
                last_rendered = "".join(parts)
                on_partial(last_rendered)

        for chunk in chunks:
            if not chunk:
                continue
            stats.chunks += 1
            _handle(buffer.feed(chunk))
        _handle(buffer.flush())

        text = "".join(parts)
        self.last_text = text
        self.last_stats = stats
        if on_partial is not None and text != last_rendered:
            on_partial(text)
        return text


__all__ = [
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "RENDER_INTERVAL_SECONDS",
    "SummarizationError",
    "AuthError",
    "TransientUnavailableError",
    "NetworkOrServerError",
    "classify_http_error",
    "DecodedLine",
    "decode_event_line",
    "EventLineBuffer",
    "RenderThrottle",
    "StreamStats",
    "StreamingSummaryClient",
]
