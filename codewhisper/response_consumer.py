"""
Turn provider responses into text.

Two shapes are understood:

* a single JSON body with ``choices[0].message.content`` (non-streaming);
* a server-sent-events stream whose ``data:`` lines carry JSON chunks with
  ``choices[0].delta.content``, terminated by ``data: [DONE]``.

Streams are folded into one buffer per call.  If the transport drops half
way, the text received so far is kept and the result is flagged as
interrupted instead of raising.
"""

import json
import logging
from dataclasses import dataclass
from typing import Generator

import requests

from .errors import ProviderError

log = logging.getLogger("codewhisper")

_DONE = "[DONE]"


@dataclass
class StreamResult:
    """Outcome of consuming one streamed completion."""

    text: str
    chunk_count: int = 0
    finished: bool = False
    finish_reason: str | None = None
    interrupted: bool = False

    @property
    def truncated(self) -> bool:
        """True when the model or the transport stopped early."""
        return self.interrupted or not self.finished or self.finish_reason == "length"


# ---------------------------------------------------------------------------
# SSE helpers
# ---------------------------------------------------------------------------

#: SSE field names other than ``data`` that carry no completion text.
_SSE_FIELDS = ("event:", "id:", "retry:")


@dataclass(frozen=True)
class StreamDelta:
    """One parsed stream event.

    ``done`` marks the ``[DONE]`` sentinel and carries no text.
    """

    text: str = ""
    finish_reason: str | None = None
    done: bool = False


def _iter_data_payloads(response: requests.Response,
                        stray: list[str] | None = None) -> Generator[str, None, None]:
    """Yield the payload of every ``data:`` line, in arrival order.

    Lines that are neither ``data:`` nor another SSE field nor a comment are
    appended to *stray* so a body sent without SSE framing can be inspected
    afterwards.  Undecodable bytes are replaced, never fatal.
    """
    for raw_line in response.iter_lines():
        if not raw_line:
            continue
        line: str = (
            raw_line.decode("utf-8", errors="replace")
            if isinstance(raw_line, bytes) else raw_line
        )
        if not line.startswith("data:"):
            if stray is not None and not line.startswith((":",) + _SSE_FIELDS):
                stray.append(line)
            continue
        payload = line[5:]
        if payload.startswith(" "):
            payload = payload[1:]
        yield payload.strip()


def _raise_error_object(err, provider: str, body: str) -> None:
    message = err.get("message", str(err)) if isinstance(err, dict) else str(err)
    prefix = f"{provider} API error" if provider else "API error"
    raise ProviderError(
        f"{prefix}: {message}",
        provider=provider,
        response_body=body[:500],
    )


def _parse_chunk(payload: str, provider: str = "") -> dict | None:
    """Decode one SSE chunk; ``None`` for chunks that should be skipped.

    An in-band ``error`` object is a provider failure and raises
    :class:`ProviderError`.
    """
    try:
        chunk = json.loads(payload)
    except json.JSONDecodeError:
        log.warning("[API] SSE: failed to parse JSON chunk: %s", payload[:200])
        return None
    if not isinstance(chunk, dict):
        log.warning("[API] SSE: unexpected chunk type %s", type(chunk).__name__)
        return None
    if chunk.get("error"):
        _raise_error_object(chunk["error"], provider, payload)
    return chunk


def _check_unframed_body(stray: list[str], provider: str = "") -> None:
    """Raise :class:`ProviderError` if a stream with no ``data:`` lines was
    really a plain JSON error body."""
    body = "\n".join(stray).strip()
    if not body:
        return
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        log.warning("[API] SSE: ignored %d non-SSE line(s): %s",
                    len(stray), body[:200])
        return
    if isinstance(parsed, dict) and parsed.get("error"):
        _raise_error_object(parsed["error"], provider, body)
    log.warning("[API] SSE: ignored unframed JSON body: %s", body[:200])


def _delta_of(chunk: dict) -> tuple[str, str | None]:
    """Return ``(text, finish_reason)`` from a streamed chunk."""
    choices = chunk.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return "", None
    choice = choices[0]
    delta = choice.get("delta") or {}
    text = delta.get("content") if isinstance(delta, dict) else None
    return (text if isinstance(text, str) else ""), choice.get("finish_reason")


def iter_sse_deltas(response: requests.Response,
                    provider: str = "") -> Generator[StreamDelta, None, None]:
    """Yield a :class:`StreamDelta` per meaningful chunk, then one with
    ``done=True`` if the ``[DONE]`` sentinel arrives.

    Chunks with neither text nor a finish reason are skipped.  When the
    stream carried no ``data:`` line at all, any unframed JSON error body is
    raised as :class:`ProviderError`.  The generator is single-pass: it
    consumes *response*.
    """
    stray: list[str] = []
    seen_data = False
    for payload in _iter_data_payloads(response, stray):
        seen_data = True
        if payload == _DONE:
            yield StreamDelta(done=True)
            return
        chunk = _parse_chunk(payload, provider)
        if chunk is None:
            continue
        text, finish_reason = _delta_of(chunk)
        if text or finish_reason:
            yield StreamDelta(text, finish_reason)
    if not seen_data:
        _check_unframed_body(stray, provider)


def accumulate_stream(response: requests.Response,
                      provider: str = "") -> StreamResult:
    """Fold :func:`iter_sse_deltas` into a single :class:`StreamResult`.

    The buffer belongs to this call only.  Transport failures after the
    stream has started keep the partial text (``interrupted=True``);
    provider error chunks raise :class:`ProviderError`.
    """
    parts: list[str] = []
    result = StreamResult(text="")
    try:
        for delta in iter_sse_deltas(response, provider):
            if delta.done:
                result.finished = True
                break
            if delta.text:
                parts.append(delta.text)
                result.chunk_count += 1
            if delta.finish_reason:
                result.finish_reason = delta.finish_reason
                result.finished = True
    except requests.RequestException as exc:
        result.interrupted = True
        log.warning(
            "[API] Stream interrupted after %d chunks (%s: %s); "
            "keeping partial output.",
            result.chunk_count, type(exc).__name__, exc,
        )
    finally:
        response.close()

    result.text = "".join(parts)
    if result.chunk_count == 0 and not result.interrupted:
        log.warning("[API] SSE: stream ended with 0 text chunks. "
                    "The model may have returned an empty response.")
    return result


# ---------------------------------------------------------------------------
# Non-streaming
# ---------------------------------------------------------------------------

def read_completion(response: requests.Response, provider: str = "",
                    model: str = "") -> str:
    """Return ``choices[0].message.content`` or ``""`` when it is missing.

    Raises :class:`ProviderError` for a non-JSON body or an ``error`` object.
    """
    prefix = f"{provider} API error" if provider else "API error"
    try:
        body = response.json()
    except ValueError as exc:
        raise ProviderError(
            f"{prefix}: response is not valid JSON.",
            provider=provider,
            status_code=response.status_code,
            model=model,
            response_body=response.text[:500] if response.text else "",
        ) from exc

    if not isinstance(body, dict):
        raise ProviderError(
            f"{prefix}: unexpected response format ({type(body).__name__}).",
            provider=provider,
            status_code=response.status_code,
            model=model,
            response_body=response.text[:500] if response.text else "",
        )
    if body.get("error"):
        err = body["error"]
        message = err.get("message", str(err)) if isinstance(err, dict) else str(err)
        raise ProviderError(
            f"{prefix}: {message}",
            provider=provider,
            status_code=response.status_code,
            model=model,
            response_body=response.text[:500] if response.text else "",
        )

    choices = body.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        log.warning("[API] Response has no choices. Body: %s",
                    json.dumps(body)[:500])
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""
