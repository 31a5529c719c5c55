from __future__ import annotations

from typing import AsyncIterator, Protocol, runtime_checkable

from core.llm.requests import CreateResponseRequest


class UpstreamError(Exception):
    """The upstream provider answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Upstream request failed with status {status_code}")


@runtime_checkable
class LLMProvider(Protocol):
    """
    Dependency-inversion boundary for the streaming model API.

    Implementations open one upstream connection per call and yield the raw
    body lines of the SSE stream, leaving decoding to the caller. A
    non-success status must raise UpstreamError before any line is yielded.
    """

    def stream_lines(self, request: CreateResponseRequest) -> AsyncIterator[str]: ...

    async def aclose(self) -> None: ...
