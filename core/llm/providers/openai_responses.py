from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from core.llm.provider import LLMProvider, UpstreamError
from core.llm.requests import CreateResponseRequest


if TYPE_CHECKING:
    from collections.abc import AsyncIterator


logger = logging.getLogger(__name__)


class OpenAIResponsesProvider(LLMProvider):
    """
    Streams the OpenAI Responses API (``POST {base_url}/responses``).

    Works with any server exposing the same endpoint by setting base_url.
    The read timeout bounds how long a stalled provider can hold a session.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        read_timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._async_client = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(10.0, read=read_timeout_s),
            transport=transport,
        )

    async def stream_lines(self, request: CreateResponseRequest) -> AsyncIterator[str]:
        url = f"{self._base_url}/responses"

        async with self._async_client.stream("POST", url, json=request.to_payload()) as resp:
            if resp.is_error:
                body = (await resp.aread()).decode("utf-8", errors="replace")
                logger.error(f"Failed to generate streaming response: {resp.status_code} {body}")
                raise UpstreamError(resp.status_code, body)

            async for line in resp.aiter_lines():
                logger.debug(line)
                yield line

    async def aclose(self) -> None:
        await self._async_client.aclose()
