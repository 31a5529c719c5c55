"""
Per-connection processing of the upstream event stream.

The processor reads raw SSE lines, decodes them, updates the conversation
state (latest response id, the pending function call) and decides for every
event whether the caller gets to see it.

Function-call bootstrapping is never user visible: the added output item and
every arguments event are suppressed and folded into a single
FunctionCallBuffer that the continuation driver executes once the stream ends.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from dataclasses import dataclass, field

from core.cancellation import run_cancellable
from core.llm.decoder import END_OF_STREAM, EventDecoder
from core.llm.events import (
    ContentPartEvent,
    FunctionCallArgumentsEvent,
    FunctionCallItem,
    OutputItemEvent,
    ReasoningTextEvent,
    RefusalEvent,
    ResponseLifecycleEvent,
    StreamEvent,
    TextDeltaEvent,
    TextDoneEvent,
)
from core.response_mapper import map_event_to_delta
from models.responses import ChatResponseDelta


logger = logging.getLogger(__name__)


@dataclass
class FunctionCallBuffer:
    call_id: str
    name: str | None = None
    arguments: str = ""
    complete: bool = False


@dataclass
class ConversationState:
    """
    State of one top-level chat request.

    current_response_id survives across continuation cycles and anchors the
    next request. The function-call buffer and the per-part streamed text
    belong to a single streaming pass and are reset by begin_pass().
    """

    current_response_id: str | None = None
    function_call: FunctionCallBuffer | None = None
    streamed_parts: dict[tuple, str] = field(default_factory=dict)

    def begin_pass(self) -> None:
        self.function_call = None
        self.streamed_parts = {}

    @property
    def pending_function_call(self) -> FunctionCallBuffer | None:
        if self.function_call is not None and self.function_call.complete:
            return self.function_call
        return None


async def _next_line(lines: AsyncIterator[str]) -> str | None:
    try:
        return await anext(lines)
    except StopAsyncIteration:
        return None


class StreamProcessor:
    def __init__(self, decoder: EventDecoder, state: ConversationState):
        self.decoder = decoder
        self.state = state

    async def process(
        self,
        lines: AsyncIterator[str],
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncGenerator[tuple[ChatResponseDelta | None, bool], None]:
        """
        Drain one upstream connection.

        Yields (delta, forward) for every decoded event. Stops at the [DONE]
        sentinel or the end of the body. When cancel_event fires, the pending
        read is abandoned and ChatCancelled propagates to the caller.
        """
        try:
            while True:
                line = await run_cancellable(_next_line(lines), cancel_event)
                if line is None:
                    return
                if not line.strip():
                    continue

                event = self.decoder.decode_line(line)
                if event is END_OF_STREAM:
                    logger.info("Stream completed with [DONE] signal")
                    return
                if event is None:
                    continue

                yield self.handle_event(event)
        finally:
            aclose = getattr(lines, "aclose", None)
            if aclose is not None:
                await aclose()

    def handle_event(self, event: StreamEvent) -> tuple[ChatResponseDelta | None, bool]:
        if isinstance(event, ResponseLifecycleEvent):
            self.state.current_response_id = event.response.id
            logger.info(f"Response event received, ID: {event.response.id}, Status: {event.response.status}")
            return map_event_to_delta(event), True

        if isinstance(event, OutputItemEvent):
            if event.is_added and isinstance(event.item, FunctionCallItem):
                self._start_function_call(event.item)
            return None, False

        if isinstance(event, ContentPartEvent):
            return None, False

        if isinstance(event, FunctionCallArgumentsEvent):
            self._buffer_arguments(event)
            return None, False

        if type(event) in _CONTENT_FIELDS:
            return self._forward_content(event), True

        return None, False

    def _start_function_call(self, item: FunctionCallItem) -> None:
        logger.info(f"Received function call output item: {item.name}")
        self.state.function_call = FunctionCallBuffer(call_id=item.call_id, name=item.name)

    def _buffer_arguments(self, event: FunctionCallArgumentsEvent) -> None:
        buffer = self.state.function_call
        if buffer is None:
            logger.warning("Received function call arguments without output item")
            buffer = self.state.function_call = FunctionCallBuffer(call_id=event.item_id)

        if buffer.complete:
            logger.warning(f"Ignoring {event.type} for already completed call {buffer.call_id}")
            return

        if event.delta:
            buffer.arguments += event.delta

        if event.is_done:
            if event.arguments is not None:
                buffer.arguments = event.arguments
            if event.name is not None:
                buffer.name = event.name
            buffer.complete = True
            logger.info(f"Function call buffered - Name: {buffer.name}, Args: {buffer.arguments}")

    def _forward_content(self, event: StreamEvent) -> ChatResponseDelta | None:
        field_name = _CONTENT_FIELDS[type(event)]
        key = (field_name, getattr(event, "item_id", None), getattr(event, "content_index", None))
        streamed = self.state.streamed_parts.get(key, "")

        delta = map_event_to_delta(event, streamed)
        if delta is None:
            return None

        if event.is_done:
            self.state.streamed_parts.pop(key, None)
        else:
            self.state.streamed_parts[key] = streamed + (getattr(delta, field_name) or "")
        return delta


_CONTENT_FIELDS: dict[type, str] = {
    TextDeltaEvent: "content",
    TextDoneEvent: "content",
    RefusalEvent: "refusal",
    ReasoningTextEvent: "reasoning",
}
