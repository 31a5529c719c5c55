from __future__ import annotations

from core.llm.events import (
    ReasoningTextEvent,
    RefusalEvent,
    ResponseLifecycleEvent,
    StreamEvent,
    TextDeltaEvent,
    TextDoneEvent,
)
from models.responses import ChatResponseDelta


def map_event_to_delta(event: StreamEvent, streamed: str = "") -> ChatResponseDelta | None:
    """
    Map a wire event to the outward delta shape.

    Output item, content part and function call events have no outward
    representation and map to None. Where an event carries both the
    incremental and the cumulative value, the incremental one wins.

    Args:
        event: Decoded upstream event
        streamed: Text already forwarded for the same content part. A
            cumulative value only contributes the part not yet streamed,
            so the consumer's concatenation equals the final text.
    """
    if isinstance(event, ResponseLifecycleEvent):
        return ChatResponseDelta(id=event.response.id, status=event.response.status)

    if isinstance(event, TextDeltaEvent):
        return ChatResponseDelta(content=event.delta)

    if isinstance(event, TextDoneEvent):
        return ChatResponseDelta(content=unstreamed_remainder(event.text, streamed))

    if isinstance(event, RefusalEvent):
        if event.delta is not None:
            return ChatResponseDelta(refusal=event.delta)
        return ChatResponseDelta(refusal=unstreamed_remainder(event.refusal, streamed))

    if isinstance(event, ReasoningTextEvent):
        if event.delta is not None:
            return ChatResponseDelta(reasoning=event.delta)
        return ChatResponseDelta(reasoning=unstreamed_remainder(event.text, streamed))

    return None


def unstreamed_remainder(cumulative: str | None, streamed: str) -> str | None:
    if cumulative is None or not streamed:
        return cumulative
    if cumulative.startswith(streamed):
        return cumulative[len(streamed):]
    # Diverged from what was streamed; the consumer already holds the deltas.
    return ""
