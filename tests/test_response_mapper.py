from core.llm.events import (
    ContentPartEvent,
    ModelResponse,
    OutputItemEvent,
    ReasoningTextEvent,
    RefusalEvent,
    ResponseLifecycleEvent,
    Status,
    TextDeltaEvent,
    TextDoneEvent,
)
from core.response_mapper import map_event_to_delta, unstreamed_remainder
from models.responses import ChatResponseDelta


def test_lifecycle_maps_to_id_and_status():
    event = ResponseLifecycleEvent(
        type="response.completed",
        response=ModelResponse(id="resp_1", status=Status.completed),
    )

    assert map_event_to_delta(event) == ChatResponseDelta(id="resp_1", status=Status.completed)


def test_text_delta_maps_to_content():
    event = TextDeltaEvent(type="response.output_text.delta", item_id="msg_1", output_index=0, content_index=0, delta="Hel")

    assert map_event_to_delta(event) == ChatResponseDelta(content="Hel")


def test_text_done_without_streamed_text_maps_to_full_text():
    event = TextDoneEvent(type="response.output_text.done", item_id="msg_1", output_index=0, content_index=0, text="Hello")

    assert map_event_to_delta(event) == ChatResponseDelta(content="Hello")


def test_text_done_only_adds_unstreamed_remainder():
    event = TextDoneEvent(type="response.output_text.done", item_id="msg_1", output_index=0, content_index=0, text="Hello")

    assert map_event_to_delta(event, streamed="Hel") == ChatResponseDelta(content="lo")


def test_refusal_prefers_delta_over_cumulative_value():
    event = RefusalEvent(type="response.refusal.delta", delta="I can", refusal="I can't help with that")

    assert map_event_to_delta(event) == ChatResponseDelta(refusal="I can")


def test_refusal_done_falls_back_to_cumulative_value():
    event = RefusalEvent(type="response.refusal.done", refusal="I can't help with that")

    assert map_event_to_delta(event) == ChatResponseDelta(refusal="I can't help with that")


def test_reasoning_prefers_delta():
    event = ReasoningTextEvent(type="response.reasoning_text.delta", delta="Look", text="Looking up")

    assert map_event_to_delta(event) == ChatResponseDelta(reasoning="Look")


def test_structural_events_map_to_none():
    assert map_event_to_delta(OutputItemEvent(type="response.output_item.added", output_index=0)) is None
    assert map_event_to_delta(
        ContentPartEvent(type="response.content_part.added", item_id="msg_1", output_index=0, content_index=0)
    ) is None


def test_unstreamed_remainder_on_divergence_is_empty():
    assert unstreamed_remainder("Goodbye", "Hel") == ""
    assert unstreamed_remainder(None, "Hel") is None
