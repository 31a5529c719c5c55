"""
Tests for core/stream_processor.py - per-connection event handling

Key concepts tested:
1. Forward/suppress classification of every event kind
2. Function-call buffering across added/delta/done events
3. Tolerance of corrupt and unknown records mid-stream
4. Cancellation of a pending read
"""

import asyncio

import pytest

from core.cancellation import ChatCancelled
from core.llm.decoder import EventDecoder
from core.llm.events import Status
from core.stream_processor import ConversationState, FunctionCallBuffer, StreamProcessor
from models.responses import ChatResponseDelta
from tests.sse_helpers import (
    SSE_DONE_LINE,
    arguments_delta,
    arguments_done,
    function_call_added,
    iterate,
    response_event,
    sse,
    text_delta,
    text_done,
)


async def collect(processor: StreamProcessor, lines: list[str]) -> list[tuple]:
    return [pair async for pair in processor.process(iterate(lines))]


def forwarded(pairs: list[tuple]) -> list[ChatResponseDelta]:
    return [delta for delta, forward in pairs if forward]


@pytest.fixture
def state():
    return ConversationState()


@pytest.fixture
def processor(state):
    return StreamProcessor(EventDecoder(), state)


class TestTextStreaming:
    @pytest.mark.asyncio
    async def test_forwarded_deltas_concatenate_to_final_text(self, processor):
        pairs = await collect(processor, [
            text_delta("Hel", 1),
            text_delta("lo, ", 2),
            text_delta("world", 3),
            text_done("Hello, world", 4),
            SSE_DONE_LINE,
        ])

        content = "".join(delta.content or "" for delta in forwarded(pairs))
        assert content == "Hello, world"
        assert len(forwarded(pairs)) == 4

    @pytest.mark.asyncio
    async def test_done_without_deltas_forwards_full_text(self, processor):
        pairs = await collect(processor, [text_done("Hello, world")])

        assert forwarded(pairs) == [ChatResponseDelta(content="Hello, world")]

    @pytest.mark.asyncio
    async def test_refusal_and_reasoning_are_forwarded(self, processor):
        pairs = await collect(processor, [
            sse({"type": "response.reasoning_text.delta", "sequence_number": 1, "item_id": "rs_1",
                 "output_index": 0, "content_index": 0, "delta": "Checking"}),
            sse({"type": "response.refusal.delta", "sequence_number": 2, "item_id": "msg_1",
                 "output_index": 1, "content_index": 0, "delta": "Sorry"}),
        ])

        assert forwarded(pairs) == [
            ChatResponseDelta(reasoning="Checking"),
            ChatResponseDelta(refusal="Sorry"),
        ]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_records_latest_response_id_and_forwards_status(self, processor, state):
        pairs = await collect(processor, [
            response_event("response.created", "resp_1", "in_progress", 0),
            response_event("response.completed", "resp_2", "completed", 5),
        ])

        assert state.current_response_id == "resp_2"
        assert forwarded(pairs) == [
            ChatResponseDelta(id="resp_1", status=Status.in_progress),
            ChatResponseDelta(id="resp_2", status=Status.completed),
        ]


class TestFunctionCallBuffering:
    @pytest.mark.asyncio
    async def test_tool_call_events_are_suppressed_and_buffered(self, processor, state):
        pairs = await collect(processor, [
            function_call_added("call_1", "query_knowledge_base"),
            arguments_delta('{"query":'),
            arguments_delta('"proj"}'),
            arguments_done('{"query":"projects"}', name="query_knowledge_base"),
        ])

        assert len(pairs) == 4
        assert forwarded(pairs) == []
        assert state.function_call == FunctionCallBuffer(
            call_id="call_1",
            name="query_knowledge_base",
            arguments='{"query":"projects"}',
            complete=True,
        )
        assert state.pending_function_call is state.function_call

    @pytest.mark.asyncio
    async def test_deltas_accumulate_until_done(self, processor, state):
        await collect(processor, [
            function_call_added("call_1", "query_knowledge_base"),
            arguments_delta('{"query":'),
            arguments_delta('"projects"}'),
        ])

        assert state.function_call.arguments == '{"query":"projects"}'
        assert state.function_call.complete is False
        assert state.pending_function_call is None

    @pytest.mark.asyncio
    async def test_done_without_arguments_keeps_accumulation(self, processor, state):
        await collect(processor, [
            function_call_added("call_1", "query_knowledge_base"),
            arguments_delta('{"query":"projects"}'),
            sse({"type": "response.function_call_arguments.done", "sequence_number": 3,
                 "item_id": "fc_1", "output_index": 0}),
        ])

        assert state.function_call.arguments == '{"query":"projects"}'
        assert state.function_call.complete is True

    @pytest.mark.asyncio
    async def test_arguments_without_output_item_create_buffer(self, processor, state):
        await collect(processor, [
            arguments_delta('{"query":"x"}', item_id="fc_9"),
            arguments_done('{"query":"x"}', item_id="fc_9", name="query_knowledge_base"),
        ])

        assert state.function_call.call_id == "fc_9"
        assert state.function_call.name == "query_knowledge_base"
        assert state.function_call.complete is True

    @pytest.mark.asyncio
    async def test_message_output_items_are_suppressed(self, processor, state):
        pairs = await collect(processor, [
            sse({"type": "response.output_item.added", "sequence_number": 1, "output_index": 0,
                 "item": {"type": "message", "id": "msg_1", "status": "in_progress", "role": "assistant", "content": []}}),
            sse({"type": "response.content_part.added", "sequence_number": 2, "item_id": "msg_1",
                 "output_index": 0, "content_index": 0, "part": {"type": "output_text", "text": ""}}),
        ])

        assert forwarded(pairs) == []
        assert state.function_call is None


class TestTolerance:
    @pytest.mark.asyncio
    async def test_unknown_event_between_valid_events(self, processor):
        pairs = await collect(processor, [
            text_delta("Hello", 1),
            sse({"type": "response.audio.delta", "sequence_number": 2, "delta": "AAAA"}),
            text_delta(" there", 3),
        ])

        assert forwarded(pairs) == [ChatResponseDelta(content="Hello"), ChatResponseDelta(content=" there")]

    @pytest.mark.asyncio
    async def test_invalid_json_line_is_skipped(self, processor):
        pairs = await collect(processor, [
            "data: {\"type\": \"response.output_text.delta\", ",
            "",
            "event: response.output_text.delta",
            text_delta("still here", 2),
        ])

        assert forwarded(pairs) == [ChatResponseDelta(content="still here")]

    @pytest.mark.asyncio
    async def test_stops_reading_at_done_sentinel(self, processor):
        pairs = await collect(processor, [
            text_delta("first", 1),
            SSE_DONE_LINE,
            text_delta("never read", 2),
        ])

        assert forwarded(pairs) == [ChatResponseDelta(content="first")]


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_interrupts_pending_read(self, processor):
        cancel_event = asyncio.Event()
        reads = []

        async def stalled_upstream():
            reads.append(1)
            yield text_delta("Hello", 1)
            await asyncio.sleep(3600)
            reads.append(2)
            yield text_delta("never", 2)

        received = []
        with pytest.raises(ChatCancelled):
            async for delta, forward in processor.process(stalled_upstream(), cancel_event):
                received.append(delta)
                cancel_event.set()

        assert received == [ChatResponseDelta(content="Hello")]
        assert reads == [1]
