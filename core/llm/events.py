"""
Typed models for the upstream Responses API streaming protocol.

Every SSE record carries a ``type`` discriminator. Several wire types share one
model (``response.created`` and ``response.completed`` are both lifecycle
events), so the mapping from discriminator to model lives in explicit
registries instead of on the models themselves.

Nested polymorphic values (output items, content items) are decoded through
the same registry approach: an unknown ``type`` becomes ``None`` and is dropped
from lists rather than failing the enclosing event.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict


class Status(str, Enum):
    completed = "completed"
    failed = "failed"
    in_progress = "in_progress"
    cancelled = "cancelled"
    queued = "queued"
    incomplete = "incomplete"


# Content items


class ContentItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str


class OutputText(ContentItem):
    type: Literal["output_text"] = "output_text"
    text: str


class Refusal(ContentItem):
    type: Literal["refusal"] = "refusal"
    refusal: str


class ReasoningText(ContentItem):
    type: Literal["reasoning_text"] = "reasoning_text"
    text: str


CONTENT_ITEM_TYPES: dict[str, type[ContentItem]] = {
    "output_text": OutputText,
    "refusal": Refusal,
    "reasoning_text": ReasoningText,
}


# Output items


def _decode_tagged(registry: dict[str, type[BaseModel]], value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    model = registry.get(value.get("type"))
    if model is None:
        return None
    return model.model_validate(value)


def _decode_tagged_list(registry: dict[str, type[BaseModel]], value: Any) -> Any:
    if not isinstance(value, list):
        return value
    decoded = (_decode_tagged(registry, item) for item in value)
    return [item for item in decoded if item is not None]


def _content_item(value: Any) -> Any:
    return _decode_tagged(CONTENT_ITEM_TYPES, value)


def _content_list(value: Any) -> Any:
    return _decode_tagged_list(CONTENT_ITEM_TYPES, value)


AnyContentItem = OutputText | Refusal | ReasoningText
ContentList = Annotated[list[AnyContentItem], BeforeValidator(_content_list)]


class OutputItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    id: str | None = None
    status: Status | None = None


class MessageItem(OutputItem):
    type: Literal["message"] = "message"
    role: str = "assistant"
    content: ContentList = []


class FunctionCallItem(OutputItem):
    type: Literal["function_call"] = "function_call"
    call_id: str
    name: str
    arguments: str = ""


class ReasoningItem(OutputItem):
    type: Literal["reasoning"] = "reasoning"
    content: ContentList = []


OUTPUT_ITEM_TYPES: dict[str, type[OutputItem]] = {
    "message": MessageItem,
    "function_call": FunctionCallItem,
    "reasoning": ReasoningItem,
}


def _output_item(value: Any) -> Any:
    return _decode_tagged(OUTPUT_ITEM_TYPES, value)


def _output_list(value: Any) -> Any:
    return _decode_tagged_list(OUTPUT_ITEM_TYPES, value)


AnyOutputItem = MessageItem | FunctionCallItem | ReasoningItem
OutputList = Annotated[list[AnyOutputItem], BeforeValidator(_output_list)]


# Response object


class ResponseError(BaseModel):
    code: str | None = None
    message: str | None = None


class Usage(BaseModel):
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


class ModelResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    status: Status | None = None
    model: str | None = None
    output: OutputList = []
    error: ResponseError | None = None
    usage: Usage | None = None


# Streaming events


class StreamEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    sequence_number: int | None = None

    @property
    def is_done(self) -> bool:
        return self.type.endswith(".done")


class ResponseLifecycleEvent(StreamEvent):
    response: ModelResponse


class OutputItemEvent(StreamEvent):
    output_index: int
    item: Annotated[AnyOutputItem | None, BeforeValidator(_output_item)] = None

    @property
    def is_added(self) -> bool:
        return self.type == "response.output_item.added"


class ContentPartEvent(StreamEvent):
    item_id: str
    output_index: int
    content_index: int
    part: Annotated[AnyContentItem | None, BeforeValidator(_content_item)] = None


class TextDeltaEvent(StreamEvent):
    item_id: str
    output_index: int
    content_index: int
    delta: str


class TextDoneEvent(StreamEvent):
    item_id: str
    output_index: int
    content_index: int
    text: str


class RefusalEvent(StreamEvent):
    item_id: str | None = None
    output_index: int | None = None
    content_index: int | None = None
    delta: str | None = None
    refusal: str | None = None


class ReasoningTextEvent(StreamEvent):
    item_id: str | None = None
    output_index: int | None = None
    content_index: int | None = None
    delta: str | None = None
    text: str | None = None


class FunctionCallArgumentsEvent(StreamEvent):
    item_id: str
    output_index: int
    delta: str | None = None
    arguments: str | None = None
    name: str | None = None


EVENT_TYPES: dict[str, type[StreamEvent]] = {
    "response.created": ResponseLifecycleEvent,
    "response.queued": ResponseLifecycleEvent,
    "response.in_progress": ResponseLifecycleEvent,
    "response.completed": ResponseLifecycleEvent,
    "response.failed": ResponseLifecycleEvent,
    "response.incomplete": ResponseLifecycleEvent,
    "response.cancelled": ResponseLifecycleEvent,
    "response.output_item.added": OutputItemEvent,
    "response.output_item.done": OutputItemEvent,
    "response.content_part.added": ContentPartEvent,
    "response.content_part.done": ContentPartEvent,
    "response.output_text.delta": TextDeltaEvent,
    "response.output_text.done": TextDoneEvent,
    "response.refusal.delta": RefusalEvent,
    "response.refusal.done": RefusalEvent,
    "response.reasoning_text.delta": ReasoningTextEvent,
    "response.reasoning_text.done": ReasoningTextEvent,
    "response.function_call_arguments.delta": FunctionCallArgumentsEvent,
    "response.function_call_arguments.done": FunctionCallArgumentsEvent,
}
