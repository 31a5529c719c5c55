import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing

import httpx

from core.cancellation import ChatCancelled, run_cancellable
from core.llm.decoder import DEFAULT_SERIALIZER_OPTIONS, EventDecoder
from core.llm.provider import LLMProvider, UpstreamError
from core.llm.requests import CreateResponseRequest, FunctionCallOutput, InputItem, InputMessage
from core.stream_processor import ConversationState, StreamProcessor
from core.tools import Tools
from models.responses import ChatResponseDelta


logger = logging.getLogger(__name__)


MESSAGE_PREVIEW_LENGTH = 50
DEFAULT_MAX_TOOL_ROUNDS = 5

SSE_DONE = b"data: [DONE]\n\n"
SSE_ERROR = b"data: [ERROR]\n\n"


class InvalidMessageError(Exception):
    pass


# Checked in order, so subclasses come before their bases.
ERROR_HANDLERS: dict[type, str] = {
    UpstreamError: "upstream_status",
    httpx.TimeoutException: "upstream_timeout",
    httpx.ConnectError: "connection_error",
    httpx.HTTPError: "transport_error",
    InvalidMessageError: "invalid_message",
}


def _handle_llm_error(error: Exception, context: str = "") -> str:
    context_suffix = f" ({context})" if context else ""

    for error_type, code in ERROR_HANDLERS.items():
        if isinstance(error, error_type):
            logger.error(f"LLM {code} error{context_suffix}: {error}")
            return code

    logger.error(f"Unexpected error in chat{context_suffix}: {type(error).__name__} - {error}")
    return "unknown_error"


def encode_sse(delta: ChatResponseDelta) -> bytes:
    return f"data: {delta.encode()}\n\n".encode()


class Chat:
    """
    Drives one chat request against the upstream model.

    Each pass sends the accumulated input items, streams the response back to
    the caller and, when the model asked for a tool, runs it and sends the
    result in a follow-up pass anchored on the latest response id.
    """

    def __init__(
        self,
        persona,
        llm: LLMProvider,
        llm_model: str,
        llm_tools: Tools,
        decoder: EventDecoder | None = None,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        temperature: float | None = None,
    ):
        self.llm = llm
        self.llm_model = llm_model
        self.llm_tools = llm_tools
        self.persona = persona
        self.decoder = decoder or EventDecoder(DEFAULT_SERIALIZER_OPTIONS)
        self.max_tool_rounds = max_tool_rounds
        self.temperature = temperature

    @staticmethod
    def _is_valid_message(message: str | None) -> bool:
        return bool(message and message.strip())

    def _validate_message(self, message: str) -> None:
        if not self._is_valid_message(message):
            logger.warning(f"Invalid message rejected: {(message or '')[:MESSAGE_PREVIEW_LENGTH]!r}")
            raise InvalidMessageError("Input is required")

    def _build_request(self, input_items: list[InputItem], previous_response_id: str | None) -> CreateResponseRequest:
        return CreateResponseRequest(
            model=self.llm_model,
            input=input_items,
            previous_response_id=previous_response_id,
            instructions=self.persona.system_prompt,
            tools=self.llm_tools.tools,
            temperature=self.temperature,
        )

    async def generate(
        self,
        message: str,
        previous_response_id: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncGenerator[ChatResponseDelta, None]:
        """
        Stream deltas for one user message, running tool calls as they come.

        Ends quietly when cancel_event is set. Upstream transport failures
        propagate to the caller.
        """
        self._validate_message(message)
        logger.info(f"Generating streaming response with previous response ID: {previous_response_id}")

        input_items: list[InputItem] = [InputMessage(role="user", content=message)]
        anchor = previous_response_id
        state = ConversationState()
        tool_rounds = 0

        try:
            while True:
                state.begin_pass()
                request = self._build_request(input_items, anchor)
                processor = StreamProcessor(self.decoder, state)

                async with aclosing(processor.process(self.llm.stream_lines(request), cancel_event)) as events:
                    async for delta, forward in events:
                        if forward and delta is not None:
                            yield delta

                call = state.pending_function_call
                if call is None:
                    return

                if tool_rounds >= self.max_tool_rounds:
                    logger.warning(
                        f"Tool call limit of {self.max_tool_rounds} reached, not executing {call.name}"
                    )
                    return
                tool_rounds += 1

                logger.info(f"Executing buffered function call: {call.name}")
                output = await run_cancellable(
                    self.llm_tools.execute(call.name or "", call.arguments), cancel_event
                )

                input_items = [*input_items, FunctionCallOutput(call_id=call.call_id, output=output)]
                anchor = state.current_response_id
                logger.info(f"Generating new response with tool result, previous response ID: {anchor}")

        except ChatCancelled:
            logger.info("Chat stream cancelled by caller")

    async def chat_stream(
        self,
        message: str,
        previous_response_id: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncGenerator[bytes, None]:
        """
        Encode generate() as the downstream SSE protocol.

        Every delta becomes a data line, followed by [DONE]. Any failure ends
        the stream with a bare [ERROR] marker so upstream details never reach
        the caller. A cancelled stream just stops.
        """
        try:
            async for delta in self.generate(message, previous_response_id, cancel_event):
                yield encode_sse(delta)

            if cancel_event is not None and cancel_event.is_set():
                return

            yield SSE_DONE

        except Exception as error:
            _handle_llm_error(error, "streaming")
            yield SSE_ERROR
