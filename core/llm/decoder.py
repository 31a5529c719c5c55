"""
SSE line decoder for the upstream streaming protocol.

One ``data: <json>`` line becomes one typed ``StreamEvent``. Anything the
decoder cannot make sense of (invalid JSON, a missing or unknown ``type``, a
payload that doesn't fit the variant's schema) becomes ``None`` so a single
corrupt record never ends the session.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from core.llm.events import EVENT_TYPES, StreamEvent


logger = logging.getLogger(__name__)


SSE_DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
LOG_PREVIEW_LENGTH = 200


class _EndOfStream:
    def __repr__(self) -> str:
        return "END_OF_STREAM"


END_OF_STREAM = _EndOfStream()


@dataclass(frozen=True)
class SerializerOptions:
    """JSON settings shared by the decoder and encoder."""

    exclude_none: bool = True
    strict: bool = False


DEFAULT_SERIALIZER_OPTIONS = SerializerOptions()


def is_data_line(line: str) -> bool:
    return line.startswith(SSE_DATA_PREFIX)


class EventDecoder:
    def __init__(self, options: SerializerOptions = DEFAULT_SERIALIZER_OPTIONS):
        self.options = options

    def decode_line(self, line: str) -> StreamEvent | _EndOfStream | None:
        """
        Decode one SSE data line.

        Returns:
            END_OF_STREAM for the ``[DONE]`` sentinel, the decoded event,
            or None when the line should be skipped.
        """
        if not is_data_line(line):
            return None

        data = line[len(SSE_DATA_PREFIX):].strip()
        if data == DONE_SENTINEL:
            return END_OF_STREAM

        return self.decode_payload(data)

    def decode_payload(self, data: str) -> StreamEvent | None:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping malformed event payload ({e}): {data[:LOG_PREVIEW_LENGTH]}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"Skipping non-object event payload: {data[:LOG_PREVIEW_LENGTH]}")
            return None

        event_type = payload.get("type")
        variant = EVENT_TYPES.get(event_type) if isinstance(event_type, str) else None
        if variant is None:
            logger.debug(f"Skipping unrecognized event type: {event_type!r}")
            return None

        try:
            return variant.model_validate(payload, strict=self.options.strict)
        except ValidationError as e:
            logger.warning(f"Skipping {event_type} event with unexpected shape: {e.error_count()} error(s)")
            return None

    def encode_event(self, event: StreamEvent) -> str:
        return event.model_dump_json(exclude_none=self.options.exclude_none)
