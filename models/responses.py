from pydantic import BaseModel, Field

from core.llm.events import Status


class ChatResponseDelta(BaseModel):
    """
    One fragment of the assistant message streamed to the caller.

    Every field is optional. The consumer sets id/status/role/tool fields when
    present and appends content/refusal/reasoning/tool_arguments.
    """

    id: str | None = Field(None, description="Upstream response ID, used as previous_response_id next turn")
    status: Status | None = Field(None, description="Upstream response status")
    role: str | None = None
    content: str | None = Field(None, description="Text content to append")
    refusal: str | None = None
    reasoning: str | None = None
    tool_call_id: str | None = None
    tool_name: str | None = None
    tool_arguments: str | None = None

    def encode(self) -> str:
        return self.model_dump_json(exclude_none=True)


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(..., description="Error description")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
