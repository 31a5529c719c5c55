"""Request body models for the upstream ``POST /responses`` call."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class InputMessage(BaseModel):
    type: Literal["message"] = "message"
    role: Literal["user", "assistant", "system", "developer"] = "user"
    content: str


class FunctionCallOutput(BaseModel):
    type: Literal["function_call_output"] = "function_call_output"
    call_id: str
    output: str


InputItem = InputMessage | FunctionCallOutput


class FunctionTool(BaseModel):
    type: Literal["function"] = "function"
    name: str
    description: str
    parameters: dict[str, Any]
    strict: bool = True


class CreateResponseRequest(BaseModel):
    model: str
    input: list[InputItem]
    previous_response_id: str | None = None
    instructions: str | None = None
    tools: list[FunctionTool] = Field(default_factory=list)
    parallel_tool_calls: bool = False
    temperature: float | None = None
    stream: bool = True

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
