from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request model for the streaming chat endpoint."""

    input: str = Field(..., max_length=4000, description="The input string to send to the agent")
    previous_response_id: str | None = Field(
        None, description="Optional previous response ID for context"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "input": "What projects has Tom built?",
                "previous_response_id": "resp_67ccd2bed1ec8190b14f964abc0542670bb6a6b452d3795b",
            }
        }
    }
