import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.knowledge_base import KnowledgeBase
from core.llm.requests import FunctionTool


logger = logging.getLogger(__name__)


DEFAULT_TOP_K = 10


class QueryKnowledgeBaseParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    query: str = Field(..., min_length=1, description="The search query to find relevant information in the knowledge base")


class Tools:
    """
    Registry of capabilities the model may call.

    execute() always returns a JSON string: either the tool's result or an
    {"error": ...} object. The string is fed back to the model, which can then
    react to the failure instead of the session crashing.
    """

    def __init__(self, knowledge_base: KnowledgeBase, persona_name: str = "the site owner", top_k: int = DEFAULT_TOP_K):
        self.knowledge_base = knowledge_base
        self.top_k = top_k

        self.query_knowledge_base_tool = FunctionTool(
            name="query_knowledge_base",
            description=(
                f"Search the knowledge base for relevant information about {persona_name}'s background, "
                f"projects, and experience. Use this when you need to retrieve specific information "
                f"about {persona_name}."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The search query to find relevant information in the knowledge base"
                    }
                },
                "required": ["query"],
                "additionalProperties": False
            },
        )

        self.registry = {
            "query_knowledge_base": (QueryKnowledgeBaseParams, self.query_knowledge_base),
        }
        self.tools = [self.query_knowledge_base_tool]

    async def query_knowledge_base(self, params: QueryKnowledgeBaseParams) -> dict:
        results = await self.knowledge_base.query(params.query, self.top_k)
        return {
            "results": [result.to_dict() for result in results],
            "count": len(results),
        }

    async def execute(self, name: str, arguments: str) -> str:
        logger.info(f"Executing tool call: {name} with arguments: {arguments}")

        entry = self.registry.get(name)
        if entry is None:
            logger.warning(f"Unknown function called: {name}")
            return json.dumps({"error": f"Unknown function: {name}"})

        params_model, handler = entry
        try:
            params = params_model.model_validate_json(arguments or "{}")
        except ValidationError as e:
            logger.warning(f"Invalid arguments for {name}: {e.error_count()} error(s)")
            return json.dumps({"error": f"Invalid arguments for {name}", "details": _describe_errors(e)})

        try:
            result = await handler(params)
        except Exception as e:
            logger.error(f"Error executing tool call {name}: {type(e).__name__} - {e}")
            return json.dumps({"error": f"Tool {name} failed"})

        return json.dumps(result)


def _describe_errors(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in detail['loc']) or 'arguments'}: {detail['msg']}"
        for detail in error.errors()
    ]
