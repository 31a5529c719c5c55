from core.llm.factory import create_llm_provider
from core.llm.provider import LLMProvider, UpstreamError

__all__ = ["LLMProvider", "UpstreamError", "create_llm_provider"]
