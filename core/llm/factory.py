from __future__ import annotations

from config import DEFAULT_BASE_URL
from core.llm.provider import LLMProvider
from core.llm.providers.openai_responses import OpenAIResponsesProvider


def create_llm_provider(config) -> LLMProvider:
    provider = (getattr(config, "llm_provider", "openai") or "openai").lower().strip()

    if provider in {"openai", "openai-compatible", "openai_compatible"}:
        return OpenAIResponsesProvider(
            api_key=config.llm_api_key,
            base_url=config.llm_base_url or DEFAULT_BASE_URL,
            read_timeout_s=config.llm_read_timeout,
        )

    raise ValueError(
        f"Unsupported LLM_PROVIDER={provider!r}. "
        "Supported: openai, openai_compatible (any server exposing the Responses API via base_url)."
    )
