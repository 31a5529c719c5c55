from functools import lru_cache

from config import Config
from core.chat import Chat
from core.llm import create_llm_provider
from core.llm.decoder import EventDecoder, SerializerOptions
from core.persona import Me
from core.tools import Tools
from services.knowledge_base import TfidfKnowledgeBase


@lru_cache()
def get_config() -> Config:
    """
    Get singleton Config instance.
    Uses lru_cache to ensure config is loaded once and reused.
    """
    return Config.from_env()


@lru_cache()
def get_knowledge_base() -> TfidfKnowledgeBase:
    return TfidfKnowledgeBase.from_directory(get_config().kb_documents_dir)


@lru_cache()
def get_chat_service() -> Chat:
    """
    Get singleton Chat service with all dependencies wired up.

    The service holds no per-request state: the HTTP client, tool registry
    and knowledge base are shared by every concurrent chat.
    """
    config = get_config()
    llm_provider = create_llm_provider(config)

    me = Me(config.persona_name)
    tools = Tools(get_knowledge_base(), persona_name=config.persona_name, top_k=config.kb_top_k)

    return Chat(
        me,
        llm_provider,
        config.llm_model,
        tools,
        decoder=EventDecoder(SerializerOptions()),
        max_tool_rounds=config.max_tool_rounds,
        temperature=config.llm_temperature,
    )
