import pytest

from config import Config
from core.knowledge_base import KnowledgeBaseResult
from tests.sse_helpers import FakeKnowledgeBase


@pytest.fixture
def mock_env_vars():
    """Provide fake environment variables for testing."""

    return {
        "LLM_PROVIDER": "openai",
        "LLM_API_KEY": "test-key-123",
        "LLM_MODEL": "gpt-4o-mini",
        "ALLOWED_ORIGINS": "http://localhost:5173"
    }


@pytest.fixture
def config(mock_env_vars, monkeypatch):
    for key, value in mock_env_vars.items():
        monkeypatch.setenv(key, value)

    return Config.from_env()


@pytest.fixture
def knowledge_base():
    return FakeKnowledgeBase([
        KnowledgeBaseResult(id="profile#1", content="Tom built a streaming portfolio agent.", score=0.82),
        KnowledgeBaseResult(id="profile#2", content="Tom built a knowledge base ingestion job.", score=0.64),
    ])
