from dataclasses import dataclass
import os
from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://api.openai.com/v1"


@dataclass
class Config:
    llm_provider: str
    llm_api_key: str
    llm_base_url: str | None
    llm_model: str
    persona_name: str
    llm_temperature: float | None = 0.0001
    llm_read_timeout: float = 60.0
    max_tool_rounds: int = 5
    kb_top_k: int = 10
    kb_documents_dir: str = "knowledge_base"
    log_level: str = "INFO"
    allowed_origins: list[str] = None

    def __post_init__(self):
        if self.allowed_origins is None:
            self.allowed_origins = []

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv(override=True)

        llm_provider = os.getenv("LLM_PROVIDER", "openai")
        llm_key = os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
        if not llm_key:
            raise RuntimeError(
                "LLM credentials not configured. "
                "Set LLM_API_KEY (or OPENAI_API_KEY for the OpenAI provider)."
            )

        # Parse allowed origins
        origins_str = os.getenv("ALLOWED_ORIGINS", "")
        allowed_origins = [o.strip() for o in origins_str.split(",") if o.strip()]

        temperature = os.getenv("LLM_TEMPERATURE", "0.0001")

        return cls(
            llm_provider=llm_provider,
            llm_api_key=llm_key,
            llm_base_url=os.getenv("LLM_BASE_URL") or os.getenv("OPENAI_BASE_URL") or DEFAULT_BASE_URL,
            llm_model=os.getenv("LLM_MODEL") or os.getenv("OPENAI_MODEL", "gpt-4o"),
            persona_name=os.getenv("PERSONA_NAME", "Tom Spirer"),
            llm_temperature=float(temperature) if temperature else None,
            llm_read_timeout=float(os.getenv("LLM_READ_TIMEOUT", "60")),
            max_tool_rounds=int(os.getenv("LLM_MAX_TOOL_ROUNDS", "5")),
            kb_top_k=int(os.getenv("KB_TOP_K", "10")),
            kb_documents_dir=os.getenv("KB_DOCUMENTS_DIR", "knowledge_base"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            allowed_origins=allowed_origins
        )
