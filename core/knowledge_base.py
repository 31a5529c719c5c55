from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class KnowledgeBaseResult:
    id: str
    content: str
    score: float

    def to_dict(self) -> dict:
        return {"id": self.id, "content": self.content, "score": self.score}


@runtime_checkable
class KnowledgeBase(Protocol):
    """
    Interface for the knowledge-base search capability.

    How documents get into the store (chunking, embedding, upserting) is the
    implementation's concern; the agent only ever queries.
    """

    async def query(self, text: str, top_k: int) -> list[KnowledgeBaseResult]:
        """Return up to top_k results, best match first."""
        ...
