"""Services layer for the portfolio agent."""

from .knowledge_base import TfidfKnowledgeBase

__all__ = ["TfidfKnowledgeBase"]
