"""
Local TF-IDF knowledge base.

This service handles:
- Splitting text documents into paragraph chunks
- TF-IDF vectorization of the chunks
- Cosine similarity ranking of chunks against a query

Design notes:
- Uses scikit-learn's TfidfVectorizer, fitted once on the whole corpus
- Chunk ids are "<document name>#<chunk index>"
- Intended for development and tests; production deployments plug a vector
  database behind the same KnowledgeBase interface
"""

import logging
from pathlib import Path

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from core.knowledge_base import KnowledgeBase, KnowledgeBaseResult


logger = logging.getLogger(__name__)


DOCUMENT_SUFFIXES = {".md", ".txt", ".yaml", ".yml"}


def split_into_chunks(text: str) -> list[str]:
    """Split a document on blank lines, dropping empty paragraphs."""
    return [chunk.strip() for chunk in text.split("\n\n") if chunk.strip()]


class TfidfKnowledgeBase(KnowledgeBase):
    """
    In-memory knowledge base ranked by TF-IDF cosine similarity.

    Why TF-IDF?
    - No embedding provider needed to run the agent locally
    - Good enough for short factual chunks like profile sections
    """

    def __init__(self, documents: dict[str, str], min_score: float = 0.0):
        """
        Args:
            documents: Mapping of document name to full text
            min_score: Results scoring at or below this are dropped
        """
        self.min_score = min_score
        self.chunk_ids: list[str] = []
        self.chunks: list[str] = []

        for name, text in documents.items():
            for index, chunk in enumerate(split_into_chunks(text)):
                self.chunk_ids.append(f"{name}#{index}")
                self.chunks.append(chunk)

        self.vectorizer = TfidfVectorizer(
            lowercase=True,
            stop_words='english',
            ngram_range=(1, 2),  # Unigrams and bigrams
            max_features=5000
        )
        self._matrix = None
        if self.chunks:
            try:
                self._matrix = self.vectorizer.fit_transform(self.chunks)
            except ValueError:
                # Corpus made only of stop words
                logger.warning("Knowledge base corpus has no indexable terms")

    @classmethod
    def from_directory(cls, directory: str | Path) -> "TfidfKnowledgeBase":
        path = Path(directory)
        documents: dict[str, str] = {}

        if path.is_dir():
            for file in sorted(path.iterdir()):
                if file.is_file() and file.suffix.lower() in DOCUMENT_SUFFIXES:
                    documents[file.stem] = file.read_text(encoding="utf-8")
        else:
            logger.warning(f"Knowledge base directory not found: {path}")

        logger.info(f"Loaded {len(documents)} knowledge base document(s) from {path}")
        return cls(documents)

    def rank(self, text: str) -> np.ndarray:
        """Cosine similarity of the query against every chunk."""
        if self._matrix is None:
            return np.zeros(len(self.chunks))
        query_vector = self.vectorizer.transform([text])
        return cosine_similarity(query_vector, self._matrix)[0]

    async def query(self, text: str, top_k: int) -> list[KnowledgeBaseResult]:
        if top_k <= 0 or not self.chunks:
            return []

        scores = self.rank(text)
        best = np.argsort(scores)[::-1][:top_k]

        return [
            KnowledgeBaseResult(id=self.chunk_ids[i], content=self.chunks[i], score=float(scores[i]))
            for i in best
            if scores[i] > self.min_score
        ]
