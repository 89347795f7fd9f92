"""
Context retriever: ranks stored chunks for a query and joins their text.
"""

from typing import Callable, List, Optional, Sequence

from ..errors import EmbeddingError
from ..utils.logging import get_logger
from .store import EmbeddingStore, RetrievalResult

EmbedFn = Callable[[str], Sequence[float]]

CONTEXT_SEPARATOR = "\n\n"


class ContextRetriever:
    """Embeds a query, searches the store and builds the context text.

    This is a pure retrieval boundary; no generation happens here.
    """

    def __init__(self, store: EmbeddingStore, embed_fn: EmbedFn, top_k: int = 5):
        """Initialize retriever with a store and a query embedding function."""
        self.store = store
        self.embed_fn = embed_fn
        self.top_k = top_k
        self.logger = get_logger(__name__)

    def embed_query(self, query: str) -> Sequence[float]:
        """Embed the query text; any failure surfaces as EmbeddingError."""
        try:
            return self.embed_fn(query)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Query embedding failed: {e}") from e

    def search(self, query: str, top_k: Optional[int] = None) -> List[RetrievalResult]:
        """Rank stored chunks against the query, best first."""
        if top_k is None:
            top_k = self.top_k

        if self.store.is_empty():
            self.logger.warning("Embedding store is empty; continuing without context")
            return []

        query_vector = self.embed_query(query)
        try:
            results = self.store.search(query_vector, k=top_k)
        except ValueError as e:
            raise EmbeddingError(str(e)) from e

        if results:
            self.logger.info(f"Found {len(results)} context chunks. "
                             f"Top similarity: {results[0].score:.4f}")
        return results

    def retrieve(self, query: str) -> str:
        """Return the context text for a query, or "" when nothing is stored."""
        results = self.search(query)
        return CONTEXT_SEPARATOR.join(result.chunk.text for result in results)
