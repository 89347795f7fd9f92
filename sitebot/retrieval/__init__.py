"""
Retrieval module for SiteBot.
"""

from .store import EmbeddingStore, RetrievalResult, cosine_similarity
from .retriever import ContextRetriever
from .responder import SupportResponder

__all__ = [
    "EmbeddingStore",
    "RetrievalResult",
    "cosine_similarity",
    "ContextRetriever",
    "SupportResponder",
]
