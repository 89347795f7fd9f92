"""
Embedding module for SiteBot.
"""

from .embedder import DocumentEmbedder
from .models import EmbeddingModel

__all__ = ["DocumentEmbedder", "EmbeddingModel"]
