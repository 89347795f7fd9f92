"""
Document chunking module for SiteBot.
"""

from .models import ContentChunk, EmbeddedChunk
from .chunker import DocumentChunker, split_text, split_sentences

__all__ = [
    "ContentChunk",
    "EmbeddedChunk",
    "DocumentChunker",
    "split_text",
    "split_sentences",
]
