"""
Data models for chunking module.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ContentChunk:
    """A bounded span of page text, ready to be embedded."""
    source_url: str
    title: str
    text: str


@dataclass(frozen=True, eq=False)
class EmbeddedChunk(ContentChunk):
    """A content chunk together with its float32 embedding vector."""
    embedding: np.ndarray

    @property
    def dimension(self) -> int:
        return int(self.embedding.shape[0])
