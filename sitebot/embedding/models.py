"""
Embedding model management for SiteBot.
"""

from sentence_transformers import SentenceTransformer
import torch
from typing import List, Union
import numpy as np

from ..errors import EmbeddingError
from ..utils.logging import get_logger


class EmbeddingModel:
    """Wrapper for sentence transformer models."""

    def __init__(self, model_name: str = 'sentence-transformers/all-MiniLM-L6-v2', device: str = 'cpu'):
        """Initialize embedding model."""
        self.model_name = model_name
        self.device = device
        self.logger = get_logger(__name__)

        self.logger.info(f"Loading embedding model: {model_name}")
        self.logger.info(f"Device: {device}")

        self.model = SentenceTransformer(model_name, device=device)

        self.dimension = self.model.get_sentence_embedding_dimension()
        self.max_seq_length = self.model.max_seq_length

        self.logger.info(f"Embedding dimension: {self.dimension}")
        self.logger.info(f"Max sequence length: {self.max_seq_length}")

    @property
    def uses_prefixes(self) -> bool:
        """E5 models expect "query: " / "passage: " prefixes."""
        return self.model_name.startswith('intfloat/e5')

    def encode(self, texts: Union[str, List[str]], batch_size: int = 32,
               show_progress_bar: bool = False) -> np.ndarray:
        """Encode texts into a 2-D float32 array of embeddings."""
        if isinstance(texts, str):
            texts = [texts]

        embeddings = self.model.encode(
            texts,
            batch_size=batch_size,
            show_progress_bar=show_progress_bar,
            convert_to_numpy=True
        )

        return np.asarray(embeddings, dtype=np.float32)

    def embed(self, text: str) -> np.ndarray:
        """Embed a single query string into one vector."""
        query_text = f"query: {text}" if self.uses_prefixes else text
        try:
            return self.encode([query_text])[0]
        except Exception as e:
            raise EmbeddingError(f"Embedding failed: {e}") from e

    def embed_batch(self, texts: List[str]) -> np.ndarray:
        """Embed a batch of passages, one row per input text."""
        if self.uses_prefixes:
            texts = [f"passage: {text}" for text in texts]
        try:
            return self.encode(texts, batch_size=len(texts) or 1)
        except Exception as e:
            raise EmbeddingError(f"Batch embedding failed: {e}") from e

    def get_info(self) -> dict:
        """Get model information."""
        return {
            'model_name': self.model_name,
            'device': self.device,
            'dimension': self.dimension,
            'max_seq_length': self.max_seq_length,
            'is_cuda_available': torch.cuda.is_available(),
        }
