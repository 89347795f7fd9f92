"""
Offline indexing: embeds content chunks and writes the embeddings snapshot.
"""

import numpy as np
from pathlib import Path
from typing import List, Optional
from tqdm import tqdm

from ..chunking.models import ContentChunk, EmbeddedChunk
from ..config.settings import Config
from ..errors import EmbeddingError
from ..storage.snapshot import write_snapshot
from ..utils.helpers import chunk_list
from ..utils.logging import get_logger
from .models import EmbeddingModel


class DocumentEmbedder:
    """Creates embeddings for content chunks and saves the snapshot."""

    def __init__(self, config: Config, model: Optional[EmbeddingModel] = None):
        """Initialize document embedder with configuration."""
        self.config = config
        self.logger = get_logger(__name__)
        self._model = model
        self.embedded: List[EmbeddedChunk] = []
        self.failed_batches = 0

    @property
    def model(self) -> EmbeddingModel:
        """Embedding model, loaded on first use."""
        if self._model is None:
            self._model = EmbeddingModel(self.config.embedding_model, device=self.config.device)
        return self._model

    def embed_chunks(self, chunks: List[ContentChunk],
                     batch_size: Optional[int] = None) -> List[EmbeddedChunk]:
        """Embed chunks batch by batch; a failed batch is logged and skipped."""
        if batch_size is None:
            batch_size = self.config.embedding_batch_size

        self.embedded = []
        self.failed_batches = 0
        batches = chunk_list(chunks, batch_size)

        self.logger.info(f"Creating embeddings for {len(chunks)} chunks in {len(batches)} batches...")

        for batch in tqdm(batches, desc="Embedding batches"):
            texts = [chunk.text.replace('\n', ' ') for chunk in batch]
            try:
                vectors = self.model.embed_batch(texts)
            except EmbeddingError as e:
                self.failed_batches += 1
                self.logger.error(f"Error generating embeddings for batch: {e}")
                continue

            if len(vectors) != len(batch):
                self.failed_batches += 1
                self.logger.error(f"Embedding batch returned {len(vectors)} vectors for {len(batch)} chunks")
                continue

            for chunk, vector in zip(batch, vectors):
                self.embedded.append(EmbeddedChunk(
                    source_url=chunk.source_url,
                    title=chunk.title,
                    text=chunk.text,
                    embedding=np.asarray(vector, dtype=np.float32),
                ))

        self.logger.info(f"Generated {len(self.embedded)} embeddings "
                         f"({self.failed_batches} failed batches)")
        return self.embedded

    def save_snapshot(self, output_file: Optional[str] = None) -> Path:
        """Write the embedded chunks to the snapshot file."""
        if output_file is None:
            output_file = self.config.snapshot_file
        return write_snapshot(self.embedded, output_file)
