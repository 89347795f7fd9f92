"""
In-memory embedding store with exact cosine-similarity search.
"""

import threading
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..chunking.models import EmbeddedChunk
from ..errors import SnapshotError
from ..storage.snapshot import read_snapshot
from ..utils.logging import get_logger


@dataclass(frozen=True)
class RetrievalResult:
    """A ranked search hit."""
    chunk: EmbeddedChunk
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 if either has zero magnitude."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Vector dimensions differ: {a.shape} vs {b.shape}")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


class EmbeddingStore:
    """Read-only set of embedded chunks searched by full linear scan.

    The snapshot is read lazily, at most once per store instance. A store
    built from ``chunks`` is loaded from the start and never touches disk.
    """

    def __init__(self, snapshot_file: Optional[Union[str, Path]] = None,
                 chunks: Optional[List[EmbeddedChunk]] = None):
        """Initialize store from a snapshot path or pre-built chunks."""
        self.snapshot_file = Path(snapshot_file) if snapshot_file else None
        self.logger = get_logger(__name__)
        self._lock = threading.Lock()
        self._chunks: List[EmbeddedChunk] = []
        self._matrix: Optional[np.ndarray] = None
        self._norms: Optional[np.ndarray] = None
        self.loaded = False

        if chunks is not None:
            self._set_chunks(list(chunks))
            self.loaded = True

    def _set_chunks(self, chunks: List[EmbeddedChunk]) -> None:
        dimensions = {chunk.dimension for chunk in chunks}
        if len(dimensions) > 1:
            raise SnapshotError(f"Embedding dimensions differ: {sorted(dimensions)}")

        self._chunks = chunks
        if chunks:
            self._matrix = np.vstack([chunk.embedding for chunk in chunks]).astype(np.float64)
            self._norms = np.linalg.norm(self._matrix, axis=1)
        else:
            self._matrix = None
            self._norms = None

    def load(self) -> List[EmbeddedChunk]:
        """Load the snapshot on first call; later calls return the same chunks.

        A snapshot that cannot be read leaves the store empty instead of
        raising, so retrieval degrades to no context.
        """
        if self.loaded:
            return self._chunks

        with self._lock:
            if self.loaded:
                return self._chunks

            if self.snapshot_file is None:
                self.logger.warning("No snapshot file configured; embedding store is empty")
            else:
                self.logger.info(f"Loading embeddings from {self.snapshot_file}...")
                try:
                    self._set_chunks(read_snapshot(self.snapshot_file))
                    self.logger.info(f"Loaded {len(self._chunks)} embeddings "
                                     f"(dimension {self.dimension})")
                except SnapshotError as e:
                    self.logger.error(f"Failed to load embeddings: {e}")
                    self._set_chunks([])

            self.loaded = True
            return self._chunks

    @property
    def chunks(self) -> List[EmbeddedChunk]:
        return self.load()

    @property
    def dimension(self) -> Optional[int]:
        """Vector length shared by every stored chunk, or None when empty."""
        if self._matrix is None:
            return None
        return int(self._matrix.shape[1])

    def __len__(self) -> int:
        return len(self.load())

    def is_empty(self) -> bool:
        return len(self) == 0

    def search(self, query_vector: Sequence[float], k: int = 5) -> List[RetrievalResult]:
        """Return the ``k`` most similar chunks, best first.

        Equal scores keep their snapshot order.
        """
        self.load()
        if k <= 0 or self._matrix is None:
            return []

        query = np.asarray(query_vector, dtype=np.float64).reshape(-1)
        if query.shape[0] != self.dimension:
            raise ValueError(f"Query dimension {query.shape[0]} does not match "
                             f"store dimension {self.dimension}")

        query_norm = float(np.linalg.norm(query))
        denominators = self._norms * query_norm
        dots = self._matrix @ query
        scores = np.zeros(len(self._chunks), dtype=np.float64)
        np.divide(dots, denominators, out=scores, where=denominators > 0)

        order = np.argsort(-scores, kind='stable')[:k]
        return [RetrievalResult(chunk=self._chunks[i], score=float(scores[i])) for i in order]

    def get_stats(self) -> dict:
        """Get store statistics."""
        if not self.loaded:
            return {"status": "not_loaded"}

        return {
            "status": "loaded",
            "total_chunks": len(self._chunks),
            "dimension": self.dimension,
            "sources": len({chunk.source_url for chunk in self._chunks}),
            "snapshot_file": str(self.snapshot_file) if self.snapshot_file else None,
        }
