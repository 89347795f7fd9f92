"""
Embeddings snapshot file: the persisted form of the embedding store.

The snapshot is a single JSON array of ``{url, title, text, embedding}``
records. It is written by the offline indexing step and read by the runtime
retriever, so the record schema must stay stable.
"""

import json
from numbers import Real
from pathlib import Path
from typing import Any, Iterable, List, Union

import numpy as np

from ..chunking.models import EmbeddedChunk
from ..errors import SnapshotError
from ..utils.logging import get_logger

logger = get_logger(__name__)

SNAPSHOT_FIELDS = ('url', 'title', 'text', 'embedding')


def chunk_to_record(chunk: EmbeddedChunk) -> dict:
    """Convert an embedded chunk into its snapshot record."""
    return {
        'url': chunk.source_url,
        'title': chunk.title,
        'text': chunk.text,
        'embedding': [float(x) for x in chunk.embedding],
    }


def record_to_chunk(record: Any, index: int = 0) -> EmbeddedChunk:
    """Validate a snapshot record and build an embedded chunk from it."""
    if not isinstance(record, dict):
        raise SnapshotError(f"Record #{index} is not an object")

    missing = [key for key in SNAPSHOT_FIELDS if key not in record]
    if missing:
        raise SnapshotError(f"Record #{index} is missing fields: {', '.join(missing)}")

    for key in ('url', 'title', 'text'):
        if not isinstance(record[key], str):
            raise SnapshotError(f"Record #{index} field '{key}' must be a string")

    embedding = record['embedding']
    if (not isinstance(embedding, list) or not embedding
            or not all(isinstance(x, Real) and not isinstance(x, bool) for x in embedding)):
        raise SnapshotError(f"Record #{index} has an invalid embedding")

    return EmbeddedChunk(
        source_url=record['url'],
        title=record['title'],
        text=record['text'],
        embedding=np.asarray(embedding, dtype=np.float32),
    )


def write_snapshot(chunks: Iterable[EmbeddedChunk], output_file: Union[str, Path]) -> Path:
    """Write embedded chunks to a snapshot file (minified JSON)."""
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    records = [chunk_to_record(chunk) for chunk in chunks]
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(records, f, ensure_ascii=False, separators=(',', ':'))

    logger.info(f"Saved {len(records)} embeddings to {output_file}")
    return output_file


def read_snapshot(input_file: Union[str, Path]) -> List[EmbeddedChunk]:
    """Read and validate a snapshot file.

    Raises SnapshotError if the file is missing, is not valid JSON, holds a
    malformed record, or mixes embedding dimensions.
    """
    input_file = Path(input_file)
    if not input_file.exists():
        raise SnapshotError(f"Snapshot file not found: {input_file}")

    try:
        with open(input_file, 'r', encoding='utf-8') as f:
            records = json.load(f)
    except (OSError, ValueError) as e:
        raise SnapshotError(f"Could not read snapshot {input_file}: {e}") from e

    if not isinstance(records, list):
        raise SnapshotError(f"Snapshot {input_file} must contain a list of records")

    chunks = [record_to_chunk(record, i) for i, record in enumerate(records)]

    dimensions = {chunk.dimension for chunk in chunks}
    if len(dimensions) > 1:
        raise SnapshotError(f"Snapshot {input_file} mixes embedding dimensions: {sorted(dimensions)}")

    return chunks
