"""
Document chunker for SiteBot.
"""

import json
import re
from pathlib import Path
from typing import Dict, List, Optional

from ..config.settings import Config
from ..errors import PayloadError
from ..scraper.models import PageRecord
from ..utils.logging import get_logger
from .models import ContentChunk


# A sentence is a run of text up to and including terminal punctuation,
# or whatever trails after the last punctuation mark.
SENTENCE_PATTERN = re.compile(r'[^.!?]+[.!?]+|[^.!?]+$')


def split_sentences(text: str) -> List[str]:
    """Split text into sentence-like units, keeping terminal punctuation."""
    if not text:
        return []
    return [s.strip() for s in SENTENCE_PATTERN.findall(text) if s.strip()]


def split_text(text: str, max_length: int = 1000, min_length: int = 50) -> List[str]:
    """Greedily pack sentences into chunks of at most ``max_length`` characters.

    A single sentence longer than ``max_length`` becomes a chunk of its own
    rather than being cut. Chunks shorter than ``min_length`` are dropped.
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    chunks = []
    buffer = ""

    for sentence in split_sentences(text):
        if buffer and len(buffer) + 1 + len(sentence) > max_length:
            chunks.append(buffer)
            buffer = sentence
        elif buffer:
            buffer = f"{buffer} {sentence}"
        else:
            buffer = sentence

    if buffer:
        chunks.append(buffer)

    return [chunk for chunk in chunks if len(chunk) >= min_length]


class DocumentChunker:
    """Turns crawled pages into embeddable content chunks."""

    def __init__(self, config: Config):
        """Initialize document chunker with configuration."""
        self.config = config
        self.logger = get_logger(__name__)
        self.chunks: List[ContentChunk] = []
        self.page_count = 0

    def chunk_page(self, page: PageRecord) -> List[ContentChunk]:
        """Split one page into zero or more chunks."""
        texts = split_text(
            page.content,
            max_length=self.config.chunk_max_length,
            min_length=self.config.chunk_min_length,
        )
        return [ContentChunk(source_url=page.url, title=page.title, text=text) for text in texts]

    def chunk_pages(self, pages: List[PageRecord]) -> List[ContentChunk]:
        """Chunk every page, preserving crawl order."""
        self.chunks = []
        self.page_count = len(pages)

        for page in pages:
            page_chunks = self.chunk_page(page)
            if not page_chunks:
                self.logger.debug(f"No chunks produced for {page.url}")
            self.chunks.extend(page_chunks)

        self.logger.info(f"Created {len(self.chunks)} chunks from {len(pages)} pages")
        return self.chunks

    def save_chunks(self, output_file: Optional[str] = None) -> None:
        """Save chunks to JSON file."""
        if output_file is None:
            output_file = self.config.chunks_file
        else:
            output_file = Path(output_file)

        output_file.parent.mkdir(parents=True, exist_ok=True)

        chunks_data = [
            {'url': chunk.source_url, 'title': chunk.title, 'text': chunk.text}
            for chunk in self.chunks
        ]

        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(chunks_data, f, indent=2, ensure_ascii=False)

        self.logger.info(f"Saved {len(chunks_data)} chunks to {output_file}")

    def load_chunks(self, input_file: Optional[str] = None) -> List[ContentChunk]:
        """Load chunks from JSON file."""
        if input_file is None:
            input_file = self.config.chunks_file
        else:
            input_file = Path(input_file)

        if not input_file.exists():
            raise FileNotFoundError(f"Chunks file not found: {input_file}")

        with open(input_file, 'r', encoding='utf-8') as f:
            chunks_data = json.load(f)

        if not isinstance(chunks_data, list):
            raise PayloadError(f"Expected a list of chunks in {input_file}")

        self.chunks = []
        for i, chunk_data in enumerate(chunks_data):
            if not isinstance(chunk_data, dict) or not all(
                    isinstance(chunk_data.get(key), str) for key in ('url', 'title', 'text')):
                raise PayloadError(f"Chunk #{i} in {input_file} is malformed")
            self.chunks.append(ContentChunk(
                source_url=chunk_data['url'],
                title=chunk_data['title'],
                text=chunk_data['text'],
            ))

        self.logger.info(f"Loaded {len(self.chunks)} chunks from {input_file}")
        return self.chunks

    def get_stats(self) -> Dict[str, int]:
        """Get chunking statistics."""
        lengths = [len(c.text) for c in self.chunks]
        return {
            'pages': self.page_count,
            'total': len(self.chunks),
            'sources': len({c.source_url for c in self.chunks}),
            'avg_length': round(sum(lengths) / len(lengths)) if lengths else 0,
            'max_length': max(lengths, default=0),
        }

    def print_stats(self) -> None:
        """Print chunking statistics."""
        stats = self.get_stats()

        self.logger.info("Chunking Statistics:")
        self.logger.info(f"  Pages:          {stats['pages']}")
        self.logger.info(f"  Source URLs:    {stats['sources']}")
        self.logger.info(f"  Total chunks:   {stats['total']}")
        self.logger.info(f"  Average length: {stats['avg_length']}")
        self.logger.info(f"  Longest chunk:  {stats['max_length']}")
