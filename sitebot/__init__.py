"""
SiteBot - a support chatbot answering questions from a single website.

Crawls the site, chunks and embeds its text, and answers customer messages
with retrieval-augmented generation over the resulting snapshot.
"""

__version__ = "0.1.0"
__author__ = "Topher Ludlow"
__email__ = "topherludlow@protonmail.com"

import threading

from .config.settings import Config
from .scraper.site_crawler import SiteCrawler
from .chunking.chunker import DocumentChunker
from .embedding.embedder import DocumentEmbedder
from .retrieval.store import EmbeddingStore
from .retrieval.retriever import ContextRetriever
from .retrieval.responder import SupportResponder


class SiteBot:
    """Main SiteBot interface wiring crawl, indexing and answering together."""

    def __init__(self, data_dir=None, config=None):
        """Initialize SiteBot with optional data directory and config."""
        self.config = config or Config(data_dir=data_dir)
        self.crawler = None
        self.chunker = None
        self.embedder = None
        self.store = None
        self.retriever = None
        self.generator = None
        self.responder = None
        self.messenger = None
        # Webhook threads may ask for components concurrently
        self._lock = threading.RLock()

    def get_crawler(self):
        """Get or create crawler instance."""
        if self.crawler is None:
            self.crawler = SiteCrawler(self.config)
        return self.crawler

    def get_chunker(self):
        """Get or create chunker instance."""
        if self.chunker is None:
            self.chunker = DocumentChunker(self.config)
        return self.chunker

    def get_embedder(self):
        """Get or create embedder instance."""
        with self._lock:
            if self.embedder is None:
                self.embedder = DocumentEmbedder(self.config)
            return self.embedder

    def get_store(self):
        """Get or create the embedding store (loaded lazily on first search)."""
        with self._lock:
            if self.store is None:
                self.store = EmbeddingStore(self.config.snapshot_file)
            return self.store

    def get_retriever(self):
        """Get or create retriever instance."""
        with self._lock:
            if self.retriever is None:
                embedder = self.get_embedder()
                self.retriever = ContextRetriever(
                    self.get_store(),
                    embed_fn=lambda text: embedder.model.embed(text),
                    top_k=self.config.default_top_k,
                )
            return self.retriever

    def get_generator(self):
        """Get or create the answer generator."""
        with self._lock:
            if self.generator is None:
                from .retrieval.generator import ResponseGenerator
                self.generator = ResponseGenerator(self.config)
            return self.generator

    def get_responder(self):
        """Get or create responder instance."""
        with self._lock:
            if self.responder is None:
                generator = self.get_generator()
                # Load models and snapshot now so they don't count against the answer deadline
                self.get_embedder().model
                self.get_store().load()
                self.responder = SupportResponder(
                    self.get_retriever(), complete_fn=generator.complete, config=self.config)
            return self.responder

    def get_messenger(self):
        """Get or create the outbound messaging client."""
        with self._lock:
            if self.messenger is None:
                from .messaging.instagram_client import InstagramClient
                self.messenger = InstagramClient(self.config)
            return self.messenger

    def crawl(self, start_url=None, **options):
        """Crawl the configured website."""
        return self.get_crawler().crawl(start_url, **options)

    def build_index(self, pages, output_file=None):
        """Chunk and embed crawled pages, then write the snapshot."""
        chunker = self.get_chunker()
        embedder = self.get_embedder()

        chunks = chunker.chunk_pages(pages)
        embedder.embed_chunks(chunks)
        embedder.save_snapshot(output_file)

        return len(embedder.embedded)

    def retrieve(self, query):
        """Return the context text for a query."""
        return self.get_retriever().retrieve(query)

    def ask(self, query):
        """Answer a customer question."""
        return self.get_responder().respond(query)


__all__ = [
    "SiteBot",
    "Config",
    "SiteCrawler",
    "DocumentChunker",
    "DocumentEmbedder",
    "EmbeddingStore",
    "ContextRetriever",
    "SupportResponder",
    "__version__",
    "__author__",
    "__email__",
]
