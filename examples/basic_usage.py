#!/usr/bin/env python3
"""
Basic usage example for SiteBot.

Crawls a website, builds the embeddings snapshot and answers a few
questions with the same pipeline the webhook uses.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sitebot import SiteBot
from sitebot.errors import SiteBotError
from sitebot.scraper.site_crawler import crawl_stats, load_pages, save_pages
from sitebot.utils.logging import setup_logging


def main():
    """Demonstrate basic SiteBot usage."""
    setup_logging(log_level="INFO")

    print("SiteBot Basic Usage Example")
    print("=" * 50)

    bot = SiteBot(data_dir="./example_data")
    config = bot.config
    print(f"Start URL: {config.start_url}")
    print(f"Embedding model: {config.embedding_model}")
    print()

    # 1. Crawl (or reuse a previous crawl)
    print("1. Crawling")
    print("-" * 30)
    if config.pages_file.exists():
        pages = load_pages(config.pages_file)
        print(f"Reusing {len(pages)} pages from {config.pages_file}")
    else:
        pages = bot.crawl(max_depth=1, max_pages=20)
        save_pages(pages, config.pages_file)
        print(f"Crawled {len(pages)} pages")

    stats = crawl_stats(pages)
    print(f"Pages by depth: {stats['pages_by_depth']}")
    print()

    # 2. Build the snapshot
    print("2. Building embeddings snapshot")
    print("-" * 30)
    if not config.snapshot_file.exists():
        count = bot.build_index(pages)
        print(f"Embedded {count} chunks")
    else:
        print(f"Snapshot found at {config.snapshot_file}")
    print()

    # 3. Retrieval and answers
    print("3. Questions")
    print("-" * 30)
    queries = [
        "What services do you offer?",
        "How long does delivery take?",
    ]

    for query in queries:
        print(f"\nQuery: '{query}'")
        for rank, result in enumerate(bot.get_retriever().search(query, top_k=3), 1):
            print(f"  {rank}. {result.chunk.title} ({result.score:.3f}) {result.chunk.source_url}")

        try:
            print(f"Answer: {bot.ask(query)}")
        except SiteBotError as e:
            print(f"Could not answer: {e}")


if __name__ == "__main__":
    main()
