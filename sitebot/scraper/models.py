"""
Data models for the scraper module.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class PageRecord:
    """A crawled page, one per unique normalized URL in a crawl run."""
    url: str
    title: str
    content: str
    depth: int


@dataclass
class ExtractedContent:
    """Text and outbound links pulled from a single HTML document."""
    title: str
    content: str
    links: List[str] = field(default_factory=list)
