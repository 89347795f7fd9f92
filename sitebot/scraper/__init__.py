"""
Site crawling module for SiteBot.
"""

from .models import PageRecord, ExtractedContent
from .url_utils import normalize_url
from .content_parser import ContentParser
from .site_crawler import SiteCrawler, PageFetcher, CrawlRun

__all__ = [
    "PageRecord",
    "ExtractedContent",
    "normalize_url",
    "ContentParser",
    "SiteCrawler",
    "PageFetcher",
    "CrawlRun",
]
