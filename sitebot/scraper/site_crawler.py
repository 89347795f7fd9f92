"""
Breadth-first site crawler for SiteBot.
"""

import json
import requests
from collections import deque
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, Set, Tuple

from ..config.settings import Config
from ..errors import FetchError, FetchTimeout, PayloadError, ResponseTimeout
from ..utils.helpers import run_with_timeout
from ..utils.logging import get_logger
from .content_parser import ContentParser
from .models import PageRecord
from .url_utils import get_host, is_same_host, normalize_url


class PageFetcher:
    """Fetches raw HTML over HTTP with a bounded timeout."""

    def __init__(self, config: Config):
        """Initialize fetcher with configuration."""
        self.config = config
        self.logger = get_logger(__name__)
        self.headers = {
            'User-Agent': config.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        }
        self.insecure_hosts = {host.lower() for host in config.insecure_hosts}

    def verify_tls(self, url: str) -> bool:
        """Certificate checks are only skipped for explicitly listed hosts."""
        return get_host(url) not in self.insecure_hosts

    def _download(self, url: str, verify: bool, opened: List[requests.Response]) -> requests.Response:
        response = requests.get(
            url,
            headers=self.headers,
            timeout=self.config.request_timeout,
            verify=verify,
            stream=True,
        )
        opened.append(response)
        # Read the body inside the worker so the deadline covers it too
        response.content
        return response

    def fetch(self, url: str) -> str:
        """GET a page and return its body, raising FetchError on any failure.

        ``Config.request_timeout`` bounds the whole download, headers and body
        together. When it passes, the connection is closed and FetchTimeout
        is raised.
        """
        verify = self.verify_tls(url)
        if not verify:
            self.logger.debug(f"TLS verification disabled for {url}")

        timeout = self.config.request_timeout
        opened: List[requests.Response] = []
        try:
            response = run_with_timeout(self._download, timeout, url, verify, opened)
        except ResponseTimeout as e:
            for pending in opened:
                pending.close()
            raise FetchTimeout(url, f"Timed out after {timeout:g}s") from e
        except requests.Timeout as e:
            raise FetchTimeout(url, f"Timed out after {timeout:g}s") from e
        except requests.RequestException as e:
            raise FetchError(url, f"Network error: {e}") from e

        if not 200 <= response.status_code < 300:
            raise FetchError(url, f"HTTP {response.status_code}", status_code=response.status_code)

        return response.text


class CrawlRun:
    """State of a single crawl: work queue, visited set and collected pages.

    One instance per crawl; nothing here is shared between runs.
    """

    def __init__(self, start_url: str, max_depth: int, max_pages: int, same_domain_only: bool):
        self.start_url = normalize_url(start_url)
        self.start_host = get_host(self.start_url)
        if not self.start_host:
            raise ValueError(f"Invalid start URL: {start_url}")

        self.max_depth = max_depth
        self.max_pages = max_pages
        self.same_domain_only = same_domain_only

        self.queue: Deque[Tuple[str, int]] = deque([(self.start_url, 0)])
        self.visited: Set[str] = set()
        self.pages: List[PageRecord] = []
        self.error_count = 0

    def has_work(self) -> bool:
        return bool(self.queue) and len(self.pages) < self.max_pages

    def next_url(self) -> Optional[Tuple[str, int]]:
        """Dequeue the next URL to fetch, marking it visited; None if it is skipped."""
        url, depth = self.queue.popleft()
        if url in self.visited or depth > self.max_depth:
            return None

        self.visited.add(url)
        return url, depth

    def enqueue_links(self, links: List[str], depth: int) -> int:
        """Queue discovered links one level deeper; returns how many were queued."""
        queued = 0
        for link in links:
            normalized = normalize_url(link)
            if normalized in self.visited:
                continue
            if self.same_domain_only and not is_same_host(normalized, self.start_host):
                continue
            self.queue.append((normalized, depth + 1))
            queued += 1
        return queued


class SiteCrawler:
    """Crawls a single website breadth-first and collects page text."""

    def __init__(self, config: Config, fetcher: Optional[PageFetcher] = None,
                 parser: Optional[ContentParser] = None):
        """Initialize site crawler with configuration."""
        self.config = config
        self.logger = get_logger(__name__)
        self.fetcher = fetcher or PageFetcher(config)
        self.parser = parser or ContentParser()

    def crawl(self, start_url: Optional[str] = None, max_depth: Optional[int] = None,
              max_pages: Optional[int] = None,
              same_domain_only: Optional[bool] = None) -> List[PageRecord]:
        """Crawl from ``start_url`` and return pages in visit order."""
        run = CrawlRun(
            start_url or self.config.start_url,
            max_depth=self.config.crawl_max_depth if max_depth is None else max_depth,
            max_pages=self.config.crawl_max_pages if max_pages is None else max_pages,
            same_domain_only=(self.config.crawl_same_domain_only
                              if same_domain_only is None else same_domain_only),
        )

        self.logger.info(f"Starting crawl of {run.start_url} "
                         f"(max_depth={run.max_depth}, max_pages={run.max_pages}, "
                         f"same_domain_only={run.same_domain_only})")

        while run.has_work():
            entry = run.next_url()
            if entry is None:
                continue
            url, depth = entry

            self.logger.info(f"Crawling: {url} (depth: {depth})")
            try:
                html = self.fetcher.fetch(url)
            except FetchError as e:
                run.error_count += 1
                self.logger.warning(f"Error crawling {url}: {e}")
                continue

            extracted = self.parser.extract(html, url)
            run.pages.append(PageRecord(
                url=url,
                title=extracted.title,
                content=extracted.content,
                depth=depth,
            ))

            if depth < run.max_depth:
                queued = run.enqueue_links(extracted.links, depth)
                self.logger.debug(f"Queued {queued} of {len(extracted.links)} links from {url}")

        if run.queue:
            self.logger.info(f"Page limit reached, {len(run.queue)} queued URLs left unvisited")

        self.logger.info(f"Crawled {len(run.pages)} pages ({run.error_count} errors)")
        return run.pages


def save_pages(pages: List[PageRecord], output_file: Path) -> None:
    """Save crawled pages to a JSON file."""
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump([
            {'url': p.url, 'title': p.title, 'content': p.content, 'depth': p.depth}
            for p in pages
        ], f, indent=2, ensure_ascii=False)


def load_pages(input_file: Path) -> List[PageRecord]:
    """Load crawled pages from a JSON file, validating every record."""
    with open(input_file, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise PayloadError(f"Expected a list of pages in {input_file}")

    pages = []
    for i, item in enumerate(data):
        pages.append(_page_from_dict(item, i))
    return pages


def _page_from_dict(item: Any, index: int) -> PageRecord:
    if not isinstance(item, dict):
        raise PayloadError(f"Page #{index} is not an object")

    for key in ('url', 'title', 'content'):
        if not isinstance(item.get(key), str):
            raise PayloadError(f"Page #{index} is missing string field '{key}'")

    depth = item.get('depth')
    if not isinstance(depth, int) or isinstance(depth, bool) or depth < 0:
        raise PayloadError(f"Page #{index} has an invalid depth: {depth!r}")

    return PageRecord(url=item['url'], title=item['title'], content=item['content'], depth=depth)


def batch_pages_to_markdown(pages: List[PageRecord], batch_size: int = 50) -> List[str]:
    """Render pages as Markdown documents holding ``batch_size`` pages each."""
    batches = []
    for i in range(0, len(pages), batch_size):
        batch = pages[i:i + batch_size]
        batches.append("\n".join(
            f"# {page.title}\n\nURL: {page.url}\n\n{page.content}\n\n---\n"
            for page in batch
        ))
    return batches


def crawl_stats(pages: List[PageRecord], thin_threshold: int = 200) -> Dict[str, Any]:
    """Summarize a crawl: pages per depth, content volume and thin pages."""
    by_depth: Dict[int, int] = {}
    for page in pages:
        by_depth[page.depth] = by_depth.get(page.depth, 0) + 1

    total_content = sum(len(p.content) for p in pages)
    return {
        'total_pages': len(pages),
        'pages_by_depth': dict(sorted(by_depth.items())),
        'max_depth': max((p.depth for p in pages), default=0),
        'total_content_chars': total_content,
        'average_content_chars': round(total_content / len(pages)) if pages else 0,
        'thin_pages': [p.url for p in pages if len(p.content) < thin_threshold],
    }
