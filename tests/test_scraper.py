"""
Tests for the scraper module.
"""

import json
import logging
import socket
import threading
import time
import pytest
import requests
from unittest.mock import Mock, PropertyMock, patch

from sitebot.config.settings import Config
from sitebot.errors import FetchError, FetchTimeout, PayloadError
from sitebot.scraper.content_parser import ContentParser
from sitebot.scraper.models import PageRecord
from sitebot.scraper.site_crawler import (
    CrawlRun, PageFetcher, SiteCrawler, batch_pages_to_markdown, crawl_stats,
    load_pages, save_pages,
)
from sitebot.scraper.url_utils import get_host, is_same_host, normalize_url
from sitebot.utils.logging import LogCapture


def make_page(body, title="Page"):
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


class FakeFetcher:
    """Serves HTML from a dict and records every fetched URL."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, "HTTP 404", status_code=404)
        return self.pages[url]


class TestNormalizeUrl:
    """Test cases for normalize_url."""

    def test_removes_fragment(self):
        """Test fragment removal."""
        assert normalize_url("https://shop.example/about#team") == "https://shop.example/about"

    def test_fragment_and_plain_urls_match(self):
        """Test that a URL with and without fragment normalize the same."""
        assert normalize_url("https://shop.example/a?x=1#f") == normalize_url("https://shop.example/a?x=1")

    def test_strips_trailing_slash_on_non_root_path(self):
        """Test trailing slash handling."""
        assert normalize_url("https://shop.example/products/") == "https://shop.example/products"
        assert normalize_url("https://shop.example/") == "https://shop.example/"

    def test_empty_path_becomes_root(self):
        """Test that a bare host gets the root path."""
        assert normalize_url("https://shop.example") == "https://shop.example/"

    def test_preserves_query_and_lowercases_host(self):
        """Test that scheme and host are lowercased and the query kept."""
        assert normalize_url("HTTPS://Shop.Example/Path?Q=A") == "https://shop.example/Path?Q=A"

    def test_malformed_input_returned_unchanged(self):
        """Test malformed URLs are passed through."""
        for url in ["not a url", "", "/relative/path", "http://[::1"]:
            assert normalize_url(url) == url

    def test_idempotent(self):
        """Test normalize(normalize(u)) == normalize(u)."""
        urls = [
            "https://shop.example/a//",
            "https://shop.example//",
            "https://Shop.Example/x/?q=1#frag",
            "http://user@Host.example/p/",
            "mailto:someone@example.com",
            "garbage",
            "https://shop.example",
        ]
        for url in urls:
            once = normalize_url(url)
            assert normalize_url(once) == once

    def test_host_helpers(self):
        """Test host extraction and exact host matching."""
        assert get_host("https://Shop.Example/x") == "shop.example"
        assert get_host("nonsense") is None
        assert is_same_host("https://shop.example/a", "shop.example")
        assert not is_same_host("https://blog.shop.example/a", "shop.example")
        assert not is_same_host("not a url", "shop.example")


class TestContentParser:
    """Test cases for ContentParser."""

    def setup_method(self):
        """Setup test fixtures."""
        self.parser = ContentParser()

    def test_clean_text(self):
        """Test whitespace collapsing."""
        assert self.parser.clean_text("Hello    world") == "Hello world"
        assert self.parser.clean_text("  a \n\n\n  b  ") == "a\nb"
        assert self.parser.clean_text("") == ""
        assert self.parser.clean_text(None) == ""

    def test_extract_strips_chrome_and_prefers_main(self):
        """Test boilerplate removal and main content selection."""
        html = """
        <html><head><title>  Shop   Title </title><style>.x{}</style></head>
        <body>
          <header><h1>Header</h1></header>
          <nav>Menu links</nav>
          <div class="sidebar">Sidebar stuff</div>
          <main><h2>Welcome</h2><p>We print   things.</p>

          <p>Call us!</p></main>
          <footer>Footer text</footer>
          <script>var tracking = 1;</script>
        </body></html>
        """
        result = self.parser.extract(html, "https://shop.example/")

        assert result.title == "Shop Title"
        assert "We print things." in result.content
        assert "Call us!" in result.content
        for noise in ["Header", "Menu links", "Sidebar", "Footer", "tracking"]:
            assert noise not in result.content
        assert "  " not in result.content

    def test_title_falls_back_to_heading_then_placeholder(self):
        """Test title resolution order."""
        with_heading = self.parser.extract("<body><h1>Print Studio</h1><p>x</p></body>", "https://a.example/")
        assert with_heading.title == "Print Studio"

        bare = self.parser.extract("<body><p>No title here</p></body>", "https://a.example/")
        assert bare.title == "Untitled"

    def test_falls_back_to_body_text(self):
        """Test body fallback when no main region exists."""
        result = self.parser.extract(make_page("<div><p>Only body text.</p></div>"), "https://a.example/")
        assert result.content == "Only body text."

    def test_links_resolved_and_malformed_skipped(self):
        """Test link resolution against the base URL."""
        html = make_page("""
            <a href="/about">About</a>
            <a href="contact/">Contact</a>
            <a href="https://other.example/x">Other</a>
            <a href="#top">Top</a>
            <a href="mailto:info@shop.example">Mail</a>
            <a href="javascript:void(0)">JS</a>
            <a href="http://[bad">Bad</a>
            <a>No href</a>
        """)
        result = self.parser.extract(html, "https://shop.example/services/print")

        assert result.links == [
            "https://shop.example/about",
            "https://shop.example/services/contact/",
            "https://other.example/x",
            "https://shop.example/services/print#top",
        ]


class TestPageFetcher:
    """Test cases for PageFetcher."""

    @patch('requests.get')
    def test_fetch_success(self, mock_get, tmp_path):
        """Test a successful fetch sends timeout, user agent and TLS checks."""
        config = Config(data_dir=str(tmp_path))
        mock_get.return_value = Mock(status_code=200, text="<html></html>")

        fetcher = PageFetcher(config)
        assert fetcher.fetch("https://shop.example/") == "<html></html>"

        _, kwargs = mock_get.call_args
        assert kwargs['timeout'] == config.request_timeout
        assert kwargs['headers']['User-Agent'] == config.user_agent
        assert kwargs['verify'] is True

    @patch('requests.get')
    def test_tls_relaxed_only_for_listed_hosts(self, mock_get, tmp_path):
        """Test that certificate checks are skipped only for opted-in hosts."""
        config = Config(data_dir=str(tmp_path))
        config.insecure_hosts = ["self-signed.example"]
        mock_get.return_value = Mock(status_code=200, text="ok")

        fetcher = PageFetcher(config)
        fetcher.fetch("https://self-signed.example/page")
        assert mock_get.call_args[1]['verify'] is False

        fetcher.fetch("https://sub.self-signed.example/page")
        assert mock_get.call_args[1]['verify'] is True

    @patch('requests.get')
    def test_non_2xx_raises(self, mock_get, tmp_path):
        """Test that error statuses become FetchError."""
        mock_get.return_value = Mock(status_code=404, text="missing")

        with pytest.raises(FetchError) as exc_info:
            PageFetcher(Config(data_dir=str(tmp_path))).fetch("https://shop.example/missing")
        assert exc_info.value.status_code == 404

    @patch('requests.get')
    def test_timeout_is_distinct(self, mock_get, tmp_path):
        """Test that timeouts raise FetchTimeout."""
        mock_get.side_effect = requests.Timeout("slow")

        with pytest.raises(FetchTimeout):
            PageFetcher(Config(data_dir=str(tmp_path))).fetch("https://shop.example/")

    @patch('requests.get')
    def test_network_error(self, mock_get, tmp_path):
        """Test that transport errors raise FetchError."""
        mock_get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(FetchError):
            PageFetcher(Config(data_dir=str(tmp_path))).fetch("https://shop.example/")

    @patch('requests.get')
    def test_slow_body_is_closed_on_timeout(self, mock_get, tmp_path):
        """Test a body that outlasts the deadline raises FetchTimeout and closes the response."""
        response = Mock(status_code=200)
        type(response).content = PropertyMock(side_effect=lambda: time.sleep(1.0))
        mock_get.return_value = response
        config = Config(data_dir=str(tmp_path))
        config.request_timeout = 0.2

        with pytest.raises(FetchTimeout):
            PageFetcher(config).fetch("https://shop.example/")

        assert mock_get.call_args[1]['stream'] is True
        response.close.assert_called_once()

    def test_trickling_server_hits_deadline(self, tmp_path, monkeypatch):
        """Test a server sending one byte at a time cannot stretch the fetch past the timeout."""
        for name in ('http_proxy', 'HTTP_PROXY', 'all_proxy', 'ALL_PROXY'):
            monkeypatch.delenv(name, raising=False)

        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.bind(('127.0.0.1', 0))
        server.listen(1)
        port = server.getsockname()[1]
        stop = threading.Event()

        def trickle():
            try:
                conn, _ = server.accept()
                with conn:
                    conn.recv(4096)
                    conn.sendall(b"HTTP/1.1 200 OK\r\nContent-Type: text/html\r\nContent-Length: 6\r\n\r\n")
                    for byte in b"<html>":
                        if stop.wait(0.3):
                            break
                        conn.sendall(bytes([byte]))
            except OSError:
                pass

        worker = threading.Thread(target=trickle, daemon=True)
        worker.start()

        config = Config(data_dir=str(tmp_path))
        config.request_timeout = 0.5
        started = time.monotonic()
        try:
            with pytest.raises(FetchTimeout):
                PageFetcher(config).fetch(f"http://127.0.0.1:{port}/")
            assert time.monotonic() - started < 1.5
        finally:
            stop.set()
            server.close()
            worker.join(timeout=2)


class TestSiteCrawler:
    """Test cases for SiteCrawler."""

    def setup_method(self):
        """Setup test fixtures."""
        self.site = {
            "https://shop.example/": make_page(
                '<main><p>Home page.</p></main>'
                '<a href="/about">About</a>'
                '<a href="https://other.example/offsite">Offsite</a>',
                title="Home"),
            "https://shop.example/about": make_page(
                '<main><p>About us.</p></main><a href="/team/">Team</a><a href="/#intro">Home</a>',
                title="About"),
            "https://shop.example/team": make_page('<main><p>Our team.</p></main>', title="Team"),
            "https://other.example/offsite": make_page('<p>Elsewhere.</p>', title="Other"),
        }

    def make_crawler(self, tmp_path, site=None):
        fetcher = FakeFetcher(site or self.site)
        return SiteCrawler(Config(data_dir=str(tmp_path)), fetcher=fetcher), fetcher

    def test_fixture_site_same_domain(self, tmp_path):
        """Test the 3-page fixture: start page plus the on-domain link only."""
        crawler, fetcher = self.make_crawler(tmp_path)

        pages = crawler.crawl("https://shop.example/", max_depth=1, max_pages=10, same_domain_only=True)

        assert [p.url for p in pages] == ["https://shop.example/", "https://shop.example/about"]
        assert [p.depth for p in pages] == [0, 1]
        assert pages[0].title == "Home"
        assert "https://other.example/offsite" not in fetcher.calls

    def test_max_depth_zero_fetches_once(self, tmp_path):
        """Test that max_depth=0 fetches only the start URL."""
        crawler, fetcher = self.make_crawler(tmp_path)

        pages = crawler.crawl("https://shop.example/", max_depth=0, max_pages=10)

        assert len(pages) == 1
        assert fetcher.calls == ["https://shop.example/"]

    def test_depth_never_exceeds_max(self, tmp_path):
        """Test depth bound."""
        crawler, _ = self.make_crawler(tmp_path)

        pages = crawler.crawl("https://shop.example/", max_depth=2, max_pages=10)

        assert max(p.depth for p in pages) <= 2
        assert [p.url for p in pages] == [
            "https://shop.example/", "https://shop.example/about", "https://shop.example/team",
        ]

    def test_no_duplicate_urls(self, tmp_path):
        """Test that fragments and trailing slashes do not create duplicates."""
        site = {
            "https://shop.example/": make_page(
                '<a href="/a">A</a><a href="/a/">A2</a><a href="/a#x">A3</a><a href="/b">B</a>'),
            "https://shop.example/a": make_page('<a href="/">Home</a><a href="/b/">B</a>'),
            "https://shop.example/b": make_page('<a href="/a">A</a><a href="/#top">Home</a>'),
        }
        crawler, fetcher = self.make_crawler(tmp_path, site)

        pages = crawler.crawl("https://shop.example", max_depth=5, max_pages=50)

        urls = [p.url for p in pages]
        assert len(urls) == len(set(urls)) == 3
        assert len(fetcher.calls) == 3

    def test_all_domains_follows_offsite_links(self, tmp_path):
        """Test crawling with same_domain_only disabled."""
        crawler, _ = self.make_crawler(tmp_path)

        pages = crawler.crawl("https://shop.example/", max_depth=1, max_pages=10, same_domain_only=False)

        assert "https://other.example/offsite" in [p.url for p in pages]

    def test_subdomains_are_not_same_domain(self, tmp_path):
        """Test that subdomains are excluded when staying on one host."""
        site = {
            "https://shop.example/": make_page('<a href="https://blog.shop.example/post">Blog</a>'),
            "https://blog.shop.example/post": make_page('<p>Blog post.</p>'),
        }
        crawler, fetcher = self.make_crawler(tmp_path, site)

        pages = crawler.crawl("https://shop.example/", max_depth=3, max_pages=10)

        assert all(get_host(p.url) == "shop.example" for p in pages)
        assert fetcher.calls == ["https://shop.example/"]

    def test_fetch_failure_is_not_fatal(self, tmp_path):
        """Test that a failing page is skipped and the crawl continues."""
        site = {
            "https://shop.example/": make_page('<a href="/broken">Broken</a><a href="/ok">Ok</a>'),
            "https://shop.example/ok": make_page('<p>Fine.</p>'),
        }
        crawler, fetcher = self.make_crawler(tmp_path, site)

        with LogCapture(level=logging.WARNING) as capture:
            pages = crawler.crawl("https://shop.example/", max_depth=1, max_pages=10)

        assert [p.url for p in pages] == ["https://shop.example/", "https://shop.example/ok"]
        assert "https://shop.example/broken" in fetcher.calls
        assert any("Error crawling https://shop.example/broken" in m for m in capture.get_messages())

    def test_max_pages_stops_crawl(self, tmp_path):
        """Test the page budget."""
        links = "".join(f'<a href="/p{i}">P{i}</a>' for i in range(10))
        site = {"https://shop.example/": make_page(links)}
        site.update({f"https://shop.example/p{i}": make_page(f"<p>Page {i}.</p>") for i in range(10)})
        crawler, fetcher = self.make_crawler(tmp_path, site)

        pages = crawler.crawl("https://shop.example/", max_depth=1, max_pages=4)

        assert len(pages) == 4
        assert len(fetcher.calls) == 4

    def test_defaults_come_from_config(self, tmp_path):
        """Test default knobs."""
        config = Config(data_dir=str(tmp_path))
        assert (config.crawl_max_depth, config.crawl_max_pages, config.crawl_same_domain_only) == (5, 200, True)

        config.crawl_max_depth = 0
        crawler = SiteCrawler(config, fetcher=FakeFetcher(self.site))
        assert len(crawler.crawl("https://shop.example/")) == 1

    def test_runs_are_independent(self, tmp_path):
        """Test that each crawl starts with fresh state."""
        crawler, _ = self.make_crawler(tmp_path)

        first = crawler.crawl("https://shop.example/", max_depth=1, max_pages=10)
        second = crawler.crawl("https://shop.example/", max_depth=1, max_pages=10)

        assert first == second

    def test_invalid_start_url(self, tmp_path):
        """Test that an unusable start URL is rejected."""
        crawler, _ = self.make_crawler(tmp_path)

        with pytest.raises(ValueError):
            crawler.crawl("not a url")

    def test_crawl_run_marks_visited_on_dequeue(self):
        """Test that duplicates already in the queue are skipped."""
        run = CrawlRun("https://shop.example/", max_depth=2, max_pages=10, same_domain_only=True)
        run.queue.append(("https://shop.example/", 1))

        assert run.next_url() == ("https://shop.example/", 0)
        assert "https://shop.example/" in run.visited
        assert run.next_url() is None


class TestPageFiles:
    """Test cases for crawl output helpers."""

    def setup_method(self):
        """Setup test fixtures."""
        self.pages = [
            PageRecord(url="https://shop.example/", title="Home", content="Welcome to the shop.", depth=0),
            PageRecord(url="https://shop.example/about", title="About", content="x" * 300, depth=1),
        ]

    def test_save_and_load_pages(self, tmp_path):
        """Test saving pages to JSON and reading them back."""
        output_file = tmp_path / "pages.json"
        save_pages(self.pages, output_file)

        assert load_pages(output_file) == self.pages

    def test_load_pages_rejects_malformed_records(self, tmp_path):
        """Test required-field validation."""
        bad_file = tmp_path / "bad.json"
        bad_file.write_text(json.dumps([{"url": "https://shop.example/", "title": "Home"}]))

        with pytest.raises(PayloadError):
            load_pages(bad_file)

    def test_batch_pages_to_markdown(self):
        """Test Markdown batching."""
        batches = batch_pages_to_markdown(self.pages, batch_size=1)

        assert len(batches) == 2
        assert batches[0].startswith("# Home\n\nURL: https://shop.example/\n\nWelcome to the shop.")
        assert batches[0].rstrip().endswith("---")

    def test_crawl_stats(self):
        """Test crawl summary statistics."""
        stats = crawl_stats(self.pages)

        assert stats['total_pages'] == 2
        assert stats['pages_by_depth'] == {0: 1, 1: 1}
        assert stats['max_depth'] == 1
        assert stats['thin_pages'] == ["https://shop.example/"]
