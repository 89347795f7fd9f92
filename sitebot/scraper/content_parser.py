"""
Content parser for extracting page text and links from HTML.
"""

import re
from bs4 import BeautifulSoup
from typing import List, Optional
from urllib.parse import urljoin

from ..utils.logging import get_logger
from .models import ExtractedContent
from .url_utils import is_http_url


# Page chrome removed before any text is read
STRIP_SELECTORS = [
    'script', 'style', 'nav', 'footer', 'header', 'iframe', 'noscript',
    '.navigation', '.menu', '.sidebar', '.footer', '.header',
]

# Candidate containers for the main page content; the first one in the document wins
MAIN_CONTENT_SELECTOR = 'main, article, .content, .main-content, #content'


class ContentParser:
    """Parser for extracting title, body text and links from site pages."""

    def __init__(self, parser: str = 'html.parser'):
        """Initialize content parser."""
        self.parser = parser
        self.logger = get_logger(__name__)

    def clean_text(self, text: Optional[str]) -> str:
        """Collapse whitespace runs while keeping single line breaks."""
        if not text:
            return ""

        text = re.sub(r'[^\S\n]+', ' ', text)
        text = re.sub(r' ?\n\s*', '\n', text)
        return text.strip()

    def extract(self, html: str, base_url: str) -> ExtractedContent:
        """Extract title, main content and absolute links from an HTML page."""
        soup = BeautifulSoup(html or "", self.parser)

        for selector in STRIP_SELECTORS:
            for element in soup.select(selector):
                element.decompose()

        return ExtractedContent(
            title=self._extract_title(soup),
            content=self._extract_main_text(soup),
            links=self._extract_links(soup, base_url),
        )

    def _extract_title(self, soup: BeautifulSoup) -> str:
        """Resolve the page title: <title>, then first <h1>, then a placeholder."""
        title_tag = soup.find('title')
        if title_tag:
            title = self.clean_text(title_tag.get_text(' '))
            if title:
                return title

        heading = soup.find('h1')
        if heading:
            title = self.clean_text(heading.get_text(' '))
            if title:
                return title

        return "Untitled"

    def _extract_main_text(self, soup: BeautifulSoup) -> str:
        """Prefer the main content region, falling back to the whole body."""
        container = soup.select_one(MAIN_CONTENT_SELECTOR)
        if container is None:
            container = soup.body or soup

        return self.clean_text(container.get_text(' '))

    def _extract_links(self, soup: BeautifulSoup, base_url: str) -> List[str]:
        """Resolve every anchor href against the page URL, skipping bad ones."""
        links = []
        for anchor in soup.find_all('a', href=True):
            href = anchor.get('href', '').strip()
            if not href:
                continue
            try:
                absolute_url = urljoin(base_url, href)
            except ValueError:
                self.logger.debug(f"Skipping malformed link: {href}")
                continue

            if is_http_url(absolute_url):
                links.append(absolute_url)
            else:
                self.logger.debug(f"Skipping non-http link: {href}")

        return links
