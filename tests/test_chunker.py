"""
Tests for the chunking module.
"""

import json
import pytest

from sitebot.chunking import ContentChunk, DocumentChunker, split_sentences, split_text
from sitebot.config.settings import Config
from sitebot.errors import PayloadError
from sitebot.scraper.models import PageRecord


class TestSplitText:
    """Test cases for sentence splitting and chunk packing."""

    def test_split_sentences_keeps_punctuation(self):
        """Test sentence units keep their terminal punctuation."""
        assert split_sentences("Hello there. How are you? Great!") == [
            "Hello there.", "How are you?", "Great!",
        ]

    def test_split_sentences_repeated_punctuation(self):
        """Test runs of punctuation stay with their sentence."""
        assert split_sentences("Really?! Yes...") == ["Really?!", "Yes..."]

    def test_split_sentences_keeps_trailing_text(self):
        """Test text after the last punctuation mark is not lost."""
        assert split_sentences("First one. and a tail") == ["First one.", "and a tail"]
        assert split_sentences("") == []

    def test_short_sentences_are_packed(self):
        """Test sentences are joined with a space up to the limit."""
        text = " ".join(["This sentence is exactly forty chars ok."] * 5)

        chunks = split_text(text, max_length=100, min_length=1)

        assert len(chunks) == 3
        assert all(len(chunk) <= 100 for chunk in chunks)
        assert all(chunk.endswith(".") for chunk in chunks)
        assert " ".join(chunks) == text

    def test_long_sentence_is_not_cut(self):
        """Test a sentence longer than the limit becomes its own chunk."""
        long_sentence = "word " * 60 + "end."
        text = f"Short intro sentence here. {long_sentence} Closing remark goes here."

        chunks = split_text(text, max_length=100, min_length=1)

        assert chunks[1] == long_sentence.strip()
        assert len(chunks[1]) > 100
        assert chunks[0] == "Short intro sentence here."
        assert chunks[2] == "Closing remark goes here."

    def test_short_chunks_are_dropped(self):
        """Test chunks under the minimum length are filtered out."""
        assert split_text("Too short.", max_length=1000, min_length=50) == []

        text = "A sentence that is long enough to survive the minimum length filter."
        assert split_text(text, max_length=1000, min_length=50) == [text]

    def test_default_limits(self):
        """Test default bounds are 1000 and 50 characters."""
        text = ("Our print studio delivers banners, business cards and signage. " * 40).strip()

        chunks = split_text(text)

        assert chunks
        assert all(50 <= len(chunk) <= 1000 for chunk in chunks)

    def test_invalid_max_length(self):
        """Test a non-positive limit is rejected."""
        with pytest.raises(ValueError):
            split_text("Anything.", max_length=0)

    def test_empty_text(self):
        """Test empty input yields no chunks."""
        assert split_text("") == []


class TestDocumentChunker:
    """Test cases for DocumentChunker."""

    def setup_method(self):
        """Setup test fixtures."""
        self.pages = [
            PageRecord(
                url="https://shop.example/",
                title="Home",
                content="We print business cards, flyers and large banners for every event. "
                        "Orders placed before noon ship the same day anywhere in the city.",
                depth=0,
            ),
            PageRecord(url="https://shop.example/empty", title="Empty", content="Hi.", depth=1),
            PageRecord(
                url="https://shop.example/contact",
                title="Contact",
                content="You can reach our team by phone or email on every working day of the week.",
                depth=1,
            ),
        ]

    def test_chunk_pages(self, tmp_path):
        """Test chunks carry their page URL and title in crawl order."""
        chunker = DocumentChunker(Config(data_dir=str(tmp_path)))

        chunks = chunker.chunk_pages(self.pages)

        assert [c.source_url for c in chunks] == ["https://shop.example/", "https://shop.example/contact"]
        assert chunks[0].title == "Home"
        assert chunks[0].text.startswith("We print business cards")
        assert all(isinstance(c, ContentChunk) for c in chunks)

    def test_chunk_page_respects_config(self, tmp_path):
        """Test chunk bounds come from configuration."""
        config = Config(data_dir=str(tmp_path))
        config.chunk_max_length = 80
        config.chunk_min_length = 10

        chunks = DocumentChunker(config).chunk_page(self.pages[0])

        assert len(chunks) == 2
        assert all(len(c.text) <= 80 for c in chunks)

    def test_save_and_load_chunks(self, tmp_path):
        """Test saving chunks to JSON and loading them back."""
        config = Config(data_dir=str(tmp_path))
        chunker = DocumentChunker(config)
        chunks = chunker.chunk_pages(self.pages)

        chunker.save_chunks()
        with open(config.chunks_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        assert set(data[0]) == {'url', 'title', 'text'}

        loaded = DocumentChunker(config).load_chunks()
        assert loaded == chunks

    def test_load_chunks_missing_file(self, tmp_path):
        """Test loading from a missing file."""
        chunker = DocumentChunker(Config(data_dir=str(tmp_path)))

        with pytest.raises(FileNotFoundError):
            chunker.load_chunks(str(tmp_path / "nope.json"))

    def test_load_chunks_malformed(self, tmp_path):
        """Test malformed chunk records are rejected."""
        bad_file = tmp_path / "bad.json"
        bad_file.write_text(json.dumps([{"url": "https://shop.example/", "text": 3}]))

        with pytest.raises(PayloadError):
            DocumentChunker(Config(data_dir=str(tmp_path))).load_chunks(str(bad_file))

    def test_get_stats(self, tmp_path):
        """Test chunking statistics."""
        chunker = DocumentChunker(Config(data_dir=str(tmp_path)))
        chunker.chunk_pages(self.pages)

        stats = chunker.get_stats()

        assert stats['pages'] == 3
        assert stats['total'] == 2
        assert stats['sources'] == 2
        assert stats['max_length'] >= stats['avg_length'] > 0
