"""
Configuration management for SiteBot.
"""

import os
import torch
from pathlib import Path
from typing import List, Optional


DEFAULT_SYSTEM_PROMPT = """You are the virtual support assistant for the website you were built from.

IMPORTANT RULES:
1. Answer only with information found in the provided context
2. If you are not sure about the answer, ask for clarification or suggest contacting a human
3. Never invent prices, deadlines or policies
4. Be brief, professional and polite

If the question is outside the scope of your information:
- Ask for clarification when the question is unclear
- Suggest contacting the company directly for specific pricing questions"""


def _env_list(name: str, default: str = "") -> List[str]:
    """Read a comma separated environment variable into a list."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    """Configuration settings for SiteBot."""

    def __init__(self, data_dir: Optional[str] = None):
        """Initialize configuration with optional data directory."""
        # Base directories
        self.project_root = Path(__file__).parent.parent.parent
        self.data_dir = Path(data_dir) if data_dir else self.project_root / "data"

        self.raw_data_dir = self.data_dir / "raw"
        self.chunks_dir = self.data_dir / "chunks"
        self.index_dir = self.data_dir / "index"

        for dir_path in [self.raw_data_dir, self.chunks_dir, self.index_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        # Crawl settings
        self.start_url = os.getenv("SITEBOT_START_URL", "https://printerior.al/")
        self.crawl_max_depth = int(os.getenv("SITEBOT_CRAWL_MAX_DEPTH", "5"))
        self.crawl_max_pages = int(os.getenv("SITEBOT_CRAWL_MAX_PAGES", "200"))
        self.crawl_same_domain_only = os.getenv("SITEBOT_CRAWL_SAME_DOMAIN_ONLY", "true").lower() == "true"
        self.request_timeout = float(os.getenv("SITEBOT_REQUEST_TIMEOUT", "10"))
        self.user_agent = os.getenv("SITEBOT_USER_AGENT", "Mozilla/5.0 (compatible; SiteBot/1.0)")
        # Hosts with a known self-signed certificate; TLS checks stay on for everything else
        self.insecure_hosts = _env_list("SITEBOT_INSECURE_HOSTS")

        # Chunking settings
        self.chunk_max_length = int(os.getenv("SITEBOT_CHUNK_MAX_LENGTH", "1000"))
        self.chunk_min_length = int(os.getenv("SITEBOT_CHUNK_MIN_LENGTH", "50"))

        # Embedding settings
        self.embedding_model = os.getenv("SITEBOT_EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2")
        self.embedding_batch_size = int(os.getenv("SITEBOT_EMBEDDING_BATCH_SIZE", "100"))
        gpu_available = torch.cuda.is_available()
        self.use_gpu = os.getenv("SITEBOT_USE_GPU", str(gpu_available)).lower() == "true"
        self.device = "cuda" if self.use_gpu else "cpu"

        # Retrieval settings
        self.default_top_k = int(os.getenv("SITEBOT_DEFAULT_TOP_K", "5"))

        # Generation settings
        self.generator_model = os.getenv("SITEBOT_GENERATOR_MODEL", "Qwen/Qwen2.5-1.5B-Instruct")
        self.generation_max_tokens = int(os.getenv("SITEBOT_GENERATION_MAX_TOKENS", "500"))
        self.generation_temperature = float(os.getenv("SITEBOT_GENERATION_TEMPERATURE", "0.7"))
        self.response_timeout = float(os.getenv("SITEBOT_RESPONSE_TIMEOUT", "8"))
        self.system_prompt = os.getenv("SITEBOT_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT)
        self.fallback_answer = os.getenv(
            "SITEBOT_FALLBACK_ANSWER",
            "Sorry, I don't have enough information to answer that. "
            "Please contact our team directly for more details.")
        self.error_message = os.getenv(
            "SITEBOT_ERROR_MESSAGE",
            "Sorry, we ran into a technical problem. Please try again later.")
        self.blocked_phrases = _env_list("SITEBOT_BLOCKED_PHRASES")

        # Messaging / webhook settings
        self.meta_verify_token = os.getenv("META_VERIFY_TOKEN")
        self.meta_app_secret = os.getenv("META_APP_SECRET")
        self.page_access_token = os.getenv("IG_PAGE_ACCESS_TOKEN")
        self.graph_api_version = os.getenv("SITEBOT_GRAPH_API_VERSION", "v21.0")
        self.delivery_max_retries = int(os.getenv("SITEBOT_DELIVERY_MAX_RETRIES", "2"))

        # File paths
        self.pages_file = self.raw_data_dir / "pages.json"
        self.chunks_file = self.chunks_dir / "chunks.json"
        self.snapshot_file = self.index_dir / "embeddings.json"

        # Logging
        self.log_level = os.getenv("SITEBOT_LOG_LEVEL", "INFO")
        self.log_file = self.data_dir / "sitebot.log"

    @property
    def graph_api_url(self) -> str:
        """Base URL of the Graph API used for message delivery."""
        return f"https://graph.facebook.com/{self.graph_api_version}"

    def __repr__(self):
        """String representation of config."""
        return f"Config(data_dir={self.data_dir}, start_url={self.start_url}, embedding_model={self.embedding_model})"
