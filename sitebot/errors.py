"""
Exception types raised by SiteBot components.
"""


class SiteBotError(Exception):
    """Base class for all SiteBot errors."""


class FetchError(SiteBotError):
    """A page could not be fetched (network error or non-2xx status)."""

    def __init__(self, url: str, message: str, status_code: int = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status_code = status_code


class FetchTimeout(FetchError):
    """A page fetch exceeded the request timeout."""


class SnapshotError(SiteBotError):
    """The embeddings snapshot is missing or malformed."""


class PayloadError(SiteBotError):
    """A JSON payload does not have the expected shape."""


class EmbeddingError(SiteBotError):
    """The embedding model failed to produce a vector."""


class GenerationError(SiteBotError):
    """The language model failed to produce an answer."""


class ResponseTimeout(SiteBotError):
    """Answering a query took longer than the allowed deadline."""


class DeliveryError(SiteBotError):
    """An outbound chat message could not be delivered."""
