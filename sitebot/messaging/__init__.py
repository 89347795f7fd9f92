"""
Outbound messaging module for SiteBot.
"""

from .instagram_client import InstagramClient

__all__ = ["InstagramClient"]
