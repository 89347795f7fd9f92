"""
Snapshot storage module for SiteBot.
"""

from .snapshot import read_snapshot, write_snapshot

__all__ = ["read_snapshot", "write_snapshot"]
