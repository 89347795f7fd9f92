"""
Route blueprints for the SiteBot web service.
"""

from .webhook import webhook_bp
from .search import search_bp
from .api import api_bp

__all__ = ["webhook_bp", "search_bp", "api_bp"]
