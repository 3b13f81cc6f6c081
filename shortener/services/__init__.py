"""
Services module for business logic separation.

This module contains service classes that encapsulate business logic,
keeping it separate from API endpoints and database models.
"""

from shortener.services.redirect_service import RedirectService
from shortener.services.stats_service import StatsService
from shortener.services.url_encoder import ShortCodeGenerator
from shortener.services.url_service import URLShorteningService
from shortener.services.url_store import CreateResult, CreateStatus, URLStore

__all__ = [
    "CreateResult",
    "CreateStatus",
    "RedirectService",
    "ShortCodeGenerator",
    "StatsService",
    "URLShorteningService",
    "URLStore",
]
