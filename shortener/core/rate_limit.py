"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.
Rate limiting prevents abuse and ensures fair usage.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Different limits for different endpoints
- IP-based limiting (can be extended to user-based)
- Can be switched off with RATE_LIMIT_ENABLED=false (tests, internal deployments)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from shortener.core.setting import settings

# Initialize rate limiter
# Uses IP address for rate limiting
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# Rate limit configurations per endpoint
# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "shorten": "10/minute",  # URL creation: 10 per minute per IP
    "redirect": "100/minute",  # Redirects: 100 per minute per IP
    "decode": "60/minute",
    "stats": "30/minute",  # Stats queries: 30 per minute per IP
    "list": "30/minute",
}
