"""Scraper utilities for rate limiting, retries, user agents and price parsing."""

from .rate_limiter import SourceRateLimiter, TokenBucket
from .user_agents import DEFAULT_USER_AGENT, USER_AGENTS, get_random_user_agent
from .normalizer import PriceNormalizer, to_absolute_url
from .retry import TRANSIENT_FETCH_ERRORS, fetch_retrying


__all__ = [
    # Rate limiting
    "SourceRateLimiter",
    "TokenBucket",
    # User agents
    "get_random_user_agent",
    "DEFAULT_USER_AGENT",
    "USER_AGENTS",
    # Normalization
    "PriceNormalizer",
    "to_absolute_url",
    # Retry
    "TRANSIENT_FETCH_ERRORS",
    "fetch_retrying",
]
