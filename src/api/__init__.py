"""
API Package
===========
Outbound HTTP clients.
"""

from .http_fetcher import FetchResult, HttpFetcher

__all__ = ['FetchResult', 'HttpFetcher']
