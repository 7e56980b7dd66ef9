"""
Utils Package
=============
Static URL analysis helpers (no network I/O).
"""

from .url_parser import URLParser, Platform

__all__ = ['URLParser', 'Platform']
