"""
Core Package
============
Resolution engine, data models and configuration.
"""

from .config import settings

__all__ = ['settings']
