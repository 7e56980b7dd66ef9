"""Service layer helpers for business logic."""

from .link_resolution import LinkResolutionService

__all__ = ["LinkResolutionService"]
