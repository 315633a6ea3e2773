"""
Service layer for repository operations.

This package provides high-level services that coordinate repository
stores, the signing capability and ephemeral name allocation.
"""

from .name_allocator import NameAllocator, base36
from .repository_service import RepositoryService

__all__ = ["NameAllocator", "RepositoryService", "base36"]
