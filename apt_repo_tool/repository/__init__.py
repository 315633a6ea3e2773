"""
On-disk APT repositories: ingestion, removal and metadata generation.
"""

from .store import RepositoryStore, require_default_key, update_shared_repository

__all__ = ["RepositoryStore", "require_default_key", "update_shared_repository"]
