"""
Protocols and abstract base classes for type safety.

This package provides protocols that define interfaces for
external collaborators, enabling better type checking and abstraction.
"""

from .signing_protocol import SigningProtocol

__all__ = ["SigningProtocol"]
