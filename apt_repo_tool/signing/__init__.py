"""OpenPGP signing backends."""

from .keyring import KeyringSigner, format_identity

__all__ = ["KeyringSigner", "format_identity"]
