"""
Signing protocol for type safety.

This module defines the signing capability the repository core depends on.
The core never talks to an OpenPGP implementation directly; it only needs
something that satisfies this protocol.
"""

from typing import BinaryIO, Protocol


class SigningProtocol(Protocol):
    """
    Protocol defining the OpenPGP operations used by the repository core.

    All operations raise UnknownKeyError when the key identifier matches no
    key in the keyring.
    """

    def find_signer_identity(self, key_id: str) -> str:
        """
        Resolve the identity bound to a key.

        Args:
            key_id: Hex-encoded short key ID

        Returns:
            Human-readable identity name

        Raises:
            UnknownKeyError: If the key is not in the keyring
            AmbiguousIdentityError: If the key has other than exactly one identity
        """
        ...

    def detached_sign(self, file_path: str, output_path: str, key_id: str) -> None:
        """
        Write an armored detached signature of a file.

        Args:
            file_path: File to sign
            output_path: Where to write the signature
            key_id: Hex-encoded short key ID
        """
        ...

    def export_public_key(self, key_id: str, output_path: str) -> None:
        """
        Write the armored public key.

        Args:
            key_id: Hex-encoded short key ID
            output_path: Where to write the key
        """
        ...

    def clearsign(self, source: BinaryIO, output: BinaryIO, key_id: str) -> None:
        """
        Wrap text read from source in a cleartext signature written to output.

        Args:
            source: Readable binary stream with the text to sign
            output: Writable binary stream receiving the signed message
            key_id: Hex-encoded short key ID
        """
        ...


__all__ = ["SigningProtocol"]
