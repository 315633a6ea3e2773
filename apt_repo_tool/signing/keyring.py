"""
OpenPGP signing over a keyring file.

This module implements SigningProtocol with PGPy. Keys are looked up by a
short key ID of one to eight hex digits, matched against the low 32 bits of
the primary key id and of every subkey id.
"""

import logging
import os
import re
from typing import BinaryIO, List, Optional

import pgpy
from pgpy.errors import PGPError

from ..exceptions import AmbiguousIdentityError, SigningKeyUnavailableError, UnknownKeyError

SHORT_KEY_MASK = 0xFFFFFFFF
SHORT_KEY_PATTERN = re.compile(r"[0-9A-Fa-f]{1,8}")
ARMORED_BLOCK = re.compile(rb"-----BEGIN PGP [A-Z ]+-----.*?-----END PGP [A-Z ]+-----", re.DOTALL)


def _short_id(key_id: str) -> int:
    return int(key_id, 16) & SHORT_KEY_MASK


def parse_short_key_id(key_id: str) -> int:
    """
    Parse a short key ID.

    Args:
        key_id: One to eight hex digits, without prefix or separators

    Returns:
        Numeric key id

    Raises:
        UnknownKeyError: If key_id is not a short hex key id
    """
    if not SHORT_KEY_PATTERN.fullmatch(key_id):
        logging.error("Unable to parse key '%s'", key_id)
        raise UnknownKeyError(key_id)
    return int(key_id, 16)


def read_keys(keyring_path: str) -> List[pgpy.PGPKey]:
    """
    Read every key of a keyring file.

    Armored keyrings may hold several concatenated key blocks; each block
    is parsed on its own. Binary keyrings are parsed as one packet stream.
    """
    with open(keyring_path, "rb") as f:
        data = f.read()

    blocks = ARMORED_BLOCK.findall(data) or [data]
    keys: List[pgpy.PGPKey] = []
    for block in blocks:
        primary, others = pgpy.PGPKey.from_blob(block)
        keys.append(primary)
        keys.extend(others.values())
    return keys


def format_identity(uid: pgpy.PGPUID) -> str:
    """
    Render a user id as "Name (comment) <email>".

    Args:
        uid: PGPy user id packet

    Returns:
        Identity string with empty parts omitted
    """
    identity = uid.name or ""
    if uid.comment:
        identity += f" ({uid.comment})"
    if uid.email:
        identity += f" <{uid.email}>"
    return identity.strip()


class KeyringSigner:
    """
    Signing capability backed by a keyring file.

    The keyring is read lazily on first use and cached for the lifetime of
    the signer.
    """

    def __init__(self, keyring_path: str, passphrase: Optional[str] = None) -> None:
        """
        Initialize the signer.

        Args:
            keyring_path: Path to an armored or binary keyring
            passphrase: Optional passphrase for protected secret keys
        """
        self.keyring_path = keyring_path
        self._passphrase = passphrase
        self._keys: Optional[List[pgpy.PGPKey]] = None

    def _load(self) -> List[pgpy.PGPKey]:
        if self._keys is not None:
            return self._keys

        if not os.path.exists(self.keyring_path):
            logging.error("Failed to open keyring: %s", self.keyring_path)
            raise FileNotFoundError(f"Keyring not found: {self.keyring_path}")

        try:
            keys = read_keys(self.keyring_path)
        except (ValueError, PGPError) as e:
            logging.error("Failed to read keyring %s: %s", self.keyring_path, e)
            raise OSError(f"Failed to read keyring {self.keyring_path}: {e}") from e

        self._keys = keys
        logging.debug("Loaded %d key(s) from %s", len(keys), self.keyring_path)
        return keys

    def find_key(self, key_id: str) -> pgpy.PGPKey:
        """
        Find the key matching a short key ID.

        Secret keys are preferred over public ones with the same id.

        Args:
            key_id: One to eight hex digits

        Returns:
            Matching PGPy key

        Raises:
            UnknownKeyError: If the id is not a short hex id or matches nothing
        """
        wanted = parse_short_key_id(key_id)

        matches = []
        for key in self._load():
            ids = [key.fingerprint.keyid] + list(key.subkeys.keys())
            if any(_short_id(candidate) == wanted for candidate in ids):
                matches.append(key)

        if not matches:
            raise UnknownKeyError(key_id)
        matches.sort(key=lambda key: key.is_public)
        return matches[0]

    def _secret_key(self, key_id: str) -> pgpy.PGPKey:
        key = self.find_key(key_id)
        if key.is_public:
            raise SigningKeyUnavailableError(f"Key '{key_id}' has no secret part in {self.keyring_path}", key_id)
        return key

    def _sign(self, key: pgpy.PGPKey, subject) -> pgpy.PGPSignature:
        if key.is_protected:
            if self._passphrase is None:
                raise SigningKeyUnavailableError("Signing key is protected and no passphrase is configured")
            with key.unlock(self._passphrase):
                return key.sign(subject)
        return key.sign(subject)

    def find_signer_identity(self, key_id: str) -> str:
        key = self.find_key(key_id)
        if len(key.userids) != 1:
            raise AmbiguousIdentityError(key_id, len(key.userids))
        return format_identity(key.userids[0])

    def detached_sign(self, file_path: str, output_path: str, key_id: str) -> None:
        key = self._secret_key(key_id)
        with open(file_path, "rb") as f:
            data = f.read()
        signature = self._sign(key, data)
        with open(output_path, "w", encoding="utf-8") as out:
            out.write(str(signature))
        logging.debug("Wrote detached signature %s", output_path)

    def export_public_key(self, key_id: str, output_path: str) -> None:
        key = self.find_key(key_id)
        public = key if key.is_public else key.pubkey
        with open(output_path, "w", encoding="utf-8") as out:
            out.write(str(public))
        logging.debug("Exported public key %s to %s", key_id, output_path)

    def clearsign(self, source: BinaryIO, output: BinaryIO, key_id: str) -> None:
        key = self._secret_key(key_id)
        message = pgpy.PGPMessage.new(source.read().decode("utf-8"), cleartext=True)
        message |= self._sign(key, message)
        output.write(str(message).encode("utf-8"))


__all__ = ["KeyringSigner", "format_identity"]
