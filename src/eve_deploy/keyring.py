"""Key source: named ed25519 signing keys.

A Keyring may be shared by several concurrent pipelines (e.g. many
deployments signed with the same key), so every access goes through a
lock. Keys loaded from a directory are stored unencrypted, one hex seed
per "<name>.key" file, like a "test" keyring backend.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from nacl.signing import SigningKey

from eve_deploy.domain.address import address_from_public_key
from eve_deploy.domain.exceptions import SigningError
from eve_deploy.logging_config import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from eve_deploy.config import Settings

logger = get_logger(__name__)

KEY_FILE_SUFFIX = ".key"


@dataclass(frozen=True)
class KeyInfo:
    name: str
    address: str
    public_key: bytes


class KeySource(Protocol):
    """What the Signer needs from a key source."""

    def lookup(self, name: str) -> KeyInfo:
        ...

    def sign(self, name: str, data: bytes) -> bytes:
        ...


class Keyring:
    """In-process keyring with an explicit lock/unlock lifecycle."""

    def __init__(self) -> None:
        self._keys: dict[str, SigningKey] = {}
        self._locked = False
        self._mutex = threading.RLock()

    @classmethod
    def from_settings(cls, settings: Settings) -> Keyring:
        """Keyring preloaded from settings.keyring_dir."""
        ring = cls()
        ring.load_directory(settings.keyring_dir)
        return ring

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def add_key(self, name: str, seed: bytes) -> KeyInfo:
        """Register a key from a 32-byte seed."""
        if len(seed) != 32:
            raise ValueError(f"seed for key {name!r} must be 32 bytes, got {len(seed)}")
        signing_key = SigningKey(seed)
        with self._mutex:
            self._keys[name] = signing_key
        return self._info(name, signing_key)

    def generate(self, name: str) -> KeyInfo:
        signing_key = SigningKey.generate()
        with self._mutex:
            self._keys[name] = signing_key
        return self._info(name, signing_key)

    def load_directory(self, directory: Path) -> list[str]:
        """Load every "<name>.key" file in a directory. Returns the names loaded."""
        loaded = []
        if not directory.is_dir():
            logger.warning("keyring.directory_missing", path=str(directory))
            return loaded
        for path in sorted(directory.glob(f"*{KEY_FILE_SUFFIX}")):
            name = path.name[: -len(KEY_FILE_SUFFIX)]
            try:
                self.add_key(name, bytes.fromhex(path.read_text().strip()))
            except ValueError as exc:
                raise SigningError(f"invalid key file {path}", key_name=name) from exc
            loaded.append(name)
        logger.debug("keyring.loaded", path=str(directory), keys=loaded)
        return loaded

    def lock(self) -> None:
        with self._mutex:
            self._locked = True

    def unlock(self) -> None:
        with self._mutex:
            self._locked = False

    @property
    def is_locked(self) -> bool:
        return self._locked

    def names(self) -> list[str]:
        with self._mutex:
            return sorted(self._keys)

    # ------------------------------------------------------------------
    # KeySource
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> KeyInfo:
        return self._info(name, self._require(name))

    def sign(self, name: str, data: bytes) -> bytes:
        return self._require(name).sign(data).signature

    def _require(self, name: str) -> SigningKey:
        with self._mutex:
            if self._locked:
                raise SigningError("keyring is locked", key_name=name)
            signing_key = self._keys.get(name)
        if signing_key is None:
            raise SigningError(f"key {name!r} not found in keyring", key_name=name)
        return signing_key

    @staticmethod
    def _info(name: str, signing_key: SigningKey) -> KeyInfo:
        public_key = signing_key.verify_key.encode()
        return KeyInfo(
            name=name,
            address=address_from_public_key(public_key),
            public_key=public_key,
        )
