"""
Ephemeral repository name allocation.

Names are short fixed-width codes drawn at random. Every issued name is
appended to a log under the repository root before it is handed out, so
a restarted process never reissues a name.
"""

import logging
import os
import queue
import random
import threading
from typing import Optional, Set

from ..utils.constants import NAME_ALPHABET, NAME_BASE, NAME_MAX, NAME_PAD, NAME_WIDTH, NAMES_FILENAME

# Seconds between checks of the stop flag while the handoff is full
_HANDOFF_POLL_INTERVAL = 0.2


def base36(number: int) -> str:
    """
    Render a number as a fixed-width base 36 code.

    Digits are taken from the lowercase letters followed by 0-9; the result
    is right-aligned and left-padded with "=".

    Example:
        >>> base36(0)
        '=========='
        >>> base36(37)
        '========bb'
    """
    chars = [NAME_PAD] * NAME_WIDTH
    i = NAME_WIDTH - 1
    while i >= 0 and number > 0:
        chars[i] = NAME_ALPHABET[number % NAME_BASE]
        number //= NAME_BASE
        i -= 1
    return "".join(chars)


class NameAllocator:
    """
    Hands out unused short names through a bounded handoff.

    A single background producer reads the persisted log, then repeatedly
    draws a random unused code, appends and fsyncs it, and offers it on a
    one-slot queue. The producer starts on the first allocate() call.
    """

    def __init__(self, repos_dir: str, rng: Optional[random.Random] = None) -> None:
        """
        Initialize the allocator.

        Args:
            repos_dir: Repository root holding the names log
            rng: Random source (defaults to the system random source)
        """
        self.path = os.path.join(repos_dir, NAMES_FILENAME)
        self._rng = rng or random.SystemRandom()
        self._queue: "queue.Queue[str]" = queue.Queue(maxsize=1)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None
        self._start_lock = threading.Lock()

    def _read_used(self) -> Set[str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return {line.strip() for line in f if line.strip()}
        except FileNotFoundError:
            return set()

    def _draw(self, used: Set[str]) -> str:
        while True:
            number = self._rng.randrange(NAME_MAX)
            name = base36(number)
            if name not in used:
                logging.debug("GEN: %d -> %s", number, name)
                return name

    def _offer(self, name: str) -> bool:
        while not self._stop.is_set():
            try:
                self._queue.put(name, timeout=_HANDOFF_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            used = self._read_used()
            with open(self.path, "a", encoding="utf-8") as log:
                while not self._stop.is_set():
                    name = self._draw(used)
                    used.add(name)
                    log.write(f"{name}\n")
                    log.flush()
                    os.fsync(log.fileno())
                    if not self._offer(name):
                        return
        except OSError as e:
            logging.error("Failed to maintain '%s': %s", self.path, e)
            self._error = e

    def _ensure_started(self) -> None:
        with self._start_lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self._produce, name="name-allocator", daemon=True)
                self._thread.start()

    def allocate(self, timeout: Optional[float] = None) -> str:
        """
        Get a name that has never been issued before.

        Args:
            timeout: Seconds to wait for the producer (None waits forever)

        Returns:
            Ten-character code

        Raises:
            OSError: If the names log cannot be read or written
            TimeoutError: If no name became available in time
        """
        self._ensure_started()
        waited = 0.0
        while True:
            try:
                return self._queue.get(timeout=_HANDOFF_POLL_INTERVAL)
            except queue.Empty:
                if self._error is not None:
                    raise self._error
                if self._thread is not None and not self._thread.is_alive():
                    raise OSError(f"Name allocator stopped: {self.path}")
                waited += _HANDOFF_POLL_INTERVAL
                if timeout is not None and waited >= timeout:
                    raise TimeoutError("Timed out waiting for a repository name") from None

    def close(self) -> None:
        """Stop the producer; a name already offered is left in the log unused."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()


__all__ = ["NameAllocator", "base36"]
