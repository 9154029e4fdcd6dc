"""Process-wide registry of KMS SDK clients.

Clients are created once per distinct configuration key and live until they
are closed explicitly with :meth:`ClientRegistry.close` or
:meth:`ClientRegistry.close_all`.
"""

import logging
import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    client: Any
    closer: Callable[[Any], None] | None = None


class ClientRegistry:
    """Keyed cache of SDK clients with an explicit init/teardown lifecycle."""

    def __init__(self):
        self._entries: dict[Hashable, _Entry] = {}
        self._lock = threading.Lock()

    def get_or_create(
        self,
        key: Hashable,
        factory: Callable[[], Any],
        closer: Callable[[Any], None] | None = None,
    ) -> Any:
        """
        Get the client registered under ``key``, creating it on first use.

        Args:
            key: Stable key derived from the configuration's identifying fields
            factory: Builds the client; called at most once per key
            closer: Releases the client's resources on teardown

        Returns:
            The cached client
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.info(f"Creating client for {key}")
                entry = _Entry(client=factory(), closer=closer)
                self._entries[key] = entry
            return entry.client

    def close(self, key: Hashable) -> None:
        """Tear down the client registered under ``key``, if any."""
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is not None:
            self._teardown(key, entry)

    def close_all(self) -> None:
        """Tear down every registered client."""
        with self._lock:
            entries = list(self._entries.items())
            self._entries.clear()
        for key, entry in entries:
            self._teardown(key, entry)

    @staticmethod
    def _teardown(key: Hashable, entry: _Entry) -> None:
        logger.info(f"Closing client for {key}")
        if entry.closer is not None:
            entry.closer(entry.client)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


clients = ClientRegistry()
