"""
Territory Registry - Thread-safe territory snapshot store.

The registry holds the territories the engine compares paths against. Hosts
refresh it from persistence (replace_all) or apply single changes (add,
remove) while a session reads snapshots between samples.

Thread Safety:
- Copy-on-write: every mutation builds a new tuple and swaps it under a lock
- Territories, id index and version live in one state tuple that is
  replaced by a single assignment; readers never see a half-updated
  collection and never take the lock
- Territory objects are immutable (frozen dataclass)
"""

import logging
import threading
from typing import Dict, Iterable, Optional, Tuple

from landgrab_geo.territory import Territory

logger = logging.getLogger(__name__)


class TerritoryRegistry:
    """
    Thread-safe registry of claimed territories.

    Usage:
        registry = TerritoryRegistry()
        registry.replace_all(rows_from_backend)
        registry.add(new_territory)

        territories = registry.snapshot()    # immutable tuple
        mine = registry.own("player-1")
    """

    def __init__(self, territories: Iterable[Territory] = ()):
        self._lock = threading.Lock()
        # (territories, index by id, version)
        self._state: Tuple[Tuple[Territory, ...], Dict[str, Territory], int] = ((), {}, 0)
        if territories:
            self.replace_all(territories)

    @property
    def version(self) -> int:
        """Incremented on every mutation."""
        return self._state[2]

    def snapshot(self) -> Tuple[Territory, ...]:
        """Current territories as an immutable tuple."""
        return self._state[0]

    def versioned_snapshot(self) -> Tuple[int, Tuple[Territory, ...]]:
        """Version and territories read from the same state."""
        territories, _, version = self._state
        return version, territories

    def get(self, territory_id: str) -> Optional[Territory]:
        return self._state[1].get(territory_id)

    def own(self, owner_id: str) -> Tuple[Territory, ...]:
        return tuple(t for t in self.snapshot() if t.is_owned_by(owner_id))

    def others(self, owner_id: str) -> Tuple[Territory, ...]:
        return tuple(t for t in self.snapshot() if not t.is_owned_by(owner_id))

    def add(self, territory: Territory) -> None:
        """
        Add a territory.

        Raises:
            ValueError: If the id is already registered

        Thread-safe: Acquires lock for write operation.
        """
        with self._lock:
            territories, index, _ = self._state
            if territory.id in index:
                raise ValueError(f"Territory '{territory.id}' already exists")
            self._swap(territories + (territory,))
        logger.info(f"Territory added: {territory.id}")

    def remove(self, territory_id: str) -> None:
        """
        Remove a territory.

        Raises:
            KeyError: If the id is not registered
        """
        with self._lock:
            territories, index, _ = self._state
            if territory_id not in index:
                raise KeyError(f"Territory '{territory_id}' not found")
            self._swap(tuple(t for t in territories if t.id != territory_id))
        logger.info(f"Territory removed: {territory_id}")

    def replace_all(self, territories: Iterable[Territory]) -> None:
        """
        Swap in a fresh set (e.g. after a backend refresh).

        Raises:
            ValueError: If the new set contains duplicate ids
        """
        new = tuple(territories)
        ids = [t.id for t in new]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate territory ids in replacement set")
        with self._lock:
            self._swap(new)
        logger.info(f"Territories replaced: {len(new)}")

    def clear(self) -> None:
        with self._lock:
            self._swap(())

    def _swap(self, territories: Tuple[Territory, ...]) -> None:
        # Caller holds the lock
        self._state = (territories, {t.id: t for t in territories}, self._state[2] + 1)

    def __len__(self) -> int:
        return len(self._state[0])

    def __contains__(self, territory_id: str) -> bool:
        return territory_id in self._state[1]

    def __repr__(self) -> str:
        territories, _, version = self._state
        return f"TerritoryRegistry(territories={len(territories)}, version={version})"
