"""Rating store module.

Provides store backends for persisting rating records and the vote log:
- MemoryRatingStore: In-process dictionaries
- SQLiteRatingStore: SQLite file using the hero_ratings/votes schema

Example:
    ```python
    from hero_rank.store import get_store

    store = get_store("sqlite", path="./ratings.db")
    store = get_store("memory")
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import ConfigError
from .base import RatingStore
from .memory import MemoryRatingStore
from .sqlite import SQLiteRatingStore

if TYPE_CHECKING:
    from ..config import StoreConfig


def get_store(name: str, **kwargs) -> RatingStore:
    """Factory function to get a store backend by name.

    Args:
        name: Backend name. One of:
            - "memory": In-process store
            - "sqlite": SQLite database (pass path=...)
        **kwargs: Additional arguments passed to the store constructor.

    Returns:
        Initialized store instance.

    Raises:
        ConfigError: If the backend name is not recognized.
    """
    stores: dict[str, type[RatingStore]] = {
        "memory": MemoryRatingStore,
        "sqlite": SQLiteRatingStore,
    }

    if name not in stores:
        valid = sorted(stores.keys())
        raise ConfigError(f"Unknown store backend '{name}'. Valid backends: {valid}", field="backend")

    return stores[name](**kwargs)


def store_from_config(config: StoreConfig) -> RatingStore:
    """Build the store described by a StoreConfig."""
    if config.backend == "sqlite":
        return get_store("sqlite", path=config.path)
    return get_store(config.backend)


__all__ = [
    # Base
    "RatingStore",
    # Backends
    "MemoryRatingStore",
    "SQLiteRatingStore",
    # Factory
    "get_store",
    "store_from_config",
]
