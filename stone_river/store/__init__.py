"""Policy data stores: in-memory and Postgres."""

from stone_river.store.base import PolicyStore
from stone_river.store.policy import PolicyDataStore
from stone_river.store.postgres import PostgresStore

__all__ = ["PolicyDataStore", "PolicyStore", "PostgresStore"]
