"""
In-memory database

Every table is a dict keyed by integer id with its own counter. Ids start at
1 and are never reused. Nothing is persisted; a restart starts from the seed
data again.
"""
from typing import Dict, Iterable

from fastapi import Request

TABLES = (
    "users",
    "stores",
    "categories",
    "products",
    "orders",
    "order_items",
    "reviews",
)


class InMemoryDatabase:
    """
    Map-based storage shared by the repositories

    Usage:
        db = InMemoryDatabase()
        new_id = db.next_id("stores")
        db.table("stores")[new_id] = store
    """

    def __init__(self, tables: Iterable[str] = TABLES):
        self._tables: Dict[str, dict] = {name: {} for name in tables}
        self._counters: Dict[str, int] = {name: 1 for name in tables}
        # Token ids revoked on logout
        self.revoked_tokens: set = set()
        # Carts keyed by user id
        self.carts: Dict[int, object] = {}

    def table(self, name: str) -> dict:
        try:
            return self._tables[name]
        except KeyError:
            raise KeyError(f"Unknown table: {name}") from None

    def next_id(self, name: str) -> int:
        self.table(name)
        new_id = self._counters[name]
        self._counters[name] = new_id + 1
        return new_id

    def count(self, name: str) -> int:
        return len(self.table(name))


def get_db(request: Request) -> InMemoryDatabase:
    """
    FastAPI dependency returning the application's database

    Usage:
        @router.get("/items")
        async def read_items(db: InMemoryDatabase = Depends(get_db)):
            ...
    """
    return request.app.state.db
