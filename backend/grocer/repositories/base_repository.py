"""
Base Repository - shared in-memory table access

Rows are stored as domain models. Every read returns a copy, so callers
only change stored state through the repository methods.
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from grocer.core.database import InMemoryDatabase
from grocer.core.exceptions import InvalidRequestError

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseRepository(Generic[ModelT]):
    table_name: str = ""
    model: Type[ModelT]

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    @property
    def rows(self) -> Dict[int, ModelT]:
        return self.db.table(self.table_name)

    def find_by_id(self, row_id: int) -> Optional[ModelT]:
        row = self.rows.get(row_id)
        return row.model_copy(deep=True) if row is not None else None

    def exists(self, row_id: int) -> bool:
        return row_id in self.rows

    def count(self) -> int:
        return len(self.rows)

    def _all(self) -> List[ModelT]:
        return [self.rows[row_id].model_copy(deep=True) for row_id in sorted(self.rows)]

    def _insert(self, **fields: Any) -> ModelT:
        row_id = self.db.next_id(self.table_name)
        row = self.model(id=row_id, **fields)
        self.rows[row_id] = row
        return row.model_copy(deep=True)

    def _update(self, row_id: int, changes: Dict[str, Any]) -> Optional[ModelT]:
        current = self.rows.get(row_id)
        if current is None:
            return None
        try:
            # dict(model) keeps fields that are excluded from dumps
            updated = self.model.model_validate({**dict(current), **changes, "id": row_id})
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
            raise InvalidRequestError(f"Invalid value for: {fields}") from e
        self.rows[row_id] = updated
        return updated.model_copy(deep=True)

    def _delete(self, row_id: int) -> bool:
        return self.rows.pop(row_id, None) is not None
