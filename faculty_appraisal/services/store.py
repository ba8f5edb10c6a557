"""
Key -> JSON list persistence.

The workflow core only ever calls ``get(key)`` and ``put(key, items)``.
Two backends exist: ``SqlCollectionStore`` (one ``StoredCollection`` row
per key) and ``InMemoryCollectionStore`` (tests, scripts). Both seed a key
with its default data the first time it is read.
"""
import copy
import json
import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from faculty_appraisal.models.stored_collection import StoredCollection

logger = logging.getLogger(__name__)

CYCLES_KEY = "appraisal_cycles"
APPRAISALS_KEY = "appraisals"

SeedFactory = Callable[[], List[Dict[str, Any]]]


class CollectionStore(Protocol):
    def get(self, key: str) -> List[Dict[str, Any]]: ...

    def put(self, key: str, items: List[Dict[str, Any]]) -> None: ...


def _json_copy(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Round-trip through json so callers never share mutable state with the store
    return json.loads(json.dumps(items))


class InMemoryCollectionStore:
    def __init__(self, seeds: Optional[Dict[str, SeedFactory]] = None):
        self._data: Dict[str, List[Dict[str, Any]]] = {}
        self._seeds = seeds or {}

    def get(self, key: str) -> List[Dict[str, Any]]:
        if key not in self._data:
            seed = self._seeds.get(key)
            self._data[key] = _json_copy(seed()) if seed else []
        return _json_copy(self._data[key])

    def put(self, key: str, items: List[Dict[str, Any]]) -> None:
        self._data[key] = _json_copy(items)


class SqlCollectionStore:
    def __init__(self, db: Session, seeds: Optional[Dict[str, SeedFactory]] = None):
        self.db = db
        self._seeds = seeds or {}

    def _row(self, key: str) -> Optional[StoredCollection]:
        return self.db.query(StoredCollection).filter(StoredCollection.key == key).first()

    def get(self, key: str) -> List[Dict[str, Any]]:
        row = self._row(key)
        if row is None:
            seed = self._seeds.get(key)
            items = _json_copy(seed()) if seed else []
            if items:
                logger.info(f"Seeding collection '{key}' with {len(items)} default item(s)")
            self.put(key, items)
            return items
        return copy.deepcopy(row.payload or [])

    def put(self, key: str, items: List[Dict[str, Any]]) -> None:
        payload = _json_copy(items)
        row = self._row(key)
        if row is None:
            row = StoredCollection(key=key, payload=payload)
            self.db.add(row)
        else:
            # Assign a fresh list so SQLAlchemy registers the change on the JSON column
            row.payload = payload
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


ModelT = TypeVar("ModelT", bound=BaseModel)


class Repository(Generic[ModelT]):
    """Indexed view over one collection; uniqueness is the caller's concern."""

    def __init__(self, store: CollectionStore, key: str, model: Type[ModelT]):
        self.store = store
        self.key = key
        self.model = model

    def all(self) -> List[ModelT]:
        return [self.model.model_validate(item) for item in self.store.get(self.key)]

    def index(self) -> Dict[str, ModelT]:
        return {item.id: item for item in self.all()}

    def get(self, item_id: str) -> Optional[ModelT]:
        return self.index().get(item_id)

    def save(self, item: ModelT) -> ModelT:
        """Insert or replace by id, keeping the original position."""
        self.save_many([item])
        return item

    def save_many(self, items: List[ModelT]) -> None:
        current = self.all()
        positions = {existing.id: i for i, existing in enumerate(current)}
        for item in items:
            if item.id in positions:
                current[positions[item.id]] = item
            else:
                positions[item.id] = len(current)
                current.append(item)
        self.store.put(self.key, [i.model_dump(mode="json") for i in current])

    def delete(self, item_id: str) -> bool:
        current = self.all()
        remaining = [i for i in current if i.id != item_id]
        if len(remaining) == len(current):
            return False
        self.store.put(self.key, [i.model_dump(mode="json") for i in remaining])
        return True
