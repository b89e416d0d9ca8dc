"""
JSON document store for workout data.

Handles reading, writing, and querying the single store file.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Iterable

from ..core.engine.config_loader import get_data_dir
from ..core.models import Session
from .serializers import ENTITY_CODECS, ValidationError, kind_of

OrderKey = str | Callable[[Any], Any]


class WorkoutStore:
    """
    Manages workout data stored as one JSON document.

    The document holds one array per entity kind::

        {"exercises": [...], "sessions": [...], "sets": [...],
         "profiles": [...], "body_weights": [...], "templates": [...]}

    Entities are loaded once and kept in memory. Callers mutate the
    returned objects in place and call ``save()`` to persist. A store
    created with ``path=None`` never touches the disk.
    """

    def __init__(self, path: str | Path | None):
        """
        Initialize the store.

        Args:
            path: Path to the JSON document, or None for a memory-only store
        """
        self.path = Path(path) if path is not None else None
        self._tables: dict[str, list[Any]] | None = None

    def exists(self) -> bool:
        """Check if the store file exists (always True for a memory store)."""
        return self.path is None or self.path.exists()

    def init(self) -> None:
        """
        Create an empty store file if it doesn't exist.

        Creates parent directories if needed.
        """
        if self.path is None or self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._tables = _empty_tables()
        self.save()

    def load(self) -> None:
        """
        (Re)load every entity from disk.

        A missing file loads as an empty store.

        Raises:
            ValidationError: If the document or any record is malformed
        """
        self._tables = self._read()

    def _read(self) -> dict[str, list[Any]]:
        if self.path is None or not self.path.exists():
            return _empty_tables()

        try:
            with open(self.path, "r") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise ValidationError(f"Expected a JSON object in {self.path}")

        tables = _empty_tables()
        for kind, (_, _, decode) in ENTITY_CODECS.items():
            for index, record in enumerate(document.get(kind) or []):
                try:
                    tables[kind].append(decode(record))
                except (KeyError, TypeError, ValueError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing {kind}[{index}] in {self.path}: {e}"
                    ) from e
        return tables

    @property
    def tables(self) -> dict[str, list[Any]]:
        if self._tables is None:
            self._tables = self._read()
        return self._tables

    def insert(self, entity: Any) -> None:
        """Add an entity to its table."""
        self.tables[kind_of(entity)].append(entity)

    def delete(self, entity: Any) -> None:
        """
        Remove an entity by identity.

        Deleting a Session also deletes every SetEntry that belongs to it.
        """
        kind = kind_of(entity)
        self.tables[kind] = [e for e in self.tables[kind] if e.id != entity.id]
        if isinstance(entity, Session):
            self.tables["sets"] = [s for s in self.tables["sets"] if s.session_id != entity.id]

    def query(
        self,
        kind: str,
        where: Callable[[Any], bool] | None = None,
        order_by: OrderKey | None = None,
        reverse: bool = False,
        limit: int | None = None,
    ) -> list[Any]:
        """
        Select entities of one kind.

        Args:
            kind: Table name, e.g. "sets"
            where: Predicate to filter by
            order_by: Attribute name or key function to sort by
            reverse: Sort descending
            limit: Maximum number of results

        Returns:
            Matching entities (a new list; the entities themselves are live)
        """
        if kind not in ENTITY_CODECS:
            raise KeyError(f"Unknown entity kind: {kind}")

        rows: Iterable[Any] = self.tables[kind]
        if where is not None:
            rows = [r for r in rows if where(r)]
        result = list(rows)

        if order_by is not None:
            key = order_by if callable(order_by) else _attr_key(order_by)
            result.sort(key=key, reverse=reverse)
        if limit is not None:
            result = result[:limit]
        return result

    def first(self, kind: str, **kwargs: Any) -> Any | None:
        """Return the first match of ``query(kind, **kwargs)``, or None."""
        rows = self.query(kind, limit=1, **kwargs)
        return rows[0] if rows else None

    def count(self, kind: str, where: Callable[[Any], bool] | None = None) -> int:
        """Count entities of one kind matching *where*."""
        return len(self.query(kind, where=where))

    def get(self, kind: str, entity_id: str) -> Any | None:
        """Look up one entity by id."""
        return self.first(kind, where=lambda e: e.id == entity_id)

    def save(self) -> None:
        """
        Write the whole document to disk atomically.

        The document is written to a sibling temp file and moved into place.

        Raises:
            OSError: If the file cannot be written
        """
        if self.path is None:
            return

        document = {
            kind: [encode(e) for e in self.tables[kind]]
            for kind, (_, encode, _) in ENTITY_CODECS.items()
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(document, f, indent=2)
        os.replace(tmp_path, self.path)


def _empty_tables() -> dict[str, list[Any]]:
    return {kind: [] for kind in ENTITY_CODECS}


def _attr_key(name: str) -> Callable[[Any], Any]:
    # None sorts before any value
    def key(entity: Any) -> tuple[bool, Any]:
        value = getattr(entity, name)
        return (value is not None, value)

    return key


def get_default_store_path() -> Path:
    """
    Get the default store file path.

    Returns:
        ``~/.liftlog/liftlog.json``
    """
    return get_data_dir() / "liftlog.json"


def get_default_store() -> WorkoutStore:
    """
    Get a WorkoutStore with the default path.

    Returns:
        WorkoutStore instance
    """
    return WorkoutStore(get_default_store_path())
