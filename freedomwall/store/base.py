"""File-based JSON document collections.

Each collection is one JSON file holding a list of documents keyed by
``id``.  Every write holds a per-collection lock (a thread lock plus a
``<name>.lock`` file shared between processes) and replaces the file
atomically, so a mutation is a single read-modify-write: concurrent
requests against the same document cannot lose each other's updates, and
a mutation that raises leaves the stored document untouched.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Generic, Iterator, Optional, TypeVar

from filelock import FileLock

from freedomwall.errors import InternalError, NotFoundError
from freedomwall.models.base import now_iso

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class JsonCollection(Generic[T]):
    """Base class for a typed collection stored in ``<base_dir>/<name>.json``.

    Subclasses provide ``_from_dict``/``_to_dict`` and may override
    ``_before_save`` to maintain derived fields.
    """

    name: str = ""
    label: str = "Document"

    def __init__(self, base_dir: str | Path) -> None:
        self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._path = self._base / f"{self.name}.json"
        self._lock = threading.RLock()
        self._file_lock = FileLock(str(self._path.with_suffix(".lock")))

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _from_dict(self, d: dict) -> T:
        raise NotImplementedError

    def _to_dict(self, entity: T) -> dict:
        raise NotImplementedError

    def _before_save(self, entity: T) -> None:
        if hasattr(entity, "updated_at"):
            entity.updated_at = now_iso()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the collection for a read-modify-write.

        The thread lock orders requests inside one server; the lock file
        orders separate processes (the CLI against a running server).
        """
        with self._lock, self._file_lock:
            yield

    def _read(self) -> list[dict]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.exception("Failed to read %s", self._path)
            raise InternalError(f"Error reading {self.name}") from exc
        return data if isinstance(data, list) else []

    def _write(self, docs: list[dict]) -> None:
        try:
            fd, tmp = tempfile.mkstemp(dir=self._base, prefix=f".{self.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(docs, fh, indent=2, default=str)
            os.replace(tmp, self._path)
        except OSError as exc:
            logger.exception("Failed to write %s", self._path)
            raise InternalError(f"Error saving {self.name}") from exc

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def insert(self, entity: T) -> T:
        with self._locked():
            docs = self._read()
            self._before_save(entity)
            docs.append(self._to_dict(entity))
            self._write(docs)
        return entity

    def get(self, doc_id: str) -> Optional[T]:
        for d in self._read():
            if d.get("id") == doc_id:
                return self._from_dict(d)
        return None

    def require(self, doc_id: str) -> T:
        entity = self.get(doc_id)
        if entity is None:
            raise NotFoundError(f"{self.label} not found")
        return entity

    def list_all(self) -> list[T]:
        return [self._from_dict(d) for d in self._read()]

    def find(self, predicate: Callable[[T], bool]) -> list[T]:
        return [e for e in self.list_all() if predicate(e)]

    def update(self, doc_id: str, mutate: Callable[[T], R]) -> tuple[T, R]:
        """Apply *mutate* to one document atomically and persist it.

        Returns the saved entity and whatever *mutate* returned.  Raises
        :class:`NotFoundError` if the id is unknown; any exception from
        *mutate* propagates and nothing is written.
        """
        with self._locked():
            docs = self._read()
            for i, d in enumerate(docs):
                if d.get("id") == doc_id:
                    entity = self._from_dict(d)
                    result = mutate(entity)
                    self._before_save(entity)
                    docs[i] = self._to_dict(entity)
                    self._write(docs)
                    return entity, result
        raise NotFoundError(f"{self.label} not found")

    def delete(self, doc_id: str) -> bool:
        with self._locked():
            docs = self._read()
            remaining = [d for d in docs if d.get("id") != doc_id]
            if len(remaining) == len(docs):
                return False
            self._write(remaining)
            return True

    def resave_all(self) -> int:
        """Run ``_before_save`` over every document.  Returns the count."""
        with self._locked():
            entities = [self._from_dict(d) for d in self._read()]
            for entity in entities:
                self._before_save(entity)
            self._write([self._to_dict(e) for e in entities])
            return len(entities)

    def __len__(self) -> int:
        return len(self._read())
