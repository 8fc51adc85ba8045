"""Dict-backed document store.

Used by tests, the CLI and single-process deployments. Writes and watch
dispatch are synchronous with respect to the awaiting caller: by the time a
write returns, every affected watcher has been called.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from coachsync.store.base import BaseDocumentStore, Document


class InMemoryDocumentStore(BaseDocumentStore):
    """Insertion-ordered in-process store.

    Documents are deep-copied on the way in and out so callers never share
    state with the store.
    """

    name = "memory"

    def __init__(self, seed: Mapping[str, Mapping[str, Mapping[str, Any]]] | None = None) -> None:
        super().__init__()
        self._collections: dict[str, dict[str, Document]] = {}
        for collection, documents in (seed or {}).items():
            for doc_id, data in documents.items():
                self._save(collection, doc_id, dict(data))

    def _load(self, collection: str, doc_id: str) -> Document | None:
        data = self._collections.get(collection, {}).get(doc_id)
        if data is None:
            return None
        return {"id": doc_id, **copy.deepcopy(data)}

    def _load_all(self, collection: str) -> list[Document]:
        return [{"id": doc_id, **copy.deepcopy(data)} for doc_id, data in self._collections.get(collection, {}).items()]

    def _save(self, collection: str, doc_id: str, data: Document) -> None:
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def _remove(self, collection: str, doc_id: str) -> bool:
        return self._collections.get(collection, {}).pop(doc_id, None) is not None

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))
