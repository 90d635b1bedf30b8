from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import copy
import logging
import secrets
import string

logger = logging.getLogger(__name__)

# Collection names, shared with the hosted store
LEDGER_ENTRIES = "ledgerEntries"
JOURNAL_ENTRIES = "journalEntries"
INVOICES = "invoices"
BILLS = "bills"
SETTINGS = "settings"

_ID_ALPHABET = string.ascii_letters + string.digits


class StoreError(Exception):
    """Raised when the backing document store fails a read or write."""


class DocumentNotFound(StoreError):
    pass


def generate_document_id(length: int = 20) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class DocumentStore(ABC):
    """Flat document collections. Returned documents carry their `id`."""

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any]) -> str:
        pass

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def where(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        pass


class InMemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = generate_document_id()
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        logger.debug(f"Added {collection}/{doc_id}")
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return {"id": doc_id, **copy.deepcopy(data)}

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._collection(collection)[doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFound(f"{collection}/{doc_id}")
        docs[doc_id].update(copy.deepcopy(changes))
        return self.get(collection, doc_id)

    def where(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        return [
            {"id": doc_id, **copy.deepcopy(data)}
            for doc_id, data in self._collection(collection).items()
            if data.get(field) == value
        ]

    def clear(self) -> None:
        self._collections.clear()
