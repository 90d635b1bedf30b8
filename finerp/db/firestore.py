"""Document store backed by Google Cloud Firestore."""
from typing import Any, Dict, List, Optional
import logging

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from finerp.db.store import DocumentNotFound, DocumentStore, StoreError

logger = logging.getLogger(__name__)


class FirestoreDocumentStore(DocumentStore):
    def __init__(self, project: Optional[str] = None, client: Optional[firestore.Client] = None):
        self._client = client or firestore.Client(project=project)

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        try:
            _, ref = self._client.collection(collection).add(data)
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to add document to {collection}: {e}") from e
        return ref.id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = self._client.collection(collection).document(doc_id).get()
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}: {e}") from e
        if not snapshot.exists:
            return None
        return {"id": snapshot.id, **snapshot.to_dict()}

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        try:
            self._client.collection(collection).document(doc_id).set(data)
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to write {collection}/{doc_id}: {e}") from e

    def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        try:
            self._client.collection(collection).document(doc_id).update(changes)
        except gcp_exceptions.NotFound as e:
            raise DocumentNotFound(f"{collection}/{doc_id}") from e
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to update {collection}/{doc_id}: {e}") from e
        return self.get(collection, doc_id)

    def where(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        query = self._client.collection(collection).where(filter=FieldFilter(field, "==", value))
        try:
            return [{"id": snap.id, **snap.to_dict()} for snap in query.stream()]
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to query {collection}: {e}") from e
