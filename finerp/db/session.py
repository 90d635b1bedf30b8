import logging
from finerp.core.config import settings
from finerp.db.store import DocumentStore, InMemoryDocumentStore

logger = logging.getLogger(__name__)


def create_store(backend: str) -> DocumentStore:
    if backend == "firestore":
        from finerp.db.firestore import FirestoreDocumentStore
        logger.info(f"Using Firestore document store (project={settings.FIRESTORE_PROJECT})")
        return FirestoreDocumentStore(project=settings.FIRESTORE_PROJECT)
    if backend != "memory":
        raise ValueError(f"Unknown STORE_BACKEND '{backend}'")
    logger.info("Using in-memory document store")
    return InMemoryDocumentStore()


# Global store instance
store = create_store(settings.STORE_BACKEND)


def get_store() -> DocumentStore:
    return store
