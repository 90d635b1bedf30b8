from abc import ABC, abstractmethod
from collections import deque
from typing import List, Optional
from finerp.core.config import settings
from finerp.schemas.audit import AuditLogEntry
import logging

logger = logging.getLogger(__name__)

class AuditRepository(ABC):
    @abstractmethod
    def save(self, entry: AuditLogEntry):
        pass

    @abstractmethod
    def get_all(self) -> List[AuditLogEntry]:
        pass

    def for_tenant(self, tenant_id: str) -> List[AuditLogEntry]:
        return [entry for entry in self.get_all() if entry.tenant_id == tenant_id]

class InMemoryAuditRepository(AuditRepository):
    """Append-only ring of the most recent entries; the oldest drop off once `max_entries` is reached."""

    def __init__(self, max_entries: Optional[int] = None):
        self._storage = deque(maxlen=max_entries or settings.AUDIT_LOG_MAX_ENTRIES)

    @property
    def max_entries(self) -> int:
        return self._storage.maxlen

    def save(self, entry: AuditLogEntry):
        self._storage.append(entry)
        logger.debug(f"Audit {entry.action_type} {entry.method} {entry.endpoint} tenant={entry.tenant_id} status={entry.status.value}")

    def get_all(self) -> List[AuditLogEntry]:
        return list(self._storage)

    def clear(self):
        self._storage.clear()

# Global Accessor
audit_repo = InMemoryAuditRepository()
