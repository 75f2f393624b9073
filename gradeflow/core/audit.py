"""
Audit log sink.

Every grading mutation records an activity event. Delivery is best-effort:
a sink failure is logged and dropped, it never fails or rolls back the
mutation that produced the event.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Protocol

from postgrest.exceptions import APIError
from pydantic import BaseModel, Field
from supabase import Client

from gradeflow.core.config import settings
from gradeflow.core.database import get_supabase

logger = logging.getLogger(__name__)


class AuditLevel(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class AuditEvent(BaseModel):
    action: str
    description: str
    level: AuditLevel = AuditLevel.INFO
    actor_id: Optional[str] = None
    target_id: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UpstreamFailure(Exception):
    """The audit sink could not deliver an event."""


class AuditSink(Protocol):
    def record(self, event: AuditEvent) -> None: ...


class NullAuditSink:
    def record(self, event: AuditEvent) -> None:
        return None


class SupabaseAuditSink:
    def __init__(self, db: Client, table: str = "activity_logs"):
        self.db = db
        self.table = table

    def record(self, event: AuditEvent) -> None:
        row = {
            "user_id": event.actor_id,
            "action": event.action,
            "description": event.description,
            "level": event.level.value,
            "target_id": event.target_id,
            "metadata": event.metadata,
            "created_at": event.timestamp.isoformat(),
        }
        try:
            self.db.table(self.table).insert(row).execute()
        except APIError as exc:
            raise UpstreamFailure(f"activity log insert failed: {exc.message}") from exc


def emit_audit(sink: AuditSink, event: AuditEvent) -> bool:
    """Deliver ``event``; returns False when delivery failed."""
    try:
        sink.record(event)
        return True
    except Exception as exc:
        logger.warning("Dropped audit event %s for %s: %s", event.action, event.target_id, exc)
        return False


def get_audit_sink() -> AuditSink:
    if not settings.AUDIT_LOG_ENABLED:
        return NullAuditSink()
    return SupabaseAuditSink(get_supabase(), settings.AUDIT_LOG_TABLE)
