import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String


def _utcnow():
    return datetime.now(timezone.utc)


def _new_id():
    return str(uuid.uuid4())


class UUIDPrimaryKeyMixin:
    id = Column(String(36), primary_key=True, default=_new_id)


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)


class UpdatedAtMixin:
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
