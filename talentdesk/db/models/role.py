import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, JSON

from talentdesk.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Role(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=False)
    # Ordered list of {"resource": ..., "action": ...}
    permissions = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
