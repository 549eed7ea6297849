"""models for DBs"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text

from .db import Base
from .timezone import now_local


class DeliveryLog(Base):
    """
    One handled build notification.

    Write-only audit trail; deployment correlation never reads it.
    """

    __tablename__ = "delivery_logs"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=now_local, index=True)
    message_id = Column(String, default="", index=True)
    project_id = Column(String, default="")
    build_id = Column(String, index=True)
    trigger_id = Column(String, default="")
    build_status = Column(String, index=True)
    outcome = Column(String, index=True)
    reason = Column(Text, default="")
    target_url = Column(String, default="")
    status_code = Column(Integer, nullable=True)
    deployment_id = Column(Integer, nullable=True)
    response_body = Column(Text, default="")
    error_message = Column(Text, nullable=True)
