"""Request/response schemas"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PubSubMessage(BaseModel):
    """
    Minimal model for a Pub/Sub push message.
    Only fields used by this app are included.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    data: str = ""
    attributes: dict[str, str] = Field(default_factory=dict)
    message_id: str = Field("", alias="messageId")

    def decode_json(self) -> Any:
        """Base64-decode ``data`` and parse it as JSON; raises ``ValueError``."""
        try:
            raw = base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"message data is not valid base64: {exc}") from exc
        return json.loads(raw.decode("utf-8"))


class PubSubPushEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: PubSubMessage
    subscription: Optional[str] = None


class DeliveryOut(BaseModel):
    id: int
    created_at: Optional[str] = None
    build_id: str = ""
    build_status: str = ""
    trigger_id: str = ""
    outcome: str = ""
    reason: str = ""
    target_url: str = ""
    status_code: Optional[int] = None
    deployment_id: Optional[int] = None
