from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .models import Credentials, NodeContext


class N8nExecuteRequest(BaseModel):
    """
    One node execution as the host sends it:
    {
      "items": [ { "json": {...}, "binary": {...} }, ... ],
      "parameters": { "resource": "message", "operation": "sendMessage", "chatId": "...", ... },
      "itemParameters": [ { "text": "..." }, ... ],   # optional, per item
      "continueOnFail": false,
      "credentials": { "baseUrl": "...", "accessToken": "..." },   # optional
      "node": { "typeVersion": 1.2, "instanceId": "...", "allowAttribution": true },
      "resumeUrl": "https://host/webhook-waiting/123"   # send and wait only
    }
    """

    model_config = ConfigDict(populate_by_name=True)

    items: list[dict[str, Any]] = Field(default_factory=list)
    parameters: dict[str, Any] = Field(default_factory=dict)
    item_parameters: list[dict[str, Any]] | None = Field(default=None, alias="itemParameters")
    continue_on_fail: bool = Field(default=False, alias="continueOnFail")
    credentials: Credentials | None = None
    node: NodeContext = Field(default_factory=NodeContext)
    resume_url: str | None = Field(default=None, alias="resumeUrl")


class N8nExecuteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[dict[str, Any]] = Field(default_factory=list)
    wait_till: datetime | None = Field(default=None, serialization_alias="waitTill")
    meta: dict[str, Any] = Field(default_factory=dict)


class N8nResumeResponse(BaseModel):
    items: list[dict[str, Any]] = Field(default_factory=list)
