from __future__ import annotations

import html
from datetime import datetime, timedelta, timezone
from typing import Any

from .additional_fields import ATTRIBUTION_TEXT, attribution_link
from .errors import NodeOperationError
from .models import NodeContext
from .parameters import NodeParameters


# What n8n stores for "wait until resumed, no limit"
WAIT_INDEFINITELY = datetime(3000, 1, 1, tzinfo=timezone.utc)

APPROVE_LABEL = "✅ Approve"
DISAPPROVE_LABEL = "❌ Decline"

_UNIT_SECONDS = {"minutes": 60, "hours": 3600, "days": 86400}


def _button_url(resume_url: str, value: str) -> str:
    sep = "&" if "?" in resume_url else "?"
    return f"{resume_url}{sep}approved={value}"


def _message_text(params: NodeParameters) -> str:
    message = str(params.get("message", 0, "") or "").strip()
    message = message.replace("\\n", "\n").replace("<br>", "\n")
    return html.escape(message)


def response_options(params: NodeParameters) -> list[dict[str, str]]:
    """Buttons as (label, approved value) pairs, in display order."""

    response_type = params.get("responseType", 0)
    if response_type in ("freeText", "customForm"):
        label = params.get("options.messageButtonLabel", 0, "Respond") or "Respond"
        return [{"label": label, "value": "true"}]

    approval = params.get("approvalOptions.values", 0, {}) or {}
    approve = html.escape(approval.get("approveLabel") or APPROVE_LABEL)
    if approval.get("approvalType") == "double":
        disapprove = html.escape(approval.get("disapproveLabel") or DISAPPROVE_LABEL)
        return [{"label": disapprove, "value": "false"}, {"label": approve, "value": "true"}]
    return [{"label": approve, "value": "true"}]


def create_send_and_wait_body(params: NodeParameters, node: NodeContext, resume_url: str | None) -> dict[str, Any]:
    if not resume_url:
        raise NodeOperationError("Send and wait needs the execution's resume URL", item_index=0)

    text = _message_text(params)
    options = params.get("options", 0, {}) or {}
    if options.get("appendAttribution") is not False and node.allow_attribution:
        text = f"{text}\n\n_{ATTRIBUTION_TEXT}_[n8n]({attribution_link(node.instance_id)})"

    free_form = params.get("responseType", 0) in ("freeText", "customForm")
    buttons = []
    for opt in response_options(params):
        url = resume_url if free_form else _button_url(resume_url, opt["value"])
        buttons.append({"text": opt["label"], "url": url})

    return {
        "chat_id": params.get("chatId", 0),
        "text": text,
        "disable_web_page_preview": True,
        "parse_mode": "Markdown",
        "reply_markup": {"inline_keyboard": [buttons]},
    }


def configure_wait_till(params: NodeParameters, now: datetime | None = None) -> datetime:
    limit = params.get("options.limitWaitTime.values", 0, {}) or {}
    if not limit:
        return WAIT_INDEFINITELY

    try:
        if limit.get("limitType", "afterTimeInterval") == "afterTimeInterval":
            amount = float(limit.get("resumeAmount", 45))
            seconds = amount * _UNIT_SECONDS.get(limit.get("resumeUnit", "minutes"), 1)
            return (now or datetime.now(timezone.utc)) + timedelta(seconds=seconds)

        raw = str(limit.get("maxDateAndTime") or "")
        wait_till = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (TypeError, ValueError, OverflowError) as e:
        raise NodeOperationError("Could not configure Limit Wait Time", item_index=0) from e

    if wait_till.tzinfo is None:
        wait_till = wait_till.replace(tzinfo=timezone.utc)
    return wait_till


def resume_payload(approved: str | None) -> dict[str, Any]:
    """What the resume webhook hands back to the workflow."""

    return {"data": {"approved": (approved or "").lower() == "true"}}
