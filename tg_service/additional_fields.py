from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

from .models import NodeContext, Operation
from .parameters import NodeParameters, coerce_value
from .reply_markup import reply_markup_from_parameters
from .schema import ADDITIONAL_FIELDS, find_spec
from .settings import settings


logger = logging.getLogger(__name__)

ATTRIBUTION_TEXT = "This message was sent automatically with "

_URL_RE = re.compile(r"(https?|ftp|file)://\S+|www\.\S+|\S+\.\S+")


def attribution_link(instance_id: str | None, base_url: str | None = None) -> str:
    campaign = quote("n8n-nodes-base.telegram", safe="")
    if instance_id:
        campaign += f"_{instance_id}"
    base = base_url or settings.attribution_base_url
    return f"{base}?utm_source=n8n-internal&utm_medium=powered_by&utm_campaign={campaign}"


def append_attribution(text: str, parse_mode: str | None, link: str) -> str:
    if parse_mode == "Markdown":
        return f"{text}\n\n_{ATTRIBUTION_TEXT}_[n8n]({link})"
    if parse_mode == "HTML":
        return f'{text}\n\n<em>{ATTRIBUTION_TEXT}</em><a href="{link}" target="_blank">n8n</a>'
    return text


def visible_additional_fields(params: NodeParameters, index: int) -> dict[str, Any]:
    """
    The item's additionalFields, reduced to the ones declared for the current
    resource/operation and converted to their declared types.
    """

    raw = params.get("additionalFields", index, {}) or {}
    ctx = params.context(index)

    out: dict[str, Any] = {}
    for name, value in raw.items():
        spec = find_spec(ADDITIONAL_FIELDS, name, ctx)
        if spec is None or not spec.is_visible(ctx):
            logger.debug("Dropping additional field %r for %s:%s", name, ctx.get("resource"), ctx.get("operation"))
            continue
        out[name] = coerce_value(spec, value, index)
    return out


def wire_fields(fields: dict[str, Any], params: NodeParameters, index: int) -> dict[str, Any]:
    ctx = params.context(index)
    out = {}
    for name, value in fields.items():
        spec = find_spec(ADDITIONAL_FIELDS, name, ctx)
        if spec is not None and not spec.wire:
            continue
        out[name] = value
    return out


def add_additional_fields(
    body: dict[str, Any],
    params: NodeParameters,
    index: int,
    node: NodeContext | None = None,
) -> None:
    """Merge additional fields and the reply markup into `body` in place."""

    operation = params.get("operation", index)
    fields = visible_additional_fields(params, index)

    if operation == Operation.SEND_MESSAGE.value:
        _send_message_rules(body, fields, node or NodeContext())

    body.update(wire_fields(fields, params, index))

    markup = reply_markup_from_parameters(params, index)
    if markup is not None:
        body["reply_markup"] = markup.to_wire()


def _send_message_rules(body: dict[str, Any], fields: dict[str, Any], node: NodeContext) -> None:
    if "appendAttribution" not in fields and node.type_version >= 1.1:
        fields["appendAttribution"] = True

    if not fields.get("parse_mode"):
        fields["parse_mode"] = "Markdown"

    text = str(body.get("text") or "")
    if not _URL_RE.search(text):
        # an explicit disable_web_page_preview in `fields` still wins
        body["disable_web_page_preview"] = True

    if fields.get("appendAttribution") and node.allow_attribution:
        body["text"] = append_attribution(text, fields["parse_mode"], attribution_link(node.instance_id))
