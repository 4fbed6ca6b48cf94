from __future__ import annotations

import copy
import logging
from typing import Any, Mapping

from .errors import NodeOperationError
from .schema import ADDITIONAL_FIELDS, PARAMETERS, FieldSpec, find_spec


logger = logging.getLogger(__name__)

MISSING: Any = object()

# Sibling values the visibility predicates are keyed on
CONTEXT_KEYS = ("resource", "operation", "binaryData", "messageType", "type", "replyMarkup", "specifyKeyboard")


class NodeParameters:
    """
    Parameters the host already resolved for this node.

    `shared` applies to every item; `per_item[i]` (when given) overrides keys
    for item i. That mirrors n8n expressions that evaluate differently per item.
    """

    def __init__(self, shared: Mapping[str, Any] | None = None, per_item: list[Mapping[str, Any]] | None = None):
        self.shared = dict(shared or {})
        self.per_item = list(per_item or [])

    def values(self, index: int) -> dict[str, Any]:
        out = dict(self.shared)
        if 0 <= index < len(self.per_item):
            out.update(self.per_item[index] or {})
        return out

    def context(self, index: int) -> dict[str, Any]:
        raw = self.values(index)
        ctx: dict[str, Any] = {}
        for key in CONTEXT_KEYS:
            if key in raw:
                ctx[key] = raw[key]
                continue
            spec = find_spec(PARAMETERS, key, ctx)
            if spec is not None and spec.is_visible(ctx):
                ctx[key] = spec.default
        # declared types matter for the predicates too ("true" vs True)
        for key in ("binaryData",):
            if isinstance(ctx.get(key), str):
                ctx[key] = ctx[key].strip().lower() == "true"
        return ctx

    def get(self, name: str, index: int, default: Any = MISSING) -> Any:
        parts = name.split(".")
        raw = self.values(index)
        ctx = self.context(index)

        value = _dig(raw, parts)
        if value is not MISSING:
            spec = _spec_for(parts, ctx)
            return coerce_value(spec, value, index) if spec is not None else value

        if len(parts) == 1:
            spec = find_spec(PARAMETERS, name, ctx)
            if spec is not None:
                return copy.deepcopy(spec.default)

        if default is not MISSING:
            return default

        raise NodeOperationError(f'Could not get parameter "{name}"', item_index=index)


def _dig(values: Mapping[str, Any], parts: list[str]) -> Any:
    cur: Any = values
    for part in parts:
        if not isinstance(cur, Mapping) or part not in cur:
            return MISSING
        cur = cur[part]
    return cur


def _spec_for(parts: list[str], ctx: Mapping[str, Any]) -> FieldSpec | None:
    if len(parts) == 1:
        return find_spec(PARAMETERS, parts[0], ctx)
    if len(parts) == 2 and parts[0] == "additionalFields":
        return find_spec(ADDITIONAL_FIELDS, parts[1], ctx)
    return None


def coerce_value(spec: FieldSpec, value: Any, index: int) -> Any:
    """Apply the declared type of `spec` to a host-supplied value."""

    if spec.type == "number":
        value = _to_number(spec, value, index)
        if spec.min_value is not None and value < spec.min_value:
            raise NodeOperationError(
                f'Parameter "{spec.name}" must be at least {spec.min_value}', item_index=index
            )
        if spec.max_value is not None and value > spec.max_value:
            raise NodeOperationError(
                f'Parameter "{spec.name}" must be at most {spec.max_value}', item_index=index
            )
        return value

    if spec.type == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        raise NodeOperationError(f'Parameter "{spec.name}" must be a boolean', item_index=index)

    if spec.type == "options" and spec.options and value not in spec.options:
        allowed = ", ".join(spec.options)
        raise NodeOperationError(
            f'Parameter "{spec.name}" has invalid value "{value}" (allowed: {allowed})', item_index=index
        )

    return value


def _to_number(spec: FieldSpec, value: Any, index: int) -> int | float:
    if isinstance(value, bool):
        raise NodeOperationError(f'Parameter "{spec.name}" must be a number', item_index=index)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s)
        except ValueError:
            pass
        try:
            return float(s)
        except ValueError:
            pass
    raise NodeOperationError(f'Parameter "{spec.name}" must be a number', item_index=index)
