from __future__ import annotations

import base64
import mimetypes
from typing import Any

from .models import BinaryData, Item


def _pretty_size(size: int) -> str:
    if size < 1000:
        return f"{size} B"
    for unit, mul in (("kB", 1000), ("MB", 1000**2), ("GB", 1000**3)):
        if size < mul * 1000 or unit == "GB":
            return f"{size / mul:.3g} {unit}"
    return f"{size} B"


def item_from_n8n(item: dict) -> Item:
    """
    n8n item -> Item.

    Expected shape:
    {
      "json": {...},
      "binary": { "data": { data | id, fileName, mimeType, fileSize, fileExtension } }
    }
    """

    js = item.get("json") or {}
    bn = item.get("binary") or {}

    binary = {name: BinaryData.model_validate(value) for name, value in bn.items() if isinstance(value, dict)}
    return Item(json=dict(js), binary=binary)


def prepare_binary_data(content: bytes, file_name: str, mime_type: str | None = None) -> dict[str, Any]:
    """Bytes -> n8n binary property (base64 inline data)."""

    mime = mime_type or mimetypes.guess_type(file_name)[0] or "application/octet-stream"
    ext = file_name.rsplit(".", 1)[1].lower() if "." in file_name else None

    out: dict[str, Any] = {
        "data": base64.b64encode(content).decode("ascii"),
        "mimeType": mime,
        "fileName": file_name,
        "fileSize": _pretty_size(len(content)),
    }
    if ext:
        out["fileExtension"] = ext
    return out


def json_item(js: Any, index: int, *, binary: dict[str, Any] | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {"json": js if isinstance(js, dict) else {"data": js}, "pairedItem": {"item": index}}
    if binary:
        out["binary"] = binary
    return out


def json_items(data: Any, index: int) -> list[dict[str, Any]]:
    """Like n8n returnJsonArray + constructExecutionMetaData: a list fans out."""

    if isinstance(data, list):
        return [json_item(entry, index) for entry in data]
    return [json_item(data, index)]


def error_item(message: str, index: int) -> dict[str, Any]:
    return {"json": {"error": message}, "pairedItem": {"item": index}}
