from __future__ import annotations

from typing import Any

from .errors import NodeOperationError
from .models import Operation, Resource
from .n8n_adapter import json_item, json_items, prepare_binary_data
from .parameters import NodeParameters
from .telegram_client import TelegramClient


async def map_response(
    response: Any,
    *,
    resource: Resource,
    operation: Operation,
    params: NodeParameters,
    index: int,
    client: TelegramClient,
) -> list[dict[str, Any]]:
    """Telegram response -> output items paired with input `index`."""

    if resource is Resource.FILE and operation is Operation.GET:
        if params.get("download", index, False):
            return [await _download(response, index, client)]

    elif resource is Resource.CHAT and operation is Operation.ADMINISTRATORS:
        return json_items(list(response.get("result") or []), index)

    return json_items(response, index)


async def _download(response: dict[str, Any], index: int, client: TelegramClient) -> dict[str, Any]:
    file_path = (response.get("result") or {}).get("file_path")
    if not file_path:
        # Telegram leaves file_path out for files it will not serve (over 20 MB)
        raise NodeOperationError("Telegram returned no file_path, the file cannot be downloaded", item_index=index)
    content = await client.download_file(file_path)
    file_name = file_path.split("/")[-1]
    return json_item(response, index, binary={"data": prepare_binary_data(content, file_name)})
