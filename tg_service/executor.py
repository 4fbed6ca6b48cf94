from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import NodeOperationError
from .models import FILE_OPERATIONS, Item, NodeContext, Operation, Resource
from .n8n_adapter import error_item
from .parameters import NodeParameters
from .request_builder import build_request, parse_selector
from .responses import map_response
from .send_and_wait import configure_wait_till, create_send_and_wait_body
from .telegram_client import TelegramApiError, TelegramClient
from .upload import BinaryStore, build_upload


logger = logging.getLogger(__name__)


@dataclass
class Execution:
    items: list[Item]
    raw_items: list[dict[str, Any]]
    params: NodeParameters
    node: NodeContext = field(default_factory=NodeContext)
    continue_on_fail: bool = False
    resume_url: str | None = None


@dataclass
class ExecutionResult:
    items: list[dict[str, Any]]
    wait_till: datetime | None = None


def error_message(error: Exception) -> str:
    """What continue-on-fail records: the remote description if any, else the message."""

    description = getattr(error, "description", None)
    if description:
        return str(description)
    return str(getattr(error, "message", None) or error)


def _is_send_and_wait(params: NodeParameters) -> bool:
    return (
        params.get("resource", 0, None) == Resource.MESSAGE.value
        and params.get("operation", 0, None) == Operation.SEND_AND_WAIT.value
    )


async def run_send_and_wait(execution: Execution, client: TelegramClient) -> ExecutionResult:
    """
    One sendMessage, then the whole execution waits for the resume webhook
    (or the wait limit). Input items go back untouched.
    """

    body = create_send_and_wait_body(execution.params, execution.node, execution.resume_url)
    await client.api_request("POST", "sendMessage", body)
    wait_till = configure_wait_till(execution.params)
    logger.info("Send and wait: execution waits until %s", wait_till.isoformat())
    return ExecutionResult(items=list(execution.raw_items), wait_till=wait_till)


async def process_item(
    execution: Execution,
    index: int,
    client: TelegramClient,
    store: BinaryStore,
) -> list[dict[str, Any]]:
    params = execution.params
    resource, operation = parse_selector(params, index)
    spec = build_request(params, index, execution.node)

    if operation in FILE_OPERATIONS and params.get("binaryData", index, False):
        spec.upload = await build_upload(
            spec.body,
            execution.items[index],
            operation=operation.value,
            property_name=params.get("binaryPropertyName", index),
            file_name=params.get("additionalFields.fileName", index, ""),
            index=index,
            store=store,
        )
        response = await client.api_request(spec.method, spec.endpoint, qs=spec.qs, upload=spec.upload)
    else:
        response = await client.api_request(spec.method, spec.endpoint, spec.body, spec.qs)

    return await map_response(
        response,
        resource=resource,
        operation=operation,
        params=params,
        index=index,
        client=client,
    )


async def execute(
    execution: Execution,
    client: TelegramClient,
    store: BinaryStore | None = None,
) -> ExecutionResult:
    """Items one at a time, in order; failures isolated per item when allowed."""

    if _is_send_and_wait(execution.params):
        return await run_send_and_wait(execution, client)

    store = store or BinaryStore()
    out: list[dict[str, Any]] = []
    for i in range(len(execution.items)):
        try:
            out.extend(await process_item(execution, i, client, store))
        except Exception as e:
            if not execution.continue_on_fail:
                if isinstance(e, (NodeOperationError, TelegramApiError)) and e.item_index is None:
                    e.item_index = i
                raise
            logger.warning("Item %d failed, continuing: %s", i, error_message(e))
            out.append(error_item(error_message(e), i))
    return ExecutionResult(items=out)
