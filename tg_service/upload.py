from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import httpx

from .errors import NodeOperationError
from .models import BinaryData, Item, MultipartUpload, file_field_name
from .reply_markup import reply_markup_form_value
from .settings import settings


logger = logging.getLogger(__name__)


class BinaryStore:
    """
    Access to item binaries. Inline data is base64; binaries with an `id`
    live in the host's store, served at <TG_BINARY_DATA_URL>/<id>.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url if base_url is not None else settings.binary_data_url
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.upload_timeout

    async def read(self, binary: BinaryData, index: int) -> bytes:
        if binary.id:
            return await self._fetch(binary.id, index)
        if binary.data is None:
            raise NodeOperationError("Binary property has neither data nor id", item_index=index)
        try:
            return base64.b64decode(binary.data, validate=False)
        except (binascii.Error, ValueError) as e:
            raise NodeOperationError("Binary data is not valid base64", item_index=index) from e

    async def _fetch(self, binary_id: str, index: int) -> bytes:
        if not self.base_url:
            raise NodeOperationError(
                f'Binary data "{binary_id}" is stored externally but TG_BINARY_DATA_URL is not set',
                item_index=index,
            )
        url = f"{self.base_url.rstrip('/')}/{binary_id}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.get(url)
        if resp.status_code >= 400:
            raise NodeOperationError(
                f'Could not read binary data "{binary_id}" (HTTP {resp.status_code})', item_index=index
            )
        return resp.content


def form_value(value: Any) -> str:
    """Multipart can only carry text: JS-style booleans, JSON for nested values."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if value is None:
        return ""
    return str(value)


def resolve_filename(binary: BinaryData, override: str | None, operation: str, index: int) -> str:
    if override:
        return override
    if binary.file_name:
        return binary.file_name
    raise NodeOperationError(
        f"File name is needed to {operation}. Make sure the property that holds the binary data "
        "has the file name property set or set it manually in the node using the File Name parameter "
        "under Additional Fields.",
        item_index=index,
    )


async def build_upload(
    body: dict[str, Any],
    item: Item,
    *,
    operation: str,
    property_name: str,
    file_name: str | None,
    index: int,
    store: BinaryStore,
) -> MultipartUpload:
    """
    Multipart body for a send* operation fed from binary item data: every body
    field as text, plus the file under "photo" / "document" / ...
    """

    binary = item.binary.get(property_name)
    if binary is None:
        raise NodeOperationError(
            f'This operation expects the node\'s input data to contain a binary file "{property_name}", '
            "but none was found",
            item_index=index,
        )

    filename = resolve_filename(binary, file_name, operation, index)
    content = await store.read(binary, index)

    fields = dict(body)
    fields["disable_notification"] = fields.get("disable_notification") or False
    if "reply_markup" in fields:
        fields["reply_markup"] = reply_markup_form_value(fields["reply_markup"])

    file_field = file_field_name(operation)
    # the body may already hold the (empty) string field for the file
    fields.pop(file_field, None)

    logger.debug("Uploading %s (%d bytes) as %s", filename, len(content), file_field)
    return MultipartUpload(
        fields={k: form_value(v) for k, v in fields.items()},
        file_field=file_field,
        filename=filename,
        content=content,
        content_type=binary.mime_type,
    )
