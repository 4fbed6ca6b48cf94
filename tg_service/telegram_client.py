from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import NodeOperationError
from .models import Credentials, MultipartUpload
from .settings import settings


logger = logging.getLogger(__name__)


class TelegramApiError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        description: str | None = None,
        status_code: int | None = None,
        error_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.description = description or message
        self.status_code = status_code
        self.error_code = error_code
        self.item_index: int | None = None


def credentials_from_settings() -> Credentials:
    if not settings.access_token:
        raise NodeOperationError("TG_ACCESS_TOKEN is not set and no credentials were sent")
    return Credentials(access_token=settings.access_token, base_url=settings.base_url)


def _raise_for_telegram(resp: httpx.Response, endpoint: str) -> Any:
    try:
        data = resp.json()
    except ValueError:
        data = None

    ok = isinstance(data, dict) and data.get("ok", True) is not False
    if resp.status_code < 400 and ok:
        return data

    description = None
    error_code = None
    if isinstance(data, dict):
        description = data.get("description")
        error_code = data.get("error_code")
    description = description or resp.text or f"HTTP {resp.status_code}"
    raise TelegramApiError(
        f"Telegram HTTP {resp.status_code} on {endpoint}: {description}",
        description=description,
        status_code=resp.status_code,
        error_code=error_code,
    )


class TelegramClient:
    """
    Thin wrapper around the Bot API: <baseUrl>/bot<token>/<endpoint>.

    `transport` is handed to httpx (tests pass an httpx.MockTransport).
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
        upload_timeout: float | None = None,
    ):
        self.credentials = credentials or credentials_from_settings()
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.timeout
        self.upload_timeout = upload_timeout if upload_timeout is not None else settings.upload_timeout

    @property
    def base_url(self) -> str:
        return self.credentials.base_url.rstrip("/")

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def api_request(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
        qs: dict[str, Any] | None = None,
        *,
        upload: MultipartUpload | None = None,
    ) -> Any:
        url = f"{self.base_url}/bot{self.credentials.access_token}/{endpoint}"
        kwargs: dict[str, Any] = {}
        if qs:
            kwargs["params"] = qs
        if upload is not None:
            kwargs["data"] = upload.fields
            kwargs["files"] = {upload.file_field: (upload.filename, upload.content, upload.content_type)}
            timeout = self.upload_timeout
        else:
            if body:
                kwargs["json"] = body
            timeout = self.timeout

        logger.debug("Telegram %s %s (multipart=%s)", method, endpoint, upload is not None)
        try:
            async with self._client(timeout) as client:
                resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            # str(e) may contain the URL, and with it the token
            raise TelegramApiError(
                f"Telegram request to {endpoint} failed: {type(e).__name__}",
                description=f"{type(e).__name__} while calling {endpoint}",
            ) from e

        return _raise_for_telegram(resp, endpoint)

    async def download_file(self, file_path: str) -> bytes:
        url = f"{self.base_url}/file/bot{self.credentials.access_token}/{file_path}"
        logger.debug("Telegram GET file %s", file_path)
        try:
            async with self._client(self.upload_timeout) as client:
                resp = await client.get(url)
        except httpx.HTTPError as e:
            raise TelegramApiError(
                f"Telegram file download failed: {type(e).__name__}",
                description=f"{type(e).__name__} while downloading {file_path}",
            ) from e

        if resp.status_code >= 400:
            _raise_for_telegram(resp, f"file/{file_path}")
        return resp.content
