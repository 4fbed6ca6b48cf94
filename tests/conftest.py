"""Shared fixtures: Telegram credentials, a recording mock transport, node context."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from tg_service.models import Credentials, NodeContext
from tg_service.telegram_client import TelegramClient

from helpers import BASE_URL, TOKEN, RecordingTransport


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(access_token=TOKEN, base_url=BASE_URL)


@pytest.fixture
def recorder() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_client(credentials: Credentials) -> Callable[[RecordingTransport], TelegramClient]:
    def _make(rec: RecordingTransport) -> TelegramClient:
        return TelegramClient(credentials, transport=rec.transport)

    return _make


@pytest.fixture
def node() -> NodeContext:
    """Node context without the attribution suffix, so bodies stay predictable."""

    return NodeContext(typeVersion=1.2, instanceId="inst-1", allowAttribution=False)
