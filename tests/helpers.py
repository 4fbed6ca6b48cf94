"""Mock Telegram transport and small builders shared by the tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx

from tg_service.parameters import NodeParameters


TOKEN = "123456:TEST-TOKEN"
BASE_URL = "https://api.telegram.org"


class RecordingTransport:
    """httpx.MockTransport handler that keeps every request it answers."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: list[httpx.Request] = []
        self.responder = responder or (lambda request: ok({"message_id": 1}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def endpoints(self) -> list[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]

    def json_bodies(self) -> list[Any]:
        return [json.loads(r.content) if r.content else None for r in self.requests]


def ok(result: Any) -> httpx.Response:
    return httpx.Response(200, json={"ok": True, "result": result})


def api_error(description: str, code: int = 400) -> httpx.Response:
    return httpx.Response(code, json={"ok": False, "error_code": code, "description": description})


def params(**shared: Any) -> NodeParameters:
    return NodeParameters(shared)
