from __future__ import annotations

import logging

import httpx
from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import ValidationError

from tg_service.api_models import N8nExecuteRequest, N8nExecuteResponse, N8nResumeResponse
from tg_service.errors import NodeOperationError
from tg_service.executor import Execution, execute
from tg_service.n8n_adapter import item_from_n8n
from tg_service.parameters import NodeParameters
from tg_service.schema import describe_parameters
from tg_service.send_and_wait import resume_payload
from tg_service.settings import settings
from tg_service.telegram_client import TelegramApiError, TelegramClient
from tg_service.upload import BinaryStore


logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger("tg_service.app")

app = FastAPI(title="Telegram Node Service", version="0.1.0")


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def get_transport() -> httpx.AsyncBaseTransport | None:
    """Outbound transport; None means a regular network transport."""

    return None


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/parameters")
def parameters(
    resource: str = "message",
    operation: str = "sendMessage",
    binaryData: bool = False,
    replyMarkup: str | None = None,
    specifyKeyboard: str | None = None,
) -> dict:
    values = {"resource": resource, "operation": operation, "binaryData": binaryData}
    if replyMarkup:
        values["replyMarkup"] = replyMarkup
    if specifyKeyboard:
        values["specifyKeyboard"] = specifyKeyboard
    return describe_parameters(values)


# --- n8n-facing execution endpoint (the host posts items + resolved parameters) ---


@app.post("/execute", response_model=N8nExecuteResponse)
async def execute_api(
    req: N8nExecuteRequest,
    _: None = Depends(require_api_key),
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
) -> N8nExecuteResponse:
    try:
        items = [item_from_n8n(it) for it in req.items]
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid item: {e}") from e

    execution = Execution(
        items=items,
        raw_items=req.items,
        params=NodeParameters(req.parameters, req.item_parameters),
        node=req.node,
        continue_on_fail=req.continue_on_fail,
        resume_url=req.resume_url,
    )

    try:
        client = TelegramClient(req.credentials, transport=transport)
        result = await execute(execution, client, BinaryStore(transport=transport))
    except NodeOperationError as e:
        logger.warning("Execution aborted: %s", e.message)
        raise HTTPException(
            status_code=400,
            detail={"message": e.message, "description": e.description, "item_index": e.item_index},
        ) from e
    except TelegramApiError as e:
        logger.warning("Execution aborted by Telegram: %s", e.description)
        raise HTTPException(
            status_code=502,
            detail={"message": e.message, "description": e.description, "item_index": e.item_index},
        ) from e

    meta = {"count": len(result.items), "waiting": result.wait_till is not None}
    return N8nExecuteResponse(items=result.items, wait_till=result.wait_till, meta=meta)


@app.get("/webhook/send-and-wait", response_model=N8nResumeResponse)
def send_and_wait_webhook(approved: str | None = None) -> N8nResumeResponse:
    return N8nResumeResponse(items=[{"json": resume_payload(approved)}])
