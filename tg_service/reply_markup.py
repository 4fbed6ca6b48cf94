from __future__ import annotations

import json
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from .parameters import NodeParameters


class KeyboardButton(BaseModel):
    """text plus whatever the user configured (callback_data, url, web_app, ...)."""

    model_config = ConfigDict(extra="allow")

    text: str = ""


class ForceReply(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump()


class ReplyKeyboardRemove(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump()


class InlineKeyboard(BaseModel):
    rows: list[list[KeyboardButton]] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"inline_keyboard": [[b.model_dump() for b in row] for row in self.rows]}


class ReplyKeyboard(BaseModel):
    rows: list[list[KeyboardButton]] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return {"keyboard": [[b.model_dump() for b in row] for row in self.rows], **self.options}


class RawKeyboard(BaseModel):
    """Keyboard typed by the user as JSON. Not validated; Telegram judges it."""

    value: Any

    def to_wire(self) -> Any:
        return self.value


ReplyMarkup = Union[ForceReply, InlineKeyboard, ReplyKeyboard, ReplyKeyboardRemove, RawKeyboard]


def rows_from_collection(keyboard: dict[str, Any] | None) -> list[list[KeyboardButton]]:
    """
    n8n fixedCollection -> rows of buttons:
    {"rows": [{"row": {"buttons": [{"text": "A", "additionalFields": {...}}]}}]}
    """

    rows: list[list[KeyboardButton]] = []
    for row in (keyboard or {}).get("rows") or []:
        buttons = ((row or {}).get("row") or {}).get("buttons")
        if buttons is None:
            continue
        out_row = []
        for button in buttons:
            text = button.get("text")
            data = {"text": "" if text is None else str(text)}
            data.update(button.get("additionalFields") or {})
            out_row.append(KeyboardButton.model_validate(data))
        rows.append(out_row)
    return rows


def reply_markup_from_parameters(params: NodeParameters, index: int) -> ReplyMarkup | None:
    kind = params.get("replyMarkup", index)
    if kind == "none":
        return None

    if kind == "forceReply":
        return ForceReply.model_validate(params.get("forceReply", index, {}) or {})

    if kind == "replyKeyboardRemove":
        return ReplyKeyboardRemove.model_validate(params.get("replyKeyboardRemove", index, {}) or {})

    if params.get("specifyKeyboard", index) == "json":
        return RawKeyboard(value=params.get("keyboardJson", index, ""))

    if kind == "inlineKeyboard":
        return InlineKeyboard(rows=rows_from_collection(params.get("inlineKeyboard", index, {})))

    return ReplyKeyboard(
        rows=rows_from_collection(params.get("replyKeyboard", index, {})),
        options=params.get("replyKeyboardOptions", index, {}) or {},
    )


def reply_markup_form_value(value: Any) -> str:
    """Multipart fields are flat text: nested markup goes as one JSON string."""

    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
