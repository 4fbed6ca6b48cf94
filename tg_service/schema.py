"""
Declarative parameter table of the Telegram node.

Each entry says what type a parameter has, its default, and under which
sibling values it is visible (`show`: every key must match one of the listed
values, `hide`: no key may match). The same predicate drives the defaults of
the field extractor, the filtering of additional fields, and
`describe_parameters` for configuration renderers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping


FieldType = Literal["string", "number", "boolean", "options", "collection", "fixedCollection", "json"]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: FieldType
    default: Any = None
    show: Mapping[str, tuple[Any, ...]] = field(default_factory=dict)
    hide: Mapping[str, tuple[Any, ...]] = field(default_factory=dict)
    options: tuple[str, ...] = ()
    min_value: float | None = None
    max_value: float | None = None
    required: bool = False
    # False for values that steer the node but are never sent to Telegram
    wire: bool = True

    def is_visible(self, values: Mapping[str, Any]) -> bool:
        for key, allowed in self.show.items():
            if values.get(key) not in allowed:
                return False
        for key, hidden in self.hide.items():
            if values.get(key) in hidden:
                return False
        return True


def _on(*operations: str, resource: str = "message", **extra: tuple[Any, ...]) -> dict[str, tuple[Any, ...]]:
    return {"operation": operations, "resource": (resource,), **extra}


FILE_OPS = ("sendAnimation", "sendAudio", "sendDocument", "sendPhoto", "sendVideo", "sendSticker")

CHAT_ID_OPS = (
    "administrators",
    "deleteMessage",
    "get",
    "leave",
    "member",
    "pinChatMessage",
    "setDescription",
    "setTitle",
    "sendAnimation",
    "sendAudio",
    "sendChatAction",
    "sendContact",
    "sendDocument",
    "sendLocation",
    "sendMessage",
    "sendMediaGroup",
    "sendPhoto",
    "sendPoll",
    "sendSticker",
    "sendVideo",
    "unpinChatMessage",
    "sendAndWait",
)

REPLY_MARKUP_OPS = (
    "sendAnimation",
    "sendDocument",
    "sendMessage",
    "sendContact",
    "sendPoll",
    "sendPhoto",
    "sendSticker",
    "sendVideo",
    "sendAudio",
    "sendLocation",
)

PARSE_MODES = ("Markdown", "MarkdownV2", "HTML")

CHAT_ACTIONS = (
    "find_location",
    "record_audio",
    "record_video",
    "record_video_note",
    "typing",
    "upload_audio",
    "upload_document",
    "upload_photo",
    "upload_video",
    "upload_video_note",
)


PARAMETERS: tuple[FieldSpec, ...] = (
    FieldSpec("resource", "string", "message"),
    FieldSpec("operation", "string", "sendMessage"),
    # chat / message
    FieldSpec(
        "chatId",
        "string",
        "",
        show={"operation": CHAT_ID_OPS, "resource": ("chat", "message")},
        required=True,
    ),
    FieldSpec(
        "chatId",
        "string",
        "",
        show=_on("editMessageText", messageType=("message",)),
        required=True,
    ),
    FieldSpec("messageId", "string", "", show=_on("deleteMessage", "pinChatMessage", "unpinChatMessage"), required=True),
    FieldSpec("messageId", "string", "", show=_on("editMessageText", messageType=("message",)), required=True),
    FieldSpec(
        "inlineMessageId",
        "string",
        "",
        show=_on("editMessageText", messageType=("inlineMessage",)),
        required=True,
    ),
    FieldSpec(
        "messageType",
        "options",
        "message",
        show=_on("editMessageText"),
        options=("inlineMessage", "message"),
    ),
    # chat
    FieldSpec("userId", "string", "", show=_on("member", resource="chat"), required=True),
    FieldSpec("description", "string", "", show=_on("setDescription", resource="chat"), required=True),
    FieldSpec("title", "string", "", show=_on("setTitle", resource="chat"), required=True),
    # callback
    FieldSpec(
        "queryId",
        "string",
        "",
        show=_on("answerQuery", "answerInlineQuery", resource="callback"),
        required=True,
    ),
    FieldSpec("results", "string", "", show=_on("answerInlineQuery", resource="callback"), required=True),
    # file
    FieldSpec("fileId", "string", "", show=_on("get", resource="file"), required=True),
    FieldSpec("download", "boolean", True, show=_on("get", resource="file")),
    # uploads
    FieldSpec("binaryData", "boolean", False, show=_on(*FILE_OPS)),
    FieldSpec("binaryPropertyName", "string", "data", show=_on(*FILE_OPS, binaryData=(True,))),
    FieldSpec("file", "string", "", show=_on(*FILE_OPS, binaryData=(False,))),
    # message
    FieldSpec("action", "options", "typing", show=_on("sendChatAction"), options=CHAT_ACTIONS),
    FieldSpec("phone_number", "string", "", show=_on("sendContact"), required=True),
    FieldSpec("first_name", "string", "", show=_on("sendContact"), required=True),
    FieldSpec("last_name", "string", "", show=_on("sendContact")),
    FieldSpec("vcard", "string", "", show=_on("sendContact")),
    FieldSpec("latitude", "number", 0.0, show=_on("sendLocation"), min_value=-90, max_value=90),
    FieldSpec("longitude", "number", 0.0, show=_on("sendLocation"), min_value=-180, max_value=180),
    FieldSpec("media", "fixedCollection", {}, show=_on("sendMediaGroup")),
    FieldSpec("text", "string", "", show=_on("editMessageText", "sendMessage"), required=True),
    FieldSpec("question", "string", "", show=_on("sendPoll"), required=True),
    FieldSpec("options", "fixedCollection", {}, show=_on("sendPoll"), required=True),
    FieldSpec("type", "options", "regular", show=_on("sendPoll"), options=("regular", "quiz")),
    FieldSpec("is_anonymous", "boolean", True, show=_on("sendPoll")),
    FieldSpec("allows_multiple_answers", "boolean", False, show=_on("sendPoll", type=("regular",))),
    FieldSpec("correct_option_id", "number", 0, show=_on("sendPoll", type=("quiz",)), min_value=0),
    FieldSpec("explanation", "string", "", show=_on("sendPoll", type=("quiz",))),
    FieldSpec("open_period", "number", 0, show=_on("sendPoll")),
    FieldSpec("close_date", "number", 0, show=_on("sendPoll")),
    FieldSpec("is_closed", "boolean", False, show=_on("sendPoll")),
    # reply markup
    FieldSpec(
        "replyMarkup",
        "options",
        "none",
        show=_on("editMessageText"),
        options=("none", "inlineKeyboard"),
    ),
    FieldSpec(
        "replyMarkup",
        "options",
        "none",
        show=_on(*REPLY_MARKUP_OPS),
        options=("forceReply", "inlineKeyboard", "none", "replyKeyboard", "replyKeyboardRemove"),
    ),
    FieldSpec("forceReply", "collection", {}, show={"replyMarkup": ("forceReply",), "resource": ("message",)}),
    FieldSpec(
        "specifyKeyboard",
        "options",
        "ui",
        show={"replyMarkup": ("inlineKeyboard", "replyKeyboard"), "resource": ("message",)},
        options=("ui", "json"),
    ),
    FieldSpec(
        "keyboardJson",
        "json",
        "",
        show={
            "replyMarkup": ("inlineKeyboard", "replyKeyboard"),
            "resource": ("message",),
            "specifyKeyboard": ("json",),
        },
    ),
    FieldSpec(
        "inlineKeyboard",
        "fixedCollection",
        {},
        show={"replyMarkup": ("inlineKeyboard",), "resource": ("message",), "specifyKeyboard": ("ui",)},
    ),
    FieldSpec(
        "replyKeyboard",
        "fixedCollection",
        {},
        show={"replyMarkup": ("replyKeyboard",), "specifyKeyboard": ("ui",)},
    ),
    FieldSpec(
        "replyKeyboardOptions",
        "collection",
        {},
        show={"replyMarkup": ("replyKeyboard",), "specifyKeyboard": ("ui",)},
    ),
    FieldSpec("replyKeyboardRemove", "collection", {}, show={"replyMarkup": ("replyKeyboardRemove",)}),
    FieldSpec(
        "additionalFields",
        "collection",
        {},
        show={
            "operation": (
                "answerQuery",
                "answerInlineQuery",
                "pinChatMessage",
                "editMessageText",
                "sendAnimation",
                "sendAudio",
                "sendContact",
                "sendDocument",
                "sendLocation",
                "sendMessage",
                "sendMediaGroup",
                "sendPhoto",
                "sendPoll",
                "sendSticker",
                "sendVideo",
            ),
        },
    ),
    # send and wait
    FieldSpec("message", "string", "", show=_on("sendAndWait"), required=True),
    FieldSpec(
        "responseType",
        "options",
        "approval",
        show=_on("sendAndWait"),
        options=("approval", "freeText", "customForm"),
    ),
    FieldSpec("approvalOptions", "fixedCollection", {}, show=_on("sendAndWait")),
    FieldSpec("options", "collection", {}, show=_on("sendAndWait")),
)


_MESSAGE = {"resource": ("message",)}

ADDITIONAL_FIELDS: tuple[FieldSpec, ...] = (
    # callback:answerQuery / callback:answerInlineQuery
    FieldSpec("cache_time", "number", 0, show={"resource": ("callback",)}, min_value=0),
    FieldSpec("show_alert", "boolean", False, show={"resource": ("callback",)}),
    FieldSpec("text", "string", "", show={"resource": ("callback",)}),
    FieldSpec("url", "string", "", show={"resource": ("callback",)}),
    # message
    FieldSpec("appendAttribution", "boolean", True, show=_on("sendMessage"), wire=False),
    FieldSpec("caption", "string", "", show=_on("sendAnimation", "sendAudio", "sendDocument", "sendPhoto", "sendVideo")),
    FieldSpec("disable_notification", "boolean", False, show=_MESSAGE, hide={"operation": ("editMessageText",)}),
    FieldSpec("disable_web_page_preview", "boolean", False, show=_on("editMessageText", "sendMessage")),
    FieldSpec("duration", "number", 0, show=_on("sendAnimation", "sendAudio", "sendVideo"), min_value=0),
    FieldSpec("fileName", "string", "", show=_on(*FILE_OPS, binaryData=(True,)), wire=False),
    FieldSpec("height", "number", 0, show=_on("sendAnimation", "sendVideo"), min_value=0),
    FieldSpec(
        "parse_mode",
        "options",
        "HTML",
        show=_on(
            "editMessageText",
            "sendAnimation",
            "sendAudio",
            "sendMessage",
            "sendPhoto",
            "sendVideo",
            "sendDocument",
        ),
        options=PARSE_MODES,
    ),
    FieldSpec("performer", "string", "", show=_on("sendAudio")),
    FieldSpec("reply_to_message_id", "number", 0, show=_MESSAGE, hide={"operation": ("editMessageText",)}),
    FieldSpec(
        "message_thread_id",
        "number",
        0,
        show=_on(
            "sendAnimation",
            "sendAudio",
            "sendDocument",
            "sendLocation",
            "sendMediaGroup",
            "sendMessage",
            "sendContact",
            "sendPhoto",
            "sendSticker",
            "sendVideo",
        ),
    ),
    FieldSpec("title", "string", "", show=_on("sendAudio")),
    FieldSpec("thumb", "string", "", show=_on("sendAnimation", "sendAudio", "sendDocument", "sendVideo")),
    FieldSpec("width", "number", 0, show=_on("sendAnimation", "sendVideo"), min_value=0),
)


def find_spec(specs: Iterable[FieldSpec], name: str, values: Mapping[str, Any]) -> FieldSpec | None:
    """The visible spec called `name`, else the first one with that name."""

    fallback = None
    for spec in specs:
        if spec.name != name:
            continue
        if spec.is_visible(values):
            return spec
        if fallback is None:
            fallback = spec
    return fallback


def describe_parameters(values: Mapping[str, Any]) -> dict[str, Any]:
    """Parameters (and additional fields) visible for the given sibling values."""

    params = []
    seen: set[str] = set()
    for spec in PARAMETERS:
        if spec.name in seen or not spec.is_visible(values):
            continue
        seen.add(spec.name)
        params.append(_describe(spec))

    additional = []
    if "additionalFields" in seen:
        additional = [_describe(spec) for spec in ADDITIONAL_FIELDS if spec.is_visible(values)]
    return {"parameters": params, "additionalFields": additional}


def _describe(spec: FieldSpec) -> dict[str, Any]:
    out: dict[str, Any] = {"name": spec.name, "type": spec.type, "default": spec.default}
    if spec.options:
        out["options"] = list(spec.options)
    if spec.required:
        out["required"] = True
    return out
