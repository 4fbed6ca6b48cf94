"""
(resource, operation) -> Bot API endpoint + body.

Every builder pulls parameters named after the Bot API fields and returns a
fresh RequestSpec; optional fields only appear when they carry a value.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from .additional_fields import add_additional_fields, visible_additional_fields, wire_fields
from .errors import NodeOperationError
from .models import NodeContext, Operation, RequestSpec, Resource, file_field_name
from .parameters import NodeParameters


Builder = Callable[[NodeParameters, int, NodeContext], RequestSpec]


def _extra_fields(p: NodeParameters, i: int) -> dict[str, Any]:
    return wire_fields(visible_additional_fields(p, i), p, i)


# callback


def _answer_query(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body = {"callback_query_id": p.get("queryId", i)}
    body.update(_extra_fields(p, i))
    return RequestSpec("answerCallbackQuery", body=body)


def _answer_inline_query(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body = {"inline_query_id": p.get("queryId", i), "results": p.get("results", i)}
    body.update(_extra_fields(p, i))
    return RequestSpec("answerInlineQuery", body=body)


# chat


def _chat_only(endpoint: str) -> Builder:
    def build(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
        return RequestSpec(endpoint, body={"chat_id": p.get("chatId", i)})

    return build


def _chat_member(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    return RequestSpec("getChatMember", body={"chat_id": p.get("chatId", i), "user_id": p.get("userId", i)})


def _chat_set_description(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body = {"chat_id": p.get("chatId", i), "description": p.get("description", i)}
    return RequestSpec("setChatDescription", body=body)


def _chat_set_title(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    return RequestSpec("setChatTitle", body={"chat_id": p.get("chatId", i), "title": p.get("title", i)})


# file


def _file_get(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    return RequestSpec("getFile", body={"file_id": p.get("fileId", i)})


# message


def _chat_and_message(p: NodeParameters, i: int) -> dict[str, Any]:
    return {"chat_id": p.get("chatId", i), "message_id": p.get("messageId", i)}


def _edit_message_text(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body: dict[str, Any] = {}
    if p.get("messageType", i) == "inlineMessage":
        body["inline_message_id"] = p.get("inlineMessageId", i)
    else:
        body.update(_chat_and_message(p, i))
    body["text"] = p.get("text", i)
    add_additional_fields(body, p, i, node)
    return RequestSpec("editMessageText", body=body)


def _delete_message(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    return RequestSpec("deleteMessage", body=_chat_and_message(p, i))


def _pin_chat_message(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body = _chat_and_message(p, i)
    if p.get("additionalFields.disable_notification", i, False):
        body["disable_notification"] = True
    return RequestSpec("pinChatMessage", body=body)


def _unpin_chat_message(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    return RequestSpec("unpinChatMessage", body=_chat_and_message(p, i))


def _send_file(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    operation = Operation(p.get("operation", i))
    body = {"chat_id": p.get("chatId", i), file_field_name(operation): p.get("file", i, "")}
    add_additional_fields(body, p, i, node)
    return RequestSpec(operation.value, body=body)


def _send_chat_action(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    return RequestSpec("sendChatAction", body={"chat_id": p.get("chatId", i), "action": p.get("action", i)})


def _send_contact(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body = {
        "chat_id": p.get("chatId", i),
        "phone_number": p.get("phone_number", i),
        "first_name": p.get("first_name", i),
    }
    last_name = p.get("last_name", i)
    if last_name:
        body["last_name"] = last_name
    vcard = p.get("vcard", i)
    if vcard:
        body["vcard"] = vcard
    add_additional_fields(body, p, i, node)
    return RequestSpec("sendContact", body=body)


def _send_location(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body = {
        "chat_id": p.get("chatId", i),
        "latitude": p.get("latitude", i),
        "longitude": p.get("longitude", i),
    }
    add_additional_fields(body, p, i, node)
    return RequestSpec("sendLocation", body=body)


def _send_message(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body = {"chat_id": p.get("chatId", i), "text": p.get("text", i)}
    add_additional_fields(body, p, i, node)
    return RequestSpec("sendMessage", body=body)


def _send_media_group(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body: dict[str, Any] = {"chat_id": p.get("chatId", i)}
    body.update(_extra_fields(p, i))

    media = []
    for entry in (p.get("media", i) or {}).get("media") or []:
        entry = dict(entry)
        extra = entry.pop("additionalFields", None)
        if extra:
            entry.update(extra)
        media.append(entry)
    body["media"] = media
    return RequestSpec("sendMediaGroup", body=body)


def _send_poll(p: NodeParameters, i: int, node: NodeContext) -> RequestSpec:
    body: dict[str, Any] = {"chat_id": p.get("chatId", i), "question": p.get("question", i)}

    options = p.get("options", i) or {}
    if options.get("option"):
        body["options"] = json.dumps([option.get("text") for option in options["option"]], ensure_ascii=False)

    poll_type = p.get("type", i)
    if poll_type == "quiz":
        body["type"] = "quiz"
        body["correct_option_id"] = p.get("correct_option_id", i)
        explanation = p.get("explanation", i)
        if explanation:
            body["explanation"] = explanation

    body["is_anonymous"] = p.get("is_anonymous", i)

    if poll_type == "regular" and p.get("allows_multiple_answers", i):
        body["allows_multiple_answers"] = True

    open_period = p.get("open_period", i)
    if open_period > 0:
        body["open_period"] = open_period

    close_date = p.get("close_date", i)
    if close_date > 0:
        body["close_date"] = close_date

    if p.get("is_closed", i):
        body["is_closed"] = True

    add_additional_fields(body, p, i, node)
    return RequestSpec("sendPoll", body=body)


_BUILDERS: dict[tuple[Resource, Operation], Builder] = {
    (Resource.CALLBACK, Operation.ANSWER_QUERY): _answer_query,
    (Resource.CALLBACK, Operation.ANSWER_INLINE_QUERY): _answer_inline_query,
    (Resource.CHAT, Operation.GET): _chat_only("getChat"),
    (Resource.CHAT, Operation.ADMINISTRATORS): _chat_only("getChatAdministrators"),
    (Resource.CHAT, Operation.LEAVE): _chat_only("leaveChat"),
    (Resource.CHAT, Operation.MEMBER): _chat_member,
    (Resource.CHAT, Operation.SET_DESCRIPTION): _chat_set_description,
    (Resource.CHAT, Operation.SET_TITLE): _chat_set_title,
    (Resource.FILE, Operation.GET): _file_get,
    (Resource.MESSAGE, Operation.EDIT_MESSAGE_TEXT): _edit_message_text,
    (Resource.MESSAGE, Operation.DELETE_MESSAGE): _delete_message,
    (Resource.MESSAGE, Operation.PIN_CHAT_MESSAGE): _pin_chat_message,
    (Resource.MESSAGE, Operation.UNPIN_CHAT_MESSAGE): _unpin_chat_message,
    (Resource.MESSAGE, Operation.SEND_ANIMATION): _send_file,
    (Resource.MESSAGE, Operation.SEND_AUDIO): _send_file,
    (Resource.MESSAGE, Operation.SEND_CHAT_ACTION): _send_chat_action,
    (Resource.MESSAGE, Operation.SEND_CONTACT): _send_contact,
    (Resource.MESSAGE, Operation.SEND_DOCUMENT): _send_file,
    (Resource.MESSAGE, Operation.SEND_LOCATION): _send_location,
    (Resource.MESSAGE, Operation.SEND_MEDIA_GROUP): _send_media_group,
    (Resource.MESSAGE, Operation.SEND_MESSAGE): _send_message,
    (Resource.MESSAGE, Operation.SEND_PHOTO): _send_file,
    (Resource.MESSAGE, Operation.SEND_POLL): _send_poll,
    (Resource.MESSAGE, Operation.SEND_STICKER): _send_file,
    (Resource.MESSAGE, Operation.SEND_VIDEO): _send_file,
}


def parse_selector(params: NodeParameters, index: int) -> tuple[Resource, Operation]:
    raw_resource = params.get("resource", index)
    raw_operation = params.get("operation", index)

    try:
        resource = Resource(raw_resource)
    except ValueError:
        raise NodeOperationError(f'The resource "{raw_resource}" is not known!', item_index=index) from None

    try:
        operation = Operation(raw_operation)
    except ValueError:
        operation = None

    if operation is None or (resource, operation) not in _BUILDERS:
        raise NodeOperationError(
            f'The operation "{raw_operation}" is not supported for resource "{resource.value}"!',
            item_index=index,
        )
    return resource, operation


def build_request(params: NodeParameters, index: int, node: NodeContext | None = None) -> RequestSpec:
    resource, operation = parse_selector(params, index)
    return _BUILDERS[(resource, operation)](params, index, node or NodeContext())
