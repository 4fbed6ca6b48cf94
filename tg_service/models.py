from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Resource(str, Enum):
    CALLBACK = "callback"
    CHAT = "chat"
    FILE = "file"
    MESSAGE = "message"


class Operation(str, Enum):
    # callback
    ANSWER_QUERY = "answerQuery"
    ANSWER_INLINE_QUERY = "answerInlineQuery"
    # chat / file
    GET = "get"
    ADMINISTRATORS = "administrators"
    LEAVE = "leave"
    MEMBER = "member"
    SET_DESCRIPTION = "setDescription"
    SET_TITLE = "setTitle"
    # message
    EDIT_MESSAGE_TEXT = "editMessageText"
    DELETE_MESSAGE = "deleteMessage"
    PIN_CHAT_MESSAGE = "pinChatMessage"
    UNPIN_CHAT_MESSAGE = "unpinChatMessage"
    SEND_AND_WAIT = "sendAndWait"
    SEND_ANIMATION = "sendAnimation"
    SEND_AUDIO = "sendAudio"
    SEND_CHAT_ACTION = "sendChatAction"
    SEND_CONTACT = "sendContact"
    SEND_DOCUMENT = "sendDocument"
    SEND_LOCATION = "sendLocation"
    SEND_MEDIA_GROUP = "sendMediaGroup"
    SEND_MESSAGE = "sendMessage"
    SEND_PHOTO = "sendPhoto"
    SEND_POLL = "sendPoll"
    SEND_STICKER = "sendSticker"
    SEND_VIDEO = "sendVideo"


# Operations that carry a file and may upload it from binary item data
FILE_OPERATIONS = frozenset(
    {
        Operation.SEND_ANIMATION,
        Operation.SEND_AUDIO,
        Operation.SEND_DOCUMENT,
        Operation.SEND_PHOTO,
        Operation.SEND_STICKER,
        Operation.SEND_VIDEO,
    }
)


def file_field_name(operation: Operation | str) -> str:
    """sendPhoto -> photo, sendDocument -> document, ..."""

    value = operation.value if isinstance(operation, Operation) else operation
    return value.replace("send", "", 1).lower()


class BinaryData(BaseModel):
    """
    One binary property of an n8n item (item["binary"][<name>]).

    Either `data` (base64, no data: prefix) is inline, or `id` points at the
    host's binary store. Anything else the host sends (fileSize, directory,
    ...) is kept as an extra field.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    data: str | None = None
    id: str | None = None
    file_name: str | None = Field(default=None, alias="fileName")
    mime_type: str = Field(default="application/octet-stream", alias="mimeType")
    file_extension: str | None = Field(default=None, alias="fileExtension")


class Item(BaseModel):
    json_: dict[str, Any] = Field(default_factory=dict, alias="json")
    binary: dict[str, BinaryData] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class Credentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    base_url: str = Field(default="https://api.telegram.org", alias="baseUrl")


class NodeContext(BaseModel):
    """
    What the host knows about the node instance. `allow_attribution` is the
    capability check for the "sent automatically" suffix; the host decides it.
    """

    model_config = ConfigDict(populate_by_name=True)

    type_version: float = Field(default=1.2, alias="typeVersion")
    instance_id: str | None = Field(default=None, alias="instanceId")
    allow_attribution: bool = Field(default=True, alias="allowAttribution")


@dataclass(frozen=True)
class MultipartUpload:
    fields: dict[str, str]
    file_field: str
    filename: str
    content: bytes
    content_type: str


@dataclass
class RequestSpec:
    endpoint: str
    method: str = "POST"
    body: dict[str, Any] = field(default_factory=dict)
    qs: dict[str, Any] = field(default_factory=dict)
    upload: MultipartUpload | None = None
