from __future__ import annotations

import json

import pytest

from tg_service.errors import NodeOperationError
from tg_service.reply_markup import (
    InlineKeyboard,
    KeyboardButton,
    RawKeyboard,
    reply_markup_form_value,
    reply_markup_from_parameters,
    rows_from_collection,
)
from tg_service.request_builder import build_request

from helpers import params


def _photo(**extra):
    return params(resource="message", operation="sendPhoto", chatId="1", file="f", **extra)


def _rows(*rows):
    return {"rows": [{"row": {"buttons": list(buttons)}} for buttons in rows]}


def test_no_markup_by_default(node):
    assert "reply_markup" not in build_request(_photo(), 0, node).body


def test_json_keyboard_is_passed_through_untouched(node):
    broken = '{"inline_keyboard": [[{"text": "A", "callback_data": '
    p = _photo(replyMarkup="inlineKeyboard", specifyKeyboard="json", keyboardJson=broken)

    body = build_request(p, 0, node).body

    assert body["reply_markup"] == broken


def test_json_keyboard_for_reply_keyboard_ignores_ui_options(node):
    raw = '{"keyboard": [[{"text": "Yes"}]]}'
    p = _photo(
        replyMarkup="replyKeyboard",
        specifyKeyboard="json",
        keyboardJson=raw,
        replyKeyboardOptions={"resize_keyboard": True},
    )
    assert build_request(p, 0, node).body["reply_markup"] == raw


def test_inline_keyboard_two_rows_of_one_button(node):
    keyboard = _rows(
        [{"text": "Open", "additionalFields": {"url": "https://example.com"}}],
        [{"text": "Ack", "additionalFields": {"callback_data": "ack"}}],
    )
    p = _photo(replyMarkup="inlineKeyboard", inlineKeyboard=keyboard)

    markup = build_request(p, 0, node).body["reply_markup"]

    assert markup == {
        "inline_keyboard": [
            [{"text": "Open", "url": "https://example.com"}],
            [{"text": "Ack", "callback_data": "ack"}],
        ]
    }


def test_inline_keyboard_button_with_web_app_and_pay(node):
    keyboard = _rows([{"text": "Shop", "additionalFields": {"pay": True, "web_app": {"url": "https://app"}}}])
    p = _photo(replyMarkup="inlineKeyboard", specifyKeyboard="ui", inlineKeyboard=keyboard)

    markup = build_request(p, 0, node).body["reply_markup"]

    assert markup == {"inline_keyboard": [[{"text": "Shop", "pay": True, "web_app": {"url": "https://app"}}]]}


def test_reply_keyboard_merges_options(node):
    keyboard = _rows([{"text": "Share", "additionalFields": {"request_contact": True}}])
    p = _photo(
        replyMarkup="replyKeyboard",
        replyKeyboard=keyboard,
        replyKeyboardOptions={"resize_keyboard": True, "one_time_keyboard": True},
    )

    markup = build_request(p, 0, node).body["reply_markup"]

    assert markup == {
        "keyboard": [[{"text": "Share", "request_contact": True}]],
        "resize_keyboard": True,
        "one_time_keyboard": True,
    }


def test_force_reply_and_keyboard_remove_are_sent_as_configured(node):
    force = build_request(_photo(replyMarkup="forceReply", forceReply={"force_reply": True}), 0, node)
    remove = build_request(
        _photo(replyMarkup="replyKeyboardRemove", replyKeyboardRemove={"remove_keyboard": True, "selective": False}),
        0,
        node,
    )

    assert force.body["reply_markup"] == {"force_reply": True}
    assert remove.body["reply_markup"] == {"remove_keyboard": True, "selective": False}


def test_edit_message_text_only_allows_inline_keyboard(node):
    p = params(
        resource="message",
        operation="editMessageText",
        chatId="1",
        messageId="2",
        text="t",
        replyMarkup="forceReply",
    )
    with pytest.raises(NodeOperationError, match="replyMarkup"):
        build_request(p, 0, node)


def test_rows_without_buttons_are_skipped():
    rows = rows_from_collection({"rows": [{"row": {}}, {"row": {"buttons": [{"text": "A"}]}}, {}]})

    assert len(rows) == 1
    assert rows[0][0].model_dump() == {"text": "A"}


def test_rows_from_empty_collection():
    assert rows_from_collection({}) == []
    assert rows_from_collection(None) == []


def test_markup_kind_from_parameters():
    p = params(resource="message", operation="sendMessage", replyMarkup="inlineKeyboard", specifyKeyboard="json")
    markup = reply_markup_from_parameters(p, 0)

    assert isinstance(markup, RawKeyboard)
    assert markup.to_wire() == ""


def test_form_value_serializes_structures_but_not_text():
    markup = InlineKeyboard(rows=[[KeyboardButton(text="A", callback_data="a")]]).to_wire()

    assert json.loads(reply_markup_form_value(markup)) == {"inline_keyboard": [[{"text": "A", "callback_data": "a"}]]}
    assert reply_markup_form_value('{"keyboard": [') == '{"keyboard": ['


def test_numeric_button_text_is_sent_as_text(node):
    keyboard = _rows([{"text": 1, "additionalFields": {"callback_data": "one"}}, {"text": 2.5}])
    p = _photo(replyMarkup="inlineKeyboard", inlineKeyboard=keyboard)

    markup = build_request(p, 0, node).body["reply_markup"]

    assert markup == {"inline_keyboard": [[{"text": "1", "callback_data": "one"}, {"text": "2.5"}]]}
