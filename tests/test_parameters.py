from __future__ import annotations

import pytest

from tg_service.errors import NodeOperationError
from tg_service.parameters import NodeParameters
from tg_service.schema import describe_parameters

from helpers import params


def test_supplied_value_wins_over_declared_default():
    p = params(resource="message", operation="sendChatAction", action="record_audio")
    assert p.get("action", 0) == "record_audio"


def test_declared_default_for_current_operation():
    p = params(resource="message", operation="sendPoll")

    assert p.get("type", 0) == "regular"
    assert p.get("is_anonymous", 0) is True
    assert p.get("open_period", 0) == 0


def test_default_of_the_visible_variant():
    photo = params(resource="message", operation="sendPhoto")
    assert photo.get("binaryData", 0) is False
    assert photo.get("file", 0) == ""

    upload = params(resource="message", operation="sendPhoto", binaryData=True)
    assert upload.get("binaryPropertyName", 0) == "data"


def test_fallback_then_error():
    p = params(resource="message", operation="sendMessage")

    assert p.get("additionalFields.fileName", 0, "x.bin") == "x.bin"
    with pytest.raises(NodeOperationError, match='Could not get parameter "additionalFields.fileName"') as exc:
        p.get("additionalFields.fileName", 5)
    assert exc.value.item_index == 5


def test_dotted_path_into_additional_fields_is_typed():
    p = params(resource="message", operation="sendVideo", additionalFields={"width": "640"})
    assert p.get("additionalFields.width", 0) == 640


def test_number_coercion_and_bounds():
    p = params(resource="message", operation="sendLocation", latitude="-33.9", longitude="abc")

    assert p.get("latitude", 0) == -33.9
    with pytest.raises(NodeOperationError, match='"longitude" must be a number'):
        p.get("longitude", 0)


def test_boolean_coercion():
    assert params(resource="file", operation="get", download="false").get("download", 0) is False
    with pytest.raises(NodeOperationError, match="must be a boolean"):
        params(resource="file", operation="get", download="maybe").get("download", 0)


def test_options_membership():
    p = params(resource="message", operation="sendChatAction", action="dancing")
    with pytest.raises(NodeOperationError, match='invalid value "dancing"'):
        p.get("action", 0)


def test_per_item_values_and_context():
    p = NodeParameters(
        {"resource": "message", "operation": "sendPhoto", "binaryData": "false"},
        [{"binaryData": "true"}],
    )

    assert p.context(0)["binaryData"] is True
    assert p.context(1)["binaryData"] is False
    assert p.values(0)["operation"] == "sendPhoto"


def test_describe_parameters_follows_visibility():
    described = describe_parameters({"resource": "message", "operation": "sendPhoto", "binaryData": True})

    names = [p["name"] for p in described["parameters"]]
    assert "binaryPropertyName" in names
    assert "file" not in names
    assert "text" not in names

    additional = [f["name"] for f in described["additionalFields"]]
    assert "fileName" in additional
    assert "caption" in additional
    assert "disable_web_page_preview" not in additional


def test_describe_parameters_without_additional_fields_collection():
    described = describe_parameters({"resource": "message", "operation": "sendChatAction"})

    assert "additionalFields" not in [p["name"] for p in described["parameters"]]
    assert described["additionalFields"] == []
