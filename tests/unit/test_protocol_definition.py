"""Tests for protocol definitions and payment request validation."""

import pytest

from cruxconnect import MalformedProtocolMessage, ProtocolMessage, crux_payment_protocol
from cruxconnect.gateway import PaymentsProtocolHandler
from cruxconnect.protocol import coerce_message

VALID_CONTENT = {
    "amount": "1",
    "assetId": "7c3baa3c-f5e8-490a-88a1-e0a052b7caa4",
    "toAddress": "randomAddress",
}


def test_valid_payment_request():
    message = ProtocolMessage(type="PAYMENT_REQUEST", content=VALID_CONTENT)
    crux_payment_protocol.validate(message)
    assert crux_payment_protocol.is_valid(message)


@pytest.mark.parametrize(
    "content",
    [
        {"foo": "bar"},
        {"amount": "1", "assetId": "7c3baa3c"},
        {**VALID_CONTENT, "amount": ""},
        {**VALID_CONTENT, "unexpected": True},
    ],
)
def test_malformed_payment_requests(content):
    with pytest.raises(MalformedProtocolMessage):
        crux_payment_protocol.validate(ProtocolMessage(type="PAYMENT_REQUEST", content=content))


def test_unknown_message_type():
    with pytest.raises(MalformedProtocolMessage):
        crux_payment_protocol.validate(ProtocolMessage(type="REFUND", content=VALID_CONTENT))


def test_coerce_message_from_json_and_dict():
    message = ProtocolMessage(type="PAYMENT_REQUEST", content=VALID_CONTENT)
    assert coerce_message(message.to_json()) == message
    assert coerce_message({"type": "PAYMENT_REQUEST", "content": VALID_CONTENT}) == message
    with pytest.raises(MalformedProtocolMessage):
        coerce_message("HelloWorld")


def test_payments_handler_validates_raw_messages():
    handler = PaymentsProtocolHandler()
    assert handler.name == "CRUX.PAYMENT"
    assert handler.validate({"type": "PAYMENT_REQUEST", "content": VALID_CONTENT})
    assert not handler.validate({"type": "PAYMENT_REQUEST", "content": {"foo": "bar"}})
    assert not handler.validate("HelloWorld")
