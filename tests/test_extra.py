"""Tests for bridge extra payload encoding."""

import json

from web3 import Web3

from mvm_bridge.constants import REGISTRY_PID, STORAGE_ADDRESS, WITHDRAWAL_BOT
from mvm_bridge.extra import (
    build_withdrawal_action,
    encode_action,
    encode_code_extra,
    encode_withdrawal_extra,
)
from mvm_bridge.types import CodeResponse

TRACE_ID = "0b1f1d3c-6a43-4f7e-9c3a-7d0f2b8a4e11"
PREFIX = REGISTRY_PID + STORAGE_ADDRESS.lower()[2:]


def _split(extra: str) -> tuple[str, str, str]:
    body = extra[2:]
    return body[: len(PREFIX)], body[len(PREFIX) : len(PREFIX) + 64], body[len(PREFIX) + 64 :]


def test_action_shape():
    action = build_withdrawal_action("0xdest", "memo", TRACE_ID)
    assert action.as_dict() == {
        "receivers": [WITHDRAWAL_BOT],
        "threshold": 1,
        "extra": '{"destination":"0xdest","tag":"memo","amount":"%s"}' % TRACE_ID,
    }


def test_withdrawal_extra_layout():
    extra = encode_withdrawal_extra("0xdest", "", TRACE_ID)
    prefix, digest, value = _split(extra)

    assert extra.startswith("0x")
    assert prefix == PREFIX
    assert digest == Web3.keccak(hexstr="0x" + value).hex().removeprefix("0x")

    decoded = json.loads(bytes.fromhex(value).decode("utf-8"))
    assert decoded["receivers"] == [WITHDRAWAL_BOT]
    assert decoded["threshold"] == 1
    assert json.loads(decoded["extra"]) == {
        "destination": "0xdest",
        "tag": "",
        "amount": TRACE_ID,
    }


def test_withdrawal_extra_is_compact_json():
    extra = encode_withdrawal_extra("0xdest", "", TRACE_ID)
    _, _, value = _split(extra)
    text = bytes.fromhex(value).decode("utf-8")
    assert ", " not in text
    assert text.startswith('{"receivers":[')


def test_withdrawal_extra_deterministic():
    first = encode_withdrawal_extra("0xdest", "tag", TRACE_ID)
    second = encode_withdrawal_extra("0xdest", "tag", TRACE_ID)
    assert first == second


def test_any_field_change_changes_digest():
    base = _split(encode_withdrawal_extra("0xdest", "tag", TRACE_ID))[1]
    variants = [
        encode_withdrawal_extra("0xdesT", "tag", TRACE_ID),
        encode_withdrawal_extra("0xdest", "tag2", TRACE_ID),
        encode_withdrawal_extra("0xdest", "tag", TRACE_ID[:-1] + "2"),
    ]
    for extra in variants:
        assert _split(extra)[1] != base


def test_custom_receiver_and_addresses():
    extra = encode_withdrawal_extra(
        "0xdest",
        "",
        TRACE_ID,
        withdrawal_bot="bot",
        registry_pid="00" * 16,
        storage_address="0x" + "AB" * 20,
    )
    assert extra.startswith("0x" + "00" * 16 + "ab" * 20)
    assert '"receivers":["bot"]' in bytes.fromhex(extra[2 + 72 + 64 :]).decode()


def test_code_extra_has_no_digest():
    code = CodeResponse(receivers=("r1", "r2"), threshold=2, memo="bWVtbw")
    extra = encode_code_extra(code)

    assert extra.startswith("0x" + PREFIX)
    value = extra[2 + len(PREFIX) :]
    assert json.loads(bytes.fromhex(value).decode("utf-8")) == {
        "receivers": ["r1", "r2"],
        "threshold": 2,
        "extra": "bWVtbw",
    }


def test_encode_action_keeps_unicode():
    action = build_withdrawal_action("地址", "", TRACE_ID)
    text = bytes.fromhex(encode_action(action)).decode("utf-8")
    assert "\\u" not in text
