"""Encoding of the ``extra`` payload attached to bridge calls.

Layout (hex, ``0x`` prefixed)::

    registry pid | storage address | keccak256(action) | action

``action`` is the UTF-8 hex of a JSON document naming the receivers of the
funds on the Mixin side. The bridge watcher reads the digest to attribute the
settled value, so the JSON must be byte-for-byte what the watcher expects:
compact separators and insertion-ordered keys.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from eth_typing import HexStr
from web3 import Web3

from .constants import REGISTRY_PID, STORAGE_ADDRESS, WITHDRAWAL_BOT
from .exceptions import ValidationError
from .types import BridgeAction, CodeResponse


def _dumps(value: object) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _hex_utf8(text: str) -> str:
    return text.encode("utf-8").hex()


def _prefix(registry_pid: str, storage_address: str) -> str:
    registry = registry_pid.lower().removeprefix("0x").replace("-", "")
    if len(registry) != 32:
        raise ValidationError(
            "Registry pid must be 16 bytes", field="registry_pid", value=registry_pid
        )
    storage = storage_address.lower().removeprefix("0x")
    if len(storage) != 40:
        raise ValidationError(
            "Storage address must be 20 bytes", field="storage_address", value=storage_address
        )
    return registry + storage


def build_withdrawal_action(
    destination: str,
    tag: str,
    trace_id: str,
    *,
    receivers: Sequence[str] = (WITHDRAWAL_BOT,),
) -> BridgeAction:
    """Describe a withdrawal to ``destination`` for the withdrawal bot.

    The ``amount`` key of the inner document carries the trace id; the bot
    keys on that field.
    """
    inner = _dumps({"destination": destination, "tag": tag, "amount": trace_id})
    return BridgeAction(receivers=tuple(receivers), threshold=1, extra=inner)


def encode_action(action: BridgeAction) -> str:
    """Return the hex (no prefix) of the JSON-serialised action."""
    return _hex_utf8(_dumps(action.as_dict()))


def encode_withdrawal_extra(
    destination: str,
    tag: str,
    trace_id: str,
    *,
    withdrawal_bot: str = WITHDRAWAL_BOT,
    registry_pid: str = REGISTRY_PID,
    storage_address: str = STORAGE_ADDRESS,
) -> str:
    """Build the hashed extra payload for one withdrawal leg."""
    action = build_withdrawal_action(destination, tag, trace_id, receivers=(withdrawal_bot,))
    value = encode_action(action)
    digest = Web3.keccak(hexstr=HexStr(f"0x{value}")).to_0x_hex()[2:]
    return f"0x{_prefix(registry_pid, storage_address)}{digest}{value}"


def encode_code_extra(
    code: CodeResponse,
    *,
    registry_pid: str = REGISTRY_PID,
    storage_address: str = STORAGE_ADDRESS,
) -> str:
    """Build the extra payload for a resolved payment code.

    The memo comes prepared by the swap service, so no digest is inserted.
    """
    action = BridgeAction(receivers=code.receivers, threshold=code.threshold, extra=code.memo)
    return f"0x{_prefix(registry_pid, storage_address)}{encode_action(action)}"
