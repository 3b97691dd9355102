"""Type definitions and data models for the MVM bridge client."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import ValidationError


class Network(str, Enum):
    """Chains the client can point a wallet at."""

    MAINNET = "mainnet"
    MVM = "mvm"


class AssetShape(Enum):
    """On-chain shape of an asset for a given transfer direction."""

    SOURCE_NATIVE = 1  # ETH sent on mainnet
    SOURCE_TOKEN = 2  # ERC-20 sent on mainnet
    SETTLEMENT_NATIVE = 3  # ETH-equivalent released through the bridge on MVM
    SETTLEMENT_TOKEN = 4  # MVM token moved with transferWithExtra


class DepositMode(str, Enum):
    """How a user is expected to fund a deposit."""

    WALLET = "wallet"
    QRCODE = "qrcode"


Address = str  # Ethereum address
Amount = str  # Decimal string as returned by the read API


@dataclass(frozen=True)
class Asset:
    """Transferable asset as reported by the network API."""

    asset_id: str
    chain_id: str
    asset_key: str = ""
    destination: str = ""
    contract: str | None = None
    symbol: str = ""
    name: str = ""
    tag: str = ""
    balance: Amount | None = None
    price_usd: Amount | None = None
    price_btc: Amount | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Asset":
        asset_id = _require_str(data, "asset_id", "Asset")
        chain_id = _require_str(data, "chain_id", "Asset")
        return cls(
            asset_id=asset_id,
            chain_id=chain_id,
            asset_key=str(data.get("asset_key") or ""),
            destination=str(data.get("destination") or ""),
            contract=data.get("contract") or None,
            symbol=str(data.get("symbol") or ""),
            name=str(data.get("name") or ""),
            tag=str(data.get("tag") or ""),
            balance=_optional_str(data.get("balance")),
            price_usd=_optional_str(data.get("price_usd")),
            price_btc=_optional_str(data.get("price_btc")),
        )


@dataclass(frozen=True)
class Pair:
    """Swap trading pair."""

    base_asset_id: str
    quote_asset_id: str
    base_amount: Amount = "0"
    quote_amount: Amount = "0"
    fee_percent: Amount = "0"
    liquidity: Amount = "0"
    route_id: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pair":
        route_id = data.get("route_id")
        return cls(
            base_asset_id=_require_str(data, "base_asset_id", "Pair"),
            quote_asset_id=_require_str(data, "quote_asset_id", "Pair"),
            base_amount=str(data.get("base_amount") or "0"),
            quote_amount=str(data.get("quote_amount") or "0"),
            fee_percent=str(data.get("fee_percent") or "0"),
            liquidity=str(data.get("liquidity") or "0"),
            route_id=int(route_id) if route_id is not None else None,
        )


@dataclass(frozen=True)
class ExchangeRate:
    """Fiat exchange rate against USD."""

    code: str
    rate: Amount

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExchangeRate":
        return cls(
            code=_require_str(data, "code", "ExchangeRate"),
            rate=_require_str(data, "rate", "ExchangeRate"),
        )


@dataclass(frozen=True)
class RegisteredUser:
    """Mixin user bound to an MVM user contract."""

    user_id: str
    contract: Address
    access_token: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RegisteredUser":
        return cls(
            user_id=_require_str(data, "user_id", "RegisteredUser"),
            contract=_require_str(data, "contract", "RegisteredUser"),
            access_token=data.get("access_token") or None,
        )


@dataclass(frozen=True)
class SwapOrder:
    """Pre-computed swap order returned by the swap service."""

    pay_asset_id: str
    fill_asset_id: str
    funds: Amount
    routes: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SwapOrder":
        return cls(
            pay_asset_id=_require_str(data, "pay_asset_id", "SwapOrder"),
            fill_asset_id=_require_str(data, "fill_asset_id", "SwapOrder"),
            funds=_require_str(data, "funds", "SwapOrder"),
            routes=str(data.get("routes") or ""),
        )


@dataclass(frozen=True)
class ActionResponse:
    """Result of creating an off-chain swap action."""

    code: str
    follow_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActionResponse":
        return cls(
            code=_require_str(data, "code", "ActionResponse"),
            follow_id=data.get("follow_id") or None,
        )


@dataclass(frozen=True)
class CodeResponse:
    """Payment request a short code resolves to."""

    receivers: tuple[str, ...]
    threshold: int
    memo: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CodeResponse":
        receivers = data.get("receivers")
        if not isinstance(receivers, Sequence) or isinstance(receivers, str) or not receivers:
            raise ValidationError(
                "CodeResponse requires a non-empty receivers list",
                field="receivers",
                value=receivers,
            )
        try:
            threshold = int(data.get("threshold", 0))
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                "CodeResponse threshold must be an integer",
                field="threshold",
                value=data.get("threshold"),
            ) from exc
        if threshold < 1:
            raise ValidationError(
                "CodeResponse threshold must be positive", field="threshold", value=threshold
            )
        return cls(
            receivers=tuple(str(item) for item in receivers),
            threshold=threshold,
            memo=str(data.get("memo") or ""),
        )


@dataclass(frozen=True)
class BridgeAction:
    """Descriptor serialised into the extra payload of a bridge call."""

    receivers: tuple[str, ...]
    threshold: int
    extra: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "receivers": list(self.receivers),
            "threshold": self.threshold,
            "extra": self.extra,
        }


@dataclass
class Response:
    """Outcome of a deposit, withdraw or swap operation."""

    success: bool
    operation: str
    network: Network
    shape: AssetShape | None = None
    trace_id: str | None = None
    transaction_hashes: list[str] = field(default_factory=list)
    amount: int | None = None
    fee: int | None = None
    raw_response: list[dict[str, Any]] = field(default_factory=list)

    @property
    def transaction_hash(self) -> str | None:
        return self.transaction_hashes[-1] if self.transaction_hashes else None


def _require_str(data: Mapping[str, Any], key: str, record: str) -> str:
    value = data.get(key)
    if value is None or value == "":
        raise ValidationError(f"{record} is missing '{key}'", field=key, value=value)
    return str(value)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
