"""Utility functions for the MVM bridge client."""

import uuid
from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from hexbytes import HexBytes

from .constants import AMOUNT_PRECISION
from .exceptions import ValidationError


def to_hex(value: int) -> str:
    """Render a chain id the way wallet providers expect it (``0x`` + lower hex)."""
    if value < 0:
        raise ValidationError("Chain id cannot be negative", field="chain_id", value=value)
    return hex(value)


def to_decimal(value: str | int | float | Decimal, field: str = "amount") -> Decimal:
    """Parse a numeric value into a finite Decimal."""
    if isinstance(value, Decimal):
        quantity = value
    else:
        try:
            quantity = Decimal(str(value).strip())
        except (ValueError, InvalidOperation) as exc:
            raise ValidationError(
                f"Invalid {field}", field=field, value=value, details={"error": str(exc)}
            ) from exc

    if not quantity.is_finite():
        raise ValidationError(f"Invalid {field}", field=field, value=value)
    return quantity


def round_amount(
    value: str | int | float | Decimal, places: int = AMOUNT_PRECISION, field: str = "amount"
) -> str:
    """Round to a fixed number of fractional digits, half away from zero."""
    quantity = to_decimal(value, field)
    quantizer = Decimal(1).scaleb(-places)
    try:
        with localcontext() as ctx:
            ctx.prec = 96
            rounded = quantity.quantize(quantizer, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValidationError(
            f"{field} is too large to round to {places} places",
            field=field,
            value=value,
            details={"places": places},
        ) from exc
    return f"{rounded:f}"


def parse_units(value: str | int | Decimal, decimals: int, field: str = "amount") -> int:
    """Convert a decimal amount into integer base units.

    Raises ValidationError when the amount is malformed, negative, or carries
    more fractional precision than ``decimals`` allows; nothing is truncated.
    """
    quantity = to_decimal(value, field)
    if quantity < 0:
        raise ValidationError(f"{field} cannot be negative", field=field, value=value)

    with localcontext() as ctx:
        ctx.prec = 96
        scaled = quantity.scaleb(int(decimals))
        integral = scaled.to_integral_value()
    if integral != scaled:
        raise ValidationError(
            f"{field} exceeds {decimals} decimal places",
            field=field,
            value=value,
            details={"decimals": decimals},
        )
    return int(integral)


def format_units(value: int, decimals: int) -> str:
    """Render integer base units as a plain decimal string."""
    with localcontext() as ctx:
        ctx.prec = 96
        quantity = Decimal(int(value)).scaleb(-int(decimals))
    text = f"{quantity:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def generate_trace_id() -> str:
    """Generate a random correlation id for one bridge operation."""
    return str(uuid.uuid4())


def derive_trace_id(trace_id: str, leg: str) -> str:
    """Derive a stable per-leg correlation id from an operation trace id."""
    try:
        namespace = uuid.UUID(trace_id)
    except ValueError as exc:
        raise ValidationError("Trace id must be a UUID", field="trace_id", value=trace_id) from exc
    return str(uuid.uuid5(namespace, leg))


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt
