"""Exception hierarchy for the MVM bridge client."""

from typing import Any


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProviderError(BridgeError):
    """Raised when the wallet provider is unusable or rejects a request."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        method: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.method = method


class TransferError(BridgeError):
    """Raised when an on-chain transfer cannot be submitted."""

    def __init__(
        self,
        message: str,
        transfer_type: str | None = None,
        amount: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.transfer_type = transfer_type
        self.amount = amount


class NetworkError(BridgeError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ValidationError(BridgeError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class UnsupportedAssetError(ValidationError):
    """Raised when an asset matches none of the supported transfer shapes."""

    def __init__(self, asset_id: str, chain_id: str, operation: str | None = None):
        super().__init__(
            "Invalid asset",
            field="asset_id",
            value=asset_id,
            details={"chain_id": chain_id, "operation": operation},
        )
        self.asset_id = asset_id
        self.chain_id = chain_id
        self.operation = operation
