"""Client for the external read API (network, swap and bridge services).

All calls are blocking ``requests`` calls; async callers run them through
``asyncio.to_thread``. Responses are validated into the records defined in
:mod:`mvm_bridge.types` before they leave this module.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import requests

from .evm.config import ApiConfig
from .exceptions import NetworkError, ValidationError
from .types import ActionResponse, Asset, CodeResponse, ExchangeRate, Pair, RegisteredUser

logger = logging.getLogger(__name__)


class BridgeApiClient:
    """Fetch assets, pairs, rates, fees and payment codes."""

    def __init__(self, config: ApiConfig, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Ledger data
    # ------------------------------------------------------------------
    def fetch_assets(self, user: RegisteredUser) -> list[Asset]:
        url = f"{self._config.mixin_api_url}/assets"
        data = self._request_json("GET", url, token=user.access_token)
        return [Asset.from_dict(entry) for entry in self._records(data, url)]

    def fetch_pairs(self) -> list[Pair]:
        url = f"{self._config.swap_api_url}/pairs"
        data = self._request_json("GET", url)
        if isinstance(data, Mapping):
            data = data.get("pairs")
        return [Pair.from_dict(entry) for entry in self._records(data, url)]

    def fetch_exchange_rates(self) -> list[ExchangeRate]:
        url = f"{self._config.mixin_api_url}/external/fiats"
        data = self._request_json("GET", url)
        return [ExchangeRate.from_dict(entry) for entry in self._records(data, url)]

    # ------------------------------------------------------------------
    # Fees
    # ------------------------------------------------------------------
    def fetch_withdrawal_fee(self, asset_id: str, destination: str) -> str:
        """Withdrawal fee for ``asset_id``, denominated in its chain asset."""

        url = f"{self._config.mixin_api_url}/assets/{asset_id}/fee"
        data = self._request_json("GET", url, params={"destination": destination})
        if not isinstance(data, Mapping) or data.get("amount") is None:
            raise NetworkError(
                "Unexpected withdrawal fee response", endpoint=url, details={"response": data}
            )
        logger.debug("Withdrawal fee for %s: %s", asset_id, data["amount"])
        return str(data["amount"])

    def fetch_fee_on_asset(self, asset_id: str, chain_id: str, fee: str) -> str:
        """Amount of ``asset_id`` that buys ``fee`` of the chain asset."""

        url = f"{self._config.swap_api_url}/orders/pre"
        payload = {"pay_asset_id": asset_id, "fill_asset_id": chain_id, "amount": fee}
        data = self._request_json("POST", url, payload=payload)
        if not isinstance(data, Mapping) or data.get("funds") is None:
            raise NetworkError(
                "Unexpected fee conversion response", endpoint=url, details={"response": data}
            )
        return str(data["funds"])

    # ------------------------------------------------------------------
    # Swap actions
    # ------------------------------------------------------------------
    def create_action(
        self,
        action: str,
        amount: str,
        asset_id: str,
        user: RegisteredUser,
        broker_id: str = "",
    ) -> ActionResponse:
        url = f"{self._config.swap_api_url}/actions"
        payload = {
            "action": action,
            "amount": amount,
            "asset_id": asset_id,
            "broker_id": broker_id,
        }
        data = self._request_json("POST", url, payload=payload, token=user.access_token)
        if not isinstance(data, Mapping):
            raise NetworkError(
                "Unexpected action response", endpoint=url, details={"response": data}
            )
        return ActionResponse.from_dict(data)

    def fetch_code(self, code: str) -> CodeResponse:
        if not code:
            raise ValidationError("Code must not be empty", field="code", value=code)
        url = f"{self._config.mixin_api_url}/codes/{code}"
        data = self._request_json("GET", url)
        if not isinstance(data, Mapping):
            raise NetworkError("Unexpected code response", endpoint=url, details={"response": data})
        return CodeResponse.from_dict(data)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def close(self) -> None:
        self._session.close()

    def _request_json(
        self,
        method: str,
        url: str,
        payload: Mapping[str, Any] | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._session.request(
                method,
                url,
                json=payload,
                params=params,
                headers=headers,
                timeout=self._config.request_timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise NetworkError(
                f"Request to {url} failed", endpoint=url, status_code=status
            ) from exc
        except (requests.RequestException, ValueError) as exc:
            raise NetworkError(
                f"Request to {url} failed", endpoint=url, details={"error": str(exc)}
            ) from exc

        if isinstance(body, Mapping):
            error = body.get("error")
            if error:
                code = error.get("code") if isinstance(error, Mapping) else None
                raise NetworkError(
                    f"API error from {url}",
                    endpoint=url,
                    status_code=code,
                    details={"error": error},
                )
            if "data" in body:
                return body["data"]
        return body

    @staticmethod
    def _records(data: Any, url: str) -> list[Mapping[str, Any]]:
        if not isinstance(data, Sequence) or isinstance(data, str):
            raise NetworkError(
                "Expected a list in API response", endpoint=url, details={"response": data}
            )
        return [entry for entry in data if isinstance(entry, Mapping)]
