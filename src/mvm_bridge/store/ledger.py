"""Live ledger state: assets, pairs, exchange rates and derived totals.

Containers poll only while someone is subscribed. The first subscriber starts
a refresh task, the last one to leave cancels it, and a later subscriber
starts a fresh one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from decimal import Decimal, InvalidOperation, localcontext
from typing import Generic, TypeVar

from ..api import BridgeApiClient
from ..exceptions import ValidationError
from ..types import Asset, ExchangeRate, Pair, RegisteredUser
from .cache import KeyedAsyncCache, make_key

T = TypeVar("T")
S = TypeVar("S")

logger = logging.getLogger(__name__)

Subscriber = Callable[[T], None]
Unsubscribe = Callable[[], None]


class PollingContainer(Generic[T]):
    """Holds a value, notifies subscribers, and refreshes it on a timer."""

    def __init__(
        self,
        initial: T,
        fetch: Callable[[], Awaitable[T | None]] | None = None,
        *,
        interval: float = 15.0,
        name: str = "container",
    ) -> None:
        self._value = initial
        self._fetch = fetch
        self._interval = interval
        self._name = name
        self._subscribers: dict[int, Subscriber[T]] = {}
        self._next_token = 0
        self._task: asyncio.Task[None] | None = None
        self.last_error: Exception | None = None

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def is_polling(self) -> bool:
        return self._task is not None and not self._task.done()

    def set(self, value: T) -> None:
        """Replace the value wholesale and notify subscribers.

        Every subscriber is called even if an earlier one raises; the first
        error is re-raised once all of them have run.
        """
        self._value = value
        first_error: Exception | None = None
        for callback in list(self._subscribers.values()):
            try:
                callback(value)
            except Exception as exc:
                logger.warning("Subscriber of %s failed: %s", self._name, exc)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def subscribe(self, callback: Subscriber[T]) -> Unsubscribe:
        """Call ``callback`` with the current value, then register it.

        A callback that raises on the first call is not registered.
        """
        callback(self._value)
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        if len(self._subscribers) == 1:
            self.start()

        def unsubscribe() -> None:
            if self._subscribers.pop(token, None) is not None and not self._subscribers:
                self.stop()

        return unsubscribe

    def start(self) -> None:
        """Start the refresh timer if this container polls and is idle."""
        if self._fetch is None or self.is_polling:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._poll(), name=f"poll-{self._name}"
        )
        logger.debug("Started polling %s every %ss", self._name, self._interval)

    def stop(self) -> None:
        """Cancel the refresh timer."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Stopped polling %s", self._name)

    async def refresh(self) -> T:
        """Fetch once now and publish the result."""
        if self._fetch is None:
            return self._value
        value = await self._fetch()
        if value is not None:
            self.set(value)
        return self._value

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.refresh()
                self.last_error = None
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.last_error = exc
                logger.warning("Refreshing %s failed: %s", self._name, exc)


class DerivedValue(Generic[S, T]):
    """Read-only value computed from a source container."""

    def __init__(self, source: PollingContainer[S], compute: Callable[[S], T]) -> None:
        self._source = source
        self._compute = compute

    @property
    def value(self) -> T:
        return self._compute(self._source.value)

    def subscribe(self, callback: Subscriber[T]) -> Unsubscribe:
        return self._source.subscribe(lambda value: callback(self._compute(value)))


def _to_decimal(value: str | None, field: str) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    try:
        return Decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {field}", field=field, value=value) from exc


def total_value(assets: Sequence[Asset], price_field: str) -> Decimal | None:
    """Sum ``balance * price`` over assets with a known balance.

    Returns ``None`` for an empty list: no data yet, as opposed to zero.
    """
    if not assets:
        return None
    total = Decimal(0)
    with localcontext() as ctx:
        ctx.prec = 96
        for asset in assets:
            if not asset.balance:
                continue
            price = getattr(asset, price_field)
            total += _to_decimal(asset.balance, "balance") * _to_decimal(price, price_field)
    return total


class LedgerStore:
    """Application-scoped owner of the live ledger containers."""

    def __init__(
        self,
        api: BridgeApiClient,
        *,
        poll_interval: float = 15.0,
        evict_failed_fees: bool = False,
        fee_ttl: float | None = None,
    ) -> None:
        self._api = api
        self._user: RegisteredUser | None = None
        self.assets: PollingContainer[list[Asset]] = PollingContainer(
            [], self._load_assets, interval=poll_interval, name="assets"
        )
        self.pairs: PollingContainer[list[Pair]] = PollingContainer(
            [], self._load_pairs, interval=poll_interval, name="pairs"
        )
        self.exchange_rates: PollingContainer[list[ExchangeRate]] = PollingContainer(
            [], name="exchange_rates"
        )
        self.total_balance_usd: DerivedValue[list[Asset], Decimal | None] = DerivedValue(
            self.assets, lambda assets: total_value(assets, "price_usd")
        )
        self.total_balance_btc: DerivedValue[list[Asset], Decimal | None] = DerivedValue(
            self.assets, lambda assets: total_value(assets, "price_btc")
        )
        self.withdrawal_fees: KeyedAsyncCache[tuple[tuple[str, str], ...], str] = KeyedAsyncCache(
            evict_on_error=evict_failed_fees, ttl=fee_ttl
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    @property
    def user(self) -> RegisteredUser | None:
        return self._user

    def set_user(self, user: RegisteredUser | None) -> None:
        self._user = user
        if user is None:
            self.assets.set([])

    def stop(self) -> None:
        for container in (self.assets, self.pairs, self.exchange_rates):
            container.stop()

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------
    async def update_assets(self) -> list[Asset]:
        """Refresh the asset list immediately, outside the timer."""
        return await self.assets.refresh()

    def get_asset(self, asset_id: str | None) -> Asset | None:
        if not asset_id:
            return None
        return next((a for a in self.assets.value if a.asset_id == asset_id), None)

    async def update_exchange_rates(self) -> list[ExchangeRate]:
        rates = await asyncio.to_thread(self._api.fetch_exchange_rates)
        self.exchange_rates.set(rates)
        return rates

    # ------------------------------------------------------------------
    # Fees
    # ------------------------------------------------------------------
    def withdrawal_fee(self, asset_id: str, chain_id: str, destination: str) -> asyncio.Task[str]:
        """Shared fee quote for ``asset_id`` to ``destination``, in the asset's own unit."""
        return self.withdrawal_fees.get(
            make_key({"asset_id": asset_id, "chain_id": chain_id, "destination": destination}),
            lambda: self._load_withdrawal_fee(asset_id, chain_id, destination),
        )

    async def _load_withdrawal_fee(self, asset_id: str, chain_id: str, destination: str) -> str:
        fee = await asyncio.to_thread(self._api.fetch_withdrawal_fee, asset_id, destination)
        if not fee or _to_decimal(fee, "fee") == 0 or asset_id == chain_id:
            return fee
        return await asyncio.to_thread(self._api.fetch_fee_on_asset, asset_id, chain_id, fee)

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------
    async def _load_assets(self) -> list[Asset] | None:
        user = self._user
        if user is None:
            return None
        return await asyncio.to_thread(self._api.fetch_assets, user)

    async def _load_pairs(self) -> list[Pair]:
        return await asyncio.to_thread(self._api.fetch_pairs)
