"""Live, polled ledger state and keyed async caching."""

from .cache import KeyedAsyncCache, make_key
from .ledger import DerivedValue, LedgerStore, PollingContainer, total_value

__all__ = [
    "DerivedValue",
    "KeyedAsyncCache",
    "LedgerStore",
    "PollingContainer",
    "make_key",
    "total_value",
]
