from __future__ import annotations

import logging
from typing import Dict, List, Optional

from app.core.errors import StoreError
from app.models import Currency
from app.services.currency.cache import CurrencyCache
from app.services.stores import CurrencyStore, UserStore

logger = logging.getLogger("app.currency")


class CurrencyDirectory:
    """Resolves currency records and a user's preferred currency.

    Lookups by id or code return ``None`` on not-found and on store failure
    (logged). ``get_all`` propagates ``StoreError`` so callers can decide how
    to degrade. User resolutions are memoized in the injected cache.
    """

    def __init__(
        self,
        currency_store: CurrencyStore,
        user_store: UserStore,
        cache: Optional[CurrencyCache] = None,
    ):
        self._currencies = currency_store
        self._users = user_store
        self._cache = cache if cache is not None else CurrencyCache()

    async def get_all(self) -> List[Currency]:
        return await self._currencies.get_all()

    async def get_all_by_id(self) -> Dict[str, Currency]:
        return {c.id: c for c in await self.get_all()}

    async def get_by_id(self, currency_id: str) -> Optional[Currency]:
        try:
            return await self._currencies.get_by_id(currency_id)
        except StoreError:
            logger.exception("currency lookup failed", extra={"currency": currency_id})
            return None

    async def get_by_code(self, code: str) -> Optional[Currency]:
        try:
            return await self._currencies.get_by_code(code.strip().upper())
        except StoreError:
            logger.exception("currency lookup failed", extra={"currency": code})
            return None

    async def get_user_currency(self, user_id: str) -> Optional[Currency]:
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached
        try:
            currency_id = await self._users.get_preferred_currency_id(user_id)
        except StoreError:
            logger.exception("user currency preference lookup failed")
            return None
        if not currency_id:
            return None
        currency = await self.get_by_id(currency_id)
        if currency is not None:
            self._cache.set(user_id, currency)
        return currency

    def clear_cache(self, user_id: Optional[str] = None) -> None:
        self._cache.clear(user_id)
