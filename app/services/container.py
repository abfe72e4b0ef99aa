"""Service wiring.

``BudgetServices`` bundles the stores, the currency directory (with its
per-user cache) and the aggregator for one application instance. The app
factory builds one and keeps it on ``app.state``; routers reach it through
the ``get_services`` dependency, and tests can build one over fake stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import Request

from app.core.config import Settings
from app.db.dal import Database
from app.db.stores import (
    SqliteCostSourceStore,
    SqliteCurrencyStore,
    SqliteSharedLinkStore,
    SqliteTripStore,
    SqliteUserStore,
)
from app.services.budget_aggregator import BudgetAggregator
from app.services.cost_sources import CostSourceFetcher, default_fetchers
from app.services.currency.cache import CurrencyCache, build_currency_cache
from app.services.currency.directory import CurrencyDirectory
from app.services.stores import (
    CostSourceStore,
    CurrencyStore,
    SharedLinkStore,
    TripStore,
    UserStore,
)


@dataclass
class BudgetServices:
    settings: Settings
    trips: TripStore
    currencies: CurrencyStore
    users: UserStore
    costs: CostSourceStore
    links: SharedLinkStore
    cache: CurrencyCache
    directory: CurrencyDirectory = field(init=False)
    aggregator: BudgetAggregator = field(init=False)
    fetchers: Optional[List[CostSourceFetcher]] = None

    def __post_init__(self) -> None:
        self.directory = CurrencyDirectory(self.currencies, self.users, self.cache)
        if self.fetchers is None:
            self.fetchers = default_fetchers(
                self.costs, self.trips, timeout=self.settings.fetch_timeout_seconds
            )
        self.aggregator = BudgetAggregator(
            self.trips,
            self.directory,
            self.fetchers,
            default_currency=self.settings.default_currency,
        )


def build_sqlite_services(settings: Settings) -> BudgetServices:
    db = Database(settings.db_path)  # type: ignore[arg-type]
    return BudgetServices(
        settings=settings,
        trips=SqliteTripStore(db),
        currencies=SqliteCurrencyStore(db),
        users=SqliteUserStore(db),
        costs=SqliteCostSourceStore(db),
        links=SqliteSharedLinkStore(db),
        cache=build_currency_cache(settings),
    )


def get_services(request: Request) -> BudgetServices:
    return request.app.state.services
