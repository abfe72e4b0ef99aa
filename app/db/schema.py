"""Database schema DDL definitions and initialization utilities.

Tables:
  - users: account rows carrying the preferred currency reference
  - currencies: reference data (rate = units of currency per 1 USD)
  - cities: destination lookup used for stop / transport labels
  - trips: trip header with stored budget, currency and estimate
  - trip_category_budgets: optional per-category allocations (trip currency)
  - trip_stops: ordered city segments of a trip
  - accommodations / trip_accommodations: listings and bookings
  - trip_transport: transport legs between cities
  - activities / trip_activities: catalog and scheduled activities per stop
  - cost_items: ad-hoc costs, optionally tied to a stop
  - shared_links: token-addressable read-only trip views
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

USERS_DDL = f"""
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT,
    currency_id TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (currency_id) REFERENCES currencies(id) ON DELETE SET NULL
);
"""

CURRENCIES_DDL = f"""
CREATE TABLE IF NOT EXISTS currencies (
    id TEXT PRIMARY KEY,
    code TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL DEFAULT '',
    symbol TEXT NOT NULL DEFAULT '',
    exchange_rate_to_usd REAL NOT NULL CHECK (exchange_rate_to_usd > 0),
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

CITIES_DDL = """
CREATE TABLE IF NOT EXISTS cities (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    country TEXT
);
"""

TRIPS_DDL = f"""
CREATE TABLE IF NOT EXISTS trips (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    budget REAL,
    currency TEXT NOT NULL DEFAULT 'USD',
    total_estimated_cost REAL,
    deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

TRIP_CATEGORY_BUDGETS_DDL = f"""
CREATE TABLE IF NOT EXISTS trip_category_budgets (
    trip_id TEXT NOT NULL,
    category TEXT NOT NULL, -- display category, e.g. 'Food & Dining'
    amount REAL NOT NULL DEFAULT 0,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    PRIMARY KEY (trip_id, category),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);
"""

TRIP_STOPS_DDL = """
CREATE TABLE IF NOT EXISTS trip_stops (
    id TEXT PRIMARY KEY,
    trip_id TEXT NOT NULL,
    city_id TEXT,
    seq INTEGER NOT NULL DEFAULT 0,
    start_date TEXT,
    end_date TEXT,
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE,
    FOREIGN KEY (city_id) REFERENCES cities(id) ON DELETE SET NULL
);
"""

ACCOMMODATIONS_DDL = """
CREATE TABLE IF NOT EXISTS accommodations (
    id TEXT PRIMARY KEY,
    city_id TEXT,
    provider TEXT,
    name TEXT,
    price_per_night REAL,
    currency TEXT, -- ISO code as listed by the provider
    currency_id TEXT
);
"""

TRIP_ACCOMMODATIONS_DDL = f"""
CREATE TABLE IF NOT EXISTS trip_accommodations (
    id TEXT PRIMARY KEY,
    trip_id TEXT NOT NULL,
    trip_stop_id TEXT,
    accommodation_id TEXT,
    check_in_date TEXT,
    check_out_date TEXT,
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);
"""

TRIP_TRANSPORT_DDL = f"""
CREATE TABLE IF NOT EXISTS trip_transport (
    id TEXT PRIMARY KEY,
    trip_id TEXT NOT NULL,
    from_city_id TEXT,
    to_city_id TEXT,
    transport_mode TEXT,
    provider TEXT,
    departure_time TEXT,
    arrival_time TEXT,
    cost REAL NOT NULL DEFAULT 0,
    currency_id TEXT,
    booking_reference TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);
"""

ACTIVITIES_DDL = """
CREATE TABLE IF NOT EXISTS activities (
    id TEXT PRIMARY KEY,
    city_id TEXT,
    name TEXT,
    cost REAL,
    currency_id TEXT
);
"""

TRIP_ACTIVITIES_DDL = """
CREATE TABLE IF NOT EXISTS trip_activities (
    id TEXT PRIMARY KEY,
    trip_stop_id TEXT NOT NULL,
    activity_id TEXT,
    scheduled_date TEXT,
    start_time TEXT,
    FOREIGN KEY (trip_stop_id) REFERENCES trip_stops(id) ON DELETE CASCADE
);
"""

COST_ITEMS_DDL = f"""
CREATE TABLE IF NOT EXISTS cost_items (
    id TEXT PRIMARY KEY,
    trip_id TEXT NOT NULL,
    trip_stop_id TEXT,
    category TEXT NOT NULL, -- 'transport' | 'accommodation' | 'activities' | 'meals' | 'other'
    amount REAL NOT NULL,
    currency_id TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);
"""

SHARED_LINKS_DDL = f"""
CREATE TABLE IF NOT EXISTS shared_links (
    token TEXT PRIMARY KEY,
    trip_id TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

TRIPS_USER_INDEX_DDL = "CREATE INDEX IF NOT EXISTS idx_trips_user ON trips(user_id, deleted);"
STOPS_TRIP_INDEX_DDL = "CREATE INDEX IF NOT EXISTS idx_stops_trip ON trip_stops(trip_id, start_date);"
COST_ITEMS_TRIP_INDEX_DDL = "CREATE INDEX IF NOT EXISTS idx_cost_items_trip ON cost_items(trip_id);"
TRIP_ACTIVITIES_STOP_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_trip_activities_stop ON trip_activities(trip_stop_id);"
)

DDL_ORDER: Sequence[str] = (
    CURRENCIES_DDL,
    USERS_DDL,
    CITIES_DDL,
    TRIPS_DDL,
    TRIP_STOPS_DDL,
    ACCOMMODATIONS_DDL,
    TRIP_ACCOMMODATIONS_DDL,
    TRIP_TRANSPORT_DDL,
    ACTIVITIES_DDL,
    TRIP_ACTIVITIES_DDL,
    COST_ITEMS_DDL,
    METADATA_DDL,
)

INDEX_DDL: Sequence[str] = (
    TRIPS_USER_INDEX_DDL,
    STOPS_TRIP_INDEX_DDL,
    COST_ITEMS_TRIP_INDEX_DDL,
    TRIP_ACTIVITIES_STOP_INDEX_DDL,
)


def init_db(path: Path) -> None:
    """Create the base (version 1) tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    """Create indexes, tolerating legacy schemas missing scoped columns."""
    for ddl in INDEX_DDL:
        try:
            cur.execute(ddl)
        except sqlite3.OperationalError:
            # Legacy tables may lack columns; migration handles re-creation.
            continue
