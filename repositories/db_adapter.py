# -*- coding: utf-8 -*-
"""
Database adapters for the portfolio tables.

SQLite is the default and the fallback; PostgreSQL is used when configured
and reachable. Repositories write queries with ``?`` placeholders against
either backend. This module is the only place that talks to sqlite3 or
psycopg2 directly.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseType(Enum):
    """Supported database backends."""
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


@dataclass
class DatabaseConfig:
    """Connection settings for either backend."""
    db_type: DatabaseType = DatabaseType.SQLITE
    pg_host: str = "localhost"
    pg_port: int = 5432
    pg_database: str = "portfolio"
    pg_user: str = "portfolio_admin"
    pg_password: str = ""
    pg_pool_min: int = 1
    pg_pool_max: int = 10
    sqlite_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> 'DatabaseConfig':
        """Build from ``Config`` (which reads .env / environment)."""
        from app.config import Config

        db_type = DatabaseType.POSTGRESQL if Config.DB_TYPE == "postgresql" else DatabaseType.SQLITE
        return cls(
            db_type=db_type,
            pg_host=Config.POSTGRES_HOST,
            pg_port=Config.POSTGRES_PORT,
            pg_database=Config.POSTGRES_DB,
            pg_user=Config.POSTGRES_USER,
            pg_password=Config.POSTGRES_PASSWORD,
            pg_pool_min=Config.POSTGRES_MIN_CONN,
            pg_pool_max=Config.POSTGRES_MAX_CONN,
            sqlite_path=Config.DB_PATH,
        )


class RowProxy:
    """Read-only mapping over one result row, the same for both backends."""

    __slots__ = ("_data",)

    def __init__(self, data: Dict[str, Any]):
        self._data = data

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key) -> bool:
        return key in self._data

    def get(self, key: str, default=None) -> Any:
        return self._data.get(key, default)

    def keys(self):
        return self._data.keys()

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __repr__(self):
        return f"RowProxy({self._data})"


# Table definitions shared by both backends. {json} is TEXT on SQLite, JSONB on PostgreSQL.
_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS companies (
        company_id TEXT PRIMARY KEY,
        slug TEXT UNIQUE NOT NULL,
        name TEXT NOT NULL,
        legal_name TEXT,
        tagline TEXT,
        description_raw TEXT,
        status TEXT NOT NULL DEFAULT 'active',
        website_url TEXT,
        company_linkedin_url TEXT,
        logo_url TEXT,
        svg_logo_url TEXT,
        industry_tags {json},
        business_model_tags {json},
        keywords {json},
        co_investors {json},
        fund TEXT NOT NULL DEFAULT 'fund_i',
        stage_at_investment TEXT,
        investment_date TEXT,
        investment_amount {real},
        instrument TEXT,
        conversion_cap_usd {real},
        discount_percent {real},
        post_money_valuation {real},
        round_size_usd {real},
        has_pro_rata_rights {bool} DEFAULT {false},
        reason_for_investing TEXT,
        country_of_incorp TEXT,
        incorporation_type TEXT,
        country TEXT,
        hq_address_line_1 TEXT,
        hq_address_line_2 TEXT,
        hq_city TEXT,
        hq_state TEXT,
        hq_zip_code TEXT,
        hq_country TEXT,
        hq_latitude {real},
        hq_longitude {real},
        pitch_season INTEGER,
        pitch_episode_url TEXT,
        pitch_transcript TEXT,
        episode_title TEXT,
        episode_season INTEGER,
        episode_publish_date TEXT,
        episode_show_notes TEXT,
        youtube_url TEXT,
        apple_podcasts_url TEXT,
        spotify_url TEXT,
        notes TEXT,
        created_at TEXT,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS founders (
        founder_id TEXT PRIMARY KEY,
        email TEXT UNIQUE NOT NULL,
        first_name TEXT,
        last_name TEXT,
        title TEXT,
        linkedin_url TEXT,
        sex TEXT,
        bio TEXT,
        created_at TEXT,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS company_founders (
        company_id TEXT NOT NULL REFERENCES companies(company_id),
        founder_id TEXT NOT NULL REFERENCES founders(founder_id),
        role TEXT NOT NULL DEFAULT 'founder',
        is_active {bool} DEFAULT {true},
        created_at TEXT,
        PRIMARY KEY (company_id, founder_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS vcs (
        vc_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        firm_name TEXT,
        slug TEXT UNIQUE,
        profile_image_url TEXT,
        linkedin_url TEXT,
        created_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS company_vcs (
        company_id TEXT NOT NULL REFERENCES companies(company_id),
        vc_id TEXT NOT NULL REFERENCES vcs(vc_id),
        episode_url TEXT,
        episode_season INTEGER,
        is_invested {bool} DEFAULT {false},
        investment_amount_usd {real},
        investment_date TEXT,
        created_at TEXT,
        PRIMARY KEY (company_id, vc_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS drafts (
        storage_key TEXT PRIMARY KEY,
        payload TEXT NOT NULL,
        updated_at TEXT
    )
    """,
)


def table_statements(db_type: DatabaseType) -> List[str]:
    """CREATE TABLE statements rendered for a backend."""
    if db_type == DatabaseType.POSTGRESQL:
        types = {"json": "JSONB", "real": "DOUBLE PRECISION", "bool": "BOOLEAN",
                 "true": "TRUE", "false": "FALSE"}
    else:
        types = {"json": "TEXT", "real": "REAL", "bool": "INTEGER",
                 "true": "1", "false": "0"}
    return [statement.format(**types) for statement in _TABLES]


class DatabaseAdapter(ABC):
    """
    Common interface of the backends.

    Subclasses implement ``_run``; every statement commits on its own.
    """

    @property
    @abstractmethod
    def db_type(self) -> DatabaseType:
        """Backend of this adapter."""

    @abstractmethod
    def connect(self) -> bool:
        """Open the connection (or pool); False when the backend is unreachable."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection (or pool)."""

    @abstractmethod
    def is_connected(self) -> bool:
        """True while a connection (or pool) is open."""

    @abstractmethod
    def _run(self, query: str, params: Sequence, fetch: Optional[str]) -> Any:
        """Execute one statement; ``fetch`` is None, "one" or "all"."""

    def execute(self, query: str, params: Sequence = ()) -> List[RowProxy]:
        return self._run(query, params, "all") or []

    def fetch_one(self, query: str, params: Sequence = ()) -> Optional[RowProxy]:
        return self._run(query, params, "one")

    def fetch_all(self, query: str, params: Sequence = ()) -> List[RowProxy]:
        return self._run(query, params, "all") or []

    def initialize(self) -> None:
        """Create the portfolio tables if they do not exist."""
        for statement in table_statements(self.db_type):
            self._run(statement, (), None)
        logger.info(f"{self.db_type.value} schema ready")

    @staticmethod
    def _collect(cursor, fetch: Optional[str]) -> Any:
        if fetch is None or not cursor.description:
            return None
        columns = [column[0] for column in cursor.description]
        if fetch == "one":
            row = cursor.fetchone()
            return RowProxy(dict(zip(columns, row))) if row is not None else None
        return [RowProxy(dict(zip(columns, row))) for row in cursor.fetchall()]


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite adapter.

    One connection is shared by the UI thread (draft writes) and the
    submission worker thread, so every statement runs under a lock.
    """

    def __init__(self, db_path: Optional[Path] = None):
        import sqlite3
        self._sqlite3 = sqlite3

        if db_path is None:
            from app.config import Config
            db_path = Config.DB_PATH

        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = None
        self._lock = threading.RLock()

    @property
    def db_type(self) -> DatabaseType:
        return DatabaseType.SQLITE

    @property
    def db_path(self) -> Path:
        return self._db_path

    def connect(self) -> bool:
        with self._lock:
            if self._connection is not None:
                return True
            try:
                self._connection = self._sqlite3.connect(str(self._db_path), check_same_thread=False)
                self._connection.execute("PRAGMA foreign_keys = ON")
            except self._sqlite3.Error as e:
                logger.error(f"SQLite connection error: {e}")
                self._connection = None
                return False
        return True

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.info("SQLite connection closed")

    def is_connected(self) -> bool:
        return self._connection is not None

    def _run(self, query: str, params: Sequence, fetch: Optional[str]) -> Any:
        with self._lock:
            if self._connection is None and not self.connect():
                raise RuntimeError(f"Could not open SQLite database at {self._db_path}")
            cursor = self._connection.cursor()
            try:
                cursor.execute(query, tuple(params or ()))
                result = self._collect(cursor, fetch)
                self._connection.commit()
                return result
            except self._sqlite3.Error as e:
                self._connection.rollback()
                logger.error(f"SQLite error: {e}\nQuery: {query}")
                raise
            finally:
                cursor.close()


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL adapter over a thread-safe connection pool."""

    def __init__(self, config: DatabaseConfig):
        import psycopg2
        from psycopg2 import pool as pg_pool

        self._psycopg2 = psycopg2
        self._pg_pool = pg_pool
        self._config = config
        self._pool = None

    @property
    def db_type(self) -> DatabaseType:
        return DatabaseType.POSTGRESQL

    def connect(self) -> bool:
        config = self._config
        try:
            self._pool = self._pg_pool.ThreadedConnectionPool(
                minconn=config.pg_pool_min,
                maxconn=config.pg_pool_max,
                host=config.pg_host,
                port=config.pg_port,
                database=config.pg_database,
                user=config.pg_user,
                password=config.pg_password,
            )
        except self._psycopg2.Error as e:
            logger.error(f"PostgreSQL connection error: {e}")
            return False
        logger.info(f"PostgreSQL pool open: {config.pg_host}:{config.pg_port}/{config.pg_database}")
        return True

    def close(self) -> None:
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("PostgreSQL connection pool closed")

    def is_connected(self) -> bool:
        return self._pool is not None

    def _run(self, query: str, params: Sequence, fetch: Optional[str]) -> Any:
        if self._pool is None and not self.connect():
            raise RuntimeError("Could not connect to PostgreSQL")

        query = query.replace("?", "%s")
        conn = self._pool.getconn()
        try:
            with conn.cursor() as cursor:
                cursor.execute(query, tuple(params or ()))
                result = self._collect(cursor, fetch)
            conn.commit()
            return result
        except self._psycopg2.Error as e:
            conn.rollback()
            logger.error(f"PostgreSQL error: {e}\nQuery: {query}")
            raise
        finally:
            self._pool.putconn(conn)


class DatabaseFactory:
    """
    Hands out one adapter per configuration.

    Falls back to SQLite when PostgreSQL cannot be reached.
    """

    _instance: Optional[DatabaseAdapter] = None
    _config: Optional[DatabaseConfig] = None

    @classmethod
    def create(cls, config: Optional[DatabaseConfig] = None) -> DatabaseAdapter:
        if config is None:
            config = DatabaseConfig.from_env()

        if cls._instance is not None and cls._config == config:
            return cls._instance

        cls._config = config

        if config.db_type == DatabaseType.POSTGRESQL:
            adapter = PostgreSQLAdapter(config)
            if adapter.connect():
                cls._instance = adapter
                return adapter
            logger.warning("PostgreSQL unavailable, falling back to SQLite")

        adapter = SQLiteAdapter(config.sqlite_path)
        adapter.connect()
        logger.info(f"Using SQLite database: {adapter.db_path}")
        cls._instance = adapter
        return adapter

    @classmethod
    def reset(cls) -> None:
        """Close the current adapter and forget it."""
        if cls._instance is not None:
            cls._instance.close()
        cls._instance = None
        cls._config = None
