"""Utility script to prepare the configured database."""
from __future__ import annotations

import argparse
import os
import sys
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql

from techcircle.core.settings import settings


def normalize_to_psycopg(uri: str) -> str:
    """Return a Postgres URI suitable for psycopg.connect().

    Strips quotes and whitespace and converts SQLAlchemy schemes
    (``postgresql+psycopg``) to plain ``postgresql``.
    """
    uri = (uri or "").strip().strip("'\"")
    if not uri:
        raise ValueError("DATABASE_URL is empty")
    parts = urlsplit(uri)
    scheme = parts.scheme
    if scheme.startswith("postgresql+"):
        scheme = "postgresql"
    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def ensure_database_exists(db_url: str) -> None:
    """Create the configured Postgres database if it is missing."""
    parts = urlsplit(normalize_to_psycopg(db_url))
    if not parts.scheme.startswith("postgresql"):
        raise ValueError(f"Not a Postgres URL: {db_url!r}")
    target_db = parts.path.lstrip("/") or "postgres"
    admin_url = urlunsplit(("postgresql", parts.netloc, "/postgres", parts.query, ""))

    if os.getenv("ENSURE_DB_DEBUG") == "1":
        print(f"[ensure_db] admin_url={admin_url!r}, target_db={target_db!r}")

    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target_db,))
        if cur.fetchone() is None:
            cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db)))
            print(f"[ensure_db] created database {target_db}")
        else:
            print(f"[ensure_db] database {target_db} already exists")


def main() -> None:
    parser = argparse.ArgumentParser(description="Ensure the configured database exists")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables straight from the models instead of running migrations.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to effective settings URL)",
    )
    args = parser.parse_args()

    raw_url = args.url or settings.effective_database_url
    try:
        if raw_url.startswith("postgresql"):
            ensure_database_exists(raw_url)
        if args.create_tables:
            from techcircle.db.session import create_tables

            create_tables()
            print("[ensure_db] created tables from models")
    except Exception as exc:
        print(f"[ensure_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
