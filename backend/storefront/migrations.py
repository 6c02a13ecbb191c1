"""Versioned schema migrations.

Each migration runs once per database and is recorded in
``schema_migrations``. Startup calls :func:`run_migrations`; databases that
are already current are left untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import structlog
from sqlalchemy import inspect, select, text
from sqlalchemy.engine import Connection, Engine

from . import models
from .database import Base

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ColumnPatch:
    table: str
    name: str
    definition: str


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    apply: Callable[[Connection], None]


def column_exists(conn: Connection, table: str, column_name: str) -> bool:
    return any(column["name"] == column_name for column in inspect(conn).get_columns(table))


def apply_column_patch(conn: Connection, patch: ColumnPatch) -> None:
    if column_exists(conn, patch.table, patch.name):
        logger.info("column_present", table=patch.table, column=patch.name)
        return
    conn.execute(text(f"ALTER TABLE {patch.table} ADD COLUMN {patch.name} {patch.definition}"))
    logger.info("column_added", table=patch.table, column=patch.name, definition=patch.definition)


def _create_core_tables(conn: Connection) -> None:
    Base.metadata.create_all(
        bind=conn,
        tables=[
            models.Customer.__table__,
            models.Order.__table__,
            models.Authorization.__table__,
            models.Settlement.__table__,
        ],
    )


AUTH_TOKEN_PATCHES: Tuple[ColumnPatch, ...] = (
    ColumnPatch(table="authorizations", name="auth_token", definition="VARCHAR(128)"),
    ColumnPatch(table="authorizations", name="auth_expires_at", definition="TIMESTAMP"),
)


def _add_auth_token_columns(conn: Connection) -> None:
    for patch in AUTH_TOKEN_PATCHES:
        apply_column_patch(conn, patch)


MIGRATIONS: Tuple[Migration, ...] = (
    Migration(1, "create customers, orders, authorizations and settlements", _create_core_tables),
    Migration(2, "add auth_token and auth_expires_at to authorizations", _add_auth_token_columns),
)


def _ensure_version_table(engine: Engine) -> None:
    with engine.begin() as conn:
        Base.metadata.create_all(bind=conn, tables=[models.SchemaMigration.__table__])


def applied_versions(engine: Engine) -> List[int]:
    _ensure_version_table(engine)
    with engine.begin() as conn:
        rows = conn.execute(select(models.SchemaMigration.version).order_by(models.SchemaMigration.version))
        return [row[0] for row in rows]


def current_version(engine: Engine) -> Optional[int]:
    versions = applied_versions(engine)
    return versions[-1] if versions else None


def run_migrations(engine: Engine) -> List[int]:
    """Apply pending migrations in order; returns the versions applied now."""

    done = set(applied_versions(engine))
    applied: List[int] = []
    for migration in MIGRATIONS:
        if migration.version in done:
            continue
        with engine.begin() as conn:
            migration.apply(conn)
            conn.execute(
                models.SchemaMigration.__table__.insert().values(
                    version=migration.version,
                    description=migration.description,
                    applied_at=models.utcnow(),
                )
            )
        logger.info("migration_applied", version=migration.version, description=migration.description)
        applied.append(migration.version)
    if not applied:
        logger.info("schema_current", version=max(done) if done else None)
    return applied
