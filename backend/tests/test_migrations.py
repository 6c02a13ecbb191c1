from sqlalchemy import inspect, text

from storefront.database import build_engine
from storefront.migrations import MIGRATIONS, current_version, run_migrations


def _engine(tmp_path):
    return build_engine(f"sqlite:///{(tmp_path / 'migrate.db').as_posix()}")


def test_fresh_database_gets_every_version_once(tmp_path):
    engine = _engine(tmp_path)
    try:
        assert run_migrations(engine) == [migration.version for migration in MIGRATIONS]
        assert run_migrations(engine) == []
        assert current_version(engine) == MIGRATIONS[-1].version

        tables = set(inspect(engine).get_table_names())
        assert {"customers", "orders", "authorizations", "settlements", "schema_migrations"} <= tables
    finally:
        engine.dispose()


def test_legacy_authorizations_table_gains_token_columns(tmp_path):
    engine = _engine(tmp_path)
    try:
        with engine.begin() as conn:
            conn.execute(
                text(
                    """
                    CREATE TABLE authorizations (
                      auth_id INTEGER PRIMARY KEY AUTOINCREMENT,
                      order_id TEXT NOT NULL,
                      outcome TEXT NOT NULL,
                      gateway_code TEXT,
                      gateway_message TEXT,
                      amount REAL NOT NULL,
                      created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                    """
                )
            )
            conn.execute(
                text(
                    "INSERT INTO authorizations (order_id, outcome, gateway_code, gateway_message, amount) "
                    "VALUES ('ORD1002', 'SUCCESS', '00', 'Approved', 49.99)"
                )
            )

        assert run_migrations(engine) == [1, 2]

        columns = {column["name"] for column in inspect(engine).get_columns("authorizations")}
        assert {"auth_token", "auth_expires_at"} <= columns
        with engine.begin() as conn:
            row = conn.execute(text("SELECT order_id, auth_token FROM authorizations")).one()
        assert row == ("ORD1002", None)
    finally:
        engine.dispose()
