"""Bring the configured database up to the latest schema version."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from storefront.config import get_settings  # noqa: E402
from storefront.database import engine  # noqa: E402
from storefront.logging_config import configure_logging  # noqa: E402
from storefront.migrations import current_version, run_migrations  # noqa: E402


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.use_json_logs())
    applied = run_migrations(engine)
    if applied:
        print(f"Applied migrations: {', '.join(str(version) for version in applied)}")
    print(f"Schema at version {current_version(engine)}.")


if __name__ == "__main__":
    run()
