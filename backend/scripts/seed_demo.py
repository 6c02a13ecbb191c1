"""Load demo customers, orders and ledger rows into the configured database."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from storefront.config import get_settings  # noqa: E402
from storefront.database import SessionLocal, engine  # noqa: E402
from storefront.logging_config import configure_logging  # noqa: E402
from storefront.migrations import run_migrations  # noqa: E402
from storefront.seed import seed_demo_data, upsert_sample_orders  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--samples",
        action="store_true",
        help="also upsert the ORD9001-ORD9010 sample orders (no authorization rows)",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level, settings.use_json_logs())
    run_migrations(engine)

    with SessionLocal() as session:
        stats = seed_demo_data(session)
        print(f"Created {stats.created} rows, skipped {stats.skipped} existing.")
        if args.samples:
            count = upsert_sample_orders(session)
            print(f"Upserted {count} sample orders.")


if __name__ == "__main__":
    main()
