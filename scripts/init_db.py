#!/usr/bin/env python3
"""
Create or upgrade the blog aggregator schema.

Runs the Alembic migrations against the configured database (DB_* /
DATABASE_URL, or a YAML file given with --config).
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blog_aggregator.config import get_config, load_config_from_yaml, set_config
from blog_aggregator.storage.database import init_db


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Create the blog aggregator tables")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--drop", action="store_true", help="Drop all tables first (destroys data)")
    parser.add_argument(
        "--no-migrations",
        action="store_true",
        help="Use create_all() instead of Alembic (scratch databases only)",
    )
    args = parser.parse_args()

    if args.config:
        set_config(load_config_from_yaml(args.config))
    db_config = get_config().database

    print(f"Preparing {db_config.resolved_type} database...")
    init_db(db_config, drop_all=args.drop, use_migrations=not args.no_migrations)
    print("Done.")


if __name__ == "__main__":
    main()
