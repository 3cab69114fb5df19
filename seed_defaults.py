#!/usr/bin/env python3
"""
Create the database schema and the default records.

Applies pending migrations and inserts the default administrator user
(``admin@example.com``) and the default bank account (``123456789``)
when they do not exist yet.  Existing records are never modified.

Usage:
    python seed_defaults.py [--db ./digital_bank_api/digital_bank.db]
"""

import argparse
import logging
import os

from digital_bank_api.app.core.config import settings
from digital_bank_api.app.core.logging_config import setup_logging


def main() -> None:
    ap = argparse.ArgumentParser(description="Create Digital Bank API tables and default records (SQLite).")
    ap.add_argument("--db", help="Path to SQLite DB file. Defaults to DATABASE_URL.")
    args = ap.parse_args()

    if args.db:
        settings.database_url = os.path.abspath(args.db)

    setup_logging(settings.log_level)
    from digital_bank_api.app.core.db import get_database_path, init_db, seed_defaults

    init_db()
    seed_defaults()
    logging.getLogger(__name__).info("Database ready at %s", get_database_path())


if __name__ == "__main__":
    main()
