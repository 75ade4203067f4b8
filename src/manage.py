"""Gourmet Ratings database management CLI.

Creates and drops the database schema of the ratings domain using the
setup_db/drop_db utilities. Only SQL-backed providers are touched, so run it
with PROTEAN_ENV=production (or any overlay that configures PostgreSQL).

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    """Create the ratings database schema."""
    from ratings.domain import ratings
    from ratings.utils.db import setup_db

    print("Initializing ratings domain...")
    ratings.init()
    print("Creating ratings database schema...")
    setup_db(ratings)
    print("Done.")


def drop_database():
    """Drop the ratings database schema."""
    from ratings.domain import ratings
    from ratings.utils.db import drop_db

    print("Initializing ratings domain...")
    ratings.init()
    print("Dropping ratings database schema...")
    drop_db(ratings)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Gourmet Ratings database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
