"""Ratings database and maintenance CLI.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py reconcile PRODUCT_ID...  # Force-recompute summaries
"""

import argparse
import json
import sys


def _ratings():
    from ratings.domain import ratings

    ratings.init()
    return ratings


def setup_database():
    from ratings.utils.db import setup_db

    print("Initializing ratings domain...")
    domain = _ratings()
    print("Creating ratings database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from ratings.utils.db import drop_db

    print("Initializing ratings domain...")
    domain = _ratings()
    print("Dropping ratings database schema...")
    drop_db(domain)
    print("Done.")


def reconcile(product_ids):
    """Recompute each product's summary and print the before/after report."""
    from ratings.engine import build_engine

    domain = _ratings()
    with domain.domain_context():
        engine = build_engine()
        for product_id in product_ids:
            report = engine.force_reconcile(product_id)
            print(json.dumps(report.to_dict(), indent=2, default=str))


def main():
    parser = argparse.ArgumentParser(description="Ratings database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    reconcile_parser = subparsers.add_parser("reconcile", help="Force-recompute product summaries")
    reconcile_parser.add_argument("product_ids", nargs="+")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "reconcile":
        reconcile(args.product_ids)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
