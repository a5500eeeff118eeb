#!/usr/bin/env python3
"""
Permanently Remove Expired Soft-Deleted Documents

Deletes documents that were soft-deleted (deleted: true) more than N days
ago, measured from modifiedAt, the time of the soft delete. Documents
soft-deleted more recently stay recoverable with undelete().

Usage:
    # Dry run (preview only - default)
    python scripts/clean_hard_deleted.py --collection persons

    # Actually delete, keeping 7 days of soft deletes
    python scripts/clean_hard_deleted.py --collection persons --days 7 --live

Configuration comes from MONGODB_URI / MONGODB_DATABASE (.env supported).
"""

import argparse
import sys
from datetime import datetime, timedelta, timezone

from mongo_repository import DbConfiguration, MongoDbRepository, create_repository
from mongo_repository.filters import expired_soft_deletes
from mongo_repository.logger import setup_logging


def run_cleanup(repo: MongoDbRepository, days: int, dry_run: bool = True):
    """
    Remove documents soft-deleted more than `days` days ago.

    Args:
        repo: Configured repository for the target collection
        days: Retention window for soft-deleted documents
        dry_run: If True, only preview what would be deleted
    """
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    expired = repo.count(expired_soft_deletes(cutoff), include_deleted=True)
    soft_deleted = repo.count({"deleted": True}, include_deleted=True)

    print(f"\n{'='*60}")
    print("Soft-Delete Retention Sweep")
    print(f"{'='*60}")
    print(f"Collection: {repo.config.db_name}.{repo.config.collection}")
    print(f"Mode: {'DRY RUN (preview only)' if dry_run else 'LIVE (will delete)'}")
    print(f"Soft-deleted documents: {soft_deleted:,}")
    print(f"Soft-deleted before {cutoff:%Y-%m-%d %H:%M} UTC: {expired:,}")
    print(f"{'='*60}\n")

    if expired == 0:
        print("No expired soft deletes. Collection is clean.")
        return

    if dry_run:
        print(f"Would permanently delete {expired:,} documents.")
        print("\nTo apply deletion, run with --live.")
        return

    result = repo.clean_hard_deleted(days=days)

    print(f"\n{'='*60}")
    print("DELETION COMPLETE")
    print(f"{'='*60}")
    print(f"Documents deleted: {result.deleted_count:,}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Permanently delete documents soft-deleted more than N days ago",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--collection", required=True, help="Collection to sweep")
    parser.add_argument("--database", help="Database name (default: MONGODB_DATABASE)")
    parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Keep soft deletes younger than this many days (default: 30)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        dest="live",
        action="store_false",
        help="Preview deletion without modifying database (default)",
    )
    mode.add_argument(
        "--live",
        dest="live",
        action="store_true",
        help="Permanently delete the expired documents",
    )
    parser.set_defaults(live=False)
    parser.add_argument("--log-level", default="WARNING", help="Log level")
    return parser


def main():
    args = build_parser().parse_args()
    setup_logging(level=args.log_level)

    if args.live:
        print("\n" + "!"*60)
        print("WARNING: Running in LIVE mode. This will PERMANENTLY DELETE documents.")
        print("!"*60)
        response = input("\nType 'yes' to continue, or press Enter to abort: ")
        if response.lower() != "yes":
            print("Aborted. Run with --dry-run to preview changes first.")
            sys.exit(0)

    try:
        config = DbConfiguration.from_env(collection=args.collection, db_name=args.database)
        repo = create_repository(MongoDbRepository, config)
        run_cleanup(repo, days=args.days, dry_run=not args.live)
    except Exception as e:
        print(f"Cleanup failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
