#!/usr/bin/env python3
"""
Verify the repository works correctly against a live MongoDB.

Smoke check that validates:
1. Repository can be configured from the environment
2. Insert stamps id and timestamps
3. Update keeps createdAt
4. Soft delete hides the document and undelete restores it
5. Hard delete removes the document

Every step works on a single throwaway document, which is hard-deleted
at the end.

Usage:
    python scripts/verify_repository.py

    # Against a specific collection
    python scripts/verify_repository.py --collection repository_smoke
"""

import argparse
import logging
import sys
from typing import Optional

from mongo_repository import (
    DbConfiguration,
    MongoDbItem,
    MongoDbRepository,
    create_repository,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


class SmokeItem(MongoDbItem):
    label: Optional[str] = None


class SmokeRepository(MongoDbRepository[SmokeItem]):
    entity_type = SmokeItem


def verify_configuration(collection: str) -> dict:
    """Verify repository can be configured."""
    logger.info("\n=== Step 1: Configuration ===")

    try:
        config = DbConfiguration.from_env(collection=collection)
        repo = create_repository(SmokeRepository, config)
        logger.info(f"  ✓ Repository configured: {config.db_name}.{config.collection}")
        logger.info(f"    documents: {repo.count(include_deleted=True)}")
        return {"success": True, "repository": repo}
    except Exception as e:
        logger.error(f"  ✗ Failed to configure repository: {e}")
        return {"success": False, "error": str(e)}


def verify_insert(repo: SmokeRepository) -> dict:
    """Verify insert stamps the document."""
    logger.info("\n=== Step 2: Insert ===")

    try:
        item = SmokeItem(label="smoke")
        repo.insert(item)

        stored = repo.get(item.id)
        assert stored is not None, "Inserted document not found"
        assert stored.created_at == stored.modified_at, "Timestamps differ on insert"
        assert stored.deleted is False, "New document flagged deleted"

        logger.info(f"  ✓ Inserted {item.id}")
        return {"success": True, "item": item}
    except Exception as e:
        logger.error(f"  ✗ Insert failed: {e}")
        return {"success": False, "error": str(e)}


def verify_update(repo: SmokeRepository, item: SmokeItem) -> dict:
    """Verify update changes fields but not createdAt."""
    logger.info("\n=== Step 3: Update ===")

    try:
        created_at = item.created_at
        item.label = "smoke-updated"
        result = repo.update(item)

        stored = repo.get(item.id)
        assert result.matched_count == 1, f"Expected matched_count=1, got {result.matched_count}"
        assert stored.label == "smoke-updated", "Update not applied"
        assert stored.created_at == created_at, "createdAt changed on update"

        logger.info(f"  ✓ Updated {item.id}")
        logger.info(f"    matched_count: {result.matched_count}")
        logger.info(f"    modified_count: {result.modified_count}")
        return {"success": True}
    except Exception as e:
        logger.error(f"  ✗ Update failed: {e}")
        return {"success": False, "error": str(e)}


def verify_soft_delete(repo: SmokeRepository, item: SmokeItem) -> dict:
    """Verify soft delete hides and undelete restores."""
    logger.info("\n=== Step 4: Soft Delete / Undelete ===")

    try:
        repo.delete(item.id)
        assert repo.get(item.id) is None, "Soft-deleted document still visible"
        assert repo.get(item.id, include_deleted=True) is not None, "Document lost on soft delete"

        restored = repo.undelete(item.id)
        assert restored is not None and restored.deleted is False, "Undelete failed"
        assert repo.get(item.id) is not None, "Restored document not visible"

        logger.info(f"  ✓ Soft-deleted and restored {item.id}")
        return {"success": True}
    except Exception as e:
        logger.error(f"  ✗ Soft delete check failed: {e}")
        return {"success": False, "error": str(e)}


def verify_hard_delete(repo: SmokeRepository, item: SmokeItem) -> dict:
    """Verify hard delete removes the document."""
    logger.info("\n=== Step 5: Hard Delete ===")

    try:
        result = repo.delete(item.id, hard_delete=True)
        assert result.deleted_count == 1, f"Expected deleted_count=1, got {result.deleted_count}"
        assert repo.get(item.id, include_deleted=True) is None, "Document survived hard delete"

        logger.info(f"  ✓ Removed {item.id}")
        return {"success": True}
    except Exception as e:
        logger.error(f"  ✗ Hard delete failed: {e}")
        return {"success": False, "error": str(e)}


def main():
    parser = argparse.ArgumentParser(description="Verify repository against a live MongoDB")
    parser.add_argument(
        "--collection",
        default="repository_smoke",
        help="Collection to use (default: repository_smoke)",
    )
    args = parser.parse_args()

    logger.info("=" * 60)
    logger.info("Repository Verification")
    logger.info("=" * 60)

    results = {}

    results["configuration"] = verify_configuration(args.collection)
    if not results["configuration"]["success"]:
        logger.error("\n❌ VERIFICATION FAILED: Could not configure repository")
        sys.exit(1)
    repo = results["configuration"]["repository"]

    results["insert"] = verify_insert(repo)
    if not results["insert"]["success"]:
        logger.error("\n❌ VERIFICATION FAILED: Could not insert")
        sys.exit(1)
    item = results["insert"]["item"]

    results["update"] = verify_update(repo, item)
    results["soft_delete"] = verify_soft_delete(repo, item)
    results["hard_delete"] = verify_hard_delete(repo, item)

    repo.close()

    logger.info("\n" + "=" * 60)
    logger.info("VERIFICATION SUMMARY")
    logger.info("=" * 60)

    all_passed = all(r.get("success", False) for r in results.values())

    for name, result in results.items():
        status = "✓ PASS" if result.get("success", False) else "✗ FAIL"
        logger.info(f"  {status}: {name}")

    logger.info("=" * 60)
    if all_passed:
        logger.info("✅ ALL VERIFICATIONS PASSED")
    else:
        logger.info("❌ SOME VERIFICATIONS FAILED")
        sys.exit(1)


if __name__ == "__main__":
    main()
