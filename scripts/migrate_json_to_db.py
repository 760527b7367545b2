#!/usr/bin/env python3
"""
Migrate posts from a JSON corpus to the SQLite database.

Usage:
    python scripts/migrate_json_to_db.py --json data/posts.json --db data/posts.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from relatedposts.database import Post, init_database, get_session
from relatedposts.storage import load_corpus


def migrate(json_path: Path, db_path: Path, dry_run: bool = False) -> bool:
    """
    Migrate posts from JSON to database. Existing ids are skipped.

    Args:
        json_path: Path to JSON corpus file
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
    """
    print(f"Loading posts from {json_path}...")
    records = load_corpus(json_path)
    print(f"Found {len(records)} posts in JSON corpus")

    if dry_run:
        print("\n[DRY RUN] Would migrate the following posts:")
        for i, r in enumerate(records[:5], 1):
            print(f"  {i}. {r.id}: {r.title}")
        if len(records) > 5:
            print(f"  ... and {len(records) - 5} more")
        return True

    print(f"\nInitializing database at {db_path}...")
    init_database(db_path)
    session = get_session(db_path)

    migrated = 0
    skipped = 0

    try:
        for r in records:
            if session.get(Post, r.id) is not None:
                print(f"Post {r.id} already exists, skipping")
                skipped += 1
                continue

            session.add(Post(
                id=r.id,
                title=r.title,
                tags=sorted(r.tags),
                category=r.category,
                published_at=r.published_at.replace(tzinfo=None),
                description=r.description,
                restricted=r.restricted,
                pinned=r.pinned,
                draft=r.draft,
            ))
            migrated += 1

            if migrated % 20 == 0:
                print(f"  Migrated {migrated} posts...")

        session.commit()
        print("\nMigration complete!")
        print(f"   Migrated: {migrated}")
        print(f"   Skipped:  {skipped}")
    except Exception as e:
        session.rollback()
        print(f"Failed to commit: {e}")
        return False
    finally:
        session.close()

    return True


def main():
    parser = argparse.ArgumentParser(description="Migrate posts from JSON to database")
    parser.add_argument("--json", type=Path, default=Path("data/posts.json"),
                       help="Path to JSON corpus file")
    parser.add_argument("--db", type=Path, default=Path("data/posts.db"),
                       help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                       help="Show what would be migrated without writing")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"JSON file not found: {args.json}")
        sys.exit(1)

    if not migrate(args.json, args.db, dry_run=args.dry_run):
        sys.exit(1)


if __name__ == "__main__":
    main()
