"""
Migration runner for SongQueue database migrations

Every migration is idempotent, so the runner simply applies all of them in
file order. Fresh databases get the full schema from init_db() and only need
this for pre-existing Supabase tables.

Usage:
    python migrations/run_migrations.py              # Apply all migrations
    python migrations/run_migrations.py --list       # Show migrations in order
    python migrations/run_migrations.py --downgrade  # Roll back, newest first
"""

import sys
import importlib
import logging
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from songqueue.database import engine

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def get_migration_files():
    """Numbered migration files, oldest first"""
    migrations_dir = Path(__file__).parent
    return sorted(f for f in migrations_dir.glob("[0-9][0-9][0-9]_*.py"))


def load_migration(migration_file: Path):
    return importlib.import_module(f"migrations.{migration_file.stem}")


def run_migrations(downgrade: bool = False):
    """Apply (or roll back) every migration"""
    migration_files = get_migration_files()
    if not migration_files:
        logger.warning("No migration files found")
        return

    if downgrade:
        migration_files = list(reversed(migration_files))

    step = "downgrade" if downgrade else "upgrade"
    logger.info(f"Running {step} for {len(migration_files)} migration(s)")

    for migration_file in migration_files:
        module = load_migration(migration_file)
        action = getattr(module, step, None)
        if action is None:
            logger.warning(f"No {step} function in {migration_file.name}, skipping")
            continue

        logger.info(f"Processing: {migration_file.name}")
        try:
            action(engine)
        except Exception as e:
            logger.error(f"Failed to run {step} of {migration_file.name}: {e}")
            raise

    logger.info(f"✅ All migrations processed ({step})")


if __name__ == "__main__":
    if "--list" in sys.argv:
        for migration_file in get_migration_files():
            print(migration_file.name)
        sys.exit(0)

    downgrade = "--downgrade" in sys.argv or "-d" in sys.argv

    if downgrade:
        logger.warning("⚠️  Running in DOWNGRADE mode - this will rollback changes!")
        confirm = input("Are you sure you want to continue? (yes/no): ")
        if confirm.lower() != "yes":
            logger.info("Cancelled")
            sys.exit(0)

    try:
        run_migrations(downgrade=downgrade)
    except Exception as e:
        logger.error(f"Migration failed: {e}")
        sys.exit(1)
