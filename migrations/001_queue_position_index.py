"""
Migration: Unique pending queue positions and skip payment ledger
Date: 2026-10-17

Changes:
1. Add skipped_at to submissions, free_skips and skip_price_sei to profiles
2. Renumber pending submissions so positions are distinct per reviewer
3. Create partial unique index on (reviewer_id, queue_position) for pending rows
4. Create skip_payments table
"""

import logging
from sqlalchemy import text

logger = logging.getLogger(__name__)

INDEX_NAME = "uq_submissions_pending_position"


def column_exists(engine, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table"""
    try:
        with engine.connect() as conn:
            result = conn.execute(text("""
                SELECT column_name
                FROM information_schema.columns
                WHERE table_name = :table_name AND column_name = :column_name
            """), {"table_name": table_name, "column_name": column_name})
            return result.fetchone() is not None
    except Exception as e:
        logger.error(f"Error checking column existence: {e}")
        return False


def table_exists(engine, table_name: str) -> bool:
    """Check if a table exists"""
    try:
        with engine.connect() as conn:
            result = conn.execute(text("""
                SELECT table_name
                FROM information_schema.tables
                WHERE table_name = :table_name
            """), {"table_name": table_name})
            return result.fetchone() is not None
    except Exception as e:
        logger.error(f"Error checking table existence: {e}")
        return False


def add_column(engine, conn, table_name: str, column_name: str, definition: str) -> None:
    if column_exists(engine, table_name, column_name):
        logger.info(f"✓ Column {table_name}.{column_name} already exists")
        return
    conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {definition}"))
    conn.commit()
    logger.info(f"✓ Added {table_name}.{column_name} column")


def upgrade(engine):
    """Apply migration"""
    logger.info("Running migration: 001_queue_position_index")

    try:
        with engine.connect() as conn:
            # 1. New columns
            add_column(engine, conn, "submissions", "skipped_at", "TIMESTAMP WITH TIME ZONE")
            add_column(engine, conn, "profiles", "free_skips", "INTEGER NOT NULL DEFAULT 0")
            add_column(engine, conn, "profiles", "skip_price_sei", "NUMERIC(18, 6) NOT NULL DEFAULT 0")

            # 2. Older rows may share a position; keep their relative order
            logger.info("Renumbering pending queue positions...")
            conn.execute(text("""
                UPDATE submissions AS s
                SET queue_position = ranked.new_position
                FROM (
                    SELECT id,
                           ROW_NUMBER() OVER (
                               PARTITION BY reviewer_id
                               ORDER BY queue_position NULLS LAST, created_at, id
                           ) - 1 AS new_position
                    FROM submissions
                    WHERE status = 'pending'
                ) AS ranked
                WHERE s.id = ranked.id
            """))
            conn.commit()
            logger.info("✓ Renumbered pending submissions")

            # 3. Partial unique index
            conn.execute(text(f"""
                CREATE UNIQUE INDEX IF NOT EXISTS {INDEX_NAME}
                ON submissions (reviewer_id, queue_position)
                WHERE status = 'pending'
            """))
            conn.commit()
            logger.info(f"✓ Ensured index {INDEX_NAME}")

            # 4. Skip payment ledger
            if not table_exists(engine, "skip_payments"):
                conn.execute(text("""
                    CREATE TABLE skip_payments (
                        id VARCHAR(36) PRIMARY KEY,
                        reference VARCHAR(255) NOT NULL UNIQUE,
                        submission_id VARCHAR(36) NOT NULL,
                        reviewer_id VARCHAR(36) NOT NULL,
                        method VARCHAR(20) NOT NULL,
                        amount NUMERIC(18, 6) NOT NULL DEFAULT 0,
                        redeemed_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
                        CONSTRAINT fk_skip_payment_submission
                            FOREIGN KEY (submission_id)
                            REFERENCES submissions(id),
                        CONSTRAINT fk_skip_payment_reviewer
                            FOREIGN KEY (reviewer_id)
                            REFERENCES profiles(id)
                    )
                """))
                conn.execute(text("""
                    CREATE INDEX idx_skip_payments_submission_id ON skip_payments(submission_id)
                """))
                conn.execute(text("""
                    CREATE INDEX idx_skip_payments_reviewer_id ON skip_payments(reviewer_id)
                """))
                conn.commit()
                logger.info("✓ Created skip_payments table")
            else:
                logger.info("✓ Table skip_payments already exists")

            logger.info("✅ Migration completed successfully!")
            return True

    except Exception as e:
        logger.error(f"❌ Migration failed: {e}")
        raise


def downgrade(engine):
    """Rollback migration"""
    logger.info("Rolling back migration: 001_queue_position_index")

    try:
        with engine.connect() as conn:
            if table_exists(engine, "skip_payments"):
                conn.execute(text("DROP TABLE skip_payments"))
                conn.commit()
                logger.info("✓ Dropped skip_payments table")

            conn.execute(text(f"DROP INDEX IF EXISTS {INDEX_NAME}"))
            conn.commit()
            logger.info(f"✓ Dropped index {INDEX_NAME}")

            if column_exists(engine, "submissions", "skipped_at"):
                conn.execute(text("ALTER TABLE submissions DROP COLUMN skipped_at"))
                conn.commit()
                logger.info("✓ Removed submissions.skipped_at column")

            logger.info("✅ Rollback completed successfully!")
            return True

    except Exception as e:
        logger.error(f"❌ Rollback failed: {e}")
        raise
