"""
Backfill User Roles Script
Copies the legacy single-valued users.role column into user_role_assignments.
Safe to re-run: every grant is an upsert on (user_id, role).
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config.permissions_config import BASELINE_ROLE, parse_role
from app.core.errors import ConfigurationError
from app.database.supabase_client import get_service_supabase
from app.modules.roles.service import RoleService
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAGE_SIZE = 500


def backfill_roles(supabase: Client) -> dict:
    """Grant each user's legacy role. Unknown role names are logged and skipped."""
    role_service = RoleService(supabase)
    granted = 0
    skipped = 0
    offset = 0

    while True:
        result = supabase.table("users")\
            .select("id, role")\
            .order("id")\
            .limit(PAGE_SIZE)\
            .offset(offset)\
            .execute()
        rows = result.data or []
        for row in rows:
            if not row.get("role"):
                continue
            try:
                role = parse_role(row["role"])
            except ConfigurationError as e:
                logger.warning(f"Skipping user {row['id']}: {e}")
                skipped += 1
                continue
            if role == BASELINE_ROLE:
                continue
            role_service.grant_role(row["id"], role)
            granted += 1
        if len(rows) < PAGE_SIZE:
            break
        offset += PAGE_SIZE

    return {"granted": granted, "skipped": skipped}


def main():
    """Main function to backfill role assignments"""
    try:
        supabase = get_service_supabase()

        logger.info("Starting user role backfill...")
        summary = backfill_roles(supabase)
        logger.info(f"Backfill completed: {summary['granted']} granted, {summary['skipped']} skipped")

    except Exception as e:
        logger.error(f"Error during backfill: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
