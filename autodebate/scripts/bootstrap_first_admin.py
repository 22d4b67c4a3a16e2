"""
Bootstrap First Admin Script
Grants the admin role to an existing account, looked up by username.
Run once after the first user has signed up:

    python -m autodebate.scripts.bootstrap_first_admin <username>
"""

import sys
import logging

from autodebate.config.roles_config import ROLE_ADMIN
from autodebate.database.supabase_client import get_service_supabase
from supabase import Client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def bootstrap_admin(supabase: Client, username: str) -> bool:
    """Returns False when the profile does not exist"""
    profile = supabase.table("profiles")\
        .select("id")\
        .eq("username", username)\
        .maybe_single()\
        .execute()
    if not profile or not profile.data:
        logger.error(f"No profile with username {username}")
        return False

    user_id = profile.data["id"]
    existing = supabase.table("user_roles")\
        .select("id")\
        .eq("user_id", user_id)\
        .eq("role", ROLE_ADMIN)\
        .execute()
    if existing.data:
        logger.info(f"{username} is already an admin")
        return True

    supabase.table("user_roles").insert({"user_id": user_id, "role": ROLE_ADMIN}).execute()
    supabase.table("role_change_log").insert({
        "user_id": user_id,
        "role": ROLE_ADMIN,
        "action": "added",
        "performed_by": user_id
    }).execute()
    logger.info(f"Granted admin to {username} ({user_id})")
    return True


def main():
    if len(sys.argv) != 2:
        print("usage: python -m autodebate.scripts.bootstrap_first_admin <username>")
        sys.exit(2)
    try:
        if not bootstrap_admin(get_service_supabase(), sys.argv[1]):
            sys.exit(1)
    except Exception as e:
        logger.error(f"Error bootstrapping admin: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
