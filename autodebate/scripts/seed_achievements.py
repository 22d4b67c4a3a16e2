"""
Seed Achievements Script
Creates or updates the achievement catalogue defined below.
Safe to run repeatedly.
"""

import sys
import logging

from autodebate.database.supabase_client import get_service_supabase
from supabase import Client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ACHIEVEMENTS = [
    {
        "name": "Primera marcha",
        "description": "Upload your first photo",
        "icon": "camera",
        "type": "photos",
        "points": 10,
        "requirements": {"photo_upload": 1},
    },
    {
        "name": "Fotógrafo de pista",
        "description": "Upload 50 photos",
        "icon": "aperture",
        "type": "photos",
        "points": 100,
        "requirements": {"photo_upload": 50},
    },
    {
        "name": "Debatiente",
        "description": "Start your first forum thread",
        "icon": "message-square",
        "type": "forum",
        "points": 10,
        "requirements": {"forum_thread": 1},
    },
    {
        "name": "Voz del foro",
        "description": "Write 100 forum replies",
        "icon": "messages-square",
        "type": "forum",
        "points": 50,
        "requirements": {"forum_reply": 100},
    },
    {
        "name": "Lector fiel",
        "description": "Comment on 10 blog posts",
        "icon": "book-open",
        "type": "blog",
        "points": 20,
        "requirements": {"blog_comment": 10},
    },
    {
        "name": "Piloto de grupo",
        "description": "Publish 10 group posts",
        "icon": "users",
        "type": "groups",
        "points": 30,
        "requirements": {"group_post": 10},
    },
]


def seed_achievements(supabase: Client) -> int:
    """Insert missing achievements and refresh existing ones by name"""
    created_count = 0
    updated_count = 0

    for achievement in ACHIEVEMENTS:
        try:
            existing = supabase.table("achievements")\
                .select("id")\
                .eq("name", achievement["name"])\
                .execute()

            if existing.data:
                supabase.table("achievements")\
                    .update({k: v for k, v in achievement.items() if k != "name"})\
                    .eq("name", achievement["name"])\
                    .execute()
                updated_count += 1
                logger.debug(f"Updated achievement: {achievement['name']}")
            else:
                supabase.table("achievements").insert(achievement).execute()
                created_count += 1
                logger.debug(f"Created achievement: {achievement['name']}")
        except Exception as e:
            logger.error(f"Error processing achievement {achievement['name']}: {e}")

    logger.info(f"Achievements seeded: {created_count} created, {updated_count} updated")
    return created_count + updated_count


def main():
    try:
        seed_achievements(get_service_supabase())
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
