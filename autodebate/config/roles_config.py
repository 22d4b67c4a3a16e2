"""
Roles and Capabilities Configuration
This config defines which capabilities each app_role grants, plus the
gamification constants. Role rows live in the user_roles table; the
capability matrix is evaluated in-process by autodebate.core.access.
"""

ROLE_GENERAL = "general"
ROLE_COPILOTO = "copiloto"
ROLE_ADMIN = "admin"

APP_ROLES = [ROLE_GENERAL, ROLE_COPILOTO, ROLE_ADMIN]

# Define modules and their actions
MODULES = {
    "photos": {
        "resource": "photos",
        "actions": ["read", "upload", "download", "moderate"],
        "description": "Event galleries and car photos"
    },
    "events": {
        "resource": "events",
        "actions": ["read", "create", "moderate"],
        "description": "Car events"
    },
    "blog": {
        "resource": "blog",
        "actions": ["read", "comment", "manage"],
        "description": "Blog posts and comments"
    },
    "forum": {
        "resource": "forum",
        "actions": ["read", "post", "moderate", "manage_categories"],
        "description": "Discussion forum"
    },
    "groups": {
        "resource": "groups",
        "actions": ["read", "create", "moderate"],
        "description": "Groups, group chat and group posts"
    },
    "reports": {
        "resource": "reports",
        "actions": ["create", "read", "resolve"],
        "description": "Content reports"
    },
    "users": {
        "resource": "users",
        "actions": ["read", "manage_roles"],
        "description": "User and role administration"
    },
    "achievements": {
        "resource": "achievements",
        "actions": ["read", "award"],
        "description": "Gamification"
    },
    "admin": {
        "resource": "admin",
        "actions": ["dashboard"],
        "description": "Admin panel"
    },
}

# Capabilities granted on top of the lower role
ROLE_GRANTS = {
    ROLE_GENERAL: [
        "photos:read", "photos:download",
        "events:read",
        "blog:read", "blog:comment",
        "forum:read", "forum:post",
        "groups:read", "groups:create",
        "reports:create",
        "achievements:read",
    ],
    ROLE_COPILOTO: [
        "photos:upload",
        "events:create",
    ],
}

# Capabilities every authenticated user holds, even with no role row
BASELINE_CAPABILITIES = [
    "photos:read",
    "events:read",
    "blog:read", "blog:comment",
    "forum:read", "forum:post",
    "groups:read", "groups:create",
    "reports:create",
    "achievements:read",
]

# Gamification
POINTS_PER_LEVEL = 100

POINTS_BY_ACTIVITY = {
    "photo_upload": 10,
    "forum_thread": 5,
    "forum_reply": 2,
    "blog_comment": 1,
    "group_post": 3,
}


def all_capabilities():
    return sorted(
        f"{config['resource']}:{action}"
        for config in MODULES.values()
        for action in config["actions"]
    )


def get_role_matrix():
    """
    Returns the capability set of every app_role.
    Format: {"general": [...], "copiloto": [...], "admin": [...]}
    copiloto inherits general; admin holds every capability.
    """
    general = set(ROLE_GRANTS[ROLE_GENERAL])
    copiloto = general | set(ROLE_GRANTS[ROLE_COPILOTO])
    return {
        ROLE_GENERAL: sorted(general),
        ROLE_COPILOTO: sorted(copiloto),
        ROLE_ADMIN: all_capabilities(),
    }


ROLE_MATRIX = get_role_matrix()
