"""
Access and visibility resolution.

Every endpoint that renders another user's data, or gates a write on role or
ownership, goes through the functions in this module. They are pure: callers
fetch the profile row and the viewer's role rows, and the decision is made
here from those values alone.

Two independent axes are combined:

* role capabilities, derived from the viewer's ``user_roles`` rows through
  ``ROLE_MATRIX`` (admin / copiloto / general);
* profile visibility, derived from the target profile's ``privacy_settings``
  JSON blob. Flags are default-open: a field is hidden only when its flag is
  exactly ``False``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

from autodebate.config.roles_config import (
    BASELINE_CAPABILITIES,
    ROLE_ADMIN,
    ROLE_COPILOTO,
    ROLE_MATRIX,
)

PRIVACY_FLAGS = ("show_cars", "show_location", "show_activity")

LOCATION_FIELDS = ("city", "country")
ACTIVITY_FIELDS = ("points", "level")


@dataclass(frozen=True)
class Visibility:
    cars: bool = True
    location: bool = True
    activity: bool = True

    def as_dict(self) -> Dict[str, bool]:
        return {"cars": self.cars, "location": self.location, "activity": self.activity}


@dataclass(frozen=True)
class Capabilities:
    viewer_id: Optional[str]
    roles: FrozenSet[str] = field(default_factory=frozenset)
    capabilities: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles

    @property
    def can_upload(self) -> bool:
        return self.is_admin or ROLE_COPILOTO in self.roles

    @property
    def can_create_event(self) -> bool:
        return self.is_admin or ROLE_COPILOTO in self.roles

    @property
    def can_download(self) -> bool:
        return len(self.roles) > 0

    def has(self, capability: str) -> bool:
        return capability in self.capabilities

    def can_edit(self, owner_id: Optional[str]) -> bool:
        if self.is_admin:
            return True
        return self.viewer_id is not None and owner_id is not None and self.viewer_id == owner_id

    def can_delete(self, owner_id: Optional[str]) -> bool:
        return self.can_edit(owner_id)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "is_admin": self.is_admin,
            "can_upload": self.can_upload,
            "can_create_event": self.can_create_event,
            "can_download": self.can_download,
            "capabilities": sorted(self.capabilities),
        }


def has_role(roles: Iterable[str], role: str) -> bool:
    """Membership test over the viewer's role-assignment rows."""
    return role in set(roles or ())


def is_admin(roles: Iterable[str]) -> bool:
    return has_role(roles, ROLE_ADMIN)


def privacy_flag(settings: Optional[Dict[str, Any]], flag: str) -> bool:
    """True unless the flag is explicitly False. Missing blob or key means visible."""
    if not isinstance(settings, dict):
        return True
    return settings.get(flag) is not False


def resolve_visibility(profile: Dict[str, Any], viewer_id: Optional[str]) -> Visibility:
    """Per-field visibility of ``profile`` for ``viewer_id``.

    The owner always sees every field. Any other viewer, anonymous or admin,
    sees a field unless its privacy flag is explicitly False.
    """
    if viewer_id is not None and profile.get("id") == viewer_id:
        return Visibility()
    settings = profile.get("privacy_settings")
    return Visibility(
        cars=privacy_flag(settings, "show_cars"),
        location=privacy_flag(settings, "show_location"),
        activity=privacy_flag(settings, "show_activity"),
    )


def apply_visibility(profile: Dict[str, Any], visibility: Visibility) -> Dict[str, Any]:
    """Copy of ``profile`` with hidden fields blanked. The input is not modified."""
    visible = dict(profile)
    if not visibility.location:
        for key in LOCATION_FIELDS:
            visible[key] = None
    if not visibility.activity:
        for key in ACTIVITY_FIELDS:
            visible[key] = None
    visible["visibility"] = visibility.as_dict()
    return visible


def normalize_privacy_settings(settings: Optional[Dict[str, Any]]) -> Dict[str, bool]:
    """Materialize the three flags with the default-open rule applied."""
    return {flag: privacy_flag(settings, flag) for flag in PRIVACY_FLAGS}


def resolve_capabilities(viewer_id: Optional[str], roles: Iterable[str]) -> Capabilities:
    role_set = frozenset(r for r in (roles or ()) if r in ROLE_MATRIX)
    granted = set(BASELINE_CAPABILITIES) if viewer_id else set()
    for role in role_set:
        granted.update(ROLE_MATRIX[role])
    return Capabilities(viewer_id=viewer_id, roles=role_set, capabilities=frozenset(granted))
