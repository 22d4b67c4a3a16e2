from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime
from autodebate.config.roles_config import APP_ROLES


class RoleAssign(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def known_role(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in APP_ROLES:
            raise ValueError(f"Unknown role: {v}. Expected one of {', '.join(APP_ROLES)}")
        return v


class UserRoleResponse(BaseModel):
    id: str
    user_id: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserWithRolesResponse(BaseModel):
    id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    points: int = 0
    level: int = 1
    created_at: Optional[datetime] = None
    roles: List[str] = []
    is_admin: bool = False


class RoleChangeLogResponse(BaseModel):
    id: str
    user_id: str
    role: str
    action: str
    performed_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleMatrixResponse(BaseModel):
    roles: List[str]
    capabilities: dict
