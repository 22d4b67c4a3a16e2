import hashlib
import logging
import time
from supabase import Client
from autodebate.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from fastapi import HTTPException
from typing import Dict, Any, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "Usuario"

# (substrings of the Supabase Auth error text, status, detail) checked in order
REGISTER_ERRORS = [
    (("already registered", "already exists"), 400, "User already exists"),
    (("password should be", "weak password"), 400, "Password does not meet the requirements"),
]
LOGIN_ERRORS = [
    (("invalid", "credentials"), 401, "Invalid email or password"),
    (("email not confirmed",), 401, "Email address has not been confirmed"),
]
TOKEN_ERRORS = [
    (("jwt", "expired", "invalid"), 401, "Invalid or expired token"),
]


def classify_auth_error(error: Exception, table, fallback_status: int, fallback_detail: str) -> HTTPException:
    message = str(error).lower()
    for needles, status, detail in table:
        if any(needle in message for needle in needles):
            return HTTPException(status_code=status, detail=detail)
    return HTTPException(status_code=fallback_status, detail=fallback_detail)


class TokenCache:
    """Short-lived token -> user map so parallel requests with one JWT hit Supabase Auth once."""

    def __init__(self, ttl_seconds: int = 60, max_size: int = 500):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._entries: Dict[str, Tuple[Dict[str, Any], float]] = {}

    @staticmethod
    def key(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def get(self, token: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(self.key(token))
        if entry is None:
            return None
        user_data, expires_at = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(self.key(token), None)
            return None
        return user_data

    def put(self, token: str, user_data: Dict[str, Any]) -> None:
        if len(self._entries) >= self.max_size:
            return
        self._entries[self.key(token)] = (user_data, time.monotonic() + self.ttl_seconds)

    def drop(self, token: str) -> None:
        self._entries.pop(self.key(token), None)


token_cache = TokenCache()


def default_username(user_data: Dict[str, Any]) -> str:
    """display_name / full_name / name from metadata, else the email local part"""
    metadata = user_data.get("user_metadata") or {}
    for key in ("display_name", "full_name", "name"):
        if metadata.get(key):
            return metadata[key]
    email = user_data.get("email") or ""
    return email.split("@")[0] or DEFAULT_USERNAME


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up with Supabase Auth; display_name goes into user metadata"""
        metadata = {"display_name": register_data.display_name} if register_data.display_name else {}
        try:
            created = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"data": metadata}
            })
        except Exception as e:
            logger.info(f"Sign up rejected for {register_data.email}: {e}")
            raise classify_auth_error(e, REGISTER_ERRORS, 500, f"Registration failed: {e}")

        if not created.user:
            raise HTTPException(status_code=400, detail="Failed to register user")
        return RegisterResponse(
            user_id=created.user.id,
            email=created.user.email or register_data.email,
            message="User registered successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        try:
            signed_in = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            raise classify_auth_error(e, LOGIN_ERRORS, 500, f"Login failed: {e}")

        if not signed_in.user or not signed_in.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return TokenResponse(
            access_token=signed_in.session.access_token,
            user_id=signed_in.user.id,
            email=signed_in.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to {id, email, user_metadata, created_at}."""
        cached = token_cache.get(token)
        if cached is not None:
            return cached
        try:
            found = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            raise classify_auth_error(e, TOKEN_ERRORS, 401, "Authentication failed")
        if not found or not found.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user_data = {
            "id": found.user.id,
            "email": found.user.email,
            "user_metadata": found.user.user_metadata or {},
            "created_at": found.user.created_at,
        }
        token_cache.put(token, user_data)
        return user_data

    def logout(self, token: str) -> bool:
        # JWTs stay valid until expiry; the server only holds the cache entry
        token_cache.drop(token)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def ensure_profile(self, user_data: Dict[str, Any], service_client: Optional[Client] = None) -> Dict[str, Any]:
        """Return the caller's profile, creating the default profile and general role on first use"""
        writer = service_client or self.supabase
        try:
            result = self.supabase.table("profiles")\
                .select("id, username, avatar_url")\
                .eq("id", user_data["id"])\
                .maybe_single()\
                .execute()
            if result and result.data:
                return result.data

            username = default_username(user_data)
            logger.info(f"Creating default profile for {user_data['id']} as {username}")
            writer.table("profiles").upsert({
                "id": user_data["id"],
                "username": username
            }).execute()

            roles = writer.table("user_roles")\
                .select("id")\
                .eq("user_id", user_data["id"])\
                .execute()
            if not roles.data:
                writer.table("user_roles").insert({
                    "user_id": user_data["id"],
                    "role": "general"
                }).execute()
            return {"id": user_data["id"], "username": username, "avatar_url": None}
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
