import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError

from donation_hub.config import Settings
from donation_hub.utils.errors import Forbidden


@dataclass(frozen=True)
class Actor:
    """The authenticated identity behind a call. Passed explicitly to the core."""

    id: str
    role: str  # donor / receiver / admin

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, stored: str) -> bool:
    return hmac.compare_digest(hash_password(password), stored)


def issue_token(user_id: str, role: str, settings: Settings, now: datetime) -> str:
    expiry = now + timedelta(minutes=settings.access_token_expire_minutes)

    jwt_payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": expiry,
    }

    return jwt.encode(jwt_payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def actor_from_token(token: str, settings: Settings) -> Actor:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise Forbidden("Invalid or expired token.")

    if not payload.get("sub") or not payload.get("role"):
        raise Forbidden("Invalid or expired token.")

    return Actor(id=payload["sub"], role=payload["role"])


def actor_from_token_optional(token: Optional[str], settings: Settings) -> Optional[Actor]:
    if not token:
        return None

    try:
        return actor_from_token(token, settings)
    except Forbidden:
        return None


def require_admin(actor: Actor) -> Actor:
    if not actor.is_admin:
        raise Forbidden("Admin access required.")
    return actor


def require_role(actor: Actor, role: str) -> Actor:
    if actor.role != role:
        raise Forbidden("Insufficient permissions.")
    return actor
