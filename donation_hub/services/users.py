import logging
from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from sqlmodel import Session, func, select

from donation_hub.models.user import User
from donation_hub.utils.auth_helper import hash_password, verify_password
from donation_hub.utils.errors import Forbidden, NotFound, ValidationError
from donation_hub.utils.form_validator import ValidatedRegistration, validate_form

logger = logging.getLogger(__name__)


def find_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(
        select(User).where(func.lower(User.email) == email.strip().lower())
    ).first()


def get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found.")
    return user


def resolve_display_name(session: Session, user_id: Optional[str], fallback: str = "Unknown") -> str:
    if not user_id:
        return fallback

    user = session.get(User, user_id)
    if not user or not user.name:
        return fallback

    return user.name


def register_user(session: Session, data: dict, now: datetime) -> User:
    form = validate_form(ValidatedRegistration, data, "All fields are required.")

    # Check if user already exists
    if find_user_by_email(session, form.email):
        raise ValidationError("User with this email already exists.")

    user = User(
        name=form.name,
        email=form.email.lower(),
        password=hash_password(form.password),
        role=form.role,
        created_at=now,
        updated_at=now,
    )

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("Registered %s account %s", user.role, user.id)
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    if not email or not password:
        raise ValidationError("Email and password are required.")

    user = find_user_by_email(session, email)

    # same message for unknown email and wrong password
    if not user or not verify_password(password, user.password):
        raise Forbidden("Invalid email or password.")

    return user


class UserProfile(BaseModel):
    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)
