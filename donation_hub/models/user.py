import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    name: str
    email: str = Field(index=True, unique=True)  # stored lowercased
    password: str  # opaque credential digest, never returned to callers

    role: str = Field(index=True)  # Possible roles: donor, receiver, admin
