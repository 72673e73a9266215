import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Match(SQLModel, table=True):
    __tablename__ = "matches"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Linked listings
    donation_id: str = Field(foreign_key="donations.id", index=True)
    request_id: str = Field(foreign_key="requests.id", index=True)

    status: str = Field(default="active", index=True)  # values: "active", "completed", "cancelled"
