import uuid
from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Donation(SQLModel, table=True):
    __tablename__ = "donations"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Donor info
    donor_id: str = Field(foreign_key="users.id", index=True)

    # Item fields
    item_name: str
    category: str
    description: str
    quantity: int = Field(default=1)
    photo_url: Optional[str] = None

    status: str = Field(default="pending", index=True)  # values: "pending", "approved", "matched", "rejected"
