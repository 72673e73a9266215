import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Request(SQLModel, table=True):
    __tablename__ = "requests"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Receiver info
    receiver_id: str = Field(foreign_key="users.id", index=True)

    # Need fields
    item_needed: str
    category: str
    description: str
    quantity: int = Field(default=1)
    urgency: str = Field(default="normal")  # normal/urgent

    status: str = Field(default="pending", index=True)  # values: "pending", "approved", "matched", "rejected"
