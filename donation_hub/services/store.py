import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Type
from pydantic import BaseModel
from sqlmodel import Session, SQLModel, select

from donation_hub.models.donation import Donation
from donation_hub.models.request import Request
from donation_hub.models.user import User
from donation_hub.utils.auth_helper import Actor, require_admin, require_role
from donation_hub.utils.errors import Forbidden, InvalidState, NotFound, ValidationError
from donation_hub.utils.form_validator import ValidatedDonation, ValidatedRequest, validate_form

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingKind:
    """What differs between donations and requests as far as the store cares."""

    model: Type[SQLModel]
    label: str  # "donation" / "request"
    owner_field: str
    owner_role: str
    name_field: str
    form: Type[BaseModel]
    editable: frozenset
    required_message: str

    @property
    def title(self) -> str:
        return self.label.capitalize()

    @property
    def owner_column(self):
        return getattr(self.model, self.owner_field)

    def owner_of(self, listing) -> str:
        return getattr(listing, self.owner_field)

    def name_of(self, listing) -> str:
        return getattr(listing, self.name_field)


DONATIONS = ListingKind(
    model=Donation,
    label="donation",
    owner_field="donor_id",
    owner_role="donor",
    name_field="item_name",
    form=ValidatedDonation,
    editable=frozenset({"item_name", "category", "description", "quantity", "photo_url"}),
    required_message="Item name, category, and description are required.",
)

REQUESTS = ListingKind(
    model=Request,
    label="request",
    owner_field="receiver_id",
    owner_role="receiver",
    name_field="item_needed",
    form=ValidatedRequest,
    editable=frozenset({"item_needed", "category", "description", "quantity", "urgency"}),
    required_message="Item needed, category, and description are required.",
)


def create_listing(session: Session, kind: ListingKind, actor: Actor, data: dict, now: datetime):
    require_role(actor, kind.owner_role)

    form = validate_form(kind.form, data or {}, kind.required_message)

    # owner lookup
    owner = session.get(User, actor.id)
    if not owner:
        raise NotFound("User not found.")

    listing = kind.model(
        **form.model_dump(),
        **{kind.owner_field: owner.id},
        status="pending",
        created_at=now,
        updated_at=now,
    )

    session.add(listing)
    session.commit()
    session.refresh(listing)

    logger.info("%s %s created by %s", kind.title, listing.id, owner.id)
    return listing


def get_listing(session: Session, kind: ListingKind, listing_id: str):
    listing = session.get(kind.model, listing_id) if listing_id else None
    if not listing:
        raise NotFound(f"{kind.title} not found.")
    return listing


def list_by_owner(session: Session, kind: ListingKind, owner_id: str) -> list:
    return list(session.exec(
        select(kind.model)
        .where(kind.owner_column == owner_id)
        .order_by(kind.model.created_at.asc())
    ).all())


def list_all(session: Session, kind: ListingKind, actor: Actor) -> List[dict]:
    """Every listing with its owner's contact details, newest first. Admin only."""
    require_admin(actor)

    rows = session.exec(
        select(kind.model, User)
        .join(User, User.id == kind.owner_column, isouter=True)
        .order_by(kind.model.created_at.desc())
    ).all()

    listings = []
    for listing, owner in rows:
        data = listing.model_dump()
        data[f"{kind.owner_role}_name"] = owner.name if owner else "Unknown"
        data[f"{kind.owner_role}_email"] = owner.email if owner else "Unknown"
        listings.append(data)

    return listings


def _get_owned_pending(session: Session, kind: ListingKind, actor: Actor, listing_id: str, verb: str):
    listing = get_listing(session, kind, listing_id)

    # ownership check
    if kind.owner_of(listing) != actor.id:
        raise Forbidden(f"You can only {verb} your own {kind.label}s.")

    # owners lose control once an admin has acted
    if listing.status != "pending":
        raise InvalidState(f"You can only {verb} {kind.label}s that are still pending approval.")

    return listing


def update_listing(session: Session, kind: ListingKind, actor: Actor, listing_id: str, updates: dict, now: datetime):
    listing = _get_owned_pending(session, kind, actor, listing_id, "edit")

    for field in updates:
        if field not in kind.editable:
            raise ValidationError(f"Field '{field}' cannot be updated")

    merged = {field: getattr(listing, field) for field in kind.editable}
    merged.update(updates)
    form = validate_form(kind.form, merged, kind.required_message)

    for field, value in form.model_dump().items():
        setattr(listing, field, value)
    listing.updated_at = now

    session.add(listing)
    session.commit()
    session.refresh(listing)

    return listing


def delete_listing(session: Session, kind: ListingKind, actor: Actor, listing_id: str) -> None:
    listing = _get_owned_pending(session, kind, actor, listing_id, "delete")

    session.delete(listing)
    session.commit()

    logger.info("%s %s deleted by owner", kind.title, listing_id)
