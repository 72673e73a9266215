import logging
from datetime import datetime

from sqlmodel import Session

from donation_hub.services.store import ListingKind, get_listing
from donation_hub.utils.auth_helper import Actor, require_admin
from donation_hub.utils.errors import InvalidState, ValidationError

logger = logging.getLogger(__name__)

DECISIONS = {
    "approve": "approved",
    "reject": "rejected",
}


def decide(session: Session, kind: ListingKind, actor: Actor, listing_id: str, action: str, now: datetime):
    """Move a pending listing to approved or rejected.

    Only the status and ``updated_at`` change. Deciding twice fails the second
    time because the listing is no longer pending.
    """
    require_admin(actor)

    if action not in DECISIONS:
        raise ValidationError("Action must be either 'approve' or 'reject'.")

    listing = get_listing(session, kind, listing_id)

    if listing.status != "pending":
        raise InvalidState(f"Only pending {kind.label}s can be approved or rejected.")

    listing.status = DECISIONS[action]
    listing.updated_at = now

    session.add(listing)
    session.commit()
    session.refresh(listing)

    logger.info("%s %s %s by %s", kind.title, listing.id, listing.status, actor.id)
    return listing
