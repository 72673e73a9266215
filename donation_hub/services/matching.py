import logging
from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import BaseModel
from sqlmodel import Session, select

from donation_hub.models.donation import Donation
from donation_hub.models.match import Match
from donation_hub.models.request import Request
from donation_hub.services.users import resolve_display_name
from donation_hub.utils.auth_helper import Actor, require_admin
from donation_hub.utils.clock import as_utc
from donation_hub.utils.errors import InvalidState, NotFound, ValidationError

logger = logging.getLogger(__name__)


# Response Models
class DonationSummary(BaseModel):
    item_name: str
    category: str
    donor_name: str


class RequestSummary(BaseModel):
    item_needed: str
    category: str
    receiver_name: str


class MatchDetail(BaseModel):
    id: str
    donation_id: str
    request_id: str
    status: str
    created_at: datetime
    updated_at: datetime
    donation: Optional[DonationSummary]
    request: Optional[RequestSummary]


def _has_active_match(session: Session, column, listing_id: str) -> bool:
    return session.exec(
        select(Match.id)
        .where(column == listing_id)
        .where(Match.status == "active")
    ).first() is not None


def get_match(session: Session, match_id: str) -> Match:
    match = session.get(Match, match_id) if match_id else None
    if not match:
        raise NotFound("Match not found.")
    return match


def create_match(
    session: Session,
    actor: Actor,
    donation_id: str,
    request_id: str,
    now: datetime,
) -> Tuple[Match, Donation, Request]:
    require_admin(actor)

    if not donation_id or not request_id:
        raise ValidationError("Both donation ID and request ID are required.")

    donation = session.get(Donation, donation_id)
    if not donation:
        raise NotFound("Donation not found.")

    request = session.get(Request, request_id)
    if not request:
        raise NotFound("Request not found.")

    if donation.status != "approved":
        raise InvalidState("Only approved donations can be matched.")

    if request.status != "approved":
        raise InvalidState("Only approved requests can be matched.")

    # Re-check against live matches, a listing may only be in one at a time
    if donation.status == "matched" or _has_active_match(session, Match.donation_id, donation.id):
        raise InvalidState("This donation has already been matched.")

    if request.status == "matched" or _has_active_match(session, Match.request_id, request.id):
        raise InvalidState("This request has already been matched.")

    # Cross-category matches are allowed
    if donation.category != request.category:
        logger.warning(
            "Category mismatch: donation %s (%s) and request %s (%s)",
            donation.id, donation.category, request.id, request.category,
        )

    match = Match(
        donation_id=donation.id,
        request_id=request.id,
        status="active",
        created_at=now,
        updated_at=now,
    )

    donation.status = "matched"
    donation.updated_at = now
    request.status = "matched"
    request.updated_at = now

    # single commit: all three rows change together or not at all
    session.add(match)
    session.add(donation)
    session.add(request)
    session.commit()

    session.refresh(match)
    session.refresh(donation)
    session.refresh(request)

    logger.info("Match %s created: donation %s <-> request %s", match.id, donation.id, request.id)
    return match, donation, request


def complete_match(session: Session, actor: Actor, match_id: str, now: datetime) -> Match:
    require_admin(actor)

    match = get_match(session, match_id)

    if match.status != "active":
        raise InvalidState("Only active matches can be completed.")

    # the paired listings stay matched for good
    match.status = "completed"
    match.updated_at = now

    session.add(match)
    session.commit()
    session.refresh(match)

    logger.info("Match %s completed", match.id)
    return match


def cancel_match(
    session: Session,
    actor: Actor,
    match_id: str,
    now: datetime,
) -> Tuple[Match, Optional[Donation], Optional[Request]]:
    require_admin(actor)

    match = get_match(session, match_id)

    if match.status != "active":
        raise InvalidState("Only active matches can be cancelled.")

    # Free both listings for a new match
    donation = session.get(Donation, match.donation_id)
    request = session.get(Request, match.request_id)

    for listing in (donation, request):
        if listing:
            listing.status = "approved"
            listing.updated_at = now
            session.add(listing)

    match.status = "cancelled"
    match.updated_at = now

    session.add(match)
    session.commit()

    session.refresh(match)
    for listing in (donation, request):
        if listing:
            session.refresh(listing)

    logger.info("Match %s cancelled, listings returned to approved", match.id)
    return match, donation, request


def list_matches(session: Session, actor: Actor) -> List[MatchDetail]:
    """All matches with a short summary of both sides, newest first."""
    require_admin(actor)

    matches = session.exec(select(Match).order_by(Match.created_at.desc())).all()

    details = []
    for match in matches:
        donation = session.get(Donation, match.donation_id)
        request = session.get(Request, match.request_id)

        details.append(MatchDetail(
            id=match.id,
            donation_id=match.donation_id,
            request_id=match.request_id,
            status=match.status,
            created_at=as_utc(match.created_at),
            updated_at=as_utc(match.updated_at),
            donation=DonationSummary(
                item_name=donation.item_name,
                category=donation.category,
                donor_name=resolve_display_name(session, donation.donor_id),
            ) if donation else None,
            request=RequestSummary(
                item_needed=request.item_needed,
                category=request.category,
                receiver_name=resolve_display_name(session, request.receiver_id),
            ) if request else None,
        ))

    return details
