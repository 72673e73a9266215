from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel
from sqlmodel import Session, select

from donation_hub.models.choices import FEED_STATUSES, PUBLIC_STATUSES
from donation_hub.models.donation import Donation
from donation_hub.models.request import Request
from donation_hub.models.user import User
from donation_hub.utils.clock import as_utc
from donation_hub.utils.errors import ValidationError
from donation_hub.utils.form_validator import SearchFilters

PUBLIC_FALLBACK_NAME = "Anonymous"
FEED_WINDOW = 20  # most recent listings of each kind considered for the feed


# Response Models
class PublicDonation(BaseModel):
    id: str
    donor_name: str
    item_name: str
    category: str
    description: str
    quantity: int
    photo_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PublicRequest(BaseModel):
    id: str
    receiver_name: str
    item_needed: str
    category: str
    description: str
    quantity: int
    urgency: str
    created_at: datetime
    updated_at: datetime


class SearchResults(BaseModel):
    donations: List[PublicDonation] = []
    requests: List[PublicRequest] = []


class ActivityItem(BaseModel):
    id: str
    type: str  # "donation" or "request"
    actor_name: str
    item_name: str
    quantity: int
    timestamp: datetime


def _public_donation(donation: Donation, donor: Optional[User]) -> PublicDonation:
    return PublicDonation(
        id=donation.id,
        donor_name=donor.name if donor else PUBLIC_FALLBACK_NAME,
        item_name=donation.item_name,
        category=donation.category,
        description=donation.description,
        quantity=donation.quantity,
        photo_url=donation.photo_url or None,
        created_at=as_utc(donation.created_at),
        updated_at=as_utc(donation.updated_at),
    )


def _public_request(request: Request, receiver: Optional[User]) -> PublicRequest:
    return PublicRequest(
        id=request.id,
        receiver_name=receiver.name if receiver else PUBLIC_FALLBACK_NAME,
        item_needed=request.item_needed,
        category=request.category,
        description=request.description,
        quantity=request.quantity,
        urgency=request.urgency,
        created_at=as_utc(request.created_at),
        updated_at=as_utc(request.updated_at),
    )


def _donations_with_donor(statuses=PUBLIC_STATUSES):
    return (
        select(Donation, User)
        .join(User, User.id == Donation.donor_id, isouter=True)
        .where(Donation.status.in_(statuses))
    )


def _requests_with_receiver(statuses=PUBLIC_STATUSES):
    return (
        select(Request, User)
        .join(User, User.id == Request.receiver_id, isouter=True)
        .where(Request.status.in_(statuses))
    )


def list_public_donations(session: Session) -> List[PublicDonation]:
    rows = session.exec(_donations_with_donor().order_by(Donation.created_at.desc())).all()
    return [_public_donation(donation, donor) for donation, donor in rows]


def list_public_requests(session: Session) -> List[PublicRequest]:
    rows = session.exec(_requests_with_receiver().order_by(Request.created_at.desc())).all()
    requests = [_public_request(request, receiver) for request, receiver in rows]

    # urgent first, newest first within each group
    requests.sort(key=lambda r: r.urgency != "urgent")
    return requests


def relevance_score(name: str, term: str, urgency: Optional[str], created_at: datetime, now: datetime) -> float:
    name = name.lower()
    term = term.lower()

    score = 0.0
    if name == term:
        score += 100
    if term in name:
        score += 50
    if urgency == "urgent":
        score += 30

    age_days = (as_utc(now) - as_utc(created_at)).total_seconds() / 86400
    score += max(0.0, 20 - age_days)

    return score


def _name_matches(name: str, term: str) -> bool:
    # SQLite's LOWER() only folds ASCII, so the substring test runs here
    return not term or term.lower() in name.lower()


def search(session: Session, filters: SearchFilters, now: datetime) -> SearchResults:
    """Search approved listings.

    Without a name filter results are newest first. With one, each list keeps
    insertion order and is then stably ranked by ``relevance_score``.
    """
    term = filters.item_name
    results = SearchResults()

    if filters.type in ("donations", "both"):
        query = (
            _donations_with_donor()
            .where(Donation.quantity >= filters.min_quantity)
            .where(Donation.quantity <= filters.max_quantity)
        )

        if filters.category != "all":
            query = query.where(Donation.category == filters.category)

        query = query.order_by(Donation.created_at.asc() if term else Donation.created_at.desc())
        results.donations = [
            _public_donation(d, donor)
            for d, donor in session.exec(query).all()
            if _name_matches(d.item_name, term)
        ]

        if term:
            results.donations.sort(
                key=lambda d: relevance_score(d.item_name, term, None, d.created_at, now),
                reverse=True,
            )

    if filters.type in ("requests", "both"):
        query = (
            _requests_with_receiver()
            .where(Request.quantity >= filters.min_quantity)
            .where(Request.quantity <= filters.max_quantity)
        )

        if filters.category != "all":
            query = query.where(Request.category == filters.category)

        if filters.urgency != "all":
            query = query.where(Request.urgency == filters.urgency)

        query = query.order_by(Request.created_at.asc() if term else Request.created_at.desc())
        results.requests = [
            _public_request(r, receiver)
            for r, receiver in session.exec(query).all()
            if _name_matches(r.item_needed, term)
        ]

        if term:
            results.requests.sort(
                key=lambda r: relevance_score(r.item_needed, term, r.urgency, r.created_at, now),
                reverse=True,
            )

    return results


def list_activity_feed(session: Session, limit: int = 15) -> List[ActivityItem]:
    """Recent approved or matched listings of both kinds, newest first."""
    if limit < 1:
        raise ValidationError("Limit must be a positive number.")

    activities: list[ActivityItem] = []

    donations = session.exec(
        _donations_with_donor(FEED_STATUSES)
        .order_by(Donation.created_at.desc())
        .limit(FEED_WINDOW)
    ).all()

    for donation, donor in donations:
        activities.append(ActivityItem(
            id=f"donation-{donation.id}",
            type="donation",
            actor_name=donor.name if donor else "Anonymous Donor",
            item_name=donation.item_name,
            quantity=donation.quantity,
            timestamp=as_utc(donation.created_at),
        ))

    requests = session.exec(
        _requests_with_receiver(FEED_STATUSES)
        .order_by(Request.created_at.desc())
        .limit(FEED_WINDOW)
    ).all()

    for request, receiver in requests:
        activities.append(ActivityItem(
            id=f"request-{request.id}",
            type="request",
            actor_name=receiver.name if receiver else "Community Member",
            item_name=request.item_needed,
            quantity=request.quantity,
            timestamp=as_utc(request.created_at),
        ))

    # Final merge
    activities.sort(key=lambda a: a.timestamp, reverse=True)
    return activities[:limit]
