from typing import Dict
from pydantic import BaseModel
from sqlmodel import Session, func, select

from donation_hub.models.choices import LISTING_STATUSES, MATCH_STATUSES
from donation_hub.models.donation import Donation
from donation_hub.models.match import Match
from donation_hub.models.request import Request
from donation_hub.utils.auth_helper import Actor, require_admin


class OverviewStats(BaseModel):
    total_donations: int
    total_requests: int
    donations_by_status: Dict[str, int]
    requests_by_status: Dict[str, int]
    matches_by_status: Dict[str, int]


def _count_by_status(session: Session, model, statuses) -> Dict[str, int]:
    counts = dict.fromkeys(statuses, 0)

    rows = session.exec(
        select(model.status, func.count(model.id)).group_by(model.status)
    ).all()

    for status, count in rows:
        counts[status] = count

    return counts


def overview_stats(session: Session, actor: Actor) -> OverviewStats:
    """Counters for the admin dashboard"""
    require_admin(actor)

    donations = _count_by_status(session, Donation, LISTING_STATUSES)
    requests = _count_by_status(session, Request, LISTING_STATUSES)

    return OverviewStats(
        total_donations=sum(donations.values()),
        total_requests=sum(requests.values()),
        donations_by_status=donations,
        requests_by_status=requests,
        matches_by_status=_count_by_status(session, Match, MATCH_STATUSES),
    )
