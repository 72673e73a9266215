import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from donation_hub.config import Settings
from donation_hub.db.db import Database
from donation_hub.services import approval, matching, public, seed, stats, store, users
from donation_hub.services.store import DONATIONS, REQUESTS, ListingKind
from donation_hub.services.users import UserProfile
from donation_hub.utils.auth_helper import Actor, issue_token, require_role
from donation_hub.utils.clock import Clock, utcnow
from donation_hub.utils.errors import InternalError, NotFound, OperationResult, WorkflowError
from donation_hub.utils.form_validator import validate_search_filters

logger = logging.getLogger(__name__)

CREATED_MESSAGES = {
    "donation": "Donation added successfully! It's pending admin approval.",
    "request": "Request posted successfully! It's pending admin approval.",
}


class Marketplace:
    """Entry point for every workflow operation.

    Each call opens its own session, runs one service function and reports
    the outcome as an ``OperationResult``. Mutations run inside
    ``Database.write_session`` so they are serialised against each other.
    """

    def __init__(self, database: Database, settings: Optional[Settings] = None, clock: Clock = utcnow):
        self.database = database
        self.settings = settings or Settings()
        self.clock = clock

    def close(self) -> None:
        self.database.dispose()

    def __enter__(self) -> "Marketplace":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Execution helper
    # ------------------------------------------------------------------
    def _execute(self, operation: str, handler: Callable[[Session], OperationResult], write: bool = False) -> OperationResult:
        open_session = self.database.write_session if write else self.database.session

        try:
            with open_session() as session:
                return handler(session)
        except WorkflowError as e:
            logger.info("%s rejected: %s", operation, e.message)
            return OperationResult.failure(e)
        except SQLAlchemyError:
            logger.exception("%s failed", operation)
            return OperationResult.failure(InternalError())

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def _token_for(self, user) -> str:
        return issue_token(user.id, user.role, self.settings, utcnow())

    def register(self, data: dict) -> OperationResult:
        def handler(session):
            user = users.register_user(session, data or {}, self.clock())
            return OperationResult.ok(
                "Registration successful!",
                user=UserProfile.from_user(user),
                token=self._token_for(user),
            )

        return self._execute("register", handler, write=True)

    def login(self, email: str, password: str) -> OperationResult:
        def handler(session):
            user = users.authenticate(session, email, password)
            return OperationResult.ok(
                "Login successful!",
                user=UserProfile.from_user(user),
                token=self._token_for(user),
            )

        return self._execute("login", handler)

    # ------------------------------------------------------------------
    # Listings (shared by donations and requests)
    # ------------------------------------------------------------------
    def _add(self, kind: ListingKind, actor: Actor, data: dict) -> OperationResult:
        def handler(session):
            listing = store.create_listing(session, kind, actor, data, self.clock())
            return OperationResult.ok(CREATED_MESSAGES[kind.label], **{kind.label: listing})

        return self._execute(f"add {kind.label}", handler, write=True)

    def _get(self, kind: ListingKind, listing_id: str) -> OperationResult:
        def handler(session):
            listing = store.get_listing(session, kind, listing_id)
            return OperationResult.ok(f"{kind.title} found.", **{kind.label: listing})

        return self._execute(f"get {kind.label}", handler)

    def _mine(self, kind: ListingKind, actor: Actor) -> OperationResult:
        def handler(session):
            require_role(actor, kind.owner_role)
            listings = store.list_by_owner(session, kind, actor.id)
            return OperationResult.ok(f"{len(listings)} {kind.label}(s) found.", items=listings)

        return self._execute(f"list own {kind.label}s", handler)

    def _all(self, kind: ListingKind, actor: Actor) -> OperationResult:
        def handler(session):
            listings = store.list_all(session, kind, actor)
            return OperationResult.ok(f"{len(listings)} {kind.label}(s) found.", items=listings)

        return self._execute(f"list all {kind.label}s", handler)

    def _update(self, kind: ListingKind, actor: Actor, listing_id: str, updates: dict) -> OperationResult:
        def handler(session):
            listing = store.update_listing(session, kind, actor, listing_id, updates or {}, self.clock())
            return OperationResult.ok(f"{kind.title} updated successfully.", **{kind.label: listing})

        return self._execute(f"update {kind.label}", handler, write=True)

    def _delete(self, kind: ListingKind, actor: Actor, listing_id: str) -> OperationResult:
        def handler(session):
            store.delete_listing(session, kind, actor, listing_id)
            return OperationResult.ok(f"{kind.title} deleted successfully.")

        return self._execute(f"delete {kind.label}", handler, write=True)

    def _decide(self, kind: ListingKind, actor: Actor, listing_id: str, action: str) -> OperationResult:
        def handler(session):
            listing = approval.decide(session, kind, actor, listing_id, action, self.clock())
            return OperationResult.ok(f"{kind.title} {listing.status} successfully.", **{kind.label: listing})

        return self._execute(f"{action} {kind.label}", handler, write=True)

    # Donations
    def add_donation(self, actor: Actor, data: dict) -> OperationResult:
        return self._add(DONATIONS, actor, data)

    def get_donation(self, donation_id: str) -> OperationResult:
        return self._get(DONATIONS, donation_id)

    def my_donations(self, actor: Actor) -> OperationResult:
        return self._mine(DONATIONS, actor)

    def all_donations(self, actor: Actor) -> OperationResult:
        return self._all(DONATIONS, actor)

    def update_donation(self, actor: Actor, donation_id: str, updates: dict) -> OperationResult:
        return self._update(DONATIONS, actor, donation_id, updates)

    def delete_donation(self, actor: Actor, donation_id: str) -> OperationResult:
        return self._delete(DONATIONS, actor, donation_id)

    def decide_donation(self, actor: Actor, donation_id: str, action: str) -> OperationResult:
        return self._decide(DONATIONS, actor, donation_id, action)

    # Requests
    def add_request(self, actor: Actor, data: dict) -> OperationResult:
        return self._add(REQUESTS, actor, data)

    def get_request(self, request_id: str) -> OperationResult:
        return self._get(REQUESTS, request_id)

    def my_requests(self, actor: Actor) -> OperationResult:
        return self._mine(REQUESTS, actor)

    def all_requests(self, actor: Actor) -> OperationResult:
        return self._all(REQUESTS, actor)

    def update_request(self, actor: Actor, request_id: str, updates: dict) -> OperationResult:
        return self._update(REQUESTS, actor, request_id, updates)

    def delete_request(self, actor: Actor, request_id: str) -> OperationResult:
        return self._delete(REQUESTS, actor, request_id)

    def decide_request(self, actor: Actor, request_id: str, action: str) -> OperationResult:
        return self._decide(REQUESTS, actor, request_id, action)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    def create_match(self, actor: Actor, donation_id: str, request_id: str) -> OperationResult:
        def handler(session):
            match, donation, request = matching.create_match(session, actor, donation_id, request_id, self.clock())
            return OperationResult.ok(
                "Donation and request matched successfully!",
                match=match,
                donation=donation,
                request=request,
            )

        return self._execute("create match", handler, write=True)

    def complete_match(self, actor: Actor, match_id: str) -> OperationResult:
        def handler(session):
            match = matching.complete_match(session, actor, match_id, self.clock())
            return OperationResult.ok("Match completed successfully.", match=match)

        return self._execute("complete match", handler, write=True)

    def cancel_match(self, actor: Actor, match_id: str) -> OperationResult:
        def handler(session):
            match, donation, request = matching.cancel_match(session, actor, match_id, self.clock())
            return OperationResult.ok(
                "Match cancelled successfully. Donation and request are now available for new matches.",
                match=match,
                donation=donation,
                request=request,
            )

        return self._execute("cancel match", handler, write=True)

    def get_match(self, match_id: str) -> OperationResult:
        def handler(session):
            return OperationResult.ok("Match found.", match=matching.get_match(session, match_id))

        return self._execute("get match", handler)

    def all_matches(self, actor: Actor) -> OperationResult:
        def handler(session):
            details = matching.list_matches(session, actor)
            return OperationResult.ok(f"{len(details)} match(es) found.", items=details)

        return self._execute("list matches", handler)

    # ------------------------------------------------------------------
    # Public views
    # ------------------------------------------------------------------
    def public_donations(self) -> OperationResult:
        def handler(session):
            return OperationResult.ok("Public donations.", items=public.list_public_donations(session))

        return self._execute("list public donations", handler)

    def public_requests(self) -> OperationResult:
        def handler(session):
            return OperationResult.ok("Public requests.", items=public.list_public_requests(session))

        return self._execute("list public requests", handler)

    def search(self, filters: Optional[dict] = None) -> OperationResult:
        def handler(session):
            parsed = validate_search_filters(filters)
            results = public.search(session, parsed, self.clock())
            return OperationResult.ok(
                f"{len(results.donations)} donation(s) and {len(results.requests)} request(s) found.",
                data=results,
            )

        return self._execute("search", handler)

    def activity_feed(self, limit: Optional[int] = None) -> OperationResult:
        def handler(session):
            if limit is None:
                feed = public.list_activity_feed(session, self.settings.activity_feed_limit)
            else:
                feed = public.list_activity_feed(session, limit)
            return OperationResult.ok("Recent activity.", items=feed)

        return self._execute("activity feed", handler)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------
    def overview(self, actor: Actor) -> OperationResult:
        def handler(session):
            return OperationResult.ok("Overview statistics.", data=stats.overview_stats(session, actor))

        return self._execute("overview", handler)

    def seed_demo_data(self) -> OperationResult:
        def handler(session):
            now = self.clock()
            created = seed.seed_default_users(session, now)

            donor = users.find_user_by_email(session, "donor@example.com")
            receiver = users.find_user_by_email(session, "receiver@example.com")
            if not donor or not receiver:
                raise NotFound("Demo accounts are missing.")

            listings = seed.seed_sample_listings(session, donor, receiver, now)
            return OperationResult.ok(
                "Test data seeded successfully.",
                data={"users": len(created), "listings": listings},
            )

        return self._execute("seed demo data", handler, write=True)
