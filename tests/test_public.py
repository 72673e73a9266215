"""Anonymous listings, search and activity feed."""

from datetime import datetime, timedelta, timezone

from donation_hub.services.public import relevance_score


def test_public_donations_only_approved(hub, admin, donor, add_donation):
    add_donation(item_name="Pending Rice")
    rejected = add_donation(item_name="Rejected Rice")
    hub.decide_donation(admin, rejected.id, "reject")
    older = add_donation(item_name="Books", category="books", approve=True)
    newer = add_donation(item_name="Chairs", category="furniture", approve=True)

    result = hub.public_donations()

    assert result.success
    assert [d.id for d in result.items] == [newer.id, older.id]
    assert result.items[0].donor_name == "Amit Sharma"


def test_public_views_hide_owner_ids(hub, donor, receiver, add_donation, add_request):
    add_donation(approve=True)
    add_request(approve=True)

    donation = hub.public_donations().items[0].model_dump()
    request = hub.public_requests().items[0].model_dump()

    assert "donor_id" not in donation
    assert donor.id not in donation.values()
    assert "receiver_id" not in request
    assert receiver.id not in request.values()


def test_matched_listings_leave_public_lists(hub, admin, add_donation, add_request):
    donation = add_donation(approve=True)
    request = add_request(approve=True)
    hub.create_match(admin, donation.id, request.id)

    assert hub.public_donations().items == []
    assert hub.public_requests().items == []


def test_public_requests_urgent_first(hub, add_request):
    old_urgent = add_request(approve=True, item_needed="Insulin", category="medical", urgency="urgent")
    old_normal = add_request(approve=True, item_needed="Chairs", category="furniture")
    new_urgent = add_request(approve=True, item_needed="Blankets", category="clothes", urgency="urgent")
    new_normal = add_request(approve=True, item_needed="Novels", category="books")

    result = hub.public_requests()

    assert [r.id for r in result.items] == [new_urgent.id, old_urgent.id, new_normal.id, old_normal.id]


def test_search_filters(hub, admin, add_donation, add_request):
    exact = add_donation(approve=True, item_name="Rice", quantity=50)
    partial = add_donation(approve=True, item_name="Brown rice bag", quantity=10)
    add_donation(approve=True, item_name="Rice cooker", category="electronics", quantity=2)
    add_donation(approve=True, item_name="Wheat", quantity=20)
    add_donation(approve=True, item_name="Rice", quantity=150)
    add_donation(item_name="Rice")  # pending
    add_request(approve=True, item_needed="RICE", quantity=10)
    add_request(approve=True, item_needed="Rice", quantity=10, category="other")

    result = hub.search({
        "item_name": "rice", "category": "food", "min_quantity": 1, "max_quantity": 100,
    })

    assert result.success
    donations = result.data.donations
    assert [d.id for d in donations] == [exact.id, partial.id]
    assert [r.item_needed for r in result.data.requests] == ["RICE"]


def test_search_quantity_bounds_inclusive(hub, add_donation):
    low = add_donation(approve=True, quantity=5)
    high = add_donation(approve=True, quantity=10)
    add_donation(approve=True, quantity=11)

    result = hub.search({"min_quantity": 5, "max_quantity": 10, "type": "donations"})

    assert {d.id for d in result.data.donations} == {low.id, high.id}
    assert result.data.requests == []


def test_search_urgency_and_type(hub, add_donation, add_request):
    add_donation(approve=True)
    urgent = add_request(approve=True, urgency="urgent")
    add_request(approve=True, urgency="normal")

    result = hub.search({"urgency": "urgent", "type": "requests"})

    assert result.data.donations == []
    assert [r.id for r in result.data.requests] == [urgent.id]


def test_search_defaults_newest_first(hub, add_donation):
    first = add_donation(approve=True, item_name="Books", category="books")
    second = add_donation(approve=True, item_name="Toys", category="toys")

    result = hub.search()

    assert [d.id for d in result.data.donations] == [second.id, first.id]


def test_search_treats_wildcards_literally(hub, add_donation):
    add_donation(approve=True, item_name="Rice")
    literal = add_donation(approve=True, item_name="100% cotton shirts", category="clothes")

    result = hub.search({"item_name": "%", "type": "donations"})

    assert [d.id for d in result.data.donations] == [literal.id]


def test_search_folds_accented_names(hub, add_donation, add_request):
    chairs = add_donation(approve=True, item_name="CAFÉ Chairs", category="furniture")
    add_donation(approve=True, item_name="Cafe Tables", category="furniture")
    request = add_request(approve=True, item_needed="Crème fraîche", category="food")

    result = hub.search({"item_name": "café"})

    assert [d.id for d in result.data.donations] == [chairs.id]
    assert hub.search({"item_name": "CRÈME"}).data.requests[0].id == request.id


def test_search_rejects_bad_filters(hub):
    result = hub.search({"category": "weapons"})

    assert result.kind == "validation_error"
    assert result.message == "Invalid category specified."


def test_relevance_ranking_prefers_urgent_request(hub, add_request, clock):
    normal = add_request(approve=True, item_needed="Rice flour")
    urgent = add_request(approve=True, item_needed="Rice flour", urgency="urgent")
    clock.advance(days=1)

    result = hub.search({"item_name": "flour", "type": "requests"})

    assert [r.id for r in result.data.requests] == [urgent.id, normal.id]


def test_relevance_score_components():
    now = datetime(2024, 3, 10, tzinfo=timezone.utc)

    assert relevance_score("Rice", "rice", None, now - timedelta(days=5), now) == 165
    assert relevance_score("Brown Rice", "rice", "urgent", now, now) == 100
    assert relevance_score("Rice", "rice", None, now - timedelta(days=40), now) == 150
    # naive timestamps are treated as UTC
    assert relevance_score("Rice", "beans", None, datetime(2024, 3, 10), now) == 20


def test_activity_feed(hub, admin, add_donation, add_request, clock):
    donation = add_donation(approve=True, item_name="Books", category="books", quantity=25)
    request = add_request(approve=True, item_needed="Blankets", category="clothes")
    add_donation(item_name="Pending")
    matched_donation = add_donation(approve=True, item_name="Rice")
    matched_request = add_request(approve=True)
    hub.create_match(admin, matched_donation.id, matched_request.id)

    result = hub.activity_feed()

    assert result.success
    assert [a.id for a in result.items] == [
        f"request-{matched_request.id}",
        f"donation-{matched_donation.id}",
        f"request-{request.id}",
        f"donation-{donation.id}",
    ]
    books = result.items[-1]
    assert books.type == "donation"
    assert books.actor_name == "Amit Sharma"
    assert books.item_name == "Books"
    assert books.quantity == 25
    assert books.timestamp.tzinfo is not None


def test_activity_feed_limit(hub, add_donation):
    for index in range(5):
        add_donation(approve=True, item_name=f"Item {index}")

    result = hub.activity_feed(limit=3)

    assert [a.item_name for a in result.items] == ["Item 4", "Item 3", "Item 2"]


def test_activity_feed_default_limit(hub, add_donation, settings):
    for index in range(settings.activity_feed_limit + 2):
        add_donation(approve=True, item_name=f"Item {index}")

    result = hub.activity_feed()

    assert len(result.items) == settings.activity_feed_limit


def test_activity_feed_rejects_non_positive_limit(hub, add_donation):
    for index in range(3):
        add_donation(approve=True, item_name=f"Item {index}")

    for limit in (0, -1):
        result = hub.activity_feed(limit=limit)

        assert not result.success
        assert result.kind == "validation_error"
        assert result.message == "Limit must be a positive number."
        assert result.items == []
