"""Accounts, login and the bearer token to actor conversion."""

from datetime import timedelta

import pytest

from donation_hub.config import Settings
from donation_hub.services.users import resolve_display_name
from donation_hub.utils.auth_helper import (
    Actor,
    actor_from_token,
    actor_from_token_optional,
    issue_token,
    require_admin,
    require_role,
)
from donation_hub.utils.clock import utcnow
from donation_hub.utils.errors import Forbidden


def test_register_returns_profile_and_token(hub, settings):
    result = hub.register({
        "name": "Priya Agarwal", "email": "Priya@Example.com", "password": "secret", "role": "donor",
    })

    assert result.success
    assert result.message == "Registration successful!"
    assert result.user.email == "priya@example.com"
    assert not hasattr(result.user, "password")

    actor = actor_from_token(result.token, settings)
    assert actor == Actor(id=result.user.id, role="donor")


def test_register_validation(hub, donor):
    duplicate = hub.register({
        "name": "Someone", "email": "AMIT@example.com", "password": "x", "role": "receiver",
    })
    assert duplicate.kind == "validation_error"
    assert duplicate.message == "User with this email already exists."

    missing = hub.register({"name": "No Role", "email": "a@b.c", "password": "x"})
    assert missing.message == "All fields are required."

    bad_role = hub.register({"name": "X", "email": "x@example.com", "password": "x", "role": "owner"})
    assert bad_role.message == "Invalid role specified."

    bad_email = hub.register({"name": "X", "email": "not-an-email", "password": "x", "role": "donor"})
    assert bad_email.message == "Invalid email address."


def test_login(hub, donor, settings):
    ok = hub.login("amit@EXAMPLE.com", "donor123")
    assert ok.success
    assert ok.user.id == donor.id
    assert actor_from_token(ok.token, settings) == donor

    wrong = hub.login("amit@example.com", "nope")
    assert wrong.kind == "forbidden"
    assert wrong.message == "Invalid email or password."

    unknown = hub.login("ghost@example.com", "donor123")
    assert unknown.message == wrong.message

    empty = hub.login("", "")
    assert empty.kind == "validation_error"


def test_token_checks(settings):
    expired = issue_token("u1", "donor", settings, utcnow() - timedelta(days=2))
    with pytest.raises(Forbidden):
        actor_from_token(expired, settings)

    with pytest.raises(Forbidden):
        actor_from_token("garbage", settings)

    other_secret = issue_token("u1", "admin", Settings(jwt_secret="other"), utcnow())
    with pytest.raises(Forbidden):
        actor_from_token(other_secret, settings)

    assert actor_from_token_optional(None, settings) is None
    assert actor_from_token_optional("garbage", settings) is None


def test_role_guards():
    admin = Actor(id="a", role="admin")
    donor = Actor(id="d", role="donor")

    assert require_admin(admin) is admin
    assert require_role(donor, "donor") is donor

    with pytest.raises(Forbidden):
        require_admin(donor)
    with pytest.raises(Forbidden):
        require_role(donor, "receiver")


def test_resolve_display_name(hub, donor):
    with hub.database.session() as session:
        assert resolve_display_name(session, donor.id) == "Amit Sharma"
        assert resolve_display_name(session, "missing") == "Unknown"
        assert resolve_display_name(session, None, fallback="Anonymous") == "Anonymous"
