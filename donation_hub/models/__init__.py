from donation_hub.models.user import User
from donation_hub.models.donation import Donation
from donation_hub.models.request import Request
from donation_hub.models.match import Match

__all__ = ["User", "Donation", "Request", "Match"]
