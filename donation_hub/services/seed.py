import logging
from datetime import datetime, timedelta
from typing import List
from sqlmodel import Session, select

from donation_hub.models.donation import Donation
from donation_hub.models.request import Request
from donation_hub.models.user import User
from donation_hub.services.users import find_user_by_email
from donation_hub.utils.auth_helper import hash_password

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    {"name": "Admin User", "email": "admin@example.com", "password": "admin123", "role": "admin"},
    {"name": "Donor User", "email": "donor@example.com", "password": "donor123", "role": "donor"},
    {"name": "Receiver User", "email": "receiver@example.com", "password": "receiver123", "role": "receiver"},
]

SAMPLE_DONATIONS = [
    {
        "item_name": "Winter Clothes",
        "category": "clothes",
        "description": "Warm winter jackets, sweaters, and pants for children ages 5-12",
        "quantity": 20,
    },
    {
        "item_name": "Rice and Lentils",
        "category": "food",
        "description": "50kg of rice and 20kg of lentils for families in need",
        "quantity": 70,
    },
    {
        "item_name": "Medical Supplies",
        "category": "medical",
        "description": "First aid kits, bandages, and basic medicines",
        "quantity": 15,
    },
    {
        "item_name": "Educational Books",
        "category": "books",
        "description": "Textbooks and reference books for high school students",
        "quantity": 50,
    },
]

SAMPLE_REQUESTS = [
    {
        "item_needed": "School Supplies",
        "category": "books",
        "description": "Notebooks, pens, and pencils for 30 students",
        "quantity": 30,
        "urgency": "urgent",
    },
    {
        "item_needed": "Blankets",
        "category": "clothes",
        "description": "Warm blankets for a night shelter",
        "quantity": 25,
        "urgency": "normal",
    },
    {
        "item_needed": "Baby Food",
        "category": "food",
        "description": "Formula and cereal for infants at a community center",
        "quantity": 40,
        "urgency": "urgent",
    },
]


def seed_default_users(session: Session, now: datetime) -> List[User]:
    """Create the demo accounts that are missing. Returns the newly created ones."""
    created = []

    for data in DEFAULT_USERS:
        if find_user_by_email(session, data["email"]):
            continue

        user = User(
            name=data["name"],
            email=data["email"],
            password=hash_password(data["password"]),
            role=data["role"],
            created_at=now,
            updated_at=now,
        )
        session.add(user)
        created.append(user)

    session.commit()
    for user in created:
        session.refresh(user)

    logger.info("Seeded %d demo users", len(created))
    return created


def seed_sample_listings(session: Session, donor: User, receiver: User, now: datetime) -> int:
    """Add approved sample listings, each one a day older than the previous."""
    added = 0

    for age, data in enumerate(SAMPLE_DONATIONS):
        exists = session.exec(
            select(Donation.id)
            .where(Donation.donor_id == donor.id)
            .where(Donation.item_name == data["item_name"])
        ).first()
        if exists:
            continue

        created_at = now - timedelta(days=age)
        session.add(Donation(
            donor_id=donor.id,
            status="approved",
            created_at=created_at,
            updated_at=created_at,
            **data,
        ))
        added += 1

    for age, data in enumerate(SAMPLE_REQUESTS):
        exists = session.exec(
            select(Request.id)
            .where(Request.receiver_id == receiver.id)
            .where(Request.item_needed == data["item_needed"])
        ).first()
        if exists:
            continue

        created_at = now - timedelta(days=age)
        session.add(Request(
            receiver_id=receiver.id,
            status="approved",
            created_at=created_at,
            updated_at=created_at,
            **data,
        ))
        added += 1

    session.commit()

    logger.info("Seeded %d sample listings", added)
    return added
