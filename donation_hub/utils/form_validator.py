from typing import Literal, Optional, Type
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from donation_hub.utils.errors import ValidationError

Category = Literal["clothes", "books", "food", "furniture", "electronics", "toys", "medical", "other"]
Urgency = Literal["normal", "urgent"]

FIELD_MESSAGES = {
    "category": "Invalid category specified.",
    "urgency": "Urgency must be either 'normal' or 'urgent'.",
    "quantity": "Quantity must be at least 1.",
    "role": "Invalid role specified.",
    "email": "Invalid email address.",
    "action": "Action must be either 'approve' or 'reject'.",
}


class ValidatedDonation(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    item_name: str = Field(min_length=1, max_length=120)
    category: Category
    description: str = Field(min_length=1, max_length=1000)
    quantity: int = Field(default=1, ge=1)
    photo_url: Optional[str] = None


class ValidatedRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    item_needed: str = Field(min_length=1, max_length=120)
    category: Category
    description: str = Field(min_length=1, max_length=1000)
    quantity: int = Field(default=1, ge=1)
    urgency: Urgency = "normal"


class ValidatedRegistration(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1)
    role: Literal["donor", "receiver", "admin"]


class SearchFilters(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    item_name: str = ""
    category: Literal["all", "clothes", "books", "food", "furniture", "electronics", "toys", "medical", "other"] = "all"
    min_quantity: int = 1
    max_quantity: int = 100
    urgency: Literal["all", "normal", "urgent"] = "all"
    type: Literal["donations", "requests", "both"] = "both"


def _message_for(errors: list, required_message: str) -> str:
    for err in errors:
        field = err["loc"][0] if err["loc"] else None

        if err["type"] == "missing":
            return required_message

        if field in FIELD_MESSAGES:
            return FIELD_MESSAGES[field]

        # blank strings are stripped first, so they surface as too short
        if err["type"] in ("string_too_short", "string_type"):
            return required_message

    return "Invalid input."


def validate_form(form: Type[BaseModel], data: dict, required_message: str) -> BaseModel:
    try:
        return form(**data)
    except PydanticValidationError as e:
        errors = e.errors()
        raise ValidationError(_message_for(errors, required_message), errors=errors)


def validate_search_filters(filters: Optional[dict]) -> SearchFilters:
    try:
        return SearchFilters(**(filters or {}))
    except PydanticValidationError as e:
        errors = e.errors()
        raise ValidationError(_message_for(errors, "Invalid search filters."), errors=errors)
