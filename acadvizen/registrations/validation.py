"""Field checks for the public registration form."""

import re

from acadvizen.registrations.schemas import RegistrationRequest
from acadvizen.store.records import StudyMode


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s-]+$")
MIN_NAME_LENGTH = 2
MIN_PHONE_DIGITS = 10

NAME_ERROR = "Name must be at least 2 characters"
EMAIL_ERROR = "Please enter a valid email address"
PHONE_ERROR = "Please enter a valid phone number (at least 10 digits)"
MODE_ERROR = "Please select a valid mode (online or offline)"


def is_valid_phone(phone: str) -> bool:
    phone = phone.strip()
    if not PHONE_PATTERN.match(phone):
        return False
    return sum(ch.isdigit() for ch in phone) >= MIN_PHONE_DIGITS


def validate_registration(data: RegistrationRequest) -> dict[str, str]:
    """Return field -> message for every failing field; empty means valid."""
    errors: dict[str, str] = {}

    if len(data.name.strip()) < MIN_NAME_LENGTH:
        errors["name"] = NAME_ERROR

    if not EMAIL_PATTERN.match(data.email.strip()):
        errors["email"] = EMAIL_ERROR

    if not is_valid_phone(data.phone):
        errors["phone"] = PHONE_ERROR

    if data.mode not in {mode.value for mode in StudyMode}:
        errors["mode"] = MODE_ERROR

    return errors
