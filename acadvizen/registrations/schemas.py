"""Request and response models for registrations."""

from pydantic import BaseModel

from acadvizen.store.records import Registration


class RegistrationRequest(BaseModel):
    """Public sign-up form. Field rules are checked by `validate_registration`."""

    name: str = ""
    email: str = ""
    phone: str = ""
    mode: str = ""


class ConfirmationResponse(BaseModel):
    student_id: str
    temporary_password: str
    registration: Registration
