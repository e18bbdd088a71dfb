"""Student identifiers and one-time passwords issued on confirmation."""

import re

from acadvizen.core.ids import random_base36, timestamp_base36


STUDENT_ID_PATTERN = re.compile(r"^STU[0-9A-Z]{12,}$")


def generate_student_id() -> str:
    """`STU` + base36 millisecond timestamp + 4 random base36 chars, uppercased."""
    return f"STU{timestamp_base36()}{random_base36(4)}".upper()


def generate_temporary_password(name: str) -> str:
    parts = name.split()
    first_name = parts[0] if parts else "Student"
    return f"{first_name}@{random_base36(6)}"
