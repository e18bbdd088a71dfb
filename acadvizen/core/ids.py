"""Human-readable identifiers built from base36 timestamps and random suffixes."""

import secrets
import string
import time


BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    if number < 0:
        msg = "base36 encoding needs a non-negative number"
        raise ValueError(msg)
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def timestamp_base36() -> str:
    """Current time in milliseconds, base36 encoded."""
    return to_base36(time.time_ns() // 1_000_000)
