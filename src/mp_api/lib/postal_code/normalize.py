"""Postal code normalization and validation.

Canada Post codes alternate letter and digit (``A1A1A1``). The first letter
is never D, F, I, O, Q, U, W or Z, and the other letters are never D, F, I,
O, Q or U.
"""

import re

POSTAL_CODE_PATTERN = re.compile(r"^[ABCEGHJ-NPRSTVXY]\d[ABCEGHJ-NPRSTV-Z]\d[ABCEGHJ-NPRSTV-Z]\d$")
PARTIAL_POSTAL_CODE_PATTERN = re.compile(r"^[A-Z0-9]{3,6}$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


class PostalCodeValidationError(ValueError):
    """Raised when a postal code is malformed.

    Args:
        postal_code: The rejected input, as received.
    """

    def __init__(self, postal_code: str) -> None:
        self.postal_code = postal_code
        super().__init__("Invalid postal code format")


def normalize_postal_code(value: str) -> str:
    """Uppercase a postal code and remove every whitespace character.

    Args:
        value: Raw user input (e.g. ``" k1a 0a6 "``).

    Returns:
        The normalized form (e.g. ``"K1A0A6"``).
    """
    return _WHITESPACE.sub("", value).upper()


def validate_postal_code(normalized: str) -> bool:
    """Return True when ``normalized`` is a structurally valid postal code."""
    return bool(POSTAL_CODE_PATTERN.match(normalized))


def parse_postal_code(value: str) -> str:
    """Normalize and validate a postal code.

    Args:
        value: Raw user input.

    Returns:
        The normalized postal code.

    Raises:
        PostalCodeValidationError: If the normalized value is not a valid code.
    """
    normalized = normalize_postal_code(value)
    if not validate_postal_code(normalized):
        raise PostalCodeValidationError(value)
    return normalized


def format_postal_code(value: str) -> str:
    """Return the ``A1A 1A1`` display form of a complete code, else the normalized input."""
    normalized = normalize_postal_code(value)
    if len(normalized) == 6:
        return f"{normalized[:3]} {normalized[3:]}"
    return normalized


def is_partial_postal_code(value: str) -> bool:
    """Return True for 3-6 alphanumerics once whitespace is removed."""
    return bool(PARTIAL_POSTAL_CODE_PATTERN.match(_WHITESPACE.sub("", value)))
