"""Canadian postal code normalization, validation and display formatting.

Public API:
    - normalize_postal_code: Uppercase and strip all whitespace
    - validate_postal_code: Structural check of a normalized code
    - parse_postal_code: Normalize + validate, raising on invalid input
    - format_postal_code: ``A1A 1A1`` display form
    - is_partial_postal_code: Loose check used by autocomplete
    - PostalCodeValidationError: Raised for malformed postal codes
"""

from mp_api.lib.postal_code.normalize import (
    PostalCodeValidationError,
    format_postal_code,
    is_partial_postal_code,
    normalize_postal_code,
    parse_postal_code,
    validate_postal_code,
)

__all__ = [
    "PostalCodeValidationError",
    "format_postal_code",
    "is_partial_postal_code",
    "normalize_postal_code",
    "parse_postal_code",
    "validate_postal_code",
]
