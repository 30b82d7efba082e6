"""Types shared by the Represent postal code client and its callers."""

import enum
from dataclasses import dataclass, field


class LookupFailureReason(enum.StrEnum):
    """Why an upstream district lookup failed."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    OTHER = "other"


@dataclass
class UpstreamDistrict:
    """District information returned by the upstream service for a postal code.

    ``district_name`` is the boundary name. ``representative_district_name``
    comes from the sitting MP's record when the response includes one and is
    the more accurate spelling after redistricting.
    """

    district_name: str
    external_id: str | None = None
    person_id: str | None = None
    representative_district_name: str | None = None
    raw_data: dict = field(default_factory=dict, repr=False)

    @property
    def preferred_district_name(self) -> str:
        return self.representative_district_name or self.district_name


class DistrictLookupError(Exception):
    """Raised when the upstream district lookup fails.

    Args:
        reason: Failure category, decided once at the HTTP call boundary.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the upstream service.
    """

    def __init__(self, reason: LookupFailureReason, message: str, status_code: int | None = None) -> None:
        self.reason = reason
        self.message = message
        self.status_code = status_code
        super().__init__(f"represent ({reason}): {message}")
