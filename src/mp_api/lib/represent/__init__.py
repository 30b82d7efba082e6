"""Represent (OpenNorth) upstream district lookup.

Public API:
    - RepresentClient: Async postal code lookup client
    - UpstreamDistrict: Parsed district information
    - DistrictLookupError: Tagged lookup failure
    - LookupFailureReason: Failure categories
"""

from mp_api.lib.represent.base import DistrictLookupError, LookupFailureReason, UpstreamDistrict
from mp_api.lib.represent.client import RepresentClient, parse_postcode_response

__all__ = [
    "DistrictLookupError",
    "LookupFailureReason",
    "RepresentClient",
    "UpstreamDistrict",
    "parse_postcode_response",
]
