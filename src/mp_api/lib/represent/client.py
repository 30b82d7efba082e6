"""OpenNorth Represent postal code client.

Uses the Represent API (https://represent.opennorth.ca/api/) to map a
postal code to its federal electoral district and, when available, the
sitting MP's upstream person identifier.
"""

import asyncio

import httpx
from loguru import logger

from mp_api.lib.represent.base import DistrictLookupError, LookupFailureReason, UpstreamDistrict

DEFAULT_BASE_URL = "https://represent.opennorth.ca"
DEFAULT_TIMEOUT = 5.0
FEDERAL_BOUNDARY_SET_NAME = "Federal electoral district"
_FEDERAL_URL_MARKERS = ("federal-electoral-districts", "federal_electoral_districts")


class RepresentClient:
    """Async client for the ``/postcodes/{code}/`` endpoint.

    Args:
        base_url: Base URL of the Represent API.
        timeout: Upper bound in seconds for one lookup, including retries
            inside the transport.
        client: Optional pre-built ``httpx.AsyncClient`` (tests inject one
            with a ``MockTransport``). A client built here is closed by
            :meth:`close`; an injected one is left to its owner.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def lookup(self, postal_code: str) -> UpstreamDistrict | None:
        """Look up the federal district for a normalized postal code.

        Args:
            postal_code: Normalized postal code (e.g. ``"K1A0A6"``).

        Returns:
            UpstreamDistrict, or None if the response named no district.

        Raises:
            DistrictLookupError: On timeout, 404, 429, any other HTTP error,
                transport failure or malformed response body.
        """
        url = f"{self._base_url}/postcodes/{postal_code}/"
        log = logger.bind(stage="upstream")
        try:
            response = await asyncio.wait_for(
                self._client.get(url, headers={"Accept": "application/json"}),
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (TimeoutError, httpx.TimeoutException) as e:
            log.warning(f"Represent lookup for {postal_code} timed out after {self._timeout}s")
            raise DistrictLookupError(LookupFailureReason.TIMEOUT, "Postal code lookup timed out") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            log.warning(f"Represent lookup for {postal_code} returned HTTP {status_code}")
            if status_code == 404:
                raise DistrictLookupError(
                    LookupFailureReason.NOT_FOUND, "Postal code not found upstream", status_code=404
                ) from e
            if status_code == 429:
                raise DistrictLookupError(
                    LookupFailureReason.RATE_LIMITED, "Upstream rate limit exceeded", status_code=429
                ) from e
            raise DistrictLookupError(
                LookupFailureReason.OTHER, f"Upstream returned HTTP {status_code}", status_code=status_code
            ) from e
        except httpx.HTTPError as e:
            log.warning(f"Represent lookup for {postal_code} failed: {e.__class__.__name__}")
            raise DistrictLookupError(LookupFailureReason.OTHER, f"Connection to upstream failed: {e}") from e
        except ValueError as e:
            log.warning(f"Represent lookup for {postal_code} returned malformed JSON")
            raise DistrictLookupError(LookupFailureReason.OTHER, "Malformed upstream response") from e

        log.debug(f"Represent lookup for {postal_code} returned HTTP {response.status_code}")
        district = parse_postcode_response(data)
        if district is None:
            log.info(f"Represent response for {postal_code} named no federal district")
        return district


def _is_federal_boundary(boundary: dict) -> bool:
    if boundary.get("boundary_set_name") == FEDERAL_BOUNDARY_SET_NAME:
        return True
    url = boundary.get("url") or ""
    return any(marker in url for marker in _FEDERAL_URL_MARKERS)


def _find_federal_boundary(boundaries: object) -> dict | None:
    if not isinstance(boundaries, list):
        return None
    for boundary in boundaries:
        if isinstance(boundary, dict) and _is_federal_boundary(boundary):
            return boundary
    return None


def _find_mp(representatives: object) -> dict | None:
    if not isinstance(representatives, list):
        return None
    for rep in representatives:
        if isinstance(rep, dict) and rep.get("elected_office") == "MP":
            return rep
    return None


def parse_postcode_response(data: dict) -> UpstreamDistrict | None:
    """Parse a Represent ``/postcodes/`` payload into an UpstreamDistrict.

    The boundary name comes from the centroid boundaries, then the
    concordance boundaries. The sitting MP is taken from the centroid
    representatives, then the concordance ones. The legacy
    ``federal_electoral_districts`` list is the last fallback.

    Args:
        data: Decoded JSON response body.

    Returns:
        UpstreamDistrict, or None when no district name can be found.

    Raises:
        DistrictLookupError: If the payload is not a JSON object.
    """
    if not isinstance(data, dict):
        raise DistrictLookupError(LookupFailureReason.OTHER, "Malformed upstream response")

    district_name: str | None = None
    external_id: str | None = None
    person_id: str | None = None
    representative_district_name: str | None = None

    boundary = _find_federal_boundary(data.get("boundaries_centroid"))
    if boundary is None:
        boundary = _find_federal_boundary(data.get("boundaries_concordance"))
    if boundary is not None:
        district_name = boundary.get("name") or None
        external_id = boundary.get("external_id") or None

    mp = _find_mp(data.get("representatives_centroid"))
    if mp is not None:
        representative_district_name = mp.get("district_name") or None
        person_id = mp.get("person_id") or mp.get("external_id") or None
    else:
        mp = _find_mp(data.get("representatives_concordance"))
        if mp is not None:
            district_name = district_name or mp.get("district_name") or None
            person_id = mp.get("person_id") or mp.get("external_id") or None

    if not district_name and not representative_district_name:
        districts = data.get("federal_electoral_districts")
        if isinstance(districts, list) and districts and isinstance(districts[0], dict):
            district_name = districts[0].get("name") or None

    if not district_name and not representative_district_name:
        return None

    return UpstreamDistrict(
        district_name=district_name or representative_district_name or "",
        external_id=str(external_id) if external_id is not None else None,
        person_id=str(person_id) if person_id is not None else None,
        representative_district_name=representative_district_name,
        raw_data=data,
    )
