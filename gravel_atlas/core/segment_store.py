"""HTTP client for the segment storage API.

- save: POST a FinishedSegment to the save route
- list_segments: GET stored segments, optionally within map bounds

Failures raise PersistenceError and are never retried here; the user
re-triggers the save.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from gravel_atlas.constants import PersistenceConfig
from gravel_atlas.model.elevation import ElevationProfilePoint
from gravel_atlas.model.errors import GeoJSONValidationError, PersistenceError
from gravel_atlas.model.finished_segment import FinishedSegment
from gravel_atlas.model.geojson import LineStringFeature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSegment:
    """A segment record as returned by the store."""

    id: str
    title: str
    feature: LineStringFeature
    user_name: str = ""
    length_m: Optional[float] = None
    elevation_gain_m: Optional[float] = None
    elevation_loss_m: Optional[float] = None
    elevation_profile: tuple[ElevationProfilePoint, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredSegment":
        """Parse a stored document.

        Raises:
            GeoJSONValidationError: If the stored geometry is malformed.
        """
        metadata = data.get("metadata") or {}
        return cls(
            id=str(data.get("_id", data.get("id", ""))),
            title=metadata.get("title", ""),
            feature=LineStringFeature.from_dict(data.get("geojson")),
            user_name=data.get("userName", ""),
            length_m=metadata.get("length"),
            elevation_gain_m=metadata.get("elevationGain"),
            elevation_loss_m=metadata.get("elevationLoss"),
            elevation_profile=tuple(
                ElevationProfilePoint.from_dict(p) for p in metadata.get("elevationProfile") or []
            ),
        )


@dataclass(frozen=True)
class SegmentPage:
    """One page of stored segments."""

    segments: list[StoredSegment] = field(default_factory=list)
    total: int = 0
    page: int = 1
    pages: int = 0


class SegmentStore:
    """Client for the segments API.

    Example:
        store = SegmentStore(base_url="https://gravel-atlas.example")
        record = store.save(segment=finished)
    """

    def __init__(
        self,
        base_url: str = PersistenceConfig.BASE_URL,
        auth_token: Optional[str] = None,
        timeout_s: float = PersistenceConfig.REQUEST_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token if auth_token is not None else os.environ.get(PersistenceConfig.AUTH_TOKEN_ENV)
        self.timeout_s = timeout_s
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def save(self, segment: FinishedSegment) -> dict[str, Any]:
        """Store a finished segment.

        Returns:
            The stored segment record.

        Raises:
            PersistenceError: On transport failure or a non-success response
                (validation, authentication, server error).
        """
        url = f"{self.base_url}{PersistenceConfig.SAVE_PATH}"
        payload = segment.to_payload()
        logger.info(f"[SAVE] Saving {segment!r} to {url}")
        try:
            response = self._session.post(url, json=payload, headers=self._headers(), timeout=self.timeout_s)
        except requests.RequestException as exc:
            logger.error(f"[SAVE] Request failed: {exc}")
            raise PersistenceError(f"Could not reach segment store: {exc}") from exc

        if not response.ok:
            error, details = _error_fields(response)
            logger.error(f"[SAVE] Rejected with HTTP {response.status_code}: {error} {details or ''}")
            raise PersistenceError(error, status_code=response.status_code, details=details)

        body = _json_or_raise(response)
        record = body.get("segment", body)
        logger.info(f"[SAVE] Stored segment {record.get('_id', '?')}")
        return record

    def list_segments(
        self,
        bounds: Optional[tuple[float, float, float, float]] = None,
        page: int = 1,
        limit: int = PersistenceConfig.DEFAULT_PAGE_LIMIT,
        user_id: Optional[str] = None,
    ) -> SegmentPage:
        """Fetch one page of stored segments, newest first.

        Args:
            bounds: Optional (west, south, east, north) filter
            page: 1-based page number
            limit: Page size
            user_id: Only segments by this user

        Raises:
            PersistenceError: On transport failure or non-success response.
        """
        params: dict[str, Any] = {"page": page, "limit": limit}
        if bounds is not None:
            params["bounds"] = ",".join(str(v) for v in bounds)
        if user_id:
            params["userId"] = user_id

        url = f"{self.base_url}{PersistenceConfig.LIST_PATH}"
        try:
            response = self._session.get(url, params=params, headers=self._headers(), timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise PersistenceError(f"Could not reach segment store: {exc}") from exc
        if not response.ok:
            error, details = _error_fields(response)
            raise PersistenceError(error, status_code=response.status_code, details=details)

        body = _json_or_raise(response)
        segments = []
        for raw in body.get("segments", []):
            try:
                segments.append(StoredSegment.from_dict(raw))
            except GeoJSONValidationError as exc:
                logger.warning(f"Skipping stored segment {raw.get('_id', '?')} with bad geometry: {exc}")
        pagination = body.get("pagination") or {}
        return SegmentPage(
            segments=segments,
            total=int(pagination.get("total", len(segments))),
            page=int(pagination.get("page", page)),
            pages=int(pagination.get("pages", 1 if segments else 0)),
        )

    def close(self) -> None:
        self._session.close()


def _json_or_raise(response: requests.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise PersistenceError("Segment store returned invalid JSON", status_code=response.status_code) from exc
    if not isinstance(body, dict):
        raise PersistenceError("Segment store returned an unexpected body", status_code=response.status_code)
    return body


def _error_fields(response: requests.Response) -> tuple[str, Optional[str]]:
    """Extract the {error, details} fields the API returns on failure."""
    try:
        body = response.json()
    except ValueError:
        return f"Segment store error: {response.reason or 'unknown'}", None
    if not isinstance(body, dict):
        return "Segment store error", None
    details = body.get("details")
    return str(body.get("error", "Segment store error")), str(details) if details is not None else None
