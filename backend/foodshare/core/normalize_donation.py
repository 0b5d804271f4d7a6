"""Donation Normalization — read-time formatting of stored rows for listing.

Invariants:
    - Rows missing id, title or category produce None (caller drops them)
    - Non-finite, missing or zero coordinates are replaced by FALLBACK point + jitter
      in [-JITTER/2, +JITTER/2) on each axis; good coordinates are never touched
    - The jitter is applied to the OUTPUT only; nothing here writes to the store
    - Output exposes both pickup_latitude/pickup_longitude and latitude/longitude
    - business_confirmed stays tri-state (None before any reservation)
"""

import math
import random
from datetime import datetime, timezone
from typing import Any, Mapping

from foodshare.core.domain_types import DonationStatus


FALLBACK_LATITUDE = 4.8133
FALLBACK_LONGITUDE = -75.6961
JITTER = 0.02

_OPTIONAL_TEXT = (
    "donation_reason", "contact_info", "pickup_time",
    "pickup_person_name", "pickup_person_id", "verification_code",
)
_TIMESTAMPS = (
    "reserved_at", "completed_at", "donor_confirmed_at",
    "recipient_confirmed_at", "business_confirmed_at",
)


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _iso(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _status(value: Any) -> str:
    if isinstance(value, DonationStatus):
        return value.value
    return str(value or DonationStatus.AVAILABLE.value).strip().lower()


def _is_usable(coordinate: float) -> bool:
    return math.isfinite(coordinate) and coordinate != 0


def resolve_coordinates(
    latitude: Any, longitude: Any, rng: random.Random,
) -> tuple[float, float]:
    """Stored coordinates, or a jittered fallback point when either is unusable."""
    lat, lng = _as_float(latitude), _as_float(longitude)
    if not (_is_usable(lat) and _is_usable(lng)):
        lat = FALLBACK_LATITUDE + (rng.random() - 0.5) * JITTER
        lng = FALLBACK_LONGITUDE + (rng.random() - 0.5) * JITTER
    return round(lat, 6), round(lng, 6)


def normalize_donation(
    row: Mapping[str, Any] | None,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> dict | None:
    """Coerce one stored row into the public listing shape, or None if unusable."""
    if not row:
        return None
    if not row.get("id") or not row.get("title") or not row.get("category"):
        return None

    rng = rng or random.Random()
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    lat, lng = resolve_coordinates(
        row.get("pickup_latitude"), row.get("pickup_longitude"), rng,
    )
    weight = _as_float(row.get("weight"))
    business_confirmed = row.get("business_confirmed")

    normalized = {
        "id": _as_int(row["id"]),
        "title": str(row["title"]).strip(),
        "description": str(row.get("description") or "").strip(),
        "category": str(row["category"]).strip().lower(),
        "quantity": _as_int(row.get("quantity")) or 1,
        "weight": weight if math.isfinite(weight) else None,
        "expiry_date": _iso(row.get("expiry_date")),
        "pickup_address": str(row.get("pickup_address") or "").strip(),
        "pickup_latitude": lat,
        "pickup_longitude": lng,
        "latitude": lat,
        "longitude": lng,
        "status": _status(row.get("status")),
        "donor_id": _as_int(row.get("donor_id")),
        "reserved_by": _as_int(row.get("reserved_by")),
        "created_at": _iso(row.get("created_at")) or stamp,
        "updated_at": _iso(row.get("updated_at")) or stamp,
        "donor_confirmed": bool(row.get("donor_confirmed")),
        "recipient_confirmed": bool(row.get("recipient_confirmed")),
        "business_confirmed": (
            None if business_confirmed is None else bool(business_confirmed)
        ),
    }
    for name in _OPTIONAL_TEXT:
        value = row.get(name)
        normalized[name] = str(value).strip() if value not in (None, "") else None
    for name in _TIMESTAMPS:
        normalized[name] = _iso(row.get(name))
    if row.get("donation_type"):
        normalized["donation_type"] = row["donation_type"]
    return normalized
