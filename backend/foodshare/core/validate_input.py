"""Input Validation — turns raw request payloads into validated core values.

Invariants:
    - All functions are PURE and raise ValidationError on the first problem found
    - Text fields are trimmed; category is lower-cased
    - Coordinates must be finite and non-zero; stored rounded to 6 decimals
    - Batch messages are prefixed with the 1-based item position
    - pickup_person_id length (after trimming) is within [6, 20]
    - Bounded text and quantity never exceed their column widths, so
      oversized input is a 400 and never reaches the store
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from foodshare.core.donation_record import NewDonation
from foodshare.core.errors import ValidationError


PICKUP_PERSON_ID_MIN = 6
PICKUP_PERSON_ID_MAX = 20
COORDINATE_DECIMALS = 6

# Widths of the matching `donations` columns
MAX_LENGTHS = {
    "title": 200,
    "category": 50,
    "contact_info": 200,
    "expiry_date": 32,
    "pickup_time": 64,
    "pickup_person_name": 120,
}
QUANTITY_MAX = 2_147_483_647


@dataclass(frozen=True)
class PickupLogistics:
    pickup_time: str
    pickup_person_name: str
    pickup_person_id: str


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _prefixed(message: str, position: int | None) -> str:
    if position is None:
        return message
    return f"Donation {position}: {message}"


def _within_length(
    value: str | None, field: str, position: int | None = None,
) -> str | None:
    limit = MAX_LENGTHS[field]
    if value is not None and len(value) > limit:
        raise ValidationError(
            _prefixed(f"{field} must be at most {limit} characters", position),
            field,
        )
    return value


def _parse_quantity(value: Any, position: int | None) -> int:
    try:
        as_float = float(str(value).strip())
    except ValueError:
        as_float = math.nan
    if not math.isfinite(as_float) or as_float != int(as_float) or as_float <= 0:
        raise ValidationError(
            _prefixed("quantity must be a positive integer", position),
            "quantity",
        )
    if as_float > QUANTITY_MAX:
        raise ValidationError(
            _prefixed(f"quantity must be at most {QUANTITY_MAX}", position),
            "quantity",
        )
    return int(as_float)


def _parse_optional_float(value: Any, field: str, position: int | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        parsed = float(str(value).strip())
    except ValueError:
        parsed = math.nan
    if not math.isfinite(parsed):
        raise ValidationError(
            _prefixed(f"{field} must be a valid number", position), field,
        )
    return parsed


def _parse_coordinates(
    payload: Mapping[str, Any], position: int | None,
) -> tuple[float, float]:
    raw_lat = payload.get("pickup_latitude")
    if raw_lat in (None, ""):
        raw_lat = payload.get("latitude")
    raw_lng = payload.get("pickup_longitude")
    if raw_lng in (None, ""):
        raw_lng = payload.get("longitude")
    if raw_lat in (None, "") or raw_lng in (None, ""):
        raise ValidationError(
            _prefixed("Pickup coordinates are required", position), "latitude",
        )
    try:
        lat = float(str(raw_lat).strip())
        lng = float(str(raw_lng).strip())
    except ValueError:
        lat = lng = math.nan
    if not (math.isfinite(lat) and math.isfinite(lng)) or lat == 0 or lng == 0:
        raise ValidationError(
            _prefixed("Coordinates must be valid non-zero numbers", position),
            "latitude",
        )
    return round(lat, COORDINATE_DECIMALS), round(lng, COORDINATE_DECIMALS)


def validate_new_donation(
    payload: Mapping[str, Any], position: int | None = None,
) -> NewDonation:
    """Validate one creation payload. `position` is set for batch items."""
    title = _text(payload.get("title"))
    description = _text(payload.get("description"))
    category = _text(payload.get("category"))
    quantity = payload.get("quantity")
    if not title or not category or quantity in (None, ""):
        raise ValidationError(
            _prefixed(
                "title, category and quantity are required",
                position,
            ),
        )

    lat, lng = _parse_coordinates(payload, position)
    address = _text(payload.get("pickup_address")) or (
        f"Lat: {lat:.6f}, Lng: {lng:.6f}"
    )

    return NewDonation(
        title=_within_length(title, "title", position),
        description=description or "",
        category=_within_length(category.lower(), "category", position),
        quantity=_parse_quantity(quantity, position),
        pickup_address=address,
        pickup_latitude=lat,
        pickup_longitude=lng,
        weight=_parse_optional_float(payload.get("weight"), "weight", position),
        donation_reason=_text(payload.get("donation_reason")),
        contact_info=_within_length(
            _text(payload.get("contact_info")), "contact_info", position,
        ),
        expiry_date=_within_length(
            _text(payload.get("expiry_date")), "expiry_date", position,
        ),
    )


def validate_batch(
    payloads: Sequence[Mapping[str, Any]], max_items: int,
) -> list[NewDonation]:
    """All-or-nothing: the first invalid item (or bad size) rejects the whole batch."""
    if not payloads:
        raise ValidationError("Provide a non-empty list of donations", "donations")
    if len(payloads) > max_items:
        raise ValidationError(
            f"Cannot create more than {max_items} donations at once",
            "donations",
        )
    return [
        validate_new_donation(payload, position=index)
        for index, payload in enumerate(payloads, start=1)
    ]


def validate_pickup_logistics(
    pickup_time: Any, pickup_person_name: Any, pickup_person_id: Any,
) -> PickupLogistics:
    time_text = _text(pickup_time)
    name = _text(pickup_person_name)
    person_id = _text(pickup_person_id)
    if not time_text or not name or not person_id:
        raise ValidationError(
            "pickup_time, pickup_person_name and pickup_person_id are required",
        )
    if not PICKUP_PERSON_ID_MIN <= len(person_id) <= PICKUP_PERSON_ID_MAX:
        raise ValidationError(
            f"pickup_person_id must be between {PICKUP_PERSON_ID_MIN} "
            f"and {PICKUP_PERSON_ID_MAX} characters",
            "pickup_person_id",
        )
    return PickupLogistics(
        _within_length(time_text, "pickup_time"),
        _within_length(name, "pickup_person_name"),
        person_id,
    )
