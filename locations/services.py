"""Location services: area resolution and shared General locations."""

import logging
import re
from typing import Iterable, List, Optional

from common.events import LOCATIONS_KEY, emit_event, invalidate_caches
from common.exceptions import InvalidDestination, LocationNotFound, LocationResolutionFailed
from django.conf import settings
from django.db import IntegrityError, transaction

from .models import GENERAL_LOCATION_NAME, Location

logger = logging.getLogger("stockroute.locations")

_NON_ALNUM = re.compile(r"[^A-Z0-9]+")


def normalize_area(area: Optional[str]) -> str:
    return (area or "").strip()


def general_code_for(area: str) -> str:
    """Derive the base code of an area's General location, e.g. ``MAIN-WAREHOUSE-GENERAL``."""

    slug = _NON_ALNUM.sub("-", normalize_area(area).upper()).strip("-")
    return f"{slug or 'AREA'}-GENERAL"


def _find_general(area: str) -> Optional[Location]:
    return Location.objects.filter(area=area, name=GENERAL_LOCATION_NAME).first()


def resolve_or_create_general(*, area: str) -> Location:
    """Return the area's General location, creating it on first use.

    Safe under concurrent first-time calls for the same area: the insert runs
    in a savepoint and an ``IntegrityError`` is absorbed. If the (area, name)
    row now exists it is returned; if the code belongs to another location the
    next numeric suffix is tried. Any other integrity error propagates.
    """

    label = normalize_area(area)
    if not label:
        raise InvalidDestination("Area is required")

    existing = _find_general(label)
    if existing is not None:
        return existing

    base_code = general_code_for(label)
    max_attempts = int(getattr(settings, "LOCATION_CODE_MAX_ATTEMPTS", 100))
    for attempt in range(max_attempts):
        code = base_code if attempt == 0 else f"{base_code}-{attempt}"
        try:
            with transaction.atomic():
                location = Location.objects.create(
                    area=label,
                    name=GENERAL_LOCATION_NAME,
                    code=code,
                    description=f"Default general location for area {label}",
                )
        except IntegrityError:
            existing = _find_general(label)
            if existing is not None:
                return existing
            if not Location.objects.filter(code=code).exists():
                raise
            logger.info(
                "location.code_collision",
                extra={"event": "location.code_collision", "area": label, "code": code, "attempt": attempt},
            )
            continue

        logger.info(
            "location.general_created",
            extra={"event": "location.general_created", "location_id": location.id, "area": label, "code": code},
        )
        invalidate_caches(LOCATIONS_KEY)
        emit_event("location-created", location_id=location.id, area=label)
        return location

    existing = _find_general(label)
    if existing is not None:
        return existing
    raise LocationResolutionFailed(f"Could not create a General location for area '{label}'", area=label)


def resolve_location(*, location_id: Optional[int] = None, area: Optional[str] = None) -> Location:
    """Resolve an explicit location id, or fall back to the area's General location."""

    if location_id:
        try:
            return Location.objects.get(id=location_id)
        except Location.DoesNotExist:
            raise LocationNotFound(location_id=location_id)
    if normalize_area(area):
        return resolve_or_create_general(area=area)
    raise InvalidDestination("Either a location or an area must be provided")


def ensure_general_locations(*, areas: Iterable[str]) -> List[Location]:
    """Make sure every listed area has its General location."""

    seen = set()
    resolved = []
    for area in areas:
        label = normalize_area(area)
        if not label or label in seen:
            continue
        seen.add(label)
        resolved.append(resolve_or_create_general(area=label))
    return resolved


# EOF
