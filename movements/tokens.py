"""Public confirmation tokens for deferred movements.

Tokens are opaque 32-character random strings with no embedded structure;
validity is governed only by the row's ``token_expires_at`` and status.
"""

from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone
from django.utils.crypto import get_random_string

TOKEN_LENGTH = 32


def generate_public_token() -> str:
    return get_random_string(TOKEN_LENGTH)


def movement_token_expiry(now: Optional[datetime] = None) -> datetime:
    """Expiry for single-movement links (7 days by default)."""

    days = int(getattr(settings, "MOVEMENT_TOKEN_TTL_DAYS", 7))
    return (now or timezone.now()) + timedelta(days=days)


def bulk_token_expiry(now: Optional[datetime] = None) -> datetime:
    """Expiry for bulk-movement links (24 hours by default)."""

    hours = int(getattr(settings, "BULK_MOVEMENT_TOKEN_TTL_HOURS", 24))
    return (now or timezone.now()) + timedelta(hours=hours)
