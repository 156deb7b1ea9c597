"""Caller identity for audit columns (moved_by, created_by, ...) and throttled JWT views."""

from typing import Optional

from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


def actor_of(user) -> Optional[str]:
    """Return the user's email, falling back to username, or None for anonymous callers."""

    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "email", None) or getattr(user, "username", None) or None


class TokenObtainView(TokenObtainPairView):
    throttle_scope = "token_obtain"


class TokenRefreshScopedView(TokenRefreshView):
    throttle_scope = "token_refresh"


# EOF
