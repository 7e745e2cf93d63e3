"""Identity supplied by the upstream identity provider.

The gateway in front of this service authenticates the session and forwards
the stable user id in ``X-User-Id`` (and ``X-User-Role: admin`` for platform
administrators). This module only turns those headers into an Actor.
"""

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication

from ticketing.domain import Actor, UserId


class GatewayUser:
    """Minimal user object DRF can hang permissions on."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, actor: Actor) -> None:
        self.actor = actor

    @property
    def pk(self):
        return self.actor.user_id.value

    def __str__(self) -> str:
        return str(self.actor.user_id)


class GatewayIdentityAuthentication(BaseAuthentication):
    user_header = "HTTP_X_USER_ID"
    role_header = "HTTP_X_USER_ROLE"

    def authenticate(self, request):
        raw = request.META.get(self.user_header)
        if not raw:
            return None
        try:
            user_id = UserId.from_string(raw)
        except ValueError:
            raise exceptions.AuthenticationFailed("Invalid user identity") from None
        is_admin = request.META.get(self.role_header, "").strip().lower() == "admin"
        return GatewayUser(Actor(user_id=user_id, is_admin=is_admin)), None

    def authenticate_header(self, request) -> str:
        return "X-User-Id"
