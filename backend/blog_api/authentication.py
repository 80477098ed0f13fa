import logging

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = logging.getLogger(__name__)


class OptionalJWTAuthentication(JWTAuthentication):
    """
    Bearer token authentication where a bad token counts as no token.

    Missing, malformed, expired and revoked tokens, as well as tokens for
    deleted or inactive admins, all leave the request anonymous. Public reads
    keep working, and views that need an identity answer 401 through their
    permission classes.
    """

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except AuthenticationFailed as exc:
            # Never log the token itself.
            logger.debug("Discarding bearer credential: %s", exc.detail)
            return None


def caller_identity(request):
    """Returns the authenticated admin's id for this request, or None."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return user.pk
