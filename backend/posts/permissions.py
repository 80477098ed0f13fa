import enum
import logging
from collections import namedtuple

from rest_framework import permissions
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

logger = logging.getLogger(__name__)


class DenialReason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    NOT_OWNER = "not_owner"


WriteDecision = namedtuple("WriteDecision", ["allowed", "reason"])

ALLOWED = WriteDecision(True, None)


class NotPostOwner(PermissionDenied):
    default_detail = "Not authorized to modify this post."
    default_code = DenialReason.NOT_OWNER.value


def authorize_write(post, caller_id):
    """
    Decide whether ``caller_id`` may update, publish/unpublish or delete
    ``post``. Only the post's author may; anonymous callers never may.

    Run this on every write request against the freshly loaded post.
    """
    if caller_id is None:
        return WriteDecision(False, DenialReason.UNAUTHENTICATED)
    if caller_id != post.author_id:
        return WriteDecision(False, DenialReason.NOT_OWNER)
    return ALLOWED


def enforce_write(post, caller_id):
    """Raises the DRF exception for a denied write, otherwise does nothing."""
    decision = authorize_write(post, caller_id)
    if decision.allowed:
        return

    logger.warning(
        "Write to post %s denied for caller %s: %s",
        post.pk,
        caller_id,
        decision.reason.value,
    )
    if decision.reason is DenialReason.UNAUTHENTICATED:
        raise NotAuthenticated()
    raise NotPostOwner()


# * Every registered account is a blog admin, so "admin" here means "authenticated".
class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Read access (GET, HEAD, OPTIONS) for any caller, including anonymous.
    Write access (POST, PUT, PATCH, DELETE) only for authenticated admins.
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True

        return bool(request.user and request.user.is_authenticated)

