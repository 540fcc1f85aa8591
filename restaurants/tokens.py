import logging
import uuid
from datetime import datetime, timedelta, timezone as dt_timezone

import jwt
from django.conf import settings
from django.utils import timezone

from .models import AuthToken

logger = logging.getLogger(__name__)


def _encode(claims):
    now = datetime.now(dt_timezone.utc)
    payload = {
        **claims,
        'iat': now,
        'jti': uuid.uuid4().hex,
        'exp': now + timedelta(hours=settings.TOKEN_EXPIRY_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def issue_restaurant_token(restaurant):
    """Sign a bearer token carrying the restaurant's admin_uid."""
    return _encode({'admin_uid': restaurant.admin_uid})


def issue_super_admin_token(super_admin):
    """Sign a bearer token for the separately scoped super admin role."""
    return _encode({'super_admin_uid': super_admin.super_admin_uid, 'is_super_admin': True})


def decode_token(token):
    """
    Verify signature and expiry of a bearer token.

    Raises:
        jwt.InvalidTokenError: if the token is malformed, tampered with or expired
    """
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def revoke_token(token, payload):
    """
    Add a token to the revocation list until its own expiry.

    Args:
        token: Raw bearer token
        payload: Its decoded claims

    Returns:
        True if the token was newly revoked, False if it already was
    """
    expires_at = datetime.fromtimestamp(payload['exp'], tz=dt_timezone.utc)
    _, created = AuthToken.objects.get_or_create(
        token=token,
        defaults={'admin_uid': AuthToken.BLACKLIST_OWNER, 'expires_at': expires_at},
    )
    return created


def is_revoked(token):
    return AuthToken.objects.filter(token=token, admin_uid=AuthToken.BLACKLIST_OWNER).exists()


def sweep_expired_tokens():
    """Delete every auth token row past its expiry. Returns the number removed."""
    deleted, _ = AuthToken.objects.filter(expires_at__lt=timezone.now()).delete()
    if deleted:
        logger.info("Swept %d expired auth tokens", deleted)
    return deleted
