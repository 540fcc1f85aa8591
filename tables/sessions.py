"""
Session Binder: ties a continuous customer visit to a physical table.

A session is not stored on its own. It is the ``active_session_id`` held by
the table plus the matching ``session_id`` on that visit's orders and bill.
"""
import logging
import random
import string
import time
from dataclasses import dataclass

from django.db import transaction
from rest_framework.exceptions import AuthenticationFailed, NotFound

from .events import publish_table_event
from .models import Table

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class JoinResult:
    session_id: str
    is_existing_session: bool
    table_number: int


def new_session_id():
    """Millisecond timestamp plus a random suffix, e.g. ``session-1760832000000-k3x9q2m1a``."""
    suffix = ''.join(random.choices(_SUFFIX_ALPHABET, k=9))
    return f"session-{int(time.time() * 1000)}-{suffix}"


def join(admin_uid, table_number, code):
    """
    Bind a customer to a table after checking its access code.

    Rejoining an active table returns its current session unchanged, so a
    page reload does not start a new visit.

    Raises:
        NotFound: no such table for this restaurant
        AuthenticationFailed: the code does not match the table's current code
    """
    with transaction.atomic():
        table = (
            Table.objects.select_for_update()
            .filter(restaurant_id=admin_uid, table_number=table_number)
            .first()
        )
        if table is None:
            raise NotFound('Table not found')

        if table.otp != code:
            raise AuthenticationFailed('Invalid code. Please get the correct code from restaurant staff.')

        if table.status == Table.STATUS_ACTIVE and table.active_session_id:
            return JoinResult(table.active_session_id, True, table.table_number)

        table.status = Table.STATUS_ACTIVE
        table.active_session_id = new_session_id()
        table.save(update_fields=['status', 'active_session_id', 'updated_at'])

    logger.info("Started session %s on table %s of %s", table.active_session_id, table_number, admin_uid)
    publish_table_event(admin_uid, 'session_started',
                        table_number=table.table_number, session_id=table.active_session_id)
    return JoinResult(table.active_session_id, False, table.table_number)


def validate(admin_uid, table_number, session_id):
    """
    Check whether a customer's session still owns the table.

    Returns:
        Dict with ``valid`` and either ``table_status`` (valid) or ``reason``
        ("table_not_found" or "session_ended")
    """
    table = Table.objects.filter(restaurant_id=admin_uid, table_number=table_number).first()
    if table is None:
        return {'valid': False, 'reason': 'table_not_found'}

    if table.is_vacant or table.active_session_id != session_id:
        return {'valid': False, 'reason': 'session_ended'}

    return {'valid': True, 'table_status': table.status}
