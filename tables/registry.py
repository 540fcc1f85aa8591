"""
Table Registry: owns each restaurant's set of physical tables, their
occupancy state and their 4-digit access codes.

Every operation leaves the table satisfying
``status == vacant  <=>  active_session_id is None``.
"""
import logging
import secrets

from django.db import transaction
from django.utils import timezone

from orders.models import Order

from .events import publish_table_event
from .models import Table

logger = logging.getLogger(__name__)

CODE_LENGTH = 4


def generate_code(exclude=None):
    """
    Uniform random 4-digit code, "0000" to "9999".

    Args:
        exclude: A code the new one must differ from (the table's current code)
    """
    while True:
        code = f"{secrets.randbelow(10 ** CODE_LENGTH):0{CODE_LENGTH}d}"
        if code != exclude:
            return code


def initialize(restaurant, count):
    """
    Create vacant tables 1..count that do not exist yet. Existing tables are
    never touched.

    Returns:
        List of newly created tables
    """
    existing = set(
        Table.objects.filter(restaurant=restaurant).values_list('table_number', flat=True)
    )
    missing = [number for number in range(1, count + 1) if number not in existing]
    if not missing:
        return []

    created = Table.objects.bulk_create([
        Table(restaurant=restaurant, table_number=number, status=Table.STATUS_VACANT, otp=generate_code())
        for number in missing
    ], ignore_conflicts=True)
    logger.info("Created %d tables for %s", len(missing), restaurant.admin_uid)
    return created


def sync(restaurant, new_count):
    """
    Grow or shrink a restaurant's tables to exactly 1..new_count.

    The caller must first make sure no table is occupied; tables above
    new_count are deleted regardless of their state.

    Returns:
        (created tables, number of deleted tables)
    """
    with transaction.atomic():
        created = initialize(restaurant, new_count)
        deleted, _ = Table.objects.filter(restaurant=restaurant, table_number__gt=new_count).delete()

    if deleted:
        logger.info("Removed %d tables above %d for %s", deleted, new_count, restaurant.admin_uid)
    return created, deleted


def has_non_vacant_tables(restaurant):
    return Table.objects.filter(restaurant=restaurant).exclude(status=Table.STATUS_VACANT).exists()


def reset(table):
    """Free a table: vacant, no session, fresh access code."""
    table.status = Table.STATUS_VACANT
    table.active_session_id = None
    table.otp = generate_code(exclude=table.otp)
    table.save(update_fields=['status', 'active_session_id', 'otp', 'updated_at'])

    logger.info("Reset table %s of %s", table.table_number, table.restaurant_id)
    publish_table_event(table.restaurant_id, 'table_reset', table_number=table.table_number)
    return table


def cancel(table):
    """
    Cancel every active order on the table without billing it, then reset.

    Returns:
        (table, number of orders cancelled)
    """
    with transaction.atomic():
        table = Table.objects.select_for_update().get(pk=table.pk)
        cancelled = Order.objects.filter(
            restaurant_id=table.restaurant_id,
            table_number=table.table_number,
            order_status=Order.STATUS_ACTIVE,
        ).update(order_status=Order.STATUS_CANCELLED, updated_at=timezone.now())
        reset(table)

    logger.info("Cancelled table %s of %s (%d orders)", table.table_number, table.restaurant_id, cancelled)
    publish_table_event(table.restaurant_id, 'table_cancelled',
                        table_number=table.table_number, cancelled_orders=cancelled)
    return table, cancelled


def regenerate_code(table):
    """Issue a new access code without touching occupancy. Callers only allow this while vacant."""
    table.otp = generate_code(exclude=table.otp)
    table.save(update_fields=['otp', 'updated_at'])
    return table
