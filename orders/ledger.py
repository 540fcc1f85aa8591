"""
Order Ledger: customer orders, each a snapshot of cart lines whose
fulfilment status is tracked per line.

Orders are never deleted. After placement only line statuses and the
order's own ``order_status`` change.
"""
import logging
from collections import OrderedDict

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from menu.models import MenuItem
from tableserve.exceptions import Conflict
from tables.events import publish_table_event
from tables.models import Table

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

BILLABLE_STATUSES = (
    OrderItem.STATUS_ACCEPTED,
    OrderItem.STATUS_PROCESSING,
    OrderItem.STATUS_COMPLETED,
)

# Forward path enforced only when STRICT_ITEM_TRANSITIONS is on
ITEM_TRANSITIONS = {
    OrderItem.STATUS_PENDING: {OrderItem.STATUS_ACCEPTED, OrderItem.STATUS_REJECTED},
    OrderItem.STATUS_ACCEPTED: {OrderItem.STATUS_PROCESSING, OrderItem.STATUS_REJECTED},
    OrderItem.STATUS_PROCESSING: {OrderItem.STATUS_COMPLETED},
    OrderItem.STATUS_COMPLETED: set(),
    OrderItem.STATUS_REJECTED: set(),
}


def place(admin_uid, session_id, table_number, items):
    """
    Record a customer order and bind the table to the order's session.

    Args:
        admin_uid: Restaurant the order belongs to
        session_id: Customer session placing the order
        table_number: Table the order is for
        items: Non-empty list of {"menu_item_id": UUID, "quantity": int}

    Returns:
        The created Order, every line pending

    Raises:
        ValidationError: empty cart, or items unknown/unavailable in this restaurant's menu
        NotFound: no such table
    """
    if not items:
        raise ValidationError({'items': ['Order must contain at least one item']})

    wanted_ids = {item['menu_item_id'] for item in items}
    menu = {
        menu_item.id: menu_item
        for menu_item in MenuItem.objects.filter(restaurant_id=admin_uid, id__in=wanted_ids, is_available=True)
    }
    unknown = sorted(str(item_id) for item_id in wanted_ids if item_id not in menu)
    if unknown:
        raise ValidationError({'items': [f"Menu item not available: {item_id}" for item_id in unknown]})

    with transaction.atomic():
        table = (
            Table.objects.select_for_update()
            .filter(restaurant_id=admin_uid, table_number=table_number)
            .first()
        )
        if table is None:
            raise NotFound('Table not found')

        order = Order.objects.create(
            restaurant_id=admin_uid,
            session_id=session_id,
            table_number=table_number,
            order_status=Order.STATUS_ACTIVE,
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                position=position,
                menu_item_id=menu[item['menu_item_id']].id,
                name=menu[item['menu_item_id']].name,
                price=menu[item['menu_item_id']].price,
                quantity=item['quantity'],
                status=OrderItem.STATUS_PENDING,
            )
            for position, item in enumerate(items)
        ])

        # Placing an order is enough to start or continue a session
        table.status = Table.STATUS_ACTIVE
        table.active_session_id = session_id
        table.save(update_fields=['status', 'active_session_id', 'updated_at'])

    logger.info("Order %s placed on table %s of %s (%d lines)", order.id, table_number, admin_uid, len(items))
    publish_table_event(admin_uid, 'order_placed', table_number=table_number, order_id=str(order.id))
    return order


def set_item_status(order, item_index, new_status):
    """
    Change the status of one order line, addressed by its index in the order.

    Any status may follow any other unless STRICT_ITEM_TRANSITIONS is enabled.
    The write is conditional on the line's version, so concurrent updates to
    other lines of the same order never overwrite each other.

    Raises:
        NotFound: index out of range
        ValidationError: transition refused in strict mode
        Conflict: the line changed between read and write
    """
    items = list(order.items.all())
    if item_index < 0 or item_index >= len(items):
        raise NotFound('Order item not found')

    item = items[item_index]
    if (
        settings.STRICT_ITEM_TRANSITIONS
        and new_status != item.status
        and new_status not in ITEM_TRANSITIONS[item.status]
    ):
        raise ValidationError({'status': [f"Cannot move an item from {item.status} to {new_status}"]})

    now = timezone.now()
    with transaction.atomic():
        updated = OrderItem.objects.filter(pk=item.pk, version=item.version).update(
            status=new_status,
            version=F('version') + 1,
            updated_at=now,
        )
        if not updated:
            raise Conflict('Order item was modified concurrently. Reload and try again.')
        Order.objects.filter(pk=order.pk).update(updated_at=now)

    publish_table_event(order.restaurant_id, 'item_status_changed', table_number=order.table_number,
                        order_id=str(order.id), item_index=item_index, status=new_status)
    return Order.objects.prefetch_related('items').get(pk=order.pk)


def set_order_status(order, new_status):
    order.order_status = new_status
    order.save(update_fields=['order_status', 'updated_at'])
    return order


def orders_for_restaurant(admin_uid):
    return Order.objects.filter(restaurant_id=admin_uid).prefetch_related('items')


def active_orders_for_restaurant(admin_uid):
    return orders_for_restaurant(admin_uid).filter(order_status=Order.STATUS_ACTIVE)


def orders_for_session(session_id, admin_uid=None):
    orders = Order.objects.filter(session_id=session_id).prefetch_related('items')
    if admin_uid is not None:
        orders = orders.filter(restaurant_id=admin_uid)
    return orders


def active_orders_for_table(admin_uid, table_number):
    return active_orders_for_restaurant(admin_uid).filter(table_number=table_number)


def billable_items(admin_uid, table_number, session_id=None):
    """
    Lines of a table's active orders that can be charged: accepted, processing
    or completed. The same menu item at the same price is merged across
    orders by summing quantities. Pass session_id to ignore active orders
    left on the table by an earlier visit.

    Returns:
        List of {"menu_item_id", "name", "price", "quantity"} in first-ordered order
    """
    merged = OrderedDict()
    lines = (
        OrderItem.objects
        .filter(
            order__restaurant_id=admin_uid,
            order__table_number=table_number,
            order__order_status=Order.STATUS_ACTIVE,
            status__in=BILLABLE_STATUSES,
        )
    )
    if session_id is not None:
        lines = lines.filter(order__session_id=session_id)
    lines = lines.order_by('order__created_at', 'position')

    for line in lines:
        key = (line.menu_item_id, line.price)
        if key in merged:
            merged[key]['quantity'] += line.quantity
        else:
            merged[key] = {
                'menu_item_id': line.menu_item_id,
                'name': line.name,
                'price': line.price,
                'quantity': line.quantity,
            }
    return list(merged.values())
