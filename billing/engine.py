"""
Billing Engine: turns a session's billable order lines into a draft bill and
finalizes it.

Finalizing closes the visit in one transaction: the bill becomes final, a
SalesHistory row is written, the session's orders are completed and the
table is reset with a new access code.
"""
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from orders import ledger
from orders.models import Order
from tables import registry
from tables.events import publish_table_event
from tables.models import Table
from tableserve.exceptions import Conflict

from .models import Bill, BillSequence, SalesHistory

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
HUNDRED = Decimal('100')


def money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class BillTotals:
    subtotal: Decimal
    discount_amount: Decimal
    after_discount: Decimal
    service_charge_amount: Decimal
    total_amount: Decimal


def compute_totals(items, discount_percentage=0, service_charge_percentage=0):
    """
    Args:
        items: Iterable of dicts with "price" (str or Decimal) and "quantity"
        discount_percentage: Applied to the subtotal
        service_charge_percentage: Applied to the amount after discount
    """
    subtotal = money(sum((Decimal(str(item['price'])) * item['quantity'] for item in items), Decimal('0')))
    discount_amount = money(subtotal * Decimal(str(discount_percentage)) / HUNDRED)
    after_discount = subtotal - discount_amount
    service_charge_amount = money(after_discount * Decimal(str(service_charge_percentage)) / HUNDRED)
    return BillTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        after_discount=after_discount,
        service_charge_amount=service_charge_amount,
        total_amount=after_discount + service_charge_amount,
    )


def next_bill_number(admin_uid, today=None):
    """
    Mint the restaurant's next bill number, ``BILL-YYYYMMDD-NNNN``.

    NNNN counts every bill the restaurant has issued; it does not restart
    each day. Must run inside a transaction.
    """
    sequence, _ = BillSequence.objects.select_for_update().get_or_create(restaurant_id=admin_uid)
    sequence.last += 1
    sequence.save(update_fields=['last'])

    today = today or timezone.localdate()
    return f"BILL-{today:%Y%m%d}-{sequence.last:04d}"


def _snapshot(items):
    return [
        {
            'menu_item_id': str(item['menu_item_id']) if item.get('menu_item_id') else None,
            'name': item['name'],
            'price': str(money(item['price'])),
            'quantity': item['quantity'],
        }
        for item in items
    ]


def generate(admin_uid, session_id, table_number, items=None, discount_percentage=0,
             service_charge_percentage=0, payment_mode=Bill.PAYMENT_CASH):
    """
    Compute and store the draft bill for a table's current session, and move
    the table to billing.

    When items is None the billable lines of the session's active orders are
    used. Billing the same session again recomputes its draft in place and
    keeps the bill number.

    Raises:
        NotFound: no such table
        ValidationError: the session is not the one seated at the table
        Conflict: the session already has a final bill
    """
    with transaction.atomic():
        table = (
            Table.objects.select_for_update()
            .filter(restaurant_id=admin_uid, table_number=table_number)
            .first()
        )
        if table is None:
            raise NotFound('Table not found')
        if table.active_session_id != session_id:
            raise ValidationError({'session_id': ['Session is not active on this table']})

        session_bills = Bill.objects.select_for_update().filter(restaurant_id=admin_uid, session_id=session_id)
        if session_bills.filter(is_final=True).exists():
            raise Conflict('This session has already been billed')

        if items is None:
            items = ledger.billable_items(admin_uid, table_number, session_id=session_id)
        totals = compute_totals(items, discount_percentage, service_charge_percentage)

        bill = session_bills.first()
        if bill is None:
            bill = Bill(
                restaurant_id=admin_uid,
                session_id=session_id,
                bill_number=next_bill_number(admin_uid),
            )
        bill.table_number = table_number
        bill.items = _snapshot(items)
        bill.subtotal = totals.subtotal
        bill.discount_percentage = discount_percentage
        bill.discount_amount = totals.discount_amount
        bill.service_charge_percentage = service_charge_percentage
        bill.service_charge_amount = totals.service_charge_amount
        bill.total_amount = totals.total_amount
        bill.payment_mode = payment_mode
        bill.save()

        table.status = Table.STATUS_BILLING
        table.save(update_fields=['status', 'updated_at'])

    logger.info("Generated %s for table %s of %s: %s", bill.bill_number, table_number, admin_uid, bill.total_amount)
    publish_table_event(admin_uid, 'bill_generated', table_number=table_number,
                        bill_id=str(bill.id), bill_number=bill.bill_number, total_amount=str(bill.total_amount))
    return bill


def finalize(bill, payment_mode=None):
    """
    Close a draft bill.

    Cancelled orders stay cancelled and the table is reset only while it
    still seats the bill's session.

    Raises:
        Conflict: the bill is already final, or its table has moved on to
            another session
    """
    with transaction.atomic():
        bill = Bill.objects.select_for_update().get(pk=bill.pk)
        if bill.is_final:
            raise Conflict('Bill is already finalized')

        table = (
            Table.objects.select_for_update()
            .filter(restaurant_id=bill.restaurant_id, table_number=bill.table_number)
            .first()
        )
        if table is None or table.active_session_id != bill.session_id:
            raise Conflict("Table no longer holds this bill's session")

        bill.is_final = True
        bill.finalized_at = timezone.now()
        if payment_mode:
            bill.payment_mode = payment_mode
        bill.save(update_fields=['is_final', 'finalized_at', 'payment_mode'])

        SalesHistory.objects.create(
            restaurant_id=bill.restaurant_id,
            bill=bill,
            table_number=bill.table_number,
            total_amount=bill.total_amount,
            items_sold=bill.items,
            payment_mode=bill.payment_mode,
        )

        completed = Order.objects.filter(
            restaurant_id=bill.restaurant_id,
            session_id=bill.session_id,
        ).exclude(
            order_status=Order.STATUS_CANCELLED,
        ).update(
            order_status=Order.STATUS_COMPLETED,
            updated_at=timezone.now(),
        )

        registry.reset(table)

    logger.info("Finalized %s for %s (%d orders completed)", bill.bill_number, bill.restaurant_id, completed)
    publish_table_event(bill.restaurant_id, 'bill_finalized', table_number=bill.table_number,
                        bill_id=str(bill.id), bill_number=bill.bill_number)
    return bill
