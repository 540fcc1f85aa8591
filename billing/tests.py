import datetime
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from menu.models import MenuItem
from orders import ledger
from orders.models import Order
from restaurants import tokens
from restaurants.tests import make_restaurant
from tables import registry, sessions
from tables.events import TableEventChannel
from tables.models import Table
from tableserve.exceptions import Conflict
from . import engine, reports
from .models import Bill, BillSequence, SalesHistory


class BillCalculationTests(TestCase):
    """Test discount, service charge and total arithmetic"""

    def test_discount_then_service_charge(self):
        """Test service charge applies to the amount after discount"""
        items = [
            {'price': '100.00', 'quantity': 2},
            {'price': '50.00', 'quantity': 1},
        ]
        totals = engine.compute_totals(items, discount_percentage=10, service_charge_percentage=5)

        self.assertEqual(totals.subtotal, Decimal('250.00'))
        self.assertEqual(totals.discount_amount, Decimal('25.00'))
        self.assertEqual(totals.after_discount, Decimal('225.00'))
        self.assertEqual(totals.service_charge_amount, Decimal('11.25'))
        self.assertEqual(totals.total_amount, Decimal('236.25'))

    def test_empty_items(self):
        """Test the engine itself accepts an empty bill"""
        totals = engine.compute_totals([], discount_percentage=10, service_charge_percentage=5)

        self.assertEqual(totals.subtotal, Decimal('0.00'))
        self.assertEqual(totals.total_amount, Decimal('0.00'))

    def test_rounding_to_cents(self):
        """Test amounts round half up to 2 decimal places"""
        totals = engine.compute_totals([{'price': Decimal('33.33'), 'quantity': 1}],
                                       discount_percentage=Decimal('12.5'), service_charge_percentage=5)

        # 33.33 * 12.5% = 4.16625 -> 4.17; (33.33 - 4.17) * 5% = 1.458 -> 1.46
        self.assertEqual(totals.discount_amount, Decimal('4.17'))
        self.assertEqual(totals.after_discount, Decimal('29.16'))
        self.assertEqual(totals.service_charge_amount, Decimal('1.46'))
        self.assertEqual(totals.total_amount, Decimal('30.62'))


class BillLifecycleTests(TestCase):
    """Test bill numbering, generation and finalization"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=4)
        self.item = MenuItem.objects.create(restaurant=self.restaurant, name="Paneer Tikka",
                                            price=Decimal('120.00'), category='veg')
        table = Table.objects.get(restaurant=self.restaurant, table_number=1)
        self.session_id = sessions.join('demo', 1, table.otp).session_id
        self.order = ledger.place('demo', self.session_id, 1, [{'menu_item_id': self.item.id, 'quantity': 2}])
        ledger.set_item_status(self.order, 0, 'completed')

    def generate(self, **kwargs):
        return engine.generate('demo', self.session_id, 1, **kwargs)

    def test_bill_number_sequence(self):
        """Test numbers count every bill of the restaurant, not per day"""
        first = engine.next_bill_number('demo', today=datetime.date(2025, 3, 9))
        second = engine.next_bill_number('demo', today=datetime.date(2025, 3, 10))
        other = engine.next_bill_number(make_restaurant('bistro').admin_uid, today=datetime.date(2025, 3, 10))

        self.assertEqual(first, 'BILL-20250309-0001')
        self.assertEqual(second, 'BILL-20250310-0002')
        self.assertEqual(other, 'BILL-20250310-0001')
        self.assertEqual(BillSequence.objects.get(restaurant=self.restaurant).last, 2)

    def test_generate_from_orders(self):
        """Test a draft bill is built from billable lines and the table moves to billing"""
        bill = self.generate(service_charge_percentage=10)

        self.assertFalse(bill.is_final)
        self.assertRegex(bill.bill_number, r'^BILL-\d{8}-0001$')
        self.assertEqual(bill.items, [{
            'menu_item_id': str(self.item.id),
            'name': 'Paneer Tikka',
            'price': '120.00',
            'quantity': 2,
        }])
        self.assertEqual(bill.total_amount, Decimal('264.00'))

        table = Table.objects.get(restaurant=self.restaurant, table_number=1)
        self.assertEqual(table.status, Table.STATUS_BILLING)
        self.assertEqual(table.active_session_id, self.session_id)

    def test_regenerate_updates_draft(self):
        """Test billing a session again recomputes its draft and keeps the number"""
        first = self.generate()
        second = self.generate(discount_percentage=50)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.bill_number, first.bill_number)
        self.assertEqual(second.total_amount, Decimal('120.00'))
        self.assertEqual(Bill.objects.count(), 1)

    def test_generate_requires_seated_session(self):
        with self.assertRaises(ValidationError):
            engine.generate('demo', 'session-someone-else', 1)

    def test_finalize_cascade(self):
        """Test finalize archives the sale, completes orders and frees the table"""
        bill = self.generate(service_charge_percentage=10)
        old_code = Table.objects.get(restaurant=self.restaurant, table_number=1).otp

        bill = engine.finalize(bill, payment_mode=Bill.PAYMENT_UPI)

        self.assertTrue(bill.is_final)
        self.assertIsNotNone(bill.finalized_at)
        self.assertEqual(bill.payment_mode, 'upi')

        sale = SalesHistory.objects.get(bill=bill)
        self.assertEqual(sale.total_amount, Decimal('264.00'))
        self.assertEqual(sale.items_sold, bill.items)

        self.order.refresh_from_db()
        self.assertEqual(self.order.order_status, Order.STATUS_COMPLETED)

        table = Table.objects.get(restaurant=self.restaurant, table_number=1)
        self.assertEqual(table.status, Table.STATUS_VACANT)
        self.assertIsNone(table.active_session_id)
        self.assertNotEqual(table.otp, old_code)

    def test_finalize_twice(self):
        """Test a second finalize is refused and writes no second sale"""
        bill = self.generate()
        engine.finalize(bill)

        with self.assertRaises(Conflict):
            engine.finalize(bill)
        self.assertEqual(SalesHistory.objects.filter(bill=bill).count(), 1)

    def test_final_session_cannot_be_billed_again(self):
        bill = self.generate()
        engine.finalize(bill)
        # Table was reset; seat the same session id again to reach the final-bill check
        Table.objects.filter(restaurant=self.restaurant, table_number=1).update(
            status=Table.STATUS_ACTIVE, active_session_id=self.session_id
        )

        with self.assertRaises(Conflict):
            self.generate()

    def test_finalize_after_cancel_and_new_guest(self):
        """Test a draft left behind by a cancelled table cannot close the next guest's visit"""
        bill = self.generate()
        registry.cancel(Table.objects.get(restaurant=self.restaurant, table_number=1))
        table = Table.objects.get(restaurant=self.restaurant, table_number=1)
        next_session = sessions.join('demo', 1, table.otp).session_id

        with self.assertRaises(Conflict):
            engine.finalize(bill)

        bill.refresh_from_db()
        self.assertFalse(bill.is_final)
        self.assertFalse(SalesHistory.objects.exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.order_status, Order.STATUS_CANCELLED)
        table.refresh_from_db()
        self.assertEqual(table.status, Table.STATUS_ACTIVE)
        self.assertEqual(table.active_session_id, next_session)

    def test_finalize_keeps_cancelled_orders(self):
        """Test finalize completes the session's orders but leaves cancelled ones alone"""
        dropped = ledger.place('demo', self.session_id, 1, [{'menu_item_id': self.item.id, 'quantity': 1}])
        ledger.set_order_status(dropped, Order.STATUS_CANCELLED)

        engine.finalize(self.generate())

        dropped.refresh_from_db()
        self.assertEqual(dropped.order_status, Order.STATUS_CANCELLED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.order_status, Order.STATUS_COMPLETED)

    def test_finalize_rolls_back_on_failure(self):
        """Test a failure late in finalize leaves the bill draft and the table occupied"""
        bill = self.generate()

        with mock.patch('billing.engine.registry.reset', side_effect=RuntimeError('boom')):
            with self.assertRaises(RuntimeError):
                engine.finalize(bill)

        bill.refresh_from_db()
        self.assertFalse(bill.is_final)
        self.assertFalse(SalesHistory.objects.exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.order_status, Order.STATUS_ACTIVE)
        self.assertEqual(Table.objects.get(restaurant=self.restaurant, table_number=1).status,
                         Table.STATUS_BILLING)

    @override_settings(TABLE_EVENTS_ENABLED=True)
    def test_finalize_publishes_events(self):
        bill = self.generate()

        with mock.patch.object(TableEventChannel, '__init__', return_value=None), \
                mock.patch.object(TableEventChannel, 'publish') as publish:
            with self.captureOnCommitCallbacks(execute=True):
                engine.finalize(bill)

        events = [call.args[1] for call in publish.call_args_list]
        self.assertEqual(events, ['table_reset', 'bill_finalized'])


class ReportTests(TestCase):
    """Test sales reports"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=2)

    def record_sale(self, total, items, when):
        bill = Bill.objects.create(
            restaurant=self.restaurant,
            bill_number=engine.next_bill_number('demo'),
            session_id=f'session-{total}',
            table_number=1,
            items=items,
            subtotal=Decimal(total),
            total_amount=Decimal(total),
            is_final=True,
        )
        sale = SalesHistory.objects.create(restaurant=self.restaurant, bill=bill, table_number=1,
                                           total_amount=Decimal(total), items_sold=items,
                                           payment_mode=Bill.PAYMENT_CASH)
        SalesHistory.objects.filter(pk=sale.pk).update(created_at=when)

    def test_today_and_daily_sales(self):
        now = timezone.now()
        tea = [{'name': 'Masala Chai', 'price': '40.00', 'quantity': 2}]
        self.record_sale('80.00', tea, now)
        self.record_sale('120.00', [{'name': 'Masala Chai', 'price': '40.00', 'quantity': 3}], now)
        self.record_sale('500.00', tea, now - datetime.timedelta(days=2))
        self.record_sale('999.00', tea, now - datetime.timedelta(days=60))

        today = reports.today_sales('demo')
        self.assertEqual(today['total_sales'], Decimal('200.00'))
        self.assertEqual(today['order_count'], 2)

        days = reports.sales_by_day('demo')
        self.assertEqual(len(days), 2)
        self.assertEqual(days[-1]['total_sales'], Decimal('200.00'))
        self.assertEqual(days[-1]['items_sold'], {'Masala Chai': 5})

    def test_no_sales(self):
        self.assertEqual(reports.today_sales('demo')['total_sales'], Decimal('0.00'))
        self.assertEqual(reports.sales_by_day('demo'), [])


class BillingAPITests(APITestCase):
    """Test bill endpoints"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=4)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_restaurant_token(self.restaurant)}')
        self.item = MenuItem.objects.create(restaurant=self.restaurant, name="Craft Lager",
                                            price=Decimal('250.00'), category='liquor')
        table = Table.objects.get(restaurant=self.restaurant, table_number=2)
        self.session_id = sessions.join('demo', 2, table.otp).session_id
        self.order = ledger.place('demo', self.session_id, 2, [{'menu_item_id': self.item.id, 'quantity': 1}])

    def test_generate_without_billable_items(self):
        """Test a bill with nothing accepted yet is refused"""
        data = {'session_id': self.session_id, 'table_number': 2}
        response = self.client.post(reverse('generate_bill'), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Bill.objects.exists())

    def test_generate_with_explicit_items(self):
        data = {
            'session_id': self.session_id,
            'table_number': 2,
            'items': [
                {'name': 'Item A', 'price': '100.00', 'quantity': 2},
                {'name': 'Item B', 'price': '50.00', 'quantity': 1},
            ],
            'discount_percentage': '10',
            'service_charge_percentage': '5',
            'payment_mode': 'card',
        }
        response = self.client.post(reverse('generate_bill'), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['subtotal'], '250.00')
        self.assertEqual(response.data['discount_amount'], '25.00')
        self.assertEqual(response.data['service_charge_amount'], '11.25')
        self.assertEqual(response.data['total_amount'], '236.25')
        self.assertEqual(response.data['payment_mode'], 'card')

    def test_finalize_twice_over_http(self):
        ledger.set_item_status(self.order, 0, 'accepted')
        data = {'session_id': self.session_id, 'table_number': 2}
        bill_id = self.client.post(reverse('generate_bill'), data, format='json').data['id']
        url = reverse('finalize_bill', kwargs={'bill_id': bill_id})

        response = self.client.post(url, {'payment_mode': 'cash'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_final'])

        response = self.client.post(url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Bill is already finalized')
        self.assertEqual(SalesHistory.objects.count(), 1)

    def test_bill_lists(self):
        ledger.set_item_status(self.order, 0, 'accepted')
        data = {'session_id': self.session_id, 'table_number': 2}
        bill_id = self.client.post(reverse('generate_bill'), data, format='json').data['id']

        response = self.client.get(reverse('bills', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(len(response.data), 1)
        response = self.client.get(reverse('bill_history', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(len(response.data), 0)

        self.client.post(reverse('finalize_bill', kwargs={'bill_id': bill_id}), {}, format='json')
        response = self.client.get(reverse('bill_history', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(len(response.data), 1)

        self.client.credentials()
        response = self.client.get(reverse('session_bill', kwargs={'session_id': self.session_id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], bill_id)

    def test_sales_range_validation(self):
        url = reverse('sales', kwargs={'admin_uid': 'demo'})
        response = self.client.get(url, {'start_date': '2025-03-10', 'end_date': '2025-03-01'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_restaurant_bill_not_found(self):
        ledger.set_item_status(self.order, 0, 'accepted')
        bill = engine.generate('demo', self.session_id, 2)
        other = make_restaurant('bistro')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_restaurant_token(other)}')

        response = self.client.post(reverse('finalize_bill', kwargs={'bill_id': bill.id}), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        bill.refresh_from_db()
        self.assertFalse(bill.is_final)


class EndToEndBillingTests(APITestCase):
    """End-to-end visit: join, order, kitchen, bill, finalize"""

    def setUp(self):
        self.restaurant = make_restaurant('demo', table_count=10)
        Table.objects.filter(restaurant=self.restaurant, table_number=3).update(otp='4821')
        self.item_a = MenuItem.objects.create(restaurant=self.restaurant, name="Item A",
                                              price=Decimal('120.00'), category='veg')
        self.token = tokens.issue_restaurant_token(self.restaurant)

    def test_complete_visit(self):
        """Test complete flow: Join table 3 → Order 2x A → Complete → Bill 10% service → Finalize"""

        # Step 1: Customer joins table 3
        response = self.client.post(reverse('join_table'),
                                    {'admin_uid': 'demo', 'table_number': 3, 'otp': '4821'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        session_id = response.data['session_id']

        # Step 2: Customer orders 2x item A
        data = {
            'admin_uid': 'demo',
            'session_id': session_id,
            'table_number': 3,
            'items': [{'menu_item_id': str(self.item_a.id), 'quantity': 2}],
        }
        response = self.client.post(reverse('place_order'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        order_id = response.data['id']

        # Step 3: Admin completes the line
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.token}')
        url = reverse('order_item_status', kwargs={'order_id': order_id, 'item_index': 0})
        response = self.client.patch(url, {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        # Step 4: Admin generates the bill
        data = {
            'session_id': session_id,
            'table_number': 3,
            'discount_percentage': '0',
            'service_charge_percentage': '10',
        }
        response = self.client.post(reverse('generate_bill'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['subtotal'], '240.00')
        self.assertEqual(response.data['service_charge_amount'], '24.00')
        self.assertEqual(response.data['total_amount'], '264.00')
        bill_id = response.data['id']

        response = self.client.get(reverse('tables', kwargs={'admin_uid': 'demo'}))
        table_3 = next(t for t in response.data if t['table_number'] == 3)
        self.assertEqual(table_3['status'], 'billing')

        # Step 5: Admin finalizes
        response = self.client.post(reverse('finalize_bill', kwargs={'bill_id': bill_id}), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        table = Table.objects.get(restaurant=self.restaurant, table_number=3)
        self.assertEqual(table.status, Table.STATUS_VACANT)
        self.assertIsNone(table.active_session_id)
        self.assertNotEqual(table.otp, '4821')

        sale = SalesHistory.objects.get(restaurant_id='demo')
        self.assertEqual(str(sale.total_amount), '264.00')

        # The customer's page now sees the session has ended
        self.client.credentials()
        response = self.client.get(reverse('validate_session'),
                                   {'admin_uid': 'demo', 'table_number': 3, 'session_id': session_id})
        self.assertFalse(response.data['valid'])
        self.assertEqual(response.data['reason'], 'session_ended')

        response = self.client.get(reverse('today_sales', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
