from decimal import Decimal

from django.db.models import F
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APITestCase

from menu.models import MenuItem
from restaurants import tokens
from restaurants.tests import make_restaurant
from tables import sessions
from tables.models import Table
from tableserve.exceptions import Conflict
from . import ledger
from .models import Order, OrderItem


class LedgerTests(TestCase):
    """Test order placement, item status changes and billable lines"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=5)
        self.naan = MenuItem.objects.create(restaurant=self.restaurant, name="Butter Naan",
                                            price=Decimal('40.00'), category='veg')
        self.curry = MenuItem.objects.create(restaurant=self.restaurant, name="Butter Chicken",
                                             price=Decimal('320.00'), category='nonveg')
        table = Table.objects.get(restaurant=self.restaurant, table_number=2)
        self.session_id = sessions.join('demo', 2, table.otp).session_id

    def place(self, *lines, table_number=2, session_id=None):
        items = [{'menu_item_id': item.id, 'quantity': qty} for item, qty in lines]
        return ledger.place('demo', session_id or self.session_id, table_number, items)

    def test_place_snapshots_menu(self):
        """Test lines copy name and price from the menu and start pending"""
        order = self.place((self.naan, 3), (self.curry, 1))

        items = list(order.items.all())
        self.assertEqual(order.order_status, Order.STATUS_ACTIVE)
        self.assertEqual([(i.position, i.name, i.price, i.quantity) for i in items], [
            (0, 'Butter Naan', Decimal('40.00'), 3),
            (1, 'Butter Chicken', Decimal('320.00'), 1),
        ])
        self.assertTrue(all(i.status == OrderItem.STATUS_PENDING for i in items))

        # Later menu changes do not touch the order
        MenuItem.objects.filter(pk=self.naan.pk).update(price=Decimal('55.00'))
        self.assertEqual(order.items.get(position=0).price, Decimal('40.00'))

    def test_place_binds_table(self):
        """Test placing an order on a vacant table activates it with the order's session"""
        self.place((self.naan, 1), table_number=4, session_id='session-walk-in')

        table = Table.objects.get(restaurant=self.restaurant, table_number=4)
        self.assertEqual(table.status, Table.STATUS_ACTIVE)
        self.assertEqual(table.active_session_id, 'session-walk-in')

    def test_place_rejects_bad_carts(self):
        """Test empty carts, unavailable items and foreign items are refused"""
        with self.assertRaises(ValidationError):
            ledger.place('demo', self.session_id, 2, [])

        MenuItem.objects.filter(pk=self.curry.pk).update(is_available=False)
        with self.assertRaises(ValidationError):
            self.place((self.curry, 1))

        other = make_restaurant('bistro')
        foreign = MenuItem.objects.create(restaurant=other, name="Soup", price=Decimal('90.00'), category='veg')
        with self.assertRaises(ValidationError):
            self.place((foreign, 1))

        with self.assertRaises(NotFound):
            self.place((self.naan, 1), table_number=99)

        self.assertFalse(Order.objects.exists())

    def test_item_status_round_trip(self):
        """Test every status is stored and read back unchanged"""
        order = self.place((self.naan, 1))

        for new_status in ['accepted', 'processing', 'completed', 'rejected', 'pending']:
            order = ledger.set_item_status(order, 0, new_status)
            self.assertEqual(Order.objects.get(pk=order.pk).items.get(position=0).status, new_status)

    def test_backward_transition_allowed_by_default(self):
        order = self.place((self.naan, 1))
        order = ledger.set_item_status(order, 0, 'completed')
        order = ledger.set_item_status(order, 0, 'pending')

        self.assertEqual(order.items.get(position=0).status, 'pending')

    @override_settings(STRICT_ITEM_TRANSITIONS=True)
    def test_strict_transitions(self):
        """Test strict mode only allows the forward path"""
        order = self.place((self.naan, 1))

        with self.assertRaises(ValidationError):
            ledger.set_item_status(order, 0, 'completed')

        order = ledger.set_item_status(order, 0, 'accepted')
        order = ledger.set_item_status(order, 0, 'processing')
        order = ledger.set_item_status(order, 0, 'completed')
        with self.assertRaises(ValidationError):
            ledger.set_item_status(order, 0, 'pending')

    def test_item_index_out_of_range(self):
        order = self.place((self.naan, 1), (self.curry, 1))

        with self.assertRaises(NotFound):
            ledger.set_item_status(order, 2, 'accepted')
        with self.assertRaises(NotFound):
            ledger.set_item_status(order, -1, 'accepted')

    def test_concurrent_update_conflicts(self):
        """Test a stale read of a line cannot overwrite a newer write"""
        order = Order.objects.prefetch_related('items').get(pk=self.place((self.naan, 1)).pk)
        list(order.items.all())
        OrderItem.objects.filter(order=order, position=0).update(
            status=OrderItem.STATUS_REJECTED, version=F('version') + 1
        )

        with self.assertRaises(Conflict):
            ledger.set_item_status(order, 0, 'accepted')
        self.assertEqual(OrderItem.objects.get(order=order, position=0).status, OrderItem.STATUS_REJECTED)

    def test_updates_to_different_lines_do_not_clobber(self):
        """Test two writers on different lines of one order both keep their change"""
        placed = self.place((self.naan, 1), (self.curry, 1))
        first = Order.objects.prefetch_related('items').get(pk=placed.pk)
        second = Order.objects.prefetch_related('items').get(pk=placed.pk)
        list(first.items.all())
        list(second.items.all())

        ledger.set_item_status(first, 0, 'accepted')
        ledger.set_item_status(second, 1, 'rejected')

        statuses = list(OrderItem.objects.filter(order=placed).values_list('status', flat=True))
        self.assertEqual(statuses, ['accepted', 'rejected'])

    def test_billable_items_merge(self):
        """Test only accepted/processing/completed lines are billed, merged by menu item"""
        first = self.place((self.naan, 2), (self.curry, 1))
        second = self.place((self.naan, 1), (self.curry, 5))
        ledger.set_item_status(first, 0, 'completed')
        ledger.set_item_status(first, 1, 'rejected')
        ledger.set_item_status(second, 0, 'processing')
        # second order's curry stays pending

        items = ledger.billable_items('demo', 2, session_id=self.session_id)

        self.assertEqual(items, [{
            'menu_item_id': self.naan.id,
            'name': 'Butter Naan',
            'price': Decimal('40.00'),
            'quantity': 3,
        }])

    def test_billable_items_ignore_other_sessions_and_closed_orders(self):
        stale = self.place((self.curry, 1), session_id='session-earlier')
        ledger.set_item_status(stale, 0, 'accepted')
        closed = self.place((self.naan, 1))
        ledger.set_item_status(closed, 0, 'accepted')
        ledger.set_order_status(closed, Order.STATUS_CANCELLED)

        self.assertEqual(ledger.billable_items('demo', 2, session_id='session-none'), [])
        self.assertEqual(len(ledger.billable_items('demo', 2)), 1)


class OrderAPITests(APITestCase):
    """Test order endpoints"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=5)
        self.token = tokens.issue_restaurant_token(self.restaurant)
        self.tikka = MenuItem.objects.create(restaurant=self.restaurant, name="Paneer Tikka",
                                             price=Decimal('120.00'), category='veg')
        table = Table.objects.get(restaurant=self.restaurant, table_number=1)
        self.session_id = sessions.join('demo', 1, table.otp).session_id

    def place_order(self, quantity=2):
        data = {
            'admin_uid': 'demo',
            'session_id': self.session_id,
            'table_number': 1,
            'items': [{'menu_item_id': str(self.tikka.id), 'quantity': quantity}],
        }
        return self.client.post(reverse('place_order'), data, format='json')

    def test_place_order(self):
        """Test customers can place orders without a token"""
        response = self.place_order()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order_status'], 'active')
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['price'], '120.00')
        self.assertEqual(response.data['items'][0]['status'], 'pending')

    def test_place_order_validation(self):
        data = {'admin_uid': 'demo', 'session_id': self.session_id, 'table_number': 1, 'items': []}
        response = self.client.post(reverse('place_order'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.place_order(quantity=0)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_and_table_views(self):
        self.place_order()

        response = self.client.get(reverse('session_orders', kwargs={'session_id': self.session_id}))
        self.assertEqual(len(response.data), 1)

        response = self.client.get(reverse('table_orders', kwargs={'admin_uid': 'demo', 'table_number': 1}))
        self.assertEqual(len(response.data), 1)

    def test_admin_updates_item_status(self):
        """Test the admin moves an item through the kitchen statuses"""
        order_id = self.place_order().data['id']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.token}')
        url = reverse('order_item_status', kwargs={'order_id': order_id, 'item_index': 0})

        response = self.client.patch(url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['status'], 'accepted')

        response = self.client.patch(url, {'status': 'served'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        url = reverse('order_item_status', kwargs={'order_id': order_id, 'item_index': 5})
        response = self.client.patch(url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Order item not found')

    def test_admin_lists(self):
        order_id = self.place_order().data['id']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.token}')

        response = self.client.get(reverse('active_orders', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(len(response.data), 1)

        response = self.client.patch(reverse('order_status', kwargs={'order_id': order_id}),
                                     {'order_status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(reverse('active_orders', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(len(response.data), 0)
        response = self.client.get(reverse('orders', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(len(response.data), 1)

    def test_other_restaurant_cannot_touch_order(self):
        order_id = self.place_order().data['id']
        other = make_restaurant('bistro')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_restaurant_token(other)}')

        url = reverse('order_item_status', kwargs={'order_id': order_id, 'item_index': 0})
        response = self.client.patch(url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.get(reverse('orders', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
