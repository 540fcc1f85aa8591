from decimal import Decimal
from unittest import mock

import redis
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotFound
from rest_framework.test import APITestCase

from menu.models import MenuItem
from orders import ledger
from orders.models import Order
from restaurants import tokens
from restaurants.tests import make_restaurant
from . import registry, sessions
from .events import TableEventChannel
from .models import Table


class RegistryTests(TestCase):
    """Test table creation, reset, cancel and code generation"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=3)

    def test_generate_code_format(self):
        """Test codes are 4 decimal digits with leading zeros kept"""
        with mock.patch('tables.registry.secrets.randbelow', return_value=7):
            self.assertEqual(registry.generate_code(), '0007')

        for _ in range(50):
            self.assertRegex(registry.generate_code(), r'^\d{4}$')

    def test_generate_code_differs_from_excluded(self):
        """Test a regenerated code never repeats the current one"""
        with mock.patch('tables.registry.secrets.randbelow', side_effect=[4821, 4821, 1234]):
            self.assertEqual(registry.generate_code(exclude='4821'), '1234')

    def test_initialize_is_idempotent(self):
        """Test initialize never touches existing tables"""
        table = Table.objects.get(restaurant=self.restaurant, table_number=2)
        table.otp = '4821'
        table.save()

        created = registry.initialize(self.restaurant, 5)

        self.assertEqual(len(created), 2)
        self.assertEqual(Table.objects.filter(restaurant=self.restaurant).count(), 5)
        table.refresh_from_db()
        self.assertEqual(table.otp, '4821')
        self.assertEqual(registry.initialize(self.restaurant, 5), [])

    def test_vacant_iff_no_session_is_enforced(self):
        """Test the database refuses a vacant table with a session"""
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Table.objects.filter(restaurant=self.restaurant, table_number=1).update(
                    active_session_id='session-1'
                )

    def test_reset(self):
        """Test reset frees the table with a new code"""
        table = Table.objects.get(restaurant=self.restaurant, table_number=1)
        Table.objects.filter(pk=table.pk).update(status=Table.STATUS_BILLING, active_session_id='session-1')
        table.refresh_from_db()
        old_code = table.otp

        registry.reset(table)
        table.refresh_from_db()

        self.assertEqual(table.status, Table.STATUS_VACANT)
        self.assertIsNone(table.active_session_id)
        self.assertNotEqual(table.otp, old_code)

    def test_cancel_cancels_active_orders(self):
        """Test cancel on a table with k active orders cancels exactly those k"""
        item = MenuItem.objects.create(restaurant=self.restaurant, name="Dal Makhani",
                                       price=Decimal('180.00'), category='veg')
        result = sessions.join('demo', 2, Table.objects.get(restaurant=self.restaurant, table_number=2).otp)
        for _ in range(3):
            ledger.place('demo', result.session_id, 2, [{'menu_item_id': item.id, 'quantity': 1}])
        completed = ledger.place('demo', result.session_id, 2, [{'menu_item_id': item.id, 'quantity': 1}])
        ledger.set_order_status(completed, Order.STATUS_COMPLETED)
        other_table = ledger.place('demo', 'session-other', 3, [{'menu_item_id': item.id, 'quantity': 1}])

        table = Table.objects.get(restaurant=self.restaurant, table_number=2)
        old_code = table.otp
        table, cancelled = registry.cancel(table)

        self.assertEqual(cancelled, 3)
        self.assertEqual(Order.objects.filter(table_number=2, order_status=Order.STATUS_CANCELLED).count(), 3)
        completed.refresh_from_db()
        self.assertEqual(completed.order_status, Order.STATUS_COMPLETED)
        other_table.refresh_from_db()
        self.assertEqual(other_table.order_status, Order.STATUS_ACTIVE)

        table.refresh_from_db()
        self.assertEqual(table.status, Table.STATUS_VACANT)
        self.assertIsNone(table.active_session_id)
        self.assertNotEqual(table.otp, old_code)


class SessionTests(TestCase):
    """Test joining tables and session validation"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=10)
        Table.objects.filter(restaurant=self.restaurant, table_number=3).update(otp='4821')

    def test_join_starts_session(self):
        """Test joining a vacant table starts a new session"""
        result = sessions.join('demo', 3, '4821')

        self.assertFalse(result.is_existing_session)
        self.assertRegex(result.session_id, r'^session-\d+-[a-z0-9]{9}$')
        table = Table.objects.get(restaurant=self.restaurant, table_number=3)
        self.assertEqual(table.status, Table.STATUS_ACTIVE)
        self.assertEqual(table.active_session_id, result.session_id)

    def test_join_is_idempotent(self):
        """Test rejoining an active table returns the same session"""
        first = sessions.join('demo', 3, '4821')
        second = sessions.join('demo', 3, '4821')

        self.assertEqual(first.session_id, second.session_id)
        self.assertFalse(first.is_existing_session)
        self.assertTrue(second.is_existing_session)

    def test_join_wrong_code_always_fails(self):
        """Test a wrong code is refused whether the table is vacant or active"""
        with self.assertRaises(AuthenticationFailed):
            sessions.join('demo', 3, '0000')

        sessions.join('demo', 3, '4821')
        with self.assertRaises(AuthenticationFailed):
            sessions.join('demo', 3, '0000')

    def test_join_unknown_table(self):
        with self.assertRaises(NotFound):
            sessions.join('demo', 42, '4821')
        with self.assertRaises(NotFound):
            sessions.join('nobody', 3, '4821')

    def test_validate(self):
        """Test validation notices a table reset under an active session"""
        result = sessions.join('demo', 3, '4821')

        self.assertEqual(sessions.validate('demo', 3, result.session_id),
                         {'valid': True, 'table_status': Table.STATUS_ACTIVE})
        self.assertEqual(sessions.validate('demo', 3, 'session-stale'),
                         {'valid': False, 'reason': 'session_ended'})
        self.assertEqual(sessions.validate('demo', 99, result.session_id),
                         {'valid': False, 'reason': 'table_not_found'})

        registry.reset(Table.objects.get(restaurant=self.restaurant, table_number=3))
        self.assertEqual(sessions.validate('demo', 3, result.session_id),
                         {'valid': False, 'reason': 'session_ended'})


class TableAPITests(APITestCase):
    """Test table endpoints"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=4)
        self.token = tokens.issue_restaurant_token(self.restaurant)
        self.table = Table.objects.get(restaurant=self.restaurant, table_number=1)
        Table.objects.filter(pk=self.table.pk).update(otp='0420')

    def authenticate(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.token}')

    def test_list_tables(self):
        self.authenticate()
        response = self.client.get(reverse('tables', kwargs={'admin_uid': 'demo'}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['table_number'] for t in response.data], [1, 2, 3, 4])

    def test_join_and_validate(self):
        """Test the customer join flow over HTTP"""
        url = reverse('join_table')
        response = self.client.post(url, {'admin_uid': 'demo', 'table_number': 1, 'otp': '0420'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_existing_session'])
        session_id = response.data['session_id']

        response = self.client.get(reverse('validate_session'),
                                   {'admin_uid': 'demo', 'table_number': 1, 'session_id': session_id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['valid'])
        self.assertEqual(response.data['table_status'], 'active')

    def test_join_wrong_code(self):
        url = reverse('join_table')
        response = self.client.post(url, {'admin_uid': 'demo', 'table_number': 1, 'otp': '9999'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'],
                         'Invalid code. Please get the correct code from restaurant staff.')
        self.assertEqual(response['WWW-Authenticate'], 'Bearer')

    def test_join_with_stale_admin_token(self):
        """Test a customer device holding an old admin token can still join"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        url = reverse('join_table')
        response = self.client.post(url, {'admin_uid': 'demo', 'table_number': 1, 'otp': '0420'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_join_rejects_malformed_code(self):
        url = reverse('join_table')
        response = self.client.post(url, {'admin_uid': 'demo', 'table_number': 1, 'otp': '420'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('otp', response.data)

    def test_cancel_vacant_table(self):
        """Test cancelling a vacant table is refused"""
        self.authenticate()
        response = self.client.post(reverse('cancel_table', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Table is already vacant')

    def test_regenerate_code_only_while_vacant(self):
        """Test codes can only be regenerated on vacant tables"""
        self.authenticate()
        url = reverse('regenerate_code', kwargs={'table_id': self.table.id})

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotEqual(response.data['otp'], '0420')

        sessions.join('demo', 1, response.data['otp'])
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reset_other_restaurant_table(self):
        """Test another restaurant's table looks missing"""
        other = make_restaurant('bistro')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_restaurant_token(other)}')

        response = self.client.post(reverse('reset_table', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


@override_settings(TABLE_EVENTS_ENABLED=True)
class TableEventTests(TestCase):
    """Test table events are published after commit"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=2)
        Table.objects.filter(restaurant=self.restaurant, table_number=1).update(otp='1111')

    def test_session_started_event(self):
        with mock.patch.object(TableEventChannel, '__init__', return_value=None), \
                mock.patch.object(TableEventChannel, 'publish') as publish:
            with self.captureOnCommitCallbacks(execute=True):
                result = sessions.join('demo', 1, '1111')

        publish.assert_called_once_with('demo', 'session_started',
                                        {'table_number': 1, 'session_id': result.session_id})

    def test_no_event_for_rejoin(self):
        sessions.join('demo', 1, '1111')

        with mock.patch.object(TableEventChannel, '__init__', return_value=None), \
                mock.patch.object(TableEventChannel, 'publish') as publish:
            with self.captureOnCommitCallbacks(execute=True):
                sessions.join('demo', 1, '1111')

        publish.assert_not_called()

    def test_publish_failure_is_logged(self):
        """Test a redis outage does not break the request"""
        with mock.patch.object(TableEventChannel, '__init__', return_value=None), \
                mock.patch.object(TableEventChannel, 'publish', side_effect=redis.ConnectionError('down')), \
                self.assertLogs('tables.events', level='WARNING') as logs:
            with self.captureOnCommitCallbacks(execute=True):
                registry.reset(Table.objects.get(restaurant=self.restaurant, table_number=2))

        self.assertIn('Could not publish table_reset', logs.output[0])

    def test_channel_name(self):
        self.assertEqual(TableEventChannel.channel_name('demo'), 'tableserve:tables:demo')
