from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from tables.models import Table
from . import services, tokens
from .models import AuthToken, Restaurant, SuperAdmin


def make_restaurant(admin_uid='demo', table_count=10, password='secret123'):
    return services.onboard_restaurant({
        'admin_uid': admin_uid,
        'password': password,
        'restaurant_name': f'{admin_uid.title()} Diner',
        'email': f'owner@{admin_uid}.example',
        'table_count': table_count,
    })


class OnboardingTests(TestCase):
    """Test restaurant onboarding and table count changes"""

    def test_onboarding_creates_vacant_tables(self):
        """Test a new restaurant gets tables 1..table_count, all vacant with 4-digit codes"""
        restaurant = make_restaurant(table_count=5)

        tables = Table.objects.filter(restaurant=restaurant)
        self.assertEqual(list(tables.values_list('table_number', flat=True)), [1, 2, 3, 4, 5])
        for table in tables:
            self.assertEqual(table.status, Table.STATUS_VACANT)
            self.assertIsNone(table.active_session_id)
            self.assertRegex(table.otp, r'^\d{4}$')

    def test_password_is_hashed(self):
        """Test the stored password is a hash that still verifies"""
        restaurant = make_restaurant()

        self.assertNotEqual(restaurant.password, 'secret123')
        self.assertTrue(restaurant.check_password('secret123'))
        self.assertFalse(restaurant.check_password('wrong'))

    def test_table_count_growth_and_shrink(self):
        """Test table count changes add and remove tables above the new count"""
        restaurant = make_restaurant(table_count=3)

        services.update_restaurant(restaurant, {'table_count': 6})
        self.assertEqual(Table.objects.filter(restaurant=restaurant).count(), 6)

        services.update_restaurant(restaurant, {'table_count': 2})
        self.assertEqual(
            list(Table.objects.filter(restaurant=restaurant).values_list('table_number', flat=True)),
            [1, 2]
        )

    def test_table_count_change_refused_while_occupied(self):
        """Test tables are never deleted while any table is occupied"""
        restaurant = make_restaurant(table_count=3)
        Table.objects.filter(restaurant=restaurant, table_number=3).update(
            status=Table.STATUS_ACTIVE, active_session_id='session-1'
        )

        with self.assertRaises(ValidationError):
            services.update_restaurant(restaurant, {'table_count': 2})

        self.assertEqual(Table.objects.filter(restaurant=restaurant).count(), 3)
        restaurant.refresh_from_db()
        self.assertEqual(restaurant.table_count, 3)


class AuthAPITests(APITestCase):
    """Test register, login, logout and tenant isolation"""

    def setUp(self):
        self.restaurant = make_restaurant()

    def test_register(self):
        """Test registering returns a token and creates tables"""
        url = reverse('register')
        data = {
            'admin_uid': 'bistro',
            'password': 'secret123',
            'restaurant_name': 'Bistro',
            'email': 'owner@bistro.example',
            'table_count': 4,
        }
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertEqual(response.data['admin']['admin_uid'], 'bistro')
        self.assertNotIn('password', response.data['admin'])
        self.assertEqual(Table.objects.filter(restaurant_id='bistro').count(), 4)

    def test_register_duplicate_admin_uid(self):
        """Test registering an existing admin_uid is a conflict"""
        url = reverse('register')
        data = {
            'admin_uid': 'demo',
            'password': 'secret123',
            'restaurant_name': 'Another Demo',
            'email': 'other@demo.example',
        }
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Admin UID already exists')

    def test_register_rejects_uuid_shaped_admin_uid(self):
        """Test an admin_uid that would be routed as an order or menu item id is refused"""
        data = {'admin_uid': '3f2b8c4e-9a1d-4e6f-8b7a-2c5d9e0f1a3b', 'password': 'secret123',
                'restaurant_name': 'Bistro', 'email': 'owner@bistro.example'}
        response = self.client.post(reverse('register'), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('admin_uid', response.data)
        self.assertFalse(Restaurant.objects.filter(admin_uid=data['admin_uid']).exists())

    def test_register_rejects_non_ascii_admin_uid(self):
        data = {'admin_uid': 'caf\u00e9', 'password': 'secret123',
                'restaurant_name': 'Cafe', 'email': 'owner@cafe.example'}
        response = self.client.post(reverse('register'), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('admin_uid', response.data)

    def test_register_short_password(self):
        """Test passwords shorter than 6 characters are rejected"""
        url = reverse('register')
        data = {'admin_uid': 'bistro', 'password': '123', 'restaurant_name': 'Bistro',
                'email': 'owner@bistro.example'}
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login(self):
        """Test login with valid and invalid credentials"""
        url = reverse('login')

        response = self.client.post(url, {'admin_uid': 'demo', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(tokens.decode_token(response.data['token'])['admin_uid'], 'demo')

        response = self.client.post(url, {'admin_uid': 'demo', 'password': 'nope!!'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')
        self.assertEqual(response['WWW-Authenticate'], 'Bearer')

    def test_login_restores_missing_tables(self):
        """Test login creates tables that are missing"""
        Table.objects.filter(restaurant=self.restaurant, table_number__gt=5).delete()

        response = self.client.post(reverse('login'), {'admin_uid': 'demo', 'password': 'secret123'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Table.objects.filter(restaurant=self.restaurant).count(), 10)

    def test_logout_revokes_token(self):
        """Test a token stops working after logout"""
        token = tokens.issue_restaurant_token(self.restaurant)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        url = reverse('tables', kwargs={'admin_uid': 'demo'})

        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

        response = self.client.post(reverse('logout'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(
            AuthToken.objects.filter(token=token, admin_uid=AuthToken.BLACKLIST_OWNER).exists()
        )

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Token has been revoked')

    def test_missing_and_invalid_token(self):
        """Test admin routes require a valid bearer token"""
        url = reverse('tables', kwargs={'admin_uid': 'demo'})

        self.assertEqual(self.client.get(url).status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid or expired token')

    def test_other_tenant_is_forbidden(self):
        """Test a restaurant cannot read another restaurant's data"""
        make_restaurant('bistro')
        token = tokens.issue_restaurant_token(self.restaurant)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = self.client.get(reverse('tables', kwargs={'admin_uid': 'bistro'}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Not authorized')


class RestaurantAPITests(APITestCase):
    """Test restaurant profile endpoints"""

    def setUp(self):
        self.restaurant = make_restaurant(table_count=4)
        token = tokens.issue_restaurant_token(self.restaurant)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def test_public_profile(self):
        """Test the profile is readable without a token"""
        self.client.credentials()
        response = self.client.get(reverse('restaurant_detail', kwargs={'admin_uid': 'demo'}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['restaurant_name'], 'Demo Diner')

    def test_public_profile_ignores_stale_token(self):
        """Test a leftover token does not block the public profile but still guards updates"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        url = reverse('restaurant_detail', kwargs={'admin_uid': 'demo'})

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.patch(url, {'upi_id': 'demo@upi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_settings(self):
        """Test updating the profile and table count"""
        url = reverse('restaurant_detail', kwargs={'admin_uid': 'demo'})
        response = self.client.patch(url, {'upi_id': 'demo@upi', 'table_count': 6}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['upi_id'], 'demo@upi')
        self.assertEqual(Table.objects.filter(restaurant=self.restaurant).count(), 6)

    def test_update_table_count_while_occupied(self):
        """Test table count changes are refused while a table is occupied"""
        Table.objects.filter(restaurant=self.restaurant, table_number=1).update(
            status=Table.STATUS_BILLING, active_session_id='session-1'
        )
        url = reverse('restaurant_detail', kwargs={'admin_uid': 'demo'})
        response = self.client.patch(url, {'table_count': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('table_count', response.data)
        self.assertEqual(Table.objects.filter(restaurant=self.restaurant).count(), 4)


class SuperAdminAPITests(APITestCase):
    """Test super admin management of restaurants"""

    def setUp(self):
        call_command('create_superadmin', 'root', 'rootpass', stdout=StringIO())
        response = self.client.post(reverse('superadmin_login'),
                                    {'super_admin_uid': 'root', 'password': 'rootpass'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['token']}")

    def test_onboard_list_and_delete(self):
        """Test the full restaurant management cycle"""
        url = reverse('superadmin_restaurants')
        data = {
            'admin_uid': 'demo',
            'password': 'secret123',
            'restaurant_name': 'Demo Diner',
            'email': 'owner@demo.example',
            'table_count': 3,
        }
        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Table.objects.filter(restaurant_id='demo').count(), 3)

        response = self.client.get(url)
        self.assertEqual([r['admin_uid'] for r in response.data], ['demo'])

        detail = reverse('superadmin_restaurant_detail', kwargs={'admin_uid': 'demo'})
        response = self.client.patch(detail, {'password': 'newpass1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(Restaurant.objects.get(admin_uid='demo').check_password('newpass1'))

        response = self.client.delete(detail)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Restaurant.objects.filter(admin_uid='demo').exists())
        self.assertFalse(Table.objects.filter(restaurant_id='demo').exists())

    def test_restaurant_token_rejected(self):
        """Test restaurant tokens cannot reach super admin routes"""
        restaurant = make_restaurant()
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_restaurant_token(restaurant)}')

        response = self.client.get(reverse('superadmin_restaurants'))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_super_admin_token_rejected_on_restaurant_routes(self):
        """Test super admin tokens do not act as a restaurant"""
        make_restaurant()

        response = self.client.get(reverse('tables', kwargs={'admin_uid': 'demo'}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_super_admin_bad_password(self):
        self.client.credentials()
        response = self.client.post(reverse('superadmin_login'),
                                    {'super_admin_uid': 'root', 'password': 'wrong-pass'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')

    def test_create_superadmin_duplicate(self):
        """Test the command refuses an existing uid"""
        with self.assertRaises(CommandError):
            call_command('create_superadmin', 'root', 'rootpass', stdout=StringIO())
        self.assertEqual(SuperAdmin.objects.count(), 1)


class TokenSweepTests(TestCase):
    """Test the expired token sweep"""

    def test_sweep_deletes_only_expired_rows(self):
        now = timezone.now()
        AuthToken.objects.create(token='old', admin_uid=AuthToken.BLACKLIST_OWNER,
                                 expires_at=now - timedelta(hours=1))
        AuthToken.objects.create(token='live', admin_uid=AuthToken.BLACKLIST_OWNER,
                                 expires_at=now + timedelta(hours=1))

        out = StringIO()
        call_command('sweep_tokens', stdout=out)

        self.assertIn('Deleted 1 expired tokens', out.getvalue())
        self.assertEqual(list(AuthToken.objects.values_list('token', flat=True)), ['live'])

    def test_revoke_is_idempotent(self):
        restaurant = make_restaurant()
        token = tokens.issue_restaurant_token(restaurant)
        payload = tokens.decode_token(token)

        self.assertTrue(tokens.revoke_token(token, payload))
        self.assertFalse(tokens.revoke_token(token, payload))
        self.assertTrue(tokens.is_revoked(token))

    def test_tokens_issued_together_are_distinct(self):
        """Test logging out one device leaves a token issued in the same second working"""
        restaurant = make_restaurant()
        first = tokens.issue_restaurant_token(restaurant)
        second = tokens.issue_restaurant_token(restaurant)

        self.assertNotEqual(first, second)
        tokens.revoke_token(first, tokens.decode_token(first))
        self.assertTrue(tokens.is_revoked(first))
        self.assertFalse(tokens.is_revoked(second))
