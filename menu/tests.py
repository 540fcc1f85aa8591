from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from restaurants import tokens
from restaurants.tests import make_restaurant
from .models import MenuItem


class MenuAPITests(APITestCase):
    """Test menu management and the public menu"""

    def setUp(self):
        self.restaurant = make_restaurant()
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_restaurant_token(self.restaurant)}')

        self.paneer = MenuItem.objects.create(
            restaurant=self.restaurant,
            name="Paneer Tikka",
            price=Decimal('120.00'),
            category='veg',
            subcategory='starters'
        )
        self.hidden = MenuItem.objects.create(
            restaurant=self.restaurant,
            name="Seasonal Special",
            price=Decimal('300.00'),
            category='nonveg',
            is_available=False
        )

    def test_create_menu_item(self):
        """Test creating a menu item for the authenticated restaurant"""
        url = reverse('create_menu_item')
        data = {'name': 'Masala Chai', 'price': '40.00', 'category': 'drinks', 'subcategory': 'tea_coffee'}
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['admin_uid'], 'demo')
        self.assertEqual(response.data['price'], '40.00')
        self.assertTrue(MenuItem.objects.filter(restaurant=self.restaurant, name='Masala Chai').exists())

    def test_create_rejects_mismatched_subcategory(self):
        """Test a subcategory must belong to its category"""
        url = reverse('create_menu_item')
        data = {'name': 'Odd Cake', 'price': '90.00', 'category': 'cake', 'subcategory': 'beer'}
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('subcategory', response.data)

    def test_admin_and_public_lists(self):
        """Test the public menu hides unavailable items"""
        response = self.client.get(reverse('menu_items', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(len(response.data), 2)

        self.client.credentials()
        response = self.client.get(reverse('public_menu', kwargs={'admin_uid': 'demo'}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['name'] for item in response.data], ['Paneer Tikka'])

    def test_public_menu_ignores_stale_token(self):
        """Test a revoked token left in the browser does not block the public menu"""
        token = tokens.issue_restaurant_token(self.restaurant)
        tokens.revoke_token(token, tokens.decode_token(token))
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = self.client.get(reverse('public_menu', kwargs={'admin_uid': 'demo'}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_update_and_delete(self):
        """Test updating then deleting a menu item"""
        url = reverse('menu_item_detail', kwargs={'item_id': self.paneer.id})

        response = self.client.patch(url, {'price': '135.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.paneer.refresh_from_db()
        self.assertEqual(self.paneer.price, Decimal('135.50'))

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(MenuItem.objects.filter(id=self.paneer.id).exists())

    def test_other_restaurant_item_not_found(self):
        """Test another restaurant's menu item looks missing"""
        other = make_restaurant('bistro')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_restaurant_token(other)}')

        url = reverse('menu_item_detail', kwargs={'item_id': self.paneer.id})
        response = self.client.patch(url, {'price': '1.00'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Menu item not found')


class SeedMenuCommandTests(TestCase):
    """Test the seed_menu management command"""

    def test_seed_is_idempotent(self):
        restaurant = make_restaurant()

        call_command('seed_menu', 'demo', stdout=StringIO())
        count = MenuItem.objects.filter(restaurant=restaurant).count()
        self.assertGreater(count, 0)

        call_command('seed_menu', 'demo', stdout=StringIO())
        self.assertEqual(MenuItem.objects.filter(restaurant=restaurant).count(), count)
