from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError

from menu.models import MenuItem
from restaurants.models import Restaurant


class Command(BaseCommand):
    help = "Seed a restaurant's menu with sample items"

    def add_arguments(self, parser):
        parser.add_argument('admin_uid', help='Restaurant to seed')
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing menu items before seeding',
        )

    def handle(self, *args, **options):
        restaurant = Restaurant.objects.filter(admin_uid=options['admin_uid']).first()
        if restaurant is None:
            raise CommandError(f"Restaurant {options['admin_uid']} does not exist")

        if options['clear']:
            self.stdout.write('Clearing existing menu items...')
            MenuItem.objects.filter(restaurant=restaurant).delete()
            self.stdout.write(
                self.style.SUCCESS('Successfully cleared menu items')
            )

        menu_items = [
            {"name": "Paneer Tikka", "price": "120.00", "category": "veg", "subcategory": "starters"},
            {"name": "Dal Makhani", "price": "180.00", "category": "veg", "subcategory": "main_course"},
            {"name": "Chicken 65", "price": "220.00", "category": "nonveg", "subcategory": "starters"},
            {"name": "Butter Chicken", "price": "320.00", "category": "nonveg", "subcategory": "main_course"},
            {"name": "Chocolate Pastry", "price": "90.00", "category": "cake", "subcategory": "pastries"},
            {"name": "Craft Lager", "price": "250.00", "category": "liquor", "subcategory": "beer"},
            {"name": "Fresh Lime Soda", "price": "60.00", "category": "drinks", "subcategory": "soft_drinks"},
            {"name": "Masala Chai", "price": "40.00", "category": "drinks", "subcategory": "tea_coffee"},
        ]

        created_items = []
        for item_data in menu_items:
            item, created = MenuItem.objects.get_or_create(
                restaurant=restaurant,
                name=item_data['name'],
                defaults={
                    'price': Decimal(item_data['price']),
                    'category': item_data['category'],
                    'subcategory': item_data['subcategory'],
                }
            )
            if created:
                created_items.append(item)
                self.stdout.write(f"Created: {item.name} - {item.price} ({item.category})")
            else:
                self.stdout.write(f"Already exists: {item.name}")

        self.stdout.write(
            self.style.SUCCESS(f'\nTotal new menu items created: {len(created_items)}')
        )

        self.stdout.write(f"\nMenu for {restaurant.restaurant_name}:")
        self.stdout.write("-" * 50)
        for item in MenuItem.objects.filter(restaurant=restaurant).order_by('name'):
            self.stdout.write(
                f"{item.name:20s} | {item.price:8.2f} | {item.category:7s} | "
                f"{'available' if item.is_available else 'hidden'}"
            )
