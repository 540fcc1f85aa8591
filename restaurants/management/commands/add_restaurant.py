from django.core.management.base import BaseCommand, CommandError
from rest_framework.exceptions import APIException

from restaurants import services
from restaurants.serializers import RegisterSerializer


class Command(BaseCommand):
    help = 'Onboard a restaurant and create its tables'

    def add_arguments(self, parser):
        parser.add_argument('admin_uid')
        parser.add_argument('password')
        parser.add_argument('restaurant_name')
        parser.add_argument('email')
        parser.add_argument('table_count', type=int, nargs='?', default=10)

    def handle(self, *args, **options):
        serializer = RegisterSerializer(data={
            'admin_uid': options['admin_uid'],
            'password': options['password'],
            'restaurant_name': options['restaurant_name'],
            'email': options['email'],
            'table_count': options['table_count'],
        })
        if not serializer.is_valid():
            raise CommandError(str(serializer.errors))

        try:
            restaurant = services.onboard_restaurant(serializer.validated_data)
        except APIException as exc:
            raise CommandError(str(exc.detail))

        self.stdout.write(self.style.SUCCESS(f'Restaurant created: {restaurant.restaurant_name}'))
        self.stdout.write(f'{restaurant.table_count} tables created!')
        self.stdout.write("\n--- Login Details ---")
        self.stdout.write(f'Admin UID: {restaurant.admin_uid}')

        for table in restaurant.tables.order_by('table_number'):
            self.stdout.write(f'Table {table.table_number:3d} | code {table.otp}')
