from django.core.management.base import BaseCommand, CommandError

from restaurants.models import SuperAdmin


class Command(BaseCommand):
    help = 'Create a super admin account that can manage every restaurant'

    def add_arguments(self, parser):
        parser.add_argument('super_admin_uid')
        parser.add_argument('password')
        parser.add_argument('--name', default='Super Admin')
        parser.add_argument('--email', default=None)

    def handle(self, *args, **options):
        if len(options['password']) < 6:
            raise CommandError('Password must be at least 6 characters')

        if SuperAdmin.objects.filter(super_admin_uid=options['super_admin_uid']).exists():
            raise CommandError(f"Super admin {options['super_admin_uid']} already exists")

        super_admin = SuperAdmin(
            super_admin_uid=options['super_admin_uid'],
            name=options['name'],
            email=options['email'],
        )
        super_admin.set_password(options['password'])
        super_admin.save()

        self.stdout.write(self.style.SUCCESS(f'Created super admin: {super_admin.super_admin_uid}'))
