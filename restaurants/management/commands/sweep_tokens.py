import time

from django.conf import settings
from django.core.management.base import BaseCommand

from restaurants.tokens import sweep_expired_tokens


class Command(BaseCommand):
    help = 'Delete expired auth tokens and revoked-token entries'

    def add_arguments(self, parser):
        parser.add_argument(
            '--interval',
            type=int,
            nargs='?',
            const=settings.TOKEN_SWEEP_INTERVAL_SECONDS,
            default=None,
            help='Keep running, sweeping every INTERVAL seconds (default period %d)'
                 % settings.TOKEN_SWEEP_INTERVAL_SECONDS,
        )

    def handle(self, *args, **options):
        interval = options['interval']

        while True:
            deleted = sweep_expired_tokens()
            self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} expired tokens'))

            if not interval:
                break
            time.sleep(interval)
